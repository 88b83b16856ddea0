import numpy as np
import pytest

from snapgas.grid import Grid3D


def test_linear_index_is_x_fastest():
    g = Grid3D(3, 4, 5)
    assert g.index(1, 2, 3) == 1 + 3 * (2 + 4 * 3)
    assert g.size == 60
    assert g.shape == (3, 4, 5)


def test_element_set_and_view_agree():
    g = Grid3D(3, 4, 5)
    g.set(1, 2, 3, 7.0)
    assert g.element(1, 2, 3) == 7.0
    assert g[1, 2, 3] == 7.0
    assert g.data[g.index(1, 2, 3)] == 7.0
    assert g.view()[1, 2, 3] == 7.0

    g.view()[2, 0, 4] = -1.5
    assert g.element(2, 0, 4) == -1.5


@pytest.mark.parametrize("xyz", [(3, 0, 0), (0, 4, 0), (0, 0, 5), (-1, 0, 0)])
def test_out_of_range_access_raises(xyz):
    g = Grid3D(3, 4, 5)
    with pytest.raises(IndexError):
        g.element(*xyz)


@pytest.mark.parametrize("dims", [(0, 1, 1), (1, -2, 1), (1, 1, 2.5)])
def test_degenerate_dimensions_rejected(dims):
    with pytest.raises(ValueError):
        Grid3D(*dims)


def test_fill_constant_and_generator():
    g = Grid3D(3, 4, 5)
    g.fill(2.5)
    assert np.all(g.data == 2.5)

    g.fill(lambda x, y, z: x + 10 * y + 100 * z)
    assert g.element(2, 3, 4) == 432
    assert g.element(0, 1, 0) == 10


def test_generator_traversal_order():
    calls = []
    g = Grid3D(2, 2, 2)
    g.fill(lambda x, y, z: calls.append((x, y, z)) or 0.0)
    assert calls[0] == (0, 0, 0)
    assert calls[1] == (0, 0, 1)
    assert calls[2] == (0, 1, 0)
    assert calls[-1] == (1, 1, 1)
    assert len(calls) == 8


def test_arithmetic_with_grid_and_scalar():
    a = Grid3D(2, 2, 2, fill=3.0)
    b = Grid3D(2, 2, 2, fill=2.0)

    assert np.all((a + b).data == 5.0)
    assert np.all((a - b).data == 1.0)
    assert np.all((a * b).data == 6.0)
    assert np.all((a / b).data == 1.5)
    assert np.all((a * 2).data == 6.0)
    assert np.all((a - 1).data == 2.0)
    # Operands untouched
    assert np.all(a.data == 3.0)


def test_inplace_arithmetic_keeps_identity():
    a = Grid3D(2, 2, 2, fill=3.0)
    b = Grid3D(2, 2, 2, fill=2.0)
    storage = a.data
    ref = a

    a += b
    a *= 2
    a -= 1.0
    a /= b
    assert a is ref
    assert a.data is storage
    assert np.allclose(a.data, ((3.0 + 2.0) * 2 - 1.0) / 2.0)


def test_scalar_on_the_left():
    a = Grid3D(2, 2, 2, fill=4.0)
    assert np.all((2.0 * a).data == 8.0)
    assert np.all((1 + a).data == 5.0)
    assert np.all((1.0 - a).data == -3.0)
    assert np.all((8.0 / a).data == 2.0)
    assert np.all(a.data == 4.0)


def test_shape_mismatch_is_an_error():
    with pytest.raises(ValueError):
        Grid3D(2, 2, 2) + Grid3D(2, 2, 3)
    a = Grid3D(2, 2, 2)
    with pytest.raises(ValueError):
        a += Grid3D(3, 2, 2)


def test_unsupported_operand():
    with pytest.raises(TypeError):
        Grid3D(2, 2, 2) + "gas"


def test_distribute_uses_trilinear_weights():
    g = Grid3D(4, 4, 4)
    g.distribute(1.5, 1.0, 1.25, 8.0)

    assert g.sum() == pytest.approx(8.0)
    assert g.element(1, 1, 1) == pytest.approx(3.0)
    assert g.element(2, 1, 1) == pytest.approx(3.0)
    assert g.element(1, 1, 2) == pytest.approx(1.0)
    assert g.element(2, 1, 2) == pytest.approx(1.0)
    assert g.element(1, 2, 1) == 0.0


def test_copy_is_independent():
    a = Grid3D(2, 3, 4, fill=1.0)
    b = a.copy()
    b.set(0, 0, 0, 9.0)
    assert a.element(0, 0, 0) == 1.0

    c = Grid3D(2, 3, 4)
    c.copy_from(b)
    assert c.element(0, 0, 0) == 9.0
    assert c.data is not b.data
