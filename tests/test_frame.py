import pytest

from snapgas import GasSample, GasSolver, Species


@pytest.fixture
def frame():
    solver = GasSolver(4, 5, 6, dt=0.1)
    solver.seed_species({Species.N2: 2.0, Species.TOXIN: lambda x, y, z: 1.0 if z == 3 else 0.0})
    solver.seed_velocity(0, lambda x, y, z: 3.0 if (x, y, z) == (1, 2, 3) else 0.0)
    solver.seed_velocity(1, lambda x, y, z: 4.0 if (x, y, z) == (1, 2, 3) else 0.0)
    return solver.snapshot()


def test_shape_and_contains(frame):
    assert frame.shape == (4, 5, 6)
    assert frame.contains(3, 4, 5)
    assert not frame.contains(4, 0, 0)
    assert not frame.contains(0, -1, 0)


def test_gas_sample(frame):
    sample = frame.gas(1, 2, 3)
    assert sample == GasSample(o2=0.0, n2=2.0, co2=0.0, toxin=1.0)
    assert sample[Species.N2] == 2.0
    assert sample.total == 3.0


def test_reads_outside_raise(frame):
    with pytest.raises(IndexError):
        frame.gas(0, 5, 0)
    with pytest.raises(IndexError):
        frame.velocity_at(-1, 0, 0)


def test_totals_and_speed(frame):
    assert frame.total_mass(Species.N2) == pytest.approx(2.0 * 4 * 5 * 6)
    assert frame.total_mass(Species.TOXIN) == pytest.approx(4 * 5)
    assert frame.total_mass() == pytest.approx(240.0 + 20.0)
    assert frame.velocity_at(1, 2, 3) == (3.0, 4.0, 0.0)
    assert frame.max_speed() == pytest.approx(5.0)


def test_empty_sample():
    assert GasSample() == (0.0, 0.0, 0.0, 0.0)
    assert GasSample().total == 0.0
