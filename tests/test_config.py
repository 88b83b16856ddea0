import pytest

from snapgas import FluidProperties, SolverConfig


def test_defaults():
    config = SolverConfig()
    assert (config.width, config.height, config.depth) == (16, 16, 16)
    assert config.dt == 0.1
    assert config.diffusion_iterations == 1
    assert config.velocity == FluidProperties()


def test_from_dict_nested_properties():
    config = SolverConfig.from_dict({
        "width": 10,
        "vorticity": 0.2,
        "species": {"diffusion": 0.5, "advection": 2.0},
    })
    assert config.width == 10
    assert config.height == 16
    assert config.species.advection == 2.0
    assert config.velocity.advection == 0.0


def test_round_trip_through_dict():
    config = SolverConfig.atmosphere(8, 9, 10)
    assert SolverConfig.from_dict(config.to_dict()) == config


@pytest.mark.parametrize("data", [
    {"widht": 10},
    {"velocity": {"viscosity": 1.0}},
])
def test_unknown_keys_rejected(data):
    with pytest.raises(ValueError):
        SolverConfig.from_dict(data)


def test_atmosphere_tuning():
    config = SolverConfig.atmosphere()
    assert config.diffusion_iterations == 15
    assert config.pressure_accel == 1.0
    assert config.velocity.decay == 0.5
    assert config.species.decay == 0.0
