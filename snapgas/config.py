"""
snapgas/config.py
-----------------
Run configuration for a GasSolver.
"""
from dataclasses import dataclass, field, fields, asdict

from .field import FluidProperties


@dataclass
class SolverConfig:
    width: int = 16
    height: int = 16
    depth: int = 16
    dt: float = 0.1
    diffusion_iterations: int = 1
    vorticity: float = 0.0
    pressure_accel: float = 0.0
    velocity: FluidProperties = field(default_factory=FluidProperties)
    species: FluidProperties = field(default_factory=FluidProperties)

    @classmethod
    def from_dict(cls, data):
        """
        Builds a config from a plain mapping. 'velocity' and 'species' may be
        nested mappings of FluidProperties fields. Unknown keys are an error.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown solver config keys: {sorted(unknown)}")

        kwargs = dict(data)
        for name in ("velocity", "species"):
            if name in kwargs and not isinstance(kwargs[name], FluidProperties):
                props = dict(kwargs[name])
                bad = set(props) - {f.name for f in fields(FluidProperties)}
                if bad:
                    raise ValueError(f"Unknown {name} property keys: {sorted(bad)}")
                kwargs[name] = FluidProperties(**props)
        return cls(**kwargs)

    def to_dict(self):
        return asdict(self)

    @classmethod
    def atmosphere(cls, width=16, height=16, depth=16):
        """ Tuning used for breathable station atmospheres. """
        return cls(
            width=width, height=height, depth=depth,
            dt=0.1,
            diffusion_iterations=15,
            vorticity=0.03,
            pressure_accel=1.0,
            velocity=FluidProperties(diffusion=1.0, advection=1.0, decay=0.5),
            species=FluidProperties(diffusion=1.0, advection=1.0),
        )
