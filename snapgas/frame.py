"""
snapgas/frame.py
----------------
Immutable snapshots of the solver state, safe to read from another thread.
"""
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np


class GasSample(NamedTuple):
    o2: float = 0.0
    n2: float = 0.0
    co2: float = 0.0
    toxin: float = 0.0

    @property
    def total(self):
        return self.o2 + self.n2 + self.co2 + self.toxin


@dataclass(frozen=True)
class Frame:
    """
    species  [4, nx, ny, nz]  concentration per Species
    velocity [3, nx, ny, nz]  velocity per Axis
    """
    step: int
    time: float
    species: np.ndarray
    velocity: np.ndarray

    @classmethod
    def capture(cls, step, time, species_grids, velocity_grids):
        species = np.stack([g.view() for g in species_grids])
        velocity = np.stack([g.view() for g in velocity_grids])
        species.flags.writeable = False
        velocity.flags.writeable = False
        return cls(step, time, species, velocity)

    @property
    def shape(self):
        return self.species.shape[1:]

    def contains(self, x, y, z):
        nx, ny, nz = self.shape
        return 0 <= x < nx and 0 <= y < ny and 0 <= z < nz

    def _check(self, x, y, z):
        if not self.contains(x, y, z):
            raise IndexError(f"({x}, {y}, {z}) is outside frame {self.shape}")

    def gas(self, x, y, z):
        self._check(x, y, z)
        return GasSample(*(float(v) for v in self.species[:, x, y, z]))

    def velocity_at(self, x, y, z):
        self._check(x, y, z)
        return tuple(float(v) for v in self.velocity[:, x, y, z])

    def total_mass(self, species=None):
        if species is None:
            return float(self.species.sum())
        return float(self.species[int(species)].sum())

    def max_speed(self):
        return float(np.sqrt((self.velocity ** 2).sum(axis=0)).max())
