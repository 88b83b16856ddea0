"""
snapgas/field.py
----------------
Double buffered simulation fields.

A Field holds a 'source' grid (the current state, always read) and a
'destination' grid (written by a solver pass), and swaps their roles in O(1).
VelocityField and SpeciesField group several Fields behind one shared
FluidProperties block.
"""
from dataclasses import dataclass
from enum import IntEnum

from .grid import Grid3D


@dataclass
class FluidProperties:
    """ Rates shared by every grid of a field. Values are not validated. """
    diffusion: float = 0.0
    advection: float = 0.0
    force: float = 0.0
    decay: float = 0.0


class Axis(IntEnum):
    X = 0
    Y = 1
    Z = 2


class Species(IntEnum):
    O2 = 0      # primary
    N2 = 1      # secondary
    CO2 = 2     # tertiary
    TOXIN = 3   # contaminant


class Field:
    def __init__(self, nx, ny, nz, properties=None):
        self._buffers = (Grid3D(nx, ny, nz), Grid3D(nx, ny, nz))
        self._current = 0
        self.properties = properties if properties is not None else FluidProperties()

    @property
    def source(self):
        return self._buffers[self._current]

    @property
    def destination(self):
        return self._buffers[1 - self._current]

    @property
    def shape(self):
        return self._buffers[0].shape

    def swap(self):
        self._current = 1 - self._current

    def reset(self, value=0.0):
        for g in self._buffers:
            g.fill(value)


class _FieldGroup:
    """ A fixed set of same-shaped Fields sharing one FluidProperties. """
    members = ()

    def __init__(self, nx, ny, nz):
        self.properties = FluidProperties()
        self._fields = tuple(Field(nx, ny, nz, self.properties) for _ in self.members)

    def __getitem__(self, key):
        return self._fields[int(key)]

    def __iter__(self):
        return iter(self._fields)

    def __len__(self):
        return len(self._fields)

    @property
    def shape(self):
        return self._fields[0].shape

    def sources(self):
        return [f.source for f in self._fields]

    def destinations(self):
        return [f.destination for f in self._fields]

    def reset(self, value=0.0):
        for f in self._fields:
            f.reset(value)


class VelocityField(_FieldGroup):
    """ X, Y and Z velocity components. Axes swap independently. """
    members = tuple(Axis)

    def swap(self, axis=None):
        if axis is None:
            for f in self._fields:
                f.swap()
        else:
            self._fields[int(axis)].swap()

    def vector(self, x, y, z):
        return tuple(float(f.source.element(x, y, z)) for f in self._fields)


class SpeciesField(_FieldGroup):
    """ Concentration of each gas Species. All four share one swap epoch. """
    members = tuple(Species)

    def swap(self):
        for f in self._fields:
            f.swap()

    def pressure(self, x, y, z):
        """ Total concentration of every species at a cell. """
        return float(sum(f.source.element(x, y, z) for f in self._fields))
