"""
snapgas/solids.py
-----------------
Per-cell flow blocking.

Each cell stores a FlowDirection bit set. The outer shell of the grid is
always fully blocked; this is derived in is_blocked() and never stored.
"""
from enum import IntFlag

import numpy as np

from . import numerics
from .grid import Grid3D


class FlowDirection(IntFlag):
    NONE = 0
    X_PLUS = numerics.X_PLUS
    X_MINUS = numerics.X_MINUS
    Y_PLUS = numerics.Y_PLUS
    Y_MINUS = numerics.Y_MINUS
    Z_PLUS = numerics.Z_PLUS
    Z_MINUS = numerics.Z_MINUS
    SELF = numerics.SELF

    ALL_FACES = X_PLUS | X_MINUS | Y_PLUS | Y_MINUS | Z_PLUS | Z_MINUS
    WALL = ALL_FACES | SELF

    @property
    def opposite(self):
        return _OPPOSITE.get(self, self)


_OPPOSITE = {
    FlowDirection.X_PLUS: FlowDirection.X_MINUS,
    FlowDirection.X_MINUS: FlowDirection.X_PLUS,
    FlowDirection.Y_PLUS: FlowDirection.Y_MINUS,
    FlowDirection.Y_MINUS: FlowDirection.Y_PLUS,
    FlowDirection.Z_PLUS: FlowDirection.Z_MINUS,
    FlowDirection.Z_MINUS: FlowDirection.Z_PLUS,
}

# Single-bit directions a cell can be queried with
DIRECTIONS = (
    FlowDirection.X_PLUS, FlowDirection.X_MINUS,
    FlowDirection.Y_PLUS, FlowDirection.Y_MINUS,
    FlowDirection.Z_PLUS, FlowDirection.Z_MINUS,
    FlowDirection.SELF,
)


class SolidMap:
    def __init__(self, nx, ny, nz):
        self.grid = Grid3D(nx, ny, nz, fill=0, dtype=np.uint8)
        self._links = None

    @property
    def shape(self):
        return self.grid.shape

    @property
    def flags(self):
        """ Raw uint8 flag storage handed to the kernels. """
        return self.grid.data

    def is_blocked(self, x, y, z, direction):
        if direction not in DIRECTIONS:
            raise ValueError(f"is_blocked needs a single direction, got {direction!r}")
        self.grid.index(x, y, z)
        nx, ny, nz = self.grid.shape
        return bool(numerics.is_blocked(self.grid.data, nx, ny, nz, x, y, z, int(direction)))

    def flags_at(self, x, y, z):
        return FlowDirection(int(self.grid.element(x, y, z)))

    def set(self, x, y, z, flags):
        self.grid.set(x, y, z, int(FlowDirection(flags)))
        self._links = None

    def fill(self, flags):
        """
        Sets the flags of every cell, from a constant or a generator
        called as flags(x, y, z).
        """
        if callable(flags):
            self.grid.fill(lambda x, y, z: int(FlowDirection(flags(x, y, z))))
        else:
            self.grid.fill(int(FlowDirection(flags)))
        self._links = None

    def reset(self):
        self.fill(FlowDirection.NONE)

    def link_masks(self):
        """
        Open faces towards the +1 neighbour, one boolean (nx, ny, nz) view per
        axis. Cached until the map changes.
        """
        if self._links is None:
            nx, ny, nz = self.grid.shape
            self._links = tuple(
                numerics.link_mask(self.grid.data, nx, ny, nz, axis)
                .reshape((nz, ny, nx)).T
                for axis in range(3)
            )
        return self._links
