"""
snapgas/grid.py
---------------
Dense 3D lattice stored as a flat NumPy array.

Linear index of cell (x, y, z) is  x + nx * (y + ny * z),
so x is the fastest varying coordinate.
"""
import math
import numbers

import numpy as np


class Grid3D:
    def __init__(self, nx, ny, nz, fill=0.0, dtype=np.float64):
        """
        Allocates an (nx, ny, nz) grid.

        Args:
            nx, ny, nz (int): Width, height and depth in cells (all >= 1).
            fill: Initial value of every cell.
            dtype: NumPy dtype of the storage.
        """
        for name, n in (("nx", nx), ("ny", ny), ("nz", nz)):
            if not isinstance(n, numbers.Integral) or n < 1:
                raise ValueError(f"Grid3D: {name} must be a positive integer, got {n!r}")

        self.nx = int(nx)
        self.ny = int(ny)
        self.nz = int(nz)
        self.data = np.full(self.nx * self.ny * self.nz, fill, dtype=dtype)

    # --- Shape ---
    @property
    def shape(self):
        return (self.nx, self.ny, self.nz)

    @property
    def size(self):
        return self.data.size

    @property
    def dtype(self):
        return self.data.dtype

    def index(self, x, y, z):
        """Flat index of (x, y, z). Raises IndexError outside the lattice."""
        if not (0 <= x < self.nx and 0 <= y < self.ny and 0 <= z < self.nz):
            raise IndexError(f"({x}, {y}, {z}) is outside grid {self.shape}")
        return x + self.nx * (y + self.ny * z)

    def view(self):
        """
        (nx, ny, nz) indexed view of the flat storage.
        Writes through the view land in the grid.
        """
        return self.data.reshape((self.nz, self.ny, self.nx)).T

    # --- Element access ---
    def element(self, x, y, z):
        return self.data[self.index(x, y, z)]

    def set(self, x, y, z, value):
        self.data[self.index(x, y, z)] = value

    def __getitem__(self, xyz):
        return self.data[self.index(*xyz)]

    def __setitem__(self, xyz, value):
        self.data[self.index(*xyz)] = value

    # --- Bulk operations ---
    def fill(self, value):
        """
        Sets every cell.

        `value` is either a constant or a generator called as value(x, y, z)
        for every cell, x outermost and z innermost.
        """
        if not callable(value):
            self.data[:] = value
            return

        v = self.view()
        for x in range(self.nx):
            for y in range(self.ny):
                for z in range(self.nz):
                    v[x, y, z] = value(x, y, z)

    def copy_from(self, other):
        self._check_shape(other)
        np.copyto(self.data, other.data)

    def copy(self):
        g = Grid3D.__new__(Grid3D)
        g.nx, g.ny, g.nz = self.nx, self.ny, self.nz
        g.data = self.data.copy()
        return g

    def sum(self):
        return float(self.data.sum())

    def distribute(self, x, y, z, value):
        """
        Adds `value` to the 8 cells surrounding the floating point location
        (x, y, z), split with trilinear weights.
        """
        ix, iy, iz = math.floor(x), math.floor(y), math.floor(z)
        fx, fy, fz = x - ix, y - iy, z - iz

        # Corners on the upper face only need to exist when they get weight
        for dx, wx in ((0, 1.0 - fx), (1, fx)):
            for dy, wy in ((0, 1.0 - fy), (1, fy)):
                for dz, wz in ((0, 1.0 - fz), (1, fz)):
                    w = wx * wy * wz
                    if w != 0.0:
                        self.data[self.index(ix + dx, iy + dy, iz + dz)] += w * value

    # --- Arithmetic ---
    def _check_shape(self, other):
        if self.shape != other.shape:
            raise ValueError(f"Grid3D shape mismatch: {self.shape} vs {other.shape}")

    def _operand(self, other):
        if isinstance(other, Grid3D):
            self._check_shape(other)
            return other.data
        if isinstance(other, numbers.Number):
            return other
        return NotImplemented

    def _binary(self, other, op):
        rhs = self._operand(other)
        if rhs is NotImplemented:
            return NotImplemented
        g = self.copy()
        g.data = op(self.data, rhs)
        return g

    def _reflected(self, other, op):
        # Only scalars reach here; grid OP grid resolves on the left operand
        if not isinstance(other, numbers.Number):
            return NotImplemented
        g = self.copy()
        g.data = op(other, self.data)
        return g

    def _inplace(self, other, op):
        rhs = self._operand(other)
        if rhs is NotImplemented:
            return NotImplemented
        op(self.data, rhs, out=self.data, casting="unsafe")
        return self

    def __add__(self, other):
        return self._binary(other, np.add)

    def __sub__(self, other):
        return self._binary(other, np.subtract)

    def __mul__(self, other):
        return self._binary(other, np.multiply)

    def __truediv__(self, other):
        return self._binary(other, np.true_divide)

    def __radd__(self, other):
        return self._reflected(other, np.add)

    def __rsub__(self, other):
        return self._reflected(other, np.subtract)

    def __rmul__(self, other):
        return self._reflected(other, np.multiply)

    def __rtruediv__(self, other):
        return self._reflected(other, np.true_divide)

    def __iadd__(self, other):
        return self._inplace(other, np.add)

    def __isub__(self, other):
        return self._inplace(other, np.subtract)

    def __imul__(self, other):
        return self._inplace(other, np.multiply)

    def __itruediv__(self, other):
        return self._inplace(other, np.true_divide)

    def __repr__(self):
        return f"Grid3D(shape={self.shape}, dtype={self.data.dtype})"
