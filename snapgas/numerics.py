"""
snapgas/numerics.py
-------------------
High-Performance Kernels using Numba JIT compilation.

Every kernel works on the flat storage of a Grid3D (index x + nx*(y + ny*z))
and accepts raw NumPy arrays only. No objects.

The advection kernels are split in two stages:
  plan_advection  -> where does every moving cell land (base corner + 8 weights)
  *_apply         -> move one field's values along a plan
so the four gas species and three velocity axes can share one plan per step.
"""
import math

import numpy as np
from numba import njit

# "Nearly zero" tolerance for skipping no-op work
EPSILON = 1e-8
# Keeps the clamped advection target inside the centre of the neighbour cell
KINDA_SMALL = 1e-4
MAX_ADVECT = 1.5 - KINDA_SMALL

# Bit layout of a solid map cell (see solids.FlowDirection)
X_PLUS = 1
X_MINUS = 2
Y_PLUS = 4
Y_MINUS = 8
Z_PLUS = 16
Z_MINUS = 32
SELF = 64


# ---------------------------------------------------------------------------
# Solids
# ---------------------------------------------------------------------------
@njit(cache=True)
def is_blocked(solids, nx, ny, nz, x, y, z, direction):
    """
    True if flow out of (x, y, z) along `direction` is blocked.
    Cells on the outer shell of the grid are blocked in every direction.
    """
    if x == 0 or x == nx - 1:
        return True
    if y == 0 or y == ny - 1:
        return True
    if z == 0 or z == nz - 1:
        return True

    flags = solids[x + nx * (y + ny * z)]
    if direction == SELF:
        return (flags & SELF) != 0
    if direction == X_PLUS:
        return x + 1 < nx and (flags & X_PLUS) != 0
    if direction == X_MINUS:
        return x - 1 >= 0 and (flags & X_MINUS) != 0
    if direction == Y_PLUS:
        return y + 1 < ny and (flags & Y_PLUS) != 0
    if direction == Y_MINUS:
        return y - 1 >= 0 and (flags & Y_MINUS) != 0
    if direction == Z_PLUS:
        return z + 1 < nz and (flags & Z_PLUS) != 0
    if direction == Z_MINUS:
        return z - 1 >= 0 and (flags & Z_MINUS) != 0
    return False


@njit(cache=True)
def link_open(solids, nx, ny, nz, x, y, z, dx, dy, dz, direction, opposite):
    """ A face between two cells is open only if neither side blocks it. """
    if is_blocked(solids, nx, ny, nz, x, y, z, direction):
        return False
    return not is_blocked(solids, nx, ny, nz, x + dx, y + dy, z + dz, opposite)


@njit(cache=True)
def link_mask(solids, nx, ny, nz, axis):
    """
    mask[i] is True when the face between cell i and its +1 neighbour
    along `axis` (0=x, 1=y, 2=z) is open.
    """
    mask = np.zeros(nx * ny * nz, dtype=np.bool_)
    dx = 1 if axis == 0 else 0
    dy = 1 if axis == 1 else 0
    dz = 1 if axis == 2 else 0
    direction = X_PLUS if axis == 0 else (Y_PLUS if axis == 1 else Z_PLUS)
    opposite = X_MINUS if axis == 0 else (Y_MINUS if axis == 1 else Z_MINUS)

    for z in range(1, nz - 1 - dz):
        for y in range(1, ny - 1 - dy):
            for x in range(1, nx - 1 - dx):
                mask[x + nx * (y + ny * z)] = link_open(
                    solids, nx, ny, nz, x, y, z, dx, dy, dz, direction, opposite)
    return mask


# ---------------------------------------------------------------------------
# Diffusion
# ---------------------------------------------------------------------------
@njit(fastmath=True, cache=True)
def diffuse_kernel(src, dst, solids, nx, ny, nz, force):
    """
    Explicit 6-neighbour diffusion:
        dst = src + force * (sum(open neighbours) - n_open * src)
    Blocked cells keep their value.
    """
    sx = 1
    sy = nx
    sz = nx * ny
    for z in range(nz):
        for y in range(ny):
            for x in range(nx):
                i = x + nx * (y + ny * z)
                if is_blocked(solids, nx, ny, nz, x, y, z, SELF):
                    dst[i] = src[i]
                    continue

                c = 0.0
                d = 0
                if link_open(solids, nx, ny, nz, x, y, z, 1, 0, 0, X_PLUS, X_MINUS):
                    c += src[i + sx]
                    d += 1
                if link_open(solids, nx, ny, nz, x, y, z, -1, 0, 0, X_MINUS, X_PLUS):
                    c += src[i - sx]
                    d += 1
                if link_open(solids, nx, ny, nz, x, y, z, 0, 1, 0, Y_PLUS, Y_MINUS):
                    c += src[i + sy]
                    d += 1
                if link_open(solids, nx, ny, nz, x, y, z, 0, -1, 0, Y_MINUS, Y_PLUS):
                    c += src[i - sy]
                    d += 1
                if link_open(solids, nx, ny, nz, x, y, z, 0, 0, 1, Z_PLUS, Z_MINUS):
                    c += src[i + sz]
                    d += 1
                if link_open(solids, nx, ny, nz, x, y, z, 0, 0, -1, Z_MINUS, Z_PLUS):
                    c += src[i - sz]
                    d += 1

                dst[i] = src[i] + force * (c - d * src[i])


# ---------------------------------------------------------------------------
# Advection
# ---------------------------------------------------------------------------
@njit(cache=True)
def collide(solids, nx, ny, nz, x, y, z, new_x, new_y, new_z):
    """
    Pulls an advection target back inside the grid and away from solids.
    Returns (new_x, new_y, new_z, collided).
    """
    collided = False

    delta_x = min(max(new_x - x, -MAX_ADVECT), MAX_ADVECT)
    delta_y = min(max(new_y - y, -MAX_ADVECT), MAX_ADVECT)
    delta_z = min(max(new_z - z, -MAX_ADVECT), MAX_ADVECT)

    new_x = x + delta_x
    new_y = y + delta_y
    new_z = z + delta_z

    # Target must stay within [1, n-2] on every axis
    if new_x < 1.0 or new_x > nx - 2:
        new_x = float(x)
        collided = True
    if new_y < 1.0 or new_y > ny - 2:
        new_y = float(y)
        collided = True
    if new_z < 1.0 or new_z > nz - 2:
        new_z = float(z)
        collided = True

    if is_blocked(solids, nx, ny, nz, x, y, z, SELF):
        new_x = float(x)
        new_y = float(y)
        new_z = float(z)
        collided = True

    if abs(delta_x) > 1.0:
        if delta_x > 0 and is_blocked(solids, nx, ny, nz, x, y, z, X_PLUS):
            new_x = float(x)
            collided = True
        if delta_x < 0 and is_blocked(solids, nx, ny, nz, x, y, z, X_MINUS):
            new_x = float(x)
            collided = True
    if abs(delta_y) > 1.0:
        if delta_y > 0 and is_blocked(solids, nx, ny, nz, x, y, z, Y_PLUS):
            new_y = float(y)
            collided = True
        if delta_y < 0 and is_blocked(solids, nx, ny, nz, x, y, z, Y_MINUS):
            new_y = float(y)
            collided = True
    if abs(delta_z) > 1.0:
        if delta_z > 0 and is_blocked(solids, nx, ny, nz, x, y, z, Z_PLUS):
            new_z = float(z)
            collided = True
        if delta_z < 0 and is_blocked(solids, nx, ny, nz, x, y, z, Z_MINUS):
            new_z = float(z)
            collided = True

    return new_x, new_y, new_z, collided


@njit(cache=True)
def corner_offset(k, nx, ny):
    """
    Flat offset of cube corner k (0..7) from the base corner A.

        A_________B
        |\\        |\\
        | \\E______|_\\F
        |  |      |  |
        C--|------D  |
         \\ |       \\ |
          \\|G_______\\H

    Bit 0 steps +x, bit 1 steps +y, bit 2 steps +z.
    """
    return (k & 1) + nx * (((k >> 1) & 1) + ny * ((k >> 2) & 1))


@njit(fastmath=True, cache=True)
def plan_advection(vx, vy, vz, solids, nx, ny, nz, force):
    """
    For every interior cell with a non-zero velocity, finds the cube that
    (x, y, z) + v * force lands in after collision handling.

    Returns:
        base     [N]    flat index of corner A, -1 for cells that do not move
        weights  [N, 8] trilinear weight of each corner
        collided [N]    True if the target was pulled back on any axis
    """
    n = nx * ny * nz
    base = np.empty(n, dtype=np.int64)
    base[:] = -1
    weights = np.zeros((n, 8), dtype=np.float64)
    collided = np.zeros(n, dtype=np.bool_)

    for z in range(1, nz - 1):
        for y in range(1, ny - 1):
            for x in range(1, nx - 1):
                i = x + nx * (y + ny * z)
                u = vx[i]
                v = vy[i]
                w = vz[i]
                if abs(u) < EPSILON and abs(v) < EPSILON and abs(w) < EPSILON:
                    continue

                tx, ty, tz, hit = collide(solids, nx, ny, nz, x, y, z,
                                          x + u * force, y + v * force, z + w * force)

                ix = int(math.floor(tx))
                iy = int(math.floor(ty))
                iz = int(math.floor(tz))
                fx = tx - ix
                fy = ty - iy
                fz = tz - iz

                base[i] = ix + nx * (iy + ny * iz)
                collided[i] = hit
                for k in range(8):
                    wx = fx if (k & 1) else 1.0 - fx
                    wy = fy if (k & 2) else 1.0 - fy
                    wz = fz if (k & 4) else 1.0 - fz
                    weights[i, k] = wx * wy * wz

    return base, weights, collided


@njit(fastmath=True, cache=True)
def forward_apply(src, dst, base, weights, nx, ny):
    """
    Forward advection: each moving cell pushes its value into the 8 corners
    of its target cube and loses exactly what it gave away.
    `dst` must hold a copy of `src` on entry.
    """
    for i in range(src.size):
        b = base[i]
        if b < 0:
            continue
        value = src[i]
        given = 0.0
        for k in range(8):
            amount = weights[i, k] * value
            dst[b + corner_offset(k, nx, ny)] += amount
            given += amount
        dst[i] -= given


@njit(fastmath=True, cache=True)
def reverse_apply(src, dst, base, weights, nx, ny):
    """
    Mass-redistributing reverse advection: each moving cell pulls from the 8
    corners of its (backward traced) source cube. When the total fraction
    requested from a source cell exceeds 1 every claimant is rationed
    proportionally, so no cell gives away more than it holds.
    `dst` must hold a copy of `src` on entry.
    """
    requested = np.zeros(src.size, dtype=np.float64)
    for i in range(src.size):
        b = base[i]
        if b < 0:
            continue
        for k in range(8):
            requested[b + corner_offset(k, nx, ny)] += weights[i, k]

    for i in range(src.size):
        b = base[i]
        if b < 0:
            continue
        for k in range(8):
            s = b + corner_offset(k, nx, ny)
            total = requested[s]
            if total < 1.0:
                total = 1.0
            amount = weights[i, k] / total * src[s]
            dst[i] += amount
            dst[s] -= amount


@njit(fastmath=True, cache=True)
def signed_apply(fwd, dst, base, weights, collided, nx, ny):
    """
    Signed reverse advection for quantities that may be negative (velocity).
    Each moving cell pulls from its backward traced cube without rationing.
    A collided cell still drains the cube but receives nothing, which damps
    flow against walls.
    `fwd` is the forward-advected field, `dst` must hold a copy of it.
    """
    for i in range(fwd.size):
        b = base[i]
        if b < 0:
            continue
        pulled = 0.0
        for k in range(8):
            s = b + corner_offset(k, nx, ny)
            amount = weights[i, k] * fwd[s]
            dst[s] -= amount
            pulled += amount
        if not collided[i]:
            dst[i] += pulled


# ---------------------------------------------------------------------------
# Vorticity
# ---------------------------------------------------------------------------
def curl_field(vx, vy, vz):
    """
    Vortex strength on the interior of (nx, ny, nz) velocity views:
        curl = dVx/dy - dVy/dx - dVz/dz   (centred differences)
    Boundary cells are zero.
    """
    curl = np.zeros(vx.shape, dtype=np.float64)
    curl[1:-1, 1:-1, 1:-1] = (
        0.5 * (vx[1:-1, 2:, 1:-1] - vx[1:-1, :-2, 1:-1])
        - 0.5 * (vy[2:, 1:-1, 1:-1] - vy[:-2, 1:-1, 1:-1])
        - 0.5 * (vz[1:-1, 1:-1, 2:] - vz[1:-1, 1:-1, :-2])
    )
    return curl
