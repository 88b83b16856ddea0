""" Shared helpers for the solver tests. """


def interior(shape):
    """ Predicate for cells inside the one cell boundary shell. """
    nx, ny, nz = shape
    return lambda x, y, z: 0 < x < nx - 1 and 0 < y < ny - 1 and 0 < z < nz - 1


def seed_random_velocity(solver, rng, scale=1.0):
    inside = interior(solver.shape)
    for axis in range(3):
        solver.seed_velocity(
            axis, lambda x, y, z: float(rng.uniform(-scale, scale)) if inside(x, y, z) else 0.0)
