"""
snapgas/solver.py
-----------------
Multi-species gas solver on a dense 3D grid.

Every call to update() runs, in this order:
  1. Diffusion  (velocity axes, then the four gas species)
  2. Forces     (viscous decay, pressure acceleration, vorticity confinement)
  3. Advection  (velocity self-advection, then species)

The scheme is a stylised, stable approximation for interactive rates
(after Mick West, "Practical Fluid Mechanics"), not a CFD-grade solver.
Values are read from each Field's source grid and written into its
destination grid, then the two are swapped.

update() is not reentrant and takes no locks. Readers on other threads
should use the published Frame (publish_frames=True) instead of the live
grids.
"""
import logging
import math
import numbers

import numpy as np

from . import numerics
from .field import Axis, SpeciesField, VelocityField
from .frame import Frame, GasSample
from .grid import Grid3D
from .solids import SolidMap

logger = logging.getLogger(__name__)

# Grids with this average edge length advect with a scale of 1
STD_DIMENSION = 100.0
# Stabilises the normalisation of the curl gradient
CURL_EPSILON = 1e-6


def _nearly_zero(value):
    return abs(value) < numerics.EPSILON


class GasSolver:
    def __init__(self, width, height, depth, dt, publish_frames=False):
        """
        Args:
            width, height, depth (int): Grid size in cells, including the
                one cell boundary shell on every side.
            dt (float): Default time step used by update().
            publish_frames (bool): Publish a Frame after every update().
        """
        self.curl_grid = Grid3D(width, height, depth)
        self.width, self.height, self.depth = self.curl_grid.shape

        self.velocity = VelocityField(width, height, depth)
        self.species = SpeciesField(width, height, depth)
        self.solids = SolidMap(width, height, depth)

        self.dt = dt
        self.diffusion_iterations = 1
        self.vorticity = 0.0
        self.pressure_accel = 0.0

        self.publish_frames = publish_frames
        self.step_count = 0
        self.time = 0.0
        self._frame = None
        self._warned_unstable = False

        self.reset()
        logger.info("GasSolver %dx%dx%d created (dt=%g)", self.width, self.height, self.depth, dt)

    @classmethod
    def from_config(cls, config, publish_frames=False):
        solver = cls(config.width, config.height, config.depth, config.dt,
                     publish_frames=publish_frames)
        solver.configure(config)
        return solver

    def configure(self, config):
        """ Applies the tunables of a SolverConfig. Grid size is ignored. """
        self.dt = config.dt
        self.diffusion_iterations = config.diffusion_iterations
        self.vorticity = config.vorticity
        self.pressure_accel = config.pressure_accel
        for props, values in ((self.velocity.properties, config.velocity),
                              (self.species.properties, config.species)):
            props.diffusion = values.diffusion
            props.advection = values.advection
            props.force = values.force
            props.decay = values.decay

    # --- Properties ---
    @property
    def shape(self):
        return (self.width, self.height, self.depth)

    @property
    def dt(self):
        return self._dt

    @dt.setter
    def dt(self, value):
        if value < 0:
            raise ValueError(f"dt must be >= 0, got {value}")
        self._dt = float(value)

    @property
    def diffusion_iterations(self):
        return self._diffusion_iterations

    @diffusion_iterations.setter
    def diffusion_iterations(self, value):
        if not isinstance(value, numbers.Integral) or value < 0:
            raise ValueError(f"diffusion_iterations must be an integer >= 0, got {value!r}")
        self._diffusion_iterations = int(value)

    @property
    def advection_scale(self):
        """ Smaller grids have larger cells, so they advect less per step. """
        return (self.width + self.height + self.depth) / 3.0 / STD_DIMENSION

    # --- Setup ---
    def reset(self):
        """ Zeros velocity and species and clears the solid map. """
        self.velocity.reset(0.0)
        self.species.reset(0.0)
        self.curl_grid.fill(0.0)
        self.solids.reset()
        logger.info("GasSolver reset")

    def seed_species(self, generators):
        """
        Seeds species from a {Species: value_or_generator} mapping.

        Each generator fills the destination grid, species not in the mapping
        carry their current values over, then all four are swapped together.
        """
        for s, fld in enumerate(self.species):
            if s in generators:
                fld.destination.fill(generators[s])
            else:
                fld.destination.copy_from(fld.source)
        self.species.swap()

    def seed_velocity(self, axis, generator):
        fld = self.velocity[axis]
        fld.destination.fill(generator)
        self.velocity.swap(axis)

    def set_solids(self, flags):
        """ Solid map from constant flags or a flags(x, y, z) generator. """
        self.solids.fill(flags)

    def add_gas(self, species, x, y, z, amount):
        """ Injects gas at a floating point location. """
        self.species[species].source.distribute(x, y, z, amount)

    # --- Readers ---
    def concentration(self, species, x, y, z):
        return float(self.species[species].source.element(x, y, z))

    def gas(self, x, y, z):
        return GasSample(*(float(g.element(x, y, z)) for g in self.species.sources()))

    def velocity_at(self, x, y, z):
        return self.velocity.vector(x, y, z)

    def pressure(self, x, y, z):
        return self.species.pressure(x, y, z)

    def total_mass(self, species=None):
        if species is None:
            return sum(g.sum() for g in self.species.sources())
        return self.species[species].source.sum()

    def curl(self, x, y, z):
        """ Vortex strength at an interior cell. """
        vx, vy, vz = self.velocity.sources()
        return ((vx.element(x, y + 1, z) - vx.element(x, y - 1, z)) * 0.5
                - (vy.element(x + 1, y, z) - vy.element(x - 1, y, z)) * 0.5
                - (vz.element(x, y, z + 1) - vz.element(x, y, z - 1)) * 0.5)

    def snapshot(self):
        return Frame.capture(self.step_count, self.time,
                             self.species.sources(), self.velocity.sources())

    @property
    def latest_frame(self):
        """ Last published Frame, or None before the first update(). """
        return self._frame

    # --- Time stepping ---
    def update(self, dt=None):
        """ Advances the simulation by one step of `dt` (default: self.dt). """
        if dt is not None:
            self.dt = dt

        self.update_diffusion()
        self.update_forces()
        self.update_advection()

        self.step_count += 1
        self.time += self.dt
        if self.publish_frames:
            self._frame = self.snapshot()
        logger.debug("step %d done (dt=%g, t=%g)", self.step_count, self.dt, self.time)

    def update_diffusion(self):
        iterations = self.diffusion_iterations
        if iterations == 0:
            return

        props = self.velocity.properties
        if not _nearly_zero(props.diffusion):
            force = self.dt * props.diffusion / iterations
            if self._diffusion_enabled("velocity", force):
                for _ in range(iterations):
                    for axis in Axis:
                        self._diffuse(self.velocity[axis], force)
                        self.velocity.swap(axis)

        props = self.species.properties
        if not _nearly_zero(props.diffusion):
            force = self.dt * props.diffusion / iterations
            if self._diffusion_enabled("species", force):
                for _ in range(iterations):
                    for fld in self.species:
                        self._diffuse(fld, force)
                    self.species.swap()

    def update_forces(self):
        decay = self.velocity.properties.decay
        if not _nearly_zero(decay):
            self.exponential_decay(decay)

        if not _nearly_zero(self.pressure_accel):
            self.pressure_acceleration(self.pressure_accel)

        if not _nearly_zero(self.vorticity):
            self.vorticity_confinement(self.vorticity)

    def update_advection(self):
        # Velocity goes first: advecting pressure first leaves self-maintaining
        # ripples, advecting velocity first dissipates them.
        scale = self.advection_scale

        force = self.dt * self.velocity.properties.advection * scale
        if not _nearly_zero(force):
            self.advect_velocity(force)

        force = self.dt * self.species.properties.advection * scale
        if not _nearly_zero(force):
            self.advect_species(force)

    # --- Diffusion ---
    def _diffusion_enabled(self, name, force):
        if force <= 0.0 or _nearly_zero(force):
            logger.debug("%s diffusion skipped (force=%g)", name, force)
            return False
        if 6.0 * force > 1.0 and not self._warned_unstable:
            logger.warning("%s diffusion factor %g exceeds 1/6; raise diffusion_iterations "
                           "to keep the stencil monotone", name, force)
            self._warned_unstable = True
        return True

    def _diffuse(self, fld, force):
        numerics.diffuse_kernel(fld.source.data, fld.destination.data, self.solids.flags,
                                self.width, self.height, self.depth, force)

    # --- Forces ---
    def exponential_decay(self, decay):
        """
        Scales velocity by (1 - decay)^dt, pulling it towards zero.
        A decay of 1 or more stops the flow outright.
        """
        factor = math.pow(max(1.0 - decay, 0.0), self.dt)
        for g in self.velocity.sources():
            g *= factor

    def pressure_field(self):
        """ Sum of all species concentrations, as an (nx, ny, nz) array. """
        p = np.zeros(self.shape, dtype=np.float64)
        for g in self.species.sources():
            p += g.view()
        return p

    def pressure_acceleration(self, scale):
        """
        Pushes velocity from high towards low pressure across every open face.
        The impulse p(cell) - p(cell + 1) is added to the cell and taken from
        its +1 neighbour, so the net momentum added is zero.
        """
        force = self.dt * scale
        p = self.pressure_field()
        links = self.solids.link_masks()

        for axis in Axis:
            lo = [slice(None)] * 3
            hi = [slice(None)] * 3
            lo[axis] = slice(None, -1)
            hi[axis] = slice(1, None)
            lo, hi = tuple(lo), tuple(hi)

            fld = self.velocity[axis]
            fld.destination.copy_from(fld.source)
            out = fld.destination.view()

            impulse = force * (p[lo] - p[hi]) * links[axis][lo]
            out[lo] += impulse
            out[hi] -= impulse
            self.velocity.swap(axis)

    def vorticity_confinement(self, scale):
        """
        Accelerates velocity tangentially around regions of high curl to
        restore rotation lost to numerical damping.
        """
        vx, vy, vz = (g.view() for g in self.velocity.sources())
        curl = numerics.curl_field(vx, vy, vz)

        mag = self.curl_grid.view()
        mag[...] = np.abs(curl)

        # Normalised gradient of the curl magnitude
        gx = 0.5 * (mag[2:, 1:-1, 1:-1] - mag[:-2, 1:-1, 1:-1])
        gy = 0.5 * (mag[1:-1, 2:, 1:-1] - mag[1:-1, :-2, 1:-1])
        gz = 0.5 * (mag[1:-1, 1:-1, 2:] - mag[1:-1, 1:-1, :-2])
        length = np.sqrt(gx * gx + gy * gy + gz * gz) + CURL_EPSILON

        inner = (slice(1, -1),) * 3
        strength = scale * curl[inner] / length
        vx[inner] += -gy * strength
        vy[inner] += gx * strength
        vz[inner] += gz * strength

    # --- Advection ---
    def _plan(self, force):
        vx, vy, vz = (g.data for g in self.velocity.sources())
        return numerics.plan_advection(vx, vy, vz, self.solids.flags,
                                       self.width, self.height, self.depth, force)

    def advect_velocity(self, force):
        """
        Self-advection of velocity: a forward pass followed by a signed
        reverse pass, both traced along the current velocity.
        """
        nx, ny = self.width, self.height
        base, weights, _ = self._plan(force)
        back_base, back_weights, back_collided = self._plan(-force)

        for fld in self.velocity:
            src = fld.source.data
            dst = fld.destination.data
            np.copyto(dst, src)
            numerics.forward_apply(src, dst, base, weights, nx, ny)

            forward = dst.copy()
            numerics.signed_apply(forward, dst, back_base, back_weights, back_collided, nx, ny)
        self.velocity.swap()

    def advect_species(self, force):
        """
        Species are pushed forward along the velocity, then pulled back along
        it with mass-redistributing reverse advection. Both passes conserve
        the total amount of every species.
        """
        nx, ny = self.width, self.height

        base, weights, _ = self._plan(force)
        for fld in self.species:
            np.copyto(fld.destination.data, fld.source.data)
            numerics.forward_apply(fld.source.data, fld.destination.data, base, weights, nx, ny)
        self.species.swap()

        # Traced backward (-force): each cell pulls from its upstream cube,
        # so both passes carry mass in the direction of the flow.
        base, weights, _ = self._plan(-force)
        for fld in self.species:
            np.copyto(fld.destination.data, fld.source.data)
            numerics.reverse_apply(fld.source.data, fld.destination.data, base, weights, nx, ny)
        self.species.swap()
