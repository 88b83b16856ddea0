"""
snapgas/manager.py
------------------
Background driver for a GasSolver.

The manager owns one solver, steps it on a worker thread at a fixed cadence
using the measured wall-clock time as dt, and answers reads from the last
published Frame so readers never see a half-updated grid.
"""
import logging
import threading
import time
from dataclasses import replace

from .config import SolverConfig
from .frame import GasSample
from .solver import GasSolver

logger = logging.getLogger(__name__)


class SimulationManager:
    def __init__(self, config=None, interval=1.0 / 30.0, max_dt=None, on_frame=None):
        """
        Args:
            config (SolverConfig): Grid size and tuning. Defaults to SolverConfig().
            interval (float): Target seconds between two updates.
            max_dt (float, optional): Upper bound on the measured dt.
            on_frame (callable, optional): Called with every published Frame
                from the worker thread.
        """
        self.config = config if config is not None else SolverConfig()
        self.interval = interval
        self.max_dt = max_dt
        self.on_frame = on_frame

        self.solver = GasSolver.from_config(self.config, publish_frames=True)
        self._frame = self.solver.snapshot()

        self._thread = None
        self._stop = threading.Event()
        self._error = None

    @classmethod
    def for_room(cls, cells, config=None, **kwargs):
        """
        Builds a manager for a room of `cells` = (x, y, z) open cells.
        A one cell wall is added on every side.
        """
        config = config if config is not None else SolverConfig.atmosphere()
        width, height, depth = (int(c) + 2 for c in cells)
        config = replace(config, width=width, height=height, depth=depth)
        return cls(config, **kwargs)

    # --- Setup (before start) ---
    def seed(self, species=None, solids=None, velocity=None):
        """
        Initial state.

        Args:
            species: {Species: value_or_generator}
            solids: flags or flags(x, y, z) generator
            velocity: {Axis: value_or_generator}
        """
        self._require_stopped("seed")
        if solids is not None:
            self.solver.set_solids(solids)
        if species:
            self.solver.seed_species(species)
        for axis, gen in (velocity or {}).items():
            self.solver.seed_velocity(axis, gen)
        self._frame = self.solver.snapshot()

    # --- Thread control ---
    @property
    def is_running(self):
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        self._require_stopped("start")
        self._stop.clear()
        self._error = None
        self._thread = threading.Thread(target=self._run, name="SimulationManager", daemon=True)
        self._thread.start()
        logger.info("Simulation thread started (interval=%.3fs)", self.interval)

    def stop(self, timeout=None):
        """
        Stops the worker and re-raises any error it died with.

        Raises TimeoutError if the worker is still alive after `timeout`
        seconds. The manager then keeps counting as running, and a later
        stop() finishes the shutdown.
        """
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                raise TimeoutError(f"Simulation thread still running after {timeout}s")
            self._thread = None
        logger.info("Simulation thread stopped after %d steps", self.solver.step_count)
        if self._error is not None:
            error, self._error = self._error, None
            raise error

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False

    def step(self, count=1, dt=None):
        """ Advances synchronously without a worker thread. """
        self._require_stopped("step")
        for _ in range(count):
            self.solver.update(dt)
            self._publish()
        return self._frame

    def _require_stopped(self, action):
        if self.is_running:
            raise RuntimeError(f"Cannot {action} while the simulation thread is running")

    def _run(self):
        stamp = time.perf_counter()
        try:
            while not self._stop.is_set():
                elapsed = time.perf_counter() - stamp
                if elapsed < self.interval and self._stop.wait(self.interval - elapsed):
                    break

                now = time.perf_counter()
                dt = now - stamp
                stamp = now
                if self.max_dt is not None:
                    dt = min(dt, self.max_dt)

                self.solver.update(dt)
                self._publish()
        except Exception as exc:
            logger.exception("Simulation thread failed at step %d", self.solver.step_count)
            self._error = exc

    def _publish(self):
        frame = self.solver.latest_frame
        self._frame = frame
        if self.on_frame is not None:
            self.on_frame(frame)

    # --- Readers (any thread) ---
    @property
    def frame(self):
        return self._frame

    def get_gas(self, x, y, z):
        """ Gas at a cell, or an empty sample outside the grid. """
        frame = self._frame
        if not frame.contains(x, y, z):
            return GasSample()
        return frame.gas(x, y, z)

    def get_velocity(self, x, y, z):
        frame = self._frame
        if not frame.contains(x, y, z):
            return (0.0, 0.0, 0.0)
        return frame.velocity_at(x, y, z)
