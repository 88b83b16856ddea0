import threading
import time

import pytest

from snapgas import GasSample, SimulationManager, SolverConfig, Species


def _small_config():
    return SolverConfig(width=6, height=6, depth=6)


def test_for_room_adds_walls():
    config = SolverConfig.atmosphere()
    manager = SimulationManager.for_room((4, 3, 2), config)
    assert manager.solver.shape == (6, 5, 4)
    assert manager.solver.diffusion_iterations == 15
    # The passed config is left alone
    assert config.width == 16


def test_synchronous_steps_publish_frames():
    frames = []
    manager = SimulationManager(_small_config(), on_frame=frames.append)
    manager.seed(species={Species.O2: 21.0})
    assert manager.frame.step == 0
    assert manager.get_gas(2, 2, 2).o2 == 21.0

    frame = manager.step(3, dt=0.05)
    assert frame.step == 3
    assert frame.time == pytest.approx(0.15)
    assert [f.step for f in frames] == [1, 2, 3]
    assert manager.frame is frame


def test_reads_outside_grid_are_empty():
    manager = SimulationManager(_small_config())
    assert manager.get_gas(10, 0, 0) == GasSample()
    assert manager.get_velocity(0, -1, 0) == (0.0, 0.0, 0.0)


def _wait_for(predicate, timeout=30.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


def test_background_thread_steps_until_stopped():
    manager = SimulationManager(_small_config(), interval=0.005, max_dt=0.01)
    manager.seed(species={Species.CO2: 1.0})

    with manager:
        assert manager.is_running
        with pytest.raises(RuntimeError):
            manager.step()
        assert _wait_for(lambda: manager.frame.step >= 3)

    assert not manager.is_running
    frame = manager.frame
    assert frame.time <= frame.step * 0.01 + 1e-9
    assert frame.total_mass(Species.CO2) == pytest.approx(216.0)


def test_worker_error_is_raised_from_stop():
    def explode(frame):
        raise RuntimeError("boom")

    manager = SimulationManager(_small_config(), interval=0.001, on_frame=explode)
    manager.start()
    assert _wait_for(lambda: not manager.is_running)
    with pytest.raises(RuntimeError, match="boom"):
        manager.stop()
    # The error is reported once
    manager.stop()


def test_stop_timeout_keeps_manager_running():
    entered = threading.Event()
    release = threading.Event()

    def hold(frame):
        entered.set()
        release.wait(30.0)

    manager = SimulationManager(_small_config(), interval=0.001, on_frame=hold)
    manager.start()
    assert entered.wait(30.0)

    with pytest.raises(TimeoutError):
        manager.stop(timeout=0.01)
    assert manager.is_running
    with pytest.raises(RuntimeError):
        manager.step()
    with pytest.raises(RuntimeError):
        manager.start()

    release.set()
    manager.stop(timeout=30.0)
    assert not manager.is_running
