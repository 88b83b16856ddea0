"""
ex04_background_driver.py
-------------------------
Runs the solver on a worker thread and samples the published frames from
the main thread, the way a game loop would.
"""
import logging
import random
import time

from snapcore.display import SimulationDisplay
from snapgas import SimulationManager, Species


def run():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s: %(message)s")

    manager = SimulationManager.for_room((12, 12, 3), interval=0.05, max_dt=0.2)
    manager.seed(species={
        Species.O2: lambda x, y, z: random.uniform(100, 150),
    })

    display = SimulationDisplay("Background Driver", "12x12x3 room | 20 Hz")
    display.header()
    display.section("Sampling")
    display.setup_stats_columns(["Step", "O2 @centre", "|V| @centre"])

    with manager:
        for _ in range(10):
            time.sleep(0.2)
            frame = manager.frame
            gas = manager.get_gas(6, 6, 2)
            vx, vy, vz = manager.get_velocity(6, 6, 2)
            display.log_stats(frame.step, gas.o2, (vx * vx + vy * vy + vz * vz) ** 0.5)

    display.success()


if __name__ == "__main__":
    run()
