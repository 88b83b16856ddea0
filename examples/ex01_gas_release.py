"""
ex01_gas_release.py
-------------------
A room at 1 atm with a CO2 leak in one corner.
Pressure acceleration pushes the extra gas outwards, diffusion smooths it.
"""
from snapcore.display import SimulationDisplay
from snapgas import GasSolver, SolverConfig, Species


def run():
    cfg = SolverConfig.atmosphere(width=18, height=18, depth=6)
    display = SimulationDisplay("Gas Release", f"{cfg.width}x{cfg.height}x{cfg.depth} | dt={cfg.dt}")
    display.header()

    # 1. Setup
    display.section("Setup")
    solver = GasSolver.from_config(cfg)
    solver.seed_species({
        Species.O2: 21.0,
        Species.N2: 78.0,
    })
    solver.add_gas(Species.CO2, 3.5, 3.5, 2.5, 500.0)

    # 2. Run
    display.section("Time Marching")
    for i in range(61):
        solver.update()
        if i % 10 == 0:
            display.log_frame(solver.snapshot())

    x, y, z = 9, 9, 3
    print(f"\nGas at room centre: {solver.gas(x, y, z)}")
    display.success()


if __name__ == "__main__":
    run()
