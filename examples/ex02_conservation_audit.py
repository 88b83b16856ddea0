"""
ex02_conservation_audit.py
--------------------------
Goal: Run a short simulation with a swirling velocity field and verify that
the species advection conserves the total amount of gas.
"""
import math

import numpy as np

from snapgas import Axis, GasSolver, Species


def run():
    print("--- Conservation Audit Test ---")

    # 1. Setup
    n = 24
    solver = GasSolver(n, n, n, dt=0.1)
    solver.species.properties.advection = 4.0
    solver.velocity.properties.advection = 1.0

    rng = np.random.default_rng(7)
    interior = lambda x, y, z: 0 < x < n - 1 and 0 < y < n - 1 and 0 < z < n - 1
    solver.seed_species({
        Species.O2: lambda x, y, z: float(rng.uniform(100, 150)) if interior(x, y, z) else 0.0,
    })

    c = (n - 1) / 2.0
    solver.seed_velocity(Axis.X, lambda x, y, z: -(y - c) * 0.8 if interior(x, y, z) else 0.0)
    solver.seed_velocity(Axis.Y, lambda x, y, z: (x - c) * 0.8 if interior(x, y, z) else 0.0)

    # 2. Run
    initial_mass = solver.total_mass()
    print("\nStarting Time Marching (20 steps)...")
    for i in range(20):
        solver.update()

    final_mass = solver.total_mass()
    diff = final_mass - initial_mass

    print(f"\nInitial Mass: {initial_mass:.8f}")
    print(f"Final Mass:   {final_mass:.8f}")
    print(f"Discrepancy:  {diff:.2e}")

    if math.isclose(initial_mass, final_mass, rel_tol=1e-9):
        print("SUCCESS: Global Conservation Verified.")
    else:
        print("WARNING: Mass leakage detected.")


if __name__ == "__main__":
    run()
