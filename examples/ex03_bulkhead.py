"""
ex03_bulkhead.py
----------------
Two rooms separated by a wall at x = 8 with an open door in the middle.
Toxin released in the left room only reaches the right room through the door.
"""
from snapcore.display import SimulationDisplay
from snapgas import FlowDirection, GasSolver, SolverConfig, Species

WALL_X = 8


def bulkhead(x, y, z):
    door = 6 <= y <= 9
    if x == WALL_X and not door:
        return FlowDirection.WALL
    # Faces touching the wall are closed from the room side too
    if x == WALL_X - 1 and not door:
        return FlowDirection.X_PLUS
    if x == WALL_X + 1 and not door:
        return FlowDirection.X_MINUS
    return FlowDirection.NONE


def run():
    cfg = SolverConfig.atmosphere(width=18, height=16, depth=5)
    display = SimulationDisplay("Bulkhead", f"{cfg.width}x{cfg.height}x{cfg.depth} | door at y=6..9")
    display.header()

    solver = GasSolver.from_config(cfg)
    solver.set_solids(bulkhead)
    solver.seed_species({
        Species.N2: lambda x, y, z: 0.0 if x == WALL_X else 80.0,
        Species.TOXIN: lambda x, y, z: 20.0 if 0 < x < WALL_X else 0.0,
    })

    display.section("Time Marching")
    display.setup_stats_columns(["Step", "Left", "Right"])
    for i in range(101):
        solver.update()
        if i % 20 == 0:
            frame = solver.snapshot()
            toxin = frame.species[Species.TOXIN]
            display.log_stats(i, float(toxin[:WALL_X].sum()), float(toxin[WALL_X + 1:].sum()))

    display.success()


if __name__ == "__main__":
    run()
