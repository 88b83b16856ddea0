import io

import pytest

from snapcore import Display, SimulationDisplay
from snapcore.display import format_value
from snapgas import GasSolver, Species


def test_format_value():
    assert format_value(3, 5) == "    3"
    assert format_value(1.5, 8) == "  1.5000"
    assert format_value(0.0, 6) == "0.0000"
    assert format_value(1e-5, 10).strip() == "1.00e-05"
    assert format_value(True, 5) == " True"
    assert format_value("x", 3) == "  x"


def test_header_and_sections(capsys):
    display = SimulationDisplay("Hull Breach", "8x8x8 | dt=0.1")
    display.header()
    display.section("Setup")
    out = capsys.readouterr().out
    assert "SnapGas :: Hull Breach" in out
    assert "Config  :: 8x8x8 | dt=0.1" in out
    assert "--- Setup ---" in out


def test_stats_table_checks_column_count():
    stream = io.StringIO()
    display = Display("t", "c", stream=stream)
    display.setup_stats_columns(["Step", "Mass"], [4, 8])
    display.log_stats(2, 10.0)
    lines = stream.getvalue().splitlines()
    assert lines[-1] == "   2   10.0000"

    with pytest.raises(ValueError):
        display.log_stats(1)
    with pytest.raises(ValueError):
        display.setup_stats_columns(["a", "b"], [3])


def test_log_frame():
    solver = GasSolver(4, 4, 4, dt=0.1)
    solver.seed_species({Species.O2: 1.0})
    stream = io.StringIO()
    display = SimulationDisplay("t", "c", stream=stream)

    display.log_frame(solver.snapshot())
    display.success("done")
    out = stream.getvalue()
    assert "Toxin" in out
    assert "64.0000" in out
    assert ">> done" in out
