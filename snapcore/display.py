"""
snapcore/display.py
-------------------
Standardized console output for SnapGas simulations.
Provides consistent headers, section breaks, and tabular frame logging.
"""
import sys
import time

import numpy as np


def format_value(val, width):
    """ Right-aligns one table cell. Floats switch to scientific at the extremes. """
    if isinstance(val, (bool, np.bool_)):
        return str(val).rjust(width)
    if isinstance(val, (int, np.integer)):
        return f"{val:d}".rjust(width)
    if isinstance(val, (float, np.floating)):
        abs_val = abs(val)
        if abs_val == 0:
            return f"{0.0:.4f}".rjust(width)
        if abs_val < 1e-2 or abs_val >= 1e5:
            return f"{val:.2e}".rjust(width)
        return f"{val:.4f}".rjust(width)
    return str(val).rjust(width)


class SimulationDisplay:
    FRAME_COLUMNS = ["Step", "Time", "O2", "N2", "CO2", "Toxin", "Max|V|"]

    def __init__(self, title, context_info, stream=None):
        """
        Args:
            title (str): Name of the script or scenario (e.g. "Hull Breach")
            context_info (str): Solver config (e.g. "18x18x6 | dt=0.1")
            stream: Output file, defaults to sys.stdout at call time.
        """
        self.title = title
        self.context = context_info
        self.stream = stream
        self.start_time = time.time()
        self._col_widths = []
        self._headers = []

    def _print(self, text=""):
        print(text, file=self.stream if self.stream is not None else sys.stdout)

    def header(self):
        width = 70
        self._print("-" * width)
        self._print(f"SnapGas :: {self.title}")
        self._print(f"Config  :: {self.context}")
        self._print("-" * width + "\n")

    def section(self, name):
        self._print(f"--- {name} ---")

    def setup_stats_columns(self, headers, widths=None):
        """
        Defines the columns for the step log and prints the table header.

        Args:
            headers (list of str): Column names, e.g. ["Step", "Time", "Mass"]
            widths (list of int, optional): Width of each column. Defaults to 12.
        """
        self._headers = list(headers)
        self._col_widths = list(widths) if widths is not None else [12] * len(headers)
        if len(self._col_widths) != len(self._headers):
            raise ValueError("setup_stats_columns: headers and widths differ in length")

        self._print("")
        header_str = "  ".join(h.rjust(w) for h, w in zip(self._headers, self._col_widths))
        self._print(header_str)
        self._print("-" * len(header_str))

    def log_stats(self, *args):
        """ Logs one row matching the columns set in setup_stats_columns. """
        if len(args) != len(self._col_widths):
            raise ValueError(f"log_stats expected {len(self._col_widths)} values, got {len(args)}")
        self._print("  ".join(format_value(v, w) for v, w in zip(args, self._col_widths)))

    def log_frame(self, frame):
        """ One row of FRAME_COLUMNS for a snapgas Frame. """
        if self._headers != self.FRAME_COLUMNS:
            self.setup_stats_columns(self.FRAME_COLUMNS)
        totals = [frame.total_mass(s) for s in range(4)]
        self.log_stats(frame.step, frame.time, *totals, frame.max_speed())

    def success(self, message="Simulation Complete"):
        elapsed = time.time() - self.start_time
        self._print(f"\n>> {message} ({elapsed:.2f}s)\n")

    def error(self, message):
        self._print(f"\n!! CRITICAL ERROR: {message} !!\n")


# So you can just import 'Display' if you prefer brevity
Display = SimulationDisplay
