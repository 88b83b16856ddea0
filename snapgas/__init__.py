"""
snapgas: Multi-species 3D gas solver.
"""
from .grid import Grid3D
from .field import Axis, Field, FluidProperties, Species, SpeciesField, VelocityField
from .solids import FlowDirection, SolidMap
from .config import SolverConfig
from .frame import Frame, GasSample
from .solver import GasSolver
from .manager import SimulationManager

__version__ = "0.1.0"
