import numpy as np
import pytest

from snapgas import GasSolver


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def room():
    """ 5x5x5 solver: a 3x3x3 interior inside a one cell wall. """
    return GasSolver(5, 5, 5, dt=0.1)
