import matplotlib

matplotlib.use("Agg")

import pytest

from fem1d import ProblemConfig


@pytest.fixture
def dirichlet_config():
    """Reference Dirichlet bar: L=0.1, E=1e11, g1=0, g2=0.001."""
    return ProblemConfig(length=0.1, modulus=1e11, g1=0.0, g2=0.001, problem=1)


@pytest.fixture
def flux_config():
    """Reference bar with a flux of 1e10 at x = L."""
    return ProblemConfig(problem=2)
