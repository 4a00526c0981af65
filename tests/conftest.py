"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np

from pynumerics.statistics import GeneratorSource


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def source():
    """Seeded, resettable UniformSource."""
    return GeneratorSource(seed=1234)


@pytest.fixture
def spd_matrix(rng):
    """Well-conditioned 6 x 6 symmetric positive definite matrix."""
    B = rng.standard_normal((6, 6))
    A = B @ B.T + 6 * np.eye(6)
    return (A + A.T) / 2
