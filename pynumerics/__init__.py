"""
pynumerics: dense numerical computing for Python.

Floating-point utilities, special functions, dense linear algebra and a
small statistics layer, with IEEE NaN/inf propagation instead of
exceptions for numerically degenerate input.

Submodules:
    core: Exceptions, validation, precision utilities, tolerance tiers
    special: Gamma, beta, error function families and combinatorics
    linalg: Matrix, Vector, orthogonal primitives and decompositions
    statistics: Streaming moments, order statistics, histograms, sources
"""

__version__ = "0.1.0"

from pynumerics import core
from pynumerics import special
from pynumerics import linalg
from pynumerics import statistics

__all__ = [
    "__version__",
    "core",
    "special",
    "linalg",
    "statistics",
]
