"""
Core infrastructure for pynumerics.

Shared abstractions and utilities used by the special functions, the
linear algebra package and the statistics layer.

Key components:
    exceptions: Exception hierarchy
    validation: Input validators
    precision: Accuracy constants and floating-point comparison
    tolerances: Tolerance tiers for numerical validation
    protocols: UniformSource protocol
"""

from pynumerics.core.protocols import UniformSource
from pynumerics.core.exceptions import (
    PyNumericsError,
    ValidationError,
    DimensionError,
    NumericalError,
    SingularMatrixError,
    NotPositiveDefiniteError,
    ConvergenceError,
    NotSupportedError,
)
from pynumerics.core.precision import (
    RELATIVE_ACCURACY,
    POSITIVE_RELATIVE_ACCURACY,
    DEFAULT_RELATIVE_ACCURACY,
    almost_equal,
    almost_equal_norm,
    almost_equal_relative,
    almost_zero,
    coerce_zero,
    decrement,
    epsilon_of,
    hypot,
    increment,
    numbers_between,
    positive_epsilon_of,
    sign,
    to_lexicographic_int64,
)

__all__ = [
    # Protocols
    "UniformSource",
    # Exceptions
    "PyNumericsError",
    "ValidationError",
    "DimensionError",
    "NumericalError",
    "SingularMatrixError",
    "NotPositiveDefiniteError",
    "ConvergenceError",
    "NotSupportedError",
    # Precision
    "RELATIVE_ACCURACY",
    "POSITIVE_RELATIVE_ACCURACY",
    "DEFAULT_RELATIVE_ACCURACY",
    "almost_equal",
    "almost_equal_norm",
    "almost_equal_relative",
    "almost_zero",
    "coerce_zero",
    "decrement",
    "epsilon_of",
    "hypot",
    "increment",
    "numbers_between",
    "positive_epsilon_of",
    "sign",
    "to_lexicographic_int64",
]
