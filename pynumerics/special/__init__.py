"""
Special functions.

Gamma, beta and error function families, digamma, factorials and related
combinatorial helpers. All functions take and return Python floats and
propagate NaN/inf at poles instead of raising.
"""

from pynumerics.special._elementary import sinc
from pynumerics.special._gamma import (
    gamma,
    gamma_ln,
    gamma_regularized,
    gamma_regularized_inverse,
    gamma_regularized_upper,
)
from pynumerics.special._beta import beta, beta_ln, beta_regularized
from pynumerics.special._erf import erf, erf_inverse, erfc
from pynumerics.special._digamma import digamma
from pynumerics.special._combinatorics import (
    binomial_coefficient,
    binomial_coefficient_ln,
    factorial,
    factorial_ln,
    harmonic_number,
)

__all__ = [
    # Gamma
    "gamma",
    "gamma_ln",
    "gamma_regularized",
    "gamma_regularized_upper",
    "gamma_regularized_inverse",
    "digamma",
    # Beta
    "beta",
    "beta_ln",
    "beta_regularized",
    # Error function
    "erf",
    "erfc",
    "erf_inverse",
    # Combinatorics
    "factorial",
    "factorial_ln",
    "binomial_coefficient",
    "binomial_coefficient_ln",
    "harmonic_number",
    # Elementary
    "sinc",
]
