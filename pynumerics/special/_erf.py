"""
Error function and its inverse.

erf is evaluated through the regularized incomplete gamma function,
erf(x) = sign(x) P(1/2, x^2). The inverse uses Acklam's rational
approximation of the normal quantile (relative error about 1.15e-9)
rescaled by sqrt(1/2).
"""

import math

from pynumerics.core.precision import SQRT1_2
from pynumerics.core.validation import check_in_interval
from pynumerics.special._gamma import gamma_regularized, gamma_regularized_upper


_ERF_INV_A = (
    -3.969683028665376e+01, 2.209460984245205e+02,
    -2.759285104469687e+02, 1.383577518672690e+02,
    -3.066479806614716e+01, 2.506628277459239e+00,
)
_ERF_INV_B = (
    -5.447609879822406e+01, 1.615858368580409e+02,
    -1.556989798598866e+02, 6.680131188771972e+01,
    -1.328068155288572e+01,
)
_ERF_INV_C = (
    -7.784894002430293e-03, -3.223964580411365e-01,
    -2.400758277161838e+00, -2.549732539343734e+00,
    4.374664141464968e+00, 2.938163982698783e+00,
)
_ERF_INV_D = (
    7.784695709041462e-03, 3.224671290700398e-01,
    2.445134137142996e+00, 3.754408661907416e+00,
)

# Break-point between the tail and central approximations
_P_LOW = 0.02425
_P_HIGH = 1 - _P_LOW


def _horner(coefficients: tuple[float, ...], x: float, trailing: float | None = None) -> float:
    result = 0.0
    for coefficient in coefficients:
        result = result * x + coefficient
    if trailing is not None:
        result = result * x + trailing
    return result


def erf(x: float) -> float:
    """
    Error function.

    Args:
        x: Real argument

    Returns:
        erf(x) in [-1, 1]; exactly +/-1 at +/-inf
    """
    x = float(x)
    if math.isnan(x):
        return math.nan
    if math.isinf(x):
        return 1.0 if x > 0 else -1.0
    value = gamma_regularized(0.5, x * x)
    return -value if x < 0 else value


def erfc(x: float) -> float:
    """Complementary error function 1 - erf(x)."""
    x = float(x)
    if math.isnan(x):
        return math.nan
    if math.isinf(x):
        return 0.0 if x > 0 else 2.0
    if x < 0:
        return 1.0 + gamma_regularized(0.5, x * x)
    return gamma_regularized_upper(0.5, x * x)


def erf_inverse(x: float) -> float:
    """
    Inverse error function.

    Args:
        x: Value in [-1, 1]

    Returns:
        z with erf(z) = x; +/-inf at +/-1

    Raises:
        ValidationError: If x is outside [-1, 1]
    """
    x = float(x)
    if math.isnan(x):
        return math.nan
    check_in_interval(x, -1, 1, "x")
    if x == 1.0:
        return math.inf
    if x == -1.0:
        return -math.inf

    p = 0.5 * (x + 1.0)

    if p < _P_LOW:
        q = math.sqrt(-2 * math.log(p))
        return (_horner(_ERF_INV_C, q) / _horner(_ERF_INV_D, q, 1.0)) * SQRT1_2

    if _P_HIGH < p:
        q = math.sqrt(-2 * math.log(1 - p))
        return -(_horner(_ERF_INV_C, q) / _horner(_ERF_INV_D, q, 1.0)) * SQRT1_2

    q = p - 0.5
    r = q * q
    return (_horner(_ERF_INV_A, r) * q / _horner(_ERF_INV_B, r, 1.0)) * SQRT1_2
