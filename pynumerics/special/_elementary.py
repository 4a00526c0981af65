"""
Elementary helpers shared by the special-function kernels.

math.exp raises where IEEE arithmetic returns inf; the
kernels need the IEEE results so that poles and overflow propagate.
"""

import math

# Largest argument for which exp() is finite
MAX_EXP_ARGUMENT: float = 709.782712893384


def safe_exp(x: float) -> float:
    """exp(x), returning inf on overflow instead of raising."""
    if x > MAX_EXP_ARGUMENT:
        return math.inf
    return math.exp(x)


def sinc(x: float) -> float:
    """
    Normalized sinc function sin(pi x) / (pi x).

    Args:
        x: Real argument

    Returns:
        1.0 at x = 0, 0.0 at +/-inf, NaN for NaN
    """
    if math.isnan(x):
        return math.nan
    if math.isinf(x):
        return 0.0
    a = math.pi * x
    if a == 0:
        return 1.0
    value = math.sin(a) / a
    if math.isinf(value) or math.isnan(value):
        return 1.0
    return value
