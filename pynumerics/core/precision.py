"""
Numerical precision constants and scalar floating-point utilities.

Provides accuracy constants, ULP-based and relative-error comparisons,
representable-double stepping and a few overflow-safe scalar helpers used
throughout the special functions and decompositions.

Design principles:
    - Comparisons never raise on NaN or inf; NaN is never equal to anything
    - ULP distances are exact Python integers (no int64 wraparound)
    - Relative accuracy defaults are shared by every almost-equality check
"""

import math

import numpy as np

from pynumerics.core.exceptions import ValidationError


# Half the distance between 1.0 and the next larger double
RELATIVE_ACCURACY: float = 2.0 ** -53  # ~1.11e-16

# Distance between 1.0 and the next larger double
POSITIVE_RELATIVE_ACCURACY: float = 2.0 ** -52  # ~2.22e-16

# Default tolerance for relative almost-equality checks
DEFAULT_RELATIVE_ACCURACY: float = 10 * RELATIVE_ACCURACY  # ~1.11e-15

# Smallest positive subnormal double
SMALLEST_POSITIVE: float = 5e-324

EULER_GAMMA: float = 0.5772156649015328606065120900824024310421593359
LN_PI: float = 1.1447298858494001741434273513530587116472948129153
LN_2PI_2: float = 0.91893853320467274178032973640561763986139747363778  # ln(2*pi)/2
SQRT2: float = 1.4142135623730950488016887242096980785696718753769
SQRT1_2: float = 0.70710678118654752440084436210484903928483593768845

_SIGN_MASK = 0x7FFF_FFFF_FFFF_FFFF


def epsilon_of(value: float) -> float:
    """
    Gap between |value| and the next smaller representable double.

    Args:
        value: Any double

    Returns:
        The ULP size at value's magnitude, 5e-324 at zero, NaN for NaN or inf
    """
    if math.isinf(value) or math.isnan(value):
        return math.nan
    magnitude = abs(value)
    return magnitude - math.nextafter(magnitude, -math.inf)


def positive_epsilon_of(value: float) -> float:
    """Twice ``epsilon_of(value)``: a tolerance that keeps both neighbours."""
    return 2 * epsilon_of(value)


def increment(value: float, count: int = 1) -> float:
    """Step ``count`` representable doubles towards +inf."""
    for _ in range(count):
        value = math.nextafter(value, math.inf)
    return value


def decrement(value: float, count: int = 1) -> float:
    """Step ``count`` representable doubles towards -inf."""
    for _ in range(count):
        value = math.nextafter(value, -math.inf)
    return value


def to_lexicographic_int64(value: float) -> int:
    """
    Map a double to a signed integer that preserves numeric ordering.

    Doubles are stored as sign + magnitude. Converting the magnitude of
    negative values to a negated integer yields a two's complement order in
    which adjacent doubles differ by exactly one; +0 and -0 both map to 0.
    """
    bits = int(np.float64(value).view(np.int64))
    if bits >= 0:
        return bits
    return -(bits & _SIGN_MASK)


def numbers_between(a: float, b: float) -> int:
    """
    Count of representable doubles between a and b.

    Raises:
        ValidationError: If a or b is NaN or infinite
    """
    if math.isnan(a) or math.isinf(a):
        raise ValidationError(f"a: must be finite, got {a}")
    if math.isnan(b) or math.isinf(b):
        raise ValidationError(f"b: must be finite, got {b}")
    return abs(to_lexicographic_int64(a) - to_lexicographic_int64(b))


def almost_equal(a: float, b: float, max_numbers_between: int) -> bool:
    """
    ULP-based equality.

    Args:
        a: First value
        b: Second value
        max_numbers_between: Largest accepted count of doubles between a and b

    Returns:
        True if a and b are exactly equal (including same-sign infinities)
        or within max_numbers_between representable doubles. NaN is never
        equal, not even to itself.

    Raises:
        ValidationError: If max_numbers_between is negative
    """
    if max_numbers_between < 0:
        raise ValidationError(
            f"max_numbers_between: must be non-negative, got {max_numbers_between}"
        )
    if a == b:
        return True
    if math.isnan(a) or math.isnan(b) or math.isinf(a) or math.isinf(b):
        return False
    return numbers_between(a, b) <= max_numbers_between


def almost_equal_norm(
    a: float,
    b: float,
    diff: float,
    relative_accuracy: float = DEFAULT_RELATIVE_ACCURACY,
) -> bool:
    """
    Relative-error equality given precomputed magnitudes and difference.

    ``a`` and ``b`` are typically norms and ``diff`` the norm of their
    difference. If one side is exactly zero and the other is below the
    accuracy, the difference is compared absolutely.
    """
    if (a == 0 and abs(b) < relative_accuracy) or (b == 0 and abs(a) < relative_accuracy):
        return abs(diff) < relative_accuracy
    return abs(diff) < relative_accuracy * max(abs(a), abs(b))


def almost_equal_relative(
    a: complex,
    b: complex,
    relative_accuracy: float = DEFAULT_RELATIVE_ACCURACY,
) -> bool:
    """
    Relative-error equality of two real or complex scalars.

    NaN is never equal; infinities are equal only to themselves.
    """
    if a == b:
        return True
    if _is_nan(a) or _is_nan(b) or _is_inf(a) or _is_inf(b):
        return False
    return almost_equal_norm(abs(a), abs(b), abs(a - b), relative_accuracy)


def almost_zero(value: complex, relative_accuracy: float = DEFAULT_RELATIVE_ACCURACY) -> bool:
    """True if |value| is below the relative accuracy."""
    return abs(value) < relative_accuracy


def coerce_zero(value: float, zero: float = DEFAULT_RELATIVE_ACCURACY) -> float:
    """Return 0.0 if |value| < zero, else value unchanged (NaN stays NaN)."""
    if abs(value) < zero:
        return 0.0
    return value


def hypot(a: complex, b: complex) -> float:
    """
    sqrt(|a|^2 + |b|^2) without destructive underflow or overflow.

    The larger magnitude is factored out before squaring. Accepts real or
    complex arguments. NaN in either argument gives NaN.
    """
    abs_a = float(abs(a))
    abs_b = float(abs(b))
    if math.isinf(abs_a) or math.isinf(abs_b):
        return math.inf
    if abs_a > abs_b:
        r = abs_b / abs_a
        return abs_a * math.sqrt(1 + r * r)
    if abs_b > 0:
        r = abs_a / abs_b
        return abs_b * math.sqrt(1 + r * r)
    if math.isnan(abs_a) or math.isnan(abs_b):
        return math.nan
    return 0.0


def sign(value: complex) -> complex:
    """
    Sign of a real (-1.0, 0.0, 1.0) or phase of a complex value (z / |z|).

    Complex zero has sign 0.
    """
    if isinstance(value, (complex, np.complexfloating)):
        modulus = abs(value)
        if modulus == 0:
            return 0j
        return complex(value) / modulus
    if value > 0:
        return 1.0
    if value < 0:
        return -1.0
    return 0.0


def _is_nan(value: complex) -> bool:
    return value != value


def _is_inf(value: complex) -> bool:
    return math.isinf(abs(value))
