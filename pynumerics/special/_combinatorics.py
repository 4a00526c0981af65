"""
Factorials, binomial coefficients and harmonic numbers.

Small arguments come from exact tables. factorial_ln keeps a lazily filled
cache that is shared by all callers; writes are guarded by a lock so the
first concurrent fill is race-free.
"""

import math
import threading

from pynumerics.core.exceptions import ValidationError
from pynumerics.core.precision import EULER_GAMMA
from pynumerics.core.validation import check_nonnegative_int
from pynumerics.special._elementary import safe_exp
from pynumerics.special._gamma import FACTORIALS, gamma, gamma_ln


FACTORIAL_LN_CACHE_SIZE = 2 * len(FACTORIALS)

_factorial_ln_cache: list[float | None] = [None] * FACTORIAL_LN_CACHE_SIZE
_factorial_ln_lock = threading.Lock()

# H(0) .. H(31), correctly rounded
HARMONIC_NUMBERS: tuple[float, ...] = tuple(
    math.fsum(1.0 / k for k in range(1, n + 1)) for n in range(32)
)


def factorial(n: int) -> float:
    """
    n! as a double.

    Args:
        n: Non-negative integer

    Returns:
        Exact table value for n < 32, Gamma(n + 1) beyond (inf once it
        overflows)

    Raises:
        ValidationError: If n is negative or not an integer
    """
    check_nonnegative_int(n, "n")
    if n < len(FACTORIALS):
        return FACTORIALS[n]
    return gamma(n + 1.0)


def factorial_ln(n: int) -> float:
    """
    ln(n!).

    Raises:
        ValidationError: If n is negative or not an integer
    """
    check_nonnegative_int(n, "n")
    if n <= 1:
        return 0.0
    if n >= FACTORIAL_LN_CACHE_SIZE:
        return gamma_ln(n + 1.0)

    cached = _factorial_ln_cache[n]
    if cached is not None:
        return cached
    with _factorial_ln_lock:
        if _factorial_ln_cache[n] is None:
            _factorial_ln_cache[n] = gamma_ln(n + 1.0)
        return _factorial_ln_cache[n]


def binomial_coefficient(n: int, k: int) -> float:
    """
    Number of k-element subsets of an n-element set, as a double.

    Returns 0 when k < 0, n < 0 or k > n.
    """
    if k < 0 or n < 0 or k > n:
        return 0.0
    value = safe_exp(factorial_ln(n) - factorial_ln(k) - factorial_ln(n - k))
    if math.isinf(value):
        return value
    return float(math.floor(0.5 + value))


def binomial_coefficient_ln(n: int, k: int) -> float:
    """
    Natural logarithm of the binomial coefficient.

    Returns 1.0 when k < 0, n < 0 or k > n.
    """
    if k < 0 or n < 0 or k > n:
        return 1.0
    return factorial_ln(n) - factorial_ln(k) - factorial_ln(n - k)


def harmonic_number(n: int) -> float:
    """
    n-th harmonic number H(n) = 1 + 1/2 + ... + 1/n.

    Raises:
        ValidationError: If n is negative
    """
    if n < 0:
        raise ValidationError(f"n: must be non-negative, got {n}")
    if n < len(HARMONIC_NUMBERS):
        return HARMONIC_NUMBERS[n]

    n2 = float(n) * n
    n4 = n2 * n2
    return EULER_GAMMA + math.log(n) + 0.5 / n - 1.0 / (12.0 * n2) + 1.0 / (120.0 * n4)
