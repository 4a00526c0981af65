"""
Tests for floating-point precision utilities.

Validates:
    - Accuracy constants
    - ULP sizes, representable-double stepping and ULP distances
    - ULP-based and relative almost-equality, including NaN and inf
    - hypot, sign, coerce_zero, almost_zero
"""

import math

import numpy as np
import pytest

from pynumerics.core.exceptions import ValidationError
from pynumerics.core.precision import (
    DEFAULT_RELATIVE_ACCURACY,
    POSITIVE_RELATIVE_ACCURACY,
    RELATIVE_ACCURACY,
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


# ═══════════════════════════════════════════════════════════════════════
# Constants and ULP stepping
# ═══════════════════════════════════════════════════════════════════════


class TestConstants:
    """Accuracy constants relate to the spacing of doubles around 1."""

    def test_relative_accuracy(self):
        assert RELATIVE_ACCURACY == 2.0 ** -53
        assert POSITIVE_RELATIVE_ACCURACY == 2 * RELATIVE_ACCURACY
        assert 1.0 + POSITIVE_RELATIVE_ACCURACY == increment(1.0)

    def test_default_relative_accuracy(self):
        assert DEFAULT_RELATIVE_ACCURACY == 10 * RELATIVE_ACCURACY


class TestEpsilon:
    """epsilon_of is the gap to the next smaller magnitude."""

    def test_one(self):
        assert epsilon_of(1.0) == 2.0 ** -53
        assert positive_epsilon_of(1.0) == 2.0 ** -52

    def test_symmetric_in_sign(self):
        assert epsilon_of(-3.5) == epsilon_of(3.5)

    def test_zero_is_smallest_subnormal(self):
        assert epsilon_of(0.0) == 5e-324

    def test_non_finite_is_nan(self):
        assert math.isnan(epsilon_of(math.inf))
        assert math.isnan(epsilon_of(math.nan))


class TestStepping:
    """increment/decrement walk representable doubles."""

    def test_single_step(self):
        assert increment(1.0) == math.nextafter(1.0, 2.0)
        assert decrement(1.0) == math.nextafter(1.0, 0.0)

    def test_count(self):
        x = increment(1.0, 5)
        assert numbers_between(1.0, x) == 5
        assert decrement(x, 5) == 1.0

    def test_through_zero(self):
        assert increment(-5e-324) == 0.0
        assert increment(0.0) == 5e-324
        assert decrement(0.0) == -5e-324


class TestLexicographic:
    """Lexicographic integers make adjacent doubles differ by one."""

    def test_zero_and_negative_zero(self):
        assert to_lexicographic_int64(0.0) == 0
        assert to_lexicographic_int64(-0.0) == 0

    def test_subnormals(self):
        assert to_lexicographic_int64(5e-324) == 1
        assert to_lexicographic_int64(-5e-324) == -1

    def test_ordering_preserved(self, rng):
        values = np.sort(rng.standard_normal(50) * 1e3)
        keys = [to_lexicographic_int64(v) for v in values]
        assert keys == sorted(keys)

    def test_numbers_between_across_zero(self):
        assert numbers_between(-5e-324, 5e-324) == 2
        assert numbers_between(2.0, 2.0) == 0

    def test_numbers_between_rejects_non_finite(self):
        with pytest.raises(ValidationError):
            numbers_between(math.nan, 1.0)
        with pytest.raises(ValidationError):
            numbers_between(1.0, math.inf)


# ═══════════════════════════════════════════════════════════════════════
# Almost-equality
# ═══════════════════════════════════════════════════════════════════════


class TestAlmostEqual:
    """ULP-based equality."""

    def test_within_ulps(self):
        assert almost_equal(1.0, increment(1.0, 2), 2)
        assert not almost_equal(1.0, increment(1.0, 3), 2)

    def test_exact(self):
        assert almost_equal(0.0, -0.0, 0)
        assert almost_equal(math.inf, math.inf, 0)

    def test_nan_never_equal(self):
        assert not almost_equal(math.nan, math.nan, 10)
        assert not almost_equal(math.nan, 1.0, 10)

    def test_opposite_infinities(self):
        assert not almost_equal(math.inf, -math.inf, 10)

    def test_negative_ulps_rejected(self):
        with pytest.raises(ValidationError):
            almost_equal(1.0, 1.0, -1)


class TestAlmostEqualRelative:
    """Relative-error equality of real and complex scalars."""

    def test_close(self):
        assert almost_equal_relative(1.0, 1.0 + 1e-16)
        assert not almost_equal_relative(1.0, 1.001)

    def test_custom_accuracy(self):
        assert almost_equal_relative(1.0, 1.001, 1e-2)

    def test_scales_with_magnitude(self):
        assert almost_equal_relative(1e20, 1e20 + 1e4)
        assert not almost_equal_relative(1e-20, 2e-20)

    def test_zero_against_tiny(self):
        assert almost_equal_relative(0.0, 1e-16)
        assert not almost_equal_relative(0.0, 1e-10)

    def test_complex(self):
        assert almost_equal_relative(1 + 1j, 1 + 1j + 1e-16)
        assert not almost_equal_relative(1 + 1j, 1 - 1j)

    def test_nan_and_inf(self):
        assert not almost_equal_relative(math.nan, math.nan)
        assert almost_equal_relative(math.inf, math.inf)
        assert not almost_equal_relative(math.inf, 1e308)

    def test_norm_variant(self):
        assert almost_equal_norm(10.0, 10.0, 1e-15)
        assert not almost_equal_norm(10.0, 10.0, 1e-3)


# ═══════════════════════════════════════════════════════════════════════
# Scalar helpers
# ═══════════════════════════════════════════════════════════════════════


class TestHypot:
    """hypot avoids overflow and underflow in the intermediate squares."""

    def test_pythagorean(self):
        assert hypot(3.0, 4.0) == 5.0
        assert hypot(-3.0, 4.0) == 5.0

    def test_no_overflow(self):
        assert hypot(1e200, 1e200) == pytest.approx(math.sqrt(2) * 1e200, rel=1e-15)

    def test_no_underflow(self):
        assert hypot(3e-200, 4e-200) == pytest.approx(5e-200, rel=1e-15)

    def test_complex_arguments(self):
        assert hypot(3 + 4j, 0.0) == 5.0
        assert hypot(1j, 1.0) == pytest.approx(math.sqrt(2))

    def test_zero(self):
        assert hypot(0.0, 0.0) == 0.0

    def test_non_finite(self):
        assert hypot(math.inf, math.nan) == math.inf
        assert math.isnan(hypot(math.nan, 1.0))
        assert math.isnan(hypot(0.0, math.nan))


class TestSign:
    """sign returns -1/0/1 for reals and the phase for complex values."""

    def test_real(self):
        assert sign(-2.5) == -1.0
        assert sign(0.0) == 0.0
        assert sign(7) == 1.0

    def test_complex(self):
        assert sign(3j) == 1j
        assert sign(-4 + 0j) == -1 + 0j
        assert sign(0j) == 0j


class TestZeroHelpers:
    """coerce_zero and almost_zero use the default relative accuracy."""

    def test_coerce_zero(self):
        assert coerce_zero(1e-16) == 0.0
        assert coerce_zero(-1e-16) == 0.0
        assert coerce_zero(1e-3) == 1e-3
        assert coerce_zero(1e-3, zero=1e-2) == 0.0

    def test_coerce_zero_keeps_nan(self):
        assert math.isnan(coerce_zero(math.nan))

    def test_almost_zero(self):
        assert almost_zero(1e-16)
        assert almost_zero(1e-16j)
        assert not almost_zero(1e-10)
        assert almost_zero(1e-10, 1e-9)
