"""
Tests for input validation utilities.

Validates every function in core/validation.py:
    - check_array: conversion, dtype coercion, complex preservation
    - check_finite: NaN/Inf detection
    - check_ndim / check_1d / check_2d / check_square: shape checks
    - check_same_shape: operand agreement
    - check_min_samples: minimum sample count
    - scalar checks: non-negative, interval, integers, real scalars
"""

import numpy as np
import pytest

from pynumerics.core.exceptions import DimensionError, ValidationError
from pynumerics.core.validation import (
    check_1d,
    check_2d,
    check_array,
    check_finite,
    check_in_interval,
    check_min_samples,
    check_ndim,
    check_nonnegative,
    check_nonnegative_int,
    check_positive_int,
    check_real_scalar,
    check_same_shape,
    check_square,
)


# ═══════════════════════════════════════════════════════════════════════
# check_array
# ═══════════════════════════════════════════════════════════════════════


class TestCheckArray:
    """check_array converts to float64/complex128 and rejects non-numeric data."""

    def test_list_to_float_array(self):
        result = check_array([1, 2, 3], "x")
        assert isinstance(result, np.ndarray)
        assert result.dtype == np.float64
        np.testing.assert_array_equal(result, [1.0, 2.0, 3.0])

    def test_int32_promoted_to_float64(self):
        result = check_array(np.array([1, 2], dtype=np.int32), "x")
        assert result.dtype == np.float64

    def test_float32_promoted_to_float64(self):
        result = check_array(np.array([1.0, 2.0], dtype=np.float32), "x")
        assert result.dtype == np.float64

    def test_complex_preserved(self):
        result = check_array([1 + 2j, 3], "x")
        assert result.dtype == np.complex128
        assert result[0] == 1 + 2j

    def test_nested_list_to_2d(self):
        result = check_array([[1, 2], [3, 4]], "A")
        assert result.shape == (2, 2)

    def test_rejects_mixed_types(self):
        with pytest.raises(ValidationError, match="object dtype"):
            check_array([None, 1, 2.0], "x")

    def test_rejects_strings(self):
        with pytest.raises(ValidationError, match="non-numeric dtype"):
            check_array(["a", "b"], "x")

    def test_rejects_bool(self):
        with pytest.raises(ValidationError, match="non-numeric dtype"):
            check_array([True, False], "x")

    def test_empty_array(self):
        result = check_array([], "x")
        assert result.shape == (0,)


# ═══════════════════════════════════════════════════════════════════════
# check_finite
# ═══════════════════════════════════════════════════════════════════════


class TestCheckFinite:
    """check_finite counts NaN and Inf separately."""

    def test_finite_passes(self):
        check_finite(np.array([1.0, -2.0, 0.0]), "x")

    def test_nan_rejected(self):
        with pytest.raises(ValidationError, match="1 NaN, 0 Inf"):
            check_finite(np.array([1.0, np.nan]), "x")

    def test_inf_rejected(self):
        with pytest.raises(ValidationError, match="0 NaN, 2 Inf"):
            check_finite(np.array([np.inf, -np.inf]), "x")


# ═══════════════════════════════════════════════════════════════════════
# Shape checks
# ═══════════════════════════════════════════════════════════════════════


class TestShapeChecks:
    """Dimension checks raise DimensionError naming the parameter."""

    def test_ndim_ok(self):
        check_ndim(np.zeros((2, 3, 4)), 3, "T")

    def test_1d_rejects_2d(self):
        with pytest.raises(DimensionError, match="v: expected 1D"):
            check_1d(np.zeros((2, 2)), "v")

    def test_2d_rejects_1d(self):
        with pytest.raises(DimensionError, match="A: expected 2D"):
            check_2d(np.zeros(3), "A")

    def test_square_ok(self):
        check_square(np.eye(3), "A")

    def test_square_rejects_rectangular(self):
        with pytest.raises(DimensionError, match="square"):
            check_square(np.zeros((2, 3)), "A")

    def test_same_shape(self):
        check_same_shape(np.zeros((2, 3)), np.ones((2, 3)), ("A", "B"))
        with pytest.raises(DimensionError, match="Inconsistent shapes"):
            check_same_shape(np.zeros((2, 3)), np.ones((3, 2)), ("A", "B"))

    def test_dimension_error_is_validation_error(self):
        with pytest.raises(ValidationError):
            check_square(np.zeros((1, 2)), "A")


class TestCheckMinSamples:
    """check_min_samples enforces a first-dimension minimum."""

    def test_enough(self):
        check_min_samples(np.zeros(3), 3, "x")

    def test_too_few(self):
        with pytest.raises(ValidationError, match="at least 3 samples, got 2"):
            check_min_samples(np.zeros(2), 3, "x")


# ═══════════════════════════════════════════════════════════════════════
# Scalar checks
# ═══════════════════════════════════════════════════════════════════════


class TestScalarChecks:
    """Scalar domain checks reject NaN along with out-of-range values."""

    def test_nonnegative(self):
        check_nonnegative(0.0, "a")
        with pytest.raises(ValidationError):
            check_nonnegative(-1e-300, "a")
        with pytest.raises(ValidationError):
            check_nonnegative(float("nan"), "a")

    def test_in_interval(self):
        check_in_interval(0.0, 0.0, 1.0, "p")
        check_in_interval(1.0, 0.0, 1.0, "p")
        with pytest.raises(ValidationError, match=r"p: must be in \[0.0, 1.0\]"):
            check_in_interval(1.5, 0.0, 1.0, "p")
        with pytest.raises(ValidationError):
            check_in_interval(float("nan"), 0.0, 1.0, "p")

    def test_positive_int(self):
        check_positive_int(1, "k")
        check_positive_int(np.int64(5), "k")
        with pytest.raises(ValidationError, match="must be >= 1"):
            check_positive_int(0, "k")
        with pytest.raises(ValidationError, match="expected an integer"):
            check_positive_int(2.0, "k")
        with pytest.raises(ValidationError, match="expected an integer"):
            check_positive_int(True, "k")

    def test_nonnegative_int(self):
        check_nonnegative_int(0, "n")
        with pytest.raises(ValidationError, match="non-negative"):
            check_nonnegative_int(-1, "n")
        with pytest.raises(ValidationError, match="expected an integer"):
            check_nonnegative_int(1.5, "n")

    def test_real_scalar(self):
        assert check_real_scalar(3, "x") == 3.0
        assert isinstance(check_real_scalar(np.float32(1.5), "x"), float)
        assert np.isnan(check_real_scalar(float("nan"), "x"))

    def test_real_scalar_rejects_complex(self):
        with pytest.raises(ValidationError, match="real number"):
            check_real_scalar(1 + 1j, "x")

    def test_real_scalar_rejects_strings(self):
        with pytest.raises(ValidationError, match="real number"):
            check_real_scalar("one", "x")
