"""
Input validation utilities for pynumerics.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent.

Design principles:
    - No silent type coercion (except np.asarray on array-likes)
    - Complex input stays complex; everything else becomes float64
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray
from typing import Any

from pynumerics.core.exceptions import ValidationError, DimensionError


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[Any]:
    """
    Validate and convert input to a float64 or complex128 numpy array.

    Rejects inputs that result in object dtype (mixed types or
    non-numeric data) and non-numeric dtypes such as strings.

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray of dtype float64 or complex128

    Raises:
        ValidationError: If input cannot be converted to a numeric array
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        raise ValidationError(
            f"{name}: converted to object dtype, indicating mixed types or non-numeric data"
        )

    if result.dtype == np.bool_ or not np.issubdtype(result.dtype, np.number):
        raise ValidationError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    if np.issubdtype(result.dtype, np.complexfloating):
        return result.astype(np.complex128, copy=False)
    return result.astype(np.float64, copy=False)


def check_finite(array: NDArray[Any], name: str) -> None:
    """
    Verify array contains no NaN or Inf values.

    Args:
        array: Array to check
        name: Parameter name for error messages

    Raises:
        ValidationError: If array contains non-finite values
    """
    if not np.all(np.isfinite(array)):
        n_nan = int(np.sum(np.isnan(array)))
        n_inf = int(np.sum(np.isinf(array)))
        raise ValidationError(
            f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
        )


def check_ndim(array: NDArray[Any], ndim: int, name: str) -> None:
    """
    Verify array has exactly the specified number of dimensions.

    Args:
        array: Array to check
        ndim: Required number of dimensions
        name: Parameter name for error messages

    Raises:
        DimensionError: If array has wrong number of dimensions
    """
    if array.ndim != ndim:
        raise DimensionError(
            f"{name}: expected {ndim}D array, got {array.ndim}D with shape {array.shape}"
        )


def check_1d(array: NDArray[Any], name: str) -> None:
    """Verify array is 1-dimensional."""
    check_ndim(array, 1, name)


def check_2d(array: NDArray[Any], name: str) -> None:
    """Verify array is 2-dimensional."""
    check_ndim(array, 2, name)


def check_square(array: NDArray[Any], name: str) -> None:
    """
    Verify a 2D array is square.

    Raises:
        DimensionError: If the row and column counts differ
    """
    if array.shape[0] != array.shape[1]:
        raise DimensionError(
            f"{name}: expected a square matrix, got shape {array.shape}"
        )


def check_same_shape(a: NDArray[Any], b: NDArray[Any], names: tuple[str, str]) -> None:
    """
    Verify two arrays have identical shapes.

    Raises:
        DimensionError: If shapes differ
    """
    if a.shape != b.shape:
        raise DimensionError(
            f"Inconsistent shapes: {names[0]}={a.shape}, {names[1]}={b.shape}"
        )


def check_min_samples(array: NDArray[Any], min_samples: int, name: str) -> None:
    """
    Verify array has at least the minimum number of samples.

    Args:
        array: Array to check
        min_samples: Minimum required samples (first dimension)
        name: Parameter name for error messages

    Raises:
        ValidationError: If array has fewer than min_samples
    """
    n = array.shape[0]
    if n < min_samples:
        raise ValidationError(
            f"{name}: requires at least {min_samples} samples, got {n}"
        )


def check_nonnegative(value: float, name: str) -> None:
    """
    Verify a scalar is >= 0. NaN fails.

    Raises:
        ValidationError: If value is negative or NaN
    """
    if not value >= 0:
        raise ValidationError(f"{name}: must be non-negative, got {value}")


def check_in_interval(value: float, lower: float, upper: float, name: str) -> None:
    """
    Verify a scalar lies in the closed interval [lower, upper]. NaN fails.

    Raises:
        ValidationError: If value is outside the interval
    """
    if not lower <= value <= upper:
        raise ValidationError(
            f"{name}: must be in [{lower}, {upper}], got {value}"
        )


def check_positive_int(value: int, name: str) -> None:
    """
    Verify value is an integer >= 1.

    Raises:
        ValidationError: If value is not a positive integer
    """
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise ValidationError(f"{name}: expected an integer, got {type(value).__name__}")
    if value < 1:
        raise ValidationError(f"{name}: must be >= 1, got {value}")


def check_nonnegative_int(value: int, name: str) -> None:
    """
    Verify value is an integer >= 0.

    Raises:
        ValidationError: If value is not a non-negative integer
    """
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise ValidationError(f"{name}: expected an integer, got {type(value).__name__}")
    if value < 0:
        raise ValidationError(f"{name}: must be non-negative, got {value}")


def check_real_scalar(value: Any, name: str) -> float:
    """
    Convert a real scalar to float.

    Returns:
        The value as a Python float (NaN and inf pass through)

    Raises:
        ValidationError: If value is not a real number
    """
    if isinstance(value, (complex, np.complexfloating)) or isinstance(value, bool):
        raise ValidationError(f"{name}: expected a real number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name}: expected a real number, got {value!r}") from e
