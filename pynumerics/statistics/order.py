"""
Order statistics by quickselect.

Median-of-three pivot selection and Hoare partitioning on a private copy
of the samples, narrowing to the side that contains the requested rank.
Average linear time; the input is never modified.
"""

from __future__ import annotations

from numpy.typing import ArrayLike

from pynumerics.core.exceptions import ValidationError
from pynumerics.core.validation import (
    check_1d,
    check_array,
    check_min_samples,
    check_positive_int,
)


def _samples(samples: ArrayLike) -> list[float]:
    arr = check_array(samples, "samples")
    check_1d(arr, "samples")
    check_min_samples(arr, 1, "samples")
    if arr.dtype.kind == 'c':
        raise ValidationError("samples: complex values have no ordering")
    values = arr.tolist()
    if any(v != v for v in values):
        raise ValidationError("samples: NaN values have no ordering")
    return values


def _select(values: list[float], k: int) -> float:
    """k-th smallest (0-based) of values; reorders values in place."""
    lo, hi = 0, len(values) - 1
    while lo < hi:
        mid = (lo + hi) // 2

        # median of three: values[lo] <= values[mid] <= values[hi]
        if values[mid] < values[lo]:
            values[lo], values[mid] = values[mid], values[lo]
        if values[hi] < values[lo]:
            values[lo], values[hi] = values[hi], values[lo]
        if values[hi] < values[mid]:
            values[mid], values[hi] = values[hi], values[mid]
        pivot = values[mid]

        # Hoare partition: values[lo..j] <= pivot <= values[j+1..hi]
        i, j = lo - 1, hi + 1
        while True:
            i += 1
            while values[i] < pivot:
                i += 1
            j -= 1
            while values[j] > pivot:
                j -= 1
            if i >= j:
                break
            values[i], values[j] = values[j], values[i]

        if k <= j:
            hi = j
        else:
            lo = j + 1
    return values[lo]


def order_statistic(samples: ArrayLike, order: int) -> float:
    """
    The order-th smallest sample (1-based).

    Args:
        samples: 1D real samples, at least one
        order: Rank in 1..n

    Returns:
        The sample of that rank

    Raises:
        ValidationError: If samples is empty, contains NaN or complex
            values, or order is outside 1..n
    """
    values = _samples(samples)
    check_positive_int(order, "order")
    if order > len(values):
        raise ValidationError(f"order: must be in 1..{len(values)}, got {order}")
    return _select(values, int(order) - 1)


def median(samples: ArrayLike) -> float:
    """
    Sample median.

    The middle order statistic for odd n, the mean of the two middle order
    statistics for even n.

    Raises:
        ValidationError: If samples is empty or contains NaN
    """
    values = _samples(samples)
    n = len(values)
    upper = _select(values, n // 2)
    if n % 2 == 1:
        return upper
    # after selecting rank n // 2, everything left of it is no larger
    lower = max(values[:n // 2])
    return lower + (upper - lower) / 2
