"""
Histograms with optimal bucket boundaries.

A Histogram is a lazily sorted collection of Buckets. The ``optimal_*``
constructors place k buckets over a sample by dynamic programming over the
sorted values: ``cost[i, k]`` is the minimal cost of splitting the first
i+1 values into k+1 buckets, built bottom-up over the bucket count with
each cell scanning every candidate start of its last bucket, and the
histogram is read back along the backpointers from cell (n-1, k-1).
O(k n^2) time, O(k n) space.

Bucket costs:
    dispersion: sum of absolute deviations from the bucket mean
    variance: sum of squared deviations from the bucket mean
    freedom: bucket width times bucket depth
    squared freedom: squared bucket width times bucket depth

Usage:
    from pynumerics.statistics import Histogram

    h = Histogram.optimal_variance(10, samples)
    h.join_buckets()
    h.container_of(8.0).depth
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Any, Callable, Iterator

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pynumerics.core.exceptions import ValidationError
from pynumerics.core.precision import almost_equal_relative
from pynumerics.core.validation import check_1d, check_array, check_finite, check_positive_int
from pynumerics.statistics._search import binary_map_search


@dataclass(eq=False)
class Bucket:
    """
    Closed interval [lower_bound, upper_bound] holding ``depth`` samples.

    Equality is approximate (relative accuracy) on all three fields.
    """
    lower_bound: float
    upper_bound: float
    depth: float = 0.0

    @property
    def width(self) -> float:
        return self.upper_bound - self.lower_bound

    def compare_value(self, value: float) -> int:
        """-1 if value lies above the bucket, 1 if below, 0 if contained."""
        if value > self.upper_bound:
            return -1
        if value < self.lower_bound:
            return 1
        return 0

    def compare(self, other: Bucket) -> int:
        """
        Order relative to another bucket; nested buckets compare equal.

        Returns 1 if self starts at or after other without being contained
        in it, -1 if it starts before other and ends before other's end,
        otherwise 0.
        """
        if self.lower_bound >= other.lower_bound:
            if self.upper_bound <= other.upper_bound:
                return 0
            return 1
        if self.upper_bound >= other.upper_bound:
            return 0
        return -1

    def __lt__(self, other: Bucket) -> bool:
        return self.compare(other) < 0

    def __gt__(self, other: Bucket) -> bool:
        return self.compare(other) > 0

    def clone(self) -> Bucket:
        return Bucket(self.lower_bound, self.upper_bound, self.depth)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bucket):
            return NotImplemented
        return (
            almost_equal_relative(self.lower_bound, other.lower_bound)
            and almost_equal_relative(self.upper_bound, other.upper_bound)
            and almost_equal_relative(self.depth, other.depth)
        )

    __hash__ = None  # mutable

    def __str__(self) -> str:
        return f"[{self.lower_bound:g};{self.upper_bound:g}]"


class Histogram:
    """
    Ordered collection of buckets.

    Buckets may be added in any order; the collection sorts itself on the
    next read.
    """

    def __init__(self, buckets: list[Bucket] | None = None):
        self._buckets: list[Bucket] = []
        self._sorted = True
        for bucket in buckets or ():
            self.add(bucket)

    def add(self, bucket: Bucket) -> None:
        self._buckets.append(bucket)
        self._sorted = False

    def sort(self) -> None:
        self._buckets.sort(key=functools.cmp_to_key(Bucket.compare))
        self._sorted = True

    def _lazy_sort(self) -> None:
        if not self._sorted:
            self.sort()

    def container_of(self, value: float) -> Bucket:
        """
        The bucket containing value.

        Raises:
            ValidationError: If no bucket contains value
        """
        index = self.container_index_of(value)
        if index < 0:
            raise ValidationError(f"value: histogram has no bucket containing {value}")
        return self._buckets[index]

    def container_index_of(self, value: float) -> int:
        """Index of the bucket containing value, or ``~insertion_point``."""
        self._lazy_sort()
        return binary_map_search(self._buckets, value)

    def join_buckets(self) -> None:
        """
        Close the gaps between adjacent buckets by moving both boundaries
        to their midpoint.

        Raises:
            ValidationError: If the histogram is empty
        """
        if not self._buckets:
            raise ValidationError("join_buckets: histogram is empty")
        self._lazy_sort()
        for u, v in zip(self._buckets, self._buckets[1:]):
            midpoint = (u.upper_bound + v.lower_bound) / 2
            u.upper_bound = midpoint
            v.lower_bound = midpoint

    @property
    def total_depth(self) -> float:
        return sum(b.depth for b in self._buckets)

    def __len__(self) -> int:
        return len(self._buckets)

    def __getitem__(self, index: int) -> Bucket:
        self._lazy_sort()
        return self._buckets[index]

    def __setitem__(self, index: int, bucket: Bucket) -> None:
        self._lazy_sort()
        self._buckets[index] = bucket

    def __iter__(self) -> Iterator[Bucket]:
        self._lazy_sort()
        return iter(list(self._buckets))

    def __str__(self) -> str:
        return "".join(str(b) for b in self)

    def __repr__(self) -> str:
        return f"Histogram(buckets={len(self)}, total_depth={self.total_depth:g})"

    # === Optimal Constructors ===

    @classmethod
    def optimal_dispersion(cls, bucket_count: int, samples: ArrayLike) -> Histogram:
        """
        Buckets minimizing the summed absolute deviation from each bucket mean.

        Raises:
            ValidationError: If bucket_count is not positive, or there are
                fewer than max(bucket_count, 2) finite samples
        """
        values = _sorted_samples(samples, bucket_count, max(bucket_count, 2))
        n = values.shape[0]
        prefix = _prefix_sum(values)

        ranks = np.arange(n)
        means = prefix[1:] / (ranks + 1)
        # last position holding a value below the mean
        avg = np.maximum(0, np.searchsorted(values, means, side='left') - 1)
        first_column = prefix[1:] - 2 * prefix[avg + 1] + (2 * avg - ranks + 1) * means

        def bucket_cost(i: int, j: NDArray[np.intp], k: int) -> NDArray[np.floating[Any]]:
            total = prefix[i + 1] - prefix[j + 1]
            mean = total / (i - j)
            a = np.maximum(k - 1, np.searchsorted(values, mean, side='left') - 1)
            return prefix[i + 1] + prefix[j + 1] - 2 * prefix[a + 1] + (2 * a - i - j) * total / (i - j)

        return cls._build(values, bucket_count, first_column, bucket_cost)

    @classmethod
    def optimal_variance(cls, bucket_count: int, samples: ArrayLike) -> Histogram:
        """
        Buckets minimizing the summed squared deviation from each bucket mean.

        Raises:
            ValidationError: If bucket_count is not positive, or there are
                fewer than bucket_count finite samples
        """
        values = _sorted_samples(samples, bucket_count, bucket_count)
        n = values.shape[0]
        prefix = _prefix_sum(values)
        sq_prefix = _prefix_sum(values * values)

        first_column = sq_prefix[1:] - prefix[1:] * prefix[1:] / np.arange(1, n + 1)

        def bucket_cost(i: int, j: NDArray[np.intp], k: int) -> NDArray[np.floating[Any]]:
            total = prefix[i + 1] - prefix[j + 1]
            return sq_prefix[i + 1] - sq_prefix[j + 1] - total * total / (i - j)

        return cls._build(values, bucket_count, first_column, bucket_cost)

    @classmethod
    def optimal_freedom(cls, bucket_count: int, samples: ArrayLike) -> Histogram:
        """
        Buckets minimizing the summed width times depth.

        Raises:
            ValidationError: If bucket_count is not positive, or there are
                fewer than max(bucket_count, 2) finite samples
        """
        values = _sorted_samples(samples, bucket_count, max(bucket_count, 2))
        n = values.shape[0]
        first_column = (values - values[0]) * np.arange(1, n + 1)

        def bucket_cost(i: int, j: NDArray[np.intp], k: int) -> NDArray[np.floating[Any]]:
            return (values[i] - values[j + 1]) * (i - j)

        return cls._build(values, bucket_count, first_column, bucket_cost)

    @classmethod
    def optimal_squared_freedom(cls, bucket_count: int, samples: ArrayLike) -> Histogram:
        """
        Buckets minimizing the summed squared width times depth.

        Raises:
            ValidationError: If bucket_count is not positive, or there are
                fewer than max(bucket_count, 2) finite samples
        """
        values = _sorted_samples(samples, bucket_count, max(bucket_count, 2))
        n = values.shape[0]
        spread = values - values[0]
        first_column = spread * spread * np.arange(1, n + 1)

        def bucket_cost(i: int, j: NDArray[np.intp], k: int) -> NDArray[np.floating[Any]]:
            width = values[i] - values[j + 1]
            return width * width * (i - j)

        return cls._build(values, bucket_count, first_column, bucket_cost)

    @classmethod
    def _build(
        cls,
        values: NDArray[np.floating[Any]],
        bucket_count: int,
        first_column: NDArray[np.floating[Any]],
        bucket_cost: Callable[[int, NDArray[np.intp], int], NDArray[np.floating[Any]]],
    ) -> Histogram:
        n = values.shape[0]
        optimal_cost = np.zeros((n, bucket_count))
        # index of the first value of the last bucket
        last_bucket_index = np.zeros((n, bucket_count), dtype=np.intp)

        optimal_cost[:, 0] = first_column
        for k in range(1, bucket_count):
            for i in range(k, n):
                # j + 1 is the first value of the last bucket
                j = np.arange(k - 1, i)
                candidates = optimal_cost[j, k - 1] + bucket_cost(i, j, k)
                best = int(np.argmin(candidates))
                optimal_cost[i, k] = candidates[best]
                last_bucket_index[i, k] = j[best] + 1

        histogram = cls()
        index = n - 1
        for k in range(bucket_count - 1, -1, -1):
            start = int(last_bucket_index[index, k])
            histogram.add(Bucket(float(values[start]), float(values[index]), float(index - start + 1)))
            index = start - 1
        return histogram


def _sorted_samples(samples: ArrayLike, bucket_count: int, required: int) -> NDArray[np.floating[Any]]:
    check_positive_int(bucket_count, "bucket_count")
    values = check_array(samples, "samples")
    check_1d(values, "samples")
    if np.iscomplexobj(values):
        raise ValidationError("samples: complex values have no ordering")
    check_finite(values, "samples")
    if values.shape[0] < required:
        raise ValidationError(
            f"samples: need at least {required} values for {bucket_count} buckets, "
            f"got {values.shape[0]}"
        )
    return np.sort(values)


def _prefix_sum(values: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
    """prefix[i] is the sum of the first i values."""
    prefix = np.zeros(values.shape[0] + 1)
    prefix[1:] = np.cumsum(values)
    return prefix
