"""
Streaming mean and variance.

Welford's single-pass update keeps a running mean and the running sum of
squared deviations M2, so that samples can be added (and removed) one at
a time without storing them and without the cancellation of the naive
sum-of-squares formula.

Design principles:
    - O(1) memory, O(1) per update
    - Statistics that need more samples than are present return NaN
    - Removing from an empty accumulator raises ValidationError
"""

from __future__ import annotations

import math
from typing import Iterable

from pynumerics.core.exceptions import ValidationError
from pynumerics.core.validation import check_real_scalar


class Accumulator:
    """
    Welford accumulator for count, sum, mean and variance.

    Example:
        >>> acc = Accumulator()
        >>> acc.add_many(range(11))
        >>> acc.mean, acc.variance
        (5.0, 11.0)
    """

    __slots__ = ('_count', '_sum', '_mean', '_m2')

    def __init__(self, samples: Iterable[float] | None = None):
        self.clear()
        if samples is not None:
            self.add_many(samples)

    def clear(self) -> None:
        """Reset to the empty state."""
        self._count = 0
        self._sum = 0.0
        self._mean = 0.0
        self._m2 = 0.0

    def add(self, value: float) -> None:
        value = check_real_scalar(value, "value")
        self._count += 1
        self._sum += value
        delta = value - self._mean
        self._mean += delta / self._count
        self._m2 += delta * (value - self._mean)

    def add_many(self, values: Iterable[float]) -> None:
        for value in values:
            self.add(value)

    def remove(self, value: float) -> None:
        """
        Remove a previously added sample.

        The caller is responsible for only removing values that were added;
        the accumulator cannot verify this.

        Raises:
            ValidationError: If the accumulator is empty
        """
        if self._count == 0:
            raise ValidationError("remove: accumulator is empty")
        value = check_real_scalar(value, "value")

        if self._count == 1:
            self.clear()
            return

        self._count -= 1
        self._sum -= value
        delta = value - self._mean
        self._mean -= delta / self._count
        self._m2 -= delta * (value - self._mean)

        if self._count == 1:
            # a single sample has no spread
            self._mean = self._sum
            self._m2 = 0.0

    def remove_many(self, values: Iterable[float]) -> None:
        for value in values:
            self.remove(value)

    # === Statistics ===

    @property
    def count(self) -> int:
        return self._count

    @property
    def sum(self) -> float:
        return self._sum

    @property
    def mean(self) -> float:
        """Arithmetic mean (NaN when empty)."""
        if self._count == 0:
            return math.nan
        return self._mean

    @property
    def variance(self) -> float:
        """Unbiased sample variance, M2 / (n - 1) (NaN for n < 2)."""
        if self._count < 2:
            return math.nan
        return max(self._m2, 0.0) / (self._count - 1)

    @property
    def population_variance(self) -> float:
        """Population variance, M2 / n (NaN when empty)."""
        if self._count == 0:
            return math.nan
        return max(self._m2, 0.0) / self._count

    @property
    def std(self) -> float:
        """Sample standard deviation."""
        return math.sqrt(self.variance)

    @property
    def sigma(self) -> float:
        """Population standard deviation."""
        return math.sqrt(self.population_variance)

    def __len__(self) -> int:
        return self._count

    def __repr__(self) -> str:
        return f"Accumulator(count={self._count}, mean={self.mean:.6g}, variance={self.variance:.6g})"
