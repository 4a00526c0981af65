"""
Tests for the Welford streaming accumulator.

Validates:
    - Mean, variance and sum on reference data
    - Removal restores the statistics of the remaining samples
    - NaN for statistics that need more samples than present
    - Numerical stability with a large common offset
"""

import math

import numpy as np
import pytest

from pynumerics.core.exceptions import ValidationError
from pynumerics.statistics import Accumulator


class TestAccumulator:
    """Adding and removing samples one at a time."""

    def test_reference(self):
        acc = Accumulator(range(11))
        assert acc.count == 11
        assert acc.mean == pytest.approx(5.0, rel=1e-14)
        assert acc.variance == pytest.approx(11.0, rel=1e-14)
        assert acc.sum == 55.0
        assert acc.population_variance == pytest.approx(10.0, rel=1e-14)
        assert acc.std == pytest.approx(math.sqrt(11.0), rel=1e-14)
        assert acc.sigma == pytest.approx(math.sqrt(10.0), rel=1e-14)

    def test_remove(self):
        acc = Accumulator(range(11))
        acc.remove(9.0)
        acc.remove(4.0)
        assert len(acc) == 9
        assert acc.mean == pytest.approx(14.0 / 3.0, rel=1e-14)
        assert acc.variance == pytest.approx(23.0 / 2.0, rel=1e-14)
        assert acc.sum == 42.0

        acc.add_many([9.0, 4.0])
        assert acc.mean == pytest.approx(5.0, rel=1e-14)
        assert acc.variance == pytest.approx(11.0, rel=1e-14)
        assert acc.sum == 55.0

    def test_remove_many_to_single_sample(self):
        acc = Accumulator([2.0, 3.0, 7.0])
        acc.remove_many([2.0, 3.0])
        assert acc.count == 1
        assert acc.mean == 7.0
        assert math.isnan(acc.variance)
        assert acc.population_variance == 0.0

    def test_remove_last_sample(self):
        acc = Accumulator([4.0])
        acc.remove(4.0)
        assert acc.count == 0
        assert math.isnan(acc.mean)

    def test_remove_from_empty(self):
        with pytest.raises(ValidationError, match="empty"):
            Accumulator().remove(1.0)

    @pytest.mark.parametrize("value", [1j, "4.0", True])
    def test_rejects_non_real(self, value):
        acc = Accumulator([1.0, 2.0])
        with pytest.raises(ValidationError, match="value: expected a real number"):
            acc.add(value)
        with pytest.raises(ValidationError, match="value: expected a real number"):
            acc.remove(value)
        assert acc.count == 2

    def test_empty(self):
        acc = Accumulator()
        assert acc.count == 0
        assert acc.sum == 0.0
        assert math.isnan(acc.mean)
        assert math.isnan(acc.variance)
        assert math.isnan(acc.population_variance)

    def test_single_sample(self):
        acc = Accumulator([3.5])
        assert acc.mean == 3.5
        assert math.isnan(acc.variance)
        assert math.isnan(acc.std)

    def test_clear(self):
        acc = Accumulator([1.0, 2.0])
        acc.clear()
        assert len(acc) == 0
        assert math.isnan(acc.mean)

    def test_matches_numpy(self, rng):
        data = rng.standard_normal(500) * 3.0 + 2.0
        acc = Accumulator(data)
        assert acc.mean == pytest.approx(np.mean(data), rel=1e-12)
        assert acc.variance == pytest.approx(np.var(data, ddof=1), rel=1e-12)

    def test_large_offset(self):
        acc = Accumulator([1e9 + 4, 1e9 + 7, 1e9 + 13, 1e9 + 16])
        assert acc.mean == pytest.approx(1e9 + 10, rel=1e-14)
        assert acc.variance == pytest.approx(30.0, rel=1e-9)

    def test_repr(self):
        assert repr(Accumulator([1.0, 3.0])) == "Accumulator(count=2, mean=2, variance=2)"
