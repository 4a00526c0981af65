"""
Statistics layer.

Streaming moments, order statistics, optimal histograms and uniform random
sources.

Usage:
    from pynumerics.statistics import Accumulator, median, Histogram

    acc = Accumulator(range(11))
    acc.mean, acc.variance          # (5.0, 11.0)
    median([-1, 5, 0, -3, 10])      # 0.0
"""

from pynumerics.statistics.accumulator import Accumulator
from pynumerics.statistics.order import median, order_statistic
from pynumerics.statistics.histogram import Bucket, Histogram
from pynumerics.statistics._search import binary_map_search
from pynumerics.statistics.sources import GeneratorSource, SystemSource

__all__ = [
    "Accumulator",
    "order_statistic",
    "median",
    "Bucket",
    "Histogram",
    "binary_map_search",
    "GeneratorSource",
    "SystemSource",
]
