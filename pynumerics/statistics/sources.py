"""
Uniform random sources.

Implementations of the UniformSource protocol: a seeded, resettable
numpy Generator and the operating system's cryptographic source.

Usage:
    from pynumerics.statistics import GeneratorSource

    source = GeneratorSource(seed=42)
    source.next_double()
    source.fill(1000)
    source.reset()   # replays the same stream
"""

from __future__ import annotations

import random
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pynumerics.core.exceptions import NotSupportedError
from pynumerics.core.validation import check_nonnegative_int


class GeneratorSource:
    """
    Uniform doubles from a numpy Generator (PCG64).

    Without a seed, fresh OS entropy is drawn once at construction and
    kept, so reset() still replays the stream.
    """

    def __init__(self, seed: int | None = None):
        if seed is None:
            seed = int(np.random.SeedSequence().entropy)
        self._seed = seed
        self._rng = np.random.default_rng(seed)

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def can_reset(self) -> bool:
        return True

    def reset(self) -> None:
        self._rng = np.random.default_rng(self._seed)

    def next_double(self) -> float:
        return float(self._rng.random())

    def fill(self, n: int) -> NDArray[np.floating[Any]]:
        """n uniform doubles in [0, 1)."""
        check_nonnegative_int(n, "n")
        return self._rng.random(n)

    def __repr__(self) -> str:
        return f"GeneratorSource(seed={self._seed})"


class SystemSource:
    """Uniform doubles from the operating system's CSPRNG; not resettable."""

    def __init__(self) -> None:
        self._rng = random.SystemRandom()

    @property
    def can_reset(self) -> bool:
        return False

    def reset(self) -> None:
        """
        Raises:
            NotSupportedError: Always; an entropy stream cannot be replayed
        """
        raise NotSupportedError("SystemSource cannot be reset")

    def next_double(self) -> float:
        return self._rng.random()

    def fill(self, n: int) -> NDArray[np.floating[Any]]:
        """n uniform doubles in [0, 1)."""
        check_nonnegative_int(n, "n")
        return np.array([self._rng.random() for _ in range(n)], dtype=np.float64)

    def __repr__(self) -> str:
        return "SystemSource()"
