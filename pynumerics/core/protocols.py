"""
Core protocols for pynumerics.

Structural interfaces for the collaborators the numeric core consumes but
does not own.

Design Principles:
    - Minimal contracts: prescribe only what's truly universal
    - Capability-driven: can_reset tells callers whether reset() works
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class UniformSource(Protocol):
    """
    A source of uniformly distributed doubles in [0, 1).

    Matrix.random and the histogram helpers draw from any object with this
    shape, so callers can plug in their own generators.
    """

    def next_double(self) -> float:
        """Next uniform double in [0, 1)."""
        ...

    @property
    def can_reset(self) -> bool:
        """Whether reset() restores the initial state."""
        ...

    def reset(self) -> None:
        """
        Restore the initial state.

        Raises:
            NotSupportedError: If the source cannot be reset
        """
        ...
