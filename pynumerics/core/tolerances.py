"""
Tolerance tiers for numerical validation.

Defines precision expectations for the different kinds of computation:
- Exact kernels (table lookups, ULP stepping): machine precision
- Backward-stable decompositions: a few hundred ULPs relative to the norm
- Special functions: the accuracy of their series or rational kernels
- Approximations with a documented error bound (erf inverse)
- Iterative solvers with their own stopping tolerance (IRLS)

Used by the test suite to compare results against reference values.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ToleranceTier:
    """Tolerance specification for numerical comparison."""
    rtol: float
    atol: float
    name: str
    description: str


# Table values, exact recurrences
MACHINE = ToleranceTier(
    rtol=1e-15,
    atol=1e-300,
    name='machine',
    description='Round-off only',
)

# LU, QR, Cholesky, SVD, eigen reconstructions
DECOMPOSITION = ToleranceTier(
    rtol=1e-12,
    atol=1e-13,
    name='decomposition',
    description='Backward-stable factorization of a well-conditioned matrix',
)

# Gamma/beta/digamma kernels against reference values
SPECIAL_FUNCTION = ToleranceTier(
    rtol=1e-13,
    atol=1e-15,
    name='special_function',
    description='Series, continued fraction and rational approximations',
)

# Documented approximation bound (erf inverse, ~1.15e-9)
APPROXIMATION = ToleranceTier(
    rtol=1e-8,
    atol=1e-9,
    name='approximation',
    description='Closed-form approximation with a published error bound',
)

# Iteratively reweighted solves stopping at a fixed change threshold
ROBUST = ToleranceTier(
    rtol=1e-3,
    atol=1e-3,
    name='robust',
    description='Iterative solver with a coarse stopping rule',
)

_TIERS = {
    tier.name: tier
    for tier in (MACHINE, DECOMPOSITION, SPECIAL_FUNCTION, APPROXIMATION, ROBUST)
}


def select_tolerance(kind: str) -> ToleranceTier:
    """Select the tolerance tier for a kind of computation."""
    try:
        return _TIERS[kind]
    except KeyError:
        raise ValueError(
            f"Unknown tolerance kind {kind!r}, expected one of {sorted(_TIERS)}"
        ) from None
