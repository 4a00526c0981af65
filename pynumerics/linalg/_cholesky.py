"""
Cholesky decomposition of Hermitian positive definite matrices.

Row-by-row square-root recurrence producing lower-triangular L with
A = L L^H. The default path performs no validation: a matrix that is not
positive definite gives NaN on the diagonal of L, and the NaN flows into
every solve. ``check_spd=True`` selects a validated path for callers who
prefer an exception.
"""

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pynumerics.core.exceptions import NotPositiveDefiniteError
from pynumerics.core.validation import check_2d, check_array, check_square
from pynumerics.linalg._substitution import (
    as_column_block,
    back_substitution,
    forward_substitution,
    readonly,
)


@dataclass(frozen=True)
class CholeskyDecomposition:
    """
    Result of a Cholesky decomposition A = L L^H.

    Attributes:
        L: Lower-triangular factor with real diagonal
        is_positive_definite: Whether the input was Hermitian and every
            pivot came out positive
    """
    L: NDArray[Any]
    is_positive_definite: bool

    def solve(self, b: ArrayLike) -> NDArray[Any]:
        """
        Solve A X = b by forward and backward substitution.

        Args:
            b: Right-hand side, vector (n,) or matrix (n, k)

        Returns:
            Solution with the same number of dimensions as b

        Raises:
            DimensionError: If b has the wrong row count
        """
        n = self.L.shape[0]
        B, was_vector = as_column_block(b, n)
        Y = forward_substitution(self.L, B)
        X = back_substitution(self.L.conj().T, Y)
        return X[:, 0] if was_vector else X

    def determinant(self) -> float:
        """det(A) = prod(diag(L))^2."""
        with np.errstate(over='ignore', invalid='ignore'):
            return float(np.prod(np.diag(self.L).real) ** 2)


def cholesky(a: ArrayLike, check_spd: bool = False) -> CholeskyDecomposition:
    """
    Cholesky decomposition.

    Only the lower triangle of A is read.

    Args:
        a: Square Hermitian positive definite matrix (n x n)
        check_spd: Raise NotPositiveDefiniteError instead of returning a
            factor with NaN entries

    Returns:
        CholeskyDecomposition with read-only L

    Raises:
        DimensionError: If a is not a square 2D array
        NotPositiveDefiniteError: If check_spd is set and A is not Hermitian
            positive definite
    """
    A = check_array(a, "a")
    check_2d(A, "a")
    check_square(A, "a")
    n = A.shape[0]

    L = np.zeros_like(A)
    hermitian = bool(np.array_equal(A, A.conj().T))
    positive = True
    failed_at: int | None = None
    failed_pivot: float | None = None

    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        for j in range(n):
            d = 0.0
            for k in range(j):
                s = (A[j, k] - np.dot(L[j, :k], L[k, :k].conj())) / L[k, k]
                L[j, k] = s
                d += (s * np.conj(s)).real

            pivot = np.float64(A[j, j].real - d)
            if not pivot > 0 and failed_at is None:
                positive = False
                failed_at = j
                failed_pivot = float(pivot)
            L[j, j] = np.sqrt(pivot)

    is_spd = hermitian and positive
    if check_spd and not is_spd:
        if not hermitian:
            raise NotPositiveDefiniteError(
                "Matrix is not symmetric/Hermitian",
                matrix_name="A",
            )
        raise NotPositiveDefiniteError(
            f"Matrix is not positive definite: pivot {failed_at} is {failed_pivot}",
            matrix_name="A",
            pivot_index=failed_at,
            min_pivot=failed_pivot,
        )

    return CholeskyDecomposition(L=readonly(L), is_positive_definite=is_spd)
