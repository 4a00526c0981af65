"""
LU decomposition with partial pivoting.

Left-looking (Crout/Doolittle, "dot product") Gaussian elimination: each
column is updated with the previously computed columns, then the largest
remaining entry in magnitude is chosen as pivot. Works for real and
complex input of any rectangular shape.

Design principles:
    - P A = L U always holds, even for singular A
    - Singular input yields zero pivots and inf/NaN solves, not errors,
      unless the caller asks for check_singular=True
"""

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pynumerics.core.exceptions import DimensionError, SingularMatrixError
from pynumerics.core.validation import check_2d, check_array, check_square
from pynumerics.linalg._substitution import (
    as_column_block,
    back_substitution,
    forward_substitution,
    readonly,
)


@dataclass(frozen=True)
class LUDecomposition:
    """
    Result of an LU decomposition P A = L U.

    Attributes:
        L: Unit lower-triangular factor (m x k, k = min(m, n))
        U: Upper-triangular factor (k x n)
        pivot: Row permutation; row i of P A is row pivot[i] of A
        pivot_sign: +1 or -1, the sign of the permutation
    """
    L: NDArray[Any]
    U: NDArray[Any]
    pivot: NDArray[np.intp]
    pivot_sign: int

    @property
    def shape(self) -> tuple[int, int]:
        return (self.L.shape[0], self.U.shape[1])

    @property
    def permutation_matrix(self) -> NDArray[np.floating[Any]]:
        """Permutation matrix P with P A = L U."""
        m = self.L.shape[0]
        P = np.zeros((m, m))
        P[np.arange(m), self.pivot] = 1.0
        return P

    @property
    def is_nonsingular(self) -> bool:
        """True if no diagonal entry of U is exactly zero."""
        return bool(np.all(np.diag(self.U) != 0))

    def determinant(self) -> float | complex:
        """
        Determinant of the decomposed matrix.

        Raises:
            DimensionError: If the matrix is not square
        """
        m, n = self.shape
        if m != n:
            raise DimensionError(
                f"determinant: requires a square matrix, got shape {self.shape}"
            )
        with np.errstate(over='ignore', invalid='ignore'):
            value = self.pivot_sign * np.prod(np.diag(self.U))
        if np.iscomplexobj(value):
            return complex(value)
        return float(value)

    def solve(self, b: ArrayLike, check_singular: bool = False) -> NDArray[Any]:
        """
        Solve A X = b.

        Args:
            b: Right-hand side, vector (m,) or matrix (m, k)
            check_singular: Raise instead of returning inf/NaN when U has a
                zero pivot

        Returns:
            Solution with the same number of dimensions as b

        Raises:
            DimensionError: If A is not square or b has the wrong row count
            SingularMatrixError: If check_singular is set and A is singular
        """
        m, n = self.shape
        if m != n:
            raise DimensionError(
                f"solve: LU solve requires a square matrix, got shape {self.shape}"
            )
        B, was_vector = as_column_block(b, m)

        if check_singular and not self.is_nonsingular:
            rank = int(np.sum(np.diag(self.U) != 0))
            raise SingularMatrixError(
                "Matrix is singular: U has a zero pivot",
                matrix_name="A",
                rank=rank,
                expected_rank=n,
            )

        Y = forward_substitution(self.L, B[self.pivot, :], unit_diagonal=True)
        X = back_substitution(self.U, Y)
        return X[:, 0] if was_vector else X


def lu(a: ArrayLike) -> LUDecomposition:
    """
    Compute the LU decomposition of a matrix with partial pivoting.

    Args:
        a: Matrix to decompose (m x n), real or complex

    Returns:
        LUDecomposition with read-only L, U and pivot

    Raises:
        ValidationError: If a is not numeric
        DimensionError: If a is not 2D
    """
    A = check_array(a, "a")
    check_2d(A, "a")
    m, n = A.shape

    LU = A.copy()
    piv = np.arange(m)
    pivot_sign = 1

    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        for j in range(n):
            col = LU[:, j].copy()

            # apply previous transformations to column j
            for i in range(m):
                kmax = min(i, j)
                col[i] -= np.dot(LU[i, :kmax], col[:kmax])
                LU[i, j] = col[i]

            if j < m:
                p = j + int(np.argmax(np.abs(col[j:])))
                if p != j:
                    LU[[p, j], :] = LU[[j, p], :]
                    piv[[p, j]] = piv[[j, p]]
                    pivot_sign = -pivot_sign

                if LU[j, j] != 0:
                    LU[j + 1:, j] /= LU[j, j]

    k = min(m, n)
    L = np.tril(LU[:, :k], -1)
    L[np.arange(k), np.arange(k)] = 1
    U = np.triu(LU[:k, :])

    return LUDecomposition(
        L=readonly(L),
        U=readonly(U),
        pivot=readonly(piv),
        pivot_sign=pivot_sign,
    )


def lu_solve(a: ArrayLike, b: ArrayLike, check_singular: bool = False) -> NDArray[Any]:
    """
    Solve a square system A X = b through LU.

    Raises:
        DimensionError: If A is not square or shapes disagree
        SingularMatrixError: If check_singular is set and A is singular
    """
    A = check_array(a, "a")
    check_2d(A, "a")
    check_square(A, "a")
    return lu(A).solve(b, check_singular=check_singular)
