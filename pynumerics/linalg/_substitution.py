"""
Triangular substitution and right-hand-side handling shared by the
decomposition solvers.

Design principles:
    - Zero pivots divide through to inf/NaN; nothing here raises on
      numeric degeneracy
    - Right-hand sides may be vectors or matrices; the shape of the
      answer follows the shape of b
"""

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pynumerics.core.exceptions import DimensionError
from pynumerics.core.validation import check_array


def readonly(array: NDArray[Any]) -> NDArray[Any]:
    """Mark an array read-only and return it."""
    array.setflags(write=False)
    return array


def as_column_block(
    b: ArrayLike,
    rows: int,
    name: str = "b",
) -> tuple[NDArray[Any], bool]:
    """
    Validate a right-hand side and view it as a 2D block of columns.

    Returns:
        (B, was_vector) where B has shape (rows, k)

    Raises:
        DimensionError: If b has the wrong number of rows or is not 1D/2D
    """
    B = check_array(b, name)
    if B.ndim == 1:
        B = B.reshape(-1, 1)
        was_vector = True
    elif B.ndim == 2:
        was_vector = False
    else:
        raise DimensionError(
            f"{name}: expected 1D or 2D array, got {B.ndim}D with shape {B.shape}"
        )
    if B.shape[0] != rows:
        raise DimensionError(
            f"{name}: expected {rows} rows to match the matrix, got {B.shape[0]}"
        )
    return B, was_vector


def forward_substitution(
    L: NDArray[Any],
    B: NDArray[Any],
    unit_diagonal: bool = False,
) -> NDArray[Any]:
    """
    Solve L X = B for lower-triangular L (square, n x n).

    Args:
        L: Lower-triangular matrix; entries above the diagonal are ignored
        B: Right-hand side block (n x k)
        unit_diagonal: Treat the diagonal of L as ones

    Returns:
        X (n x k) in the common dtype of L and B
    """
    n = L.shape[0]
    X = B.astype(np.result_type(L, B), copy=True)
    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        for k in range(n):
            if not unit_diagonal:
                X[k, :] /= L[k, k]
            if k + 1 < n:
                X[k + 1:, :] -= np.outer(L[k + 1:, k], X[k, :])
    return X


def back_substitution(U: NDArray[Any], B: NDArray[Any]) -> NDArray[Any]:
    """
    Solve U X = B for upper-triangular U (square, n x n).

    Returns:
        X (n x k) in the common dtype of U and B
    """
    n = U.shape[0]
    X = B.astype(np.result_type(U, B), copy=True)
    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        for k in range(n - 1, -1, -1):
            X[k, :] /= U[k, k]
            if k > 0:
                X[:k, :] -= np.outer(U[:k, k], X[k, :])
    return X
