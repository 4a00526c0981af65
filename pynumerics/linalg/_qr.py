"""
QR decomposition by Householder reflections.

Column k is reflected onto a multiple of e_k; the reflection vectors are
kept so that Q can be formed on demand or applied implicitly when solving
least-squares problems. Real and complex input share one code path
(conjugation is the identity for reals).

Design principles:
    - Reduced (m x k) and complete (m x m) Q, selected with ``mode``
    - Numerical rank from the R diagonal, relative to its first entry
    - Rank-deficient systems solve to inf/NaN unless check_rank=True
"""

from dataclasses import dataclass
from typing import Any, Literal

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pynumerics.core.exceptions import (
    NotSupportedError,
    SingularMatrixError,
    ValidationError,
)
from pynumerics.core.precision import hypot
from pynumerics.core.validation import check_2d, check_array
from pynumerics.linalg._substitution import as_column_block, back_substitution, readonly


@dataclass(frozen=True)
class QRDecomposition:
    """
    Result of a QR decomposition A = Q R.

    Attributes:
        Q: Orthogonal/unitary factor, m x k ('reduced') or m x m ('complete')
        R: Upper-triangular factor, k x n ('reduced') or m x n ('complete')
        H: Householder vectors, column j holds the reflector of step j
        rank: Numerical rank determined from the R diagonal
    """
    Q: NDArray[Any]
    R: NDArray[Any]
    H: NDArray[Any]
    rank: int

    @property
    def shape(self) -> tuple[int, int]:
        return (self.Q.shape[0], self.R.shape[1])

    @property
    def is_full_rank(self) -> bool:
        """True if no diagonal entry of R is exactly zero and m >= n."""
        m, n = self.shape
        if m < n:
            return False
        return bool(np.all(np.diag(self.R)[:n] != 0))

    def apply_qh(self, b: ArrayLike) -> NDArray[Any]:
        """
        Compute Q^H b implicitly from the stored reflectors.

        Raises:
            DimensionError: If b has the wrong number of rows
        """
        m = self.shape[0]
        B, was_vector = as_column_block(b, m)
        X = _apply_reflectors(self.H, B)
        return X[:, 0] if was_vector else X

    def solve(self, b: ArrayLike, check_rank: bool = False) -> NDArray[Any]:
        """
        Least-squares solution of A X = b, minimizing ||A X - b||_2.

        Args:
            b: Right-hand side, vector (m,) or matrix (m, k)
            check_rank: Raise instead of returning inf/NaN when R has a
                zero diagonal entry

        Returns:
            X with n rows and the same number of dimensions as b

        Raises:
            NotSupportedError: If A has more columns than rows
            DimensionError: If b has the wrong row count
            SingularMatrixError: If check_rank is set and A is rank deficient
        """
        m, n = self.shape
        if m < n:
            raise NotSupportedError(
                f"solve: under-determined system with shape {self.shape} is not supported"
            )
        B, was_vector = as_column_block(b, m)

        if check_rank and not self.is_full_rank:
            raise SingularMatrixError(
                f"Matrix is rank deficient: rank={self.rank}, expected {n}",
                matrix_name="A",
                rank=self.rank,
                expected_rank=n,
            )

        Y = _apply_reflectors(self.H, B)
        X = back_substitution(self.R[:n, :n], Y[:n, :])
        return X[:, 0] if was_vector else X


def _apply_reflectors(H: NDArray[Any], B: NDArray[Any]) -> NDArray[Any]:
    X = B.astype(np.result_type(H, B), copy=True)
    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        for k in range(H.shape[1]):
            v = H[k:, k]
            if v[0] != 0:
                s = -(v.conj() @ X[k:, :]) / v[0]
                X[k:, :] += np.outer(v, s)
    return X


def qr(
    a: ArrayLike,
    mode: Literal['reduced', 'complete'] = 'reduced'
) -> QRDecomposition:
    """
    QR decomposition by Householder reflections.

    Computes A = Q R where Q has orthonormal columns and R is upper
    triangular (upper trapezoidal when m < n).

    Args:
        a: Matrix to decompose (m x n), real or complex
        mode: 'reduced' for economy QR (Q is m x k, R is k x n where
              k = min(m, n)); 'complete' for full QR (Q is m x m, R is m x n)

    Returns:
        QRDecomposition with Q, R, reflectors and numerical rank

    Raises:
        ValidationError: If a is not numeric or mode is unknown
        DimensionError: If a is not 2D
    """
    if mode not in ('reduced', 'complete'):
        raise ValidationError(f"mode: expected 'reduced' or 'complete', got {mode!r}")

    A = check_array(a, "a")
    check_2d(A, "a")
    m, n = A.shape
    p = min(m, n)

    QR = A.copy()
    r_diag = np.zeros(p, dtype=QR.dtype)

    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        for k in range(p):
            # 2-norm of the k-th column below the diagonal
            nrm = 0.0
            for i in range(k, m):
                nrm = hypot(nrm, QR[i, k])

            alpha = nrm
            if nrm != 0.0:
                lead = QR[k, k]
                if np.iscomplexobj(QR):
                    phase = lead / abs(lead) if lead != 0 else 1.0
                    alpha = nrm * phase
                elif lead < 0:
                    alpha = -nrm

                QR[k:, k] /= alpha
                QR[k, k] += 1

                if k + 1 < n:
                    v = QR[k:, k]
                    s = -(v.conj() @ QR[k:, k + 1:]) / v[0]
                    QR[k:, k + 1:] += np.outer(v, s)

            r_diag[k] = -alpha

    H = np.tril(QR[:, :p])

    R = np.triu(QR[:p, :], 1)
    R[np.arange(p), np.arange(p)] = r_diag

    q_cols = m if mode == 'complete' else p
    Q = np.eye(m, q_cols, dtype=QR.dtype)
    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        for k in range(p - 1, -1, -1):
            v = H[k:, k]
            if v[0] != 0:
                s = -(v.conj() @ Q[k:, k:]) / v[0]
                Q[k:, k:] += np.outer(v, s)

    if mode == 'complete' and m > p:
        R = np.vstack([R, np.zeros((m - p, n), dtype=R.dtype)])

    diag_R = np.abs(r_diag)
    if len(diag_R) > 0 and diag_R[0] > 0:
        # tolerance based on matrix size and machine epsilon
        tol = max(m, n) * np.finfo(np.float64).eps * diag_R[0]
        rank = int(np.sum(diag_R > tol))
    else:
        rank = 0

    return QRDecomposition(Q=readonly(Q), R=readonly(R), H=readonly(H), rank=rank)


def qr_solve(
    a: ArrayLike,
    b: ArrayLike,
    check_rank: bool = False
) -> NDArray[Any]:
    """
    Least-squares solve of A X = b via Householder QR.

    Raises:
        NotSupportedError: If A has more columns than rows
        DimensionError: If b has the wrong row count
        SingularMatrixError: If check_rank is set and A is rank deficient
    """
    return qr(a).solve(b, check_rank=check_rank)
