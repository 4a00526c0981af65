"""
Singular value decomposition.

Golub-Kahan bidiagonalization by alternating column and row Householder
transformations, followed by implicitly shifted QR sweeps on the
bidiagonal form with deflation of negligible entries (LINPACK dsvdc
lineage). Wide matrices are handled by decomposing the transpose and
swapping the singular vector sets.

Design principles:
    - Singular values are non-negative and sorted in descending order
    - A = U diag(s) V^T with orthonormal columns in U and V
    - Hitting the sweep cap is reported with a RuntimeWarning, never an
      exception; the current iterate is accepted
"""

import math
import warnings
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pynumerics.core.exceptions import NotSupportedError
from pynumerics.core.precision import POSITIVE_RELATIVE_ACCURACY, hypot
from pynumerics.core.validation import check_2d, check_array
from pynumerics.linalg._substitution import readonly

# QR sweeps allowed per singular value before it is accepted as converged
MAX_SWEEPS_PER_VALUE = 75


@dataclass(frozen=True)
class SingularValueDecomposition:
    """
    Result of a singular value decomposition A = U S V^T.

    Attributes:
        U: Left singular vectors (m x k, k = min(m, n))
        singular_values: Singular values in descending order (k,)
        V: Right singular vectors (n x k)
    """
    U: NDArray[np.floating[Any]]
    singular_values: NDArray[np.floating[Any]]
    V: NDArray[np.floating[Any]]

    @property
    def shape(self) -> tuple[int, int]:
        return (self.U.shape[0], self.V.shape[0])

    @property
    def S(self) -> NDArray[np.floating[Any]]:
        """Diagonal matrix of singular values (k x k)."""
        return np.diag(self.singular_values)

    @property
    def left_singular_vectors(self) -> NDArray[np.floating[Any]]:
        return self.U

    @property
    def right_singular_vectors(self) -> NDArray[np.floating[Any]]:
        return self.V

    @property
    def norm2(self) -> float:
        """Two-norm: the largest singular value."""
        if self.singular_values.size == 0:
            return 0.0
        return float(self.singular_values[0])

    @property
    def condition(self) -> float:
        """Ratio of largest to smallest singular value (inf if singular, NaN if empty)."""
        if self.singular_values.size == 0:
            return math.nan
        m, n = self.shape
        with np.errstate(divide='ignore', invalid='ignore'):
            return float(np.float64(self.singular_values[0]) / self.singular_values[min(m, n) - 1])

    @property
    def rank(self) -> int:
        """Number of singular values above max(m, n) * s[0] * eps."""
        if self.singular_values.size == 0:
            return 0
        m, n = self.shape
        tol = max(m, n) * self.singular_values[0] * POSITIVE_RELATIVE_ACCURACY
        return int(np.sum(self.singular_values > tol))


def svd(a: ArrayLike) -> SingularValueDecomposition:
    """
    Singular value decomposition of a real matrix.

    Args:
        a: Matrix to decompose (m x n)

    Returns:
        SingularValueDecomposition with read-only U, singular values and V

    Raises:
        DimensionError: If a is not 2D
        NotSupportedError: If a is complex
    """
    A = check_array(a, "a")
    check_2d(A, "a")
    if np.iscomplexobj(A):
        raise NotSupportedError("svd: complex matrices are not supported")

    m, n = A.shape
    if m == 0 or n == 0:
        return SingularValueDecomposition(
            U=readonly(np.zeros((m, 0))),
            singular_values=readonly(np.zeros(0)),
            V=readonly(np.zeros((n, 0))),
        )

    transpose = A.shape[0] < A.shape[1]
    work_a = A.T.copy() if transpose else A.copy()

    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        U, s, V = _golub_kahan(work_a)

    if transpose:
        U, V = V, U

    return SingularValueDecomposition(U=readonly(U), singular_values=readonly(s), V=readonly(V))


def _golub_kahan(
    a: NDArray[np.floating[Any]],
) -> tuple[NDArray[np.floating[Any]], NDArray[np.floating[Any]], NDArray[np.floating[Any]]]:
    """Decompose a (m >= n) in place; returns U (m x n), s (n,), V (n x n)."""
    m, n = a.shape
    nu = min(m, n)
    s = np.zeros(min(m + 1, n))
    U = np.zeros((m, nu))
    V = np.zeros((n, n))
    e = np.zeros(n)
    work = np.zeros(m)

    # Reduce A to bidiagonal form, storing the diagonal in s and the
    # super-diagonal in e.
    nct = min(m - 1, n)
    nrt = max(0, min(n - 2, m))
    for k in range(max(nct, nrt)):
        if k < nct:
            # column transformation, k-th diagonal into s[k]
            s[k] = 0.0
            for i in range(k, m):
                s[k] = hypot(s[k], a[i, k])
            if s[k] != 0.0:
                if a[k, k] < 0.0:
                    s[k] = -s[k]
                a[k:, k] /= s[k]
                a[k, k] += 1.0
            s[k] = -s[k]

        for j in range(k + 1, n):
            if k < nct and s[k] != 0.0:
                t = -np.dot(a[k:, k], a[k:, j]) / a[k, k]
                a[k:, j] += t * a[k:, k]
            # k-th row of A, used for the row transformation
            e[j] = a[k, j]

        if k < nct:
            U[k:, k] = a[k:, k]

        if k < nrt:
            # row transformation, k-th super-diagonal into e[k]
            e[k] = 0.0
            for i in range(k + 1, n):
                e[k] = hypot(e[k], e[i])
            if e[k] != 0.0:
                if e[k + 1] < 0.0:
                    e[k] = -e[k]
                e[k + 1:] /= e[k]
                e[k + 1] += 1.0
            e[k] = -e[k]

            if k + 1 < m and e[k] != 0.0:
                work[k + 1:] = a[k + 1:, k + 1:] @ e[k + 1:]
                for j in range(k + 1, n):
                    t = -e[j] / e[k + 1]
                    a[k + 1:, j] += t * work[k + 1:]

            V[k + 1:, k] = e[k + 1:]

    # Final bidiagonal matrix of order p
    p = min(n, m + 1)
    if nct < n:
        s[nct] = a[nct, nct]
    if m < p:
        s[p - 1] = 0.0
    if nrt + 1 < p:
        e[nrt] = a[nrt, p - 1]
    e[p - 1] = 0.0

    # Generate U
    for j in range(nct, nu):
        U[:, j] = 0.0
        U[j, j] = 1.0
    for k in range(nct - 1, -1, -1):
        if s[k] != 0.0:
            for j in range(k + 1, nu):
                t = -np.dot(U[k:, k], U[k:, j]) / U[k, k]
                U[k:, j] += t * U[k:, k]
            U[k:, k] = -U[k:, k]
            U[k, k] = 1.0 + U[k, k]
            U[:k, k] = 0.0
        else:
            U[:, k] = 0.0
            U[k, k] = 1.0

    # Generate V
    for k in range(n - 1, -1, -1):
        if k < nrt and e[k] != 0.0:
            for j in range(k + 1, nu):
                t = -np.dot(V[k + 1:, k], V[k + 1:, j]) / V[k + 1, k]
                V[k + 1:, j] += t * V[k + 1:, k]
        V[:, k] = 0.0
        V[k, k] = 1.0

    _bidiagonal_qr(s, e, U, V, p, m, n)
    return U, s[:nu].copy(), V


def _rotate_columns(X: NDArray[np.floating[Any]], j: int, k: int, cs: float, sn: float) -> None:
    """Columns (j, k) <- (cs*x_j + sn*x_k, -sn*x_j + cs*x_k)."""
    xj = X[:, j].copy()
    X[:, j] = cs * xj + sn * X[:, k]
    X[:, k] = -sn * xj + cs * X[:, k]


def _bidiagonal_qr(
    s: NDArray[np.floating[Any]],
    e: NDArray[np.floating[Any]],
    U: NDArray[np.floating[Any]],
    V: NDArray[np.floating[Any]],
    p: int,
    m: int,
    n: int,
) -> None:
    pp = p - 1
    iteration = 0
    eps = POSITIVE_RELATIVE_ACCURACY
    tiny = 2.0 ** -966
    warned = False

    while p > 0:
        if iteration >= MAX_SWEEPS_PER_VALUE:
            if not warned:
                warnings.warn(
                    f"SVD did not converge within {MAX_SWEEPS_PER_VALUE} sweeps "
                    f"for singular value {p - 1}; accepting current iterate",
                    RuntimeWarning,
                    stacklevel=4,
                )
                warned = True
            if p >= 2:
                e[p - 2] = 0.0

        # Inspect for negligible elements in s and e. Cases:
        #   deflate: s[p-1] and e[k-1] negligible, k < p
        #   split:   s[k] negligible, k < p
        #   qr:      e[k-1] negligible, k < p, s[k..p-1] not negligible
        #   done:    e[p-2] negligible
        k = p - 2
        while k >= 0:
            if abs(e[k]) <= tiny + eps * (abs(s[k]) + abs(s[k + 1])):
                e[k] = 0.0
                break
            k -= 1

        if k == p - 2:
            step = 'converged'
        else:
            ks = p - 1
            while ks > k:
                t = (abs(e[ks]) if ks != p else 0.0) + (abs(e[ks - 1]) if ks != k + 1 else 0.0)
                if abs(s[ks]) <= tiny + eps * t:
                    s[ks] = 0.0
                    break
                ks -= 1
            if ks == k:
                step = 'qr'
            elif ks == p - 1:
                step = 'deflate'
            else:
                step = 'split'
                k = ks
        k += 1

        if step == 'deflate':
            # deflate negligible s[p-1]
            f = e[p - 2]
            e[p - 2] = 0.0
            for j in range(p - 2, k - 1, -1):
                t = hypot(s[j], f)
                cs = s[j] / t
                sn = f / t
                s[j] = t
                if j != k:
                    f = -sn * e[j - 1]
                    e[j - 1] = cs * e[j - 1]
                _rotate_columns(V, j, p - 1, cs, sn)

        elif step == 'split':
            # split at negligible s[k-1]
            f = e[k - 1]
            e[k - 1] = 0.0
            for j in range(k, p):
                t = hypot(s[j], f)
                cs = s[j] / t
                sn = f / t
                s[j] = t
                f = -sn * e[j]
                e[j] = cs * e[j]
                _rotate_columns(U, j, k - 1, cs, sn)

        elif step == 'qr':
            # shift from the trailing 2x2 block
            scale = max(abs(s[p - 1]), abs(s[p - 2]), abs(e[p - 2]), abs(s[k]), abs(e[k]))
            sp = s[p - 1] / scale
            spm1 = s[p - 2] / scale
            epm1 = e[p - 2] / scale
            sk = s[k] / scale
            ek = e[k] / scale
            b = ((spm1 + sp) * (spm1 - sp) + epm1 * epm1) / 2.0
            c = (sp * epm1) * (sp * epm1)
            shift = 0.0
            if b != 0.0 or c != 0.0:
                shift = np.sqrt(b * b + c)
                if b < 0.0:
                    shift = -shift
                shift = c / (b + shift)
            f = (sk + sp) * (sk - sp) + shift
            g = sk * ek

            # chase zeros
            for j in range(k, p - 1):
                t = hypot(f, g)
                cs = f / t
                sn = g / t
                if j != k:
                    e[j - 1] = t
                f = cs * s[j] + sn * e[j]
                e[j] = cs * e[j] - sn * s[j]
                g = sn * s[j + 1]
                s[j + 1] = cs * s[j + 1]
                _rotate_columns(V, j, j + 1, cs, sn)

                t = hypot(f, g)
                cs = f / t
                sn = g / t
                s[j] = t
                f = cs * e[j] + sn * s[j + 1]
                s[j + 1] = -sn * e[j] + cs * s[j + 1]
                g = sn * e[j + 1]
                e[j + 1] = cs * e[j + 1]
                if j < m - 1:
                    _rotate_columns(U, j, j + 1, cs, sn)

            e[p - 2] = f
            iteration += 1

        else:
            # make the singular value positive
            if s[k] <= 0.0:
                s[k] = -s[k] if s[k] < 0.0 else 0.0
                V[:pp + 1, k] = -V[:pp + 1, k]

            # order the singular values
            while k < pp:
                if s[k] >= s[k + 1]:
                    break
                s[k], s[k + 1] = s[k + 1], s[k]
                if k < n - 1:
                    V[:, [k, k + 1]] = V[:, [k + 1, k]]
                if k < m - 1:
                    U[:, [k, k + 1]] = U[:, [k + 1, k]]
                k += 1

            iteration = 0
            p -= 1
