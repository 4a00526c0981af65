"""
Eigenvalue decomposition of real square matrices.

Symmetric input (tested by exact equality with the transpose) is reduced to
tridiagonal form by Householder transformations and diagonalized with the
implicit QL algorithm; eigenvalues come out ascending and the eigenvector
matrix is orthogonal. Other input is reduced to upper Hessenberg form and
brought to real Schur form by the Francis double-shift QR algorithm,
followed by back-substitution for the eigenvectors (EISPACK tred2, tql2,
orthes and hqr2 lineage).

Design principles:
    - Complex conjugate pairs appear as consecutive entries with imaginary
      parts of opposite sign
    - A V = V D holds with D the real block diagonal matrix
    - Hitting the sweep cap is reported with a RuntimeWarning, never an
      exception; the current iterate is accepted
"""

import warnings
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pynumerics.core.exceptions import DimensionError, NotSupportedError
from pynumerics.core.precision import POSITIVE_RELATIVE_ACCURACY, hypot
from pynumerics.core.validation import check_1d, check_2d, check_array, check_square
from pynumerics.linalg._substitution import readonly

# QR/QL sweeps allowed per eigenvalue before it is accepted as converged
MAX_SWEEPS_PER_VALUE = 75


@dataclass(frozen=True)
class EigenvalueDecomposition:
    """
    Result of an eigenvalue decomposition A V = V D.

    Attributes:
        real_eigenvalues: Real parts of the eigenvalues (n,)
        imag_eigenvalues: Imaginary parts of the eigenvalues (n,)
        eigenvectors: Columns are the (real) eigenvectors; for a complex
            pair at (i, i+1) columns i and i+1 hold the real and imaginary
            parts of the vector belonging to the eigenvalue with positive
            imaginary part
        is_symmetric: Whether the symmetric algorithm was used
    """
    real_eigenvalues: NDArray[np.floating[Any]]
    imag_eigenvalues: NDArray[np.floating[Any]]
    eigenvectors: NDArray[np.floating[Any]]
    is_symmetric: bool

    @property
    def eigenvalues(self) -> NDArray[np.complexfloating[Any, Any]]:
        """Eigenvalues as a complex array."""
        return self.real_eigenvalues + 1j * self.imag_eigenvalues

    @property
    def block_diagonal(self) -> NDArray[np.floating[Any]]:
        """
        Real block diagonal eigenvalue matrix D.

        Real eigenvalues sit on the diagonal; a complex pair u +/- iv forms
        the 2x2 block [[u, v], [-v, u]].
        """
        d = self.real_eigenvalues
        e = self.imag_eigenvalues
        n = d.shape[0]
        D = np.diag(d)
        for i in range(n):
            if e[i] > 0:
                D[i, i + 1] = e[i]
            elif e[i] < 0:
                D[i, i - 1] = e[i]
        return D


def eigen(a: ArrayLike) -> EigenvalueDecomposition:
    """
    Eigenvalues and eigenvectors of a real square matrix.

    Args:
        a: Square matrix (n x n)

    Returns:
        EigenvalueDecomposition with read-only arrays

    Raises:
        DimensionError: If a is not a square 2D array
        NotSupportedError: If a is complex
    """
    A = check_array(a, "a")
    check_2d(A, "a")
    check_square(A, "a")
    if np.iscomplexobj(A):
        raise NotSupportedError("eigen: complex matrices are not supported")

    n = A.shape[0]
    d = np.zeros(n)
    e = np.zeros(n)
    symmetric = bool(np.array_equal(A, A.T))

    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        if symmetric:
            V = A.copy()
            _tridiagonalize(V, d, e)
            _tridiagonal_ql(V, d, e)
        else:
            H = A.copy()
            V = _hessenberg(H)
            _schur(H, V, d, e)

    return EigenvalueDecomposition(
        real_eigenvalues=readonly(d),
        imag_eigenvalues=readonly(e),
        eigenvectors=readonly(V),
        is_symmetric=symmetric,
    )


def eigen_tridiagonal(d: ArrayLike, e: ArrayLike) -> EigenvalueDecomposition:
    """
    Eigenvalue decomposition of a symmetric tridiagonal matrix.

    Args:
        d: Diagonal (n,)
        e: Sub-diagonal (n-1,)

    Returns:
        EigenvalueDecomposition with ascending real eigenvalues

    Raises:
        DimensionError: If the lengths of d and e do not match
    """
    diag = check_array(d, "d")
    off = check_array(e, "e")
    check_1d(diag, "d")
    check_1d(off, "e")
    if np.iscomplexobj(diag) or np.iscomplexobj(off):
        raise NotSupportedError("eigen_tridiagonal: complex input is not supported")
    n = diag.shape[0]
    if off.shape[0] != max(n - 1, 0):
        raise DimensionError(
            f"e: expected {max(n - 1, 0)} sub-diagonal entries for n={n}, got {off.shape[0]}"
        )

    dd = diag.copy()
    ee = np.zeros(n)
    ee[1:] = off
    V = np.eye(n)

    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        _tridiagonal_ql(V, dd, ee)

    return EigenvalueDecomposition(
        real_eigenvalues=readonly(dd),
        imag_eigenvalues=readonly(np.zeros(n)),
        eigenvectors=readonly(V),
        is_symmetric=True,
    )


# ═══════════════════════════════════════════════════════════════════════
# Symmetric: Householder tridiagonalization and implicit QL
# ═══════════════════════════════════════════════════════════════════════

def _tridiagonalize(V: NDArray[np.floating[Any]], d: NDArray[np.floating[Any]],
                    e: NDArray[np.floating[Any]]) -> None:
    """Householder reduction to tridiagonal form; V is overwritten with Q."""
    n = V.shape[0]
    if n == 0:
        return
    d[:] = V[n - 1, :]

    for i in range(n - 1, 0, -1):
        scale = np.sum(np.abs(d[:i]))
        h = np.float64(0.0)

        if scale == 0.0:
            e[i] = d[i - 1]
            d[:i] = V[i - 1, :i]
            V[i, :i] = 0.0
            V[:i, i] = 0.0
        else:
            # generate the Householder vector
            d[:i] /= scale
            h = np.dot(d[:i], d[:i])
            f = d[i - 1]
            g = np.sqrt(h)
            if f > 0:
                g = -g
            e[i] = scale * g
            h = h - f * g
            d[i - 1] = f - g

            # apply the similarity transformation to the remaining columns;
            # only the lower triangle of V[:i, :i] is referenced
            V[:i, i] = d[:i]
            lower = np.tril(V[:i, :i])
            e[:i] = (lower + np.tril(lower, -1).T) @ d[:i]

            e[:i] /= h
            f = np.dot(e[:i], d[:i])
            hh = f / (h + h)
            e[:i] -= hh * d[:i]

            mask = np.tri(i, dtype=bool)
            update = np.outer(e[:i], d[:i]) + np.outer(d[:i], e[:i])
            block = V[:i, :i]
            block[mask] -= update[mask]
            d[:i] = V[i - 1, :i]
            V[i, :i] = 0.0
        d[i] = h

    # accumulate transformations
    for i in range(n - 1):
        V[n - 1, i] = V[i, i]
        V[i, i] = 1.0
        h = d[i + 1]
        if h != 0.0:
            d[:i + 1] = V[:i + 1, i + 1] / h
            g = V[:i + 1, i + 1] @ V[:i + 1, :i + 1]
            V[:i + 1, :i + 1] -= np.outer(d[:i + 1], g)
        V[:i + 1, i + 1] = 0.0

    d[:] = V[n - 1, :]
    V[n - 1, :] = 0.0
    V[n - 1, n - 1] = 1.0
    e[0] = 0.0


def _tridiagonal_ql(V: NDArray[np.floating[Any]], d: NDArray[np.floating[Any]],
                    e: NDArray[np.floating[Any]]) -> None:
    """
    Implicit QL on the tridiagonal (d, e[1:]); eigenvalues end up in d,
    sorted ascending, with V rotated accordingly.
    """
    n = d.shape[0]
    if n == 0:
        return
    e[:n - 1] = e[1:].copy()
    e[n - 1] = 0.0

    f = np.float64(0.0)
    tst1 = np.float64(0.0)
    eps = POSITIVE_RELATIVE_ACCURACY
    warned = False

    for l in range(n):
        # find a small sub-diagonal element
        tst1 = max(tst1, abs(d[l]) + abs(e[l]))
        m = l
        while m < n - 1 and not abs(e[m]) <= eps * tst1:
            m += 1

        # if m == l, d[l] is already an eigenvalue; otherwise iterate
        if m > l:
            iteration = 0
            while True:
                iteration += 1

                # compute the implicit shift
                g = d[l]
                p = (d[l + 1] - g) / (2.0 * e[l])
                r = hypot(p, 1.0)
                if p < 0:
                    r = -r
                d[l] = e[l] / (p + r)
                d[l + 1] = e[l] * (p + r)
                dl1 = d[l + 1]
                h = g - d[l]
                d[l + 2:] -= h
                f = f + h

                # implicit QL transformation
                p = d[m]
                c = c2 = c3 = np.float64(1.0)
                el1 = e[l + 1]
                s = s2 = np.float64(0.0)
                for i in range(m - 1, l - 1, -1):
                    c3 = c2
                    c2 = c
                    s2 = s
                    g = c * e[i]
                    h = c * p
                    r = hypot(p, e[i])
                    e[i + 1] = s * r
                    s = e[i] / r
                    c = p / r
                    p = c * d[i] - s * g
                    d[i + 1] = h + s * (c * g + s * d[i])

                    vi = V[:, i].copy()
                    V[:, i] = c * vi - s * V[:, i + 1]
                    V[:, i + 1] = s * vi + c * V[:, i + 1]

                p = -s * s2 * c3 * el1 * e[l] / dl1
                e[l] = s * p
                d[l] = c * p

                if not abs(e[l]) > eps * tst1:
                    break
                if iteration >= MAX_SWEEPS_PER_VALUE:
                    if not warned:
                        warnings.warn(
                            f"Symmetric eigenvalue iteration did not converge within "
                            f"{MAX_SWEEPS_PER_VALUE} sweeps for eigenvalue {l}; "
                            f"accepting current iterate",
                            RuntimeWarning,
                            stacklevel=3,
                        )
                        warned = True
                    break

        d[l] = d[l] + f
        e[l] = 0.0

    # sort eigenvalues and corresponding vectors
    for i in range(n - 1):
        k = i + int(np.argmin(d[i:]))
        if k != i:
            d[i], d[k] = d[k], d[i]
            V[:, [i, k]] = V[:, [k, i]]


# ═══════════════════════════════════════════════════════════════════════
# Nonsymmetric: Hessenberg reduction and Francis double-shift QR
# ═══════════════════════════════════════════════════════════════════════

def _hessenberg(H: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
    """Orthogonal reduction of H to upper Hessenberg form in place; returns V."""
    n = H.shape[0]
    high = n - 1
    ort = np.zeros(n)

    for m in range(1, high):
        scale = np.sum(np.abs(H[m:, m - 1]))
        if scale != 0.0:
            # compute the Householder transformation
            ort[m:] = H[m:, m - 1] / scale
            h = np.dot(ort[m:], ort[m:])
            g = np.sqrt(h)
            if ort[m] > 0:
                g = -g
            h = h - ort[m] * g
            ort[m] = ort[m] - g

            # H = (I - u u^T / h) H (I - u u^T / h)
            f = (ort[m:] @ H[m:, m:]) / h
            H[m:, m:] -= np.outer(ort[m:], f)
            f = (H[:, m:] @ ort[m:]) / h
            H[:, m:] -= np.outer(f, ort[m:])

            ort[m] = scale * ort[m]
            H[m, m - 1] = scale * g

    # accumulate transformations
    V = np.eye(n)
    for m in range(high - 1, 0, -1):
        if H[m, m - 1] != 0.0:
            ort[m + 1:] = H[m + 1:, m - 1]
            g = ort[m:] @ V[m:, m:]
            # double division avoids possible underflow
            g = (g / ort[m]) / H[m, m - 1]
            V[m:, m:] += np.outer(ort[m:], g)
    return V


def _cdiv(xr: float, xi: float, yr: float, yi: float) -> tuple[float, float]:
    """Complex scalar division (xr + i xi) / (yr + i yi)."""
    xr, xi, yr, yi = np.float64(xr), np.float64(xi), np.float64(yr), np.float64(yi)
    if abs(yr) > abs(yi):
        r = yi / yr
        d = yr + r * yi
        return (xr + r * xi) / d, (xi - r * xr) / d
    r = yr / yi
    d = yi + r * yr
    return (r * xr + xi) / d, (r * xi - xr) / d


def _schur(H: NDArray[np.floating[Any]], V: NDArray[np.floating[Any]],
           d: NDArray[np.floating[Any]], e: NDArray[np.floating[Any]]) -> None:
    """Reduce Hessenberg H to real Schur form and compute eigenvectors into V."""
    nn = H.shape[0]
    if nn == 0:
        return
    n = nn - 1
    low = 0
    eps = POSITIVE_RELATIVE_ACCURACY
    exshift = np.float64(0.0)
    p = q = r = s = z = np.float64(0.0)
    warned = False

    norm = np.float64(0.0)
    for i in range(nn):
        norm += np.sum(np.abs(H[i, max(i - 1, 0):]))

    iteration = 0
    while n >= low:
        # look for a single small sub-diagonal element
        l = n
        while l > low:
            s = abs(H[l - 1, l - 1]) + abs(H[l, l])
            if s == 0.0:
                s = norm
            if abs(H[l, l - 1]) < eps * s:
                break
            l -= 1

        if l < n - 1 and iteration >= MAX_SWEEPS_PER_VALUE:
            if not warned:
                warnings.warn(
                    f"Schur iteration did not converge within {MAX_SWEEPS_PER_VALUE} "
                    f"sweeps for eigenvalue {n}; accepting current iterate",
                    RuntimeWarning,
                    stacklevel=3,
                )
                warned = True
            H[n, n - 1] = 0.0
            l = n

        if l == n:
            # one root found
            H[n, n] = H[n, n] + exshift
            d[n] = H[n, n]
            e[n] = 0.0
            n -= 1
            iteration = 0

        elif l == n - 1:
            # two roots found
            w = H[n, n - 1] * H[n - 1, n]
            p = (H[n - 1, n - 1] - H[n, n]) / 2.0
            q = p * p + w
            z = np.sqrt(abs(q))
            H[n, n] = H[n, n] + exshift
            H[n - 1, n - 1] = H[n - 1, n - 1] + exshift
            x = H[n, n]

            if q >= 0:
                # real pair
                z = p + z if p >= 0 else p - z
                d[n - 1] = x + z
                d[n] = d[n - 1]
                if z != 0.0:
                    d[n] = x - w / z
                e[n - 1] = 0.0
                e[n] = 0.0
                x = H[n, n - 1]
                s = abs(x) + abs(z)
                p = x / s
                q = z / s
                r = np.sqrt(p * p + q * q)
                p = p / r
                q = q / r

                # row modification
                row = H[n - 1, n - 1:].copy()
                H[n - 1, n - 1:] = q * row + p * H[n, n - 1:]
                H[n, n - 1:] = q * H[n, n - 1:] - p * row

                # column modification
                col = H[:n + 1, n - 1].copy()
                H[:n + 1, n - 1] = q * col + p * H[:n + 1, n]
                H[:n + 1, n] = q * H[:n + 1, n] - p * col

                # accumulate transformations
                col = V[:, n - 1].copy()
                V[:, n - 1] = q * col + p * V[:, n]
                V[:, n] = q * V[:, n] - p * col
            else:
                # complex pair
                d[n - 1] = x + p
                d[n] = x + p
                e[n - 1] = z
                e[n] = -z
            n -= 2
            iteration = 0

        else:
            # form shift
            x = H[n, n]
            y = np.float64(0.0)
            w = np.float64(0.0)
            if l < n:
                y = H[n - 1, n - 1]
                w = H[n, n - 1] * H[n - 1, n]

            # Wilkinson's original ad hoc shift
            if iteration == 10:
                exshift += x
                idx = np.arange(low, n + 1)
                H[idx, idx] -= x
                s = abs(H[n, n - 1]) + abs(H[n - 1, n - 2])
                x = y = 0.75 * s
                w = -0.4375 * s * s

            # MATLAB's ad hoc shift
            if iteration == 30:
                s = (y - x) / 2.0
                s = s * s + w
                if s > 0:
                    s = np.sqrt(s)
                    if y < x:
                        s = -s
                    s = x - w / ((y - x) / 2.0 + s)
                    idx = np.arange(low, n + 1)
                    H[idx, idx] -= s
                    exshift += s
                    x = y = w = np.float64(0.964)

            iteration += 1

            # look for two consecutive small sub-diagonal elements
            m = n - 2
            while m >= l:
                z = H[m, m]
                r = x - z
                s = y - z
                p = (r * s - w) / H[m + 1, m] + H[m, m + 1]
                q = H[m + 1, m + 1] - z - r - s
                r = H[m + 2, m + 1]
                s = abs(p) + abs(q) + abs(r)
                p = p / s
                q = q / s
                r = r / s
                if m == l:
                    break
                if (abs(H[m, m - 1]) * (abs(q) + abs(r))
                        < eps * (abs(p) * (abs(H[m - 1, m - 1]) + abs(z) + abs(H[m + 1, m + 1])))):
                    break
                m -= 1

            for i in range(m + 2, n + 1):
                H[i, i - 2] = 0.0
                if i > m + 2:
                    H[i, i - 3] = 0.0

            # double QR step involving rows l:n and columns m:n
            for k in range(m, n):
                notlast = k != n - 1
                if k != m:
                    p = H[k, k - 1]
                    q = H[k + 1, k - 1]
                    r = H[k + 2, k - 1] if notlast else np.float64(0.0)
                    x = abs(p) + abs(q) + abs(r)
                    if x == 0.0:
                        continue
                    p = p / x
                    q = q / x
                    r = r / x

                s = np.sqrt(p * p + q * q + r * r)
                if p < 0:
                    s = -s
                if s != 0:
                    if k != m:
                        H[k, k - 1] = -s * x
                    elif l != m:
                        H[k, k - 1] = -H[k, k - 1]
                    p = p + s
                    x = p / s
                    y = q / s
                    z = r / s
                    q = q / p
                    r = r / p

                    # row modification
                    pr = H[k, k:] + q * H[k + 1, k:]
                    if notlast:
                        pr = pr + r * H[k + 2, k:]
                        H[k + 2, k:] -= pr * z
                    H[k, k:] -= pr * x
                    H[k + 1, k:] -= pr * y

                    # column modification
                    top = min(n, k + 3) + 1
                    pc = x * H[:top, k] + y * H[:top, k + 1]
                    if notlast:
                        pc = pc + z * H[:top, k + 2]
                        H[:top, k + 2] -= pc * r
                    H[:top, k] -= pc
                    H[:top, k + 1] -= pc * q

                    # accumulate transformations
                    pv = x * V[:, k] + y * V[:, k + 1]
                    if notlast:
                        pv = pv + z * V[:, k + 2]
                        V[:, k + 2] -= pv * r
                    V[:, k] -= pv
                    V[:, k + 1] -= pv * q

    # back-substitute to find vectors of the upper triangular form
    if norm == 0.0:
        return

    for n in range(nn - 1, -1, -1):
        p = d[n]
        q = e[n]

        if q == 0:
            # real vector
            l = n
            H[n, n] = 1.0
            for i in range(n - 1, -1, -1):
                w = H[i, i] - p
                r = np.dot(H[i, l:n + 1], H[l:n + 1, n])
                if e[i] < 0.0:
                    z = w
                    s = r
                else:
                    l = i
                    if e[i] == 0.0:
                        if w != 0.0:
                            H[i, n] = -r / w
                        else:
                            H[i, n] = -r / (eps * norm)
                    else:
                        # solve real equations
                        x = H[i, i + 1]
                        y = H[i + 1, i]
                        q = (d[i] - p) * (d[i] - p) + e[i] * e[i]
                        t = (x * s - z * r) / q
                        H[i, n] = t
                        if abs(x) > abs(z):
                            H[i + 1, n] = (-r - w * t) / x
                        else:
                            H[i + 1, n] = (-s - y * t) / z

                    # overflow control
                    t = abs(H[i, n])
                    if (eps * t) * t > 1:
                        H[i:n + 1, n] /= t

        elif q < 0:
            # complex vector; the last component is imaginary so the
            # matrix is triangular
            l = n - 1
            if abs(H[n, n - 1]) > abs(H[n - 1, n]):
                H[n - 1, n - 1] = q / H[n, n - 1]
                H[n - 1, n] = -(H[n, n] - p) / H[n, n - 1]
            else:
                H[n - 1, n - 1], H[n - 1, n] = _cdiv(0.0, -H[n - 1, n], H[n - 1, n - 1] - p, q)
            H[n, n - 1] = 0.0
            H[n, n] = 1.0

            for i in range(n - 2, -1, -1):
                ra = np.dot(H[i, l:n + 1], H[l:n + 1, n - 1])
                sa = np.dot(H[i, l:n + 1], H[l:n + 1, n])
                w = H[i, i] - p

                if e[i] < 0.0:
                    z = w
                    r = ra
                    s = sa
                else:
                    l = i
                    if e[i] == 0:
                        H[i, n - 1], H[i, n] = _cdiv(-ra, -sa, w, q)
                    else:
                        # solve complex equations
                        x = H[i, i + 1]
                        y = H[i + 1, i]
                        vr = (d[i] - p) * (d[i] - p) + e[i] * e[i] - q * q
                        vi = (d[i] - p) * 2.0 * q
                        if vr == 0.0 and vi == 0.0:
                            vr = eps * norm * (abs(w) + abs(q) + abs(x) + abs(y) + abs(z))
                        H[i, n - 1], H[i, n] = _cdiv(
                            x * r - z * ra + q * sa, x * s - z * sa - q * ra, vr, vi
                        )
                        if abs(x) > (abs(z) + abs(q)):
                            H[i + 1, n - 1] = (-ra - w * H[i, n - 1] + q * H[i, n]) / x
                            H[i + 1, n] = (-sa - w * H[i, n] - q * H[i, n - 1]) / x
                        else:
                            H[i + 1, n - 1], H[i + 1, n] = _cdiv(
                                -r - y * H[i, n - 1], -s - y * H[i, n], z, q
                            )

                    # overflow control
                    t = max(abs(H[i, n - 1]), abs(H[i, n]))
                    if (eps * t) * t > 1:
                        H[i:n + 1, n - 1] /= t
                        H[i:n + 1, n] /= t

    # back transformation to eigenvectors of the original matrix
    for j in range(nn - 1, low - 1, -1):
        V[:, j] = V[:, :j + 1] @ H[:j + 1, j]
