"""
Orthogonal and unitary transformation primitives.

Givens rotations zero one component of a 2-vector; Householder
reflections map a vector onto a multiple of the first unit vector. Both
accept real or complex input.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import ArrayLike

from pynumerics.core.exceptions import DimensionError
from pynumerics.core.precision import almost_zero, hypot, sign
from pynumerics.core.validation import check_1d, check_array
from pynumerics.linalg.matrix import Matrix
from pynumerics.linalg.vector import Vector


def givens(v1: complex, v2: complex) -> tuple[float, complex]:
    """
    Givens rotation (c, s) such that [[c, s], [-conj(s), c]] @ (v1, v2)
    has a zero second component.

    ``c`` is always real. For real input ``s`` is real as well.

    Args:
        v1: First component
        v2: Second component, the one to eliminate

    Returns:
        Tuple (c, s)
    """
    if isinstance(v1, complex) or isinstance(v2, complex):
        return _givens_complex(complex(v1), complex(v2))

    if almost_zero(v2):
        return 1.0, 0.0
    if almost_zero(v1):
        return 0.0, sign(v2)

    length = hypot(v1, v2)
    return abs(v1) / length, sign(v1) * v2 / length


def _givens_complex(v1: complex, v2: complex) -> tuple[float, complex]:
    # modulus-squared tests keep c real
    v1_norm_sqr = v1.real * v1.real + v1.imag * v1.imag
    v2_norm_sqr = v2.real * v2.real + v2.imag * v2.imag

    if almost_zero(v2_norm_sqr):
        return 1.0, 0j
    if almost_zero(v1_norm_sqr):
        return 0.0, sign(v2.conjugate())

    length = math.sqrt(v1_norm_sqr + v2_norm_sqr)
    return math.sqrt(v1_norm_sqr) / length, sign(v1) * v2.conjugate() / length


def rotation(v: ArrayLike | Vector) -> Matrix:
    """
    2 x 2 rotation [[c, s], [-conj(s), c]] annihilating v[1].

    Raises:
        DimensionError: If v does not have exactly two entries
    """
    arr = check_array(v, "v")
    check_1d(arr, "v")
    if arr.shape[0] != 2:
        raise DimensionError(f"v: expected 2 entries, got {arr.shape[0]}")

    c, s = givens(arr[0].item(), arr[1].item())
    s_conj = s.conjugate() if isinstance(s, complex) else s
    return Matrix([[c, s], [-s_conj, c]])


def reflection(v: ArrayLike | Vector) -> Matrix:
    """
    Householder reflection Q = I - 2 u u^H / (u^H u) with Q v = -sigma |v| e1.

    u = v + sigma |v| e1, where sigma is the sign (phase for complex input)
    of v[0], taken as 1 when v[0] is zero. Q is symmetric (Hermitian) and
    orthogonal (unitary).

    Raises:
        DimensionError: If v is not a non-empty 1D array
    """
    arr = check_array(v, "v")
    check_1d(arr, "v")
    if arr.shape[0] == 0:
        raise DimensionError("v: expected at least one entry, got 0")

    lead = arr[0].item()
    sigma = sign(lead) if lead != 0 else 1.0
    u = Vector(arr)
    u[0] = lead + sigma * Vector(arr).norm()

    with np.errstate(divide='ignore', invalid='ignore'):
        scale = -2.0 / np.float64(u.squared_norm())
    uu = u.outer(u).to_array()
    # u_i conj(u_i) is exactly real, keeping Q Hermitian
    np.fill_diagonal(uu, np.abs(u.to_array()) ** 2)
    return Matrix.identity(arr.shape[0]).multiply_accumulate_inplace(uu, scale)
