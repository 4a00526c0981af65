"""
Dense linear algebra.

Matrix and Vector value types, orthogonal transformation primitives and
the LU, QR, Cholesky, singular value and eigenvalue decompositions. The
decomposition functions accept any 2D array-like and return immutable
result records; Matrix memoizes them.

Usage:
    from pynumerics.linalg import Matrix, lu, svd

    a = Matrix([[1.0, 2.0], [3.0, 4.0]])
    a.lu().determinant()      # -2.0
    svd([[3.0, 0.0], [0.0, 4.0]]).singular_values
"""

from pynumerics.linalg.vector import Vector
from pynumerics.linalg.matrix import Matrix
from pynumerics.linalg.orthogonal import givens, reflection, rotation
from pynumerics.linalg._lu import LUDecomposition, lu, lu_solve
from pynumerics.linalg._qr import QRDecomposition, qr, qr_solve
from pynumerics.linalg._cholesky import CholeskyDecomposition, cholesky
from pynumerics.linalg._svd import SingularValueDecomposition, svd
from pynumerics.linalg._eigen import EigenvalueDecomposition, eigen, eigen_tridiagonal

__all__ = [
    # Value types
    "Matrix",
    "Vector",
    # Orthogonal primitives
    "givens",
    "rotation",
    "reflection",
    # Decompositions
    "LUDecomposition",
    "lu",
    "lu_solve",
    "QRDecomposition",
    "qr",
    "qr_solve",
    "CholeskyDecomposition",
    "cholesky",
    "SingularValueDecomposition",
    "svd",
    "EigenvalueDecomposition",
    "eigen",
    "eigen_tridiagonal",
]
