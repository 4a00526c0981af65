"""
Dense matrix value type.

Matrix owns a private 2D numpy array of float64, or complex128 when any
entry is complex, and memoizes its decompositions. Copying operations
return new matrices; the ``_inplace`` variants mutate the receiver, drop
the cached decompositions and return the receiver.

Design principles:
    - Structural mismatches (shapes) raise DimensionError
    - Numeric degeneracy (singular systems) yields inf/NaN, never errors
    - Decompositions are computed at most once per state of the matrix

Usage:
    from pynumerics.linalg import Matrix, Vector

    a = Matrix([[4.0, 1.0], [2.0, 3.0]])
    x = a.solve(Vector([1.0, 2.0]))
    a.determinant()   # 10.0
    a.svd().singular_values
"""

from __future__ import annotations

import warnings
from typing import Any, Callable, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pynumerics.core.exceptions import DimensionError, NotSupportedError, ValidationError
from pynumerics.core.precision import DEFAULT_RELATIVE_ACCURACY, almost_equal_norm, hypot
from pynumerics.core.protocols import UniformSource
from pynumerics.core.validation import (
    check_1d,
    check_2d,
    check_array,
    check_nonnegative_int,
    check_positive_int,
    check_same_shape,
)
from pynumerics.linalg import _cholesky, _eigen, _lu, _qr, _svd
from pynumerics.linalg.vector import Vector

# Iteratively reweighted least squares (least absolute deviation)
ROBUST_ETA = 1.0e-12
ROBUST_EPSILON = 1.0e-6
ROBUST_MAX_ITERATIONS = 100


def _resolve_index(key: Any, size: int, name: str) -> NDArray[np.intp]:
    """Turn a slice, range, int or index sequence into checked positions."""
    if isinstance(key, slice):
        for bound in (key.start, key.stop):
            if bound is not None and not -size <= bound <= size:
                raise IndexError(f"{name}: slice bound {bound} out of range for size {size}")
        return np.arange(size)[key]
    if isinstance(key, (int, np.integer)):
        key = [key]
    idx = np.asarray(key, dtype=np.intp)
    if idx.ndim != 1:
        raise IndexError(f"{name}: expected a 1D index sequence, got shape {idx.shape}")
    if np.any(idx >= size) or np.any(idx < -size):
        raise IndexError(f"{name}: index out of range for size {size}: {idx.tolist()}")
    return idx


class Matrix:
    """
    Mutable dense matrix with cached decompositions.

    Construct from any 2D array-like (or another Matrix); the data is always
    copied.
    """

    __slots__ = ('_data', '_cache')

    # numpy defers to the reflected operators instead of broadcasting
    __array_ufunc__ = None

    def __init__(self, data: ArrayLike | Matrix):
        if isinstance(data, Matrix):
            arr = data._data.copy()
        else:
            arr = check_array(data, "data")
            check_2d(arr, "data")
            arr = arr.copy()
        self._data = arr
        self._cache: dict[str, Any] = {}

    # === Factory Methods ===

    @classmethod
    def _wrap(cls, array: NDArray[Any]) -> Matrix:
        """Adopt an array without copying."""
        m = cls.__new__(cls)
        m._data = array
        m._cache = {}
        return m

    @classmethod
    def zeros(cls, m: int, n: int) -> Matrix:
        check_nonnegative_int(m, "m")
        check_nonnegative_int(n, "n")
        return cls._wrap(np.zeros((m, n)))

    @classmethod
    def ones(cls, m: int, n: int) -> Matrix:
        check_nonnegative_int(m, "m")
        check_nonnegative_int(n, "n")
        return cls._wrap(np.ones((m, n)))

    @classmethod
    def filled(cls, m: int, n: int, value: complex) -> Matrix:
        check_nonnegative_int(m, "m")
        check_nonnegative_int(n, "n")
        dtype = np.complex128 if isinstance(value, complex) else np.float64
        return cls._wrap(np.full((m, n), value, dtype=dtype))

    @classmethod
    def identity(cls, m: int, n: int | None = None) -> Matrix:
        """m x n matrix with ones on the main diagonal (square if n is None)."""
        check_nonnegative_int(m, "m")
        if n is not None:
            check_nonnegative_int(n, "n")
        return cls._wrap(np.eye(m, n))

    @classmethod
    def diagonal(cls, values: ArrayLike | Vector) -> Matrix:
        """Square matrix with the given diagonal."""
        diag = check_array(values, "values")
        check_1d(diag, "values")
        return cls._wrap(np.diag(diag))

    @classmethod
    def from_columnwise(cls, values: ArrayLike, rows: int) -> Matrix:
        """
        Build a matrix from a column-packed 1D array.

        Args:
            values: Entries in column-major order
            rows: Number of rows; must divide len(values)

        Raises:
            ValidationError: If rows is not positive
            DimensionError: If len(values) is not a multiple of rows
        """
        check_positive_int(rows, "rows")
        arr = check_array(values, "values")
        check_1d(arr, "values")
        if arr.shape[0] % rows != 0:
            raise DimensionError(
                f"values: length {arr.shape[0]} is not a multiple of rows={rows}"
            )
        return cls._wrap(arr.reshape(arr.shape[0] // rows, rows).T.copy())

    @classmethod
    def from_rows(cls, rows: Sequence[ArrayLike | Vector]) -> Matrix:
        arrays = [check_array(r, f"rows[{i}]") for i, r in enumerate(rows)]
        return cls._wrap(_stack(arrays, "rows"))

    @classmethod
    def from_columns(cls, columns: Sequence[ArrayLike | Vector]) -> Matrix:
        arrays = [check_array(c, f"columns[{i}]") for i, c in enumerate(columns)]
        return cls._wrap(_stack(arrays, "columns").T.copy())

    @classmethod
    def from_row(cls, values: ArrayLike | Vector) -> Matrix:
        """Single-row (1 x n) matrix."""
        return cls.from_rows([values])

    @classmethod
    def from_column(cls, values: ArrayLike | Vector) -> Matrix:
        """Single-column (n x 1) matrix."""
        return cls.from_columns([values])

    @classmethod
    def random(cls, m: int, n: int, source: UniformSource) -> Matrix:
        """m x n matrix of uniform [0, 1) samples, filled column by column."""
        check_nonnegative_int(m, "m")
        check_nonnegative_int(n, "n")
        samples = np.array([source.next_double() for _ in range(m * n)], dtype=np.float64)
        return cls._wrap(samples.reshape(n, m).T.copy())

    # === Shape ===

    @property
    def row_count(self) -> int:
        return self._data.shape[0]

    @property
    def column_count(self) -> int:
        return self._data.shape[1]

    @property
    def shape(self) -> tuple[int, int]:
        return self._data.shape

    @property
    def is_square(self) -> bool:
        return self._data.shape[0] == self._data.shape[1]

    @property
    def is_complex(self) -> bool:
        return np.iscomplexobj(self._data)

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    # === Element Access ===

    def _modified(self) -> None:
        self._cache.clear()

    def _assign(self, array: NDArray[Any]) -> Matrix:
        self._data = array
        self._modified()
        return self

    def _upcast_for(self, value: Any) -> None:
        if np.iscomplexobj(value) and not self.is_complex:
            self._data = self._data.astype(np.complex128)

    def __getitem__(self, key: Any) -> Any:
        value = self._data[key]
        if isinstance(value, np.ndarray):
            if value.ndim == 2:
                return Matrix._wrap(value.copy())
            return Vector._wrap(value.copy())
        return value.item()

    def __setitem__(self, key: Any, value: Any) -> None:
        if isinstance(value, (Matrix, Vector)):
            value = value.to_array()
        self._upcast_for(value)
        self._data[key] = value
        self._modified()

    def get_row(self, i: int) -> Vector:
        return Vector._wrap(self._data[i, :].copy())

    def get_column(self, j: int) -> Vector:
        return Vector._wrap(self._data[:, j].copy())

    def set_row(self, i: int, values: ArrayLike | Vector) -> None:
        arr = check_array(values, "values")
        if arr.shape != (self.column_count,):
            raise DimensionError(
                f"values: expected length {self.column_count}, got shape {arr.shape}"
            )
        self[i, :] = arr

    def set_column(self, j: int, values: ArrayLike | Vector) -> None:
        arr = check_array(values, "values")
        if arr.shape != (self.row_count,):
            raise DimensionError(
                f"values: expected length {self.row_count}, got shape {arr.shape}"
            )
        self[:, j] = arr

    def submatrix(self, rows: Any, columns: Any) -> Matrix:
        """
        Copy of a block selected by slices, ranges or index sequences.

        Raises:
            IndexError: If a selection is out of range
        """
        r = _resolve_index(rows, self.row_count, "rows")
        c = _resolve_index(columns, self.column_count, "columns")
        return Matrix._wrap(self._data[np.ix_(r, c)].copy())

    def set_submatrix(self, rows: Any, columns: Any, values: ArrayLike | Matrix) -> None:
        """
        Overwrite a block selected like ``submatrix``.

        Raises:
            IndexError: If a selection is out of range
            DimensionError: If values does not match the block shape
        """
        r = _resolve_index(rows, self.row_count, "rows")
        c = _resolve_index(columns, self.column_count, "columns")
        block = values.to_array() if isinstance(values, Matrix) else check_array(values, "values")
        if block.shape != (r.shape[0], c.shape[0]):
            raise DimensionError(
                f"values: expected shape {(r.shape[0], c.shape[0])}, got {block.shape}"
            )
        self._upcast_for(block)
        self._data[np.ix_(r, c)] = block
        self._modified()

    def to_array(self) -> NDArray[Any]:
        """Copy of the underlying data."""
        return self._data.copy()

    def __array__(self, dtype: Any = None, copy: bool | None = None) -> NDArray[Any]:
        arr = self._data.copy()
        return arr if dtype is None else arr.astype(dtype)

    def clone(self) -> Matrix:
        return Matrix._wrap(self._data.copy())

    # === Norms ===

    def norm1(self) -> float:
        """Maximum absolute column sum."""
        if self._data.size == 0:
            return 0.0
        return float(np.max(np.sum(np.abs(self._data), axis=0)))

    def norm_inf(self) -> float:
        """Maximum absolute row sum."""
        if self._data.size == 0:
            return 0.0
        return float(np.max(np.sum(np.abs(self._data), axis=1)))

    def norm_frobenius(self) -> float:
        """Square root of the sum of squared entries, accumulated with hypot."""
        result = 0.0
        for x in self._data.ravel():
            result = hypot(result, x)
        return result

    def norm2(self) -> float:
        """Largest singular value."""
        return self.svd().norm2

    # === Arithmetic ===

    def _operand(self, other: Matrix | ArrayLike, name: str = "other") -> NDArray[Any]:
        if isinstance(other, Matrix):
            arr = other._data
        else:
            arr = check_array(other, name)
            check_2d(arr, name)
        check_same_shape(self._data, arr, ("self", name))
        return arr

    def _diagonal_operand(self, values: ArrayLike | Vector, size: int) -> NDArray[Any]:
        diag = check_array(values, "diagonal")
        if diag.shape != (size,):
            raise DimensionError(f"diagonal: expected length {size}, got shape {diag.shape}")
        return diag

    def add(self, other: Matrix | ArrayLike) -> Matrix:
        return Matrix._wrap(self._data + self._operand(other))

    def add_inplace(self, other: Matrix | ArrayLike) -> Matrix:
        return self._assign(self._data + self._operand(other))

    def subtract(self, other: Matrix | ArrayLike) -> Matrix:
        return Matrix._wrap(self._data - self._operand(other))

    def subtract_inplace(self, other: Matrix | ArrayLike) -> Matrix:
        return self._assign(self._data - self._operand(other))

    def negate(self) -> Matrix:
        return Matrix._wrap(-self._data)

    def negate_inplace(self) -> Matrix:
        return self._assign(-self._data)

    def multiply(self, scalar: complex) -> Matrix:
        return Matrix._wrap(self._data * scalar)

    def multiply_inplace(self, scalar: complex) -> Matrix:
        return self._assign(self._data * scalar)

    def multiply_accumulate(self, other: Matrix | ArrayLike, scalar: complex) -> Matrix:
        """self + scalar * other."""
        return Matrix._wrap(self._data + scalar * self._operand(other))

    def multiply_accumulate_inplace(self, other: Matrix | ArrayLike, scalar: complex) -> Matrix:
        return self._assign(self._data + scalar * self._operand(other))

    def array_multiply(self, other: Matrix | ArrayLike) -> Matrix:
        """Element-wise product."""
        return Matrix._wrap(self._data * self._operand(other))

    def array_multiply_inplace(self, other: Matrix | ArrayLike) -> Matrix:
        return self._assign(self._data * self._operand(other))

    def array_divide(self, other: Matrix | ArrayLike) -> Matrix:
        """Element-wise quotient; division by zero gives inf/NaN."""
        rhs = self._operand(other)
        with np.errstate(divide='ignore', invalid='ignore'):
            return Matrix._wrap(self._data / rhs)

    def array_divide_inplace(self, other: Matrix | ArrayLike) -> Matrix:
        rhs = self._operand(other)
        with np.errstate(divide='ignore', invalid='ignore'):
            return self._assign(self._data / rhs)

    def array_power(self, exponent: float) -> Matrix:
        """Element-wise power."""
        with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
            return Matrix._wrap(np.power(self._data, exponent))

    def array_power_inplace(self, exponent: float) -> Matrix:
        with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
            return self._assign(np.power(self._data, exponent))

    def array_map(self, func: Callable[[Any], Any]) -> Matrix:
        """Apply func to every entry."""
        mapped = [[func(x) for x in row] for row in self._data.tolist()]
        return Matrix._wrap(check_array(mapped, "result").reshape(self.shape))

    def array_map_inplace(self, func: Callable[[Any], Any]) -> Matrix:
        return self._assign(self.array_map(func)._data)

    def multiply_left_diagonal(self, diagonal: ArrayLike | Vector) -> Matrix:
        """diag(d) @ self: scales row i by d[i]."""
        d = self._diagonal_operand(diagonal, self.row_count)
        return Matrix._wrap(d[:, np.newaxis] * self._data)

    def multiply_left_diagonal_inplace(self, diagonal: ArrayLike | Vector) -> Matrix:
        d = self._diagonal_operand(diagonal, self.row_count)
        return self._assign(d[:, np.newaxis] * self._data)

    def multiply_right_diagonal(self, diagonal: ArrayLike | Vector) -> Matrix:
        """self @ diag(d): scales column j by d[j]."""
        d = self._diagonal_operand(diagonal, self.column_count)
        return Matrix._wrap(self._data * d[np.newaxis, :])

    def multiply_right_diagonal_inplace(self, diagonal: ArrayLike | Vector) -> Matrix:
        d = self._diagonal_operand(diagonal, self.column_count)
        return self._assign(self._data * d[np.newaxis, :])

    def transpose(self) -> Matrix:
        return Matrix._wrap(self._data.T.copy())

    def transpose_inplace(self) -> Matrix:
        """
        Raises:
            DimensionError: If the matrix is not square
        """
        self._require_square("transpose_inplace")
        return self._assign(self._data.T.copy())

    def conjugate_transpose(self) -> Matrix:
        return Matrix._wrap(self._data.conj().T.copy())

    def conjugate_transpose_inplace(self) -> Matrix:
        """
        Raises:
            DimensionError: If the matrix is not square
        """
        self._require_square("conjugate_transpose_inplace")
        return self._assign(self._data.conj().T.copy())

    def matmul(self, other: Matrix | Vector | ArrayLike) -> Matrix | Vector:
        """
        Matrix product; a Vector operand is treated as a column.

        Raises:
            DimensionError: If the inner dimensions do not agree
        """
        if isinstance(other, Vector):
            rhs = other.to_array()
        elif isinstance(other, Matrix):
            rhs = other._data
        else:
            rhs = check_array(other, "other")
            check_2d(rhs, "other")
        if rhs.shape[0] != self.column_count:
            raise DimensionError(
                f"matmul: inner dimensions disagree, {self.shape} @ {rhs.shape}"
            )
        product = self._data @ rhs
        if isinstance(other, Vector):
            return Vector._wrap(product)
        return Matrix._wrap(product)

    def kronecker(self, other: Matrix | ArrayLike) -> Matrix:
        """Kronecker (tensor) product."""
        rhs = other._data if isinstance(other, Matrix) else check_array(other, "other")
        check_2d(rhs, "other")
        return Matrix._wrap(np.kron(self._data, rhs))

    # === Operators ===

    def __add__(self, other: Any) -> Matrix:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: Any) -> Matrix:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.subtract(other)

    def __neg__(self) -> Matrix:
        return self.negate()

    def __mul__(self, scalar: Any) -> Matrix:
        if not isinstance(scalar, (int, float, complex, np.number)):
            return NotImplemented
        return self.multiply(scalar)

    __rmul__ = __mul__

    def __matmul__(self, other: Any) -> Matrix | Vector:
        if not isinstance(other, (Matrix, Vector)):
            return NotImplemented
        return self.matmul(other)

    def __rmatmul__(self, other: Any) -> Vector:
        # row vector times matrix
        if not isinstance(other, Vector):
            return NotImplemented
        if len(other) != self.row_count:
            raise DimensionError(
                f"matmul: inner dimensions disagree, ({len(other)},) @ {self.shape}"
            )
        return Vector._wrap(other.to_array() @ self._data)

    # === Decompositions ===

    def _decomposition(self, kind: str, factory: Callable[[NDArray[Any]], Any]) -> Any:
        result = self._cache.get(kind)
        if result is None:
            result = factory(self._data)
            self._cache[kind] = result
        return result

    def lu(self) -> _lu.LUDecomposition:
        return self._decomposition('lu', _lu.lu)

    def qr(self) -> _qr.QRDecomposition:
        return self._decomposition('qr', _qr.qr)

    def cholesky(self) -> _cholesky.CholeskyDecomposition:
        """Cholesky factor; check ``is_positive_definite`` on the result."""
        return self._decomposition('cholesky', _cholesky.cholesky)

    def svd(self) -> _svd.SingularValueDecomposition:
        return self._decomposition('svd', _svd.svd)

    def eigen(self) -> _eigen.EigenvalueDecomposition:
        return self._decomposition('eigen', _eigen.eigen)

    # === Linear Algebra ===

    def _require_square(self, operation: str) -> None:
        if not self.is_square:
            raise DimensionError(
                f"{operation}: requires a square matrix, got shape {self.shape}"
            )

    def solve(self, b: Matrix | Vector | ArrayLike) -> Matrix | Vector | NDArray[Any]:
        """
        Solve A X = b.

        Square systems go through LU, over-determined systems through QR
        (least squares). The result has the type of b.

        Raises:
            DimensionError: If b has the wrong number of rows
            NotSupportedError: If A has more columns than rows
        """
        rhs, rewrap = _unwrap(b)
        m, n = self.shape
        if m == n:
            x = self.lu().solve(rhs)
        elif m > n:
            x = self.qr().solve(rhs)
        else:
            raise NotSupportedError(
                f"solve: under-determined system with shape {self.shape} is not supported"
            )
        return rewrap(x)

    def solve_transpose(self, b: Matrix | Vector | ArrayLike) -> Matrix | Vector | NDArray[Any]:
        """
        Solve X A = b, i.e. A^T X^T = b^T.

        A Vector b is taken as a row vector.
        """
        rhs, rewrap = _unwrap(b)
        at = self.transpose()
        if rhs.ndim == 1:
            return rewrap(at.solve(rhs))
        return rewrap(at.solve(rhs.T).T)

    def solve_robust(self, b: Matrix | Vector | ArrayLike) -> Matrix | Vector | NDArray[Any]:
        """
        Least absolute deviation solve of an over-determined system.

        Iteratively reweighted least squares: each step solves the normal
        equations with row weights 1 / max(|r_i|, eta) taken from the
        residuals of the first right-hand-side column. Square systems are
        solved exactly through LU.

        Raises:
            DimensionError: If b has the wrong number of rows
            NotSupportedError: If A has more columns than rows

        Warns:
            RuntimeWarning: If the iteration cap is reached before the
                largest change in the solution drops below 1e-6
        """
        rhs, rewrap = _unwrap(b)
        m, n = self.shape
        if m == n:
            return self.solve(b)
        if m < n:
            raise NotSupportedError(
                f"solve_robust: under-determined system with shape {self.shape} is not supported"
            )
        B = rhs.reshape(-1, 1) if rhs.ndim == 1 else rhs
        if B.shape[0] != m:
            raise DimensionError(f"b: expected {m} rows to match the matrix, got {B.shape[0]}")

        A = self._data
        At = A.conj().T

        def reweighted_step(weights: NDArray[Any]) -> tuple[NDArray[Any], NDArray[Any]]:
            xk = _lu.lu(At @ (weights[:, np.newaxis] * A)).solve(At @ (weights[:, np.newaxis] * B))
            residual = np.abs(B[:, 0] - A @ xk[:, 0])
            return xk, 1.0 / np.maximum(residual, ROBUST_ETA)

        max_change = np.inf
        with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
            x, weights = reweighted_step(np.ones(m))
            for _ in range(ROBUST_MAX_ITERATIONS - 1):
                xk, weights = reweighted_step(weights)
                max_change = float(np.max(np.abs(x[:, 0] - xk[:, 0])))
                x = xk
                if max_change <= ROBUST_EPSILON:
                    break

        if not max_change <= ROBUST_EPSILON:
            warnings.warn(
                f"solve_robust did not converge in {ROBUST_MAX_ITERATIONS} iterations "
                f"(final change {max_change:.2e}, threshold {ROBUST_EPSILON:.0e})",
                RuntimeWarning,
                stacklevel=2,
            )

        return rewrap(x[:, 0] if rhs.ndim == 1 else x)

    def inverse(self) -> Matrix:
        """
        Inverse for square input, Moore-Penrose pseudo-inverse for full-rank
        rectangular input.
        """
        m, n = self.shape
        if m >= n:
            return self.solve(Matrix.identity(m))
        return Matrix._wrap(_qr.qr(self._data.T).solve(np.eye(n)).T.copy())

    def determinant(self) -> float | complex:
        """
        Raises:
            DimensionError: If the matrix is not square
        """
        self._require_square("determinant")
        return self.lu().determinant()

    def rank(self) -> int:
        """Effective numerical rank from the singular values."""
        return self.svd().rank

    def condition(self) -> float:
        """Two-norm condition number, max(s) / min(s)."""
        return self.svd().condition

    def trace(self) -> float | complex:
        """Sum of the main diagonal."""
        return np.trace(self._data).item()

    @property
    def eigenvalues(self) -> NDArray[np.complexfloating[Any, Any]]:
        return self.eigen().eigenvalues

    @property
    def eigenvectors(self) -> Matrix:
        return Matrix._wrap(self.eigen().eigenvectors.copy())

    # === Equality ===

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    __hash__ = None  # mutable

    def almost_equals(self, other: Matrix, relative_accuracy: float = DEFAULT_RELATIVE_ACCURACY) -> bool:
        """Relative equality of the 1-norms: |a - b|_1 < rel * max(|a|_1, |b|_1)."""
        if self.shape != other.shape:
            return False
        return almost_equal_norm(
            self.norm1(), other.norm1(), self.subtract(other).norm1(), relative_accuracy
        )

    def __repr__(self) -> str:
        return f"Matrix({self._data.tolist()!r})"

    def __str__(self) -> str:
        return "\n".join(str(Vector._wrap(row)) for row in self._data)


def _stack(arrays: list[NDArray[Any]], name: str) -> NDArray[Any]:
    if not arrays:
        raise ValidationError(f"{name}: at least one entry is required")
    for i, arr in enumerate(arrays):
        check_1d(arr, f"{name}[{i}]")
        if arr.shape != arrays[0].shape:
            raise DimensionError(
                f"{name}[{i}]: expected length {arrays[0].shape[0]}, got {arr.shape[0]}"
            )
    return np.array(arrays)


def _unwrap(b: Matrix | Vector | ArrayLike) -> tuple[NDArray[Any], Callable[[NDArray[Any]], Any]]:
    """Right-hand side as an array plus a function restoring the caller's type."""
    if isinstance(b, Matrix):
        return b._data, Matrix._wrap
    if isinstance(b, Vector):
        return b.to_array(), Vector._wrap
    return check_array(b, "b"), lambda x: x
