"""
Dense vector value type.

Vector owns a private 1D numpy array of float64, or complex128 when any
entry is complex. Every copying operation returns a new Vector; the
``_inplace`` variants mutate the receiver and return it.

Usage:
    from pynumerics.linalg import Vector

    v = Vector([3.0, 4.0])
    v.norm()          # 5.0
    v.dot(Vector([1.0, 2.0]))
    v.scale_inplace(2.0)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pynumerics.core.exceptions import DimensionError
from pynumerics.core.precision import DEFAULT_RELATIVE_ACCURACY, almost_equal_norm, hypot
from pynumerics.core.protocols import UniformSource
from pynumerics.core.validation import check_1d, check_array, check_nonnegative_int

if TYPE_CHECKING:
    from pynumerics.linalg.matrix import Matrix


class Vector:
    """
    Mutable dense vector with value semantics on copy.

    Construct from any 1D array-like; the data is always copied.
    """

    __slots__ = ('_data',)

    # numpy defers to the reflected operators instead of broadcasting
    __array_ufunc__ = None

    def __init__(self, data: ArrayLike | Vector):
        if isinstance(data, Vector):
            self._data = data._data.copy()
            return
        arr = check_array(data, "data")
        check_1d(arr, "data")
        self._data = arr.copy()

    # === Factory Methods ===

    @classmethod
    def _wrap(cls, array: NDArray[Any]) -> Vector:
        """Adopt an array without copying."""
        v = cls.__new__(cls)
        v._data = array
        return v

    @classmethod
    def zeros(cls, n: int) -> Vector:
        check_nonnegative_int(n, "n")
        return cls._wrap(np.zeros(n))

    @classmethod
    def ones(cls, n: int) -> Vector:
        check_nonnegative_int(n, "n")
        return cls._wrap(np.ones(n))

    @classmethod
    def filled(cls, n: int, value: complex) -> Vector:
        check_nonnegative_int(n, "n")
        dtype = np.complex128 if isinstance(value, complex) else np.float64
        return cls._wrap(np.full(n, value, dtype=dtype))

    @classmethod
    def random(cls, n: int, source: UniformSource) -> Vector:
        """Vector of n uniform [0, 1) samples drawn from source."""
        check_nonnegative_int(n, "n")
        return cls._wrap(np.array([source.next_double() for _ in range(n)], dtype=np.float64))

    # === Access ===

    def __len__(self) -> int:
        return self._data.shape[0]

    def __getitem__(self, index: Any) -> Any:
        value = self._data[index]
        if isinstance(value, np.ndarray):
            return Vector._wrap(value.copy())
        return value.item()

    def __setitem__(self, index: Any, value: Any) -> None:
        if np.iscomplexobj(value) and not self.is_complex:
            self._data = self._data.astype(np.complex128)
        self._data[index] = value

    def __iter__(self):
        return (x.item() for x in self._data)

    @property
    def length(self) -> int:
        return self._data.shape[0]

    @property
    def is_complex(self) -> bool:
        return np.iscomplexobj(self._data)

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    def to_array(self) -> NDArray[Any]:
        """Copy of the underlying data."""
        return self._data.copy()

    def __array__(self, dtype: Any = None, copy: bool | None = None) -> NDArray[Any]:
        arr = self._data.copy()
        return arr if dtype is None else arr.astype(dtype)

    def clone(self) -> Vector:
        return Vector._wrap(self._data.copy())

    def to_column_matrix(self) -> Matrix:
        from pynumerics.linalg.matrix import Matrix
        return Matrix._wrap(self._data.reshape(-1, 1).copy())

    def to_row_matrix(self) -> Matrix:
        from pynumerics.linalg.matrix import Matrix
        return Matrix._wrap(self._data.reshape(1, -1).copy())

    # === Norms ===

    def norm(self) -> float:
        """Euclidean norm, accumulated with hypot to avoid overflow."""
        result = 0.0
        for x in self._data:
            result = hypot(result, x)
        return result

    def norm1(self) -> float:
        return float(np.sum(np.abs(self._data)))

    def norm_inf(self) -> float:
        if self._data.size == 0:
            return 0.0
        return float(np.max(np.abs(self._data)))

    def squared_norm(self) -> float:
        return float(np.sum((self._data * self._data.conj()).real))

    def normalize(self) -> Vector:
        """Unit vector in the same direction; NaN entries for the zero vector."""
        with np.errstate(divide='ignore', invalid='ignore'):
            return Vector._wrap(self._data / np.float64(self.norm()))

    # === Arithmetic ===

    def _other(self, other: Vector | ArrayLike, name: str = "other") -> NDArray[Any]:
        arr = other._data if isinstance(other, Vector) else check_array(other, name)
        if arr.shape != self._data.shape:
            raise DimensionError(
                f"{name}: expected length {len(self)}, got shape {arr.shape}"
            )
        return arr

    def _assign(self, array: NDArray[Any]) -> Vector:
        self._data = array
        return self

    def add(self, other: Vector | ArrayLike) -> Vector:
        return Vector._wrap(self._data + self._other(other))

    def add_inplace(self, other: Vector | ArrayLike) -> Vector:
        return self._assign(self._data + self._other(other))

    def subtract(self, other: Vector | ArrayLike) -> Vector:
        return Vector._wrap(self._data - self._other(other))

    def subtract_inplace(self, other: Vector | ArrayLike) -> Vector:
        return self._assign(self._data - self._other(other))

    def negate(self) -> Vector:
        return Vector._wrap(-self._data)

    def negate_inplace(self) -> Vector:
        return self._assign(-self._data)

    def scale(self, scalar: complex) -> Vector:
        return Vector._wrap(self._data * scalar)

    def scale_inplace(self, scalar: complex) -> Vector:
        return self._assign(self._data * scalar)

    def array_multiply(self, other: Vector | ArrayLike) -> Vector:
        """Element-wise product."""
        return Vector._wrap(self._data * self._other(other))

    def array_multiply_inplace(self, other: Vector | ArrayLike) -> Vector:
        return self._assign(self._data * self._other(other))

    def array_map(self, func: Callable[[Any], Any]) -> Vector:
        """Apply func to every entry."""
        return Vector._wrap(check_array([func(x) for x in self], "result"))

    def dot(self, other: Vector | ArrayLike) -> complex:
        """
        Scalar product; Hermitian (conjugates self) for complex vectors.
        """
        value = np.vdot(self._data, self._other(other))
        return value.item()

    def outer(self, other: Vector | ArrayLike) -> Matrix:
        """Tensor product self * other^H as a Matrix."""
        from pynumerics.linalg.matrix import Matrix
        arr = other._data if isinstance(other, Vector) else check_array(other, "other")
        check_1d(arr, "other")
        return Matrix._wrap(np.outer(self._data, arr.conj()))

    def cross(self, other: Vector | ArrayLike) -> Vector:
        """
        Cross product of two 3D vectors.

        Raises:
            DimensionError: If either vector is not of length 3
        """
        b = self._other(other)
        if len(self) != 3:
            raise DimensionError(f"cross: requires 3D vectors, got length {len(self)}")
        return Vector._wrap(np.cross(self._data, b))

    # === Operators ===

    def __add__(self, other: Any) -> Vector:
        if not isinstance(other, Vector):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: Any) -> Vector:
        if not isinstance(other, Vector):
            return NotImplemented
        return self.subtract(other)

    def __neg__(self) -> Vector:
        return self.negate()

    def __mul__(self, scalar: Any) -> Vector:
        if not isinstance(scalar, (int, float, complex, np.number)):
            return NotImplemented
        return self.scale(scalar)

    __rmul__ = __mul__

    def __matmul__(self, other: Any) -> Any:
        if isinstance(other, Vector):
            return self.dot(other)
        return NotImplemented

    # === Equality ===

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return self._data.shape == other._data.shape and bool(np.array_equal(self._data, other._data))

    __hash__ = None  # mutable

    def almost_equals(self, other: Vector, relative_accuracy: float = DEFAULT_RELATIVE_ACCURACY) -> bool:
        """Relative equality of the 1-norms: |a - b|_1 < rel * max(|a|_1, |b|_1)."""
        if len(self) != len(other):
            return False
        return almost_equal_norm(
            self.norm1(), other.norm1(), self.subtract(other).norm1(), relative_accuracy
        )

    def __repr__(self) -> str:
        return f"Vector({self._data.tolist()!r})"

    def __str__(self) -> str:
        return "[" + ", ".join(_format(x) for x in self) + "]"


def _format(value: complex) -> str:
    if isinstance(value, complex):
        return f"{value.real:g}{value.imag:+g}i"
    return f"{value:g}"
