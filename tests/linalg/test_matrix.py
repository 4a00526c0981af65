"""
Tests for the Matrix value type.

Validates:
    - Construction, factories and copy semantics
    - Element, row, column and block access
    - Norms, trace, determinant on reference data
    - Arithmetic: copying and in-place variants, operators, matrix product
    - Solve, transposed solve, inverse and pseudo-inverse
    - Robust (least absolute deviation) solve on reference systems
    - Decomposition caching and invalidation
    - Exact and approximate equality
"""

import warnings

import numpy as np
import pytest

from pynumerics.core.exceptions import DimensionError, NotSupportedError, ValidationError
from pynumerics.linalg import Matrix, Vector
from pynumerics.statistics import GeneratorSource


COLUMNWISE = [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0, 9.0, 10.0, 11.0, 12.0]


# ═══════════════════════════════════════════════════════════════════════
# Construction
# ═══════════════════════════════════════════════════════════════════════


class TestConstruction:
    """Constructors copy their input and validate shape."""

    def test_from_nested_list(self):
        a = Matrix([[1, 2], [3, 4]])
        assert a.shape == (2, 2)
        assert a.dtype == np.float64
        assert a[1, 0] == 3.0

    def test_copies_input(self):
        data = np.eye(2)
        a = Matrix(data)
        data[0, 0] = 5.0
        assert a[0, 0] == 1.0

    def test_copy_constructor(self):
        a = Matrix([[1.0]])
        b = Matrix(a)
        b[0, 0] = 2.0
        assert a[0, 0] == 1.0

    def test_rejects_1d(self):
        with pytest.raises(DimensionError):
            Matrix([1.0, 2.0])

    def test_columnwise(self):
        a = Matrix.from_columnwise(COLUMNWISE, 3)
        assert a.shape == (3, 4)
        assert a[0, 0] == 1.0
        assert a[1, 0] == 2.0
        assert a[2, 0] == 3.0
        assert a[0, 1] == 4.0
        assert a[0, 2] == 7.0
        assert a[0, 3] == 10.0
        assert a[1, 3] == 11.0
        assert a[2, 3] == 12.0

    def test_columnwise_invalid_stride(self):
        with pytest.raises(DimensionError):
            Matrix.from_columnwise(COLUMNWISE, 5)
        with pytest.raises(ValidationError):
            Matrix.from_columnwise(COLUMNWISE, 0)

    def test_columnwise_is_independent(self):
        values = list(COLUMNWISE)
        a = Matrix.from_columnwise(values, 3)
        values[0] = 1.5
        assert Matrix.from_columnwise(values, 3) != a

    def test_factories(self):
        assert Matrix.zeros(2, 3) == Matrix([[0.0, 0.0, 0.0], [0.0, 0.0, 0.0]])
        assert Matrix.ones(1, 2) == Matrix([[1.0, 1.0]])
        assert Matrix.filled(2, 1, 7.0) == Matrix([[7.0], [7.0]])
        assert Matrix.filled(1, 1, 1j).is_complex
        assert Matrix.identity(2, 3) == Matrix([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
        assert Matrix.identity(2) == Matrix([[1.0, 0.0], [0.0, 1.0]])
        assert Matrix.diagonal([1.0, 2.0]) == Matrix([[1.0, 0.0], [0.0, 2.0]])

    def test_rows_and_columns(self):
        by_rows = Matrix.from_rows([[1.0, 2.0], Vector([3.0, 4.0])])
        by_cols = Matrix.from_columns([[1.0, 3.0], [2.0, 4.0]])
        assert by_rows == by_cols
        assert Matrix.from_row([1.0, 2.0]).shape == (1, 2)
        assert Matrix.from_column([1.0, 2.0]).shape == (2, 1)

    def test_ragged_rows(self):
        with pytest.raises(DimensionError):
            Matrix.from_rows([[1.0, 2.0], [3.0]])
        with pytest.raises(ValidationError):
            Matrix.from_rows([])

    def test_random_is_reproducible(self):
        a = Matrix.random(3, 4, GeneratorSource(seed=7))
        b = Matrix.random(3, 4, GeneratorSource(seed=7))
        assert a == b
        assert a.shape == (3, 4)
        assert np.all((a.to_array() >= 0) & (a.to_array() < 1))

    def test_random_fills_columnwise(self, source):
        a = Matrix.random(2, 2, source)
        source.reset()
        first = source.next_double()
        second = source.next_double()
        assert a[0, 0] == first
        assert a[1, 0] == second


# ═══════════════════════════════════════════════════════════════════════
# Access
# ═══════════════════════════════════════════════════════════════════════


class TestAccess:
    """Indexing returns scalars, Vectors or Matrices by result rank."""

    def test_getitem_kinds(self):
        a = Matrix.from_columnwise(COLUMNWISE, 3)
        assert isinstance(a[0, 0], float)
        assert isinstance(a[0, :], Vector)
        assert isinstance(a[0:2, 1:3], Matrix)
        assert a[0:2, 1:3] == Matrix([[4.0, 7.0], [5.0, 8.0]])

    def test_rows_columns(self):
        a = Matrix.from_columnwise(COLUMNWISE, 3)
        assert a.get_row(1) == Vector([2.0, 5.0, 8.0, 11.0])
        assert a.get_column(2) == Vector([7.0, 8.0, 9.0])
        a.set_row(0, [0.0, 0.0, 0.0, 0.0])
        a.set_column(3, Vector([1.0, 1.0, 1.0]))
        assert a.get_row(0) == Vector([0.0, 0.0, 0.0, 1.0])
        with pytest.raises(DimensionError):
            a.set_row(0, [1.0])

    def test_row_is_a_copy(self):
        a = Matrix.identity(2)
        row = a.get_row(0)
        row[0] = 9.0
        assert a[0, 0] == 1.0

    def test_submatrix(self):
        a = Matrix.from_columnwise(COLUMNWISE, 3)
        assert a.submatrix(range(1, 3), [0, 3]) == Matrix([[2.0, 11.0], [3.0, 12.0]])
        assert a.submatrix(slice(0, 2), slice(0, 1)) == Matrix([[1.0], [2.0]])
        with pytest.raises(IndexError):
            a.submatrix([0, 3], [0])

    def test_set_submatrix(self):
        a = Matrix.zeros(3, 3)
        a.set_submatrix([0, 2], [1, 2], [[1.0, 2.0], [3.0, 4.0]])
        assert a == Matrix([[0.0, 1.0, 2.0], [0.0, 0.0, 0.0], [0.0, 3.0, 4.0]])
        with pytest.raises(DimensionError):
            a.set_submatrix([0], [0], [[1.0, 2.0]])

    def test_setitem_upcasts_to_complex(self):
        a = Matrix.identity(2)
        a[0, 1] = 2j
        assert a.is_complex
        assert a[0, 1] == 2j

    def test_to_array_is_a_copy(self):
        a = Matrix.identity(2)
        arr = a.to_array()
        arr[0, 0] = 5.0
        assert a[0, 0] == 1.0
        np.testing.assert_array_equal(np.asarray(a), np.eye(2))


# ═══════════════════════════════════════════════════════════════════════
# Norms and scalar functions
# ═══════════════════════════════════════════════════════════════════════


class TestNorms:
    """Norms, trace and determinant of the 3 x 4 columnwise matrix."""

    def test_reference_norms(self):
        a = Matrix.from_columnwise(COLUMNWISE, 3)
        assert a.norm1() == pytest.approx(33.0)
        assert a.norm_inf() == pytest.approx(30.0)
        assert a.norm_frobenius() == pytest.approx(np.sqrt(650.0), rel=1e-14)
        assert a.trace() == pytest.approx(15.0)

    def test_norm2(self, rng):
        data = rng.standard_normal((4, 3))
        assert Matrix(data).norm2() == pytest.approx(np.linalg.norm(data, 2), rel=1e-12)

    def test_frobenius_no_overflow(self):
        a = Matrix([[1e200, 1e200], [1e200, 1e200]])
        assert a.norm_frobenius() == pytest.approx(2e200, rel=1e-14)

    def test_singular_determinant(self):
        a = Matrix.from_columnwise(COLUMNWISE, 3)
        square = a.submatrix(range(3), range(3))
        assert square.determinant() == pytest.approx(0.0, abs=1e-12)

    def test_determinant_requires_square(self):
        with pytest.raises(DimensionError):
            Matrix.from_columnwise(COLUMNWISE, 3).determinant()

    @pytest.mark.parametrize("shape", [(0, 0), (0, 3), (3, 0)])
    def test_empty_matrix(self, shape):
        a = Matrix.zeros(*shape)
        assert a.rank() == 0
        assert a.norm2() == 0.0
        assert np.isnan(a.condition())
        assert a.svd().singular_values.shape == (0,)

    def test_rank_and_condition(self):
        a = Matrix.from_columnwise(COLUMNWISE, 3)
        assert a.rank() == 2
        c = Matrix([[1.0, 3.0], [7.0, 9.0]])
        s = c.svd().singular_values
        assert c.condition() == pytest.approx(s[0] / s[1])


# ═══════════════════════════════════════════════════════════════════════
# Arithmetic
# ═══════════════════════════════════════════════════════════════════════


class TestArithmetic:
    """Copying operations leave operands untouched; in-place ones mutate."""

    def test_add_subtract(self):
        a = Matrix([[1.0, -2.0], [-1.0, 4.0], [5.0, 7.0]])
        b = Matrix([[10.0, 2.5], [-3.0, -1.5], [19.0, -6.0]])
        assert a + b == Matrix([[11.0, 0.5], [-4.0, 2.5], [24.0, 1.0]])
        assert a - b == Matrix([[-9.0, -4.5], [2.0, 5.5], [-14.0, 13.0]])
        assert a == Matrix([[1.0, -2.0], [-1.0, 4.0], [5.0, 7.0]])

    def test_inplace_returns_self(self):
        a = Matrix.ones(2, 2)
        assert a.add_inplace(Matrix.ones(2, 2)) is a
        assert a == Matrix.filled(2, 2, 2.0)
        a.subtract_inplace(Matrix.ones(2, 2)).multiply_inplace(3.0).negate_inplace()
        assert a == Matrix.filled(2, 2, -3.0)

    def test_shape_mismatch(self):
        with pytest.raises(DimensionError):
            Matrix.ones(2, 2).add(Matrix.ones(2, 3))

    def test_scalar_operators(self):
        a = Matrix([[1.0, 2.0]])
        assert a * 2 == Matrix([[2.0, 4.0]])
        assert 2 * a == Matrix([[2.0, 4.0]])
        assert -a == Matrix([[-1.0, -2.0]])

    def test_remaining_inplace_forms(self):
        a = Matrix([[1.0, 2.0], [3.0, 4.0]])
        assert a.array_power_inplace(2) is a
        assert a == Matrix([[1.0, 4.0], [9.0, 16.0]])
        a.multiply_accumulate_inplace(Matrix.identity(2), -1.0)
        assert a == Matrix([[0.0, 4.0], [9.0, 15.0]])
        a.multiply_left_diagonal_inplace([1.0, 2.0]).multiply_right_diagonal_inplace([2.0, 1.0])
        assert a == Matrix([[0.0, 4.0], [36.0, 30.0]])
        a.array_map_inplace(lambda x: x / 2)
        assert a == Matrix([[0.0, 2.0], [18.0, 15.0]])
        c = Matrix([[1j, 2.0], [0.0, 1.0]])
        c.conjugate_transpose_inplace()
        assert c == Matrix([[-1j, 0.0], [2.0, 1.0]])

    def test_multiply_accumulate(self):
        a = Matrix.identity(2)
        b = a.multiply_accumulate(Matrix.ones(2, 2), 2.0)
        assert b == Matrix([[3.0, 2.0], [2.0, 3.0]])
        assert a == Matrix.identity(2)

    def test_reference_product(self):
        a = Matrix([[10.0, -61.0, -8.0, -29.0], [95.0, 11.0, -49.0, -47.0], [40.0, -81.0, 91.0, 68.0]])
        b = Matrix([[72.0, 37.0], [-23.0, 87.0], [44.0, 29.0], [98.0, -23.0]])
        expected = Matrix([[-1071.0, -4502.0], [-175.0, 4132.0], [15411.0, -4492.0]])
        assert a @ b == expected
        assert a.matmul(b) == expected

    def test_product_with_vector(self):
        a = Matrix([[1.0, 2.0], [3.0, 4.0]])
        assert a @ Vector([1.0, 1.0]) == Vector([3.0, 7.0])
        assert Vector([1.0, 1.0]) @ a == Vector([4.0, 6.0])

    def test_product_dimension_mismatch(self):
        with pytest.raises(DimensionError, match="inner dimensions"):
            Matrix.ones(2, 3) @ Matrix.ones(2, 3)

    def test_array_operations(self):
        a = Matrix([[1.0, 2.0], [3.0, 4.0]])
        b = Matrix([[2.0, 2.0], [2.0, 2.0]])
        assert a.array_multiply(b) == Matrix([[2.0, 4.0], [6.0, 8.0]])
        assert a.array_divide(b) == Matrix([[0.5, 1.0], [1.5, 2.0]])
        assert a.array_power(2) == Matrix([[1.0, 4.0], [9.0, 16.0]])
        assert a.array_map(lambda x: x + 1) == Matrix([[2.0, 3.0], [4.0, 5.0]])

    def test_array_multiply_divide_round_trip(self, rng):
        r = Matrix(rng.standard_normal((3, 3)))
        r2 = Matrix(rng.standard_normal((3, 3)) + 5.0)
        f = r.clone()
        f.array_multiply_inplace(r2)
        f.array_divide_inplace(r2)
        assert f.almost_equals(r, 1e-14)

    def test_array_divide_by_zero(self):
        result = Matrix([[1.0, 0.0]]).array_divide(Matrix([[0.0, 0.0]]))
        assert result[0, 0] == np.inf
        assert np.isnan(result[0, 1])

    def test_diagonal_scaling(self):
        a = Matrix.ones(2, 3)
        assert a.multiply_left_diagonal([1.0, 2.0]) == Matrix([[1.0, 1.0, 1.0], [2.0, 2.0, 2.0]])
        assert a.multiply_right_diagonal([1.0, 2.0, 3.0]) == Matrix([[1.0, 2.0, 3.0], [1.0, 2.0, 3.0]])
        with pytest.raises(DimensionError):
            a.multiply_left_diagonal([1.0, 2.0, 3.0])

    def test_transpose(self):
        a = Matrix.from_columnwise(COLUMNWISE, 3)
        t = Matrix([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0], [7.0, 8.0, 9.0], [10.0, 11.0, 12.0]])
        assert t.transpose() == a
        assert t != a
        with pytest.raises(DimensionError):
            t.transpose_inplace()
        sq = Matrix([[1.0, 2.0], [3.0, 4.0]])
        sq.transpose_inplace()
        assert sq == Matrix([[1.0, 3.0], [2.0, 4.0]])

    def test_conjugate_transpose(self):
        a = Matrix([[1 + 1j, 2.0], [0.0, 3j]])
        assert a.conjugate_transpose() == Matrix([[1 - 1j, 0.0], [2.0, -3j]])

    def test_kronecker(self):
        a = Matrix.identity(2)
        b = Matrix([[1.0, 2.0]])
        assert a.kronecker(b) == Matrix([[1.0, 2.0, 0.0, 0.0], [0.0, 0.0, 1.0, 2.0]])

    def test_numpy_array_not_broadcast(self):
        with pytest.raises(TypeError):
            np.ones((2, 2)) + Matrix.identity(2)


# ═══════════════════════════════════════════════════════════════════════
# Solving
# ═══════════════════════════════════════════════════════════════════════


class TestSolve:
    """solve dispatches on shape and returns the type of b."""

    def test_square(self):
        sq = Matrix([[5.0, 8.0], [6.0, 9.0]])
        assert sq.solve(Matrix([[13.0], [15.0]])).almost_equals(Matrix([[1.0], [1.0]]), 1e-13)

    def test_returns_type_of_b(self):
        a = Matrix([[1.0, 2.0], [3.0, 5.0]])
        assert isinstance(a.solve(Vector([29.0, 76.0])), Vector)
        assert isinstance(a.solve(Matrix([[29.0], [76.0]])), Matrix)
        x = a.solve(np.array([29.0, 76.0]))
        assert isinstance(x, np.ndarray)
        np.testing.assert_allclose(x, [7.0, 11.0], rtol=1e-13)

    def test_least_squares(self, rng):
        data = rng.standard_normal((10, 3))
        b = rng.standard_normal(10)
        x = Matrix(data).solve(Vector(b))
        np.testing.assert_allclose(x.to_array(), np.linalg.lstsq(data, b, rcond=None)[0], rtol=1e-10)

    def test_under_determined(self):
        with pytest.raises(NotSupportedError):
            Matrix.ones(2, 3).solve(Vector([1.0, 1.0]))

    def test_solve_transpose(self, rng):
        data = rng.standard_normal((3, 3))
        b = rng.standard_normal((2, 3))
        x = Matrix(data).solve_transpose(Matrix(b))
        np.testing.assert_allclose((x @ Matrix(data)).to_array(), b, atol=1e-12)

    def test_inverse(self, rng):
        data = rng.standard_normal((4, 4))
        inv = Matrix(data).inverse()
        np.testing.assert_allclose((inv @ Matrix(data)).to_array(), np.eye(4), atol=1e-12)

    def test_pseudo_inverse_tall(self):
        b = Matrix.from_columnwise(COLUMNWISE, 4)
        b[0, 0] = 0.0
        d = b.inverse()
        assert (d @ b).almost_equals(Matrix.identity(3), 1e-13)

    def test_pseudo_inverse_wide(self):
        md2x4 = Matrix([[1.0, 2.0, -3.0, 12.0], [3.0, 3.1, 4.0, 2.0]])
        expected = Matrix([
            [-0.00442227310854, 0.08012826184670],
            [0.00203505965379, 0.07917266861796],
            [-0.03550382768177, 0.12309456479807],
            [0.07448672256297, 0.01090084127596],
        ])
        assert md2x4.inverse().almost_equals(expected, 1e-12)
        assert md2x4.transpose().inverse().almost_equals(expected.transpose(), 1e-12)


class TestSolveRobust:
    """Least absolute deviation fits by iteratively reweighted least squares."""

    def test_two_parameters(self):
        a = Matrix([[1.0, 1.0], [1.0, 2.0], [1.0, 2.0], [1.0, -1.0], [0.0, 1.0], [2.0, 1.0]])
        b = Vector([2.0, 2.0, 2.0, 2.0, 2.0, 2.0])
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", RuntimeWarning)
            x = a.solve_robust(b)
        assert isinstance(x, Vector)
        assert x[0] == pytest.approx(1.2, abs=1e-3)
        assert x[1] == pytest.approx(0.4, abs=1e-3)

    def test_three_parameters(self):
        a = Matrix([
            [2.0, -1.0, 2.0], [3.0, 2.0, 0.0], [1.0, 2.0, 4.0],
            [1.0, -1.0, -1.0], [0.0, 1.0, 2.0], [2.0, 1.0, 1.0],
        ])
        b = Vector([0.0, 4.0, 2.0, -3.0, 2.0, 1.0])
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", RuntimeWarning)
            x = a.solve_robust(b)
        assert x[0] == pytest.approx(0.667, rel=1e-3)
        assert x[1] == pytest.approx(1.0, rel=1e-5)
        assert x[2] == pytest.approx(-0.167, rel=1e-2)

    def test_four_parameters(self):
        a = Matrix([
            [-8.0, -29.0, 95.0, 11.0], [-47.0, 40.0, -81.0, 91.0],
            [-10.0, 31.0, -51.0, 77.0], [1.0, 1.0, 55.0, -28.0],
            [30.0, -27.0, -15.0, -59.0], [72.0, -87.0, 47.0, -90.0],
            [92.0, -91.0, -88.0, -48.0], [-28.0, 5.0, 13.0, -10.0],
            [71.0, 16.0, 83.0, 9.0], [-83.0, 98.0, -48.0, -19.0],
        ])
        b = Vector([-49.0, 68.0, 95.0, 16.0, -96.0, 43.0, 53.0, -82.0, -60.0, 62.0])
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", RuntimeWarning)
            x = a.solve_robust(b)
        assert x[0] == pytest.approx(-0.104, rel=1e-2)
        assert x[1] == pytest.approx(-0.216, rel=1e-2)
        assert x[2] == pytest.approx(-0.618, rel=1e-3)
        assert x[3] == pytest.approx(0.238, rel=1e-3)

    def test_ignores_outlier(self):
        t = np.arange(10.0)
        design = Matrix.from_columns([np.ones(10), t])
        y = 1.0 + 2.0 * t
        y[7] += 100.0
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", RuntimeWarning)
            x = design.solve_robust(y)
        np.testing.assert_allclose(x, [1.0, 2.0], atol=1e-3)

    def test_square_is_exact(self):
        a = Matrix([[1.0, 2.0], [3.0, 5.0]])
        x = a.solve_robust(Vector([29.0, 76.0]))
        assert x.almost_equals(Vector([7.0, 11.0]), 1e-13)

    def test_consistent_system_converges(self):
        a = Matrix([[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
        with warnings.catch_warnings():
            warnings.simplefilter("error", RuntimeWarning)
            x = a.solve_robust(Vector([2.0, 3.0, 5.0]))
        np.testing.assert_allclose(x.to_array(), [2.0, 3.0], atol=1e-10)

    def test_under_determined(self):
        with pytest.raises(NotSupportedError):
            Matrix.ones(2, 3).solve_robust(Vector([1.0, 1.0]))

    def test_wrong_rows(self):
        with pytest.raises(DimensionError):
            Matrix.ones(3, 2).solve_robust(Vector([1.0, 1.0]))


# ═══════════════════════════════════════════════════════════════════════
# Decomposition cache
# ═══════════════════════════════════════════════════════════════════════


class TestDecompositionCache:
    """Decompositions are memoized until the matrix changes."""

    def test_cached(self):
        a = Matrix([[4.0, 1.0], [1.0, 3.0]])
        assert a.lu() is a.lu()
        assert a.qr() is a.qr()
        assert a.cholesky() is a.cholesky()
        assert a.svd() is a.svd()
        assert a.eigen() is a.eigen()

    def test_invalidated_by_setitem(self):
        a = Matrix([[4.0, 1.0], [1.0, 3.0]])
        first = a.lu()
        a[0, 0] = 5.0
        assert a.lu() is not first
        assert a.determinant() == pytest.approx(14.0)

    def test_invalidated_by_inplace(self):
        a = Matrix.identity(2)
        first = a.svd()
        a.multiply_inplace(2.0)
        assert a.svd() is not first
        assert a.norm2() == pytest.approx(2.0)

    def test_eigen_shortcuts(self):
        a = Matrix([[2.0, 0.0], [0.0, 3.0]])
        np.testing.assert_allclose(a.eigenvalues, [2.0, 3.0])
        assert isinstance(a.eigenvectors, Matrix)

    def test_cholesky_flag(self):
        assert Matrix([[4.0, 1.0], [1.0, 3.0]]).cholesky().is_positive_definite
        assert not Matrix([[1.0, 2.0], [2.0, 1.0]]).cholesky().is_positive_definite


# ═══════════════════════════════════════════════════════════════════════
# Equality and formatting
# ═══════════════════════════════════════════════════════════════════════


class TestEquality:
    """Exact __eq__ and relative almost_equals."""

    def test_exact(self):
        assert Matrix.identity(2) == Matrix.identity(2)
        assert Matrix.identity(2) != Matrix.identity(3)
        assert Matrix.identity(2).__eq__(np.eye(2)) is NotImplemented

    def test_unhashable(self):
        with pytest.raises(TypeError):
            hash(Matrix.identity(2))

    def test_almost_equals(self):
        a = Matrix([[1.0, 2.0], [3.0, 4.0]])
        b = a.add(Matrix([[1e-16, 0.0], [0.0, 0.0]]))
        assert a.almost_equals(b)
        assert not a.almost_equals(Matrix([[1.0, 2.0], [3.0, 4.001]]))
        assert a.almost_equals(Matrix([[1.0, 2.0], [3.0, 4.001]]), 1e-3)
        assert not a.almost_equals(Matrix.identity(3))

    def test_repr_round_trip(self):
        a = Matrix([[1.0, 2.5]])
        assert repr(a) == "Matrix([[1.0, 2.5]])"
        assert str(a) == "[1, 2.5]"
