"""
Tests for the pynumerics exception hierarchy.

Validates:
    - Inheritance chain (all exceptions catchable via PyNumericsError)
    - Builtin compatibility (ValueError, NotImplementedError)
    - Diagnostic attributes on SingularMatrixError, NotPositiveDefiniteError,
      ConvergenceError
    - Default attribute values (None for optional attributes)
"""

import pytest

from pynumerics.core.exceptions import (
    ConvergenceError,
    DimensionError,
    NotPositiveDefiniteError,
    NotSupportedError,
    NumericalError,
    PyNumericsError,
    SingularMatrixError,
    ValidationError,
)


# ═══════════════════════════════════════════════════════════════════════
# Inheritance hierarchy
# ═══════════════════════════════════════════════════════════════════════


class TestInheritance:
    """Every exception is catchable via PyNumericsError."""

    def test_validation_error_is_pynumerics_error(self):
        with pytest.raises(PyNumericsError):
            raise ValidationError("bad input")

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            raise ValidationError("bad input")

    def test_dimension_error_is_validation_error(self):
        with pytest.raises(ValidationError):
            raise DimensionError("wrong shape")

    def test_numerical_error_is_pynumerics_error(self):
        with pytest.raises(PyNumericsError):
            raise NumericalError("computation failed")

    def test_singular_matrix_error_is_numerical_error(self):
        with pytest.raises(NumericalError):
            raise SingularMatrixError("singular")

    def test_not_positive_definite_is_numerical_error(self):
        with pytest.raises(NumericalError):
            raise NotPositiveDefiniteError("not PD")

    def test_convergence_error_is_numerical_error(self):
        with pytest.raises(NumericalError):
            raise ConvergenceError("no convergence", iterations=100)

    def test_not_supported_is_not_implemented(self):
        with pytest.raises(NotImplementedError):
            raise NotSupportedError("cannot reset")

    def test_not_supported_is_pynumerics_error(self):
        with pytest.raises(PyNumericsError):
            raise NotSupportedError("cannot reset")

    def test_numerical_error_is_not_value_error(self):
        assert not issubclass(NumericalError, ValueError)


# ═══════════════════════════════════════════════════════════════════════
# Diagnostic attributes
# ═══════════════════════════════════════════════════════════════════════


class TestSingularMatrixError:
    """SingularMatrixError carries rank diagnostics."""

    def test_attributes(self):
        err = SingularMatrixError(
            "singular", matrix_name="A", condition_number=1e17, rank=2, expected_rank=3
        )
        assert err.matrix_name == "A"
        assert err.condition_number == 1e17
        assert err.rank == 2
        assert err.expected_rank == 3

    def test_defaults_none(self):
        err = SingularMatrixError("singular")
        assert err.matrix_name is None
        assert err.condition_number is None
        assert err.rank is None
        assert err.expected_rank is None
        assert str(err) == "singular"


class TestNotPositiveDefiniteError:
    """NotPositiveDefiniteError reports the failing pivot."""

    def test_attributes(self):
        err = NotPositiveDefiniteError("not PD", matrix_name="A", pivot_index=1, min_pivot=-4.0)
        assert err.matrix_name == "A"
        assert err.pivot_index == 1
        assert err.min_pivot == -4.0

    def test_defaults_none(self):
        err = NotPositiveDefiniteError("not PD")
        assert err.pivot_index is None
        assert err.min_pivot is None


class TestConvergenceError:
    """ConvergenceError carries iteration diagnostics in its message."""

    def test_attributes(self):
        err = ConvergenceError(
            "series diverged", iterations=100, final_change=1e-3,
            reason="max_iterations", threshold=1e-15,
        )
        assert err.iterations == 100
        assert err.final_change == 1e-3
        assert err.reason == "max_iterations"
        assert err.threshold == 1e-15

    def test_str_includes_iterations(self):
        err = ConvergenceError("series diverged", iterations=100)
        assert "series diverged" in str(err)
        assert "iterations=100" in str(err)
        assert "final_change" not in str(err)

    def test_str_includes_optional_parts(self):
        err = ConvergenceError("x", iterations=5, final_change=0.5, threshold=1e-10)
        text = str(err)
        assert "final_change=5.000e-01" in text
        assert "threshold=1.000e-10" in text
