"""
Exception hierarchy for pynumerics.

All exceptions inherit from PyNumericsError so callers can catch any
library-specific error with one clause.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages name the parameter and the offending value
    - Numeric degeneracy (singular input, poles) is NOT an exception;
      NaN and inf propagate unless a caller asks for a checked path
"""


class PyNumericsError(Exception):
    """Base exception for all pynumerics errors."""
    pass


class ValidationError(PyNumericsError, ValueError):
    """
    Input validation failed.

    Raised when an argument lies outside the domain of an operation
    (negative factorial argument, probability outside [0, 1], ...).
    """
    pass


class DimensionError(ValidationError):
    """
    Matrix or vector shapes are incompatible.

    Raised when operand shapes don't agree, or when an operation needs a
    square matrix and receives a rectangular one.
    """
    pass


class NumericalError(PyNumericsError):
    """
    Numerical computation failed.

    Base class for failures that are only raised on explicit request
    (checked solves, checked factorizations) or by iterative kernels
    that ran out of iterations.
    """
    pass


class SingularMatrixError(NumericalError):
    """
    Matrix is singular or numerically rank-deficient.

    Only raised by validated entry points such as
    ``LUDecomposition.solve(b, check_singular=True)``.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        condition_number: Estimated condition number, if available
        rank: Numerical rank, if computed
        expected_rank: Expected rank (typically min(m, n))
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        condition_number: float | None = None,
        rank: int | None = None,
        expected_rank: int | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.condition_number = condition_number
        self.rank = rank
        self.expected_rank = expected_rank


class NotPositiveDefiniteError(NumericalError):
    """
    Matrix is not Hermitian positive definite.

    Only raised by ``cholesky(a, check_spd=True)``.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        pivot_index: Row at which a non-positive pivot appeared, if known
        min_pivot: Value of that pivot, if known
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        pivot_index: int | None = None,
        min_pivot: float | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.pivot_index = pivot_index
        self.min_pivot = min_pivot


class ConvergenceError(NumericalError):
    """
    Iterative kernel failed to converge.

    Raised when a series or continued-fraction evaluation does not meet
    its tolerance within the iteration cap.

    Attributes:
        iterations: Number of iterations completed
        final_change: Last term or correction size
        reason: Why convergence failed (e.g., 'max_iterations')
        threshold: The tolerance that was not met
    """

    def __init__(
        self,
        message: str,
        iterations: int,
        final_change: float | None = None,
        reason: str | None = None,
        threshold: float | None = None
    ):
        super().__init__(message)
        self.iterations = iterations
        self.final_change = final_change
        self.reason = reason
        self.threshold = threshold

    def __str__(self) -> str:
        base = super().__str__()
        parts = [f"iterations={self.iterations}"]
        if self.final_change is not None:
            parts.append(f"final_change={self.final_change:.3e}")
        if self.threshold is not None:
            parts.append(f"threshold={self.threshold:.3e}")
        return f"{base} ({', '.join(parts)})"


class NotSupportedError(PyNumericsError, NotImplementedError):
    """
    Operation is not supported for this object or shape.

    Raised for resets of non-resettable random sources and for solves of
    under-determined systems.
    """
    pass
