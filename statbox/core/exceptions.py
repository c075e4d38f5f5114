"""
Exception hierarchy for statbox.

    StatboxError
    ├── ValidationError
    │   └── DimensionError
    ├── CapacityError
    ├── NumericalError
    │   └── DegenerateDesignError
    └── ConvergenceError

Exceptions carry the offending quantities as attributes and their messages
state actual against expected values.
"""


class StatboxError(Exception):
    """Base exception for all statbox errors."""
    pass


class ValidationError(StatboxError):
    """User input is malformed: wrong type, value or level count."""
    pass


class DimensionError(ValidationError):
    """An array has the wrong shape, or arrays disagree in length."""
    pass


class CapacityError(StatboxError):
    """
    A lookup table would exceed the configured storage limit.

    Raised before allocation, so no partially filled table is ever used.

    Attributes:
        required: Number of cells the computation needs
        limit: Maximum number of cells allowed
    """

    def __init__(
        self,
        message: str,
        required: int | None = None,
        limit: int | None = None,
    ):
        super().__init__(message)
        self.required = required
        self.limit = limit


class NumericalError(StatboxError):
    """A computation produced an undefined or unusable quantity."""
    pass


class DegenerateDesignError(NumericalError):
    """
    The experimental design leaves no degrees of freedom for error.

    Raised when every fully-crossed cell holds at most one observation,
    so the error mean square (and every F statistic) is undefined.

    Attributes:
        df_error: Error degrees of freedom that were computed
        n_cells: Number of non-empty fully-crossed cells
    """

    def __init__(
        self,
        message: str,
        df_error: int | None = None,
        n_cells: int | None = None,
    ):
        super().__init__(message)
        self.df_error = df_error
        self.n_cells = n_cells


class ConvergenceError(StatboxError):
    """
    A likelihood optimizer stopped without meeting its tolerance.

    Attributes:
        iterations: Optimizer iterations performed
        final_change: Last objective change, if the optimizer reports one
        reason: Short tag such as 'max_iterations'
        threshold: Tolerance that was not reached
    """

    def __init__(
        self,
        message: str,
        iterations: int,
        final_change: float | None = None,
        reason: str | None = None,
        threshold: float | None = None,
    ):
        super().__init__(message)
        self.iterations = iterations
        self.final_change = final_change
        self.reason = reason
        self.threshold = threshold
