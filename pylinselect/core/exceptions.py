"""
Exception hierarchy for pylinselect.

All exceptions inherit from PyLinSelectError to allow catching any
library-specific error.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Numerical degeneracies inside a fit are NOT exceptions; they surface
      as NaN/Inf sentinels in the inference statistics
"""


class PyLinSelectError(Exception):
    """Base exception for all pylinselect errors."""
    pass


class ValidationError(PyLinSelectError):
    """
    Input validation failed.

    Raised when user-provided data fails validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.
    """
    pass


class ConfigurationError(ValidationError):
    """
    Fit configuration is invalid.

    Raised before any pass over the data when a selection method name is
    unknown or a run parameter is missing or out of range.

    Attributes:
        parameter: Name of the offending parameter, if known
        value: The rejected value, if known
    """

    def __init__(
        self,
        message: str,
        parameter: str | None = None,
        value: object = None,
    ):
        super().__init__(message)
        self.parameter = parameter
        self.value = value


class NumericalError(PyLinSelectError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during computation.
    """
    pass


class SingularMatrixError(NumericalError):
    """
    Matrix is singular or nearly singular.

    Raised by the ridge normal-equation solver once ridge escalation is
    exhausted without producing a solvable system.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        ridge: Last ridge value tried, if applicable
        attempts: Number of solve attempts made
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        ridge: float | None = None,
        attempts: int | None = None,
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.ridge = ridge
        self.attempts = attempts


class FitCancelledError(PyLinSelectError):
    """
    A fit was cancelled through its stop signal.

    Raised from inside the dataset loops when the caller-supplied
    ``should_stop`` hook returns True. No partial model is produced.

    Attributes:
        stage: Name of the stage that observed the signal
    """

    def __init__(self, message: str, stage: str | None = None):
        super().__init__(message)
        self.stage = stage
