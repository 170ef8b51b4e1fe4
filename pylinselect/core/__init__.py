"""
Core infrastructure for pylinselect.

Shared abstractions and numeric kernels used by the regression engine.

Key components:
    datasource: DataSource container
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input and parameter validators
    compute: Timing, numeric tolerances, statistics, linear algebra kernels
"""

from pylinselect.core.protocols import Backend
from pylinselect.core.result import Result
from pylinselect.core.exceptions import (
    PyLinSelectError,
    ValidationError,
    ConfigurationError,
    DimensionError,
    NumericalError,
    SingularMatrixError,
    FitCancelledError,
)

__all__ = [
    # Protocols
    "Backend",
    # Result
    "Result",
    # Exceptions
    "PyLinSelectError",
    "ValidationError",
    "ConfigurationError",
    "DimensionError",
    "NumericalError",
    "SingularMatrixError",
    "FitCancelledError",
]
