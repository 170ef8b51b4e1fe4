"""
Common payload types for the regression engine.

FitResult is what every fitting and selection step produces.
InferenceReport holds the per-coefficient statistics of the final model.
LinearParams is the payload the backend puts into the Result envelope.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class FitResult:
    """
    A fitted attribute subset.

    Attributes:
        mask: Activation mask (p,), True where the attribute is in the model
        coefficients: Active attribute weights in dataset order, followed
            by the intercept (length = mask.sum() + 1)
        squared_error: Sum of squared training residuals

    Instances are never modified. A step that wants to try a variation
    copies the mask first.
    """
    mask: NDArray[np.bool_]
    coefficients: NDArray[np.floating[Any]]
    squared_error: float

    @property
    def n_active(self) -> int:
        return int(np.count_nonzero(self.mask))

    @property
    def intercept(self) -> float:
        return float(self.coefficients[-1])

    @property
    def weights(self) -> NDArray[np.floating[Any]]:
        """Attribute weights without the intercept."""
        return self.coefficients[:-1]


@dataclass(frozen=True)
class InferenceReport:
    """
    Per-coefficient statistics of the final model.

    Every array has length k + 1: the k active attributes in dataset order,
    then the intercept. The intercept's tolerance and standardized
    coefficient are always NaN.

    Sentinels:
        standard_errors: +inf for the intercept when (X'WX)^-1 could not
            be formed; NaN/inf where a tolerance of 0 made the
            approximation degenerate
        p_values: NaN when the F-distribution is undefined (n <= k + 1)
    """
    standard_errors: NDArray[np.floating[Any]]
    standardized_coefficients: NDArray[np.floating[Any]]
    tolerances: NDArray[np.floating[Any]]
    t_statistics: NDArray[np.floating[Any]]
    p_values: NDArray[np.floating[Any]]
    exact: bool


@dataclass(frozen=True)
class SelectionStep:
    """
    One accepted change made by a selection method.

    Attributes:
        action: 'remove' or 'add'
        attribute: Index of the attribute that changed
        squared_error: Training error after the change
        criterion: Value of the method's criterion after the change,
            or None for methods without one
    """
    action: str
    attribute: int
    squared_error: float
    criterion: float | None = None


@dataclass(frozen=True)
class LinearParams:
    """
    Parameter payload for a fitted linear regression model.

    This is the immutable data computed by backends.
    """
    fit: FitResult
    inference: InferenceReport
    use_bias: bool
    attribute_names: tuple[str, ...]
    label_name: str
    class_names: tuple[str, str] | None
    r_squared: float
    n_observations: int
