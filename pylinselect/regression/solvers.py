"""
Solver dispatch for regression.

This module provides the fit() function (public API) and backend selection.
"""

from __future__ import annotations

import warnings
from typing import Any, Literal, Mapping, Sequence
from numpy.typing import ArrayLike

from pylinselect.core.exceptions import ValidationError
from pylinselect.core.compute.cancellation import StopSignal
from pylinselect.regression._config import (
    DEFAULT_MIN_TOLERANCE,
    DEFAULT_RIDGE,
    DEFAULT_SELECTION,
    RegressionConfig,
    build_config,
)
from pylinselect.regression.backends.cpu import CPUNormalEquationsBackend
from pylinselect.regression.design import RegressionDesign
from pylinselect.regression.selection import SelectionMethod
from pylinselect.regression.solution import LinearSolution


# Type alias for backend selection
BackendChoice = Literal['auto', 'cpu']


def fit(
    X: ArrayLike | RegressionDesign,
    y: ArrayLike | None = None,
    *,
    weights: ArrayLike | None = None,
    attribute_names: Sequence[str] | None = None,
    selection: str | SelectionMethod = DEFAULT_SELECTION,
    selection_params: Mapping[str, Any] | None = None,
    use_bias: bool = True,
    ridge: float = DEFAULT_RIDGE,
    eliminate_colinear_features: bool = True,
    min_tolerance: float = DEFAULT_MIN_TOLERANCE,
    should_stop: StopSignal | None = None,
    backend: BackendChoice = 'auto',
) -> LinearSolution:
    """
    Fit a linear regression model with attribute selection.

    Fits y ~ X by (ridge) weighted least squares on all numeric attributes,
    removes collinear attributes, reduces the attribute set with the chosen
    selection method and computes standard errors, t-statistics and
    p-values for the final model.

    This is the primary public API. All input validation, backend
    selection and result wrapping happens here.

    Args:
        X: Attribute matrix (n x p), or a prepared RegressionDesign
            (then y, weights and attribute_names must be omitted)
        y: Label (n,). Numeric, or a two-class nominal label which is
            fitted as 0/1.
        weights: Optional per-example weights (n,)
        attribute_names: Optional column names
        selection: Selection method name ('m5_prime', 'greedy', 'none',
            't_test', 'iterative_t_test') or a SelectionMethod instance
        selection_params: Parameters for a selection given by name,
            e.g. {'alpha': 0.01}
        use_bias: Fit an intercept
        ridge: Ridge parameter, >= 0 (0 = ordinary least squares)
        eliminate_colinear_features: Remove attributes whose tolerance is
            below min_tolerance before selection
        min_tolerance: Tolerance threshold in [0, 1]
        should_stop: Optional zero-argument callable; when it returns True
            the fit is abandoned with FitCancelledError
        backend: Computational backend ('auto' or 'cpu')

    Returns:
        LinearSolution with coefficients, inference and summary methods

    Raises:
        ConfigurationError: If a setting is invalid (raised before the
            data is looked at)
        ValidationError: If inputs are invalid
        DimensionError: If X and y have inconsistent dimensions
        SingularMatrixError: If a system stays singular after ridge
            escalation
        FitCancelledError: If should_stop fired

    Example:
        >>> import numpy as np
        >>> from pylinselect.regression import fit
        >>>
        >>> X = np.random.randn(100, 3)
        >>> y = X @ [2.0, 0.0, -1.0] + 0.5 + np.random.randn(100) * 0.1
        >>>
        >>> result = fit(X, y, selection='t_test')
        >>> print(result.selected_attribute_names)
        >>> print(result.summary())
    """
    # === Configuration ===
    # Settings are checked before any pass over the data
    config = build_config(
        selection=selection,
        selection_params=selection_params,
        use_bias=use_bias,
        ridge=ridge,
        eliminate_colinear_features=eliminate_colinear_features,
        min_tolerance=min_tolerance,
    )
    if should_stop is not None and not callable(should_stop):
        raise ValidationError("should_stop must be callable or None")

    # === Construct Design ===
    if isinstance(X, RegressionDesign):
        if y is not None or weights is not None or attribute_names is not None:
            raise ValidationError(
                "y, weights and attribute_names must be omitted when X is a RegressionDesign"
            )
        design = X
    else:
        if y is None:
            raise ValidationError("y is required unless X is a RegressionDesign")
        design = RegressionDesign.from_arrays(
            X, y, weights=weights, attribute_names=attribute_names
        )

    # === Select Backend ===
    backend_impl = _get_backend(backend, config, should_stop)

    # === Solve ===
    result = backend_impl.solve(design)
    for message in result.warnings:
        warnings.warn(message, RuntimeWarning, stacklevel=2)

    # === Wrap and Return ===
    return LinearSolution(_result=result, _design=design)


def _get_backend(
    choice: BackendChoice,
    config: RegressionConfig,
    should_stop: StopSignal | None,
) -> CPUNormalEquationsBackend:
    """
    Select and instantiate the appropriate backend.

    Raises:
        ValidationError: If unknown backend specified
    """
    if choice in ('auto', 'cpu'):
        return CPUNormalEquationsBackend(config, should_stop)
    raise ValidationError(f"Unknown backend: {choice!r}. Available: 'auto', 'cpu'")
