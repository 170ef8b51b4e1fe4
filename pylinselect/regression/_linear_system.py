"""
Least squares fits of attribute subsets.

Two call shapes share one kernel:

    perform_regression()    centering means supplied by the caller (the
                            fitting loop computes them once per fit)
    regress_on_columns()    means recomputed for an explicit column subset
                            and an arbitrary target column (used to
                            regress one attribute on the others)

Coefficient vectors are laid out as [w_1, ..., w_k, intercept].
"""

from __future__ import annotations

from typing import Any
import numpy as np
from numpy.typing import NDArray

from pylinselect.core.compute.cancellation import StopSignal, check_for_stop
from pylinselect.core.compute.linalg import solve_ridge_normal_equations
from pylinselect.core.compute.statistics import correlation
from pylinselect.regression._common import FitResult
from pylinselect.regression.design import RegressionDesign


def _solve(
    block: NDArray[np.floating[Any]],
    target: NDArray[np.floating[Any]],
    means: NDArray[np.floating[Any]],
    target_mean: float,
    weights: NDArray[np.floating[Any]] | None,
    ridge: float,
    use_bias: bool,
) -> NDArray[np.floating[Any]]:
    k = block.shape[1]
    coefficients = np.zeros(k + 1, dtype=np.float64)
    if k > 0:
        if use_bias:
            # Centering makes the fitted hyperplane pass through the
            # weighted centroid; the intercept is recovered below.
            solved = solve_ridge_normal_equations(
                block - means, target - target_mean, weights, ridge
            )
        else:
            solved = solve_ridge_normal_equations(block, target, weights, ridge)
        coefficients[:k] = solved.coefficients
    if use_bias:
        coefficients[k] = target_mean - float(coefficients[:k] @ means)
    return coefficients


def perform_regression(
    design: RegressionDesign,
    label: NDArray[np.floating[Any]],
    mask: NDArray[np.bool_],
    means: NDArray[np.floating[Any]],
    label_mean: float,
    ridge: float,
    use_bias: bool,
    should_stop: StopSignal | None = None,
) -> NDArray[np.floating[Any]]:
    """
    Fit the label on the active attributes, centering by supplied means.

    Args:
        design: The regression design
        label: Numeric working label (n,)
        mask: Activation mask (p,)
        means: Centering means for ALL attributes (p,); only the active
            entries are read
        label_mean: Centering mean of the label
        ridge: Ridge parameter
        use_bias: Whether to fit an intercept
        should_stop: Optional cancellation hook

    Returns:
        Coefficients (k + 1,). With no active attributes this is just the
        intercept: label_mean with bias, 0.0 without.
    """
    check_for_stop(should_stop, 'regression')
    return _solve(
        design.X[:, mask], label, means[mask], label_mean,
        design.weights, ridge, use_bias,
    )


def regress_on_columns(
    design: RegressionDesign,
    columns: NDArray[np.intp],
    target: NDArray[np.floating[Any]],
    ridge: float,
    use_bias: bool,
    should_stop: StopSignal | None = None,
) -> NDArray[np.floating[Any]]:
    """
    Fit target on the given attribute columns, computing means on the fly.

    Args:
        design: The regression design
        columns: Attribute indices to regress on, in dataset order
        target: Response (n,), e.g. another attribute's values
        ridge: Ridge parameter
        use_bias: Whether to fit an intercept
        should_stop: Optional cancellation hook

    Returns:
        Coefficients (len(columns) + 1,)
    """
    check_for_stop(should_stop, 'regression')
    block = design.X[:, columns]
    means = design.column_means(block) if block.shape[1] else np.empty(0)
    target_mean = float(design.column_means(target.reshape(-1, 1))[0])
    return _solve(block, target, means, target_mean, design.weights, ridge, use_bias)


def predict(
    block: NDArray[np.floating[Any]],
    coefficients: NDArray[np.floating[Any]],
    use_bias: bool,
) -> NDArray[np.floating[Any]]:
    """Predictions for an (n x k) block of active columns."""
    prediction = block @ coefficients[:-1]
    if use_bias:
        prediction = prediction + coefficients[-1]
    return prediction


def squared_error(
    design: RegressionDesign,
    label: NDArray[np.floating[Any]],
    mask: NDArray[np.bool_],
    coefficients: NDArray[np.floating[Any]],
    use_bias: bool,
    should_stop: StopSignal | None = None,
) -> float:
    """Sum over examples of (prediction - label)^2."""
    check_for_stop(should_stop, 'error computation')
    residuals = predict(design.X[:, mask], coefficients, use_bias) - label
    return float(residuals @ residuals)


def fit_subset(
    design: RegressionDesign,
    label: NDArray[np.floating[Any]],
    mask: NDArray[np.bool_],
    means: NDArray[np.floating[Any]],
    label_mean: float,
    ridge: float,
    use_bias: bool,
    should_stop: StopSignal | None = None,
) -> FitResult:
    """Fit a mask and package coefficients with their training error."""
    coefficients = perform_regression(
        design, label, mask, means, label_mean, ridge, use_bias, should_stop
    )
    error = squared_error(design, label, mask, coefficients, use_bias, should_stop)
    return FitResult(mask=mask.copy(), coefficients=coefficients, squared_error=error)


def model_r_squared(
    design: RegressionDesign,
    label: NDArray[np.floating[Any]],
    fit: FitResult,
    use_bias: bool,
) -> float:
    """Squared correlation between the fit's predictions and the label, capped at 1."""
    prediction = predict(design.X[:, fit.mask], fit.coefficients, use_bias)
    r = correlation(label, prediction)
    return min(r * r, 1.0)
