"""
Coefficient inference for a fitted attribute subset.

Exact path: SE(β) = sqrt(mse · diag((X'WX)⁻¹)) on the active columns plus
an intercept column. Approximate path, used when (X'WX)⁻¹ cannot be
formed and by the t-test selection methods:

    SE(β_j) = sqrt((1 - R²) / (tol_j · (n - p - 1))) · sd(y) / sd(x_j)

where R² is that of the full-data model, whichever subset is tested.

t = β / SE and p = 1 - F(t²; 1, n - len(β)), the two-sided t-test written
through the F(1, df) distribution.
"""

from __future__ import annotations

from typing import Any
import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pylinselect.core.compute.cancellation import StopSignal
from pylinselect.core.compute.linalg import try_invert
from pylinselect.core.compute.tolerances import is_zero
from pylinselect.regression._common import FitResult, InferenceReport
from pylinselect.regression._tolerance import tolerances as attribute_tolerances
from pylinselect.regression.design import RegressionDesign


def t_test(coefficient: float, standard_error: float, df: int) -> tuple[float, float]:
    """
    t statistic and p-value for H0: coefficient = 0.

    A (numerically) zero standard error gives t = 0, p = 1 for a zero
    coefficient and t = +inf, p = 0 otherwise. With df <= 0 the
    F-distribution is undefined and the p-value is NaN.

    Returns:
        (t_statistic, p_value)
    """
    if is_zero(standard_error):
        if is_zero(coefficient):
            return 0.0, 1.0
        return float('inf'), 0.0

    with np.errstate(divide='ignore', invalid='ignore'):
        t = np.float64(coefficient) / np.float64(standard_error)
    if df <= 0:
        return float(t), float('nan')
    return float(t), float(sp_stats.f.sf(t * t, 1, df))


def approximate_standard_error(
    tol: float,
    r_squared: float,
    n: int,
    n_attributes: int,
    label_std: float,
    attribute_std: float,
) -> float:
    """
    Standard error of one coefficient from its tolerance and the model R².

    Degenerate inputs (tolerance 0, n <= p + 1, zero std) propagate as
    inf/NaN instead of raising.
    """
    with np.errstate(divide='ignore', invalid='ignore'):
        ratio = np.float64(1.0 - r_squared) / (np.float64(tol) * (n - n_attributes - 1.0))
        return float(np.sqrt(ratio) * np.float64(label_std) / np.float64(attribute_std))


def _standardized(
    coefficients: NDArray[np.floating[Any]],
    stds: NDArray[np.floating[Any]],
    label_std: float,
) -> NDArray[np.floating[Any]]:
    with np.errstate(divide='ignore', invalid='ignore'):
        return coefficients * stds / np.float64(label_std)


def compute_inference(
    design: RegressionDesign,
    fit: FitResult,
    *,
    r_squared: float,
    use_bias: bool,
    ridge: float,
    stds: NDArray[np.floating[Any]],
    label_std: float,
    should_stop: StopSignal | None = None,
) -> tuple[InferenceReport, tuple[str, ...]]:
    """
    Standard errors, t-statistics and p-values for every coefficient.

    Args:
        design: The regression design
        fit: Final fitted subset
        r_squared: Squared correlation of the full-data model predictions
            with the working label, used by the approximate path
        use_bias: Whether the model has an intercept
        ridge: Ridge used for the tolerance regressions
        stds: Standard deviation of every attribute (p,)
        label_std: Standard deviation of the label
        should_stop: Optional cancellation hook

    Returns:
        (InferenceReport, warnings)
    """
    n = design.n
    active = np.flatnonzero(fit.mask)
    k = len(active)
    length = k + 1
    beta = fit.coefficients
    n_params = k + (1 if use_bias else 0)
    df_f = n - length

    residual_df = n - n_params
    mse = fit.squared_error / residual_df if residual_df > 0 else float('nan')

    block = design.X[:, active]
    if use_bias:
        block = np.column_stack([block, np.ones(n)])
    if design.weights is None:
        xtwx = block.T @ block
    else:
        xtwx = (block.T * design.weights) @ block
    inverse = try_invert(xtwx)

    by_index = attribute_tolerances(design, fit.mask, ridge, use_bias, should_stop)
    tolerances = np.full(length, np.nan)
    tolerances[:k] = [by_index[int(i)] for i in active]

    standard_errors = np.zeros(length)
    warnings: tuple[str, ...] = ()
    with np.errstate(invalid='ignore'):
        if inverse is not None:
            diagonal = np.diag(inverse)
            standard_errors[:k] = np.sqrt(mse * diagonal[:k])
            standard_errors[k] = np.sqrt(mse * diagonal[k]) if use_bias else 0.0
        else:
            for j, i in enumerate(active):
                standard_errors[j] = approximate_standard_error(
                    tolerances[j], r_squared, n, design.p, label_std, stds[i]
                )
            standard_errors[k] = float('inf') if use_bias else 0.0
            warnings = (
                "X'WX of the final model could not be inverted; standard errors "
                "are approximated from tolerances and the intercept standard "
                "error is unknown (inf)",
            )

    t_statistics = np.zeros(length)
    p_values = np.zeros(length)
    for j in range(length):
        t_statistics[j], p_values[j] = t_test(beta[j], standard_errors[j], df_f)

    standardized = np.full(length, np.nan)
    standardized[:k] = _standardized(beta[:k], stds[active], label_std)

    report = InferenceReport(
        standard_errors=standard_errors,
        standardized_coefficients=standardized,
        tolerances=tolerances,
        t_statistics=t_statistics,
        p_values=p_values,
        exact=inverse is not None,
    )
    return report, warnings
