"""
Regression solution type.

LinearSolution is the user-facing model: accessors over the backend Result,
prediction, the attribute-weight mapping and an R-style summary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pylinselect.core.exceptions import DimensionError, ValidationError
from pylinselect.core.result import Result
from pylinselect.core.validation import check_array, check_finite
from pylinselect.regression._common import LinearParams

if TYPE_CHECKING:
    from pylinselect.regression.design import RegressionDesign


def _significance_stars(p: float) -> str:
    """Return significance stars like R."""
    if np.isnan(p):
        return ' '
    if p < 0.001:
        return '***'
    elif p < 0.01:
        return '**'
    elif p < 0.05:
        return '*'
    elif p < 0.1:
        return '.'
    else:
        return ' '


def _format_pvalue(p: float) -> str:
    """Format p-value like R."""
    if np.isnan(p):
        return 'NA'
    if p < 2e-16:
        return '<2e-16'
    if p < 0.0001:
        return f'{p:.2e}'
    return f'{p:.4f}'


def _format_number(value: float, width: int, precision: int) -> str:
    if np.isnan(value):
        return f"{'NA':>{width}s}"
    if np.isinf(value):
        return f"{'Inf' if value > 0 else '-Inf':>{width}s}"
    return f"{value:{width}.{precision}f}"


@dataclass
class LinearSolution:
    """
    User-facing regression model.

    Wraps the backend Result. Coefficient-level arrays (coefficients,
    standard_errors, ...) have one entry per selected attribute, in
    dataset order, followed by the intercept.
    """
    _result: Result[LinearParams]
    _design: 'RegressionDesign'

    @property
    def params(self) -> LinearParams:
        return self._result.params

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        return self._result.params.fit.coefficients

    @property
    def intercept(self) -> float:
        return self._result.params.fit.intercept

    @property
    def used_attributes(self) -> NDArray[np.bool_]:
        """Activation mask over every original attribute."""
        return self._result.params.fit.mask.copy()

    @property
    def selected_attribute_names(self) -> tuple[str, ...]:
        names = self._result.params.attribute_names
        return tuple(names[i] for i in np.flatnonzero(self._result.params.fit.mask))

    @property
    def coefficient_names(self) -> tuple[str, ...]:
        return self.selected_attribute_names + ('(Intercept)',)

    @property
    def standard_errors(self) -> NDArray[np.floating[Any]]:
        return self._result.params.inference.standard_errors

    @property
    def standardized_coefficients(self) -> NDArray[np.floating[Any]]:
        return self._result.params.inference.standardized_coefficients

    @property
    def tolerances(self) -> NDArray[np.floating[Any]]:
        return self._result.params.inference.tolerances

    @property
    def t_statistics(self) -> NDArray[np.floating[Any]]:
        return self._result.params.inference.t_statistics

    @property
    def p_values(self) -> NDArray[np.floating[Any]]:
        return self._result.params.inference.p_values

    @property
    def squared_error(self) -> float:
        return self._result.params.fit.squared_error

    @property
    def r_squared(self) -> float:
        return self._result.params.r_squared

    @property
    def use_bias(self) -> bool:
        return self._result.params.use_bias

    @property
    def class_names(self) -> tuple[str, str] | None:
        return self._result.params.class_names

    @property
    def is_classification(self) -> bool:
        return self._result.params.class_names is not None

    @property
    def n_observations(self) -> int:
        return self._result.params.n_observations

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def attribute_weights(self) -> dict[str, float]:
        """
        Weight of every original attribute.

        Attributes that are not in the model (nominal, constant, collinear
        or deselected) map to 0.0.
        """
        params = self._result.params
        weights = dict.fromkeys(params.attribute_names, 0.0)
        for name, value in zip(self.selected_attribute_names, params.fit.weights):
            weights[name] = float(value)
        return weights

    def predict(self, X: ArrayLike) -> NDArray[np.floating[Any]]:
        """
        Predict the numeric label.

        Args:
            X: Attribute matrix (m x p) laid out like the training data.
                Only the selected columns are read, so nominal columns may
                hold anything.

        Returns:
            Predictions (m,). In two-class mode this is the score on the
            0/1 working label.
        """
        X_raw = np.asarray(X)
        if X_raw.ndim == 1:
            X_raw = X_raw.reshape(1, -1)
        p = len(self._result.params.attribute_names)
        if X_raw.ndim != 2 or X_raw.shape[1] != p:
            raise DimensionError(
                f"X: expected {p} columns, got shape {X_raw.shape}"
            )
        block = X_raw[:, self._result.params.fit.mask]
        if block.dtype == object:
            try:
                block = block.astype(np.float64)
            except (TypeError, ValueError) as e:
                raise ValidationError(f"X: selected columns must be numeric: {e}") from e
        block = check_array(block, 'X')
        check_finite(block, 'X')

        fit = self._result.params.fit
        prediction = block @ fit.weights
        if self.use_bias:
            prediction = prediction + fit.intercept
        return prediction

    def predict_class(self, X: ArrayLike) -> NDArray[Any]:
        """
        Predict class names for a model fitted on a two-class label.

        A score of at least 0.5 is the positive class.

        Raises:
            ValidationError: If the model was fitted on a numeric label
        """
        if self.class_names is None:
            raise ValidationError(
                "predict_class requires a model fitted on a two-class nominal label"
            )
        negative, positive = self.class_names
        scores = self.predict(X)
        return np.where(scores >= 0.5, positive, negative)

    def summary(self) -> str:
        """Generate R-style summary output."""
        params = self._result.params
        inference = params.inference
        selection = self.info.get('selection', '?')

        lines = [
            "Linear Regression with Attribute Selection",
            "=" * 72,
            f"Label: {params.label_name}"
            + (f" ({self.class_names[1]} = 1, {self.class_names[0]} = 0)"
               if self.class_names else ""),
            f"Observations: {params.n_observations}",
            f"Attributes: {len(params.attribute_names)} "
            f"(selected {params.fit.n_active})",
            f"Selection: {selection}",
            f"Ridge: {self.info.get('ridge', float('nan')):g}",
            f"Squared error: {params.fit.squared_error:.6f}",
            f"R-squared: {params.r_squared:.6f}",
            "",
            "Coefficients:",
            f" {'':>15s} {'Estimate':>12s} {'Std. Error':>12s} {'Std. Coef':>10s} "
            f"{'Tolerance':>10s} {'t value':>10s} {'Pr(>|t|)':>10s}",
        ]

        for i, name in enumerate(self.coefficient_names):
            lines.append(
                f" {name[:15]:>15s} {self.coefficients[i]:12.5f} "
                f"{_format_number(inference.standard_errors[i], 12, 5)} "
                f"{_format_number(inference.standardized_coefficients[i], 10, 4)} "
                f"{_format_number(inference.tolerances[i], 10, 4)} "
                f"{_format_number(inference.t_statistics[i], 10, 3)} "
                f"{_format_pvalue(inference.p_values[i]):>10s} "
                f"{_significance_stars(inference.p_values[i])}"
            )

        lines.append("---")
        lines.append("Signif. codes:  0 '***' 0.001 '**' 0.01 '*' 0.05 '.' 0.1 ' ' 1")
        if self.info.get('inference') == 'approximate':
            lines.append("Standard errors approximated from tolerances.")
        lines.append("")
        lines.append(f"Backend: {self.backend_name}")
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"LinearSolution(n={self.n_observations}, "
            f"selected={self._result.params.fit.n_active}/"
            f"{len(self._result.params.attribute_names)}, "
            f"r_squared={self.r_squared:.4f})"
        )
