"""
Attribute selection methods.

Every method takes the fit on all usable attributes (after collinearity
elimination) and returns a FitResult for a reduced attribute set:

    NoSelection      keep everything
    AkaikeBackward   drop the smallest standardized coefficient while an
                     Akaike-style criterion improves ("M5 prime")
    GreedyBackward   drop whichever attribute improves the criterion most
    TTestFilter      one pass, drop attributes whose t-test is not
                     significant at alpha
    IterativeTTest   alternate forward inclusion and TTestFilter passes
                     until the attribute set stops changing

Methods are frozen dataclasses; their tunable fields are declared in a
static `parameters` tuple and range-checked on construction. Names map to
classes through SELECTION_METHODS, see selection_method().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar
import numpy as np
from numpy.typing import NDArray

from pylinselect.core.exceptions import ConfigurationError
from pylinselect.core.compute.cancellation import StopSignal, check_for_stop
from pylinselect.core.validation import check_in_range, check_positive_int
from pylinselect.regression._common import FitResult, SelectionStep
from pylinselect.regression._inference import approximate_standard_error, t_test
from pylinselect.regression._linear_system import fit_subset
from pylinselect.regression._tolerance import tolerance
from pylinselect.regression.design import RegressionDesign

logger = logging.getLogger(__name__)


# =============================================================================
# Parameter declarations
# =============================================================================


@dataclass(frozen=True)
class ParameterSpec:
    """
    Declaration of one selection-method parameter.

    Attributes:
        name: Keyword the method accepts
        kind: float or int
        default: Default value
        lower, upper: Range bounds (None for unbounded)
        lower_inclusive, upper_inclusive: Whether the bounds are allowed
        description: One-line help text
    """
    name: str
    kind: type
    default: Any
    lower: float | None = None
    upper: float | None = None
    lower_inclusive: bool = True
    upper_inclusive: bool = True
    description: str = ''

    def validate(self, value: Any) -> Any:
        """Return the checked value; raise ConfigurationError if out of range."""
        if self.kind is int:
            value = check_positive_int(value, self.name)
            if self.upper is not None and value > self.upper:
                raise ConfigurationError(
                    f"{self.name} must be <= {self.upper}, got {value}",
                    parameter=self.name, value=value,
                )
            return value
        return check_in_range(
            value,
            self.name,
            -np.inf if self.lower is None else self.lower,
            np.inf if self.upper is None else self.upper,
            lower_inclusive=self.lower_inclusive,
            upper_inclusive=self.upper_inclusive,
        )


def _alpha(name: str, description: str) -> ParameterSpec:
    return ParameterSpec(
        name, float, 0.05, 0.0, 1.0,
        lower_inclusive=False, upper_inclusive=False,
        description=description,
    )


# =============================================================================
# Context
# =============================================================================


@dataclass
class SelectionContext:
    """
    Everything a selection method needs besides the baseline fit.

    One context lives for one fit() call. The trace and notes lists are
    the only mutable parts; methods append to them, nothing else.

    Attributes:
        design: The regression design
        label: Numeric working label (n,)
        ridge: Ridge parameter for every refit
        use_bias: Whether models have an intercept
        means, stds: Weighted mean / std of every attribute (p,)
        label_mean, label_std: Weighted mean / std of the label
        error_on_full_data: Squared error of the baseline fit
        number_of_used_attributes: Parameters of the baseline model
            (active attributes + 1)
        r_squared_full: Squared correlation of the baseline predictions
            with the label, used by every approximate p-value
        should_stop: Optional cancellation hook
        trace: Accepted selection steps, in order
        notes: Non-fatal warnings raised during selection
        info: Method-specific diagnostics (e.g. iteration counts)
    """
    design: RegressionDesign
    label: NDArray[np.floating[Any]]
    ridge: float
    use_bias: bool
    means: NDArray[np.floating[Any]]
    stds: NDArray[np.floating[Any]]
    label_mean: float
    label_std: float
    error_on_full_data: float
    number_of_used_attributes: int
    r_squared_full: float
    should_stop: StopSignal | None = None
    trace: list[SelectionStep] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    info: dict[str, Any] = field(default_factory=dict)

    @property
    def n(self) -> int:
        return self.design.n

    @property
    def p(self) -> int:
        return self.design.p

    def refit(self, mask: NDArray[np.bool_]) -> FitResult:
        """Fit the given mask with the context's means, ridge and bias."""
        return fit_subset(
            self.design, self.label, mask, self.means, self.label_mean,
            self.ridge, self.use_bias, self.should_stop,
        )

    def record(self, step: SelectionStep) -> None:
        logger.debug(
            "%s %s (error=%.6g, criterion=%s)",
            step.action, self.design.attribute_names[step.attribute],
            step.squared_error, step.criterion,
        )
        self.trace.append(step)


# =============================================================================
# Shared helpers
# =============================================================================


def _error_ratio(error: float, error_on_full_data: float) -> float:
    if error_on_full_data > 0:
        return error / error_on_full_data
    return 1.0 if error <= 0 else float('inf')


def akaike_criterion(error: float, n_parameters: int, context: SelectionContext) -> float:
    """
    (error / error_full) · (n - used₀) + 2 · n_parameters

    used₀ is the parameter count of the baseline model, n_parameters that
    of the candidate (active attributes + 1).
    """
    scale = context.n - context.number_of_used_attributes
    return _error_ratio(error, context.error_on_full_data) * scale + 2.0 * n_parameters


def standardized_magnitudes(fit: FitResult, context: SelectionContext) -> NDArray[np.floating[Any]]:
    """|β_j · sd(x_j) / sd(y)| for every active attribute, in dataset order."""
    active = np.flatnonzero(fit.mask)
    label_std = context.label_std if context.label_std > 0 else 1.0
    return np.abs(fit.weights * context.stds[active] / label_std)


def attribute_p_value(fit: FitResult, index: int, context: SelectionContext) -> float:
    """
    Approximate t-test p-value of one active attribute of a fit.

    The standard error uses the R² of the full-data model, not of the fit
    being tested.

    NaN when the F-distribution is undefined (n <= number of
    coefficients) or the standard error is degenerate.
    """
    df = context.n - len(fit.coefficients)
    if df <= 0:
        return float('nan')
    position = int(np.count_nonzero(fit.mask[:index]))
    tol = tolerance(
        context.design, fit.mask, index, context.ridge, context.use_bias, context.should_stop
    )
    se = approximate_standard_error(
        tol, context.r_squared_full, context.n, context.p, context.label_std, context.stds[index]
    )
    _, p_value = t_test(fit.coefficients[position], se, df)
    return p_value


def attribute_p_values(fit: FitResult, context: SelectionContext) -> dict[int, float]:
    """Approximate p-value of every active attribute, keyed by attribute index."""
    return {
        int(i): attribute_p_value(fit, int(i), context)
        for i in np.flatnonzero(fit.mask)
    }


def filter_by_p_value(fit: FitResult, context: SelectionContext, alpha: float) -> FitResult:
    """
    One backward t-test pass.

    Every active attribute is tested against the mask of `fit`; those whose
    p-value is not <= alpha (including NaN, i.e. undeterminable) are
    dropped together and the survivors are refit once.
    """
    check_for_stop(context.should_stop, 't-test filter')
    mask = fit.mask.copy()
    for index, p_value in attribute_p_values(fit, context).items():
        if not p_value <= alpha:
            mask[index] = False
    if np.array_equal(mask, fit.mask):
        return fit

    reduced = context.refit(mask)
    for index in np.flatnonzero(fit.mask & ~mask):
        context.record(SelectionStep('remove', int(index), reduced.squared_error))
    return reduced


def forward_step(
    fit: FitResult,
    allowed: NDArray[np.bool_],
    context: SelectionContext,
    alpha: float,
) -> NDArray[np.bool_]:
    """
    Find allowed-but-inactive attributes that are significant on their own.

    Each candidate is added alone to the mask of `fit`, the model refit and
    the candidate's p-value tested at alpha.

    Returns:
        Mask (p,) of attributes to include in the next round
    """
    include = np.zeros_like(allowed)
    for index in np.flatnonzero(allowed & ~fit.mask):
        check_for_stop(context.should_stop, 'forward selection')
        mask = fit.mask.copy()
        mask[index] = True
        trial = context.refit(mask)
        if attribute_p_value(trial, int(index), context) <= alpha:
            include[index] = True
    return include


# =============================================================================
# Methods
# =============================================================================


@dataclass(frozen=True)
class SelectionMethod:
    """
    Base class of the selection methods.

    Subclasses set `name`, declare their fields in `parameters` and
    implement apply().
    """
    name: ClassVar[str] = ''
    parameters: ClassVar[tuple[ParameterSpec, ...]] = ()

    def __post_init__(self) -> None:
        for spec in self.parameters:
            object.__setattr__(self, spec.name, spec.validate(getattr(self, spec.name)))

    def apply(self, baseline: FitResult, context: SelectionContext) -> FitResult:
        """Return the selected subset for a baseline fit."""
        raise NotImplementedError

    def params(self) -> dict[str, Any]:
        """Current parameter values, keyed by name."""
        return {spec.name: getattr(self, spec.name) for spec in self.parameters}


@dataclass(frozen=True)
class NoSelection(SelectionMethod):
    """Keep every attribute of the baseline fit."""
    name: ClassVar[str] = 'none'

    def apply(self, baseline: FitResult, context: SelectionContext) -> FitResult:
        return baseline


@dataclass(frozen=True)
class AkaikeBackward(SelectionMethod):
    """
    Backward elimination by standardized coefficient (M5 prime).

    Each round tentatively drops the attribute with the smallest
    |standardized coefficient| (the first one in dataset order on ties),
    refits, and keeps the removal only if the Akaike-style criterion
    strictly decreases. Stops at the first rejected removal.
    """
    name: ClassVar[str] = 'm5_prime'

    def apply(self, baseline: FitResult, context: SelectionContext) -> FitResult:
        current = baseline
        criterion = akaike_criterion(current.squared_error, current.n_active + 1, context)

        while current.n_active > 0:
            check_for_stop(context.should_stop, 'M5 prime selection')
            active = np.flatnonzero(current.mask)
            candidate = int(active[np.argmin(standardized_magnitudes(current, context))])

            mask = current.mask.copy()
            mask[candidate] = False
            trial = context.refit(mask)
            trial_criterion = akaike_criterion(trial.squared_error, trial.n_active + 1, context)
            if not trial_criterion < criterion:
                break

            current, criterion = trial, trial_criterion
            context.record(SelectionStep('remove', candidate, trial.squared_error, trial_criterion))

        return current


@dataclass(frozen=True)
class GreedyBackward(SelectionMethod):
    """
    Exhaustive backward elimination.

    Each round tries removing every active attribute and keeps the single
    removal with the lowest criterion, provided it strictly improves on
    the current one (first in dataset order on ties).
    """
    name: ClassVar[str] = 'greedy'

    def apply(self, baseline: FitResult, context: SelectionContext) -> FitResult:
        current = baseline
        criterion = akaike_criterion(current.squared_error, current.n_active + 1, context)

        while current.n_active > 0:
            check_for_stop(context.should_stop, 'greedy selection')
            best: FitResult | None = None
            best_index = -1
            best_criterion = criterion
            for index in np.flatnonzero(current.mask):
                mask = current.mask.copy()
                mask[index] = False
                trial = context.refit(mask)
                trial_criterion = akaike_criterion(trial.squared_error, trial.n_active + 1, context)
                if trial_criterion < best_criterion:
                    best, best_index, best_criterion = trial, int(index), trial_criterion

            if best is None:
                break
            current, criterion = best, best_criterion
            context.record(SelectionStep('remove', best_index, best.squared_error, best_criterion))

        return current


@dataclass(frozen=True)
class TTestFilter(SelectionMethod):
    """Single backward pass dropping attributes not significant at alpha."""
    name: ClassVar[str] = 't_test'
    parameters: ClassVar[tuple[ParameterSpec, ...]] = (
        _alpha('alpha', 'Significance level of the t-test'),
    )
    alpha: float = 0.05

    def apply(self, baseline: FitResult, context: SelectionContext) -> FitResult:
        return filter_by_p_value(baseline, context, self.alpha)


@dataclass(frozen=True)
class IterativeTTest(SelectionMethod):
    """
    Forward/backward selection driven by t-tests.

    Starts from the empty model, with the baseline's active attributes as
    the allowed set. Each round runs forward_step() at alpha_forward, adds
    every attribute it found, refits, and runs filter_by_p_value() at
    alpha_backward. Stops when a round leaves the attribute set unchanged
    or after max_iterations rounds.
    """
    name: ClassVar[str] = 'iterative_t_test'
    parameters: ClassVar[tuple[ParameterSpec, ...]] = (
        ParameterSpec('max_iterations', int, 10, 1, None,
                      description='Maximum number of forward/backward rounds'),
        _alpha('alpha_forward', 'Significance level for adding an attribute'),
        _alpha('alpha_backward', 'Significance level for keeping an attribute'),
    )
    max_iterations: int = 10
    alpha_forward: float = 0.05
    alpha_backward: float = 0.05

    def run_round(
        self,
        current: FitResult,
        allowed: NDArray[np.bool_],
        context: SelectionContext,
    ) -> FitResult:
        """One forward step followed by one backward filter pass."""
        include = forward_step(current, allowed, context, self.alpha_forward)
        expanded = current
        if include.any():
            expanded = context.refit(current.mask | include)
            for index in np.flatnonzero(include):
                context.record(SelectionStep('add', int(index), expanded.squared_error))
        return filter_by_p_value(expanded, context, self.alpha_backward)

    def apply(self, baseline: FitResult, context: SelectionContext) -> FitResult:
        allowed = baseline.mask.copy()
        current = context.refit(np.zeros_like(allowed))
        previous = current.mask

        converged = False
        iterations = 0
        while iterations < self.max_iterations:
            iterations += 1
            current = self.run_round(current, allowed, context)
            if np.array_equal(current.mask, previous):
                converged = True
                break
            previous = current.mask

        context.info['iterations'] = iterations
        context.info['converged'] = converged
        if not converged:
            context.notes.append(
                f"Iterative t-test stopped after max_iterations={self.max_iterations} "
                f"rounds without the attribute set converging"
            )
        return current


# =============================================================================
# Registry
# =============================================================================


SELECTION_METHODS: dict[str, type[SelectionMethod]] = {
    'none': NoSelection,
    'm5_prime': AkaikeBackward,
    'greedy': GreedyBackward,
    't_test': TTestFilter,
    'iterative_t_test': IterativeTTest,
}

_ALIASES = {
    'akaike': 'm5_prime',
    'm5p': 'm5_prime',
    'no_selection': 'none',
}


def _normalize(name: str) -> str:
    key = name.strip().lower().replace('-', '_').replace(' ', '_')
    return _ALIASES.get(key, key)


def selection_method(name: str, **params: Any) -> SelectionMethod:
    """
    Build a selection method from its name and parameters.

    Names are case-insensitive; spaces and hyphens count as underscores,
    so 'M5 prime', 'T-Test' and 'Iterative T-Test' are accepted, as is
    'akaike' for 'm5_prime'.

    Raises:
        ConfigurationError: Unknown name, unknown parameter, or a
            parameter out of its declared range
    """
    if not isinstance(name, str):
        raise ConfigurationError(
            f"selection must be a name or a SelectionMethod, got {type(name).__name__}",
            parameter='selection', value=name,
        )
    key = _normalize(name)
    method_class = SELECTION_METHODS.get(key)
    if method_class is None:
        raise ConfigurationError(
            f"Unknown selection method {name!r}. Available: {list(SELECTION_METHODS)}",
            parameter='selection', value=name,
        )

    declared = {spec.name for spec in method_class.parameters}
    unknown = sorted(set(params) - declared)
    if unknown:
        raise ConfigurationError(
            f"Selection method {key!r} has no parameter(s) {unknown}. "
            f"Declared: {sorted(declared)}",
            parameter=unknown[0], value=params[unknown[0]],
        )
    return method_class(**params)
