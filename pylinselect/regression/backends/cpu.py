"""
CPU backend for linear regression with attribute selection.

Runs the whole fitting pipeline on the CPU with NumPy:

    1. derive the numeric working label (two-class nominal -> 0/1)
    2. activate numeric attributes, drop constant ones
    3. fit all active attributes (ridge normal equations)
    4. optionally remove collinear attributes by tolerance
    5. hand the fit to the configured selection method
    6. compute coefficient inference for the selected model
"""

from __future__ import annotations

import logging
from typing import Any
import numpy as np
from numpy.typing import NDArray

from pylinselect.core.result import Result
from pylinselect.core.compute.cancellation import StopSignal, check_for_stop
from pylinselect.core.compute.timing import Timer
from pylinselect.core.compute.tolerances import TIE_EPSILON
from pylinselect.regression._common import FitResult, LinearParams
from pylinselect.regression._config import RegressionConfig
from pylinselect.regression._inference import compute_inference
from pylinselect.regression._linear_system import (
    model_r_squared,
    perform_regression,
    squared_error,
)
from pylinselect.regression._tolerance import tolerance
from pylinselect.regression.design import RegressionDesign
from pylinselect.regression.selection import SelectionContext

logger = logging.getLogger(__name__)


class CPUNormalEquationsBackend:
    """
    CPU backend solving ridge normal equations per attribute subset.

    Implements the Backend protocol for RegressionDesign -> LinearParams.
    Configuration is fixed at construction; solve() can be called on any
    number of designs.
    """

    def __init__(self, config: RegressionConfig, should_stop: StopSignal | None = None):
        self._config = config
        self._should_stop = should_stop

    @property
    def name(self) -> str:
        return 'cpu_normal_equations'

    @property
    def config(self) -> RegressionConfig:
        return self._config

    def solve(self, design: RegressionDesign) -> Result[LinearParams]:
        """
        Fit, select and infer.

        Args:
            design: Validated regression design

        Returns:
            Result containing LinearParams

        Raises:
            FitCancelledError: If the stop signal fired
            SingularMatrixError: If a normal-equation system could not be
                solved even with ridge escalation
        """
        config = self._config
        stop = self._should_stop
        timer = Timer()
        timer.start()

        with design.binarized_label() as label:
            with timer.section('preprocessing'):
                check_for_stop(stop, 'preprocessing')
                X = design.X
                mask = design.numeric
                means = np.zeros(design.p)
                stds = np.zeros(design.p)
                if mask.any():
                    means[mask] = design.column_means(X[:, mask])
                    stds[mask] = design.column_std(X[:, mask])
                constant = mask & ((stds == 0) | (np.ptp(X, axis=0) == 0))
                mask = mask & ~constant

                target = label.reshape(-1, 1)
                label_mean = float(design.column_means(target)[0])
                label_std = float(design.column_std(target)[0])
                number_of_used_attributes = int(np.count_nonzero(mask)) + 1

            with timer.section('collinearity'):
                coefficients = perform_regression(
                    design, label, mask, means, label_mean,
                    config.ridge, config.use_bias, stop,
                )
                colinear: list[int] = []
                if config.eliminate_colinear_features:
                    mask, coefficients, colinear = self._eliminate_colinear(
                        design, label, mask, means, label_mean, coefficients
                    )
                error = squared_error(design, label, mask, coefficients, config.use_bias, stop)
                baseline = FitResult(mask=mask.copy(), coefficients=coefficients, squared_error=error)
                r_squared_full = model_r_squared(design, label, baseline, config.use_bias)

            with timer.section('selection'):
                context = SelectionContext(
                    design=design,
                    label=label,
                    ridge=config.ridge,
                    use_bias=config.use_bias,
                    means=means,
                    stds=stds,
                    label_mean=label_mean,
                    label_std=label_std,
                    error_on_full_data=error,
                    number_of_used_attributes=number_of_used_attributes,
                    r_squared_full=r_squared_full,
                    should_stop=stop,
                )
                selected = config.selection.apply(baseline, context)
                logger.debug(
                    "%s selection kept %d of %d attributes",
                    config.selection.name, selected.n_active, baseline.n_active,
                )
            r_squared = model_r_squared(design, label, selected, config.use_bias)

        with timer.section('inference'):
            report, inference_warnings = compute_inference(
                design,
                selected,
                r_squared=r_squared_full,
                use_bias=config.use_bias,
                ridge=config.ridge,
                stds=stds,
                label_std=label_std,
                should_stop=stop,
            )

        timer.stop()

        names = design.attribute_names
        params = LinearParams(
            fit=selected,
            inference=report,
            use_bias=config.use_bias,
            attribute_names=names,
            label_name=design.label_name,
            class_names=design.class_names,
            r_squared=r_squared,
            n_observations=design.n,
        )

        info: dict[str, Any] = {
            'method': 'normal_equations',
            'selection': config.selection.name,
            'selection_params': config.selection.params(),
            'ridge': config.ridge,
            'n_attributes': design.p,
            'n_numeric_attributes': int(np.count_nonzero(design.numeric)),
            'constant_attributes': [names[i] for i in np.flatnonzero(constant)],
            'colinear_attributes': [names[i] for i in colinear],
            'error_on_full_data': error,
            'r_squared_full': r_squared_full,
            'baseline_attributes': [names[i] for i in np.flatnonzero(baseline.mask)],
            'selection_steps': tuple(context.trace),
            'inference': 'exact' if report.exact else 'approximate',
        }
        info.update(context.info)

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(context.notes) + inference_warnings,
        )

    def _eliminate_colinear(
        self,
        design: RegressionDesign,
        label: NDArray[np.floating[Any]],
        mask: NDArray[np.bool_],
        means: NDArray[np.floating[Any]],
        label_mean: float,
        coefficients: NDArray[np.floating[Any]],
    ) -> tuple[NDArray[np.bool_], NDArray[np.floating[Any]], list[int]]:
        """
        Remove attributes with tolerance below min_tolerance, one per pass.

        Each pass removes the attribute with the smallest tolerance; near
        ties (within TIE_EPSILON) go to the later attribute, so of two
        perfectly collinear attributes the first one stays.

        Returns:
            (mask, coefficients, removed attribute indices)
        """
        config = self._config
        removed: list[int] = []
        while True:
            worst = -1
            worst_tolerance = float('inf')
            for index in np.flatnonzero(mask):
                tol = tolerance(
                    design, mask, int(index), config.ridge, config.use_bias, self._should_stop
                )
                if tol < config.min_tolerance and tol <= worst_tolerance + TIE_EPSILON:
                    worst = int(index)
                    worst_tolerance = min(worst_tolerance, tol)
            if worst < 0:
                return mask, coefficients, removed

            logger.debug(
                "removing colinear attribute %s (tolerance=%.3g)",
                design.attribute_names[worst], worst_tolerance,
            )
            mask = mask.copy()
            mask[worst] = False
            removed.append(worst)
            coefficients = perform_regression(
                design, label, mask, means, label_mean,
                config.ridge, config.use_bias, self._should_stop,
            )
