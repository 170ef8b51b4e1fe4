"""
Attribute tolerance (1 / VIF).

The tolerance of an attribute is 1 - r² where r correlates the attribute
with its prediction from every other active attribute. Near 0 means the
attribute is (almost) a linear combination of the others.
"""

from __future__ import annotations

from typing import Any
import numpy as np
from numpy.typing import NDArray

from pylinselect.core.compute.cancellation import StopSignal
from pylinselect.core.compute.statistics import correlation
from pylinselect.regression._linear_system import predict, regress_on_columns
from pylinselect.regression.design import RegressionDesign


def tolerance(
    design: RegressionDesign,
    mask: NDArray[np.bool_],
    index: int,
    ridge: float,
    use_bias: bool,
    should_stop: StopSignal | None = None,
) -> float:
    """
    Tolerance of attribute `index` against the other active attributes.

    Args:
        design: The regression design
        mask: Activation mask (p,); `index` itself is excluded from the
            regressors whether or not it is active
        index: Attribute under test
        ridge: Ridge parameter for the auxiliary regression
        use_bias: Whether the auxiliary regression has an intercept
        should_stop: Optional cancellation hook

    Returns:
        Tolerance in [0, 1]. 1.0 when no other attribute is active.
    """
    others = np.flatnonzero(mask)
    others = others[others != index]
    target = design.X[:, index]

    coefficients = regress_on_columns(
        design, others, target, ridge, use_bias, should_stop
    )
    predicted = predict(design.X[:, others], coefficients, use_bias)

    r = correlation(target, predicted)
    return float(np.clip(1.0 - r * r, 0.0, 1.0))


def tolerances(
    design: RegressionDesign,
    mask: NDArray[np.bool_],
    ridge: float,
    use_bias: bool,
    should_stop: StopSignal | None = None,
) -> dict[int, float]:
    """Tolerance of every active attribute, keyed by attribute index."""
    return {
        int(i): tolerance(design, mask, int(i), ridge, use_bias, should_stop)
        for i in np.flatnonzero(mask)
    }
