"""
Run configuration for a regression fit.

fit() validates its keyword arguments here, at the API boundary, so that a
bad setting fails before any pass over the data. The backend receives the
frozen RegressionConfig and trusts it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from pylinselect.core.exceptions import ConfigurationError
from pylinselect.core.validation import check_bool, check_in_range
from pylinselect.regression.selection import SelectionMethod, selection_method


DEFAULT_SELECTION = 'm5_prime'
DEFAULT_RIDGE = 1e-8
DEFAULT_MIN_TOLERANCE = 0.05


@dataclass(frozen=True)
class RegressionConfig:
    """
    Validated fit settings.

    Attributes:
        selection: Attribute selection method
        use_bias: Fit an intercept
        ridge: Ridge parameter (0 = ordinary least squares)
        eliminate_colinear_features: Run the tolerance-based collinearity
            elimination before selection
        min_tolerance: Attributes with tolerance below this are removed
    """
    selection: SelectionMethod
    use_bias: bool = True
    ridge: float = DEFAULT_RIDGE
    eliminate_colinear_features: bool = True
    min_tolerance: float = DEFAULT_MIN_TOLERANCE


def build_config(
    *,
    selection: str | SelectionMethod,
    selection_params: Mapping[str, Any] | None,
    use_bias: Any,
    ridge: Any,
    eliminate_colinear_features: Any,
    min_tolerance: Any,
) -> RegressionConfig:
    """
    Validate raw settings and freeze them into a RegressionConfig.

    Raises:
        ConfigurationError: On any invalid setting
    """
    if isinstance(selection, SelectionMethod):
        if selection_params:
            raise ConfigurationError(
                "selection_params can only be combined with a selection name; "
                "set the parameters on the SelectionMethod instance instead",
                parameter='selection_params', value=dict(selection_params),
            )
        method = selection
    else:
        method = selection_method(selection, **dict(selection_params or {}))

    return RegressionConfig(
        selection=method,
        use_bias=check_bool(use_bias, 'use_bias'),
        ridge=check_in_range(ridge, 'ridge', 0.0, float('inf'), upper_inclusive=False),
        eliminate_colinear_features=check_bool(
            eliminate_colinear_features, 'eliminate_colinear_features'
        ),
        min_tolerance=check_in_range(min_tolerance, 'min_tolerance', 0.0, 1.0),
    )
