"""
Linear regression with attribute selection.

Public API:
    fit(X, y, ...) -> LinearSolution

The fit() function is the entry point. It handles:
    - Configuration checks
    - Design construction
    - Backend selection
    - Result wrapping

Selection methods can be named ('m5_prime', 'greedy', 'none', 't_test',
'iterative_t_test') or passed as instances for full control over their
parameters.

Example:
    >>> from pylinselect.regression import fit, IterativeTTest
    >>> result = fit(X, y)
    >>> result = fit(X, y, selection=IterativeTTest(alpha_forward=0.01))
    >>> print(result.summary())
"""

from pylinselect.regression._common import (
    FitResult,
    InferenceReport,
    LinearParams,
    SelectionStep,
)
from pylinselect.regression.design import RegressionDesign
from pylinselect.regression.selection import (
    SELECTION_METHODS,
    AkaikeBackward,
    GreedyBackward,
    IterativeTTest,
    NoSelection,
    ParameterSpec,
    SelectionMethod,
    TTestFilter,
    selection_method,
)
from pylinselect.regression.solution import LinearSolution
from pylinselect.regression.solvers import fit

__all__ = [
    "fit",
    "RegressionDesign",
    "LinearSolution",
    "LinearParams",
    "FitResult",
    "InferenceReport",
    "SelectionStep",
    "SelectionMethod",
    "NoSelection",
    "AkaikeBackward",
    "GreedyBackward",
    "TTestFilter",
    "IterativeTTest",
    "ParameterSpec",
    "SELECTION_METHODS",
    "selection_method",
]
