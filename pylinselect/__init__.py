"""
pylinselect: linear regression with attribute selection for Python.

Fits ridge-stabilized least squares models, prunes collinear predictors,
searches for a parsimonious attribute subset and reports per-coefficient
inference statistics.

Submodules:
    regression: fit(), RegressionDesign, selection methods, LinearSolution
    core: DataSource, Result envelope, exceptions, numeric kernels
"""

__version__ = "0.1.0"
__author__ = "Hai-Shuo"
__email__ = "contact@sgcx.org"

from pylinselect.core.datasource import DataSource
from pylinselect import regression

__all__ = [
    "__version__",
    "DataSource",
    "regression",
]
