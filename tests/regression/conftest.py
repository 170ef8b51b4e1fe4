"""
Regression test fixtures.
"""

import numpy as np
import pytest

from pylinselect.regression._linear_system import fit_subset, model_r_squared, squared_error
from pylinselect.regression.design import RegressionDesign
from pylinselect.regression.selection import SelectionContext


def make_context(design, label=None, ridge=1e-8, use_bias=True, mask=None, should_stop=None):
    """
    Baseline fit and SelectionContext for a design, the way the backend
    builds them (without collinearity elimination).
    """
    if label is None:
        label = design.y
    if mask is None:
        mask = design.numeric
    means = design.column_means(design.X)
    stds = design.column_std(design.X)
    target = label.reshape(-1, 1)
    label_mean = float(design.column_means(target)[0])
    label_std = float(design.column_std(target)[0])
    baseline = fit_subset(design, label, mask, means, label_mean, ridge, use_bias)
    context = SelectionContext(
        design=design,
        label=label,
        ridge=ridge,
        use_bias=use_bias,
        means=means,
        stds=stds,
        label_mean=label_mean,
        label_std=label_std,
        error_on_full_data=squared_error(design, label, mask, baseline.coefficients, use_bias),
        number_of_used_attributes=int(np.count_nonzero(mask)) + 1,
        r_squared_full=model_r_squared(design, label, baseline, use_bias),
        should_stop=should_stop,
    )
    return baseline, context


@pytest.fixture
def sparse_data(rng):
    """Two informative attributes among six, n = 200."""
    n = 200
    X = rng.standard_normal((n, 6))
    y = 2.0 * X[:, 0] - 1.5 * X[:, 3] + 0.5 + rng.standard_normal(n) * 0.5
    names = [f'x{i + 1}' for i in range(6)]
    return X, y, names


@pytest.fixture
def sparse_design(sparse_data):
    X, y, names = sparse_data
    return RegressionDesign.from_arrays(X, y, attribute_names=names)


@pytest.fixture
def context_factory():
    """make_context as a fixture, for tests that need their own designs."""
    return make_context
