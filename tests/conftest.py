"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def simple_regression_data(rng):
    """y = 3·x1 - 2·x2 + noise(σ=0.01), 100 examples."""
    n = 100
    X = rng.standard_normal((n, 2))
    beta_true = np.array([3.0, -2.0])
    y = X @ beta_true + rng.standard_normal(n) * 0.01
    return X, y, beta_true


@pytest.fixture
def collinear_data(rng):
    """Same label, but x2 = 5·x1 exactly."""
    n = 100
    x1 = rng.standard_normal(n)
    X = np.column_stack([x1, 5.0 * x1])
    y = 3.0 * X[:, 0] - 2.0 * X[:, 1] + rng.standard_normal(n) * 0.01
    return X, y
