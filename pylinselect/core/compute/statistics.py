"""
Weighted descriptive statistics.

These are the per-attribute statistics the regression engine consumes:
weighted mean and variance for centering and standardization, and the
Pearson correlation used for tolerances and R².
"""

from typing import Any

import numpy as np
from numpy.typing import NDArray


def weighted_mean(
    values: NDArray[np.floating[Any]],
    weights: NDArray[np.floating[Any]] | None = None,
    axis: int = 0,
) -> NDArray[np.floating[Any]] | float:
    """Weighted arithmetic mean along axis (unweighted when weights is None)."""
    if weights is None:
        return np.mean(values, axis=axis)
    return np.average(values, axis=axis, weights=weights)


def weighted_variance(
    values: NDArray[np.floating[Any]],
    weights: NDArray[np.floating[Any]] | None = None,
    axis: int = 0,
) -> NDArray[np.floating[Any]] | float:
    """
    Weighted sample variance along axis.

    Uses the frequency-weight correction sum(w (x - m)^2) / (W - 1) where
    W is the total weight. With W <= 1 the population form / W is used
    instead, since the correction is undefined there.
    """
    values = np.asarray(values, dtype=np.float64)
    if weights is None:
        weights = np.ones(values.shape[axis], dtype=np.float64)
    mean = weighted_mean(values, weights, axis=axis)
    deviations = values - (np.expand_dims(mean, axis) if np.ndim(mean) else mean)
    shape = [1] * values.ndim
    shape[axis] = -1
    ss = np.sum(weights.reshape(shape) * deviations ** 2, axis=axis)
    total = float(np.sum(weights))
    denominator = total - 1.0 if total > 1.0 else total
    return ss / denominator


def correlation(
    x: NDArray[np.floating[Any]],
    y: NDArray[np.floating[Any]],
) -> float:
    """
    Pearson correlation of x and y.

    If either vector is constant the correlation is 0.0: a constant
    prediction explains nothing.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    dx = x - np.mean(x)
    dy = y - np.mean(y)
    sxx = float(dx @ dx)
    syy = float(dy @ dy)
    if sxx <= 0.0 or syy <= 0.0:
        return 0.0
    r = float(dx @ dy) / np.sqrt(sxx * syy)
    return float(np.clip(r, -1.0, 1.0))
