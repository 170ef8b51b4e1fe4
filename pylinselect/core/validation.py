"""
Input validation utilities for pylinselect.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent.

Data checks raise ValidationError/DimensionError; run-parameter checks
raise ConfigurationError so callers can tell bad data from bad settings.
"""

import math

import numpy as np
from numpy.typing import ArrayLike, NDArray
from typing import Any

from pylinselect.core.exceptions import (
    ValidationError,
    DimensionError,
    ConfigurationError,
)


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Validate and convert input to a floating point numpy array.

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray with floating dtype

    Raises:
        ValidationError: If input cannot be converted to a numeric array
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        raise ValidationError(
            f"{name}: converted to object dtype, indicating mixed types or non-numeric data"
        )

    if not np.issubdtype(result.dtype, np.number) and result.dtype != np.bool_:
        raise ValidationError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    if not np.issubdtype(result.dtype, np.floating):
        result = result.astype(np.float64)

    return result


def check_finite(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify array contains no NaN or Inf values.

    Raises:
        ValidationError: If array contains non-finite values
    """
    if not np.all(np.isfinite(array)):
        n_nan = int(np.sum(np.isnan(array)))
        n_inf = int(np.sum(np.isinf(array)))
        raise ValidationError(
            f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
        )


def check_ndim(array: NDArray[Any], ndim: int, name: str) -> None:
    """
    Verify array has exactly the specified number of dimensions.

    Raises:
        DimensionError: If array has wrong number of dimensions
    """
    if array.ndim != ndim:
        raise DimensionError(
            f"{name}: expected {ndim}D array, got {array.ndim}D with shape {array.shape}"
        )


def check_1d(array: NDArray[Any], name: str) -> None:
    """Verify array is 1-dimensional."""
    check_ndim(array, 1, name)


def check_2d(array: NDArray[Any], name: str) -> None:
    """Verify array is 2-dimensional."""
    check_ndim(array, 2, name)


def check_consistent_length(
    *arrays: NDArray[Any],
    names: tuple[str, ...]
) -> None:
    """
    Verify all arrays have the same length (first dimension).

    Raises:
        ValueError: If number of names doesn't match number of arrays
        DimensionError: If arrays have inconsistent lengths
    """
    if len(arrays) != len(names):
        raise ValueError(
            f"Number of arrays ({len(arrays)}) must match number of names ({len(names)})"
        )

    if len(arrays) < 2:
        return

    lengths = [arr.shape[0] for arr in arrays]
    if len(set(lengths)) > 1:
        details = ", ".join(f"{name}={length}" for name, length in zip(names, lengths))
        raise DimensionError(f"Inconsistent lengths: {details}")


def check_min_samples(array: NDArray[Any], min_samples: int, name: str) -> None:
    """
    Verify array has at least the minimum number of samples.

    Raises:
        ValidationError: If array has fewer than min_samples rows
    """
    n = array.shape[0]
    if n < min_samples:
        raise ValidationError(
            f"{name}: requires at least {min_samples} samples, got {n}"
        )


def check_weights(weights: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify example weights are finite, non-negative and not all zero.

    Raises:
        ValidationError: If any weight is negative or non-finite, or
            the weights sum to zero
    """
    check_finite(weights, name)
    if np.any(weights < 0):
        n_negative = int(np.sum(weights < 0))
        raise ValidationError(f"{name}: {n_negative} negative weights")
    if not np.sum(weights) > 0:
        raise ValidationError(f"{name}: total weight must be positive")


def check_in_range(
    value: Any,
    name: str,
    lower: float,
    upper: float,
    *,
    lower_inclusive: bool = True,
    upper_inclusive: bool = True,
) -> float:
    """
    Verify a scalar run parameter lies within [lower, upper].

    Either bound may be made exclusive. Non-numeric and NaN values are
    rejected.

    Returns:
        The value as a float

    Raises:
        ConfigurationError: If value is not a number or out of range
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, np.number)):
        raise ConfigurationError(
            f"{name} must be a number, got {type(value).__name__}",
            parameter=name, value=value,
        )
    value = float(value)
    if math.isnan(value):
        raise ConfigurationError(f"{name} must not be NaN", parameter=name, value=value)

    above = value >= lower if lower_inclusive else value > lower
    below = value <= upper if upper_inclusive else value < upper
    if not (above and below):
        left = '[' if lower_inclusive else '('
        right = ']' if upper_inclusive else ')'
        raise ConfigurationError(
            f"{name} must be in {left}{lower}, {upper}{right}, got {value}",
            parameter=name, value=value,
        )
    return value


def check_positive_int(value: Any, name: str) -> int:
    """
    Verify a run parameter is an integer >= 1.

    Raises:
        ConfigurationError: If value is not an integer or is < 1
    """
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise ConfigurationError(
            f"{name} must be an integer, got {type(value).__name__}",
            parameter=name, value=value,
        )
    if value < 1:
        raise ConfigurationError(
            f"{name} must be >= 1, got {value}", parameter=name, value=value,
        )
    return int(value)


def check_bool(value: Any, name: str) -> bool:
    """
    Verify a run parameter is a boolean flag.

    Raises:
        ConfigurationError: If value is not a bool
    """
    if not isinstance(value, (bool, np.bool_)):
        raise ConfigurationError(
            f"{name} must be a bool, got {type(value).__name__}",
            parameter=name, value=value,
        )
    return bool(value)
