"""
Linear algebra kernels for pylinselect.

All functions follow these conventions:
    - NumPy (LAPACK under the hood) on float64
    - Failure on a "hard" operation raises SingularMatrixError
    - Failure on a "soft" operation (inversion for inference) is
      reported as a None return, so the caller can branch on it

Submodules:
    normal_equations: Weighted ridge least squares, fallible inversion
"""

from pylinselect.core.compute.linalg.normal_equations import (
    RidgeSolveResult,
    solve_ridge_normal_equations,
    try_invert,
)

__all__ = [
    "RidgeSolveResult",
    "solve_ridge_normal_equations",
    "try_invert",
]
