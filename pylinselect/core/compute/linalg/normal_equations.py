"""
Weighted ridge least squares via the normal equations.

Solves
    (X'WX + λI) β = X'Wy
for a design X that the caller has already centered (or not) as it
sees fit. Candidate attribute subsets are small and refit many times,
so the p x p normal-equation system is cheaper than a QR per subset.
"""

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray

from pylinselect.core.exceptions import SingularMatrixError
from pylinselect.core.compute.tolerances import (
    CONDITION_THRESHOLD,
    MAX_RIDGE_ESCALATIONS,
    RIDGE_GROWTH,
    RIDGE_START,
)


@dataclass(frozen=True)
class RidgeSolveResult:
    """
    Result of a ridge normal-equation solve.

    Attributes:
        coefficients: Solution vector β (p,)
        ridge: Ridge actually used (larger than requested if escalated)
        escalations: Number of times the ridge had to be increased
    """
    coefficients: NDArray[np.floating[Any]]
    ridge: float
    escalations: int


def solve_ridge_normal_equations(
    X: NDArray[np.floating[Any]],
    y: NDArray[np.floating[Any]],
    weights: NDArray[np.floating[Any]] | None,
    ridge: float,
) -> RidgeSolveResult:
    """
    Solve the weighted, ridge-regularized normal equations.

    If the system matrix is singular the ridge is multiplied by
    RIDGE_GROWTH (a zero ridge starts at RIDGE_START) and the solve is
    retried, so near-collinear designs still yield a stabilized solution.

    Args:
        X: Design matrix (n x p)
        y: Response vector (n,)
        weights: Per-row weights (n,), or None for unit weights
        ridge: Ridge parameter λ >= 0 added to the diagonal of X'WX

    Returns:
        RidgeSolveResult with coefficients (p,)

    Raises:
        SingularMatrixError: If no ridge up to the escalation limit
            produces a solvable system
    """
    p = X.shape[1]
    if weights is None:
        XtW = X.T
    else:
        XtW = X.T * weights
    xtx = XtW @ X
    xty = XtW @ y

    current = float(ridge)
    for attempt in range(MAX_RIDGE_ESCALATIONS + 1):
        system = xtx + current * np.eye(p)
        try:
            beta = np.linalg.solve(system, xty)
        except np.linalg.LinAlgError:
            current = current * RIDGE_GROWTH if current > 0 else RIDGE_START
            continue
        return RidgeSolveResult(coefficients=beta, ridge=current, escalations=attempt)

    raise SingularMatrixError(
        f"Normal equations remain singular after {MAX_RIDGE_ESCALATIONS} "
        f"ridge escalations (last ridge={current:g})",
        matrix_name="X'WX",
        ridge=current,
        attempts=MAX_RIDGE_ESCALATIONS + 1,
    )


def try_invert(
    matrix: NDArray[np.floating[Any]],
) -> NDArray[np.floating[Any]] | None:
    """
    Invert a square matrix, or return None if that is not meaningful.

    None is returned when LAPACK reports singularity, when the condition
    number exceeds CONDITION_THRESHOLD, or when the inverse is not finite.

    Args:
        matrix: Square matrix (k x k)

    Returns:
        The inverse (k x k), or None
    """
    if matrix.shape[0] == 0:
        return np.empty((0, 0), dtype=np.float64)
    if not np.all(np.isfinite(matrix)):
        return None
    cond = np.linalg.cond(matrix)
    if not np.isfinite(cond) or cond > CONDITION_THRESHOLD:
        return None
    try:
        inverse = np.linalg.inv(matrix)
    except np.linalg.LinAlgError:
        return None
    if not np.all(np.isfinite(inverse)):
        return None
    return inverse
