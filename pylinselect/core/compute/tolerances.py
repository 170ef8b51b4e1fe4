"""
Numerical tolerances shared by the regression kernels.

Kept in one place so the solver, the collinearity check and the
inference code agree on what "zero" and "singular" mean.
"""

import numpy as np

# |x| below this counts as zero for standard errors and coefficients.
ZERO_EPSILON = 1e-10

# Tolerances within this distance of the current minimum count as ties.
TIE_EPSILON = 1e-10

# (X'WX)^-1 is rejected above this condition number; beyond it the
# inverse carries no correct digits in float64.
CONDITION_THRESHOLD = 1.0 / np.finfo(np.float64).eps

# Ridge escalation for singular normal equations: a zero ridge starts
# here and every failed attempt multiplies by RIDGE_GROWTH.
RIDGE_START = 1e-8
RIDGE_GROWTH = 10.0
MAX_RIDGE_ESCALATIONS = 30


def is_zero(value: float) -> bool:
    """True if value is within ZERO_EPSILON of zero (NaN is never zero)."""
    return bool(abs(value) < ZERO_EPSILON)
