"""
Shared compute infrastructure for pylinselect.

IMPORTANT: This is NOT where regression backends live. Those go in
regression/backends/. This module contains shared NUMERIC infrastructure.

Submodules:
    timing: Execution timing utilities
    tolerances: Numerical zero / singularity thresholds
    statistics: Weighted mean, variance and correlation
    cancellation: Cooperative stop-signal checks
    linalg: Ridge normal equations and fallible inversion
"""

from pylinselect.core.compute.timing import Timer
from pylinselect.core.compute.cancellation import StopSignal, check_for_stop

__all__ = [
    "Timer",
    "StopSignal",
    "check_for_stop",
]
