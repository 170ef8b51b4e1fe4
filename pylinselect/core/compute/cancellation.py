"""
Cooperative cancellation.

Long computations accept an optional ``should_stop`` callable and poll it
once per pass over the data. A True answer aborts the whole computation
with FitCancelledError.
"""

from typing import Callable

from pylinselect.core.exceptions import FitCancelledError

StopSignal = Callable[[], bool]


def check_for_stop(should_stop: StopSignal | None, stage: str) -> None:
    """
    Raise FitCancelledError if the stop signal is set.

    Args:
        should_stop: Caller-supplied hook, or None for "never stop"
        stage: Stage name reported in the error

    Raises:
        FitCancelledError: If should_stop() returns True
    """
    if should_stop is not None and should_stop():
        raise FitCancelledError(f"Fit cancelled during {stage}", stage=stage)
