"""
Generic result container for pylinselect computations.

The Result class is the standard envelope a backend returns. It carries
the domain payload together with metadata (info), timing, the producing
backend and non-fatal warnings, so that the solution wrapper can present
all of it without the backend knowing about presentation.

Design decisions:
    - Generic over parameter payload P for type safety
    - info dict for flexible metadata (selection trace, inference mode)
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True) for reproducibility
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


def _default_provenance() -> dict[str, str]:
    """Versions of the packages that produced a result."""
    import numpy
    import scipy
    from pylinselect import __version__

    return {
        'pylinselect_version': __version__,
        'numpy_version': numpy.__version__,
        'scipy_version': scipy.__version__,
    }


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for statistical computations.

    Type Parameters:
        P: The domain-specific parameter payload type

    Attributes:
        params: Domain-specific parameters (coefficients, statistics, etc.)
        info: Structured metadata (method, selection trace, diagnostics)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation
        provenance: Package versions used for the computation

    Examples:
        >>> Result(
        ...     params=LinearParams(...),
        ...     info={'selection': 'm5_prime', 'inference': 'exact'},
        ...     timing={'total_seconds': 0.01},
        ...     backend_name='cpu_normal_equations'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)
    provenance: dict[str, str] = field(default_factory=_default_provenance)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
