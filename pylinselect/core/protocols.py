"""
Core protocols for pylinselect.

Structural interfaces that backends must satisfy. Protocol (structural
typing) rather than ABC keeps backends free of a common base class.
"""

from typing import Protocol, TypeVar, runtime_checkable

D = TypeVar('D', contravariant=True)  # Design type
P = TypeVar('P', covariant=True)  # Parameter payload type


@runtime_checkable
class Backend(Protocol[D, P]):
    """
    Protocol for computational backends.

    A backend takes a validated design and produces a Result envelope
    around a domain payload. Configuration is fixed at construction time,
    so solve() has no knobs of its own.
    """

    @property
    def name(self) -> str:
        """
        Backend identifier.

        Convention: '{device}_{algorithm}', e.g. 'cpu_normal_equations'.
        """
        ...

    def solve(self, design: D) -> 'Result[P]':
        """
        Execute the computation.

        Raises:
            FitCancelledError: If the stop signal fired during the fit
            NumericalError: If a linear system could not be solved at all
        """
        ...
