"""
Regression backends.

Available backends:
    CPUNormalEquationsBackend: CPU implementation on ridge normal equations
"""

from pylinselect.regression.backends.cpu import CPUNormalEquationsBackend

__all__ = [
    "CPUNormalEquationsBackend",
]
