"""IVP integrators used to evaluate shooting residuals."""

from .base import _IVPSolverProtocol
from .standard import _ScipyIVPSolver

__all__ = [
    "_IVPSolverProtocol",
    "_ScipyIVPSolver",
]
