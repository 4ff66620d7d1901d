""" Public API for the :mod:`~shootcont.algorithms` package.
"""

from .continuation.problem import ProblemStructure
from .shooting.base import ShootingResidual
from .shooting.bcs import periodic
from .shooting.problem import add_shooting_problem

__all__ = [
    "ProblemStructure",
    "ShootingResidual",
    "periodic",
    "add_shooting_problem",
]
