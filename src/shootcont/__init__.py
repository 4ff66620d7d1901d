"""shootcont: single-shooting problems for numerical continuation.

Integrate an ODE over a time span and turn the mismatch between the initial
and final states into a zero problem of a continuation problem structure.
"""

from shootcont.algorithms import (ProblemStructure, ShootingResidual,
                                  add_shooting_problem, periodic)
from shootcont.algorithms.utils.exceptions import (ArgumentError,
                                                   IntegrationError,
                                                   ShootcontError)

__all__ = [
    "add_shooting_problem",
    "periodic",
    "ShootingResidual",
    "ProblemStructure",
    "ShootcontError",
    "ArgumentError",
    "IntegrationError",
]

__version__ = "0.1.0"
