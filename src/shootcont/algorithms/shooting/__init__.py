"""Single shooting for periodic and boundary value problems of ODEs."""

from .base import ShootingResidual
from .bcs import periodic
from .config import _ShootingConfig
from .problem import add_shooting_problem

__all__ = [
    "ShootingResidual",
    "periodic",
    "_ShootingConfig",
    "add_shooting_problem",
]
