"""Provide the configuration of shooting residuals.

The configuration fixes HOW each boundary-value residual is integrated:
the integration method and the error tolerances handed to the IVP solver.
It is created once when a shooting problem is registered and stored
immutably inside the residual.
"""

import math
from dataclasses import dataclass
from numbers import Real
from typing import Union

from scipy.integrate import OdeSolver

from shootcont.algorithms.utils.config import (DEFAULT_ABSTOL, DEFAULT_METHOD,
                                               DEFAULT_RELTOL)
from shootcont.algorithms.utils.exceptions import ArgumentError


@dataclass(frozen=True)
class _ShootingConfig:
    """Integration settings of a shooting residual.

    Parameters
    ----------
    method : str or type, default="DOP853"
        Integration method. Either a :func:`scipy.integrate.solve_ivp`
        method name (``"RK45"``, ``"DOP853"``, ``"Radau"``, ...) or a
        :class:`scipy.integrate.OdeSolver` subclass.
    reltol : float, default=1e-6
        Relative per-component error tolerance.
    abstol : float, default=1e-8
        Absolute per-component error tolerance.

    Notes
    -----
    Tolerances are passed verbatim to the integrator; no additional error
    control is performed on top of them.

    Examples
    --------
    >>> config = _ShootingConfig(method="Radau", reltol=1e-8, abstol=1e-10)
    """
    method: Union[str, type] = DEFAULT_METHOD
    reltol: float = DEFAULT_RELTOL
    abstol: float = DEFAULT_ABSTOL

    def __post_init__(self):
        self._validate()

    def _validate(self) -> None:
        """Validate the configuration."""
        if isinstance(self.method, str):
            if not self.method:
                raise ArgumentError("Integration method name must not be empty")
        elif not (isinstance(self.method, type) and issubclass(self.method, OdeSolver)):
            raise ArgumentError(
                f"Invalid method: {self.method!r}. "
                "Must be a method name or an OdeSolver subclass."
            )
        for name in ("reltol", "abstol"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Real) \
                    or not math.isfinite(value) or value <= 0:
                raise ArgumentError(f"{name} must be a positive finite number, got {value!r}")
