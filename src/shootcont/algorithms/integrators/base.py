"""Provide the interface between shooting residuals and IVP integrators.

Shooting only needs the state at the end of the integration interval, so
the contract is deliberately narrow: a solver receives the problem
template, the overrides for one evaluation and the integration settings,
and returns the final state. Concrete solvers may wrap any integration
library without the residual logic noticing.
"""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

import numpy as np

if TYPE_CHECKING:
    from shootcont.algorithms.dynamics.base import _IVPSpec
    from shootcont.algorithms.shooting.config import _ShootingConfig


@runtime_checkable
class _IVPSolverProtocol(Protocol):
    """Protocol for integrators usable by :class:`~shootcont.algorithms.shooting.base.ShootingResidual`."""

    def solve(
        self,
        spec: "_IVPSpec",
        u0: np.ndarray,
        p: np.ndarray,
        t0: float,
        t1: float,
        config: "_ShootingConfig",
    ) -> np.ndarray:
        """Integrate ``u' = spec.rhs(u, p, t)`` from *t0* to *t1*.
        
        Parameters
        ----------
        spec : :class:`~shootcont.algorithms.dynamics.base._IVPSpec`
            Problem template providing the vector field.
        u0 : numpy.ndarray
            Initial state at *t0*.
        p : numpy.ndarray
            Parameter vector.
        t0, t1 : float
            Integration interval.
        config : :class:`~shootcont.algorithms.shooting.config._ShootingConfig`
            Integration method and tolerances.

        Returns
        -------
        numpy.ndarray
            State at *t1*.

        Raises
        ------
        :class:`~shootcont.algorithms.utils.exceptions.IntegrationError`
            If the integrator does not reach *t1*.
        """
        ...
