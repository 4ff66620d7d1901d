"""Integrate shooting IVPs with :func:`scipy.integrate.solve_ivp`."""

from typing import TYPE_CHECKING, Any

import numpy as np
from scipy.integrate import solve_ivp

from shootcont.algorithms.utils.exceptions import IntegrationError
from shootcont.utils.log_config import logger

if TYPE_CHECKING:
    from shootcont.algorithms.dynamics.base import _IVPSpec
    from shootcont.algorithms.shooting.config import _ShootingConfig


class _ScipyIVPSolver:
    """Final-state integrator backed by scipy's adaptive solvers.

    Only the state at the end of the span is requested from scipy
    (``t_eval=[t1]``); neither the intermediate steps nor the start are
    stored.

    Parameters
    ----------
    **solve_kwargs
        Extra keyword arguments forwarded to :func:`scipy.integrate.solve_ivp`
        on every call (e.g. ``max_step`` or ``first_step``).
    """

    _RESERVED = frozenset({"fun", "t_span", "y0", "method", "t_eval", "rtol", "atol", "args"})

    def __init__(self, **solve_kwargs: Any):
        clash = self._RESERVED.intersection(solve_kwargs)
        if clash:
            raise TypeError(f"Arguments managed by the shooting residual: {sorted(clash)}")
        self.solve_kwargs = dict(solve_kwargs)

    def solve(
        self,
        spec: "_IVPSpec",
        u0: np.ndarray,
        p: np.ndarray,
        t0: float,
        t1: float,
        config: "_ShootingConfig",
    ) -> np.ndarray:
        y0 = np.array(u0, dtype=np.float64)
        if t0 == t1:
            return y0

        rhs = spec.rhs

        def f(t: float, y: np.ndarray) -> np.ndarray:
            return rhs(y, p, t)

        logger.debug(f"Time span: [{t0}, {t1}], method={config.method}, "
                     f"rtol={config.reltol}, atol={config.abstol}")
        sol = solve_ivp(
            f,
            (t0, t1),
            y0,
            method=config.method,
            t_eval=np.array([t1]),
            rtol=config.reltol,
            atol=config.abstol,
            **self.solve_kwargs,
        )
        logger.debug(f"Integration finished. Status: {sol.status} ('{sol.message}'), nfev: {sol.nfev}")

        if not sol.success or sol.y.shape[1] == 0:
            msg = f"Integration over [{t0}, {t1}] failed: {sol.message}"
            logger.error(msg)
            raise IntegrationError(msg, status=sol.status, t0=t0, t1=t1)

        return np.array(sol.y[:, -1], dtype=np.float64)

    def __repr__(self):
        return f"{self.__class__.__name__}(solve_kwargs={self.solve_kwargs})"
