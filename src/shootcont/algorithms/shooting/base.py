"""Provide the single-shooting residual.

:class:`ShootingResidual` turns an initial value problem into an algebraic
constraint. For a candidate initial state ``u``, parameters ``p`` and time
span ``(t0, t1)`` it integrates ``u' = f(u, p, t)`` from ``t0`` to ``t1``
and hands the start and end states to a boundary condition, whose output is
the residual seen by the continuation problem.

References
----------
Keller, H. B. (1968). "Numerical Methods for Two-Point Boundary-Value
Problems".
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Union

import numpy as np

from shootcont.algorithms.dynamics.base import _IVPSpec
from shootcont.algorithms.integrators.base import _IVPSolverProtocol
from shootcont.algorithms.integrators.standard import _ScipyIVPSolver
from shootcont.algorithms.shooting.bcs import periodic
from shootcont.algorithms.shooting.config import _ShootingConfig
from shootcont.algorithms.utils.exceptions import ArgumentError

BoundaryCondition = Callable[..., Any]


@dataclass(frozen=True, eq=False)
class ShootingResidual:
    """Residual of a boundary value problem solved by single shooting.

    Instances are immutable: every evaluation derives its own problem from
    the shared template, so a residual can be evaluated repeatedly (or
    concurrently, given a reentrant solver) without interference.

    Parameters
    ----------
    ode_template : :class:`~shootcont.algorithms.dynamics.base._IVPSpec`
        Template providing the vector field and default shapes.
    config : :class:`~shootcont.algorithms.shooting.config._ShootingConfig`, optional
        Integration method and tolerances.
    bc : callable, default=:func:`~shootcont.algorithms.shooting.bcs.periodic`
        Boundary condition ``bc(res, u0, u1, p, tspan)``. It may fill
        ``res`` in place or return the residual vector.
    solver : :class:`~shootcont.algorithms.integrators.base._IVPSolverProtocol`, optional
        IVP integrator; :class:`~shootcont.algorithms.integrators.standard._ScipyIVPSolver`
        by default.

    Examples
    --------
    >>> spec = _IVPSpec.from_vector_field(lambda u, p, t: -p[0] * u, [1.0], 1.0, [0.5])
    >>> shoot = ShootingResidual(spec, bc=lambda res, u0, u1, p, tspan: u1 - 0.5)
    >>> res = shoot.residual([1.0], [np.log(2.0)], (0.0, 1.0))
    """

    ode_template: _IVPSpec
    config: _ShootingConfig = field(default_factory=_ShootingConfig)
    bc: BoundaryCondition = periodic
    solver: _IVPSolverProtocol = field(default_factory=_ScipyIVPSolver)

    def __post_init__(self):
        if not callable(self.bc):
            raise ArgumentError(f"Boundary condition must be callable, got {type(self.bc).__name__}")
        if not isinstance(self.solver, _IVPSolverProtocol):
            raise ArgumentError(f"Solver {self.solver!r} does not implement solve()")

    @property
    def abstol(self) -> float:
        return self.config.abstol

    @property
    def reltol(self) -> float:
        return self.config.reltol

    @property
    def method(self) -> Union[str, type]:
        return self.config.method

    @property
    def dim(self) -> int:
        """Dimension of the state, and of the residual."""
        return self.ode_template.dim

    def final_state(self, u: Any, p: Any, tspan: Any) -> np.ndarray:
        """Integrate from ``u`` over ``tspan`` and return the final state."""
        ivp = self.ode_template.remake(u0=u, p=p, tspan=(tspan[0], tspan[1]))
        t0, t1 = ivp.tspan
        return self.solver.solve(ivp, ivp.u0, ivp.p0, t0, t1, self.config)

    def __call__(self, res: np.ndarray, u: Any, p: Any, tspan: Any) -> None:
        """Write the shooting residual for ``(u, p, tspan)`` into ``res``.

        Integration errors propagate to the caller untouched.
        """
        u1 = self.final_state(u, p, tspan)
        out = self.bc(res, u, u1, p, tspan)
        if out is not None and out is not res:
            res[...] = out

    def residual(self, u: Any, p: Any, tspan: Any) -> np.ndarray:
        """Return the shooting residual as a new array."""
        res = np.zeros(self.dim, dtype=np.float64)
        self(res, u, p, tspan)
        return res

    @classmethod
    def from_vector_field(
        cls,
        f: Callable[..., Any],
        u0: Any,
        p0: Any,
        tspan: Any,
        bc: BoundaryCondition = periodic,
        **kwargs,
    ) -> "ShootingResidual":
        """Build a residual directly from a vector field.

        Keyword arguments ``method``, ``reltol`` and ``abstol`` configure the
        integration, ``inplace`` the calling convention of *f* and
        ``solver`` the integrator.
        """
        inplace = kwargs.pop("inplace", None)
        solver = kwargs.pop("solver", None)
        config = _ShootingConfig(**kwargs)
        spec = _IVPSpec.from_vector_field(f, u0, tspan, p0, inplace=inplace)
        if solver is None:
            return cls(spec, config=config, bc=bc)
        return cls(spec, config=config, bc=bc, solver=solver)
