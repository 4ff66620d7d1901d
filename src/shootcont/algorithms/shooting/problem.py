"""Register single-shooting boundary value problems with a continuation problem.

Example
-------
The Hopf bifurcation normal form has the unit circle as periodic orbit of
period ``2*pi`` for ``p = (1, -1)``::

    def hopf(out, u, p, t):
        r2 = u[0]**2 + u[1]**2
        out[0] = p[0]*u[0] - u[1] + p[1]*u[0]*r2
        out[1] = u[0] + p[0]*u[1] + p[1]*u[1]*r2

    prob = ProblemStructure()
    add_shooting_problem(prob, "hopf", hopf, [1.0, 0.0], [1.0, -1.0], [0, 2*np.pi])
"""

from typing import Any, Callable, Iterable, Optional, Union

from shootcont.algorithms.continuation.problem import \
    _ContinuationRegistryProtocol
from shootcont.algorithms.dynamics.base import _IVPSpec
from shootcont.algorithms.integrators.base import _IVPSolverProtocol
from shootcont.algorithms.shooting.base import ShootingResidual
from shootcont.algorithms.shooting.bcs import periodic
from shootcont.algorithms.shooting.config import _ShootingConfig
from shootcont.algorithms.utils.config import (DEFAULT_ABSTOL, DEFAULT_METHOD,
                                               DEFAULT_RELTOL, PARAM_SUFFIX,
                                               STATE_SUFFIX, TSPAN_SUFFIX)
from shootcont.algorithms.utils.exceptions import ArgumentError
from shootcont.utils.log_config import logger


def _parameter_names(name: str, pnames: Optional[Iterable[Any]], n: int) -> list:
    if pnames is None:
        return [f"{name}.p{i}" for i in range(1, n + 1)]
    return [str(pname) for pname in pnames]


def add_shooting_problem(
    prob: _ContinuationRegistryProtocol,
    name: str,
    f: Callable[..., Any],
    u0: Any,
    p0: Any,
    tspan: Any,
    bc: Callable[..., Any] = periodic,
    *,
    pnames: Optional[Iterable[Any]] = None,
    method: Union[str, type] = DEFAULT_METHOD,
    reltol: float = DEFAULT_RELTOL,
    abstol: float = DEFAULT_ABSTOL,
    inplace: Optional[bool] = None,
    solver: Optional[_IVPSolverProtocol] = None,
) -> _ContinuationRegistryProtocol:
    """Add the shooting problem ``u' = f(u, p, t)``, ``t in [t0, t1]``, to *prob*.

    Three continuation variables are created: ``"{name}.u"`` (the initial
    state), ``"{name}.p"`` (the parameters) and ``"{name}.tspan"`` (the
    interval ``(t0, t1)``). A zero function *name* evaluating the boundary
    condition after integration depends on all three, and every parameter
    as well as ``"{name}.t0"``/``"{name}.t1"`` is registered as an inactive
    continuation parameter.

    Parameters
    ----------
    prob : :class:`~shootcont.algorithms.continuation.problem._ContinuationRegistryProtocol`
        The continuation problem to extend.
    name : str
        Name of the zero problem, also used as prefix of the variables.
    f : callable
        Vector field, either ``f(u, p, t)`` returning the derivative or the
        in-place form ``f(du, u, p, t)``.
    u0 : array_like
        Initial state.
    p0 : array_like
        Initial parameter values.
    tspan : float or sequence of float
        Integration interval ``(t0, t1)``; a single value ``T`` means
        ``(0, T)``.
    bc : callable, default=:func:`~shootcont.algorithms.shooting.bcs.periodic`
        Boundary condition ``bc(res, u0, u1, p, tspan)``.
    pnames : iterable, optional
        Parameter names, one per element of *p0*. Defaults to
        ``"{name}.p1"``, ``"{name}.p2"``, ...
    method : str or type, default="DOP853"
        Integration method accepted by :func:`scipy.integrate.solve_ivp`.
    reltol : float, default=1e-6
        Relative tolerance of the integrator.
    abstol : float, default=1e-8
        Absolute tolerance of the integrator.
    inplace : bool or None, optional
        Calling convention of *f*; detected from its signature when None.
    solver : :class:`~shootcont.algorithms.integrators.base._IVPSolverProtocol`, optional
        Integrator to use instead of :func:`scipy.integrate.solve_ivp`.

    Returns
    -------
    prob
        The same problem structure, extended.

    Raises
    ------
    :class:`~shootcont.algorithms.utils.exceptions.ArgumentError`
        If the number of parameter names does not match ``len(p0)``. Nothing
        is registered in that case.
    """
    name = str(name)
    spec = _IVPSpec.from_vector_field(f, u0, tspan, p0, inplace=inplace)
    config = _ShootingConfig(method=method, reltol=reltol, abstol=abstol)
    if solver is None:
        shooting = ShootingResidual(spec, config=config, bc=bc)
    else:
        shooting = ShootingResidual(spec, config=config, bc=bc, solver=solver)

    n_state = spec.state_shape[0]
    n_par = spec.param_shape[0]
    _pnames = _parameter_names(name, pnames, n_par)
    if len(_pnames) != n_par:
        raise ArgumentError("Length of parameter vector does not match number of parameter names")

    uidx = prob.add_var(f"{name}.{STATE_SUFFIX}", n_state, u0=spec.u0)
    pidx = prob.add_var(f"{name}.{PARAM_SUFFIX}", n_par, u0=spec.p0)
    tidx = prob.add_var(f"{name}.{TSPAN_SUFFIX}", 2, u0=list(spec.tspan))
    prob.add_func(name, n_state, shooting, [uidx, pidx, tidx])
    prob.add_pars(_pnames, pidx, active=False)
    prob.add_pars((f"{name}.t0", f"{name}.t1"), tidx, active=False)

    logger.info(f"Added shooting problem '{name}': dim={n_state}, "
                f"parameters={_pnames}, tspan={spec.tspan}, method={config.method}")
    return prob
