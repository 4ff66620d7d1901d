import threading

import numpy as np
import pytest

from shootcont.algorithms.dynamics.base import _IVPSpec
from shootcont.algorithms.shooting.base import ShootingResidual
from shootcont.algorithms.shooting.bcs import periodic
from shootcont.algorithms.shooting.config import _ShootingConfig
from shootcont.algorithms.utils.exceptions import (ArgumentError,
                                                   IntegrationError)

TWO_PI = 2 * np.pi


def hopf(out, u, p, t):
    r2 = u[0]**2 + u[1]**2
    out[0] = p[0]*u[0] - u[1] + p[1]*u[0]*r2
    out[1] = u[0] + p[0]*u[1] + p[1]*u[1]*r2


def hopf_oop(u, p, t):
    r2 = u[0]**2 + u[1]**2
    return (p[0]*u[0] - u[1] + p[1]*u[0]*r2,
            u[0] + p[0]*u[1] + p[1]*u[1]*r2)


class _RecordingSolver:
    """Solver stub returning a fixed state and remembering its calls."""

    def __init__(self, final):
        self.final = np.asarray(final, dtype=float)
        self.calls = []

    def solve(self, spec, u0, p, t0, t1, config):
        self.calls.append((u0.copy(), p.copy(), t0, t1, config))
        return self.final.copy()


class _FailingSolver:
    def solve(self, spec, u0, p, t0, t1, config):
        raise IntegrationError("step size underflow", status=-1, t0=t0, t1=t1)


@pytest.fixture
def hopf_spec():
    return _IVPSpec.from_vector_field(hopf, [1.0, 0.0], [0.0, TWO_PI], [1.0, -1.0])


@pytest.mark.parametrize("f, u0, p0", [
    (hopf, [1.0, 0.0], [1.0, -1.0]),
    (hopf_oop, (1.0, 0.0), (1.0, -1.0)),
    (hopf_oop, np.array([1.0, 0.0]), np.array([1.0, -1.0])),
])
def test_unit_circle_is_periodic(f, u0, p0):
    shoot = ShootingResidual.from_vector_field(f, u0, p0, (0, TWO_PI))
    res = shoot.residual(u0, p0, (0.0, TWO_PI))
    np.testing.assert_allclose(res, np.zeros(2), atol=1e-5)


def test_in_place_and_out_of_place_agree():
    tspan = (0.0, 2.5)
    u, p = np.array([0.3, -0.2]), np.array([0.5, -1.0])
    a = ShootingResidual.from_vector_field(hopf, u, p, tspan, reltol=1e-10, abstol=1e-12)
    b = ShootingResidual.from_vector_field(hopf_oop, tuple(u), tuple(p), tspan, reltol=1e-10, abstol=1e-12)
    np.testing.assert_allclose(a.residual(u, p, tspan), b.residual(tuple(u), tuple(p), tspan), atol=1e-9)


def test_off_orbit_residual_is_nonzero(hopf_spec):
    shoot = ShootingResidual(hopf_spec)
    res = shoot.residual([0.5, 0.0], [1.0, -1.0], (0.0, TWO_PI))
    # trajectory spirals out towards the unit circle
    assert res[0] > 0.1


def test_final_state_matches_analytic_solution():
    shoot = ShootingResidual.from_vector_field(lambda u, p, t: -p[0] * u, [1.0], [0.7], 1.0,
                                               reltol=1e-10, abstol=1e-12)
    u1 = shoot.final_state([2.0], [0.7], [0.0, 3.0])
    np.testing.assert_allclose(u1, 2.0 * np.exp(-2.1), rtol=1e-8)


def test_call_writes_into_output(hopf_spec):
    shoot = ShootingResidual(hopf_spec, solver=_RecordingSolver([1.5, 0.25]))
    res = np.full(2, np.nan)
    assert shoot(res, np.array([1.0, 0.0]), np.array([1.0, -1.0]), np.array([0.0, 3.0])) is None
    np.testing.assert_array_equal(res, [0.5, 0.25])


def test_solver_receives_overrides_and_config(hopf_spec):
    solver = _RecordingSolver([0.0, 0.0])
    config = _ShootingConfig(method="Radau", reltol=1e-4, abstol=1e-5)
    shoot = ShootingResidual(hopf_spec, config=config, solver=solver)

    shoot.residual([0.2, 0.1], [3.0, 4.0], [1.0, 9.0, 99.0])

    (u0, p, t0, t1, used), = solver.calls
    np.testing.assert_array_equal(u0, [0.2, 0.1])
    np.testing.assert_array_equal(p, [3.0, 4.0])
    assert (t0, t1) == (1.0, 9.0)
    assert used is config
    assert (shoot.method, shoot.reltol, shoot.abstol) == ("Radau", 1e-4, 1e-5)


def test_boundary_condition_arguments(hopf_spec):
    seen = {}

    def bc(res, u0, u1, p, tspan):
        seen.update(u0=u0, u1=u1, p=p, tspan=tspan)
        res[:] = 0.0

    shoot = ShootingResidual(hopf_spec, bc=bc, solver=_RecordingSolver([7.0, 8.0]))
    u, p, tspan = np.array([1.0, 2.0]), np.array([3.0, 4.0]), np.array([0.0, 5.0])
    shoot.residual(u, p, tspan)

    assert seen["u0"] is u
    assert seen["p"] is p
    assert seen["tspan"] is tspan
    np.testing.assert_array_equal(seen["u1"], [7.0, 8.0])


def test_returning_boundary_condition(hopf_spec):
    def bc(res, u0, u1, p, tspan):
        return np.array([u1[0], u0[1] - 1.0])

    shoot = ShootingResidual(hopf_spec, bc=bc, solver=_RecordingSolver([0.5, 0.0]))
    np.testing.assert_array_equal(shoot.residual([0.0, 3.0], [1.0, -1.0], [0.0, 1.0]), [0.5, 2.0])


def test_integration_failure_propagates(hopf_spec):
    shoot = ShootingResidual(hopf_spec, solver=_FailingSolver())
    res = np.zeros(2)
    with pytest.raises(IntegrationError):
        shoot(res, [1.0, 0.0], [1.0, -1.0], [0.0, 1.0])
    np.testing.assert_array_equal(res, [0.0, 0.0])


def test_template_not_mutated(hopf_spec):
    shoot = ShootingResidual(hopf_spec)
    shoot.residual([0.9, 0.1], [0.5, -2.0], [0.0, 1.0])
    np.testing.assert_array_equal(shoot.ode_template.u0, [1.0, 0.0])
    np.testing.assert_array_equal(shoot.ode_template.p0, [1.0, -1.0])
    assert shoot.ode_template.tspan == (0.0, TWO_PI)


def test_immutable(hopf_spec):
    shoot = ShootingResidual(hopf_spec)
    with pytest.raises(AttributeError):
        shoot.bc = None


def test_concurrent_evaluations_agree(hopf_spec):
    shoot = ShootingResidual(hopf_spec)
    points = [np.array([r, 0.0]) for r in (0.5, 0.8, 1.0, 1.2)]
    expected = [shoot.residual(u, [1.0, -1.0], [0.0, 1.0]) for u in points]
    results = [None] * len(points)

    def worker(i):
        results[i] = shoot.residual(points[i], [1.0, -1.0], [0.0, 1.0])

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(len(points))]
    for th in threads:
        th.start()
    for th in threads:
        th.join()

    for got, want in zip(results, expected):
        np.testing.assert_array_equal(got, want)


def test_invalid_components(hopf_spec):
    with pytest.raises(ArgumentError):
        ShootingResidual(hopf_spec, bc="periodic")
    with pytest.raises(ArgumentError):
        ShootingResidual(hopf_spec, solver=object())


def test_default_boundary_condition(hopf_spec):
    assert ShootingResidual(hopf_spec).bc is periodic
