import numpy as np
import pytest
from scipy.integrate import RK45

from shootcont.algorithms.dynamics.base import _IVPSpec
from shootcont.algorithms.integrators.base import _IVPSolverProtocol
from shootcont.algorithms.integrators.standard import _ScipyIVPSolver
from shootcont.algorithms.shooting.config import _ShootingConfig
from shootcont.algorithms.utils.exceptions import IntegrationError


def rotation(u, p, t):
    return (-p[0] * u[1], p[0] * u[0])


@pytest.fixture
def rotation_spec():
    return _IVPSpec.from_vector_field(rotation, [1.0, 0.0], np.pi / 2, [1.0])


def test_implements_protocol():
    assert isinstance(_ScipyIVPSolver(), _IVPSolverProtocol)


@pytest.mark.parametrize("method", ["RK45", "DOP853", "Radau", RK45])
def test_final_state(rotation_spec, method):
    solver = _ScipyIVPSolver()
    config = _ShootingConfig(method=method, reltol=1e-10, abstol=1e-12)
    u1 = solver.solve(rotation_spec, np.array([1.0, 0.0]), np.array([1.0]), 0.0, np.pi / 2, config)
    assert u1.shape == (2,)
    np.testing.assert_allclose(u1, [0.0, 1.0], atol=1e-7)


def test_backward_integration(rotation_spec):
    solver = _ScipyIVPSolver()
    config = _ShootingConfig(reltol=1e-10, abstol=1e-12)
    u1 = solver.solve(rotation_spec, np.array([0.0, 1.0]), np.array([1.0]), np.pi / 2, 0.0, config)
    np.testing.assert_allclose(u1, [1.0, 0.0], atol=1e-8)


def test_nonautonomous_field_sees_absolute_time():
    spec = _IVPSpec.from_vector_field(lambda u, p, t: [t], [0.0], 1.0, [])
    u1 = _ScipyIVPSolver().solve(spec, np.array([0.0]), np.zeros(0), 1.0, 3.0, _ShootingConfig())
    np.testing.assert_allclose(u1, [4.0], rtol=1e-8)


def test_zero_length_span_returns_initial_state(rotation_spec):
    u0 = np.array([0.3, 0.4])
    u1 = _ScipyIVPSolver().solve(rotation_spec, u0, np.array([1.0]), 2.0, 2.0, _ShootingConfig())
    np.testing.assert_array_equal(u1, u0)
    assert u1 is not u0


def test_blow_up_raises_integration_error():
    spec = _IVPSpec.from_vector_field(lambda u, p, t: u**2, [1.0], 2.0, [])
    with pytest.raises(IntegrationError) as excinfo:
        _ScipyIVPSolver().solve(spec, np.array([1.0]), np.zeros(0), 0.0, 2.0, _ShootingConfig())
    assert excinfo.value.status == -1
    assert excinfo.value.t0 == 0.0
    assert excinfo.value.t1 == 2.0


def test_vector_field_errors_propagate():
    def broken(u, p, t):
        raise ZeroDivisionError("bad field")

    spec = _IVPSpec.from_vector_field(broken, [1.0], 1.0, [])
    with pytest.raises(ZeroDivisionError):
        _ScipyIVPSolver().solve(spec, np.array([1.0]), np.zeros(0), 0.0, 1.0, _ShootingConfig())


def test_extra_solve_kwargs_are_forwarded(rotation_spec):
    solver = _ScipyIVPSolver(max_step=1e-3)
    config = _ShootingConfig(method="RK45")
    u1 = solver.solve(rotation_spec, np.array([1.0, 0.0]), np.array([1.0]), 0.0, np.pi / 2, config)
    np.testing.assert_allclose(u1, [0.0, 1.0], atol=1e-6)


def test_managed_kwargs_are_rejected():
    with pytest.raises(TypeError):
        _ScipyIVPSolver(rtol=1e-3)
