"""Example script: periodic orbit of the Hopf normal form by single shooting.

For p = (1, -1) the unit circle is a periodic orbit of period 2*pi. The
script registers the shooting problem, evaluates the residual on the orbit
and then corrects a perturbed initial state with a Poincare-section
boundary condition.

Run with
    python examples/hopf_orbit.py
"""

import os
import sys

sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

import numpy as np
from scipy.optimize import root

from shootcont import ProblemStructure, add_shooting_problem
from shootcont.utils.log_config import logger


def hopf(out, u, p, t):
    r2 = u[0]**2 + u[1]**2
    out[0] = p[0]*u[0] - u[1] + p[1]*u[0]*r2
    out[1] = u[0] + p[0]*u[1] + p[1]*u[1]*r2


def section(res, u0, u1, p, tspan):
    # closure in x, start on the section y = 0
    res[0] = u1[0] - u0[0]
    res[1] = u0[1]


def main() -> None:
    prob = ProblemStructure()
    add_shooting_problem(prob, "hopf", hopf, [1.0, 0.0], [1.0, -1.0], 2 * np.pi)
    prob.initialize()
    res = prob.embedded_residual(prob.get_u0())
    logger.info("Residual on the unit circle: %s", np.array2string(res, precision=3))

    prob = ProblemStructure()
    add_shooting_problem(prob, "hopf", hopf, [1.3, 0.1], [1.0, -1.0], 2 * np.pi, section,
                         reltol=1e-10, abstol=1e-12)
    prob.initialize()
    sol = root(prob.embedded_residual, prob.get_u0())
    u = sol.x[prob.var_slice(0)]
    logger.info("Corrected initial state: %s (converged: %s)", u, sol.success)


if __name__ == "__main__":
    main()
