"""Boundary conditions for single shooting.

A boundary condition has the signature ``bc(res, u0, u1, p, tspan)`` where
``u0`` is the state at the start of the time span, ``u1`` the integrated
state at its end and ``res`` the residual to fill in.
"""

import numpy as np


def periodic(res, u0, u1, p, tspan):
    """Periodic boundary conditions, ``res = u1 - u0``.

    The residual vanishes exactly when the trajectory closes on itself
    after ``tspan[1] - tspan[0]``.
    """
    np.subtract(u1, u0, out=res)
