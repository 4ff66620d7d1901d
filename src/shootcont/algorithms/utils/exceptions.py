"""
Custom exceptions for the shootcont package.
"""


class ShootcontError(Exception):
    """Base exception for shootcont errors.
    
    Parameters
    ----------
    message : str
        The error message.
    """

    def __init__(self, message: str):
        super().__init__(message)


class ArgumentError(ShootcontError, ValueError):
    """Raised when a caller supplies inconsistent arguments.

    Raised before any side effect takes place, e.g. when the number of
    parameter names does not match the length of the parameter vector.
    
    Parameters
    ----------
    message : str
        The error message.
    """

    def __init__(self, message: str):
        super().__init__(message)


class IntegrationError(ShootcontError):
    """Raised when the IVP integrator fails to reach the end of the time span.
    
    Parameters
    ----------
    message : str
        The error message.
    status : int, optional
        Status code reported by the integrator.
    t0, t1 : float, optional
        The requested integration interval.
    """

    def __init__(self, message: str, status: int | None = None,
                 t0: float | None = None, t1: float | None = None):
        super().__init__(message)
        self.status = status
        self.t0 = t0
        self.t1 = t1
