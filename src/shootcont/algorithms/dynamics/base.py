"""Provide the immutable IVP template used by shooting residuals.

A template captures the vector field together with default state,
parameters and time span. Each residual evaluation derives a concrete
problem from it through :meth:`~shootcont.algorithms.dynamics.base._IVPSpec.remake`
without touching the template itself.

Vector fields are accepted in two calling conventions:

- out-of-place ``f(u, p, t) -> du`` returning any sequence (a tuple works
  as a fixed-size state),
- in-place ``f(du, u, p, t)`` writing the derivative into ``du``.

Both are normalized once, at construction time, into a single
out-of-place callable returning a float64 array.
"""

import inspect
from dataclasses import dataclass, field, replace
from numbers import Real
from typing import Any, Callable, Optional, Sequence, Tuple

import numpy as np

from shootcont.algorithms.utils.exceptions import ArgumentError

VectorField = Callable[..., Any]
RHS = Callable[[np.ndarray, np.ndarray, float], np.ndarray]


def _as_vector(x: Any, name: str) -> np.ndarray:
    """Return *x* as a fresh 1-D float64 array.

    Scalars are promoted to length-one vectors.

    Raises
    ------
    :class:`~shootcont.algorithms.utils.exceptions.ArgumentError`
        If *x* has more than one dimension.
    """
    arr = np.array(x, dtype=np.float64)
    if arr.ndim == 0:
        arr = arr.reshape(1)
    if arr.ndim != 1:
        raise ArgumentError(f"{name} must be one-dimensional, got shape {arr.shape}")
    return arr


def _normalize_tspan(tspan: "Real | Sequence[Real]") -> Tuple[float, float]:
    """Return the integration interval ``(t0, t1)``.

    A single value ``T`` (scalar or length-one sequence) means ``(0, T)``;
    otherwise the first two entries are used.
    """
    if isinstance(tspan, Real) or np.ndim(tspan) == 0:
        return 0.0, float(tspan)

    values = np.asarray(tspan, dtype=np.float64).ravel()
    if values.size == 0:
        raise ArgumentError("Time span must contain at least one value")
    if values.size == 1:
        return 0.0, float(values[0])
    return float(values[0]), float(values[1])


def _positional_arity(f: VectorField) -> Optional[int]:
    """Number of positional parameters of *f*, or None if it cannot be told."""
    target = getattr(f, "py_func", f)  # numba dispatchers
    try:
        sig = inspect.signature(target)
    except (TypeError, ValueError):
        return None

    count = 0
    for param in sig.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind in (inspect.Parameter.POSITIONAL_ONLY,
                          inspect.Parameter.POSITIONAL_OR_KEYWORD):
            count += 1
    return count


def _build_vector_field(f: VectorField, inplace: Optional[bool] = None) -> Tuple[RHS, bool]:
    """Wrap *f* into an out-of-place ``(u, p, t) -> ndarray`` callable.

    Parameters
    ----------
    f : callable
        Vector field, either ``f(u, p, t)`` or ``f(du, u, p, t)``.
    inplace : bool or None, optional
        Calling convention of *f*. Detected from its signature when None.

    Returns
    -------
    rhs : callable
        Out-of-place vector field returning a 1-D float64 array.
    inplace : bool
        The calling convention that was used.

    Raises
    ------
    :class:`~shootcont.algorithms.utils.exceptions.ArgumentError`
        If *f* is not callable or its convention cannot be detected from the signature.
    """
    if not callable(f):
        raise ArgumentError(f"Vector field must be callable, got {type(f).__name__}")

    if inplace is None:
        arity = _positional_arity(f)
        if arity == 4:
            inplace = True
        elif arity == 3:
            inplace = False
        else:
            raise ArgumentError(
                "Cannot infer the calling convention of the vector field; "
                "expected f(u, p, t) or f(du, u, p, t), pass inplace= explicitly"
            )

    if inplace:
        def rhs(u, p, t):
            du = np.empty_like(u, dtype=np.float64)
            f(du, u, p, t)
            return du
    else:
        def rhs(u, p, t):
            return np.asarray(f(u, p, t), dtype=np.float64)

    return rhs, bool(inplace)


@dataclass(frozen=True, eq=False)
class _IVPSpec:
    """Template of an initial value problem ``u' = f(u, p, t)``.

    Parameters
    ----------
    vector_field : callable
        The vector field as supplied by the caller.
    u0 : numpy.ndarray
        Default initial state.
    p0 : numpy.ndarray
        Default parameter vector.
    tspan : tuple of float
        Default integration interval ``(t0, t1)``.
    inplace : bool
        Calling convention of *vector_field*.
    rhs : callable
        Normalized out-of-place vector field ``(u, p, t) -> ndarray``.
    """

    vector_field: VectorField
    u0: np.ndarray
    p0: np.ndarray
    tspan: Tuple[float, float]
    inplace: bool
    rhs: RHS = field(repr=False, compare=False)

    @classmethod
    def from_vector_field(
        cls,
        f: VectorField,
        u0: Any,
        tspan: "Real | Sequence[Real]",
        p0: Any,
        *,
        inplace: Optional[bool] = None,
    ) -> "_IVPSpec":
        """Build a template, normalizing *f*, *u0*, *p0* and *tspan*."""
        rhs, inplace = _build_vector_field(f, inplace)
        u0_arr = _as_vector(u0, "u0")
        p0_arr = _as_vector(p0, "p0")
        u0_arr.setflags(write=False)
        p0_arr.setflags(write=False)
        return cls(
            vector_field=f,
            u0=u0_arr,
            p0=p0_arr,
            tspan=_normalize_tspan(tspan),
            inplace=inplace,
            rhs=rhs,
        )

    @property
    def dim(self) -> int:
        return self.u0.size

    @property
    def state_shape(self) -> Tuple[int, ...]:
        return self.u0.shape

    @property
    def param_shape(self) -> Tuple[int, ...]:
        return self.p0.shape

    def remake(self, *, u0: Any = None, p: Any = None, tspan: Any = None) -> "_IVPSpec":
        """Return a copy with the given fields overridden."""
        changes = {}
        if u0 is not None:
            u0_arr = _as_vector(u0, "u0")
            if u0_arr.shape != self.state_shape:
                raise ArgumentError(
                    f"State dimension {u0_arr.size} != problem dimension {self.dim}"
                )
            changes["u0"] = u0_arr
        if p is not None:
            changes["p0"] = _as_vector(p, "p")
        if tspan is not None:
            changes["tspan"] = _normalize_tspan(tspan)
        return replace(self, **changes)
