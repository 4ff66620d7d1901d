"""Provide the continuation problem structure that shooting problems plug into.

A continuation problem is described by *variables* (named blocks of the
unknown vector), *functions* (zero problems depending on one or more
variables) and *parameters* (named scalar slots of variables). Inactive
parameters are frozen at their initial value by one monitor equation each;
active parameters are free unknowns of the continuation.

:class:`ProblemStructure` is a minimal registry implementing
:class:`_ContinuationRegistryProtocol`. Any object providing the same three
``add_*`` methods can be used with
:func:`~shootcont.algorithms.shooting.problem.add_shooting_problem` instead.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import (Any, Callable, Dict, Iterable, List, Mapping, Optional,
                    Protocol, Sequence, runtime_checkable)

import numpy as np

from shootcont.algorithms.utils.exceptions import ArgumentError
from shootcont.utils.log_config import logger

ZeroFunction = Callable[..., None]


@runtime_checkable
class _ContinuationRegistryProtocol(Protocol):
    """Protocol for problem structures accepting variables, functions and parameters."""

    def add_var(self, name: str, dim: int, *, u0: Any = None) -> int:
        """Register a variable of dimension *dim*; return its index."""
        ...

    def add_func(self, name: str, dim: int, func: ZeroFunction, var_indices: Sequence[int]) -> int:
        """Register a zero function ``func(res, *vars)`` of output dimension *dim*."""
        ...

    def add_pars(self, names: Iterable[str], var: int, *, active: bool = False) -> List[int]:
        """Bind one parameter name to each slot of variable *var*."""
        ...


@dataclass(frozen=True, eq=False)
class _Variable:
    name: str
    dim: int
    u0: np.ndarray


@dataclass(frozen=True)
class _Function:
    name: str
    dim: int
    func: ZeroFunction
    var_indices: tuple


@dataclass
class _Parameter:
    name: str
    var: int
    index: int
    value: float
    active: bool = False


class ProblemStructure:
    """Registry of continuation variables, zero functions and parameters.

    The structure is built incrementally and frozen by :meth:`initialize`,
    after which the embedded zero problem can be evaluated on a flat vector
    holding all variables back to back.

    Examples
    --------
    >>> prob = ProblemStructure()
    >>> x = prob.add_var("x", 1, u0=[2.0])
    >>> prob.add_func("square", 1, lambda res, x: res.__setitem__(0, x[0]**2 - 4), [x])
    0
    >>> prob.initialize()
    >>> prob.embedded_residual(prob.get_u0())
    array([0.])
    """

    def __init__(self):
        self._variables: List[_Variable] = []
        self._functions: List[_Function] = []
        self._parameters: List[_Parameter] = []
        self._var_names: Dict[str, int] = {}
        self._func_names: Dict[str, int] = {}
        self._par_names: Dict[str, int] = {}
        self._offsets: Optional[np.ndarray] = None

    @property
    def initialized(self) -> bool:
        return self._offsets is not None

    @property
    def variables(self) -> Mapping[str, _Variable]:
        return MappingProxyType({v.name: v for v in self._variables})

    @property
    def functions(self) -> Mapping[str, _Function]:
        return MappingProxyType({f.name: f for f in self._functions})

    @property
    def parameters(self) -> Mapping[str, _Parameter]:
        return MappingProxyType({p.name: p for p in self._parameters})

    def _check_open(self) -> None:
        if self.initialized:
            raise ArgumentError("Problem structure is already initialized")

    def add_var(self, name: str, dim: int, *, u0: Any = None) -> int:
        """Add a continuation variable.

        Parameters
        ----------
        name : str
            Unique variable name.
        dim : int
            Number of scalar unknowns in the variable.
        u0 : array_like, optional
            Initial value (zeros when omitted).

        Returns
        -------
        int
            Index of the new variable.
        """
        self._check_open()
        name = str(name)
        if name in self._var_names:
            raise ArgumentError(f"Variable '{name}' already exists")
        dim = int(dim)
        if dim < 0:
            raise ArgumentError(f"Variable dimension must be non-negative, got {dim}")
        if u0 is None:
            value = np.zeros(dim, dtype=np.float64)
        else:
            value = np.array(u0, dtype=np.float64).reshape(-1)
            if value.size != dim:
                raise ArgumentError(
                    f"Initial value of '{name}' has {value.size} elements, expected {dim}"
                )
        value.setflags(write=False)

        idx = len(self._variables)
        self._variables.append(_Variable(name, dim, value))
        self._var_names[name] = idx
        return idx

    def add_func(self, name: str, dim: int, func: ZeroFunction, var_indices: Sequence[int]) -> int:
        """Add a zero function ``func(res, *vars)``.

        The function receives one array per variable in *var_indices*, in
        that order, and writes *dim* residual values into ``res``.
        """
        self._check_open()
        name = str(name)
        if name in self._func_names:
            raise ArgumentError(f"Function '{name}' already exists")
        if not callable(func):
            raise ArgumentError(f"Function '{name}' is not callable")
        var_indices = tuple(int(i) for i in var_indices)
        for i in var_indices:
            if not 0 <= i < len(self._variables):
                raise ArgumentError(f"Function '{name}' depends on unknown variable index {i}")

        idx = len(self._functions)
        self._functions.append(_Function(name, int(dim), func, var_indices))
        self._func_names[name] = idx
        return idx

    def add_pars(self, names: Iterable[str], var: int, *, active: bool = False) -> List[int]:
        """Name each scalar slot of variable *var* as a continuation parameter.

        Inactive parameters are held at the variable's initial value.
        """
        self._check_open()
        names = [str(n) for n in names]
        if not 0 <= var < len(self._variables):
            raise ArgumentError(f"Unknown variable index {var}")
        variable = self._variables[var]
        if len(names) != variable.dim:
            raise ArgumentError(
                f"Variable '{variable.name}' has {variable.dim} elements "
                f"but {len(names)} parameter names were given"
            )
        clash = [n for n in names if n in self._par_names]
        if clash or len(set(names)) != len(names):
            raise ArgumentError(f"Duplicate parameter names: {clash or names}")

        indices = []
        for i, pname in enumerate(names):
            self._par_names[pname] = len(self._parameters)
            indices.append(len(self._parameters))
            self._parameters.append(_Parameter(pname, var, i, float(variable.u0[i]), bool(active)))
        return indices

    def set_active(self, name: str, active: bool = True) -> None:
        """Release (or freeze) a parameter before initialization."""
        self._check_open()
        self.get_par(name).active = bool(active)

    def get_var(self, name: str) -> _Variable:
        return self._variables[self._lookup(self._var_names, name, "variable")]

    def get_func(self, name: str) -> _Function:
        return self._functions[self._lookup(self._func_names, name, "function")]

    def get_par(self, name: str) -> _Parameter:
        return self._parameters[self._lookup(self._par_names, name, "parameter")]

    @staticmethod
    def _lookup(table: Dict[str, int], name: str, kind: str) -> int:
        try:
            return table[name]
        except KeyError:
            raise KeyError(f"Unknown {kind} '{name}'") from None

    def initialize(self) -> None:
        """Freeze the structure and lay the variables out in one vector."""
        self._check_open()
        dims = [v.dim for v in self._variables]
        self._offsets = np.concatenate(([0], np.cumsum(dims, dtype=np.int64)))
        logger.info(
            f"Initialized problem with {len(self._variables)} variables "
            f"({self.n_unknowns} unknowns), {len(self._functions)} functions, "
            f"{self.n_equations} equations"
        )

    def _require_initialized(self) -> None:
        if not self.initialized:
            raise ArgumentError("Problem structure must be initialized first")

    @property
    def n_unknowns(self) -> int:
        return int(sum(v.dim for v in self._variables))

    @property
    def n_equations(self) -> int:
        inactive = sum(1 for p in self._parameters if not p.active)
        return int(sum(f.dim for f in self._functions) + inactive)

    def var_slice(self, var: int) -> slice:
        """Slice of variable *var* within the flat unknown vector."""
        self._require_initialized()
        return slice(int(self._offsets[var]), int(self._offsets[var + 1]))

    def get_u0(self) -> np.ndarray:
        """Concatenated initial values of all variables."""
        if not self._variables:
            return np.zeros(0, dtype=np.float64)
        return np.concatenate([v.u0 for v in self._variables])

    def embedded(self, res: np.ndarray, u: np.ndarray) -> None:
        """Evaluate the embedded zero problem at *u* into *res*.

        The residual holds every function's output in registration order,
        followed by one equation ``u[slot] - value`` per inactive parameter.
        """
        self._require_initialized()
        u = np.asarray(u, dtype=np.float64)
        if u.size != self.n_unknowns:
            raise ArgumentError(f"Expected {self.n_unknowns} unknowns, got {u.size}")
        if res.shape != (self.n_equations,):
            raise ArgumentError(f"Residual must have shape ({self.n_equations},), got {res.shape}")

        row = 0
        for fn in self._functions:
            args = [u[self.var_slice(i)] for i in fn.var_indices]
            fn.func(res[row:row + fn.dim], *args)
            row += fn.dim
        for par in self._parameters:
            if par.active:
                continue
            res[row] = u[self._offsets[par.var] + par.index] - par.value
            row += 1

    def embedded_residual(self, u: np.ndarray) -> np.ndarray:
        """Return the embedded residual at *u* as a new array."""
        res = np.zeros(self.n_equations, dtype=np.float64)
        self.embedded(res, u)
        return res

    def __repr__(self):
        return (f"{self.__class__.__name__}(variables={list(self._var_names)}, "
                f"functions={list(self._func_names)}, parameters={list(self._par_names)})")
