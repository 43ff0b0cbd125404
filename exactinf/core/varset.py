"""
exactinf/core/varset.py

Ordered variable sets and the linear-index number system.

A VarSet keeps its variables sorted by label with no duplicates. The joint
states of the set are numbered in mixed radix, each variable's cardinality
being the radix of its position and the *first* (smallest-label) variable
being the least significant digit:

    S = s(x_0) + s(x_1) * S_0 + s(x_2) * S_0 * S_1 + ...

Every component that encodes or decodes indices for the same set must use
this order. Factor tables, the enumeration in ExactInf and the belief
tables all depend on it.
"""

from __future__ import annotations

from functools import total_ordering
from typing import Dict, Iterable, Iterator, Mapping, Tuple, Union

import numpy as np

from exactinf.core.exceptions import PreconditionViolation
from exactinf.core.var import Var

VarLike = Union[Var, "VarSet", Iterable[Var]]


def _canonical(vars_: Iterable[Var]) -> Tuple[Var, ...]:
    """Sort by label and drop duplicates."""
    by_label: Dict[int, Var] = {}
    for v in vars_:
        if not isinstance(v, Var):
            raise TypeError(f"VarSet elements must be Var, got {type(v).__name__}")
        seen = by_label.get(v.label)
        if seen is None:
            by_label[v.label] = v
        elif seen.states != v.states:
            raise ValueError(
                f"Conflicting cardinalities for x{v.label}: {seen.states} and {v.states}"
            )
    return tuple(by_label[label] for label in sorted(by_label))


@total_ordering
class VarSet:
    """
    A canonical (sorted, deduplicated) set of variables.

    Construct with no arguments, with one or more Vars, or with a single
    iterable of Vars. ``size_hint`` is accepted for call-site symmetry with
    bulk constructors and has no effect on the result.
    """

    __slots__ = ("_vars",)

    def __init__(self, *args: VarLike, size_hint: int = 0):
        if len(args) == 1 and not isinstance(args[0], Var):
            items: Iterable[Var] = args[0]
        else:
            items = args
        self._vars: Tuple[Var, ...] = _canonical(items)

    @staticmethod
    def _coerce(other: VarLike) -> "VarSet":
        if isinstance(other, VarSet):
            return other
        return VarSet(other)

    # ------------------------------------------------------------------
    # Container protocol

    def __iter__(self) -> Iterator[Var]:
        return iter(self._vars)

    def __len__(self) -> int:
        return len(self._vars)

    def __getitem__(self, i: int) -> Var:
        return self._vars[i]

    def __contains__(self, v: object) -> bool:
        return v in self._vars

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VarSet):
            return NotImplemented
        return self._vars == other._vars

    def __lt__(self, other: "VarSet") -> bool:
        # Lexicographic over the canonical order
        if not isinstance(other, VarSet):
            return NotImplemented
        return self._vars < other._vars

    def __hash__(self) -> int:
        return hash(self._vars)

    def __bool__(self) -> bool:
        return bool(self._vars)

    # ------------------------------------------------------------------
    # Set algebra; every result is canonical again

    def __or__(self, other: VarLike) -> "VarSet":
        return VarSet(self._vars + self._coerce(other)._vars)

    def __and__(self, other: VarLike) -> "VarSet":
        o = self._coerce(other)
        return VarSet(v for v in self._vars if v in o._vars)

    def __sub__(self, other: VarLike) -> "VarSet":
        o = self._coerce(other)
        return VarSet(v for v in self._vars if v not in o._vars)

    def issubset(self, other: VarLike) -> bool:
        o = self._coerce(other)
        return all(v in o._vars for v in self._vars)

    def issuperset(self, other: VarLike) -> bool:
        return self._coerce(other).issubset(self)

    def intersects(self, other: VarLike) -> bool:
        return bool(self & other)

    @property
    def vars(self) -> Tuple[Var, ...]:
        return self._vars

    def labels(self) -> Tuple[int, ...]:
        return tuple(v.label for v in self._vars)

    def shape(self) -> Tuple[int, ...]:
        """Cardinalities in canonical order."""
        return tuple(v.states for v in self._vars)

    # ------------------------------------------------------------------
    # Linear index <-> joint assignment

    def nr_states(self) -> int:
        """Number of joint states; 1 for the empty set."""
        states = 1
        for v in self._vars:
            states *= v.states
        return states

    def calc_state(self, states: Mapping[Var, int]) -> int:
        """
        Linear index of a (possibly partial) joint assignment.

        Variables of this set missing from ``states`` are taken to be in
        state 0; entries for variables outside this set are ignored. Passing
        a full joint assignment therefore projects it onto this set.
        """
        prod = 1
        state = 0
        for v in self._vars:
            s = states.get(v)
            if s is not None:
                state += prod * int(s)
            prod *= v.states
        return state

    def calc_states(self, linear_state: int) -> Dict[Var, int]:
        """
        Joint assignment of every variable in this set for ``linear_state``.

        Raises:
            PreconditionViolation: if ``linear_state`` is outside [0, nr_states()).
        """
        if linear_state < 0:
            raise PreconditionViolation(f"Negative linear state {linear_state} for {self}")
        remaining = int(linear_state)
        states: Dict[Var, int] = {}
        for v in self._vars:
            states[v] = remaining % v.states
            remaining //= v.states
        if remaining != 0:
            raise PreconditionViolation(
                f"Linear state {linear_state} out of range for {self} "
                f"with {self.nr_states()} states"
            )
        return states

    def calc_state_array(self, states: Mapping[Var, np.ndarray]) -> np.ndarray:
        """Vectorized calc_state: arrays of states in, array of indices out."""
        shape = np.broadcast_shapes(*(np.shape(a) for a in states.values())) if states else ()
        state = np.zeros(shape, dtype=np.int64)
        prod = 1
        for v in self._vars:
            s = states.get(v)
            if s is not None:
                state = state + prod * np.asarray(s, dtype=np.int64)
            prod *= v.states
        return state

    def calc_states_array(self, linear_states: np.ndarray) -> Dict[Var, np.ndarray]:
        """Vectorized calc_states with the same range check."""
        remaining = np.asarray(linear_states, dtype=np.int64)
        if remaining.size and remaining.min() < 0:
            raise PreconditionViolation(f"Negative linear state for {self}")
        states: Dict[Var, np.ndarray] = {}
        for v in self._vars:
            states[v] = remaining % v.states
            remaining = remaining // v.states
        if np.any(remaining != 0):
            raise PreconditionViolation(
                f"Linear state out of range for {self} with {self.nr_states()} states"
            )
        return states

    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return "{" + ",".join(str(v) for v in self._vars) + "}"

    def __repr__(self) -> str:
        return f"VarSet({self})"
