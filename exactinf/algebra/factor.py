"""
exactinf/algebra/factor.py

A Factor is a non-negative real table over the joint states of a VarSet.

The table is stored flat, indexed by the VarSet's linear index (first
variable least significant). ``tensor()`` exposes it as an ndarray with one
axis per variable in canonical order; because the first variable varies
fastest, that view is the flat table reshaped in Fortran order.

Key operations:
  - product (*): pointwise product on the union scope
  - marginal:    sum out all variables not in the target set
  - embed:       extend to a superset scope (constant in the new variables)
  - normalized:  divide by the total mass
"""

from __future__ import annotations

from typing import Iterable, Optional, Union

import numpy as np
from scipy.special import entr, rel_entr

from exactinf.core.exceptions import InvalidModel, PreconditionViolation
from exactinf.core.varset import VarSet

DIST_KINDS = ("L1", "LINF", "TV", "KL")


class Factor:
    """
    Value table over an ordered variable set.

    Attributes:
        vars: Scope of the factor.
        values: Copy of the flat table, length vars.nr_states().
    """

    __slots__ = ("_vars", "_p")

    def __init__(
        self,
        vars: Union[VarSet, Iterable] = (),
        values: Optional[Union[float, np.ndarray, Iterable[float]]] = None,
    ):
        self._vars = vars if isinstance(vars, VarSet) else VarSet(vars)
        n = self._vars.nr_states()
        if values is None:
            p = np.ones(n, dtype=np.float64)
        elif np.isscalar(values):
            p = np.full(n, float(values), dtype=np.float64)
        else:
            p = np.array(values, dtype=np.float64)
            if p.ndim > 1:
                # multi-axis tables are read like tensor(): first axis fastest
                if p.shape != self._vars.shape():
                    raise PreconditionViolation(
                        f"Table shape {p.shape} does not match {self._vars} shape "
                        f"{self._vars.shape()}; pass a flat table or use Factor.from_tensor"
                    )
                p = p.reshape(-1, order="F")
            else:
                p = p.reshape(-1)
            if p.size != n:
                raise PreconditionViolation(
                    f"Factor over {self._vars} needs {n} values, got {p.size}"
                )
        if np.any(~(p >= 0.0)):
            raise ValueError(f"Factor over {self._vars} has negative or NaN values")
        self._p = p

    @staticmethod
    def from_tensor(vars: VarSet, data: np.ndarray) -> "Factor":
        """Build from an ndarray whose axes follow the canonical order of ``vars``."""
        data = np.asarray(data, dtype=np.float64)
        if data.shape != vars.shape():
            raise PreconditionViolation(
                f"Tensor shape {data.shape} does not match {vars} shape {vars.shape()}"
            )
        return Factor(vars, data.reshape(-1, order="F"))

    @property
    def vars(self) -> VarSet:
        return self._vars

    @property
    def values(self) -> np.ndarray:
        return self._p.copy()

    def nr_states(self) -> int:
        return self._p.size

    def value(self, i: int) -> float:
        """Value at linear index ``i``."""
        return float(self._p[i])

    def __getitem__(self, i: int) -> float:
        return self.value(i)

    def set_value(self, i: int, value: float) -> None:
        if not value >= 0.0:
            raise ValueError(f"Factor values must be non-negative, got {value}")
        self._p[i] = value

    def tensor(self) -> np.ndarray:
        """Read-only view with one axis per variable, in canonical order."""
        view = self._p.reshape(self._vars.shape(), order="F")
        view.flags.writeable = False
        return view

    def copy(self) -> "Factor":
        out = Factor.__new__(Factor)
        out._vars = self._vars
        out._p = self._p.copy()
        return out

    # ------------------------------------------------------------------

    def sum(self) -> float:
        return float(np.sum(self._p))

    def max(self) -> float:
        return float(np.max(self._p))

    def normalized(self) -> "Factor":
        """
        Return the factor scaled to unit mass.

        Raises:
            InvalidModel: if the total mass is zero.
        """
        z = self.sum()
        if not z > 0.0 or not np.isfinite(z):
            raise InvalidModel(f"Factor over {self._vars} cannot be normalized (mass {z})")
        return Factor(self._vars, self._p / z)

    def _aligned_view(self, target: VarSet) -> np.ndarray:
        """
        Tensor broadcastable against ``target`` (a superset of this scope).

        Both scopes are canonical, so no axis permutation is needed; missing
        variables become singleton axes.
        """
        shape = tuple(v.states if v in self._vars else 1 for v in target)
        return self.tensor().reshape(shape, order="F")

    def __mul__(self, other: Union["Factor", float]) -> "Factor":
        if not isinstance(other, Factor):
            return Factor(self._vars, self._p * float(other))
        union = self._vars | other._vars
        a = self._aligned_view(union)
        b = other._aligned_view(union)
        return Factor.from_tensor(union, np.broadcast_to(a * b, union.shape()))

    __rmul__ = __mul__

    def marginal(self, vs: Union[VarSet, Iterable], normed: bool = True) -> "Factor":
        """
        Sum out every variable not in ``vs``.

        The result is over ``vs`` intersected with this factor's scope.
        """
        target = self._vars & (vs if isinstance(vs, VarSet) else VarSet(vs))
        if target == self._vars:
            out = self.copy()
        else:
            elim_axes = tuple(i for i, v in enumerate(self._vars) if v not in target)
            data = np.sum(self.tensor(), axis=elim_axes)
            out = Factor.from_tensor(target, data)
        return out.normalized() if normed else out

    def embed(self, vs: Union[VarSet, Iterable]) -> "Factor":
        """Extend to the superset ``vs``, constant along the new variables."""
        target = vs if isinstance(vs, VarSet) else VarSet(vs)
        if not target.issuperset(self._vars):
            raise ValueError(f"Cannot embed factor over {self._vars} into {target}")
        return self * Factor(target - self._vars)

    def entropy(self) -> float:
        """Shannon entropy in nats of the (assumed normalized) table."""
        return float(np.sum(entr(self._p)))

    def dist(self, other: "Factor", kind: str = "L1") -> float:
        """
        Distance between two factors over the same scope.

        Args:
            other: Factor over the same VarSet
            kind: "L1", "LINF", "TV" (total variation) or "KL" (self || other)
        """
        if self._vars != other._vars:
            raise ValueError(f"Distance needs equal scopes, got {self._vars} and {other._vars}")
        if kind == "L1":
            return float(np.sum(np.abs(self._p - other._p)))
        if kind == "LINF":
            return float(np.max(np.abs(self._p - other._p))) if self._p.size else 0.0
        if kind == "TV":
            return 0.5 * float(np.sum(np.abs(self._p - other._p)))
        if kind == "KL":
            return float(np.sum(rel_entr(self._p, other._p)))
        raise ValueError(f"Unknown distance kind '{kind}', expected one of {DIST_KINDS}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Factor):
            return NotImplemented
        return self._vars == other._vars and np.array_equal(self._p, other._p)

    def __str__(self) -> str:
        return f"({self._vars}, ({', '.join(f'{p:g}' for p in self._p)}))"

    def __repr__(self) -> str:
        return f"Factor(vars={self._vars}, nr_states={self._p.size})"
