"""
exactinf/inference/exact.py

Exact inference by enumerating every joint state of a factor graph.

For each linear index s of the union of all factor scopes:

    x      = domain.calc_states(s)
    w(s)   = prod_I  F_I[ F_I.vars.calc_state(x) ]
    Z     += w(s)
    b_i[x_i]                      += w(s)   for every variable i
    b_I[F_I.vars.calc_state(x)]   += w(s)   for every factor I

and finally every belief is divided by Z. The linear index space is walked
in contiguous blocks, each block decoded and weighted with numpy at once.
Cost is exponential in the number of variables; use on small graphs only.
"""

from __future__ import annotations

import logging
import time
from typing import Dict, Iterator, List, Optional, Tuple, Union

import numpy as np

from exactinf.algebra.factor import Factor
from exactinf.core.exceptions import BeliefNotAvailable, InvalidModel
from exactinf.core.properties import PropertySet
from exactinf.core.var import Var
from exactinf.core.varset import VarSet
from exactinf.inference.base import Capability, InfAlg
from exactinf.topology.factorgraph import FactorGraph

logger = logging.getLogger(__name__)

# Linear indices decoded per numpy batch
BLOCK_SIZE = 1 << 16


class ExactInf(InfAlg):
    """
    Exact inference by brute-force enumeration.

    Properties:
        verbose (count): 0 silent, >= 1 logs each run, >= 3 logs every block.

    Example:
        >>> ps = PropertySet().set("verbose", 0)
        >>> alg = ExactInf(fg, ps)
        >>> alg.init()
        >>> alg.run()
        0.0
        >>> alg.log_z()
    """

    name = "EXACT"
    capabilities = frozenset()

    def __init__(self, fg: Optional[FactorGraph] = None, opts: Optional[PropertySet] = None):
        super().__init__(fg)
        self.verbose = 0
        self._beliefs_v: List[Factor] = []
        self._beliefs_f: List[Factor] = []
        self._log_z = 0.0
        if fg is not None:
            self.set_properties(opts if opts is not None else PropertySet())
            self._construct()

    def _construct(self) -> None:
        self._beliefs_v = [Factor(v, 0.0) for v in self.fg.variables()]
        self._beliefs_f = [Factor(f.vars, 0.0) for f in self.fg.factors()]
        self._log_z = 0.0

    # ------------------------------------------------------------------
    # Configuration

    def set_properties(self, opts: PropertySet) -> None:
        self.verbose = opts.get_count("verbose")

    def get_properties(self) -> PropertySet:
        return PropertySet().set("verbose", self.verbose)

    # ------------------------------------------------------------------
    # Lifecycle

    def init(self, vs: Optional[VarSet] = None) -> None:
        if vs is not None:
            raise self._unsupported(Capability.SELECTIVE_INIT)
        self._construct()

    def _enumerate(self, domain: VarSet) -> Iterator[Tuple[np.ndarray, Dict[Var, np.ndarray], np.ndarray, List[np.ndarray]]]:
        """
        Walk all joint states of ``domain`` in blocks.

        Yields:
            (linear indices, states per variable, weights, per-factor indices)
        """
        factors = self.fg.factors()
        tables = [f.values for f in factors]
        total = domain.nr_states()
        for start in range(0, total, BLOCK_SIZE):
            idx = np.arange(start, min(start + BLOCK_SIZE, total), dtype=np.int64)
            states = domain.calc_states_array(idx)
            w = np.ones(idx.size, dtype=np.float64)
            proj = []
            for f, table in zip(factors, tables):
                j = np.broadcast_to(f.vars.calc_state_array(states), idx.shape)
                proj.append(j)
                w = w * table[j]
            if self.verbose >= 3:
                logger.debug("%s: block [%d, %d) mass %g", self.name, start, start + idx.size, w.sum())
            yield idx, states, w, proj

    def _domain(self) -> VarSet:
        return VarSet(v for f in self.fg.factors() for v in f.vars)

    def run(self) -> float:
        """
        Enumerate all joint states and compute beliefs and logZ.

        Returns:
            0.0; nothing iterative remains after an exact pass.

        Raises:
            InvalidModel: if the partition sum is zero or not finite. Previous
                results are left in place.
        """
        tic = time.perf_counter()
        domain = self._domain()
        factors = self.fg.factors()
        if self.verbose >= 1:
            logger.info("Starting %s on %d joint states of %s", self.identify(), domain.nr_states(), domain)

        Z = 0.0
        acc_v = {v: np.zeros(v.states, dtype=np.float64) for v in domain}
        acc_f = [np.zeros(f.nr_states(), dtype=np.float64) for f in factors]
        for _, states, w, proj in self._enumerate(domain):
            Z += float(w.sum())
            for v in domain:
                acc_v[v] += np.bincount(states[v], weights=w, minlength=v.states)
            for I, j in enumerate(proj):
                acc_f[I] += np.bincount(j, weights=w, minlength=acc_f[I].size)

        if not (Z > 0.0 and np.isfinite(Z)):
            raise InvalidModel(f"Partition sum is {Z}; the model has no consistent configuration")

        beliefs_v = []
        for v in self.fg.variables():
            if v in acc_v:
                beliefs_v.append(Factor(v, acc_v[v] / Z))
            else:
                # not in any factor scope
                beliefs_v.append(Factor(v, 1.0 / v.states))
        self._beliefs_v = beliefs_v
        self._beliefs_f = [Factor(f.vars, acc / Z) for f, acc in zip(factors, acc_f)]
        self._log_z = float(np.log(Z))

        if self.verbose >= 1:
            logger.info("%s finished in %.3fs, logZ = %g", self.name, time.perf_counter() - tic, self._log_z)
        return 0.0

    # ------------------------------------------------------------------
    # Results

    def belief(self, target: Union[Var, VarSet]) -> Factor:
        """
        Belief of a variable, or joint belief of a set of variables.

        A set belief is available when some factor's scope contains the
        whole set; it is the marginal of that factor's belief.

        Raises:
            ObjectNotFound: the variable is not in the graph.
            BeliefNotAvailable: no factor scope covers the set; use
                calc_marginal() instead.
        """
        if isinstance(target, Var):
            return self._beliefs_v[self.fg.find_var(target)].copy()
        vs = target if isinstance(target, VarSet) else VarSet(target)
        if len(vs) == 1:
            return self.belief(vs[0])
        for I, f in enumerate(self.fg.factors()):
            if vs.issubset(f.vars):
                return self._beliefs_f[I].marginal(vs, normed=False)
        raise BeliefNotAvailable(f"{self.name}: no factor scope contains {vs}; use calc_marginal()")

    def beliefs(self) -> List[Factor]:
        return [b.copy() for b in self._beliefs_v]

    def factor_beliefs(self) -> List[Factor]:
        return [b.copy() for b in self._beliefs_f]

    def belief_v(self, i: int) -> Factor:
        return self._beliefs_v[i].copy()

    def belief_f(self, I: int) -> Factor:
        return self._beliefs_f[I].copy()

    def log_z(self) -> float:
        return self._log_z

    def calc_marginal(self, vs: Union[VarSet, Var]) -> Factor:
        """
        Exact joint marginal over any set of graph variables.

        Runs a fresh enumeration over the factor scopes together with
        ``vs``; does not touch the stored beliefs.
        """
        vs = vs if isinstance(vs, VarSet) else VarSet(vs)
        for v in vs:
            self.fg.find_var(v)
        acc = np.zeros(vs.nr_states(), dtype=np.float64)
        for idx, states, w, _ in self._enumerate(self._domain() | vs):
            j = np.broadcast_to(vs.calc_state_array(states), idx.shape)
            acc += np.bincount(j, weights=w, minlength=acc.size)
        return Factor(vs, acc).normalized()

    def find_maximum(self) -> Dict[Var, int]:
        """
        Most probable joint state of all graph variables.

        Ties go to the lowest linear index.

        Raises:
            InvalidModel: if every configuration has zero weight.
        """
        domain = VarSet(self.fg.variables())
        best_w = 0.0
        best_s = -1
        for idx, _, w, _ in self._enumerate(domain):
            k = int(np.argmax(w))
            if w[k] > best_w:
                best_w = float(w[k])
                best_s = int(idx[k])
        if best_s < 0:
            raise InvalidModel(f"{self.name}: every configuration has zero weight")
        return domain.calc_states(best_s)

    def __repr__(self) -> str:
        return f"ExactInf({self.identify()}, fg={self._fg!r})"
