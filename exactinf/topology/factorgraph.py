"""
exactinf/topology/factorgraph.py

Factor graph: variables, factors and their bipartite incidence.

Variables are kept in canonical (label) order; factors keep the order in
which they were given. Variable node i and factor node I are adjacent when
the i-th variable is in the scope of the I-th factor.
"""

from __future__ import annotations

import json
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import networkx as nx
import numpy as np

from exactinf.algebra.factor import Factor
from exactinf.core.exceptions import ObjectNotFound
from exactinf.core.registry import NameRegistry
from exactinf.core.var import Var
from exactinf.core.varset import VarSet

NamedFactors = Mapping[str, Tuple[Sequence[str], np.ndarray]]


class FactorGraph:
    """
    Factor graph over discrete variables.

    Maintains:
    - Variables in label order
    - Factors in insertion order
    - Variable/factor incidence as a networkx bipartite graph
    """

    def __init__(self, factors: Iterable[Factor], variables: Optional[Iterable[Var]] = None):
        self._factors: List[Factor] = list(factors)
        all_vars = VarSet(v for f in self._factors for v in f.vars)
        if variables is not None:
            all_vars = all_vars | VarSet(variables)
        self._vars: Tuple[Var, ...] = all_vars.vars
        self._var_index: Dict[Var, int] = {v: i for i, v in enumerate(self._vars)}

        self._graph = nx.Graph()
        self._graph.add_nodes_from((("v", i) for i in range(len(self._vars))), bipartite=0)
        self._graph.add_nodes_from((("f", I) for I in range(len(self._factors))), bipartite=1)
        for I, f in enumerate(self._factors):
            for v in f.vars:
                self._graph.add_edge(("v", self._var_index[v]), ("f", I))

    def variables(self) -> List[Var]:
        return list(self._vars)

    def factors(self) -> List[Factor]:
        return list(self._factors)

    def var(self, i: int) -> Var:
        return self._vars[i]

    def factor(self, I: int) -> Factor:
        return self._factors[I]

    def nr_vars(self) -> int:
        return len(self._vars)

    def nr_factors(self) -> int:
        return len(self._factors)

    def find_var(self, v: Var) -> int:
        """Position of ``v`` in variables()."""
        try:
            return self._var_index[v]
        except KeyError:
            raise ObjectNotFound(f"Variable {v} is not part of the factor graph") from None

    def find_factor(self, vs: VarSet) -> int:
        """Index of the first factor whose scope equals ``vs``."""
        for I, f in enumerate(self._factors):
            if f.vars == vs:
                return I
        raise ObjectNotFound(f"No factor with scope {vs}")

    def nb_v(self, i: int) -> List[int]:
        """Indices of the factors containing variable i."""
        return sorted(I for _, I in self._graph.neighbors(("v", i)))

    def nb_f(self, I: int) -> List[int]:
        """Indices of the variables in factor I."""
        return sorted(i for _, i in self._graph.neighbors(("f", I)))

    def delta(self, i: int) -> VarSet:
        """Markov blanket of variable i (excluding i)."""
        out = VarSet(self._vars[j] for I in self.nb_v(i) for j in self.nb_f(I))
        return out - self._vars[i]

    def is_connected(self) -> bool:
        if self._graph.number_of_nodes() == 0:
            return True
        return nx.is_connected(self._graph)

    def is_tree(self) -> bool:
        if self._graph.number_of_nodes() == 0:
            return True
        return nx.is_tree(self._graph)

    def __repr__(self) -> str:
        return f"FactorGraph(vars={len(self._vars)}, factors={len(self._factors)})"


def factor_graph_from_named(
    var_domains: Mapping[str, int],
    factors: NamedFactors,
) -> Tuple[FactorGraph, NameRegistry]:
    """
    Build a FactorGraph from the named problem format.

    Args:
        var_domains: Map from variable name to domain size
        factors: Map from factor name to (scope, table); table axes follow
            the listed scope order

    Returns:
        (FactorGraph, NameRegistry) with factors in the order given
    """
    registry = NameRegistry.build(var_domains, factors.keys())
    fs = []
    for name, (scope, table) in factors.items():
        scope = tuple(scope)
        if len(set(scope)) != len(scope):
            raise ValueError(f"Factor '{name}' has duplicate variables in scope {scope}")
        vs = registry.varset(scope)
        data = np.asarray(table, dtype=np.float64)
        expected = tuple(registry.var(n).states for n in scope)
        if data.shape != expected:
            raise ValueError(f"Factor '{name}': table shape {data.shape} != scope shape {expected}")
        canonical_names = registry.scope_names(vs)
        perm = [scope.index(n) for n in canonical_names]
        fs.append(Factor.from_tensor(vs, np.transpose(data, axes=perm)))
    variables = [registry.var(n) for n in var_domains]
    return FactorGraph(fs, variables=variables), registry


def load_problem_from_json(filepath: str) -> Tuple[Dict[str, int], Dict[str, Tuple[Tuple[str, ...], np.ndarray]]]:
    """
    Load a named factor graph problem from a JSON file.

    Expected format:
    {
        "variables": {"A": 2, "B": 3},
        "factors": {
            "f1": {"scope": ["A", "B"], "values": [[0.1, 0.2, 0.3], [0.4, 0.5, 0.6]]}
        }
    }
    """
    with open(filepath, "r") as f:
        data = json.load(f)

    var_domains = {name: int(size) for name, size in data["variables"].items()}

    factors = {}
    for name, fdata in data["factors"].items():
        scope = tuple(fdata["scope"])
        values = np.array(fdata["values"], dtype=np.float64)
        factors[name] = (scope, values)

    return var_domains, factors
