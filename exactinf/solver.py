"""
exactinf/solver.py

High-level solver interface for named problems.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Sequence, Tuple

import numpy as np

from exactinf.core.properties import PropertySet
from exactinf.core.registry import NameRegistry
from exactinf.inference.exact import ExactInf
from exactinf.topology.factorgraph import factor_graph_from_named


@dataclass
class SolverResult:
    """Result from running the solver."""
    Z: float
    log_z: float
    marginals: Dict[str, np.ndarray]
    factor_beliefs: Dict[str, Tuple[Tuple[str, ...], np.ndarray]]
    registry: NameRegistry
    alg: ExactInf


def run_exact(
    var_domains_named: Mapping[str, int],
    factors_named: Mapping[str, Tuple[Sequence[str], np.ndarray]],
    verbose: int = 0,
) -> SolverResult:
    """
    Run exact enumeration on a named factor graph.

    Args:
        var_domains_named: Map from variable name to domain size
        factors_named: Map from factor name to (scope_names, table)
        verbose: Verbosity passed to the algorithm

    Returns:
        SolverResult with Z, logZ, per-variable marginals and per-factor
        beliefs. Factor beliefs are tensors over the factor scope sorted
        by variable name.
    """
    fg, registry = factor_graph_from_named(var_domains_named, factors_named)

    alg = ExactInf(fg, PropertySet().set("verbose", int(verbose)))
    alg.init()
    alg.run()

    marginals = {
        registry.var_name(v.label): b.values
        for v, b in zip(fg.variables(), alg.beliefs())
    }
    factor_beliefs = {}
    for I, b in enumerate(alg.factor_beliefs()):
        factor_beliefs[registry.fac_name(I)] = (registry.scope_names(b.vars), b.tensor().copy())

    return SolverResult(
        Z=float(np.exp(alg.log_z())),
        log_z=alg.log_z(),
        marginals=marginals,
        factor_beliefs=factor_beliefs,
        registry=registry,
        alg=alg,
    )
