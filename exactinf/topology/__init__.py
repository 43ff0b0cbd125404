"""
Topology module: factor graph structure and named problem loading.
"""

from exactinf.topology.factorgraph import (
    FactorGraph,
    factor_graph_from_named,
    load_problem_from_json,
)

__all__ = [
    "FactorGraph",
    "factor_graph_from_named",
    "load_problem_from_json",
]
