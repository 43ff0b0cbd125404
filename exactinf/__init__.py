"""
exactinf: exact inference on discrete factor graphs

Computes the partition sum and the exact marginals of every variable and
every factor scope by enumerating all joint states. Exponential in the
number of variables; meant for small models and for checking other
inference code.

Key components:
- core: Var, VarSet (linear indexing), PropertySet, errors, name registry
- algebra: Factor value tables
- topology: FactorGraph structure
- inference: generic InfAlg interface, ExactInf, algorithm lookup
- api: high-level functions on named problems
"""

__version__ = "1.0.0"
__author__ = "exactinf developers"

from exactinf.core import (
    ExactInfError,
    PreconditionViolation,
    UnknownProperty,
    MalformedProperty,
    NotImplementedFeature,
    InvalidModel,
    ObjectNotFound,
    BeliefNotAvailable,
    Var,
    VarSet,
    PropertyKind,
    PropertySet,
    NameRegistry,
)
from exactinf.algebra.factor import Factor
from exactinf.topology.factorgraph import FactorGraph, factor_graph_from_named, load_problem_from_json
from exactinf.inference import Capability, InfAlg, ExactInf, new_inf_alg, new_inf_alg_from_string
from exactinf.api.inference import exact_solve, compute_partition_function, compute_marginals
from exactinf.solver import run_exact, SolverResult

__all__ = [
    # Errors
    "ExactInfError",
    "PreconditionViolation",
    "UnknownProperty",
    "MalformedProperty",
    "NotImplementedFeature",
    "InvalidModel",
    "ObjectNotFound",
    "BeliefNotAvailable",
    # Variables and configuration
    "Var",
    "VarSet",
    "PropertyKind",
    "PropertySet",
    "NameRegistry",
    # Model
    "Factor",
    "FactorGraph",
    "factor_graph_from_named",
    "load_problem_from_json",
    # Inference
    "Capability",
    "InfAlg",
    "ExactInf",
    "new_inf_alg",
    "new_inf_alg_from_string",
    # Solver
    "exact_solve",
    "compute_partition_function",
    "compute_marginals",
    "run_exact",
    "SolverResult",
]
