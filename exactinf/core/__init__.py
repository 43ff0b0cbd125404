"""
Core module: variables, variable sets, properties, errors and name registry.
"""

from exactinf.core.exceptions import (
    ExactInfError,
    PreconditionViolation,
    UnknownProperty,
    MalformedProperty,
    NotImplementedFeature,
    InvalidModel,
    ObjectNotFound,
    BeliefNotAvailable,
)
from exactinf.core.var import Var
from exactinf.core.varset import VarSet
from exactinf.core.properties import PropertyKind, PropertySet, kind_of
from exactinf.core.registry import NameRegistry

__all__ = [
    "ExactInfError",
    "PreconditionViolation",
    "UnknownProperty",
    "MalformedProperty",
    "NotImplementedFeature",
    "InvalidModel",
    "ObjectNotFound",
    "BeliefNotAvailable",
    "Var",
    "VarSet",
    "PropertyKind",
    "PropertySet",
    "kind_of",
    "NameRegistry",
]
