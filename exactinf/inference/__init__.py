"""
Inference module: generic interface, exact enumeration and algorithm lookup.
"""

from exactinf.inference.base import Capability, InfAlg
from exactinf.inference.exact import ExactInf
from exactinf.inference.registry import (
    INF_ALGS,
    new_inf_alg,
    new_inf_alg_from_string,
    parse_name_and_properties,
)

__all__ = [
    "Capability",
    "InfAlg",
    "ExactInf",
    "INF_ALGS",
    "new_inf_alg",
    "new_inf_alg_from_string",
    "parse_name_and_properties",
]
