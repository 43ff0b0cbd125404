"""
exactinf/inference/registry.py

Look up inference algorithms by name.

Algorithms can be requested either by name plus a PropertySet, or by a
single string such as ``EXACT[verbose=1]``.
"""

from __future__ import annotations

from typing import Dict, Tuple, Type

from exactinf.core.exceptions import MalformedProperty, ObjectNotFound
from exactinf.core.properties import PropertySet
from exactinf.inference.base import InfAlg
from exactinf.inference.exact import ExactInf
from exactinf.topology.factorgraph import FactorGraph

INF_ALGS: Dict[str, Type[InfAlg]] = {
    ExactInf.name: ExactInf,
}


def new_inf_alg(name: str, fg: FactorGraph, opts: PropertySet) -> InfAlg:
    """Construct the algorithm called ``name`` on ``fg``."""
    try:
        cls = INF_ALGS[name]
    except KeyError:
        raise ObjectNotFound(
            f"Unknown inference algorithm '{name}'; available: {', '.join(sorted(INF_ALGS))}"
        ) from None
    return cls(fg, opts)


def parse_name_and_properties(text: str) -> Tuple[str, PropertySet]:
    """Split ``NAME[key=value,...]`` into the name and its PropertySet."""
    s = text.strip()
    pos = s.find("[")
    if pos < 0:
        return s, PropertySet()
    name = s[:pos]
    if not name:
        raise MalformedProperty(f"Missing algorithm name in '{text}'")
    return name, PropertySet.from_string(s[pos:])


def new_inf_alg_from_string(text: str, fg: FactorGraph) -> InfAlg:
    """Construct an algorithm from ``NAME[key=value,...]``."""
    name, opts = parse_name_and_properties(text)
    return new_inf_alg(name, fg, opts)
