"""
exactinf/inference/base.py

Generic interface shared by inference algorithms on factor graphs.

Algorithms differ in what they can report: iterative methods track a
maximum belief change and an iteration count, exact methods do not.
Each algorithm declares its optional features in ``capabilities`` so that
callers can check with ``supports()`` before calling; calling an optional
method that is not supported raises NotImplementedFeature.
"""

from __future__ import annotations

import abc
import copy
from enum import Enum
from typing import FrozenSet, List, Optional, Union

from exactinf.algebra.factor import Factor
from exactinf.core.exceptions import NotImplementedFeature
from exactinf.core.properties import PropertySet
from exactinf.core.var import Var
from exactinf.core.varset import VarSet
from exactinf.topology.factorgraph import FactorGraph


class Capability(Enum):
    """Optional features of an inference algorithm."""
    SELECTIVE_INIT = 1   # init(varset)
    MAX_DIFF = 2         # max_diff()
    ITERATIONS = 3       # iterations()


class InfAlg(abc.ABC):
    """
    Inference algorithm on a factor graph.

    Subclasses set ``name`` and ``capabilities`` and implement the abstract
    methods. Optional methods default to raising NotImplementedFeature.
    """

    name: str = "INFALG"
    capabilities: FrozenSet[Capability] = frozenset()

    def __init__(self, fg: Optional[FactorGraph] = None):
        self._fg = fg

    @property
    def fg(self) -> FactorGraph:
        if self._fg is None:
            raise ValueError(f"{self.name} has no factor graph")
        return self._fg

    @classmethod
    def supports(cls, capability: Capability) -> bool:
        return capability in cls.capabilities

    def _unsupported(self, capability: Capability) -> NotImplementedFeature:
        return NotImplementedFeature(f"{self.name} does not support {capability.name}")

    # Lifecycle

    def clone(self) -> "InfAlg":
        """Independent copy, including results."""
        return copy.deepcopy(self)

    def create(self) -> "InfAlg":
        """Fresh instance of the same algorithm, without graph or results."""
        return type(self)()

    @abc.abstractmethod
    def init(self, vs: Optional[VarSet] = None) -> None:
        """
        Reset the algorithm state.

        With ``vs`` given, only reset the part concerning those variables;
        that needs Capability.SELECTIVE_INIT.
        """

    @abc.abstractmethod
    def run(self) -> float:
        """Run inference; returns the final maximum belief change."""

    # Results

    @abc.abstractmethod
    def belief(self, target: Union[Var, VarSet]) -> Factor:
        """Normalized belief of a variable or of a set of variables."""

    @abc.abstractmethod
    def beliefs(self) -> List[Factor]:
        """All single-variable beliefs in graph order."""

    @abc.abstractmethod
    def log_z(self) -> float:
        """Natural logarithm of the partition sum."""

    def max_diff(self) -> float:
        raise self._unsupported(Capability.MAX_DIFF)

    def iterations(self) -> int:
        raise self._unsupported(Capability.ITERATIONS)

    # Identification and configuration

    def identify(self) -> str:
        return f"{self.name}{self.print_properties()}"

    @abc.abstractmethod
    def set_properties(self, opts: PropertySet) -> None:
        """Read configuration from ``opts``."""

    @abc.abstractmethod
    def get_properties(self) -> PropertySet:
        """Current configuration."""

    def print_properties(self) -> str:
        return str(self.get_properties())
