"""
exactinf/core/registry.py

Name registry for variables and factors of a named problem.

Named problems refer to variables by string; the inference engine refers
to them by integer label. Labels are assigned in sorted-name order, so the
canonical VarSet order coincides with alphabetical variable order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Tuple

from exactinf.core.exceptions import ObjectNotFound
from exactinf.core.var import Var
from exactinf.core.varset import VarSet


@dataclass
class NameRegistry:
    """
    Registry mapping names to Vars and factor indices.

    Attributes:
        var_name_to_var: Variable name -> Var
        fac_name_to_id: Factor name -> factor index
        id_to_var_name: label -> variable name
        id_to_fac_name: factor index -> factor name
    """
    var_name_to_var: Dict[str, Var]
    fac_name_to_id: Dict[str, int]
    id_to_var_name: List[str]
    id_to_fac_name: List[str]

    @staticmethod
    def build(var_domains: Mapping[str, int], factor_names: Iterable[str]) -> "NameRegistry":
        """
        Build a registry from variable domains and factor names.

        Args:
            var_domains: Map from variable name to domain size
            factor_names: Factor names, in the order factors will be indexed

        Returns:
            NameRegistry with assigned labels
        """
        var_names = sorted(var_domains.keys())
        fac_names = list(factor_names)
        return NameRegistry(
            var_name_to_var={n: Var(i, int(var_domains[n])) for i, n in enumerate(var_names)},
            fac_name_to_id={n: i for i, n in enumerate(fac_names)},
            id_to_var_name=var_names,
            id_to_fac_name=fac_names,
        )

    def var(self, name: str) -> Var:
        """Get variable by name."""
        try:
            return self.var_name_to_var[name]
        except KeyError:
            raise ObjectNotFound(f"Unknown variable '{name}'") from None

    def varset(self, names: Iterable[str]) -> VarSet:
        return VarSet(self.var(n) for n in names)

    def fac_id(self, name: str) -> int:
        """Get factor index by name."""
        try:
            return self.fac_name_to_id[name]
        except KeyError:
            raise ObjectNotFound(f"Unknown factor '{name}'") from None

    def var_name(self, label: int) -> str:
        """Get variable name by label."""
        return self.id_to_var_name[label]

    def fac_name(self, fid: int) -> str:
        """Get factor name by index."""
        return self.id_to_fac_name[fid]

    def scope_names(self, vs: VarSet) -> Tuple[str, ...]:
        """Variable names of ``vs`` in canonical order."""
        return tuple(self.var_name(v.label) for v in vs)
