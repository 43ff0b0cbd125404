"""
Tests for FactorGraph structure and named problem loading.
"""

import json

import numpy as np
import pytest

from exactinf.algebra.factor import Factor
from exactinf.core.exceptions import ObjectNotFound
from exactinf.core.var import Var
from exactinf.core.varset import VarSet
from exactinf.topology.factorgraph import (
    FactorGraph,
    factor_graph_from_named,
    load_problem_from_json,
)

A, B, C, D = Var(0, 2), Var(1, 2), Var(2, 3), Var(3, 2)


@pytest.fixture
def chain():
    return FactorGraph([Factor(VarSet(A, B)), Factor(VarSet(B, C)), Factor(A)])


class TestStructure:
    def test_variables_in_label_order(self):
        fg = FactorGraph([Factor(VarSet(C, B)), Factor(A)])
        assert fg.variables() == [A, B, C]
        assert fg.nr_vars() == 3
        assert fg.nr_factors() == 2

    def test_extra_variables(self):
        fg = FactorGraph([Factor(A)], variables=[D])
        assert fg.variables() == [A, D]
        assert fg.nb_v(fg.find_var(D)) == []

    def test_find_var(self, chain):
        assert chain.find_var(C) == 2
        with pytest.raises(ObjectNotFound):
            chain.find_var(D)

    def test_find_factor(self, chain):
        assert chain.find_factor(VarSet(B, C)) == 1
        with pytest.raises(ObjectNotFound):
            chain.find_factor(VarSet(A, C))

    def test_neighbours(self, chain):
        assert chain.nb_v(0) == [0, 2]
        assert chain.nb_v(1) == [0, 1]
        assert chain.nb_f(1) == [1, 2]

    def test_delta(self, chain):
        assert chain.delta(1) == VarSet(A, C)
        assert chain.delta(0) == VarSet(B)

    def test_connectivity(self, chain):
        assert chain.is_connected()
        assert chain.is_tree()
        split = FactorGraph([Factor(A), Factor(B)])
        assert not split.is_connected()

    def test_cycle_is_not_tree(self):
        fg = FactorGraph([Factor(VarSet(A, B)), Factor(VarSet(B, C)), Factor(VarSet(A, C))])
        assert fg.is_connected()
        assert not fg.is_tree()


class TestNamed:
    def test_scope_order_is_canonicalized(self):
        # table indexed [b, a], listed as ("B", "A")
        table = np.array([[1.0, 2.0], [3.0, 4.0]])
        fg, reg = factor_graph_from_named({"A": 2, "B": 2}, {"f": (("B", "A"), table)})
        f = fg.factor(0)
        a, b = reg.var("A"), reg.var("B")
        assert f.vars == VarSet(a, b)
        for ia in range(2):
            for ib in range(2):
                assert f.value(f.vars.calc_state({a: ia, b: ib})) == table[ib, ia]

    def test_labels_follow_sorted_names(self):
        fg, reg = factor_graph_from_named({"Z": 2, "A": 3}, {"f": (("Z", "A"), np.ones((2, 3)))})
        assert reg.var("A") == Var(0, 3)
        assert reg.var("Z") == Var(1, 2)
        assert reg.fac_id("f") == 0
        assert reg.scope_names(fg.factor(0).vars) == ("A", "Z")

    def test_shape_mismatch_raises(self):
        with pytest.raises(ValueError):
            factor_graph_from_named({"A": 2}, {"f": (("A",), np.ones(3))})

    def test_duplicate_scope_raises(self):
        with pytest.raises(ValueError):
            factor_graph_from_named({"A": 2}, {"f": (("A", "A"), np.ones((2, 2)))})

    def test_unknown_variable_raises(self):
        with pytest.raises(ObjectNotFound):
            factor_graph_from_named({"A": 2}, {"f": (("B",), np.ones(2))})

    def test_load_json(self, tmp_path):
        path = tmp_path / "problem.json"
        path.write_text(json.dumps({
            "variables": {"A": 2, "B": 2},
            "factors": {"f": {"scope": ["A", "B"], "values": [[1, 2], [3, 4]]}},
        }))
        var_domains, factors = load_problem_from_json(str(path))
        assert var_domains == {"A": 2, "B": 2}
        scope, values = factors["f"]
        assert scope == ("A", "B")
        assert values.shape == (2, 2)
