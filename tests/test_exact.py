"""
Tests for the ExactInf enumeration algorithm.
"""

import itertools
import logging

import numpy as np
import pytest

from exactinf.algebra.factor import Factor
from exactinf.core.exceptions import (
    BeliefNotAvailable,
    InvalidModel,
    NotImplementedFeature,
    ObjectNotFound,
    UnknownProperty,
)
from exactinf.core.properties import PropertySet
from exactinf.core.var import Var
from exactinf.core.varset import VarSet
from exactinf.inference.base import Capability, InfAlg
from exactinf.inference.exact import ExactInf
from exactinf.topology.factorgraph import FactorGraph

QUIET = PropertySet().set("verbose", 0)


def _run(fg, opts=QUIET):
    alg = ExactInf(fg, opts)
    alg.init()
    assert alg.run() == 0.0
    return alg


def _brute_force(fg):
    """Z and per-variable marginals by nested loops over named states."""
    vars_ = fg.variables()
    Z = 0.0
    marg = {v: np.zeros(v.states) for v in vars_}
    for combo in itertools.product(*(range(v.states) for v in vars_)):
        x = dict(zip(vars_, combo))
        w = 1.0
        for f in fg.factors():
            w *= f.value(f.vars.calc_state(x))
        Z += w
        for v in vars_:
            marg[v][x[v]] += w
    return Z, {v: m / Z for v, m in marg.items()}


class TestCoupledPair:
    """Two binary variables, one factor [2, 1, 1, 2]."""

    @pytest.fixture
    def pair(self):
        A, B = Var(0, 2), Var(1, 2)
        fg = FactorGraph([Factor(VarSet(A, B), [2.0, 1.0, 1.0, 2.0])])
        return A, B, fg

    def test_log_z(self, pair):
        _, _, fg = pair
        alg = _run(fg)
        assert alg.log_z() == pytest.approx(np.log(6.0))

    def test_variable_beliefs(self, pair):
        A, B, fg = pair
        alg = _run(fg)
        assert np.allclose(alg.belief(A).values, [0.5, 0.5])
        assert np.allclose(alg.belief(B).values, [0.5, 0.5])

    def test_factor_belief(self, pair):
        A, B, fg = pair
        alg = _run(fg)
        joint = alg.belief(VarSet(A, B))
        assert joint.vars == VarSet(A, B)
        assert np.allclose(joint.values, [1 / 3, 1 / 6, 1 / 6, 1 / 3])
        assert np.allclose(alg.belief_f(0).values, joint.values)

    def test_beliefs_in_graph_order(self, pair):
        A, B, fg = pair
        alg = _run(fg)
        bs = alg.beliefs()
        assert [b.vars for b in bs] == [VarSet(A), VarSet(B)]


class TestChain:
    @pytest.fixture
    def chain(self):
        A, B, C = Var(0, 2), Var(1, 3), Var(2, 2)
        rng = np.random.default_rng(0)
        fg = FactorGraph([
            Factor(A, rng.uniform(0.1, 1.0, 2)),
            Factor(VarSet(A, B), rng.uniform(0.1, 1.0, 6)),
            Factor(VarSet(B, C), rng.uniform(0.1, 1.0, 6)),
        ])
        return fg

    def test_matches_nested_loops(self, chain):
        alg = _run(chain)
        Z, marg = _brute_force(chain)
        assert alg.log_z() == pytest.approx(np.log(Z))
        for v, b in zip(chain.variables(), alg.beliefs()):
            assert np.allclose(b.values, marg[v])

    def test_normalization(self, chain):
        alg = _run(chain)
        for b in alg.beliefs() + alg.factor_beliefs():
            assert b.sum() == pytest.approx(1.0)

    def test_factor_beliefs_consistent_with_variable_beliefs(self, chain):
        alg = _run(chain)
        B = chain.var(1)
        from_ab = alg.belief_f(1).marginal(VarSet(B))
        from_bc = alg.belief_f(2).marginal(VarSet(B))
        assert np.allclose(from_ab.values, alg.belief(B).values)
        assert np.allclose(from_bc.values, alg.belief(B).values)

    def test_subset_belief_from_covering_factor(self, chain):
        alg = _run(chain)
        A, B = chain.var(0), chain.var(1)
        assert np.allclose(alg.belief(VarSet(A, B)).values, alg.belief_f(1).values)

    def test_uncovered_set_not_available(self, chain):
        alg = _run(chain)
        A, C = chain.var(0), chain.var(2)
        with pytest.raises(BeliefNotAvailable):
            alg.belief(VarSet(A, C))

    def test_calc_marginal_any_subset(self, chain):
        alg = _run(chain)
        A, B, C = chain.variables()
        ac = alg.calc_marginal(VarSet(A, C))
        # marginalize the full product
        joint = chain.factor(0) * chain.factor(1) * chain.factor(2)
        expected = joint.marginal(VarSet(A, C))
        assert np.allclose(ac.values, expected.values)
        assert np.allclose(alg.calc_marginal(VarSet(A, B)).values, alg.belief_f(1).values)

    def test_find_maximum(self, chain):
        alg = _run(chain)
        joint = chain.factor(0) * chain.factor(1) * chain.factor(2)
        best = int(np.argmax(joint.values))
        assert alg.find_maximum() == joint.vars.calc_states(best)

    def test_rerun_is_idempotent(self, chain):
        alg = _run(chain)
        first = [b.values for b in alg.beliefs()]
        alg.init()
        alg.run()
        for a, b in zip(first, alg.beliefs()):
            assert np.array_equal(a, b.values)


class TestMultipleBlocks:
    def test_enumeration_across_blocks(self, monkeypatch):
        import exactinf.inference.exact as exact_mod
        monkeypatch.setattr(exact_mod, "BLOCK_SIZE", 5)
        vars_ = [Var(i, 2 + i % 2) for i in range(4)]
        rng = np.random.default_rng(1)
        fg = FactorGraph([
            Factor(VarSet(vars_[i], vars_[i + 1]), rng.uniform(0.1, 1.0, vars_[i].states * vars_[i + 1].states))
            for i in range(3)
        ])
        alg = _run(fg)
        Z, marg = _brute_force(fg)
        assert alg.log_z() == pytest.approx(np.log(Z))
        for v, b in zip(fg.variables(), alg.beliefs()):
            assert np.allclose(b.values, marg[v])


class TestEdgeCases:
    def test_zero_partition_sum_raises(self):
        X, Y = Var(0, 2), Var(1, 2)
        fg = FactorGraph([Factor(X, [0.5, 0.5]), Factor(Y, [0.0, 0.0])])
        alg = ExactInf(fg, QUIET)
        alg.init()
        with pytest.raises(InvalidModel):
            alg.run()
        # nothing published
        assert alg.log_z() == 0.0
        assert alg.belief(X).values.tolist() == [0.0, 0.0]

    def test_failed_run_keeps_previous_results(self):
        X = Var(0, 2)
        f = Factor(X, [1.0, 3.0])
        fg = FactorGraph([f])
        alg = _run(fg)
        f.set_value(0, 0.0)
        f.set_value(1, 0.0)
        with pytest.raises(ArithmeticError):
            alg.run()
        assert alg.log_z() == pytest.approx(np.log(4.0))
        assert np.allclose(alg.belief(X).values, [0.25, 0.75])

    def test_variable_without_factor_is_uniform(self):
        A, D = Var(0, 2), Var(1, 4)
        fg = FactorGraph([Factor(A, [1.0, 3.0])], variables=[D])
        alg = _run(fg)
        assert np.allclose(alg.belief(D).values, [0.25] * 4)
        assert alg.log_z() == pytest.approx(np.log(4.0))

    def test_constant_factor(self):
        A = Var(0, 2)
        fg = FactorGraph([Factor(VarSet(), [5.0]), Factor(A, [1.0, 1.0])])
        alg = _run(fg)
        assert alg.log_z() == pytest.approx(np.log(10.0))
        assert alg.belief_f(0).values.tolist() == [1.0]

    def test_unknown_variable(self):
        fg = FactorGraph([Factor(Var(0, 2))])
        alg = _run(fg)
        with pytest.raises(ObjectNotFound):
            alg.belief(Var(9, 2))
        with pytest.raises(ObjectNotFound):
            alg.calc_marginal(VarSet(Var(9, 2)))

    def test_init_resets(self):
        fg = FactorGraph([Factor(Var(0, 2), [1.0, 2.0])])
        alg = _run(fg)
        alg.init()
        assert alg.log_z() == 0.0
        assert alg.belief(Var(0, 2)).sum() == 0.0


class TestInterface:
    @pytest.fixture
    def alg(self):
        return _run(FactorGraph([Factor(VarSet(Var(0, 2), Var(1, 2)), [1.0, 2.0, 3.0, 4.0])]))

    def test_is_inf_alg(self, alg):
        assert isinstance(alg, InfAlg)
        assert alg.name == "EXACT"

    def test_capabilities(self, alg):
        for cap in Capability:
            assert not alg.supports(cap)
            assert not ExactInf.supports(cap)

    def test_unsupported_methods(self, alg):
        with pytest.raises(NotImplementedFeature):
            alg.max_diff()
        with pytest.raises(NotImplementedFeature):
            alg.iterations()
        with pytest.raises(NotImplementedError):
            alg.init(VarSet(Var(0, 2)))

    def test_identify_and_properties(self, alg):
        assert alg.identify() == "EXACT[verbose=0]"
        assert alg.get_properties().get_count("verbose") == 0
        assert alg.print_properties() == "[verbose=0]"
        alg.set_properties(PropertySet.from_string("[verbose=2]"))
        assert alg.verbose == 2

    def test_missing_verbose_raises(self):
        fg = FactorGraph([Factor(Var(0, 2))])
        with pytest.raises(UnknownProperty):
            ExactInf(fg, PropertySet())
        with pytest.raises(UnknownProperty):
            ExactInf(fg, PropertySet.from_string("[verbose=loud]"))

    def test_clone_is_independent(self, alg):
        copy = alg.clone()
        assert copy.log_z() == alg.log_z()
        copy.init()
        assert copy.log_z() == 0.0
        assert alg.log_z() == pytest.approx(np.log(10.0))

    def test_create_is_blank(self, alg):
        fresh = alg.create()
        assert isinstance(fresh, ExactInf)
        assert fresh.beliefs() == []
        with pytest.raises(ValueError):
            fresh.run()

    def test_verbose_logging(self, caplog):
        fg = FactorGraph([Factor(Var(0, 2))])
        alg = ExactInf(fg, PropertySet().set("verbose", 3))
        alg.init()
        with caplog.at_level(logging.DEBUG, logger="exactinf.inference.exact"):
            alg.run()
        messages = [r.getMessage() for r in caplog.records]
        assert any("Starting EXACT[verbose=3]" in m for m in messages)
        assert any("block" in m for m in messages)
        assert any("finished" in m for m in messages)
