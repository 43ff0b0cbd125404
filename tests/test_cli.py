"""
Tests for the command line helpers in main.py.
"""

import json
import sys

import numpy as np

import main


def test_parse_vars_string():
    assert main.parse_vars_string("A:2, B:3") == {"A": 2, "B": 3}


def test_parse_factors_string():
    factors = main.parse_factors_string("f1:A,B:[[0.9,0.1],[0.2,0.8]];f2:B:[1,2]")
    scope, values = factors["f1"]
    assert scope == ("A", "B")
    assert values.shape == (2, 2)
    assert factors["f2"][0] == ("B",)


def test_solve_writes_json(tmp_path, monkeypatch, capsys):
    out = tmp_path / "result.json"
    monkeypatch.setattr(sys, "argv", [
        "exactinf", "solve",
        "--vars", "A:2,B:2",
        "--factors", "f:A,B:[[2,1],[1,2]]",
        "--marginals",
        "--output", str(out),
    ])
    assert main.main() == 0
    data = json.loads(out.read_text())
    assert np.isclose(data["partition_function"], 6.0)
    assert np.allclose(data["marginals"]["A"], [0.5, 0.5])
    assert data["factor_beliefs"]["f"]["scope"] == ["A", "B"]
    assert "P(A)" in capsys.readouterr().out


def test_solve_reports_only_scoped_states(monkeypatch, capsys):
    # C is declared but appears in no factor
    monkeypatch.setattr(sys, "argv", [
        "exactinf", "solve", "--vars", "A:2,B:3,C:5", "--factors", "f:A,B:[[1,1,1],[1,1,1]]",
    ])
    assert main.main() == 0
    assert "Enumerating 6 joint states of 2 scoped variables" in capsys.readouterr().out


def test_solve_inconsistent(monkeypatch):
    monkeypatch.setattr(sys, "argv", [
        "exactinf", "solve", "--vars", "A:2", "--factors", "f:A:[0,0]",
    ])
    assert main.main() == 2


def test_demos_pass():
    assert main.demo_pair()
    assert main.demo_simple_chain()
    assert main.demo_grid_2x2()
    assert main.demo_unsat()
