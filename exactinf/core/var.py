"""
exactinf/core/var.py

A discrete random variable: an integer label plus a number of states.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Var:
    """
    Discrete variable.

    Attributes:
        label: Unique integer identifier; orders variables everywhere.
        states: Number of possible values, at least 1.
    """
    label: int
    states: int

    def __post_init__(self):
        if self.states < 1:
            raise ValueError(f"Var x{self.label} needs at least one state, got {self.states}")

    def __str__(self) -> str:
        return f"x{self.label}"
