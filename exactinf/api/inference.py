"""
exactinf/api/inference.py

Convenience entry points on the named problem format.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

import numpy as np

from exactinf.solver import run_exact, SolverResult


def exact_solve(
    var_domains: Dict[str, int],
    factors: Dict[str, Tuple[Tuple[str, ...], np.ndarray]],
    *,
    verbose: int = 0,
) -> SolverResult:
    """
    Solve a factor graph exactly.

    Args:
        var_domains: Map from variable name to domain size
        factors: Map from factor name to (scope, tensor)
        verbose: Algorithm verbosity

    Returns:
        SolverResult with partition function and beliefs

    Example:
        >>> var_domains = {"A": 2, "B": 2}
        >>> factors = {
        ...     "f1": (("A",), np.array([0.3, 0.7])),
        ...     "f2": (("A", "B"), np.array([[0.9, 0.1], [0.2, 0.8]])),
        ... }
        >>> result = exact_solve(var_domains, factors)
        >>> print(f"Z = {result.Z}")
    """
    return run_exact(var_domains, factors, verbose=verbose)


def compute_partition_function(
    var_domains: Dict[str, int],
    factors: Dict[str, Tuple[Tuple[str, ...], np.ndarray]],
    **kwargs
) -> float:
    """Partition function Z of a factor graph."""
    return exact_solve(var_domains, factors, **kwargs).Z


def compute_marginals(
    var_domains: Dict[str, int],
    factors: Dict[str, Tuple[Tuple[str, ...], np.ndarray]],
    variables: Optional[list] = None,
    **kwargs
) -> Dict[str, np.ndarray]:
    """
    Compute marginal distributions for variables.

    Args:
        var_domains: Map from variable name to domain size
        factors: Map from factor name to (scope, tensor)
        variables: List of variable names (default: all)
        **kwargs: Additional arguments passed to exact_solve

    Returns:
        Map from variable name to marginal distribution
    """
    result = exact_solve(var_domains, factors, **kwargs)
    if variables is None:
        variables = list(var_domains.keys())
    return {name: result.marginals[name] for name in variables}
