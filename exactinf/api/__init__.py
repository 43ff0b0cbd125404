"""
API module: high-level inference on named problems.
"""

from exactinf.api.inference import compute_marginals, compute_partition_function, exact_solve

__all__ = ["compute_marginals", "compute_partition_function", "exact_solve"]
