"""
Algebra module: factor tables and their arithmetic.
"""

from exactinf.algebra.factor import DIST_KINDS, Factor

__all__ = ["DIST_KINDS", "Factor"]
