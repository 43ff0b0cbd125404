"""
Example: Simple chain factor graph.

A--B--C with pairwise factors.
"""

import numpy as np
from exactinf import compute_marginals, exact_solve


def main():
    # Define variable domains
    var_domains = {
        "A": 2,
        "B": 2,
        "C": 2,
    }

    # Unary on A
    phi_A = np.array([0.6, 0.4])

    # Pairwise on (A, B)
    phi_AB = np.array([
        [0.9, 0.1],
        [0.2, 0.8]
    ])

    # Pairwise on (B, C)
    phi_BC = np.array([
        [0.3, 0.7],
        [0.5, 0.5]
    ])

    factors = {
        "f_A": (("A",), phi_A),
        "f_AB": (("A", "B"), phi_AB),
        "f_BC": (("B", "C"), phi_BC),
    }

    print("Running exact enumeration on simple chain A--B--C...")
    result = exact_solve(var_domains, factors, verbose=1)

    print(f"\nPartition function Z = {result.Z:.6f}")
    print(f"log Z = {result.log_z:.6f}")

    marginals = compute_marginals(var_domains, factors)

    print("\nMarginal distributions:")
    for var, marg in marginals.items():
        print(f"  P({var}) = {marg}")

    print("\nPairwise beliefs:")
    for name, (scope, table) in result.factor_beliefs.items():
        print(f"  {name} over {scope}:\n{table}")

    print("\nMost probable state:", {
        result.registry.var_name(v.label): s for v, s in result.alg.find_maximum().items()
    })


if __name__ == "__main__":
    import logging
    logging.basicConfig(level=logging.INFO)
    main()
