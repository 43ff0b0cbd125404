#!/usr/bin/env python3
"""
exactinf: exact inference on discrete factor graphs

Usage:
    # Solve from JSON file
    python main.py solve --input problem.json --output result.json

    # Solve from command line
    python main.py solve --vars "A:2,B:2,C:2" --factors "f1:A,B:[[0.9,0.1],[0.2,0.8]]"

    # Run demos
    python main.py demo --example chain

    # Run tests
    python main.py test
"""

from __future__ import annotations

import argparse
import json
import logging
import math
import sys
from pathlib import Path
from typing import Dict, Tuple

import numpy as np

from exactinf import (
    ExactInfError,
    InvalidModel,
    compute_marginals,
    compute_partition_function,
    exact_solve,
    load_problem_from_json,
    __version__,
)


def save_result_to_json(filepath: str, result) -> None:
    """Save solver result to JSON file."""
    output = {
        "partition_function": result.Z,
        "log_partition_function": result.log_z,
        "marginals": {var: prob.tolist() for var, prob in result.marginals.items()},
        "factor_beliefs": {
            name: {"scope": list(scope), "values": table.tolist()}
            for name, (scope, table) in result.factor_beliefs.items()
        },
        "status": "success",
    }

    with open(filepath, 'w') as f:
        json.dump(output, f, indent=2)


def parse_vars_string(vars_str: str) -> Dict[str, int]:
    """Parse variable specification: 'A:2,B:3,C:2'"""
    var_domains = {}
    for part in vars_str.split(','):
        part = part.strip()
        if ':' in part:
            name, size = part.split(':')
            var_domains[name.strip()] = int(size.strip())
    return var_domains


def parse_factors_string(factors_str: str) -> Dict[str, Tuple[Tuple[str, ...], np.ndarray]]:
    """Parse factor specification: 'f1:A,B:[[0.9,0.1],[0.2,0.8]];f2:B,C:[[0.3,0.7],[0.5,0.5]]'"""
    factors = {}
    for factor_spec in factors_str.split(';'):
        factor_spec = factor_spec.strip()
        if not factor_spec:
            continue

        parts = factor_spec.split(':')
        if len(parts) >= 3:
            name = parts[0].strip()
            scope = tuple(v.strip() for v in parts[1].split(','))
            values_str = ':'.join(parts[2:])
            values = np.array(json.loads(values_str), dtype=np.float64)
            factors[name] = (scope, values)

    return factors


def cmd_solve(args):
    """Execute the solve command."""

    if args.input:
        print(f"Loading problem from: {args.input}")
        var_domains, factors = load_problem_from_json(args.input)
    elif args.vars and args.factors:
        var_domains = parse_vars_string(args.vars)
        factors = parse_factors_string(args.factors)
    else:
        print("Error: Must specify either --input FILE or both --vars and --factors")
        return 1

    print(f"\nProblem specification:")
    print(f"  Variables: {len(var_domains)}")
    for var, size in sorted(var_domains.items()):
        print(f"    {var}: domain size {size}")
    print(f"  Factors: {len(factors)}")
    for name, (scope, values) in sorted(factors.items()):
        print(f"    {name}: scope {scope}, shape {values.shape}")

    # only variables in some factor scope are enumerated
    scoped = {var for scope, _ in factors.values() for var in scope}
    n_states = math.prod(var_domains[var] for var in scoped if var in var_domains)
    print(f"\nEnumerating {n_states} joint states of {len(scoped)} scoped variables...")
    try:
        result = exact_solve(var_domains, factors, verbose=args.verbose)
    except InvalidModel as e:
        print(f"  Status: INCONSISTENT ({e})")
        return 2
    except (ExactInfError, ValueError) as e:
        print(f"Error during solving: {e}")
        return 1

    print(f"\nResults:")
    print(f"  Z = {result.Z:.10g}")
    print(f"  log(Z) = {result.log_z:.10f}")

    if args.marginals:
        print("\nMarginal distributions:")
        for var, prob in sorted(result.marginals.items()):
            prob_str = ', '.join(f'{p:.6f}' for p in prob)
            print(f"  P({var}) = [{prob_str}]")

    if args.output:
        save_result_to_json(args.output, result)
        print(f"\nResults saved to: {args.output}")

    return 0


def demo_pair():
    """Demo: two coupled binary variables"""
    print("=" * 60)
    print("Demo: Coupled pair A -- B")
    print("=" * 60)

    var_domains = {"A": 2, "B": 2}
    phi_AB = np.array([[2.0, 1.0], [1.0, 2.0]])
    factors = {"f_AB": (("A", "B"), phi_AB)}

    result = exact_solve(var_domains, factors)
    print(f"\nPartition function Z = {result.Z:.6f}")
    for var, prob in sorted(result.marginals.items()):
        print(f"  P({var}) = [{prob[0]:.4f}, {prob[1]:.4f}]")
    scope, joint = result.factor_beliefs["f_AB"]
    print(f"  P{scope} = {joint.tolist()}")

    match = np.isclose(result.Z, 6.0) and np.allclose(joint, [[1 / 3, 1 / 6], [1 / 6, 1 / 3]])
    print(f"Match: {match}")
    return match


def demo_simple_chain():
    """Demo: Simple chain A -- B -- C"""
    print("=" * 60)
    print("Demo: Simple Chain A -- B -- C")
    print("=" * 60)

    var_domains = {"A": 2, "B": 2, "C": 2}

    phi_A = np.array([0.6, 0.4])
    phi_AB = np.array([[0.9, 0.1], [0.2, 0.8]])
    phi_BC = np.array([[0.3, 0.7], [0.5, 0.5]])

    factors = {
        "f_A": (("A",), phi_A),
        "f_AB": (("A", "B"), phi_AB),
        "f_BC": (("B", "C"), phi_BC),
    }

    print("\nFactor Graph: A -- B -- C")
    print("  Variables: A, B, C (each binary)")

    Z = compute_partition_function(var_domains, factors)
    print(f"\nPartition function Z = {Z:.6f}")

    marginals = compute_marginals(var_domains, factors)
    print("\nMarginal distributions:")
    for var, prob in sorted(marginals.items()):
        print(f"  P({var}) = [{prob[0]:.4f}, {prob[1]:.4f}]")

    Z_brute = sum(
        phi_A[a] * phi_AB[a, b] * phi_BC[b, c]
        for a in range(2) for b in range(2) for c in range(2)
    )
    print(f"\nVerification (nested loops): Z = {Z_brute:.6f}")
    match = np.isclose(Z, Z_brute)
    print(f"Match: {match}")

    return match


def demo_grid_2x2():
    """Demo: 2x2 Grid Ising Model"""
    print("=" * 60)
    print("Demo: 2x2 Grid Ising Model")
    print("=" * 60)

    var_domains = {"X00": 2, "X01": 2, "X10": 2, "X11": 2}

    J = 0.5
    psi = np.array([[np.exp(J), np.exp(-J)], [np.exp(-J), np.exp(J)]])

    factors = {
        "f_00_01": (("X00", "X01"), psi),
        "f_00_10": (("X00", "X10"), psi),
        "f_01_11": (("X01", "X11"), psi),
        "f_10_11": (("X10", "X11"), psi),
    }

    print("\nFactor Graph:")
    print("  X00 -- X01")
    print("   |      |")
    print("  X10 -- X11")
    print(f"  Coupling J = {J}")

    Z = compute_partition_function(var_domains, factors)
    print(f"\nPartition function Z = {Z:.6f}")

    marginals = compute_marginals(var_domains, factors)
    print("\nMarginal distributions:")
    for var, prob in sorted(marginals.items()):
        print(f"  P({var}) = [{prob[0]:.4f}, {prob[1]:.4f}]")

    Z_brute = sum(
        psi[x00, x01] * psi[x00, x10] * psi[x01, x11] * psi[x10, x11]
        for x00 in range(2) for x01 in range(2) for x10 in range(2) for x11 in range(2)
    )
    print(f"\nVerification (nested loops): Z = {Z_brute:.6f}")
    match = np.isclose(Z, Z_brute)
    print(f"Match: {match}")

    return match


def demo_unsat():
    """Demo: a model with no consistent configuration"""
    print("=" * 60)
    print("Demo: Zero partition sum")
    print("=" * 60)

    var_domains = {"X": 2, "Y": 2}
    factors = {
        "f_X": (("X",), np.array([0.5, 0.5])),
        "f_Y": (("Y",), np.array([0.0, 0.0])),
    }

    print("\n  f_Y assigns zero weight to every state of Y")
    try:
        exact_solve(var_domains, factors)
    except InvalidModel as e:
        print(f"  Rejected: {e}")
        return True
    print("  Unexpectedly solved")
    return False


def cmd_demo(args):
    """Execute the demo command."""
    demos = {
        "pair": demo_pair,
        "chain": demo_simple_chain,
        "grid": demo_grid_2x2,
        "unsat": demo_unsat,
    }

    if args.example == "all":
        results = []
        for name, func in demos.items():
            try:
                passed = func()
            except ExactInfError as e:
                print(f"Error in {name}: {e}")
                passed = False
            results.append((name, passed))
            print()

        print("=" * 60)
        print("Summary")
        print("=" * 60)
        all_passed = True
        for name, passed in results:
            status = "PASS" if passed else "FAIL"
            print(f"  {name}: {status}")
            if not passed:
                all_passed = False

        return 0 if all_passed else 1

    elif args.example in demos:
        try:
            passed = demos[args.example]()
            return 0 if passed else 1
        except ExactInfError as e:
            print(f"Error: {e}")
            return 1
    else:
        print(f"Unknown example: {args.example}")
        print(f"Available: {', '.join(demos.keys())}, all")
        return 1


def cmd_test(args):
    """Execute the test command."""
    import subprocess

    test_dir = Path(__file__).parent / "tests"
    if not test_dir.exists():
        print(f"Test directory not found: {test_dir}")
        return 1

    cmd = [sys.executable, "-m", "pytest", str(test_dir)]
    if args.verbose:
        cmd.append("-v")
    if args.coverage:
        cmd.extend(["--cov=exactinf", "--cov-report=term-missing"])

    print(f"Running: {' '.join(cmd)}")
    result = subprocess.run(cmd, cwd=Path(__file__).parent)
    return result.returncode


def cmd_info(args):
    """Display system information."""
    import networkx
    import scipy

    print(f"exactinf v{__version__}")
    print("Exact inference on discrete factor graphs by full enumeration")
    print()
    print("Algorithms:")
    print("  EXACT - enumerate all joint states (properties: verbose)")
    print()
    print("Python:", sys.version.split()[0])
    print("NumPy:", np.__version__)
    print("SciPy:", scipy.__version__)
    print("NetworkX:", networkx.__version__)

    return 0


def main():
    parser = argparse.ArgumentParser(
        prog="exactinf",
        description="exactinf: exact inference on discrete factor graphs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Solve from JSON file
  exactinf solve --input problem.json --output result.json

  # Solve with command-line specification
  exactinf solve --vars "A:2,B:2" --factors "f1:A,B:[[0.9,0.1],[0.2,0.8]]" -m

  # Run demos
  exactinf demo --example chain
  exactinf demo --example all

  # Run tests
  exactinf test -v
"""
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"exactinf {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Solve command
    solve_parser = subparsers.add_parser("solve", help="Solve a factor graph problem")
    solve_parser.add_argument("--input", "-i", type=str, help="Input JSON file")
    solve_parser.add_argument("--output", "-o", type=str, help="Output JSON file")
    solve_parser.add_argument("--vars", type=str, help="Variables spec: 'A:2,B:3'")
    solve_parser.add_argument("--factors", type=str, help="Factors spec: 'f1:A,B:[[...]]'")
    solve_parser.add_argument(
        "--marginals", "-m",
        action="store_true",
        help="Display marginals"
    )
    solve_parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Algorithm verbosity (repeat for more)"
    )

    # Demo command
    demo_parser = subparsers.add_parser("demo", help="Run demonstration examples")
    demo_parser.add_argument(
        "--example", "-e",
        choices=["pair", "chain", "grid", "unsat", "all"],
        default="all",
        help="Which example to run (default: all)"
    )

    # Test command
    test_parser = subparsers.add_parser("test", help="Run test suite")
    test_parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    test_parser.add_argument("--coverage", "-c", action="store_true", help="With coverage")

    # Info command
    subparsers.add_parser("info", help="Show system information")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "solve":
        level = logging.DEBUG if args.verbose >= 3 else logging.INFO if args.verbose else logging.WARNING
        logging.basicConfig(level=level, format="%(asctime)s %(name)s %(levelname)s: %(message)s")
        return cmd_solve(args)
    elif args.command == "demo":
        return cmd_demo(args)
    elif args.command == "test":
        return cmd_test(args)
    elif args.command == "info":
        return cmd_info(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
