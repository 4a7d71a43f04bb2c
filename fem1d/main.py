"""
Main driver script for the 1D FEM bar solver.

Usage:
    python -m fem1d.main --order 2 --problem 1 --elements 10
    python -m fem1d.main --order 1 --problem 1 --convergence 2 4 8 16
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .fem_solver import FEMSolver
from .problem import ProblemConfig
from .utils import (
    convergence_study,
    default_output_name,
    linear_solve_stats,
    plot_solution,
    write_vtk,
)

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    defaults = ProblemConfig()
    parser = argparse.ArgumentParser(
        description="Solve E u'' + f x = 0 on (0, L) with Lagrange finite elements of order 1-3"
    )
    parser.add_argument("--order", type=int, default=1, choices=[1, 2, 3], help="Basis function order")
    parser.add_argument(
        "--problem",
        type=int,
        default=1,
        choices=[1, 2],
        help="1: Dirichlet at both ends, 2: Dirichlet at x=0 and flux at x=L",
    )
    parser.add_argument("--elements", type=int, default=10, help="Number of elements")
    parser.add_argument("--length", type=float, default=None, help=f"Bar length (default {defaults.length})")
    parser.add_argument("--modulus", type=float, default=None, help=f"Modulus E (default {defaults.modulus:g})")
    parser.add_argument(
        "--body-force", type=float, default=None, help=f"Body force coefficient (default {defaults.body_force:g})"
    )
    parser.add_argument("--flux", type=float, default=None, help=f"Flux at x=L for problem 2 (default {defaults.flux:g})")
    parser.add_argument("--g1", type=float, default=None, help=f"Displacement at x=0 (default {defaults.g1:g})")
    parser.add_argument("--g2", type=float, default=None, help=f"Displacement at x=L for problem 1 (default {defaults.g2:g})")
    parser.add_argument(
        "--convergence",
        type=int,
        nargs="+",
        default=None,
        metavar="N",
        help="Run a convergence study over these element counts instead of a single solve",
    )
    parser.add_argument("--quadrature-points", type=int, default=3, help="Gauss points per element")
    parser.add_argument("--output-dir", type=str, default=".", help="Directory for output files")
    parser.add_argument("--vtk", action="store_true", help="Write the solution to a VTK file")
    parser.add_argument("--plot", action="store_true", help="Save a plot of the solution")
    parser.add_argument("--stats", action="store_true", help="Print statistics of the linear system")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def config_from_args(args: argparse.Namespace) -> ProblemConfig:
    return ProblemConfig(problem=args.problem).with_overrides(
        length=args.length,
        modulus=args.modulus,
        body_force=args.body_force,
        flux=args.flux,
        g1=args.g1,
        g2=args.g2,
    )


def run(args: argparse.Namespace) -> float:
    """
    Solve a single problem and write the requested output.

    Returns:
        The L2 norm of the error
    """
    config = config_from_args(args)
    solver = FEMSolver.uniform(config, args.elements, args.order, args.quadrature_points)

    print(f"   Number of active elems:       {solver.mesh.num_elements}")
    print(f"   Number of degrees of freedom: {solver.num_dofs}")

    if args.stats:
        stats = linear_solve_stats(*solver.apply_boundary_conditions(*solver.assemble()))
        print("\nLinear system statistics:")
        for key, value in stats.items():
            print(f"  {key}: {value}")

    solver.solve()
    l2_error = solver.l2norm_of_error()
    print(f"L2 norm of error: {l2_error:.6e}")

    if args.vtk:
        path = os.path.join(args.output_dir, default_output_name(args.order, args.problem))
        write_vtk(solver.mesh, solver.solution, path)
    if args.plot:
        os.makedirs(args.output_dir, exist_ok=True)
        path = os.path.join(args.output_dir, default_output_name(args.order, args.problem, "png"))
        plot_solution(solver, path)
        log.info(f"Saved plot to {path}")

    return l2_error


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    if args.convergence:
        plot_path = None
        if args.plot:
            os.makedirs(args.output_dir, exist_ok=True)
            plot_path = os.path.join(args.output_dir, f"convergence_order{args.order}_problem{args.problem}.png")
        convergence_study(
            config_from_args(args),
            args.convergence,
            order=args.order,
            quadrature_points=args.quadrature_points,
            plot_path=plot_path,
        )
    else:
        run(args)

    return 0


if __name__ == "__main__":
    sys.exit(main())
