"""
Example problems for the 1D FEM solver.
"""

import numpy as np

from .fem_solver import FEMSolver
from .mesh import Mesh
from .problem import ProblemConfig
from .utils import convergence_study, plot_solution


def dirichlet_bar_example(order: int = 1, num_elements: int = 10, plot: bool = False):
    """
    Example 1: Bar with prescribed displacements at both ends.

    Problem: E u'' + f x = 0 on (0, 0.1), u(0) = 0, u(0.1) = 0.001
    """
    config = ProblemConfig(problem=1)
    solver = FEMSolver.uniform(config, num_elements, order)
    solution = solver.solve()

    l2_error = solver.l2norm_of_error()
    print(f"Dirichlet bar (order {order}) - L2 Error: {l2_error:.6e}")

    if plot:
        plot_solution(solver, f"dirichlet_bar_order{order}.png")

    return solver.mesh, solution


def flux_bar_example(order: int = 1, num_elements: int = 10, plot: bool = False):
    """
    Example 2: Bar fixed at the left end and loaded by a flux at the right end.

    Problem: E u'' + f x = 0 on (0, 0.1), u(0) = 0, u'(0.1) = 1e10
    """
    config = ProblemConfig(problem=2)
    solver = FEMSolver.uniform(config, num_elements, order)
    solution = solver.solve()

    l2_error = solver.l2norm_of_error()
    print(f"Flux bar (order {order}) - L2 Error: {l2_error:.6e}")

    if plot:
        plot_solution(solver, f"flux_bar_order{order}.png")

    return solver.mesh, solution


def graded_mesh_example(order: int = 2, num_elements: int = 8):
    """
    Example 3: Dirichlet bar on a mesh graded towards the right end.

    Boundary nodes are tagged by the mesh, so non-uniform vertex positions
    still pick up both end conditions.
    """
    config = ProblemConfig(problem=1)
    vertices = config.length * np.sqrt(np.linspace(0.0, 1.0, num_elements + 1))
    mesh = Mesh.from_vertices(vertices, order)
    solver = FEMSolver(mesh, config)
    solution = solver.solve()

    print(f"Graded mesh (order {order}) - L2 Error: {solver.l2norm_of_error():.6e}")

    return mesh, solution


def order_comparison_example(num_elements: int = 4):
    """Example 4: Error of orders 1, 2 and 3 on the same mesh."""
    errors = {}
    for order in (1, 2, 3):
        solver = FEMSolver.uniform(ProblemConfig(problem=1), num_elements, order)
        solver.solve()
        errors[order] = solver.l2norm_of_error()
        print(f"Order {order}, {num_elements} elements - L2 Error: {errors[order]:.6e}")
    return errors


def run_all_examples():
    """Run all example problems."""
    print("=== Example 1: Dirichlet Bar ===")
    dirichlet_bar_example()

    print("\n=== Example 2: Flux Bar ===")
    flux_bar_example()

    print("\n=== Example 3: Graded Mesh ===")
    graded_mesh_example()

    print("\n=== Example 4: Order Comparison ===")
    order_comparison_example()

    print("\n=== Convergence Study (order 1) ===")
    convergence_study(ProblemConfig(problem=1), [2, 4, 8, 16], order=1)


if __name__ == "__main__":
    run_all_examples()
