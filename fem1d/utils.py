"""
Utility functions for FEM analysis: convergence studies, plots and file output.
"""

import logging
import os

import numpy as np
import matplotlib.pyplot as plt
import meshio
from typing import Callable, Dict, List, Optional
import numpy.typing as npt
from scipy import sparse

from .fem_solver import FEMSolver
from .mesh import Mesh
from .problem import ProblemConfig

log = logging.getLogger(__name__)

# Errors below this fraction of the solution L2 scale are treated as round-off
ROUNDOFF_FLOOR = 1e-10


def _format_rate(rate: float) -> str:
    return f"{rate:.2f}" if np.isfinite(rate) else "n/a (round-off)"


def convergence_study(
    config: ProblemConfig,
    element_counts: List[int],
    order: int = 1,
    quadrature_points: int = 3,
    plot_path: Optional[str] = None,
) -> Dict[str, List[float]]:
    """
    Perform a convergence study for the FEM solver.

    Args:
        config: Problem configuration
        element_counts: List of element counts to test
        order: Polynomial order of the elements
        quadrature_points: Number of Gauss points per element
        plot_path: Where to save a log-log plot of the errors (no plot when None)

    Returns:
        Dictionary containing h_values, l2_errors, l2_rates and solutions
    """
    h_values = []
    l2_errors = []
    solutions = []

    for n in element_counts:
        solver = FEMSolver.uniform(config, n, order, quadrature_points)
        h_values.append(solver.mesh.dx)

        solutions.append(solver.solve())

        l2_error = solver.l2norm_of_error()
        l2_errors.append(l2_error)

        print(f"Elements: {n}, h = {solver.mesh.dx:.6f}, L2 error = {l2_error:.6e}")

    # Rates between two round-off level errors are meaningless; report them as nan
    floor = ROUNDOFF_FLOOR * np.max(np.abs(solutions[-1])) * np.sqrt(config.length)
    l2_rates = []
    for i in range(len(h_values) - 1):
        if l2_errors[i] < floor and l2_errors[i + 1] < floor:
            l2_rates.append(float("nan"))
        else:
            l2_rates.append(
                np.log(l2_errors[i] / l2_errors[i + 1]) / np.log(h_values[i] / h_values[i + 1])
            )

    if plot_path is not None and len(h_values) > 1:
        plot_convergence(h_values, l2_errors, order, plot_path)

    if l2_rates:
        print("\nConvergence Rates:")
        for i, rate in enumerate(l2_rates):
            print(f"Refinement {i + 1}: L2 rate = {_format_rate(rate)}")
        resolved = [rate for rate in l2_rates if np.isfinite(rate)]
        average = np.mean(resolved) if resolved else float("nan")
        print(f"Average: L2 rate = {_format_rate(average)}")

    return {
        "h_values": h_values,
        "l2_errors": l2_errors,
        "l2_rates": l2_rates,
        "solutions": solutions,
    }


def plot_convergence(
    h_values: List[float],
    l2_errors: List[float],
    order: int,
    path: str,
) -> None:
    """
    Log-log plot of the L2 error against element size, with the expected O(h^(p+1)) slope.

    Args:
        h_values: Element sizes
        l2_errors: Matching L2 errors
        order: Polynomial order of the elements
        path: File to save the figure to
    """
    fig, ax = plt.subplots(figsize=(8, 6))
    ax.loglog(h_values, l2_errors, "o-", label="L2 Error")

    ref_h = np.array([h_values[0], h_values[-1]])
    ax.loglog(
        ref_h,
        ref_h ** (order + 1) * l2_errors[0] / h_values[0] ** (order + 1),
        "k--",
        label=f"O(h^{order + 1})",
    )

    ax.set_xlabel("Element Size (h)")
    ax.set_ylabel("Error")
    ax.set_title("FEM Convergence Study")
    ax.grid(True, which="both")
    ax.legend()
    fig.savefig(path)
    plt.close(fig)


def compute_exact_solution_at_nodes(
    mesh: Mesh, exact_solution: Callable[[float], float]
) -> npt.NDArray[np.float64]:
    """
    Compute the exact solution at all mesh nodes.

    Args:
        mesh: The finite element mesh
        exact_solution: Exact solution function u(x)

    Returns:
        Array containing exact solution values at mesh nodes
    """
    return np.asarray(exact_solution(mesh.coordinates), dtype=np.float64)


def plot_solution(
    solver: FEMSolver,
    path: Optional[str] = None,
    samples_per_element: int = 20,
    show: bool = False,
) -> None:
    """
    Plot the FEM solution against the exact solution.

    The FEM solution is sampled inside every element through the basis
    functions, so higher-order elements show their curvature.

    Args:
        solver: Solver after solve() has been called
        path: File to save the figure to
        samples_per_element: Number of plot points per element
        show: Whether to open an interactive window
    """
    if solver.solution is None:
        raise ValueError("Solution not available. Call solve() first.")

    mesh = solver.mesh
    xi = np.linspace(-1.0, 1.0, samples_per_element)
    N = solver.basis.N(xi)

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(10, 8), sharex=True)

    for e, element_nodes, node_x in mesh.elements():
        x = node_x @ N
        u_h = solver.solution[element_nodes] @ N
        u_exact = solver.exact_solution(x)
        ax1.plot(x, u_h, "b-", lw=1.5, label="FEM Solution" if e == 0 else None)
        ax1.plot(x, u_exact, "k--", lw=1.0, label="Exact Solution" if e == 0 else None)
        ax2.plot(x, u_h - u_exact, "r-", lw=1.0)

    ax1.scatter(mesh.coordinates, solver.solution, c="blue", s=12)
    ax1.set_ylabel("u")
    ax1.set_title(
        f"Problem {solver.variant.number}, order {mesh.order}, {mesh.num_elements} elements"
    )
    ax1.legend()
    ax2.set_xlabel("x")
    ax2.set_ylabel("u_h - u")
    ax2.set_title("Error")

    fig.tight_layout()
    if path is not None:
        fig.savefig(path)
    if show:
        plt.show()
    plt.close(fig)


def default_output_name(order: int, problem: int, extension: str = "vtk") -> str:
    """File name used for results of a run, e.g. solution_order2_problem1.vtk."""
    return f"solution_order{order}_problem{problem}.{extension}"


def write_vtk(
    mesh: Mesh,
    solution: npt.NDArray[np.float64],
    path: str,
    name: str = "u",
) -> str:
    """
    Write the mesh and nodal solution to a VTK file.

    Elements are split into line cells between neighbouring nodes.

    Args:
        mesh: The finite element mesh
        solution: Nodal solution values
        path: Output file (format inferred from the extension by meshio)
        name: Name of the point data field

    Returns:
        The path written to
    """
    points, segments = mesh.sorted_segments()
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    meshio.write_points_cells(
        path,
        points,
        [("line", segments)],
        point_data={name: np.asarray(solution, dtype=np.float64)},
    )
    log.info(f"Wrote {path}")
    return path


def compute_condition_number(stiffness_matrix) -> float:
    """
    Compute the condition number of the stiffness matrix.

    Args:
        stiffness_matrix: Global stiffness matrix (dense or sparse)

    Returns:
        Condition number
    """
    if sparse.issparse(stiffness_matrix):
        stiffness_matrix = stiffness_matrix.toarray()
    return float(np.linalg.cond(stiffness_matrix))


def linear_solve_stats(stiffness_matrix, load_vector: npt.NDArray[np.float64]) -> Dict[str, float]:
    """
    Provide statistics about the linear system.

    Args:
        stiffness_matrix: Global stiffness matrix
        load_vector: Global load vector

    Returns:
        Dictionary containing statistics about the system
    """
    dense = stiffness_matrix.toarray() if sparse.issparse(stiffness_matrix) else np.asarray(stiffness_matrix)
    stats = {}

    stats["matrix_size"] = dense.shape[0]
    stats["condition_number"] = compute_condition_number(dense)
    stats["matrix_norm"] = float(np.linalg.norm(dense))
    stats["symmetric"] = bool(np.allclose(dense, dense.T))

    stats["load_vector_norm"] = float(np.linalg.norm(load_vector))
    stats["load_vector_min"] = float(np.min(load_vector))
    stats["load_vector_max"] = float(np.max(load_vector))

    # Sparsity
    non_zeros = np.count_nonzero(dense)
    stats["sparsity_ratio"] = 1.0 - (non_zeros / dense.size)

    return stats
