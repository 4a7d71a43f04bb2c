"""
Finite Element Method solver for the 1D axial bar problem.
"""

import logging

import numpy as np
import numpy.typing as npt
from scipy import sparse
from scipy.sparse.linalg import spsolve
from typing import Callable, Optional, Tuple

from .assembly import GlobalSystem, assemble_system
from .boundary import apply_boundary_values, define_boundary_conditions
from .element import Element
from .exceptions import FEMError
from .mesh import Mesh
from .problem import ProblemConfig, make_variant
from .quadrature import QuadratureRule
from .shape_functions import LagrangeBasis

log = logging.getLogger(__name__)


class FEMSolver:
    """
    Class for solving the bar problem using the finite element method.

    Provides methods for assembly, boundary conditions, solving, and error estimation.
    """

    def __init__(self, mesh: Mesh, config: ProblemConfig, quadrature_points: int = 3):
        """
        Initialize the FEM solver.

        Args:
            mesh: The finite element mesh on [0, L]
            config: Problem configuration (selects the variant)
            quadrature_points: Number of Gauss points per element (default: 3)
        """
        self.variant = make_variant(config)
        tol = mesh.tolerance
        if not (
            np.isclose(mesh.x_min, 0.0, rtol=0.0, atol=tol)
            and np.isclose(mesh.x_max, config.length, rtol=0.0, atol=tol)
        ):
            raise ValueError(
                f"Mesh covers [{mesh.x_min}, {mesh.x_max}] but the problem is posed on [0, {config.length}]"
            )

        self.mesh = mesh
        self.config = config
        self.basis = LagrangeBasis(mesh.order)
        self.quadrature = QuadratureRule(quadrature_points)
        self.element = Element(self.basis, self.quadrature)
        self.system = GlobalSystem(mesh.num_nodes)
        self.boundary_values = define_boundary_conditions(mesh, self.variant)
        if not self.boundary_values:
            raise FEMError(
                f"No Dirichlet node found for problem {self.variant.number}; the system would be singular"
            )
        self.solution = None

        log.info(
            f"Problem {self.variant.number} ({self.variant.description}), order {mesh.order}: "
            f"{mesh.num_elements} elements, {mesh.num_nodes} degrees of freedom"
        )

    @classmethod
    def uniform(
        cls,
        config: ProblemConfig,
        num_elements: int,
        order: int = 1,
        quadrature_points: int = 3,
    ) -> "FEMSolver":
        """Build a solver on a uniform mesh of [0, L]."""
        mesh = Mesh(0.0, config.length, num_elements, order)
        return cls(mesh, config, quadrature_points)

    @property
    def num_dofs(self) -> int:
        return self.mesh.num_nodes

    def assemble(self) -> Tuple[sparse.csr_array, npt.NDArray[np.float64]]:
        """
        Assemble the global stiffness matrix and load vector.

        Returns:
            Tuple of global stiffness matrix and load vector, before Dirichlet conditions
        """
        assemble_system(self.system, self.mesh, self.element, self.variant)
        return self.system.K, self.system.F.copy()

    def apply_boundary_conditions(
        self, K: sparse.csr_array, F: npt.NDArray[np.float64]
    ) -> Tuple[sparse.csr_array, npt.NDArray[np.float64]]:
        """Enforce the Dirichlet conditions of the problem variant on (K, F)."""
        return apply_boundary_values(K, F, self.boundary_values)

    def solve(self) -> npt.NDArray[np.float64]:
        """
        Assemble, apply boundary conditions and solve the system directly.

        Returns:
            Solution vector at all nodes
        """
        K, F = self.apply_boundary_conditions(*self.assemble())

        self.solution = np.atleast_1d(spsolve(K.tocsc(), F))
        self.system.D = self.solution
        log.info(f"Solved for {self.num_dofs} unknowns")

        return self.solution

    def evaluate_solution(self, xi: float, element_index: int) -> float:
        """
        Evaluate the solution at a point within an element.

        Args:
            xi: Local coordinate (-1 to 1)
            element_index: Element index

        Returns:
            Solution value at the specified point
        """
        if self.solution is None:
            raise ValueError("Solution not available. Call solve() first.")

        element_nodes = self.mesh.get_element_nodes(element_index)
        return float(np.dot(self.basis.N(xi), self.solution[element_nodes]))

    def exact_solution(self, x):
        """Closed-form solution of the problem variant."""
        return self.variant.exact(x)

    def l2norm_of_error(self, exact: Optional[Callable] = None) -> float:
        """
        L2 norm of the difference between the FEM solution and the exact solution.

        Args:
            exact: Reference solution u(x); defaults to the variant's closed form

        Returns:
            The L2 error norm
        """
        if self.solution is None:
            raise ValueError("Solution not available. Call solve() first.")

        if exact is None:
            exact = self.variant.exact
        return l2_error(self.mesh, self.element, self.solution, exact)


def l2_error(
    mesh: Mesh,
    element: Element,
    solution: npt.NDArray[np.float64],
    exact: Callable,
) -> float:
    """
    L2 norm of u_h - u_exact, integrated element by element with the element's quadrature.

    Args:
        mesh: The finite element mesh
        element: Element integrator (basis and quadrature)
        solution: Nodal values of the FEM solution
        exact: Reference solution u(x)

    Returns:
        sqrt of the integral of (u_h - u_exact)^2 over the domain
    """
    basis = element.basis
    l2_error_squared = 0.0

    # Loop over all elements
    for e, element_nodes, node_x in mesh.elements():
        h_e = element.element_length(node_x)
        element_solution = solution[element_nodes]

        # Loop over quadrature points
        for xi, weight in element.quadrature:
            x = 0.0
            u_h = 0.0
            for b in range(basis.num_nodes):
                N_b = basis.basis_function(b, xi)
                x += node_x[b] * N_b
                u_h += element_solution[b] * N_b

            l2_error_squared += (u_h - exact(x)) ** 2 * h_e / 2.0 * weight

    return float(np.sqrt(l2_error_squared))
