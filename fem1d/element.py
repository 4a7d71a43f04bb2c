"""
Element-level computations for 1D FEM.
"""

import numpy as np
import numpy.typing as npt
from typing import Callable, Tuple

from .problem import ProblemVariant
from .quadrature import QuadratureRule
from .shape_functions import LagrangeBasis


class Element:
    """
    Class for element-level computations in FEM.

    Integrals are mapped to the reference element with dx = (h_e / 2) dxi and
    d/dx = (2 / h_e) d/dxi, where h_e is the distance between the two
    endpoint nodes. All methods are free of side effects.
    """

    def __init__(self, basis: LagrangeBasis, quadrature: QuadratureRule):
        """
        Initialize element with basis and quadrature rule.

        Args:
            basis: Lagrange basis on the reference element
            quadrature: Quadrature rule for numerical integration
        """
        self.basis = basis
        self.quadrature = quadrature

    @property
    def num_nodes(self) -> int:
        return self.basis.num_nodes

    def element_length(self, node_x: npt.NDArray[np.float64]) -> float:
        """
        Length of the element from its two endpoint nodes.

        Args:
            node_x: Coordinates of the element nodes in local order

        Returns:
            h_e = x(node 1) - x(node 0)
        """
        h_e = float(node_x[1] - node_x[0])
        if h_e <= 0:
            raise ValueError(f"Element length is {h_e}, element may be degenerate")
        return h_e

    def map_to_physical(self, xi: float, node_x: npt.NDArray[np.float64]) -> float:
        """Interpolate the nodal coordinates through the basis functions."""
        x = 0.0
        for b in range(self.num_nodes):
            x += node_x[b] * self.basis.basis_function(b, xi)
        return x

    def stiffness_matrix(self, node_x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """
        Compute element stiffness matrix.

        Args:
            node_x: Coordinates of the element nodes in local order

        Returns:
            Element stiffness matrix of shape (order + 1, order + 1)
        """
        h_e = self.element_length(node_x)
        k_element = np.zeros((self.num_nodes, self.num_nodes))

        # Loop over quadrature points
        for xi, weight in self.quadrature:
            dN = self.basis.dN_dxi(xi)
            k_element += 2.0 / h_e * np.outer(dN, dN) * weight

        return k_element

    def load_vector(
        self,
        node_x: npt.NDArray[np.float64],
        source: Callable[[float], float],
    ) -> npt.NDArray[np.float64]:
        """
        Compute element load vector.

        Args:
            node_x: Coordinates of the element nodes in local order
            source: Source term s(x)

        Returns:
            Element load vector of shape (order + 1,)
        """
        h_e = self.element_length(node_x)
        f_element = np.zeros(self.num_nodes)

        # Loop over quadrature points
        for xi, weight in self.quadrature:
            x = self.map_to_physical(xi, node_x)
            N = self.basis.N(xi)
            f_element += h_e / 2.0 * N * weight * source(x)

        return f_element

    def local_system(
        self,
        node_x: npt.NDArray[np.float64],
        variant: ProblemVariant,
        on_far_boundary: bool = False,
    ) -> Tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """
        Compute the element stiffness matrix and load vector for a problem variant.

        Args:
            node_x: Coordinates of the element nodes in local order
            variant: Problem variant supplying the source term and end conditions
            on_far_boundary: Whether the right endpoint of the element is at x = L

        Returns:
            Tuple (k_element, f_element)
        """
        k_element = self.stiffness_matrix(node_x)
        f_element = self.load_vector(node_x, variant.forcing)

        # Flux boundary conditions enter the load vector directly
        if variant.has_flux_end and on_far_boundary:
            f_element[1] += variant.right_value

        return k_element, f_element
