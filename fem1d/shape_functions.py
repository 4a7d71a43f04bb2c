"""
Lagrange shape functions for 1D elements of arbitrary polynomial order.

Local node numbering follows the usual vertex-first convention:
node 0 sits at xi = -1, node 1 at xi = +1 and nodes 2..p are the interior
nodes, equally spaced from left to right.
"""

import numpy as np
import numpy.typing as npt
from typing import Union

from .exceptions import InvalidNodeIndex

Scalar = Union[float, npt.NDArray[np.float64]]


class LagrangeBasis:
    """
    Lagrange interpolation basis on the reference element [-1, 1].

    Both the basis functions and their derivatives are evaluated from the
    product form of the Lagrange polynomial, so any order is supported.
    """

    def __init__(self, order: int = 1):
        """
        Initialize the basis.

        Args:
            order: Polynomial order of the basis (number of nodes is order + 1)
        """
        if int(order) != order or order < 1:
            raise ValueError(f"Basis order must be a positive integer, got {order!r}")

        self.order = int(order)
        self.num_nodes = self.order + 1
        self.nodes = np.array([self.xi_at_node(a) for a in range(self.num_nodes)])

    def _check_node(self, node: int) -> int:
        if int(node) != node or not 0 <= node <= self.order:
            raise InvalidNodeIndex(node, self.order)
        return int(node)

    def xi_at_node(self, node: int) -> float:
        """
        Reference coordinate of a local node.

        Args:
            node: Local node index in [0, order]

        Returns:
            xi of the node in [-1, 1]
        """
        node = self._check_node(node)

        if node == 0:
            return -1.0
        if node == 1:
            return 1.0
        return -1.0 + 2.0 * (node - 1.0) / self.order

    def basis_function(self, node: int, xi: Scalar) -> Scalar:
        """
        Evaluate the basis function of a node.

        Args:
            node: Local node index in [0, order]
            xi: Point(s) in the reference element

        Returns:
            Value of the basis function at xi
        """
        node = self._check_node(node)
        xi_a = self.nodes[node]

        value = 1.0
        for i, xi_i in enumerate(self.nodes):
            if i != node:
                value = value * (xi - xi_i) / (xi_a - xi_i)

        return value

    def basis_gradient(self, node: int, xi: Scalar) -> Scalar:
        """
        Evaluate the derivative of a basis function with respect to xi.

        The product rule applied to the Lagrange product gives a sum over every
        excluded node j of 1/(xi_a - xi_j) times the product of the remaining
        factors.

        Args:
            node: Local node index in [0, order]
            xi: Point(s) in the reference element

        Returns:
            dN/dxi at xi (not dN/dx)
        """
        node = self._check_node(node)
        xi_a = self.nodes[node]

        value = 0.0
        for j, xi_j in enumerate(self.nodes):
            if j == node:
                continue
            term = 1.0 / (xi_a - xi_j)
            for i, xi_i in enumerate(self.nodes):
                if i != node and i != j:
                    term = term * (xi - xi_i) / (xi_a - xi_i)
            value = value + term

        return value

    def N(self, xi: Scalar) -> npt.NDArray[np.float64]:
        """
        Evaluate all basis functions at a point.

        Args:
            xi: Point(s) in the reference element

        Returns:
            Array of shape (order + 1,) (or (order + 1, len(xi)) for array input)
        """
        return np.array(
            [np.broadcast_to(self.basis_function(a, xi), np.shape(xi)) for a in range(self.num_nodes)],
            dtype=np.float64,
        )

    def dN_dxi(self, xi: Scalar) -> npt.NDArray[np.float64]:
        """
        Evaluate the derivatives of all basis functions at a point.

        Args:
            xi: Point(s) in the reference element

        Returns:
            Array of shape (order + 1,) (or (order + 1, len(xi)) for array input)
        """
        return np.array(
            [np.broadcast_to(self.basis_gradient(a, xi), np.shape(xi)) for a in range(self.num_nodes)],
            dtype=np.float64,
        )

    def map_to_physical(self, xi: Scalar, node_x: npt.NDArray[np.float64]) -> Scalar:
        """
        Map a reference coordinate to the physical element by interpolating nodal coordinates.

        Args:
            xi: Point(s) in the reference element
            node_x: Physical coordinates of the element nodes in local order

        Returns:
            Physical coordinate(s)
        """
        return np.tensordot(np.asarray(node_x, dtype=np.float64), self.N(xi), axes=1)

    def __repr__(self) -> str:
        return f"LagrangeBasis(order={self.order})"
