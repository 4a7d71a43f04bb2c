"""
Mesh generation and management for 1D FEM.
"""

import logging

import numpy as np
import numpy.typing as npt
import matplotlib.pyplot as plt
from typing import List, Optional, Sequence, Tuple

log = logging.getLogger(__name__)


class Mesh:
    """
    Class for managing a 1D finite element mesh of Lagrange elements.

    Global nodes are numbered from left to right, so nodal coordinates are
    non-decreasing in global index. Each row of the connectivity lists the
    global nodes of an element in local order: the left endpoint, the right
    endpoint, then the interior nodes from left to right.
    """

    def __init__(
        self,
        x_min: float,
        x_max: float,
        num_elements: int,
        order: int = 1,
        vertices: Optional[Sequence[float]] = None,
    ):
        """
        Initialize an interval mesh.

        Args:
            x_min: Left boundary of the domain
            x_max: Right boundary of the domain
            num_elements: Number of elements
            order: Polynomial order of the elements (nodes per element = order + 1)
            vertices: Optional element endpoints (num_elements + 1 increasing values
                from x_min to x_max); uniform spacing when omitted
        """
        if num_elements < 1:
            raise ValueError(f"Mesh needs at least one element, got {num_elements}")
        if order < 1:
            raise ValueError(f"Element order must be at least 1, got {order}")
        if not x_max > x_min:
            raise ValueError(f"Empty domain [{x_min}, {x_max}]")

        self.x_min = float(x_min)
        self.x_max = float(x_max)
        self.num_elements = int(num_elements)
        self.order = int(order)

        # Shared by the endpoint check and the boundary tags
        self.tolerance = 1e-12 * (self.x_max - self.x_min)

        if vertices is None:
            self.vertices = np.linspace(self.x_min, self.x_max, self.num_elements + 1)
        else:
            self.vertices = self._check_vertices(vertices)

        # Generate coordinates and connectivity
        self.coordinates = self._generate_coordinates()
        self.connectivity = self._generate_connectivity()

        self.num_nodes = self.coordinates.shape[0]
        self.nodes_per_element = self.connectivity.shape[1]

        # Tag boundary nodes once
        self.left_nodes = self._find_nodes_at(self.x_min)
        self.right_nodes = self._find_nodes_at(self.x_max)
        self.boundary_nodes = sorted(set(self.left_nodes) | set(self.right_nodes))

        log.debug(
            f"Mesh on [{self.x_min}, {self.x_max}]: {self.num_elements} elements "
            f"of order {self.order}, {self.num_nodes} nodes"
        )

    @classmethod
    def from_vertices(cls, vertices: Sequence[float], order: int = 1) -> "Mesh":
        """
        Build a (possibly non-uniform) mesh from its element endpoints.

        Args:
            vertices: Increasing element endpoint coordinates
            order: Polynomial order of the elements

        Returns:
            Mesh whose elements are the intervals between consecutive vertices
        """
        vertices = np.asarray(vertices, dtype=np.float64)
        return cls(vertices[0], vertices[-1], len(vertices) - 1, order, vertices=vertices)

    @property
    def dx(self) -> float:
        """Largest element length."""
        return float(np.max(np.diff(self.vertices)))

    def _check_vertices(self, vertices: Sequence[float]) -> npt.NDArray[np.float64]:
        vertices = np.asarray(vertices, dtype=np.float64)
        if vertices.shape != (self.num_elements + 1,):
            raise ValueError(
                f"Expected {self.num_elements + 1} vertices, got array of shape {vertices.shape}"
            )
        if np.any(np.diff(vertices) <= 0):
            raise ValueError("Mesh vertices must be strictly increasing")
        if not (
            np.isclose(vertices[0], self.x_min, rtol=0.0, atol=self.tolerance)
            and np.isclose(vertices[-1], self.x_max, rtol=0.0, atol=self.tolerance)
        ):
            raise ValueError(
                f"Mesh vertices span [{vertices[0]}, {vertices[-1]}], expected [{self.x_min}, {self.x_max}]"
            )
        return vertices

    def _generate_coordinates(self) -> npt.NDArray[np.float64]:
        """
        Generate nodal coordinates for the mesh.

        Returns:
            Array of shape (num_nodes,) with the x-coordinate of every global node
        """
        p = self.order
        coordinates = np.zeros(self.num_elements * p + 1)

        for e in range(self.num_elements):
            left, right = self.vertices[e], self.vertices[e + 1]
            for j in range(p):
                coordinates[e * p + j] = left + j * (right - left) / p
        coordinates[-1] = self.vertices[-1]

        return coordinates

    def _generate_connectivity(self) -> npt.NDArray[np.int64]:
        """
        Generate element connectivity matrix.

        Returns:
            Array of shape (num_elements, order + 1) containing node indices for each element
        """
        p = self.order
        connectivity = np.zeros((self.num_elements, p + 1), dtype=np.int64)

        for e in range(self.num_elements):
            connectivity[e, 0] = e * p  # Left endpoint
            connectivity[e, 1] = (e + 1) * p  # Right endpoint
            for k in range(2, p + 1):
                connectivity[e, k] = e * p + k - 1  # Interior nodes

        return connectivity

    def _find_nodes_at(self, x: float) -> List[int]:
        return [int(i) for i in np.flatnonzero(np.isclose(self.coordinates, x, rtol=0.0, atol=self.tolerance))]

    def is_right_boundary(self, node: int) -> bool:
        return node in self.right_nodes

    def get_element_nodes(self, element_index: int) -> npt.NDArray[np.int64]:
        """
        Get the global node indices of an element.

        Args:
            element_index: Element index

        Returns:
            Array of node indices in local order
        """
        return self.connectivity[element_index]

    def get_element_coordinates(self, element_index: int) -> npt.NDArray[np.float64]:
        """
        Get the coordinates of the nodes of an element.

        Args:
            element_index: Element index

        Returns:
            Node coordinates in local order
        """
        return self.coordinates[self.get_element_nodes(element_index)]

    def elements(self):
        """Iterate over (element index, global nodes, node coordinates)."""
        for e in range(self.num_elements):
            nodes = self.get_element_nodes(e)
            yield e, nodes, self.coordinates[nodes]

    def sorted_segments(self) -> Tuple[npt.NDArray[np.float64], npt.NDArray[np.int64]]:
        """
        Split the mesh into linear segments between neighbouring nodes.

        Returns:
            Tuple (points, segments) with points of shape (num_nodes, 3) and
            segments of shape (num_nodes - 1, 2), usable by line-cell writers
        """
        points = np.zeros((self.num_nodes, 3))
        points[:, 0] = self.coordinates
        order = np.argsort(self.coordinates, kind="stable")
        segments = np.column_stack([order[:-1], order[1:]]).astype(np.int64)
        return points, segments

    def plot(
        self,
        values: Optional[npt.NDArray[np.float64]] = None,
        title: str = "Mesh",
        path: Optional[str] = None,
        show: bool = False,
    ) -> None:
        """
        Plot the mesh and optionally nodal values.

        Args:
            values: Nodal values to plot against x
            title: Plot title
            path: File to save the figure to
            show: Whether to open an interactive window
        """
        fig, ax = plt.subplots(figsize=(10, 4))

        vertex_nodes = self.connectivity[:, :2].ravel()
        interior = np.setdiff1d(np.arange(self.num_nodes), vertex_nodes)

        if values is None:
            y = np.zeros(self.num_nodes)
            ax.plot(self.coordinates, y, "k-", lw=0.5)
        else:
            y = np.asarray(values)
            order = np.argsort(self.coordinates)
            ax.plot(self.coordinates[order], y[order], "k-", lw=0.8)
            ax.set_ylabel("u")

        ax.scatter(self.coordinates[vertex_nodes], y[vertex_nodes], c="blue", label="Vertex Nodes")
        if interior.size:
            ax.scatter(self.coordinates[interior], y[interior], c="green", s=12, label="Interior Nodes")
        ax.scatter(
            self.coordinates[self.boundary_nodes],
            y[self.boundary_nodes],
            c="red",
            label="Boundary Nodes",
        )

        ax.set_xlabel("x")
        ax.set_title(title)
        ax.legend()
        if path is not None:
            fig.savefig(path)
        if show:
            plt.show()
        plt.close(fig)
