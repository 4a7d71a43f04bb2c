"""
Global assembly of the stiffness matrix and load vector.
"""

import logging

import numpy as np
import numpy.typing as npt
from scipy import sparse

from .element import Element
from .mesh import Mesh
from .problem import ProblemVariant

log = logging.getLogger(__name__)


class GlobalSystem:
    """
    Global linear system K D = F indexed by global node number.

    Element contributions are accumulated as (row, col, value) triplets and
    summed when the sparse matrix is built, so repeated entries add up.
    """

    def __init__(self, num_dofs: int):
        self.num_dofs = int(num_dofs)
        self.zero()

    def zero(self) -> None:
        """Reset K, F and D to zero."""
        self._rows = []
        self._cols = []
        self._vals = []
        self.F = np.zeros(self.num_dofs)
        self.D = np.zeros(self.num_dofs)

    def add(self, row: int, col: int, value: float) -> None:
        """Accumulate value into K[row, col]."""
        self._rows.append(row)
        self._cols.append(col)
        self._vals.append(value)

    def add_local(
        self,
        dofs: npt.NDArray[np.int64],
        k_local: npt.NDArray[np.float64],
        f_local: npt.NDArray[np.float64],
    ) -> None:
        """
        Scatter an element matrix and vector into the global system.

        Args:
            dofs: Global node index of each local node
            k_local: Element stiffness matrix
            f_local: Element load vector
        """
        I = np.repeat(dofs, len(dofs))
        J = np.tile(dofs, len(dofs))
        self._rows.extend(I.tolist())
        self._cols.extend(J.tolist())
        self._vals.extend(np.asarray(k_local).ravel().tolist())
        np.add.at(self.F, dofs, f_local)

    @property
    def K(self) -> sparse.csr_array:
        """Sparse stiffness matrix with all contributions summed."""
        K = sparse.csr_array(
            (
                np.asarray(self._vals, dtype=np.float64),
                (np.asarray(self._rows, dtype=np.int64), np.asarray(self._cols, dtype=np.int64)),
            ),
            shape=(self.num_dofs, self.num_dofs),
        )
        K.sum_duplicates()
        return K


def assemble_system(
    system: GlobalSystem,
    mesh: Mesh,
    element: Element,
    variant: ProblemVariant,
) -> GlobalSystem:
    """
    Assemble the global stiffness matrix and load vector.

    The system is zeroed first, so calling this twice gives the same result.

    Args:
        system: Global system to fill
        mesh: The finite element mesh
        element: Element integrator matching the mesh order
        variant: Problem variant (source term and flux end)

    Returns:
        The filled system
    """
    if element.num_nodes != mesh.nodes_per_element:
        raise ValueError(
            f"Element has {element.num_nodes} nodes but mesh elements have {mesh.nodes_per_element}"
        )

    system.zero()

    for e, element_nodes, node_x in mesh.elements():
        on_far_boundary = mesh.is_right_boundary(element_nodes[1])
        k_element, f_element = element.local_system(node_x, variant, on_far_boundary)
        system.add_local(element_nodes, k_element, f_element)

    log.debug(f"Assembled {mesh.num_elements} elements into a {system.num_dofs}x{system.num_dofs} system")
    return system
