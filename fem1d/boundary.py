"""
Dirichlet boundary conditions for the global system.

Flux conditions are handled during element assembly; only prescribed
displacements are treated here.
"""

import logging
from typing import Dict, Tuple

import numpy as np
import numpy.typing as npt
from scipy import sparse

from .mesh import Mesh
from .problem import EndCondition, ProblemVariant

log = logging.getLogger(__name__)


def define_boundary_conditions(mesh: Mesh, variant: ProblemVariant) -> Dict[int, float]:
    """
    Collect the prescribed displacements of a problem variant.

    Nodes tagged as left boundary get the left value for every variant; nodes
    tagged as right boundary get the right value only when the right end is a
    Dirichlet end.

    Args:
        mesh: The finite element mesh
        variant: Problem variant

    Returns:
        Map from global node index to prescribed displacement
    """
    boundary_values = {}

    for node in mesh.left_nodes:
        boundary_values[node] = variant.left_value

    if variant.right_end is EndCondition.DIRICHLET:
        for node in mesh.right_nodes:
            boundary_values[node] = variant.right_value

    log.debug(f"Dirichlet nodes: {sorted(boundary_values)}")
    return boundary_values


def apply_boundary_values(
    K: sparse.csr_array,
    F: npt.NDArray[np.float64],
    boundary_values: Dict[int, float],
) -> Tuple[sparse.csr_array, npt.NDArray[np.float64]]:
    """
    Enforce prescribed values by symmetric elimination.

    The known values are moved to the right-hand side, the rows and columns of
    the constrained nodes are cleared and their diagonal entries kept, so the
    matrix stays symmetric and keeps its size. The inputs are not modified.

    Args:
        K: Global stiffness matrix
        F: Global load vector
        boundary_values: Map from global node index to prescribed value

    Returns:
        Tuple (K, F) of the constrained system
    """
    K = sparse.csr_array(K, copy=True)
    F = np.array(F, dtype=np.float64, copy=True)
    n = K.shape[0]

    if not boundary_values:
        return K, F

    nodes = np.fromiter(boundary_values.keys(), dtype=np.int64, count=len(boundary_values))
    values = np.fromiter(boundary_values.values(), dtype=np.float64, count=len(boundary_values))

    # Move the known values to the right-hand side
    u_d = np.zeros(n)
    u_d[nodes] = values
    F = F - K @ u_d

    # Clear constrained rows and columns, keeping the diagonal as pivot
    pivots = K.diagonal()[nodes]
    pivots[pivots == 0.0] = 1.0
    active = np.ones(n)
    active[nodes] = 0.0
    mask = sparse.csr_array((active, (np.arange(n), np.arange(n))), shape=(n, n))
    K = mask @ K @ mask + sparse.csr_array((pivots, (nodes, nodes)), shape=(n, n))
    K.eliminate_zeros()

    F[nodes] = pivots * values

    return K.tocsr(), F
