# mini_truss/kernel/assemble.py
"""
ASSEMBLY: Element-Agnostic Global Matrix Assembly
=================================================

PURPOSE:
--------
This module handles the assembly of element contributions into global matrices.
This is the scatter-add operation that builds K from element-level data.

Assembly does not care about element TYPE. It only needs:
- Total number of DOFs
- For each element: its DOF map and its stiffness matrix

Element stiffness matrices are computed first into a list of
(dof_map, ke) pairs and then folded into K serially, in list order. Floating
point addition is not associative, so a fixed fold order keeps the assembled
matrix bit-identical between runs.

USAGE:
------
    contributions = [(bar.dof_map(dof), bar.global_stiffness_matrix()) for bar in bars]
    K = assemble_global_K(dof.ndof(n_nodes), contributions)
"""

import logging

import numpy as np
from typing import List, Tuple

_logger = logging.getLogger(__name__)


def assemble_global_K(
    ndof: int,
    contributions: List[Tuple[List[int], np.ndarray]]
) -> np.ndarray:
    """
    Assemble global stiffness matrix from element contributions.

    ALGORITHM:
    ----------
    K = zeros(ndof x ndof)
    for each element:
        for each (local_i, local_j) in element ke:
            K[dof_map[local_i], dof_map[local_j]] += ke[local_i, local_j]

    Parameters:
    -----------
    ndof : int
        Total number of DOFs in the system (2 x n_nodes for a planar truss)

    contributions : List[Tuple[List[int], np.ndarray]]
        List of (dof_map, ke) tuples, one per element:
        - dof_map: global DOF indices of the element, in local DOF order
          e.g. [2, 3, 6, 7] for a bar from node 1 to node 3
        - ke: element stiffness matrix in global coordinates,
          shape (len(dof_map), len(dof_map))

    Returns:
    --------
    np.ndarray
        Global stiffness matrix K, shape (ndof, ndof).
        Symmetric positive semi-definite (singular until supports are applied).

    Raises:
    -------
    ValueError
        If a ke does not match its dof_map, or a DOF index is out of range.
    """
    K = np.zeros((ndof, ndof), dtype=float)

    for n, (dof_map, ke) in enumerate(contributions):
        n_element_dofs = len(dof_map)
        if ke.shape != (n_element_dofs, n_element_dofs):
            raise ValueError(
                f"Contribution {n}: ke shape {ke.shape} doesn't match "
                f"dof_map length {n_element_dofs}"
            )
        if any(not 0 <= i < ndof for i in dof_map):
            raise ValueError(
                f"Contribution {n}: dof_map {list(dof_map)} outside [0, {ndof})"
            )

        for a in range(n_element_dofs):
            ia = dof_map[a]
            for b in range(n_element_dofs):
                ib = dof_map[b]
                K[ia, ib] += ke[a, b]

    _logger.debug("Assembled K (%d x %d) from %d contributions", ndof, ndof, len(contributions))
    return K


def add_nodal_load(
    F: np.ndarray,
    node_id: int,
    load_vector,
    dof_per_node: int
) -> None:
    """
    Add a nodal load to the global load vector (in-place).

    Example:
    --------
    >>> F = np.zeros(6)  # 3 nodes, 2 DOF each
    >>> add_nodal_load(F, node_id=1, load_vector=[1000.0, 0.0], dof_per_node=2)
    >>> # Now F[2] = 1000 (horizontal force at node 1)
    """
    if len(load_vector) != dof_per_node:
        raise ValueError(
            f"Nodal load needs {dof_per_node} components, got {len(load_vector)}"
        )
    base_dof = dof_per_node * node_id
    for i, val in enumerate(load_vector):
        F[base_dof + i] += val
