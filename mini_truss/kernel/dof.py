# mini_truss/kernel/dof.py
"""
DOF MANAGER: Degree of Freedom Indexing
=======================================

PURPOSE:
--------
This module handles the mapping from (node_id, local_dof) to global DOF indices.
Every other module goes through it, so the numbering rule lives in one place:

    2D Truss:  2 DOF/node (ux, uy)

    node 0 -> DOFs [0, 1]
    node 1 -> DOFs [2, 3]
    node k -> DOFs [2k, 2k + 1]

Scattering with the raw node id instead of 2*id silently writes stiffness
into the rows of an unrelated node, so nothing outside this module should
compute DOF indices by hand.

USAGE:
------
    dof = DOFManager(dof_per_node=2)

    # Get global index for node 2, local DOF 1 (uy)
    global_idx = dof.idx(node_id=2, local_dof=1)  # -> 5
"""

from dataclasses import dataclass
from typing import List


@dataclass
class DOFManager:
    """
    Manages degree-of-freedom indexing for a planar truss.

    Attributes:
    -----------
    dof_per_node : int
        Number of DOFs per node (2 for a planar pin-jointed truss: ux, uy)

    Examples:
    ---------
    >>> dof = DOFManager(dof_per_node=2)
    >>> dof.idx(0, 0)  # Node 0, ux
    0
    >>> dof.idx(1, 1)  # Node 1, uy
    3
    >>> dof.ndof(5)    # Total DOFs for 5 nodes
    10
    """
    dof_per_node: int

    def idx(self, node_id: int, local_dof: int) -> int:
        """
        Get the global DOF index for a node's local DOF.

        Parameters:
        -----------
        node_id : int
            The node identifier (0-indexed, dense)
        local_dof : int
            The local DOF index within the node: 0=ux, 1=uy

        Returns:
        --------
        int
            Global DOF index in the system matrices
        """
        if not 0 <= local_dof < self.dof_per_node:
            raise ValueError(
                f"local_dof must be in [0, {self.dof_per_node}), got {local_dof}"
            )
        return self.dof_per_node * node_id + local_dof

    def ndof(self, n_nodes: int) -> int:
        """Total number of DOFs (size of K) for a system with n_nodes."""
        return self.dof_per_node * n_nodes

    def node_dofs(self, node_id: int) -> List[int]:
        """
        Get all global DOF indices for a single node.

        >>> DOFManager(dof_per_node=2).node_dofs(2)
        [4, 5]
        """
        base = self.dof_per_node * node_id
        return list(range(base, base + self.dof_per_node))

    def node_of(self, global_dof: int) -> int:
        """Inverse mapping: the node that owns a global DOF."""
        return global_dof // self.dof_per_node

    def element_dof_map(self, node_ids: List[int]) -> List[int]:
        """
        Get the DOF map for an element connecting several nodes.

        The order matches the element's local DOF order: all DOFs of the
        first node, then all DOFs of the second node, and so on.

        Examples:
        ---------
        >>> dof = DOFManager(dof_per_node=2)
        >>> dof.element_dof_map([0, 1])
        [0, 1, 2, 3]
        >>> dof.element_dof_map([2, 4])
        [4, 5, 8, 9]
        """
        result = []
        for node_id in node_ids:
            result.extend(self.node_dofs(node_id))
        return result


DOF_2D_TRUSS = DOFManager(dof_per_node=2)   # ux, uy
