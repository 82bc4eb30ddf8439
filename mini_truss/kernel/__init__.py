# mini_truss/kernel - Element-agnostic structural analysis core
"""
KERNEL: THE ELEMENT-AGNOSTIC FOUNDATION
=======================================

Assembly and solving don't care which element produced a stiffness matrix.
They just need:
- A way to map (node_id, local_dof) -> global_dof_index
- Element stiffness matrices (any size) paired with their DOF maps
- Constrained DOFs and their prescribed displacements
- Load vectors

Element implementations (AxialBar today, plane elements later) only have to
produce (dof_map, ke) pairs to plug in here.
"""

from .dof import DOFManager, DOF_2D_TRUSS
from .assemble import assemble_global_K, add_nodal_load
from .solve import solve_linear, partition_dofs, reduce_system, solve_reduced, SingularSystemError

__all__ = [
    'DOFManager', 'DOF_2D_TRUSS',
    'assemble_global_K', 'add_nodal_load',
    'solve_linear', 'partition_dofs', 'reduce_system', 'solve_reduced',
    'SingularSystemError',
]
