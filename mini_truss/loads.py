# loads.py - Global load vector helpers

import numpy as np
from typing import Mapping, Sequence

from .kernel.dof import DOF_2D_TRUSS
from .kernel.assemble import add_nodal_load
from .kernel.solve import partition_dofs


def nodal_load_vector(n_nodes: int, nodal_loads: Mapping[int, Sequence[float]]) -> np.ndarray:
    """
    Build the full 2N load vector from point loads at joints.

    Parameters:
    -----------
    n_nodes : int
        Number of nodes in the model
    nodal_loads : Mapping[int, Sequence[float]]
        {node_id: (Fx, Fy)}; nodes not listed are unloaded

    Example:
    --------
    >>> nodal_load_vector(3, {1: (0.0, -1000.0)})
    array([    0.,     0.,     0., -1000.,     0.,     0.])
    """
    F = np.zeros(DOF_2D_TRUSS.ndof(n_nodes), dtype=float)
    for node_id, load in nodal_loads.items():
        if not 0 <= node_id < n_nodes:
            raise ValueError(f"Load on node {node_id}, model has {n_nodes} nodes")
        add_nodal_load(F, node_id, load, DOF_2D_TRUSS.dof_per_node)
    return F


def scatter_free_loads(
    free_values: Sequence[float],
    fixed_dofs: Sequence[int],
    ndof: int
) -> np.ndarray:
    """
    Expand a compact load list (one value per free DOF, ascending DOF order)
    into a full ndof load vector with zeros at the constrained DOFs.

    Example:
    --------
    >>> scatter_free_loads([10.0, -5.0], fixed_dofs=[0, 1], ndof=4)
    array([ 0.,  0., 10., -5.])
    """
    free, _ = partition_dofs(ndof, fixed_dofs)
    if len(free_values) != free.size:
        raise ValueError(
            f"Got {len(free_values)} loads for {free.size} free DOFs {free.tolist()}"
        )
    F = np.zeros(ndof, dtype=float)
    F[free] = np.asarray(free_values, dtype=float)
    return F
