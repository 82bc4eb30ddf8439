# result bundle, nodal displacements, reactions, axial forces, equilibrium

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from .config import CONFIG
from .model import Node
from .kernel.dof import DOF_2D_TRUSS


def _frozen_array(values) -> np.ndarray:
    arr = np.array(values, dtype=float)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class OutputData:
    """
    Result of one linear static solve.

    displacements : (2N,) global nodal displacements [ux_0, uy_0, ux_1, ...]
    reaction_forces : (2N,) K·d - F; support reactions at constrained DOFs,
        ~0 elsewhere
    strains : (E,) axial strain per element, in connectivity order
    stresses : (E,) axial stress per element (strain x elastic modulus)

    Arrays are read-only copies.
    """
    displacements: np.ndarray
    reaction_forces: np.ndarray
    strains: np.ndarray
    stresses: np.ndarray

    def __post_init__(self):
        for name in ('displacements', 'reaction_forces', 'strains', 'stresses'):
            object.__setattr__(self, name, _frozen_array(getattr(self, name)))

    def nodal_displacement(self, node_id: int) -> tuple[float, float]:
        """(ux, uy) of one node."""
        ix, iy = DOF_2D_TRUSS.node_dofs(node_id)
        return float(self.displacements[ix]), float(self.displacements[iy])


def compute_nodal_displacements(
    nodes: Sequence[Node],
    output: OutputData,
) -> Dict[int, Dict[str, float]]:
    """
    Extract nodal displacements from the global displacement vector.

    Returns:
    --------
    Dict[int, Dict[str, float]]
        Mapping of node_id to {'ux', 'uy', 'magnitude'}
    """
    result = {}
    for node in nodes:
        ux, uy = output.nodal_displacement(node.id)
        result[node.id] = {
            'ux': ux,
            'uy': uy,
            'magnitude': float(np.hypot(ux, uy)),
        }
    return result


def compute_reactions(
    output: OutputData,
    fixed_dofs: List[int],
) -> Dict[int, Dict[str, float]]:
    """
    Extract reaction forces at support nodes.

    Only constrained DOFs carry a reaction; a free direction at a support
    node (e.g. a roller) reports 0.0.

    Returns:
    --------
    Dict[int, Dict[str, float]]
        Mapping of node_id to {'Rx', 'Ry'}
    """
    fixed = set(int(i) for i in fixed_dofs)
    support_nodes = sorted(set(DOF_2D_TRUSS.node_of(dof) for dof in fixed))

    R = output.reaction_forces
    result = {}
    for node_id in support_nodes:
        ix, iy = DOF_2D_TRUSS.node_dofs(node_id)
        result[node_id] = {
            'Rx': float(R[ix]) if ix in fixed else 0.0,
            'Ry': float(R[iy]) if iy in fixed else 0.0,
        }
    return result


def element_axial_forces(model, output: OutputData) -> np.ndarray:
    """
    Axial force per element, N = stress x area (positive = tension).
    """
    areas = np.array([section.area for section in model.section_assignments], dtype=float)
    return output.stresses * areas


def check_equilibrium(
    nodes: Sequence[Node],
    loads: np.ndarray,
    reactions: np.ndarray,
) -> Dict[str, float]:
    """
    Global equilibrium residuals of applied loads plus reactions.

    For a converged linear solve all three should be ~0:
        Fx = sum(Fx + Rx)
        Fy = sum(Fy + Ry)
        Mz = sum(x·(Fy + Ry) - y·(Fx + Rx))   (about the origin)

    Returns:
    --------
    Dict[str, float]
        {'Fx', 'Fy', 'Mz'} residuals
    """
    total = np.asarray(loads, dtype=float) + np.asarray(reactions, dtype=float)
    fx = total[0::2]
    fy = total[1::2]
    x = np.array([node.x for node in nodes], dtype=float)
    y = np.array([node.y for node in nodes], dtype=float)
    return {
        'Fx': float(fx.sum()),
        'Fy': float(fy.sum()),
        'Mz': float((x * fy - y * fx).sum()),
    }


def is_in_equilibrium(
    nodes: Sequence[Node],
    loads: np.ndarray,
    reactions: np.ndarray,
    atol: Optional[float] = None,
) -> bool:
    """True if all check_equilibrium residuals are within atol (default: CONFIG.equilibrium_atol)."""
    if atol is None:
        atol = CONFIG.equilibrium_atol
    residuals = check_equilibrium(nodes, loads, reactions)
    return all(abs(value) <= atol for value in residuals.values())
