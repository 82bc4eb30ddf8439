# AxialBar element: geometry, rotation matrices, global stiffness, strain

import copy
import math
from typing import Optional

import numpy as np

from .model import Node, Section, MalformedModelError
from .kernel.dof import DOFManager, DOF_2D_TRUSS


class MissingSectionError(RuntimeError):
    """Raised when stiffness or strain is requested from a bar with no Section."""
    pass


def rotation_2d(angle: float) -> np.ndarray:
    """
    2x2 global -> local rotation for one node's (x, y) pair.

        [ c  s]
        [-s  c]

    Orthogonal, so its transpose is the local -> global rotation.
    """
    c = math.cos(angle)
    s = math.sin(angle)
    return np.array([
        [ c, s],
        [-s, c],
    ], dtype=float)


def rotation_4d(angle: float) -> np.ndarray:
    """
    4x4 global -> local transform for a 2-node element.
    DOF order: [u_i, v_i, u_j, v_j]
    """
    R = rotation_2d(angle)
    T = np.zeros((4, 4), dtype=float)
    T[0:2, 0:2] = R
    T[2:4, 2:4] = R
    return T


class AxialBar:
    """
    Two-node pin-jointed bar in the plane.

    Holds node *indices*, not Node objects. Length and orientation are
    captured from the node coordinates at construction; moving a node means
    building a new bar.

    Local DOF order is [u_i, v_i, u_j, v_j], u along the bar from node i to
    node j. Global DOF order is [ux_i, uy_i, ux_j, uy_j].
    """

    def __init__(
        self,
        start_node: Node,
        end_node: Node,
        section: Optional[Section] = None,
        min_length: float = 0.0,
    ):
        self.ni = start_node.id
        self.nj = end_node.id
        self.section = section

        dx = end_node.x - start_node.x
        dy = end_node.y - start_node.y
        length = math.hypot(dx, dy)
        if not math.isfinite(length) or length <= min_length:
            raise MalformedModelError(
                f"Bar {self.ni}->{self.nj} has zero length (nodes at "
                f"({start_node.x}, {start_node.y}) and ({end_node.x}, {end_node.y}))"
            )
        self.length = length
        self.angle = math.atan2(dy, dx)

        self.global_to_local2 = rotation_2d(self.angle)
        self.local_to_global2 = self.global_to_local2.T
        self.global_to_local4 = rotation_4d(self.angle)
        self.local_to_global4 = self.global_to_local4.T

    def __repr__(self):
        return (f"AxialBar(ni={self.ni}, nj={self.nj}, length={self.length:.6g}, "
                f"angle={self.angle:.6g}, section={self.section!r})")

    def with_section(self, section: Section) -> "AxialBar":
        """Copy of this bar with ``section`` assigned. The original is unchanged."""
        bar = copy.copy(self)
        bar.section = section
        return bar

    def _require_section(self) -> Section:
        if self.section is None:
            raise MissingSectionError(
                f"Bar {self.ni}->{self.nj} has no section assigned"
            )
        return self.section

    @property
    def direction_cosines(self) -> tuple[float, float]:
        """(c, s) = (cos angle, sin angle)"""
        return self.global_to_local2[0, 0], self.global_to_local2[0, 1]

    def dof_map(self, dof: DOFManager = DOF_2D_TRUSS) -> list[int]:
        """Global DOFs [2*ni, 2*ni + 1, 2*nj, 2*nj + 1], in local DOF order."""
        return dof.element_dof_map([self.ni, self.nj])

    def local_stiffness_matrix(self) -> np.ndarray:
        return self._require_section().local_stiffness_matrix(self.length)

    def global_stiffness_matrix(self) -> np.ndarray:
        """
        4x4 stiffness in global coordinates:

            ke_global = T^T · k_local · T,   T = global_to_local4

        Equal to (EA/L) x [ B  -B]  with  B = [c²  cs]
                          [-B   B]            [cs  s²]
        """
        k_local = self.local_stiffness_matrix()
        T = self.global_to_local4
        return T.T @ k_local @ T

    def local_displacements(self, d_start, d_end) -> tuple[np.ndarray, np.ndarray]:
        """Rotate both end displacements (global ux, uy) into element axes."""
        u_start = self.global_to_local2 @ np.asarray(d_start, dtype=float)
        u_end = self.global_to_local2 @ np.asarray(d_end, dtype=float)
        return u_start, u_end

    def strain(self, d_start, d_end) -> float:
        """
        Engineering strain from the global displacements of both ends.
        Positive = elongation (tension).
        """
        self._require_section()
        u_start, u_end = self.local_displacements(d_start, d_end)
        elongation = u_end[0] - u_start[0]
        return float(elongation / self.length)

    def axial_force(self, d_start, d_end) -> float:
        """N = EA · strain. Positive = tension."""
        return self._require_section().axial_rigidity * self.strain(d_start, d_end)
