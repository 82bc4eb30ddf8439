# Node, Material, Section (frozen dataclasses)

from dataclasses import dataclass

import numpy as np


class MalformedModelError(ValueError):
    """Raised when a model definition is inconsistent (bad index, length mismatch, degenerate bar)."""
    pass


@dataclass(frozen=True)
class Material:
    """
    Linear elastic isotropic material.

    One instance per material type, shared by every Section made of it.
    Units are whatever the caller uses consistently (e.g. N/mm² with mm).

    elastic_modulus : float
        Young's modulus E, must be > 0 (aluminium: ~70e3 N/mm²)
    poisson_ratio : float
        Poisson ratio, 0 <= nu < 0.5. Carried for completeness; an axial bar
        does not use it.
    """
    elastic_modulus: float
    poisson_ratio: float = 0.3

    def __post_init__(self):
        if not self.elastic_modulus > 0.0:
            raise ValueError(f"elastic_modulus must be positive, got {self.elastic_modulus}")
        if not 0.0 <= self.poisson_ratio < 0.5:
            raise ValueError(f"poisson_ratio must be in [0, 0.5), got {self.poisson_ratio}")


@dataclass(frozen=True)
class Section:
    """
    Bar cross-section: area plus the material it is made of.
    """
    area: float
    material: Material

    def __post_init__(self):
        if not self.area > 0.0:
            raise ValueError(f"Section area must be positive, got {self.area}")

    @property
    def axial_rigidity(self) -> float:
        """EA"""
        return self.material.elastic_modulus * self.area

    def local_stiffness_matrix(self, element_length: float) -> np.ndarray:
        """
        Local stiffness matrix of an axial bar in element coordinates.
        DOF order: [u_i, v_i, u_j, v_j] (u along the bar, v transverse)

        Only the axial terms are non-zero: a pin-jointed bar has no
        transverse stiffness.
        """
        if not element_length > 0.0:
            raise ValueError(f"Element length must be positive, got {element_length}")

        k = self.axial_rigidity / element_length

        return np.array([
            [  k, 0.0,  -k, 0.0],
            [0.0, 0.0, 0.0, 0.0],
            [ -k, 0.0,   k, 0.0],
            [0.0, 0.0, 0.0, 0.0],
        ], dtype=float)


@dataclass(frozen=True)
class Node:
    """
    A truss joint. ``id`` is its position in the model's node list and
    fixes its global DOFs: [2*id, 2*id + 1].
    """
    id: int
    x: float
    y: float

    def xy(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=float)

    def __sub__(self, other: "Node"):
        """``end - start`` builds a section-less AxialBar from ``start`` to ``end``."""
        if not isinstance(other, Node):
            return NotImplemented
        from .elements import AxialBar
        return AxialBar(other, self)
