# mini_truss - Planar truss analysis by the direct stiffness method
"""
MINI-TRUSS: Linear Static Analysis of Pin-Jointed Planar Trusses
================================================================

This package provides:
- Axial bar elements (2 nodes, 2 DOF/node: ux, uy)
- Global stiffness assembly, boundary-condition reduction and solve
- Reactions, strains and stresses per element

ARCHITECTURE:
-------------
    kernel/         Element-agnostic core (DOF management, assembly, solve)
    model.py        Value types (Material, Section, Node)
    elements.py     AxialBar geometry, rotations, stiffness, strain
    structure.py    Model: validation and the solve pipeline
    loads.py        Load vector helpers
    post.py         OutputData and result extraction
    config.py       Solver defaults

USAGE:
------
    from mini_truss import Material, Section, Node, Model

    aluminium = Material(elastic_modulus=70e3, poisson_ratio=0.3)
    nodes = [Node(0, 0.0, 0.0), Node(1, 500.0, 0.0)]
    model = Model(nodes, [(0, 1)], [Section(20.0, aluminium)],
                  boundary_conditions=[0, 1, 3],
                  loads=[0.0, 0.0, 1000.0, 0.0])
    out = model.solve()
"""

from .config import SolverConfig, CONFIG
from .model import Material, Section, Node, MalformedModelError
from .elements import AxialBar, MissingSectionError
from .structure import Model
from .post import OutputData
from .kernel import DOFManager, solve_linear, SingularSystemError

__version__ = "0.1.0"

__all__ = [
    'SolverConfig', 'CONFIG',
    'Material', 'Section', 'Node', 'MalformedModelError',
    'AxialBar', 'MissingSectionError',
    'Model', 'OutputData',
    'DOFManager', 'solve_linear', 'SingularSystemError',
]
