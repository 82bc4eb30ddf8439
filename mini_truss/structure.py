# Model: validation, element assembly, global K, boundary conditions, solve, post-processing

import logging
from numbers import Integral, Real
from typing import Optional, Sequence

import numpy as np

from .config import CONFIG, SolverConfig
from .model import Node, Section, MalformedModelError
from .elements import AxialBar, MissingSectionError
from .kernel.dof import DOF_2D_TRUSS
from .kernel.assemble import assemble_global_K
from .kernel.solve import partition_dofs, reduce_system, solve_reduced
from .post import OutputData

_logger = logging.getLogger(__name__)


def _is_index(value) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool)


class Model:
    """
    Planar truss: the aggregate root of one static analysis.

    Parameters:
    -----------
    nodes : Sequence[Node]
        Joints; nodes[i].id must equal i (dense, zero-based numbering)
    connectivity : Sequence[tuple[int, int]]
        One (start_node, end_node) pair per bar
    section_assignments : Sequence[Optional[Section]]
        Parallel to connectivity. A None entry builds, but solve() then
        raises MissingSectionError.
    boundary_conditions : Sequence
        Constrained global DOFs, each either a bare DOF index (prescribed
        displacement 0) or a (dof, value) pair. Omitted DOFs are free.
    loads : array-like, optional
        Global load vector of length 2N; defaults to all zeros.
    config : SolverConfig
        Solver settings, defaults to the module-level CONFIG.

    Example:
    --------
    >>> steel = Material(elastic_modulus=210e3)
    >>> nodes = [Node(0, 0.0, 0.0), Node(1, 1000.0, 0.0)]
    >>> model = Model(nodes, [(0, 1)], [Section(100.0, steel)],
    ...               boundary_conditions=[0, 1, 3],
    ...               loads=[0.0, 0.0, 1000.0, 0.0])
    >>> out = model.solve()
    """

    def __init__(
        self,
        nodes: Sequence[Node],
        connectivity: Sequence[Sequence[int]],
        section_assignments: Sequence[Optional[Section]],
        boundary_conditions: Sequence = (),
        loads=None,
        config: SolverConfig = CONFIG,
    ):
        self.config = config
        self.dof = DOF_2D_TRUSS

        self.nodes = list(nodes)
        self.connectivity = list(connectivity)
        self.section_assignments = list(section_assignments)

        self._validate_nodes()
        self._validate_connectivity()
        self._fixed_dofs, self._prescribed = self._normalize_boundary_conditions(boundary_conditions)
        self.loads = self._validate_loads(loads)

        # Built eagerly so degenerate bars fail at construction
        self.elements = self.assemble_elements()

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _validate_nodes(self):
        for position, node in enumerate(self.nodes):
            if not isinstance(node, Node):
                raise MalformedModelError(f"nodes[{position}] is not a Node: {node!r}")
            if not _is_index(node.id):
                raise MalformedModelError(
                    f"Node id must be an integer: nodes[{position}].id == {node.id!r}"
                )
            if node.id != position:
                raise MalformedModelError(
                    f"Node ids must be dense and zero-based: nodes[{position}].id == {node.id}"
                )
            if not (np.isfinite(node.x) and np.isfinite(node.y)):
                raise MalformedModelError(f"Node {node.id} has non-finite coordinates")

    def _validate_connectivity(self):
        n = self.n_nodes
        if len(self.connectivity) != len(self.section_assignments):
            raise MalformedModelError(
                f"{len(self.connectivity)} connectivity entries but "
                f"{len(self.section_assignments)} section assignments"
            )
        pairs = []
        for i, pair in enumerate(self.connectivity):
            try:
                pair = tuple(pair)
            except TypeError:
                raise MalformedModelError(f"Connectivity entry {i} is not a node pair: {pair!r}") from None
            if len(pair) != 2 or not all(_is_index(a) for a in pair):
                raise MalformedModelError(f"Connectivity entry {i} is not a node pair: {pair!r}")
            a, b = int(pair[0]), int(pair[1])
            if not (0 <= a < n and 0 <= b < n):
                raise MalformedModelError(
                    f"Connectivity entry {i} references node outside [0, {n}): {pair!r}"
                )
            if a == b:
                raise MalformedModelError(f"Connectivity entry {i} connects node {a} to itself")
            pairs.append((a, b))
        self.connectivity = pairs

        for i, section in enumerate(self.section_assignments):
            if section is not None and not isinstance(section, Section):
                raise MalformedModelError(f"section_assignments[{i}] is not a Section: {section!r}")

    def _normalize_boundary_conditions(self, boundary_conditions):
        ndof = self.ndof
        prescribed = {}
        for entry in boundary_conditions:
            if _is_index(entry):
                dof, value = entry, 0.0
            else:
                try:
                    dof, value = entry
                except (TypeError, ValueError):
                    raise MalformedModelError(
                        f"Boundary condition must be a DOF or (dof, value) pair, got {entry!r}"
                    ) from None
            if not _is_index(dof) or not 0 <= dof < ndof:
                raise MalformedModelError(
                    f"Boundary condition DOF {dof} outside [0, {ndof})"
                )
            if not isinstance(value, Real) or not np.isfinite(value):
                raise MalformedModelError(
                    f"Prescribed displacement at DOF {dof} must be a finite number, got {value!r}"
                )
            dof, value = int(dof), float(value)
            if dof in prescribed and prescribed[dof] != value:
                raise MalformedModelError(
                    f"DOF {dof} prescribed twice with different values "
                    f"({prescribed[dof]} and {value})"
                )
            prescribed[dof] = value

        fixed = sorted(prescribed)
        return fixed, [prescribed[dof] for dof in fixed]

    def _validate_loads(self, loads) -> np.ndarray:
        if loads is None:
            loads = np.zeros(self.ndof, dtype=float)
        try:
            F = np.array(loads, dtype=float)
        except (TypeError, ValueError) as exc:
            raise MalformedModelError(f"Loads are not numeric: {exc}") from exc
        if F.shape != (self.ndof,):
            raise MalformedModelError(
                f"Load vector must have length {self.ndof} (2 x {self.n_nodes} nodes), "
                f"got shape {F.shape}"
            )
        if not np.all(np.isfinite(F)):
            raise MalformedModelError("Load vector contains non-finite values")
        F.setflags(write=False)
        return F

    # ------------------------------------------------------------------
    # Sizes and boundary conditions
    # ------------------------------------------------------------------

    @property
    def n_nodes(self) -> int:
        return len(self.nodes)

    @property
    def ndof(self) -> int:
        return self.dof.ndof(self.n_nodes)

    @property
    def n_elements(self) -> int:
        return len(self.connectivity)

    @property
    def fixed_dofs(self) -> list[int]:
        return list(self._fixed_dofs)

    @property
    def prescribed_displacements(self) -> list[float]:
        return list(self._prescribed)

    @property
    def free_dofs(self) -> list[int]:
        free, _ = partition_dofs(self.ndof, self._fixed_dofs)
        return free.tolist()

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def assemble_elements(self) -> list[AxialBar]:
        """One AxialBar per connectivity entry, in connectivity order."""
        return [
            AxialBar(
                self.nodes[a],
                self.nodes[b],
                self.section_assignments[i],
                min_length=self.config.min_length,
            )
            for i, (a, b) in enumerate(self.connectivity)
        ]

    def assemble_global_stiffness_matrix(self, elements: Sequence[AxialBar]) -> np.ndarray:
        """
        Scatter-add every bar's 4x4 global stiffness into the 2N x 2N matrix.
        """
        contributions = []
        for i, bar in enumerate(elements):
            if bar.section is None:
                raise MissingSectionError(
                    f"Element {i} (nodes {bar.ni}->{bar.nj}) has no section assigned"
                )
            contributions.append((bar.dof_map(self.dof), bar.global_stiffness_matrix()))
        return assemble_global_K(self.ndof, contributions)

    # ------------------------------------------------------------------
    # Boundary conditions and solve
    # ------------------------------------------------------------------

    def apply_boundary_conditions(self, K: np.ndarray):
        """
        Reduce K and F to the free DOFs.

        Returns:
        --------
        K_ff : reduced stiffness matrix
        F_eff : F_f - K_fc · U_c (loads on the free DOFs, corrected for
            prescribed support displacements)
        free, fixed : index arrays
        """
        free, fixed = partition_dofs(self.ndof, self._fixed_dofs)
        K_ff, F_eff = reduce_system(K, self.loads, free, fixed, self._prescribed)
        return K_ff, F_eff, free, fixed

    def solve_displacements(self, K: np.ndarray) -> np.ndarray:
        """Full displacement vector; raises SingularSystemError for a mechanism."""
        K_ff, F_eff, free, fixed = self.apply_boundary_conditions(K)

        d = np.zeros(self.ndof, dtype=float)
        d[fixed] = self._prescribed
        d[free] = solve_reduced(K_ff, F_eff, free, self.config.cond_limit)
        return d

    def calc_reaction_forces(self, K: np.ndarray, displacements: np.ndarray) -> np.ndarray:
        """R = K·d - F over all DOFs."""
        return K @ displacements - self.loads

    # ------------------------------------------------------------------
    # Post-processing
    # ------------------------------------------------------------------

    def calc_strains(self, elements: Sequence[AxialBar], displacements: np.ndarray) -> np.ndarray:
        strains = np.zeros(len(elements), dtype=float)
        for i, bar in enumerate(elements):
            d_start = displacements[self.dof.node_dofs(bar.ni)]
            d_end = displacements[self.dof.node_dofs(bar.nj)]
            strains[i] = bar.strain(d_start, d_end)
        return strains

    def calc_stresses(self, strains: np.ndarray) -> np.ndarray:
        """Hooke's law per element: stress = strain x E."""
        moduli = np.array(
            [section.material.elastic_modulus for section in self.section_assignments],
            dtype=float,
        )
        return strains * moduli

    def solve(self) -> OutputData:
        """
        Linear static analysis:
        elements -> K -> reduce and solve -> reactions -> strains -> stresses.

        Raises:
        -------
        MissingSectionError
            If any element has no section
        SingularSystemError
            If the supports leave a mechanism
        """
        elements = self.elements
        K = self.assemble_global_stiffness_matrix(elements)
        displacements = self.solve_displacements(K)
        reaction_forces = self.calc_reaction_forces(K, displacements)
        strains = self.calc_strains(elements, displacements)
        stresses = self.calc_stresses(strains)

        _logger.info(
            "Solved truss: %d nodes, %d bars, %d free DOFs, max |d| = %.4e",
            self.n_nodes, self.n_elements, self.ndof - len(self._fixed_dofs),
            float(np.max(np.abs(displacements))) if displacements.size else 0.0,
        )

        return OutputData(
            displacements=displacements,
            reaction_forces=reaction_forces,
            strains=strains,
            stresses=stresses,
        )
