# mini_truss/kernel/solve.py
"""Linear system solver with prescribed displacements and singularity detection."""

import logging

import numpy as np
from typing import Optional, Sequence

_logger = logging.getLogger(__name__)


class SingularSystemError(RuntimeError):
    """Raised when the reduced stiffness matrix cannot be inverted.

    The structure is a mechanism or is under-constrained. ``free_dofs`` holds
    the DOFs that were left free so the missing support can be found.
    """

    def __init__(self, message: str, free_dofs=None, cond: float = float("inf")):
        super().__init__(message)
        self.free_dofs = [] if free_dofs is None else [int(i) for i in free_dofs]
        self.cond = cond


def partition_dofs(ndof: int, fixed_dofs: Sequence[int]) -> tuple[np.ndarray, np.ndarray]:
    """
    Split range(ndof) into sorted free and fixed index arrays.

    Returns:
        free: DOFs solved for
        fixed: DOFs with a prescribed displacement
    """
    fixed_set = set(int(i) for i in fixed_dofs)
    fixed = np.array(sorted(fixed_set), dtype=int)
    free = np.array([i for i in range(ndof) if i not in fixed_set], dtype=int)
    return free, fixed


def reduce_system(
    K: np.ndarray,
    F: np.ndarray,
    free: np.ndarray,
    fixed: np.ndarray,
    d_fixed
) -> tuple[np.ndarray, np.ndarray]:
    """
    Partition K·d = F and move the known displacements to the right-hand side.

    Returns:
        Kff: Stiffness between free DOFs
        Ff: F_f - K_fc · d_c
    """
    Kff = K[np.ix_(free, free)]
    Kfc = K[np.ix_(free, fixed)]
    Ff = F[free] - Kfc @ np.asarray(d_fixed, dtype=float)
    return Kff, Ff


def solve_reduced(
    Kff: np.ndarray,
    Ff: np.ndarray,
    free: np.ndarray,
    cond_limit: float = 1e12
) -> np.ndarray:
    """
    Solve Kff · d_f = Ff for the free-DOF displacements.

    Raises:
        SingularSystemError: If Kff is singular or too ill-conditioned to trust.
            ``free`` is only used to name the free DOFs in the error.
    """
    if Kff.size == 0:
        _logger.debug("All DOFs prescribed, nothing to solve")
        return np.zeros(0, dtype=float)

    cond = np.linalg.cond(Kff)
    _logger.debug("Reduced system: %d free DOFs, cond=%.3e", len(free), cond)
    if not np.isfinite(cond) or cond > cond_limit:
        raise SingularSystemError(
            f"Singular system (cond={cond:.2e}): structure is a mechanism or "
            f"under-constrained. Free DOFs: {list(map(int, free))}",
            free_dofs=free,
            cond=cond,
        )

    try:
        return np.linalg.solve(Kff, Ff)
    except np.linalg.LinAlgError as exc:
        raise SingularSystemError(
            f"Singular system: {exc}. Free DOFs: {list(map(int, free))}",
            free_dofs=free,
            cond=cond,
        ) from exc


def solve_linear(
    K: np.ndarray,
    F: np.ndarray,
    fixed_dofs: Sequence[int],
    prescribed: Optional[Sequence[float]] = None,
    cond_limit: float = 1e12
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Solve K·d = F with boundary conditions enforced by partitioning.

        K_ff · d_f = F_f - K_fc · d_c

    Args:
        K: Global stiffness matrix (ndof x ndof)
        F: Global load vector (ndof,)
        fixed_dofs: Constrained DOF indices
        prescribed: Displacement of each entry of fixed_dofs (same order).
            Defaults to zero for every constrained DOF.
        cond_limit: Max condition number of K_ff before raising SingularSystemError

    Returns:
        d: Displacement vector (ndof,)
        R: Reaction vector (ndof,), ~0 at free DOFs
        free: Array of free DOF indices

    Raises:
        SingularSystemError: If K_ff is singular or too ill-conditioned to trust
    """
    ndof = K.shape[0]
    fixed_dofs = [int(i) for i in fixed_dofs]
    if prescribed is None:
        prescribed = [0.0] * len(fixed_dofs)
    if len(prescribed) != len(fixed_dofs):
        raise ValueError(
            f"Got {len(prescribed)} prescribed values for {len(fixed_dofs)} fixed DOFs"
        )

    free, fixed = partition_dofs(ndof, fixed_dofs)

    # Known displacements at the constrained DOFs
    d = np.zeros(ndof, dtype=float)
    for dof, value in zip(fixed_dofs, prescribed):
        d[dof] = value

    Kff, Ff = reduce_system(K, F, free, fixed, d[fixed])
    d[free] = solve_reduced(Kff, Ff, free, cond_limit)

    # Reactions at all DOFs: R = K·d - F
    R = K @ d - F

    return d, R, free
