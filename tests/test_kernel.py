"""
Tests for the element-agnostic kernel: DOF indexing, assembly, solve.
"""

import numpy as np
import pytest

from mini_truss.kernel import (
    DOFManager, DOF_2D_TRUSS,
    assemble_global_K, add_nodal_load,
    solve_linear, partition_dofs, reduce_system, solve_reduced, SingularSystemError,
)
from mini_truss.loads import nodal_load_vector, scatter_free_loads


class TestDOFManager:

    def test_two_dofs_per_node(self):
        dof = DOFManager(dof_per_node=2)
        assert dof.idx(0, 0) == 0
        assert dof.idx(0, 1) == 1
        assert dof.idx(3, 0) == 6
        assert dof.idx(3, 1) == 7
        assert dof.ndof(5) == 10

    def test_node_dofs_and_inverse(self):
        assert DOF_2D_TRUSS.node_dofs(2) == [4, 5]
        assert DOF_2D_TRUSS.node_of(4) == 2
        assert DOF_2D_TRUSS.node_of(5) == 2

    def test_element_dof_map(self):
        assert DOF_2D_TRUSS.element_dof_map([0, 1]) == [0, 1, 2, 3]
        assert DOF_2D_TRUSS.element_dof_map([2, 4]) == [4, 5, 8, 9]
        assert DOF_2D_TRUSS.element_dof_map([4, 2]) == [8, 9, 4, 5]

    def test_local_dof_out_of_range(self):
        with pytest.raises(ValueError):
            DOF_2D_TRUSS.idx(0, 2)


class TestAssembly:

    def test_scatter_add(self):
        ke = np.arange(16, dtype=float).reshape(4, 4)
        K = assemble_global_K(6, [([0, 1, 4, 5], ke), ([0, 1, 4, 5], ke)])

        np.testing.assert_array_equal(K[np.ix_([0, 1, 4, 5], [0, 1, 4, 5])], 2 * ke)
        np.testing.assert_array_equal(K[2:4, :], 0.0)
        np.testing.assert_array_equal(K[:, 2:4], 0.0)

    def test_shape_mismatch(self):
        with pytest.raises(ValueError, match="doesn't match"):
            assemble_global_K(6, [([0, 1, 2], np.eye(4))])

    def test_dof_out_of_range(self):
        with pytest.raises(ValueError, match="outside"):
            assemble_global_K(4, [([2, 3, 4, 5], np.eye(4))])

    def test_add_nodal_load(self):
        F = np.zeros(6)
        add_nodal_load(F, node_id=1, load_vector=[1000.0, -500.0], dof_per_node=2)
        add_nodal_load(F, node_id=1, load_vector=[1.0, 0.0], dof_per_node=2)
        np.testing.assert_array_equal(F, [0, 0, 1001.0, -500.0, 0, 0])

    def test_add_nodal_load_wrong_size(self):
        with pytest.raises(ValueError):
            add_nodal_load(np.zeros(6), 1, [1.0, 2.0, 3.0], dof_per_node=2)


class TestSolveLinear:

    def spring_chain(self, k=100.0):
        """Two springs in series between DOFs 0-1-2."""
        return np.array([
            [ k,   -k,  0.0],
            [-k, 2 * k,  -k],
            [0.0,  -k,   k],
        ])

    def test_partition(self):
        free, fixed = partition_dofs(5, [3, 0, 3])
        assert free.tolist() == [1, 2, 4]
        assert fixed.tolist() == [0, 3]

    def test_fixed_end_load(self):
        K = self.spring_chain()
        F = np.array([0.0, 0.0, 10.0])
        d, R, free = solve_linear(K, F, [0])

        np.testing.assert_allclose(d, [0.0, 0.1, 0.2])
        np.testing.assert_allclose(R, [-10.0, 0.0, 0.0], atol=1e-12)
        assert free.tolist() == [1, 2]

    def test_prescribed_displacement(self):
        K = self.spring_chain()
        d, R, _ = solve_linear(K, np.zeros(3), [0, 2], prescribed=[0.0, 1.0])

        np.testing.assert_allclose(d, [0.0, 0.5, 1.0])
        np.testing.assert_allclose(R, [-50.0, 0.0, 50.0], atol=1e-12)

    def test_prescribed_length_mismatch(self):
        with pytest.raises(ValueError):
            solve_linear(self.spring_chain(), np.zeros(3), [0, 2], prescribed=[0.0])

    def test_all_fixed(self):
        K = self.spring_chain()
        d, R, free = solve_linear(K, np.zeros(3), [0, 1, 2], prescribed=[0.0, 0.0, 2.0])
        np.testing.assert_array_equal(d, [0.0, 0.0, 2.0])
        np.testing.assert_allclose(R, [0.0, -200.0, 200.0])
        assert free.size == 0

    def test_unsupported_chain_is_singular(self):
        with pytest.raises(SingularSystemError) as excinfo:
            solve_linear(self.spring_chain(), np.array([0.0, 0.0, 1.0]), [])
        assert excinfo.value.free_dofs == [0, 1, 2]
        assert isinstance(excinfo.value, RuntimeError)

    def test_ill_conditioned_rejected(self):
        K = np.diag([1.0, 1e-14])
        with pytest.raises(SingularSystemError) as excinfo:
            solve_linear(K, np.ones(2), [], cond_limit=1e12)
        assert excinfo.value.cond > 1e12


class TestLoadHelpers:

    def test_nodal_load_vector(self):
        F = nodal_load_vector(3, {1: (0.0, -1000.0), 2: (250.0, 0.0)})
        np.testing.assert_array_equal(F, [0, 0, 0, -1000.0, 250.0, 0])

    def test_nodal_load_on_missing_node(self):
        with pytest.raises(ValueError):
            nodal_load_vector(2, {2: (1.0, 0.0)})

    def test_scatter_free_loads(self):
        F = scatter_free_loads([10.0, -5.0], fixed_dofs=[0, 1], ndof=4)
        np.testing.assert_array_equal(F, [0.0, 0.0, 10.0, -5.0])

    def test_scatter_free_loads_count_mismatch(self):
        with pytest.raises(ValueError, match="free DOFs"):
            scatter_free_loads([1.0, 2.0, 3.0], fixed_dofs=[0, 1], ndof=4)


class TestReducedSystem:

    def test_reduce_moves_prescribed_to_rhs(self):
        K = np.array([
            [100.0, -100.0,    0.0],
            [-100.0, 200.0, -100.0],
            [0.0,   -100.0,  100.0],
        ])
        free, fixed = partition_dofs(3, [0, 2])
        Kff, Ff = reduce_system(K, np.array([0.0, 5.0, 0.0]), free, fixed, [0.0, 1.0])

        np.testing.assert_array_equal(Kff, [[200.0]])
        np.testing.assert_allclose(Ff, [105.0])
        np.testing.assert_allclose(solve_reduced(Kff, Ff, free), [0.525])

    def test_solve_reduced_names_free_dofs(self):
        with pytest.raises(SingularSystemError, match=r"\[3, 7\]") as excinfo:
            solve_reduced(np.zeros((2, 2)), np.ones(2), np.array([3, 7]))
        assert excinfo.value.free_dofs == [3, 7]

    def test_solve_reduced_empty(self):
        result = solve_reduced(np.zeros((0, 0)), np.zeros(0), np.array([], dtype=int))
        assert result.shape == (0,)
