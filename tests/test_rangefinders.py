import warnings

import numpy as np
import pytest
from scipy.sparse import csr_matrix, random as sparse_random
from scipy.sparse.linalg import aslinearoperator

from randlinalg.algos import ConvergenceWarning, rrange, rrange_adaptive, rrange_f, rrange_si
from randlinalg.matrix_generators import MatrixGenerator

from conftest import assert_orthonormal_columns


def _residual(A, Q):
    return np.linalg.norm(A - Q @ (Q.conj().T @ A), ord=2)


class TestRrange:
    def test_orthonormal_basis(self, rng):
        A = rng.standard_normal((40, 30))
        Q = rrange(A, 8, rng=rng)
        assert Q.shape == (40, 8)
        assert_orthonormal_columns(Q)

    def test_captures_exact_low_rank(self, lowrank_matrix):
        Q = rrange(lowrank_matrix, 10, rng=0)
        assert _residual(lowrank_matrix, Q) < 1e-10 * np.linalg.norm(lowrank_matrix, ord=2)

    def test_too_many_vectors(self, rng):
        A = rng.standard_normal((5, 8))
        with pytest.raises(ValueError, match="linearly independent"):
            rrange(A, 6)

    def test_complex_input(self, rng):
        A = rng.standard_normal((20, 15)) + 1j * rng.standard_normal((20, 15))
        Q = rrange(A, 4, rng=rng)
        assert np.iscomplexobj(Q)
        assert_orthonormal_columns(Q)

    def test_sparse_and_operator_input(self):
        S = sparse_random(30, 25, density=0.2, random_state=0, format="csr")
        for A in (S, aslinearoperator(S)):
            Q = rrange(A, 5, rng=1)
            assert Q.shape == (30, 5)
            assert_orthonormal_columns(Q)

    def test_oversampling_adds_columns(self, rng):
        A = rng.standard_normal((30, 20))
        np.testing.assert_array_equal(rrange(A, 4, p=3, rng=7), rrange(A, 7, rng=7))
        with pytest.raises(ValueError):
            rrange(A, 4, p=-1)
        with pytest.raises(ValueError, match="linearly independent"):
            rrange(A, 25, p=6)


class TestRrangeSI:
    def test_no_iterations_matches_rrange(self, rng):
        A = rng.standard_normal((30, 20))
        np.testing.assert_array_equal(rrange_si(A, 4, q=0, p=3, rng=7), rrange(A, 7, rng=7))

    def test_iterations_improve_slow_decay(self):
        A = MatrixGenerator.decaying_spectrum(120, 80, decay=0.97, seed=1)
        k, p = 10, 5
        plain = _residual(A, rrange_si(A, k, q=0, p=p, rng=2))
        refined = _residual(A, rrange_si(A, k, q=3, p=p, rng=2))
        assert refined < plain
        # sigma_{k+p+1} is a lower bound for any (k+p)-dimensional basis
        assert refined >= 0.97 ** (k + p) * (1 - 1e-8)

    def test_output_size_and_adjoint(self, rng):
        A = rng.standard_normal((25, 18))
        Q = rrange_si(A, 5, At=A.T, q=2, p=2, rng=rng)
        assert Q.shape == (25, 7)
        assert_orthonormal_columns(Q)

    def test_rejects_negative_parameters(self, rng):
        A = rng.standard_normal((10, 10))
        with pytest.raises(ValueError):
            rrange_si(A, 3, q=-1)
        with pytest.raises(ValueError):
            rrange_si(A, 3, p=-2)


class TestRrangeF:
    def test_real_basis_for_real_input(self, rng):
        A = rng.standard_normal((50, 40))
        Q = rrange_f(A, 6, p=4, rng=rng)
        assert Q.shape == (50, 10)
        assert not np.iscomplexobj(Q)
        assert_orthonormal_columns(Q)

    def test_captures_exact_low_rank(self, lowrank_matrix):
        Q = rrange_f(lowrank_matrix, 10, p=5, rng=3)
        assert _residual(lowrank_matrix, Q) < 1e-10 * np.linalg.norm(lowrank_matrix, ord=2)

    def test_complex_input(self, rng):
        A = rng.standard_normal((20, 16)) + 1j * rng.standard_normal((20, 16))
        Q = rrange_f(A, 5, rng=rng)
        assert_orthonormal_columns(Q)

    def test_operator_and_sparse_input(self, lowrank_matrix):
        for A in (aslinearoperator(lowrank_matrix), csr_matrix(lowrank_matrix)):
            Q = rrange_f(A, 10, p=2, rng=1)
            assert Q.shape == (80, 12)
            assert_orthonormal_columns(Q)
            assert _residual(lowrank_matrix, Q) < 1e-10 * np.linalg.norm(lowrank_matrix, ord=2)


class TestRrangeAdaptive:
    def test_stops_at_numerical_rank(self):
        A = MatrixGenerator.lowrank_with_noise(50, 40, 5, 0.0, seed=4)
        with warnings.catch_warnings():
            warnings.simplefilter("error", ConvergenceWarning)
            Q = rrange_adaptive(A, 10, tol=1e-8, maxiter=30, rng=5)
        assert Q.shape == (50, 5)
        assert_orthonormal_columns(Q)
        assert _residual(A, Q) < 1e-8

    def test_warns_when_iterations_run_out(self, rng):
        A = rng.standard_normal((30, 30))
        with pytest.warns(ConvergenceWarning, match="Maximum number of iterations"):
            Q = rrange_adaptive(A, 5, tol=1e-8, maxiter=3, rng=rng)
        assert Q.shape == (30, 3)
        assert_orthonormal_columns(Q)

    def test_iterations_capped_by_row_count(self, rng):
        A = rng.standard_normal((6, 20))
        with pytest.warns(ConvergenceWarning):
            Q = rrange_adaptive(A, 3, tol=1e-300, maxiter=50, rng=rng)
        assert Q.shape[1] <= 6
        assert_orthonormal_columns(Q)

    def test_rejects_bad_arguments(self, rng):
        A = rng.standard_normal((8, 8))
        with pytest.raises(ValueError):
            rrange_adaptive(A, 0)
        with pytest.raises(ValueError):
            rrange_adaptive(A, 3, maxiter=0)
