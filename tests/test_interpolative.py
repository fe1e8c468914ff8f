import numpy as np
import pytest

from randlinalg.algos import idfact, row_id
from randlinalg.matrix_generators import MatrixGenerator


def _dominant_three_columns(seed):
    """4 x 5 matrix: three large orthogonal columns, two small ones, shuffled."""
    gen = np.random.default_rng(seed)
    Q, _ = np.linalg.qr(gen.standard_normal((4, 4)))
    M = np.hstack([10 * Q[:, :3], 0.1 * gen.standard_normal((4, 2))])
    return M[:, [3, 0, 4, 1, 2]]


@pytest.mark.parametrize("seed", range(5))
def test_dominant_columns_are_selected(seed):
    M = _dominant_three_columns(seed)
    k = 3
    F = idfact(M, k, k + 3, rng=seed)
    sigma = np.linalg.svd(M, compute_uv=False)
    err = np.linalg.norm(F.B @ F.P - M, ord=2)
    assert err <= 2 * sigma[k]
    np.testing.assert_array_equal(F.J, [1, 3, 4])


@pytest.mark.statistical
def test_gaussian_4x5_error_within_twice_optimal():
    gen = np.random.default_rng(2024)
    k, trials = 3, 200
    hits = 0
    for _ in range(trials):
        M = gen.standard_normal((4, 5))
        F = idfact(M, k, k + 3, rng=gen)
        sigma = np.linalg.svd(M, compute_uv=False)
        hits += np.linalg.norm(F.B @ F.P - M, ord=2) <= 2 * sigma[k]
    assert hits / trials >= 0.85


def test_factor_structure(rng):
    A = rng.standard_normal((30, 20))
    F = idfact(A, 6, 10, rng=rng)
    assert F.B.shape == (30, 6)
    assert F.P.shape == (6, 20)
    assert np.all(np.diff(F.J) > 0)
    np.testing.assert_array_equal(F.B, A[:, F.J])
    np.testing.assert_allclose(F.P[:, F.J], np.eye(6), atol=1e-10)


def test_exact_low_rank_is_reproduced(lowrank_matrix):
    F = idfact(lowrank_matrix, 10, 15, rng=0)
    np.testing.assert_allclose(
        F.B @ F.P, lowrank_matrix, atol=1e-8 * np.linalg.norm(lowrank_matrix)
    )


def test_decaying_spectrum_error_bound():
    A = MatrixGenerator.decaying_spectrum(60, 40, decay=0.5, seed=2)
    k = 8
    F = idfact(A, k, k + 10, rng=3)
    err = np.linalg.norm(F.B @ F.P - A, ord=2)
    # sqrt(1 + k (n - k)) sigma_{k+1} bounds the best column selection
    assert err <= np.sqrt(1 + k * (40 - k)) * 0.5 ** k


def test_complex_input(rng):
    A = rng.standard_normal((12, 9)) + 1j * rng.standard_normal((12, 9))
    F = idfact(A, 9, 9, rng=rng)
    np.testing.assert_allclose(F.B @ F.P, A, atol=1e-10)


@pytest.mark.parametrize("k, l", [(0, 3), (6, 8), (3, 2)])
def test_invalid_arguments(k, l):
    A = np.ones((5, 7))
    with pytest.raises(ValueError):
        idfact(A, k, l)


def test_row_id_reproduces_basis(rng):
    Q, _ = np.linalg.qr(rng.standard_normal((30, 5)))
    X, J = row_id(Q, rng=rng)
    assert X.shape == (30, 5)
    assert len(J) == 5
    np.testing.assert_allclose(X @ Q[J, :], Q, atol=1e-10)
