"""
Shared Test Fixtures
====================

Seeded random streams and test matrices with known spectra.
"""

import matplotlib

matplotlib.use("Agg")

import numpy as np  # noqa: E402
import pytest  # noqa: E402

from randlinalg.matrix_generators import MatrixGenerator  # noqa: E402


def assert_orthonormal_columns(Q, atol=1e-10):
    """||Q^H Q - I|| is at rounding level."""
    gram = Q.conj().T @ Q
    np.testing.assert_allclose(gram, np.eye(Q.shape[1]), atol=atol)


@pytest.fixture
def rng():
    """Fresh seeded generator for each test."""
    return np.random.default_rng(1234321)


@pytest.fixture
def lowrank_matrix():
    """80 x 60 matrix of exact rank 10."""
    return MatrixGenerator.lowrank_with_noise(80, 60, 10, 0.0, seed=7)


@pytest.fixture
def noisy_lowrank_matrix():
    """100 x 60 rank-10 signal plus noise of standard deviation 0.01."""
    return MatrixGenerator.lowrank_with_noise(100, 60, 10, 0.01, seed=11)


@pytest.fixture
def psd_lowrank():
    """50 x 50 symmetric positive semidefinite matrix of exact rank 5."""
    G = np.random.default_rng(3).standard_normal((50, 5))
    return G @ G.T
