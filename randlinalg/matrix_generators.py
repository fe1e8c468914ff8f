"""Matrix generators for testing low-rank approximation algorithms.

This module provides seeded test matrices with controlled spectra for
benchmarking: Gaussian random matrices, low-rank matrices with noise,
matrices with a prescribed geometric singular value decay, and positive
semidefinite Gram matrices.
"""

from typing import Dict

import numpy as np


class MatrixGenerator:
    """Generate test matrices with controlled properties."""

    @staticmethod
    def random_matrix(m: int, n: int, seed: int = 42) -> np.ndarray:
        """
        Generate random matrix for testing.

        Creates a matrix with entries from standard normal distribution.

        Args:
            m: number of rows
            n: number of columns
            seed: random seed for reproducibility

        Returns:
            A: (m x n) matrix with entries from N(0,1)
        """
        return np.random.default_rng(seed).standard_normal((m, n))

    @staticmethod
    def lowrank_with_noise(
        m: int,
        n: int,
        true_rank: int,
        noise_level: float,
        seed: int = 42
    ) -> np.ndarray:
        """
        Generate low-rank matrix with additive Gaussian noise.

        Creates matrix: A = U @ V + noise
        where U is (m x true_rank), V is (true_rank x n)

        The factors are scaled by 1/sqrt(true_rank) so that the expected
        Frobenius norm of U @ V is about sqrt(m * n), which makes noise_level
        directly comparable to the signal entries.

        Args:
            m: number of rows
            n: number of columns
            true_rank: true rank of underlying signal
            noise_level: standard deviation of additive noise
                        (0.0 = no noise, 0.1 = light noise, 1.0 = heavy noise)
            seed: random seed for reproducibility

        Returns:
            A: (m x n) matrix = low-rank + noise

        Raises:
            ValueError: if true_rank >= min(m, n)
            ValueError: if noise_level < 0
        """
        if true_rank < 1:
            raise ValueError(f"true_rank must be at least 1, got {true_rank}")
        if true_rank >= min(m, n):
            raise ValueError(
                f"true_rank ({true_rank}) must be less than min(m, n) = {min(m, n)}"
            )
        if noise_level < 0:
            raise ValueError(f"noise_level must be non-negative, got {noise_level}")

        rng = np.random.default_rng(seed)
        scale = 1.0 / np.sqrt(true_rank)
        U = rng.standard_normal((m, true_rank)) * scale
        V = rng.standard_normal((true_rank, n)) * scale
        A = U @ V

        if noise_level > 0:
            A = A + rng.standard_normal((m, n)) * noise_level

        return A

    @staticmethod
    def decaying_spectrum(
        m: int,
        n: int,
        decay: float = 0.5,
        seed: int = 42
    ) -> np.ndarray:
        """
        Generate matrix with singular values ``decay**i``, i = 0, 1, ...

        Random orthonormal singular vectors come from QR factorizations of
        Gaussian matrices.

        Args:
            m: number of rows
            n: number of columns
            decay: ratio between consecutive singular values, in (0, 1]
            seed: random seed for reproducibility

        Returns:
            A: (m x n) matrix with known singular values
        """
        if not 0 < decay <= 1:
            raise ValueError(f"decay must be in (0, 1], got {decay}")
        rng = np.random.default_rng(seed)
        r = min(m, n)
        U, _ = np.linalg.qr(rng.standard_normal((m, r)))
        V, _ = np.linalg.qr(rng.standard_normal((n, r)))
        S = decay ** np.arange(r)
        return (U * S[np.newaxis, :]) @ V.T

    @staticmethod
    def psd_matrix(n: int, seed: int = 42) -> np.ndarray:
        """
        Generate symmetric positive (semi)definite matrix ``B @ B.T``.

        B is an (n x n) Gaussian matrix, so the result is positive definite
        with probability one, though possibly ill-conditioned.
        """
        B = np.random.default_rng(seed).standard_normal((n, n))
        return B @ B.T

    @staticmethod
    def get_matrix_info(A: np.ndarray) -> Dict:
        """
        Get information about a matrix for logging.

        Args:
            A: input matrix

        Returns:
            Dictionary with matrix properties:
                - shape: tuple of matrix dimensions
                - dtype: numpy data type
                - min: minimum value
                - max: maximum value
                - mean: mean value
                - std: standard deviation
                - estimated_rank: numerical rank (using default tolerance)
        """
        return {
            'shape': A.shape,
            'dtype': A.dtype,
            'min': np.min(A),
            'max': np.max(A),
            'mean': np.mean(A),
            'std': np.std(A),
            'estimated_rank': np.linalg.matrix_rank(A),
        }
