"""Exact truncated SVD baseline and error measures.

The randomized algorithms are judged against the optimal rank-k
approximation given by the truncated SVD (Eckart-Young-Mirsky theorem).
"""

import numpy as np

from .algos import SVD


def numpy_svd_lowrank(A, rank):
    """
    Low-rank approximation using NumPy's SVD.

    Args:
        A: (m x n) numpy array - input matrix
        rank: int - desired rank for approximation

    Returns:
        SVD: (U, S, Vt) truncated to ``rank``

    Raises:
        ValueError: If rank is invalid (< 1 or > min(m, n))
    """
    m, n = A.shape

    if rank < 1:
        raise ValueError(f"Rank must be at least 1, got {rank}")
    if rank > min(m, n):
        raise ValueError(f"Rank must be at most min(m, n) = {min(m, n)}, got {rank}")

    U, S, Vt = np.linalg.svd(A, full_matrices=False)
    return SVD(U[:, :rank], S[:rank], Vt[:rank, :])


def reconstruction_error(A, factors, ord=2):
    """Norm of ``A - U diag(S) Vt`` for a factorization ``(U, S, Vt)``."""
    U, S, Vt = factors
    return np.linalg.norm(A - (U * S[np.newaxis, :]) @ Vt, ord=ord)


def optimal_error(A, rank, ord=2):
    """Error of the best rank-``rank`` approximation of A.

    The (rank+1)-th singular value in the spectral norm, the root of the sum
    of squares of the trailing singular values in the Frobenius norm.
    """
    S = np.linalg.svd(A, compute_uv=False)
    tail = S[rank:]
    if tail.size == 0:
        return 0.0
    if ord == 2:
        return float(tail[0])
    if ord == "fro":
        return float(np.sqrt(np.sum(tail ** 2)))
    raise ValueError(f"Unsupported norm: {ord!r}")
