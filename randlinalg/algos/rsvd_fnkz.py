"""Randomized SVD by iterative refinement from randomly selected columns.

Implements the Monte-Carlo low-rank approximation of Friedland et al.: a
rank-k approximation ``X X^H A`` is grown by repeatedly merging a few
randomly sampled columns of A into the basis X and re-extracting the k
dominant directions, until the spectral norm estimate stops growing.

Reference:
    Friedland, Niknejad, Kaveh, Zare. "Fast Monte-Carlo low rank
    approximations for matrices." IEEE/SMC International Conference on
    System of Systems Engineering, 2006.
"""

import logging
import warnings

import numpy as np
from scipy.linalg import eigh, qr, svd

from .factorizations import SVD, ConvergenceWarning, RefinementMethod
from .linops import adjoint, result_dtype
from .sampling import as_generator, random_subset

logger = logging.getLogger(__name__)


def _columns(A, idx):
    cols = A[:, idx]
    return cols.toarray() if hasattr(cols, "toarray") else np.asarray(cols)


def _independent_columns(W, eps):
    """Orthonormal basis for W, dropping directions with ``|R_ii| <= eps``."""
    Q, R = qr(W, mode="economic")
    keep = np.abs(np.diag(R)) > eps
    return Q[:, keep]


def _refine_eig(A, X, k):
    # Eigenvectors of the Gram matrix of A^H X rotate X onto the dominant
    # directions (Eq. 2.6 of Friedland et al.).
    Y = adjoint(A) @ X
    values, O = eigh(Y.conj().T @ Y)
    order = np.argsort(values)[::-1][:k]
    order = order[values[order] > 0]
    left = X @ O[:, order]
    return left, adjoint(A) @ left, values[order]


def _refine_svd(A, X, k):
    Y = adjoint(A) @ X
    U, S, Vh = svd(Y, full_matrices=False)
    keep = np.flatnonzero(S[:k] > 0)
    left = X @ Vh.conj().T[:, keep]
    return left, U[:, keep] * S[keep], S[keep] ** 2


_REFINE = {
    RefinementMethod.EIG: _refine_eig,
    RefinementMethod.SVD: _refine_svd,
}


def rsvd_fnkz(A, k, l=None, N=None, method=RefinementMethod.EIG, eps=None, rng=None):
    """Randomized SVD by iterative refinement from randomly selected columns.

    Algorithm:
        1. Sample k columns of A, orthonormalize them and drop numerically
           dependent directions; this is the initial basis X
        2. Repeat up to N times:
            a. Sample l more columns and merge them into X via QR
            b. Drop directions with ``|R_ii| <= eps``
            c. Keep the (at most k) dominant directions of ``A^H X``
            d. Stop once the spectral norm estimate grows by less than a
               factor ``1 / (1 - eps)``
        3. Return ``X``, the square roots of the retained eigenvalues and the
           normalized right singular directions ``A^H X / sqrt(lambda)``

    Args:
        A: (m x n) matrix with ``m >= n``, must support column indexing
        k: desired rank of approximation (``k <= min(m, n)``)
        l: number of columns to sample at each iteration (``1 <= l <= k``,
           default: k)
        N: maximum number of iterations (default: min(m, n))
        method: ``RefinementMethod.EIG`` (eigenproblem of the Gram matrix,
            cheaper) or ``RefinementMethod.SVD`` (singular problem, more
            stable); the strings "eig" and "svd" are accepted too
        eps: convergence and rank threshold (default: ``m * n * eps``)
        rng: seed or ``numpy.random.Generator``

    Returns:
        SVD: ``(U, S, Vt)`` of rank at most k. U has orthonormal columns;
        Vt is only approximately orthonormal.

    Raises:
        ValueError: unless ``1 <= l <= k <= min(m, n)``
        NotImplementedError: for wide matrices (``m < n``); factorize
            ``A.conj().T`` instead and swap the factors

    Warns:
        ConvergenceWarning: if N iterations did not converge
    """
    m, n = A.shape
    method = RefinementMethod(method)
    if l is None:
        l = k
    if N is None:
        N = min(m, n)
    if not 1 <= l <= k <= min(m, n):
        raise ValueError(
            f"Need 1 <= l <= k <= min(m, n) = {min(m, n)}, got l={l}, k={k}"
        )
    if m < n:
        raise NotImplementedError(
            f"Row sampling for wide matrices ({m} x {n}) is not supported"
        )
    dtype = result_dtype(A)
    if eps is None:
        eps = m * n * np.finfo(dtype).eps
    gen = as_generator(rng)
    refine = _REFINE[method]

    # Workspace: current basis in the leading columns, new samples after it.
    work = np.empty((m, k + l), dtype=dtype)
    work[:, :k] = _columns(A, random_subset(n, k, gen))
    X = _independent_columns(work[:, :k], eps)
    state = refine(A, X, k) if X.shape[1] else None
    if state is None or len(state[2]) == 0:
        logger.debug("rsvd_fnkz: sampled columns are numerically zero")
        return SVD(np.zeros((m, 0), dtype=dtype), np.zeros(0), np.zeros((0, n), dtype=dtype))

    old_norm = 0.0
    for t in range(1, N + 1):
        left = state[0]
        r = left.shape[1]
        work[:, :r] = left
        work[:, r:r + l] = _columns(A, random_subset(n, l, gen))
        X = _independent_columns(work[:, :r + l], eps)
        candidate = refine(A, X, k) if X.shape[1] else None
        if candidate is None or len(candidate[2]) == 0:
            logger.debug("rsvd_fnkz: no components left at iteration %d, keeping rank %d", t, r)
            break
        state = candidate

        norm = np.sqrt(state[2][0])
        logger.debug("rsvd_fnkz: iteration %d, norm %.10g", t, norm)
        if old_norm > (1 - eps) * norm:
            break
        old_norm = norm
    else:
        msg = f"rsvd_fnkz did not converge in {N} iterations"
        logger.warning(msg)
        warnings.warn(msg, ConvergenceWarning, stacklevel=2)

    U, right, lam = state
    S = np.sqrt(lam)
    Vt = (right / S[np.newaxis, :]).conj().T
    return SVD(U, S, Vt)
