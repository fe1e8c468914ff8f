"""Exact factorizations of A restricted to a random subspace.

Given a basis ``Q`` for (an approximation of) the range of A, these routines
factorize the small restricted problem exactly and lift the result back to
full size (Section 5 of Halko, Martinsson and Tropp 2011). None of them check
that Q actually captures the range of A; that is the range finder's job.
"""

import numpy as np
from scipy.linalg import cholesky, eig, eigh, lstsq, qr, solve_triangular, svd, svdvals

from .factorizations import SVD, Eigen
from .interpolative import row_id
from .linops import adjoint, orth, project, result_dtype
from .sampling import SRFT, sample_range


def _check_rank(Q, n):
    if not 1 <= n <= Q.shape[1]:
        raise ValueError(f"Rank must be between 1 and {Q.shape[1]} (basis size), got {n}")


def _dense(M):
    return M.toarray() if hasattr(M, "toarray") else np.asarray(M)


def _hermitian_part(B):
    return (B + B.conj().T) / 2


def svd_restricted(A, Q, n):
    """SVD of A restricted to span(Q) by exact projection (Algorithm 5.1).

    Args:
        A: (m x N) input matrix
        Q: (m x l) matrix with orthonormal columns
        n: number of singular triplets to keep (``n <= l``)

    Returns:
        SVD: ``(U, S, Vt)`` with U (m x n), S (n,), Vt (n x N)
    """
    _check_rank(Q, n)
    B = project(A, Q)
    Ub, S, Vt = svd(B, full_matrices=False)
    U = Q @ Ub[:, :n]
    return SVD(U, S[:n], Vt[:n, :])


def svdvals_restricted(A, Q, n):
    """Singular values of A restricted to span(Q), largest first."""
    _check_rank(Q, n)
    return svdvals(project(A, Q))[:n]


def svd_re(A, Q, rng=None):
    """SVD of A restricted to span(Q) using row extraction (Algorithm 5.2).

    A faster but less accurate variant of ``svd_restricted``: instead of
    multiplying by A again, the interpolative decomposition ``Q ~ X Q[J, :]``
    selects rows ``A[J, :]`` and A is approximated as ``X A[J, :]``.
    Halko et al. recommend passing ``Q = A @ Omega`` directly; Q need not be
    orthonormal.

    Args:
        A: (m x n) input matrix, must support row indexing
        Q: (m x k) sample of the range of A
        rng: seed or Generator for the interpolative decomposition

    Returns:
        SVD: ``(U, S, Vt)`` of rank k
    """
    X, J = row_id(Q, rng=rng)
    AJ = _dense(A[J, :])
    W, R = qr(AJ.conj().T, mode="economic")
    Z = X @ R.conj().T
    U, S, Vt = svd(Z, full_matrices=False)
    return SVD(U, S, Vt @ W.conj().T)


def eigen_restricted(A, Q):
    """Eigendecomposition of Hermitian A restricted to span(Q) (Algorithm 5.3).

    Args:
        A: (n x n) Hermitian matrix
        Q: (n x l) matrix with orthonormal columns

    Returns:
        Eigen: l eigenvalues in ascending order and the lifted eigenvectors
    """
    B = project(A, Q) @ Q
    values, V = eigh(_hermitian_part(B))
    return Eigen(values, Q @ V)


def eigen_re(A, Q, rng=None):
    """Eigendecomposition of Hermitian A by row extraction (Algorithm 5.4).

    Faster but less accurate than ``eigen_restricted``; Q need not be
    orthonormal.
    """
    X, J = row_id(Q, rng=rng)
    V, R = qr(X, mode="economic")
    AJJ = _dense(A[J, :])[:, J]
    Z = R @ AJJ @ R.conj().T
    values, W = eigh(_hermitian_part(Z))
    return Eigen(values, V @ W)


def eigen_nystrom(A, Q):
    """Eigendecomposition of positive semidefinite A by the Nystrom method.

    Algorithm 5.5: ``B1 = A Q``, ``B2 = Q^H B1 = L L^H``, ``F = B1 L^-H`` and
    ``F = U S V^H``; then ``A ~ U S^2 U^H``. More accurate than
    ``eigen_restricted`` but only for matrices whose restriction admits a
    Cholesky factorization.

    Raises:
        numpy.linalg.LinAlgError: if ``Q^H A Q`` is not positive definite
    """
    B1 = np.asarray(A @ Q)
    B2 = _hermitian_part(Q.conj().T @ B1)
    L = cholesky(B2, lower=True)
    F = solve_triangular(L, B1.conj().T, lower=True).conj().T
    U, S, _ = svd(F, full_matrices=False)
    return Eigen(S ** 2, U)


def _lstsq_right(C, D):
    """Least-squares solution B of ``B @ C = D``."""
    Bh, *_ = lstsq(C.conj().T, D.conj().T)
    return Bh.conj().T


def eigen_onepass(A, Omega, Omega_t=None, At=None):
    """Eigendecomposition of A from a single pass over A (Algorithm 5.6).

    The restricted operator B is not formed by projecting A again but
    recovered from the sample itself as the least-squares solution of
    ``B (Q^H Omega) = Q^H Y``.

    Without ``Omega_t`` A is taken to be Hermitian and the Hermitian part of
    B is diagonalized. With ``Omega_t`` (a sample for the row space) two
    estimates of the restricted operator are formed, one from each side, and
    averaged as ``(B + B_t^H) / 2`` before a general eigensolve. The averaging
    is a heuristic correction, not a proven-optimal estimator; whether it
    biases the result for strongly non-normal A is an open question.

    Args:
        A: (n x n) matrix, must support ``A @ X``
        Omega: (n x l) column-space sample, a dense array or an ``SRFT``
        Omega_t: (n x l) row-space sample for non-Hermitian A
        At: conjugate transpose of A (default: computed from A)

    Returns:
        Eigen: l eigenvalues and their eigenvectors ``Q @ V``
    """
    dtype = result_dtype(A)
    Y = sample_range(A, Omega)
    Q = orth(Y)
    if isinstance(Omega, SRFT):
        Omega = Omega.toarray(dtype)

    if Omega_t is None:
        B = _lstsq_right(Q.conj().T @ Omega, Q.conj().T @ Y)
        values, V = eigh(_hermitian_part(B))
        return Eigen(values, Q @ V)

    if At is None:
        At = adjoint(A)
    Yt = sample_range(At, Omega_t)
    Qt = orth(Yt)
    if isinstance(Omega_t, SRFT):
        Omega_t = Omega_t.toarray(dtype)

    B = _lstsq_right(Qt.conj().T @ Omega, Q.conj().T @ Y)
    Bt = _lstsq_right(Q.conj().T @ Omega_t, Qt.conj().T @ Yt)
    B = 0.5 * (B + Bt.conj().T)
    values, V = eig(B)
    return Eigen(values, Q @ V)
