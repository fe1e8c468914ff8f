"""Small helpers over the matrix types accepted by the algorithms.

A "matrix" here is anything with ``.shape`` that supports ``A @ X``: a NumPy
array, a SciPy sparse matrix, or a ``scipy.sparse.linalg.LinearOperator``.
"""

import numpy as np
from scipy.linalg import qr
from scipy.sparse.linalg import LinearOperator


def adjoint(A):
    """Conjugate transpose of ``A`` without copying where possible."""
    if isinstance(A, LinearOperator):
        return A.adjoint()
    return A.conj().T


def result_dtype(A):
    """Floating point dtype that products with ``A`` are computed in."""
    dtype = getattr(A, "dtype", None)
    if dtype is None or not np.issubdtype(dtype, np.inexact):
        return np.dtype(np.float64)
    return np.dtype(dtype)


def orth(Y):
    """Orthonormal basis for the columns of ``Y`` (Householder QR)."""
    Q, _ = qr(Y, mode="economic")
    return Q


def project(A, Q):
    """Return ``Q^H A`` computed as ``(A^H Q)^H`` so operators work too."""
    if isinstance(A, np.ndarray):
        return Q.conj().T @ A
    return np.asarray(adjoint(A) @ Q).conj().T


def check_square(A, name="A"):
    m, n = A.shape
    if m != n:
        raise ValueError(f"{name} must be square, got {m}x{n}")
    return n


def is_hermitian(A) -> bool:
    """Best-effort check used when the caller does not say."""
    if isinstance(A, LinearOperator):
        return False
    if hasattr(A, "toarray"):
        A = A.toarray()
    A = np.asarray(A)
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        return False
    return np.allclose(A, A.conj().T)
