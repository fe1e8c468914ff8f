"""Randomized interpolative decomposition.

Uses QR factorization with column pivoting on a random projection of A to
pick k columns of A that approximately span its range.
"""

import numpy as np
from scipy.linalg import lstsq, qr as scipy_qr

from .factorizations import Interpolative
from .sampling import gaussian_sample


def idfact(A, k, l, rng=None):
    """Interpolative decomposition ``A ~ B @ P``.

    ``B = A[:, J]`` is a subset of k columns of A, ``P[:, J]`` is the k x k
    identity, entries of P rarely exceed 2 in magnitude, and
    ``||B @ P - A||`` is on the order of the (k+1)-th singular value of A,
    with a failure probability that shrinks as ``l - k`` grows.

    The column pivots are those of ``Y = R @ A`` for a Gaussian ``l x m``
    sample ``R`` rather than the pivots a column-pivoted QR of A itself would
    produce; ``P`` is then the least-squares solution of ``B @ P = A``
    (Liberty et al. 2007, Algorithm I; Cheng et al. 2005).

    Args:
        A: (m x n) matrix to factorize
        k: number of columns of A to keep in B
        l: length of the random vectors A is projected onto (``l >= k``)
        rng: seed or ``numpy.random.Generator``

    Returns:
        Interpolative: ``(B, P, J)``

    Raises:
        ValueError: if ``k`` is not in ``[1, min(m, n)]`` or ``l < k``
    """
    m, n = A.shape
    if not 1 <= k <= min(m, n):
        raise ValueError(f"Rank must be between 1 and min(m, n) = {min(m, n)}, got {k}")
    if l < k:
        raise ValueError(f"Projection length l ({l}) must be at least k ({k})")

    R = gaussian_sample(l, m, getattr(A, "dtype", np.float64), rng)
    Y = R @ A
    _, piv = scipy_qr(Y, mode="r", pivoting=True)
    J = np.sort(piv[:k])

    B = A[:, J]
    P, *_ = lstsq(B, A)
    return Interpolative(B, P, J)


def row_id(Q, k=None, rng=None):
    """Row interpolative decomposition ``Q ~ X @ Q[J, :]``.

    Computed as the column ID of ``Q^H``. By default k is the number of
    columns of Q, which reproduces a full-rank Q up to rounding.

    Returns:
        (X, J): (m x k) interpolation matrix and the selected row indices
    """
    if k is None:
        k = Q.shape[1]
    F = idfact(Q.conj().T, k, k, rng=rng)
    return F.P.conj().T, F.J
