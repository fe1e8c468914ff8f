"""Randomized range finders.

Each routine returns a matrix ``Q`` with orthonormal columns whose span
approximates the dominant column space of ``A``, using only products with
``A`` (and, for subspace iteration, ``A^H``). The basis is meant to be fed to
one of the restriction solvers in ``restricted.py``.

Whereas Halko, Martinsson and Tropp (2011) recommend classical Gram-Schmidt
with double reorthogonalization, the fixed-size variants orthonormalize with
a Householder QR from ``scipy.linalg.qr``.

Reference:
    Halko, Martinsson, Tropp. "Finding structure with randomness:
    Probabilistic algorithms for constructing approximate matrix
    decompositions." SIAM Review 53.2 (2011): 217-288.
"""

import logging
import warnings

import numpy as np

from .factorizations import ConvergenceWarning
from .linops import adjoint, orth, result_dtype
from .sampling import as_generator, gaussian_sample

logger = logging.getLogger(__name__)

# ||(I - QQ^H) A|| <= 10 sqrt(2/pi) max_i ||(I - QQ^H) A w_i|| w.p. 1 - 10^-r
ADAPTIVE_TOL_SCALE = 10 * np.sqrt(2 / np.pi)


def _check_basis_size(A, l):
    m, n = A.shape
    if l < 1:
        raise ValueError(f"Basis size must be at least 1, got {l}")
    if l > m:
        raise ValueError(f"Cannot find {l} linearly independent vectors of {m} x {n} matrix")


def rrange(A, l, p=0, rng=None):
    """Orthonormal basis for a random ``(l + p)``-dimensional subspace of range(A).

    Naive randomized range finding (Algorithm 4.1): ``Q = orth(A @ Omega)``
    with a Gaussian ``n x (l + p)`` sample ``Omega``. Halko et al. discourage
    using it on its own when the spectrum decays slowly; see ``rrange_si``.

    Args:
        A: (m x n) matrix, must support ``A @ X``
        l: number of basis vectors wanted
        p: oversampling, extra basis vectors kept in the output
        rng: seed or ``numpy.random.Generator``

    Returns:
        Q: (m x (l + p)) matrix with orthonormal columns

    Raises:
        ValueError: if ``l + p > m`` or ``p < 0``
    """
    if p < 0:
        raise ValueError(f"Oversampling must be non-negative, got {p}")
    _check_basis_size(A, l + p)
    n = A.shape[1]
    Omega = gaussian_sample(n, l + p, result_dtype(A), rng)
    return orth(np.asarray(A @ Omega))


def rrange_adaptive(A, r, tol=None, maxiter=10, rng=None):
    """Orthonormal basis grown one vector at a time until a tolerance is met.

    Adaptive randomized range finding (Algorithm 4.2). A window of ``r``
    unprojected samples ``A @ w`` estimates the residual norm
    ``||(I - QQ^H) A||``; the basis grows until the largest sample norm in the
    window falls below ``tol / (10 sqrt(2/pi))``.

    Args:
        A: (m x n) matrix, must support ``A @ X``
        r: window size; the bound fails with probability ``10^-r``
        tol: target residual norm (default: machine epsilon of A's dtype)
        maxiter: maximum number of basis vectors to compute
        rng: seed or ``numpy.random.Generator``

    Returns:
        Q: (m x j) matrix with orthonormal columns, ``j <= maxiter``

    Warns:
        ConvergenceWarning: if ``maxiter`` vectors did not reach ``tol``
    """
    m, n = A.shape
    if r < 1:
        raise ValueError(f"Window size must be at least 1, got {r}")
    if maxiter < 1:
        raise ValueError(f"maxiter must be at least 1, got {maxiter}")
    dtype = result_dtype(A)
    if tol is None:
        tol = np.finfo(dtype).eps
    gen = as_generator(rng)
    threshold = tol / ADAPTIVE_TOL_SCALE
    maxiter = min(maxiter, m)

    # Arenas: Y holds every sample drawn, Q every basis vector found.
    out_dtype = np.result_type(dtype, np.float64)
    Y = np.empty((m, r + maxiter), dtype=out_dtype)
    Q = np.empty((m, maxiter), dtype=out_dtype)
    Y[:, :r] = A @ gaussian_sample(n, r, dtype, gen)
    found = 0

    residual = np.inf
    for j in range(maxiter):
        window = Y[:, j:j + r]
        residual = np.linalg.norm(window, axis=0).max()
        if residual <= threshold:
            break

        basis = Q[:, :found]
        y = Y[:, j]
        for _ in range(2):
            y = y - basis @ (basis.conj().T @ y)
        norm_y = np.linalg.norm(y)
        if norm_y == 0:
            break
        q = y / norm_y
        Q[:, found] = q
        found += 1

        basis = Q[:, :found]
        y_new = A @ gaussian_sample(n, 1, dtype, gen)[:, 0]
        Y[:, j + r] = y_new - basis @ (basis.conj().T @ y_new)
        rest = Y[:, j + 1:j + r]
        Y[:, j + 1:j + r] = rest - np.outer(q, q.conj() @ rest)
    else:
        residual = np.linalg.norm(Y[:, maxiter:maxiter + r], axis=0).max()
        if residual > threshold:
            msg = (
                f"Maximum number of iterations ({maxiter}) reached with "
                f"norm {residual:.3e} > {threshold:.3e}"
            )
            logger.warning(msg)
            warnings.warn(msg, ConvergenceWarning, stacklevel=2)

    logger.debug("rrange_adaptive: %d basis vectors, residual estimate %.3e", found, residual)
    return Q[:, :found].copy()


def subspace_iterate(A, Q, q, At=None):
    """Run ``q`` rounds of re-orthonormalized power iteration on ``Q``."""
    if At is None:
        At = adjoint(A)
    for _ in range(q):
        Q_tilde = orth(At @ Q)
        Q = orth(A @ Q_tilde)
    return Q


def rrange_si(A, l, At=None, q=0, p=0, rng=None):
    """Orthonormal basis by randomized subspace iteration (Algorithm 4.4).

    Alternating products with ``A`` and ``A^H`` sharpen the gap between
    dominant and subdominant singular directions; each half step is
    re-orthonormalized. With ``q=0`` this is exactly ``rrange(A, l, p)``.

    Args:
        A: (m x n) matrix, must support ``A @ X``
        l: number of basis vectors wanted
        At: conjugate transpose of A (default: computed from A)
        q: number of subspace iterations
        p: oversampling, extra basis vectors kept in the output
        rng: seed or ``numpy.random.Generator``

    Returns:
        Q: (m x (l + p)) matrix with orthonormal columns
    """
    if q < 0 or p < 0:
        raise ValueError(f"q and p must be non-negative, got q={q}, p={p}")
    Q = rrange(A, l, p=p, rng=rng)
    return subspace_iterate(A, Q, q, At=At)
