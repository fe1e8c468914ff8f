"""Probabilistic bounds on matrix norms, extremal eigenvalues and conditioning.

None of these routines factorizes A. Each returns a bound that holds with a
caller-chosen failure probability ``p`` over the random draws:

- ``rnorm`` / ``rnorms``: upper bounds on the spectral norm
- ``reigmax`` / ``reigmin``: intervals for the extremal eigenvalues of a
  Hermitian positive semidefinite matrix
- ``rcond``: an interval for the 2-norm condition number

References:
    Halko, Martinsson, Tropp. SIAM Review 53.2 (2011), Lemma 4.1.
    Liberty, Woolfe, Martinsson, Rokhlin, Tygert. PNAS 104.51 (2007), Appendix.
    Dixon. "Estimating extremal eigenvalues and condition numbers of
    matrices." SIAM J. Numer. Anal. 20.4 (1983): 812-814, Theorem 1.
"""

import logging

import numpy as np
from scipy.linalg import lu_factor, lu_solve
from scipy.sparse import issparse
from scipy.sparse.linalg import LinearOperator, splu

from .factorizations import Interval
from .linops import adjoint, check_square, result_dtype
from .sampling import as_generator, gaussian_sample, randnn

logger = logging.getLogger(__name__)

DEFAULT_P_FAIL = 0.05

# P(x^H A^k x <= lambda_max^k <= theta x^H A^k x) >= 1 - 0.8 theta^(-k/2) sqrt(n)
DIXON_CONSTANT = 0.8


def _check_probability(p):
    if not 0 < p < 1:
        raise ValueError(f"Failure probability must be in (0, 1), got {p}")


def _check_iters(iters):
    if iters < 1:
        raise ValueError(f"Number of power iterations must be at least 1, got {iters}")


def rnorm(A, mvps, p=DEFAULT_P_FAIL, rng=None):
    """Probabilistic upper bound on the spectral norm of A.

    ``||A|| <= alpha sqrt(2/pi) max_i ||A w_i||`` for Gaussian vectors
    ``w_i`` holds with probability ``1 - alpha^(-mvps)``; alpha is solved for
    from ``p``. Only products with A are needed; see ``rnorms`` for a tighter
    estimator that also multiplies by ``A^H``.

    Args:
        A: (m x n) matrix, must support ``A @ X``
        mvps: number of matrix-vector products to compute
        p: probability that the bound fails
        rng: seed or ``numpy.random.Generator``

    Returns:
        float: upper bound on ``||A||_2``
    """
    if mvps < 1:
        raise ValueError(f"Number of matrix-vector products must be at least 1, got {mvps}")
    _check_probability(p)
    n = A.shape[1]
    Omega = gaussian_sample(n, mvps, result_dtype(A), rng)
    norms = np.linalg.norm(np.asarray(A @ Omega), axis=0)
    alpha = p ** (-1.0 / mvps)
    return float(alpha * np.sqrt(2 / np.pi) * norms.max())


def rnorms(A, iters=1, p=DEFAULT_P_FAIL, At=None, rng=None):
    """Probabilistic upper bound on the spectral norm of A using ``A^H A``.

    Starting from a random unit vector, ``j = iters + 1`` power steps on
    ``A^H A`` give ``rho = sqrt(||(A^H A)^j w|| / ||(A^H A)^(j-1) w||)``,
    which never exceeds ``||A||`` and satisfies ``||A|| <= alpha rho`` with
    probability at least ``1 - p``, ``p = 4 sqrt(n / (j - 1)) alpha^(-2j)``.

    Args:
        A: (m x n) matrix, must support ``A @ X``
        iters: number of power iterations beyond the first product
        p: probability that the bound fails
        At: conjugate transpose of A (default: computed from A)
        rng: seed or ``numpy.random.Generator``

    Returns:
        float: upper bound on ``||A||_2``
    """
    _check_iters(iters)
    _check_probability(p)
    n = A.shape[1]
    if At is None:
        At = adjoint(A)
    v = randnn(result_dtype(A), n, rng=rng)
    growth = 0.0
    for _ in range(iters + 1):
        w = At @ (A @ v)
        growth = np.linalg.norm(w)
        if growth == 0:
            return 0.0
        v = w / growth
    j = iters + 1
    alpha = max((4 * np.sqrt(n / (j - 1)) / p) ** (1 / (2 * j)), 1.0)
    return float(alpha * np.sqrt(growth))


def _log_moment(apply, x, k):
    """``log(x^H A^k x)`` for unit ``x``, renormalizing at every product."""
    log_value = 0.0
    v = x
    for _ in range(k // 2):
        v = apply(v)
        s = np.linalg.norm(v)
        if s == 0:
            return -np.inf
        v = v / s
        log_value += 2 * np.log(s)
    if k % 2:
        q = np.real(np.vdot(v, apply(v)))
        if q <= 0:
            return -np.inf
        log_value += np.log(q)
    return log_value


def _dixon_interval(apply, n, dtype, iters, p, rng):
    """Interval for the largest eigenvalue of a Hermitian PSD operator."""
    x = randnn(dtype, n, rng=rng)
    lower = np.exp(_log_moment(apply, x, iters) / iters)
    theta = max((DIXON_CONSTANT * np.sqrt(n) / p) ** (2 / iters), 1.0)
    return Interval(float(lower), float(theta ** (1 / iters) * lower))


def reigmax(A, iters=1, p=DEFAULT_P_FAIL, rng=None):
    """Interval containing the largest eigenvalue of A with probability 1 - p.

    Args:
        A: (n x n) Hermitian positive semidefinite matrix, must support
            ``A @ x``
        iters: number of power iterations to run (recommended: iters <= 3)
        p: probability that the interval misses the eigenvalue
        rng: seed or ``numpy.random.Generator``

    Returns:
        Interval: ``(lower, upper)``
    """
    n = check_square(A)
    _check_iters(iters)
    _check_probability(p)
    return _dixon_interval(lambda v: A @ v, n, result_dtype(A), iters, p, as_generator(rng))


def reigmin(A, iters=1, p=DEFAULT_P_FAIL, rng=None):
    """Interval containing the smallest eigenvalue of A with probability 1 - p.

    Shift and bound: with ``u`` an upper bound on the largest eigenvalue,
    ``u I - A`` is positive semidefinite and its largest eigenvalue is
    ``u - lambda_min``, which ``reigmax`` machinery brackets. The failure
    budget is split evenly between the two estimates. The lower end is
    clipped at zero since A is positive semidefinite.

    Args:
        A: (n x n) Hermitian positive semidefinite matrix, must support
            ``A @ x``
        iters: number of power iterations to run (recommended: iters <= 3)
        p: probability that the interval misses the eigenvalue
        rng: seed or ``numpy.random.Generator``

    Returns:
        Interval: ``(lower, upper)``
    """
    n = check_square(A)
    _check_iters(iters)
    _check_probability(p)
    gen = as_generator(rng)
    dtype = result_dtype(A)
    shift = _dixon_interval(lambda v: A @ v, n, dtype, iters, p / 2, gen).upper
    shifted = _dixon_interval(lambda v: shift * v - A @ v, n, dtype, iters, p / 2, gen)
    logger.debug("reigmin: shift %.6g, shifted interval %s", shift, shifted)
    return Interval(max(shift - shifted.upper, 0.0), shift - shifted.lower)


def _default_solver(A):
    if isinstance(A, LinearOperator):
        raise ValueError("A LinearOperator needs an explicit solve callable")
    if issparse(A):
        return splu(A.tocsc()).solve
    lu_piv = lu_factor(np.asarray(A))
    return lambda b: lu_solve(lu_piv, b)


def rcond(A, iters=1, p=DEFAULT_P_FAIL, solve=None, rng=None):
    """Interval containing the condition number of A with probability 1 - p.

    The largest eigenvalues of A and of ``A^-1`` are bracketed independently
    (failure probability p/2 each) and multiplied.

    Dixon describes choosing the number of power iterations from p and a
    target ratio between the interval ends. Those bounds assume exact
    arithmetic, and empirically ``iters >= 4`` can produce intervals that miss
    the true condition number, so ``iters`` is left to the caller and the
    interval width follows from it.

    Args:
        A: (n x n) Hermitian positive definite matrix
        iters: number of power iterations to run
        p: probability that the interval misses the condition number
        solve: callable ``b -> A^-1 b``; by default an LU factorization of
            a dense or sparse A
        rng: seed or ``numpy.random.Generator``

    Returns:
        Interval: ``(lower, upper)``
    """
    n = check_square(A)
    _check_iters(iters)
    _check_probability(p)
    if solve is None:
        solve = _default_solver(A)
    gen = as_generator(rng)
    dtype = result_dtype(A)
    largest = _dixon_interval(lambda v: A @ v, n, dtype, iters, p / 2, gen)
    inverse = _dixon_interval(solve, n, dtype, iters, p / 2, gen)
    return Interval(largest.lower * inverse.lower, largest.upper * inverse.upper)
