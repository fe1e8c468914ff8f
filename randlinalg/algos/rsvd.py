"""Randomized singular value and eigen decompositions.

A rudimentary composition of the building blocks in this package, as
described in Halko, Martinsson and Tropp (2011): a range finder produces a
basis, and a restriction solver factorizes A on that basis. To trade accuracy
for cost differently, combine any range finder from ``rangefinders`` with any
solver from ``restricted`` yourself.
"""

from .linops import check_square, is_hermitian
from .rangefinders import rrange
from .restricted import eigen_onepass, svd_restricted, svdvals_restricted
from .sampling import as_generator, srft


def rsvd(A, n, p=0, rng=None):
    """Partial SVD of A using a randomized algorithm.

    Calls ``rrange`` (Algorithm 4.1) for a basis of dimension ``n + p`` and
    then ``svd_restricted`` (Algorithm 5.1).

    Warning:
        This is the most commonly found variant but it often finds n large
        singular pairs rather than the n largest. Use ``rrange_si`` with a few
        subspace iterations when accuracy matters.

    Args:
        A: (m x N) input matrix
        n: number of singular value/vector pairs to find
        p: number of extra vectors to include in the computation
        rng: seed or ``numpy.random.Generator``

    Returns:
        SVD: ``(U, S, Vt)`` of rank n
    """
    Q = rrange(A, n, p=p, rng=rng)
    return svd_restricted(A, Q, n)


def rsvdvals(A, n, p=0, rng=None):
    """Estimates of the n largest singular values of A, see ``rsvd``."""
    Q = rrange(A, n, p=p, rng=rng)
    return svdvals_restricted(A, Q, n)


def reigen(A, l, hermitian=None, rng=None):
    """Partial eigendecomposition of A using a randomized algorithm.

    A wrapper around ``eigen_onepass`` with structured (SRFT) samples, so A is
    read only once (twice for non-Hermitian A, once through its adjoint).

    Args:
        A: (n x n) input matrix
        l: number of eigenpairs to find
        hermitian: whether A is Hermitian; checked numerically when None
        rng: seed or ``numpy.random.Generator``

    Returns:
        Eigen: ``(values, vectors)``
    """
    n = check_square(A)
    if not 1 <= l <= n:
        raise ValueError(f"Number of eigenpairs must be between 1 and {n}, got {l}")
    gen = as_generator(rng)
    if hermitian is None:
        hermitian = is_hermitian(A)
    if hermitian:
        return eigen_onepass(A, srft(n, l, gen))
    return eigen_onepass(A, srft(n, l, gen), srft(n, l, gen))
