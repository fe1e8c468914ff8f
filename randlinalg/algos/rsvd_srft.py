"""Range finding with a Subsampled Random Fourier Transform (SRFT).

This is a variant of randomized range finding that uses structured random
matrices (SRFT) instead of Gaussian random matrices; applying the transform
with an FFT is cheaper than a dense matrix product for large matrices.
"""

from .linops import orth
from .rangefinders import _check_basis_size, subspace_iterate
from .restricted import svd_restricted
from .sampling import sample_range, srft


def rrange_f(A, l, p=0, rng=None):
    """Orthonormal basis for a subspace of range(A) from a structured sample.

    Same as ``rrange`` (Algorithm 4.5 of Halko et al.) but ``Omega`` is an
    SRFT, so ``A @ Omega`` is computed with a fast transform. Real inputs
    produce a real basis.

    Args:
        A: (m x n) input matrix
        l: number of basis vectors wanted
        p: oversampling parameter (extra basis vectors, default: 0)
        rng: seed or ``numpy.random.Generator``

    Returns:
        Q: (m x (l + p)) matrix with orthonormal columns
    """
    _check_basis_size(A, l + p)
    Omega = srft(A.shape[1], l + p, rng)
    return orth(sample_range(A, Omega))


def rsvd_srft(A, k, p=10, q=0, rng=None):
    """Randomized SVD with Subsampled Random Fourier Transform.

    Args:
        A: (m x n) input matrix
        k: desired rank
        p: oversampling parameter (default: 10)
        q: number of power iterations (default: 0)
        rng: seed or ``numpy.random.Generator``

    Returns:
        SVD: rank-k factors ``(U, S, Vt)``
    """
    Q = rrange_f(A, k, p=p, rng=rng)
    Q = subspace_iterate(A, Q, q)
    return svd_restricted(A, Q, k)
