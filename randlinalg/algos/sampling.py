"""Random test matrices used by the range finders and estimators.

Every function takes an explicit ``rng`` (anything accepted by
``numpy.random.default_rng``), so a call never touches global random state
and a fixed seed reproduces a run exactly.
"""

import numpy as np
import scipy.fft

from .linops import result_dtype


def as_generator(rng=None) -> np.random.Generator:
    """Return a ``numpy.random.Generator`` for ``rng``.

    A Generator is passed through unchanged so that a caller can thread one
    stream through several calls.
    """
    return np.random.default_rng(rng)


def _sample_dtype(dtype) -> np.dtype:
    dtype = np.dtype(dtype)
    if dtype.kind in "iuf":
        return np.dtype(np.float64)
    if dtype.kind == "c":
        return np.dtype(np.complex128)
    raise ValueError(f"Unsupported element type: {dtype}")


def gaussian_sample(n, l, dtype=np.float64, rng=None):
    """Dense ``n x l`` Gaussian sample matrix.

    Complex dtypes get independent real and imaginary parts scaled so each
    entry has unit variance.
    """
    gen = as_generator(rng)
    dtype = _sample_dtype(dtype)
    if dtype.kind == "c":
        return (gen.standard_normal((n, l)) + 1j * gen.standard_normal((n, l))) / np.sqrt(2)
    return gen.standard_normal((n, l))


def randnn(dtype, m, n=None, normalize=True, rng=None):
    """Random vector of length ``m`` (or ``m x n`` matrix) of Gaussian entries.

    Args:
        dtype: element type; integer and real types give float64, complex
            types give complex128.
        m: number of rows
        n: number of columns, or None for a 1-D vector
        normalize: scale the vector (each column) to unit 2-norm
        rng: seed or Generator

    Raises:
        ValueError: if ``dtype`` is not a numeric type
    """
    omega = gaussian_sample(m, 1 if n is None else n, dtype, rng)
    if normalize:
        omega = omega / np.linalg.norm(omega, axis=0, keepdims=True)
    return omega[:, 0] if n is None else omega


def random_subset(n, k, rng=None):
    """First ``k`` entries of a uniform random permutation of ``range(n)``."""
    if not 0 <= k <= n:
        raise ValueError(f"Cannot draw {k} distinct indices from {n}")
    return as_generator(rng).permutation(n)[:k]


class SRFT:
    """Subsampled randomized trigonometric transform ``Omega = sqrt(n/l) D F S``.

    ``D`` holds random signs, ``F`` is an orthonormal transform applied along
    the rows of the operand (DCT-II for real operands, DFT for complex ones),
    and ``S`` keeps ``l`` columns chosen without replacement. ``A @ Omega``
    costs O(mn log n) instead of the O(mnl) of a dense Gaussian sample.

    The signs and column subset are drawn once at construction, so repeated
    products use the same transform.
    """

    # Make ndarray @ SRFT defer to __rmatmul__.
    __array_ufunc__ = None

    def __init__(self, n, l, rng=None):
        if l < 1:
            raise ValueError(f"Sample size must be at least 1, got {l}")
        if l > n:
            raise ValueError(f"Cannot subsample {l} columns of a length-{n} transform")
        gen = as_generator(rng)
        self.n = n
        self.l = l
        self.signs = gen.choice([1.0, -1.0], size=n)
        self.columns = gen.choice(n, size=l, replace=False)
        self.scale = np.sqrt(n / l)

    @property
    def shape(self):
        return (self.n, self.l)

    def _apply(self, A):
        A = np.asarray(A)
        if A.shape[-1] != self.n:
            raise ValueError(
                f"Operand with {A.shape[-1]} columns cannot be multiplied by a "
                f"{self.n}x{self.l} transform"
            )
        AD = A * self.signs[np.newaxis, :]
        if np.iscomplexobj(AD):
            AF = scipy.fft.fft(AD, axis=1, norm="ortho")
        else:
            AF = scipy.fft.dct(AD, type=2, axis=1, norm="ortho")
        return self.scale * AF[:, self.columns]

    def __rmatmul__(self, A):
        if not isinstance(A, np.ndarray):
            return A @ self.toarray(result_dtype(A))
        return self._apply(A)

    def toarray(self, dtype=np.float64):
        """Materialize ``Omega`` as a dense ``n x l`` array.

        Only the ``l`` kept columns of the transform are computed, so this
        costs O(nl) memory rather than the O(n^2) of transforming the identity.
        """
        E = np.zeros((self.n, self.l))
        E[self.columns, np.arange(self.l)] = 1.0
        if _sample_dtype(dtype).kind == "c":
            # The DFT matrix is symmetric: its columns are DFTs of unit vectors.
            F = scipy.fft.fft(E, axis=0, norm="ortho")
        else:
            # Columns of C^T are inverse DCTs of unit vectors.
            F = scipy.fft.idct(E, type=2, axis=0, norm="ortho")
        return self.scale * self.signs[:, np.newaxis] * F


def srft(n, l, rng=None):
    """Draw an ``n x l`` structured random transform, see ``SRFT``."""
    return SRFT(n, l, rng)


def sample_range(A, Omega):
    """Return the sample ``A @ Omega`` as a dense array.

    ``Omega`` is a dense array or an ``SRFT``. Dense A gets the fast
    transform; sparse matrices and operators are multiplied by the
    materialized ``n x l`` sample, since they do not dispatch to
    ``SRFT.__rmatmul__``.
    """
    if not isinstance(Omega, SRFT):
        return np.asarray(A @ Omega)
    if isinstance(A, np.ndarray):
        return Omega._apply(A)
    return np.asarray(A @ Omega.toarray(result_dtype(A)))
