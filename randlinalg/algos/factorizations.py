"""Result types shared by the randomized decompositions.

Every routine returns a fresh, immutable named tuple, so results can be
unpacked exactly like the ``(U, S, Vt)`` tuples returned by NumPy.
"""

from enum import Enum
from typing import NamedTuple

import numpy as np


class ConvergenceWarning(UserWarning):
    """An iterative routine hit its iteration cap before meeting its tolerance."""


class RefinementMethod(Enum):
    """Inner solver used by ``rsvd_fnkz`` at each refinement step.

    EIG solves the eigenproblem of the Gram matrix (cheaper), SVD takes the
    singular value decomposition of the projected columns (more stable).
    """

    EIG = "eig"
    SVD = "svd"


class SVD(NamedTuple):
    """Partial singular value decomposition ``A ~ U @ diag(S) @ Vt``."""

    U: np.ndarray
    S: np.ndarray
    Vt: np.ndarray

    @property
    def rank(self) -> int:
        return len(self.S)

    def to_matrix(self) -> np.ndarray:
        """Rebuild the low-rank approximation."""
        return (self.U * self.S[np.newaxis, :]) @ self.Vt


class Eigen(NamedTuple):
    """Partial eigendecomposition ``A @ vectors ~ vectors @ diag(values)``."""

    values: np.ndarray
    vectors: np.ndarray


class Interpolative(NamedTuple):
    """Interpolative decomposition ``A ~ B @ P`` with ``B = A[:, J]``."""

    B: np.ndarray
    P: np.ndarray
    J: np.ndarray


class Interval(NamedTuple):
    """Confidence interval ``[lower, upper]`` for an unknown scalar."""

    lower: float
    upper: float

    def __contains__(self, value) -> bool:
        return self.lower <= value <= self.upper
