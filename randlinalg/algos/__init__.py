"""Randomized low-rank decompositions and estimators.

This package contains randomized range finders, solvers that factorize a
matrix restricted to a random subspace, the interpolative decomposition, an
iteratively refined randomized SVD, and probabilistic estimators for norms,
extremal eigenvalues and condition numbers.
"""

from .factorizations import (
    SVD,
    ConvergenceWarning,
    Eigen,
    Interpolative,
    Interval,
    RefinementMethod,
)
from .sampling import (
    SRFT,
    as_generator,
    gaussian_sample,
    randnn,
    random_subset,
    sample_range,
    srft,
)
from .rangefinders import rrange, rrange_adaptive, rrange_si
from .rsvd_srft import rrange_f, rsvd_srft
from .interpolative import idfact, row_id
from .restricted import (
    eigen_nystrom,
    eigen_onepass,
    eigen_re,
    eigen_restricted,
    svd_re,
    svd_restricted,
    svdvals_restricted,
)
from .rsvd import reigen, rsvd, rsvdvals
from .rsvd_fnkz import rsvd_fnkz
from .estimators import rcond, reigmax, reigmin, rnorm, rnorms

__all__ = [
    "SVD",
    "Eigen",
    "Interpolative",
    "Interval",
    "RefinementMethod",
    "ConvergenceWarning",
    "SRFT",
    "as_generator",
    "gaussian_sample",
    "randnn",
    "random_subset",
    "srft",
    "sample_range",
    "rrange",
    "rrange_adaptive",
    "rrange_si",
    "rrange_f",
    "rsvd_srft",
    "idfact",
    "row_id",
    "svd_restricted",
    "svdvals_restricted",
    "svd_re",
    "eigen_restricted",
    "eigen_re",
    "eigen_nystrom",
    "eigen_onepass",
    "rsvd",
    "rsvdvals",
    "reigen",
    "rsvd_fnkz",
    "rnorm",
    "rnorms",
    "reigmax",
    "reigmin",
    "rcond",
]
