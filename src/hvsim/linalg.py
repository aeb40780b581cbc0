"""
Small dense linear algebra and random-variate helpers.

Covers the Cholesky factorization of covariance matrices (with a fixed
fallback for degenerate input), Box-Muller standard normal variates, and
reconstruction of a symmetric 6x6 covariance from its 21 catalogue entries.
"""

import numpy as np
import warnings
from typing import Optional, Tuple, Union
from .config import config
from .constants import CHOLESKY_FALLBACK_EPSILON, PHASE_SPACE_DIM
from .utils import NumericalDegeneracyWarning

# Field order of the 21 flattened covariance entries: the upper triangle
# read row by row over the (x, y, z, u, v, w) phase-space axes.
COVARIANCE_FIELDS = (
    'xx', 'xy', 'xz', 'xu', 'xv', 'xw',
    'yy', 'yz', 'yu', 'yv', 'yw',
    'zz', 'zu', 'zv', 'zw',
    'uu', 'uv', 'uw',
    'vv', 'vw',
    'ww',
)


def fallback_matrix(n: int = PHASE_SPACE_DIM) -> np.ndarray:
    """
    Matrix returned when a Cholesky factorization fails.

    Diagonal with ``CHOLESKY_FALLBACK_EPSILON`` on every diagonal entry,
    which turns covariance sampling into near-delta-function sampling.
    """
    return np.eye(n) * CHOLESKY_FALLBACK_EPSILON


def cholesky(matrix) -> np.ndarray:
    """
    Lower-triangular Cholesky factor L with L @ L.T == matrix.

    Computed by column-by-column elimination. If the matrix turns out not to
    be positive-definite (a diagonal residual <= 0) or a pivot is exactly
    zero, the factorization is abandoned and :func:`fallback_matrix` is
    returned instead; a NumericalDegeneracyWarning is issued and no
    exception is raised.

    Parameters
    ----------
    matrix : array_like, shape (n, n)
        Symmetric matrix; only the lower triangle is read

    Returns
    -------
    np.ndarray
        Lower-triangular factor, or the epsilon-diagonal fallback

    Raises
    ------
    ValueError
        If the input is not a square 2-D matrix
    """
    matrix = np.asarray(matrix, dtype=float)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise ValueError(f"Cholesky requires a square matrix, got shape {matrix.shape}")

    n = matrix.shape[0]
    L = np.zeros((n, n))

    for i in range(n):
        for j in range(i + 1):
            s = np.dot(L[i, :j], L[j, :j])

            if i == j:
                d = matrix[i, i] - s
                # also rejects NaN residuals
                if not d > 0:
                    warnings.warn(
                        f"Cholesky decomposition failed: matrix is not "
                        f"positive-definite (residual {d:.3e} at row {i}). "
                        f"Using {CHOLESKY_FALLBACK_EPSILON:g} * identity as fallback.",
                        NumericalDegeneracyWarning,
                        stacklevel=2
                    )
                    return fallback_matrix(n)
                L[i, i] = np.sqrt(d)
            else:
                if L[j, j] == 0:
                    warnings.warn(
                        f"Cholesky decomposition failed: zero pivot at column {j}. "
                        f"Using {CHOLESKY_FALLBACK_EPSILON:g} * identity as fallback.",
                        NumericalDegeneracyWarning,
                        stacklevel=2
                    )
                    return fallback_matrix(n)
                L[i, j] = (matrix[i, j] - s) / L[j, j]
    return L


def standard_normal(rng: np.random.Generator) -> float:
    """
    One standard normal variate by the Box-Muller transform.

    Draws two uniforms in (0, 1] and returns
    sqrt(-2 ln u1) * sin(2 pi u2). The paired cosine variate is discarded,
    so every call consumes exactly two uniform draws.
    """
    u1 = 1.0 - rng.random()
    u2 = 1.0 - rng.random()
    return float(np.sqrt(-2.0 * np.log(u1)) * np.sin(2.0 * np.pi * u2))


def standard_normals(rng: np.random.Generator,
                     size: Union[int, Tuple[int, ...]]) -> np.ndarray:
    """
    Array of Box-Muller standard normal variates.

    Consumes the uniform stream in the same order as repeated calls to
    :func:`standard_normal` (u1, u2 for the first variate, then the next),
    so both produce identical values from identically seeded generators.
    """
    shape = (size,) if np.isscalar(size) else tuple(size)
    u = 1.0 - rng.random(shape + (2,))
    return np.sqrt(-2.0 * np.log(u[..., 0])) * np.sin(2.0 * np.pi * u[..., 1])


def covariance_from_flat(values) -> np.ndarray:
    """
    Rebuild a symmetric 6x6 covariance from 21 upper-triangle entries.

    Parameters
    ----------
    values : array_like, length 21
        Entries in ``COVARIANCE_FIELDS`` order

    Returns
    -------
    np.ndarray
        Symmetric 6x6 matrix
    """
    values = np.asarray(values, dtype=float).reshape(-1)
    if values.size != len(COVARIANCE_FIELDS):
        raise ValueError(
            f"Expected {len(COVARIANCE_FIELDS)} covariance entries, got {values.size}"
        )
    cov = np.zeros((PHASE_SPACE_DIM, PHASE_SPACE_DIM))
    rows, cols = np.triu_indices(PHASE_SPACE_DIM)
    cov[rows, cols] = values
    cov[cols, rows] = values
    return cov


def is_symmetric(matrix, atol: Optional[float] = None) -> bool:
    """Check symmetry within ``atol`` (default: config.SYMMETRY_ATOL)."""
    matrix = np.asarray(matrix, dtype=float)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        return False
    if atol is None:
        atol = config.SYMMETRY_ATOL
    return bool(np.allclose(matrix, matrix.T, rtol=0.0, atol=atol))
