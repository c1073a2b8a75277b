"""
Symmetric positive-definite numeric primitives.

Used by every filter operation that touches a covariance:
- symmetrize after each propagation/update
- Cholesky factor + solve for innovation covariances (never an explicit inverse)
- Gaussian density evaluated through the same factorization

A failed factorization raises NumericalFailure. There is no lift or jitter:
an indefinite innovation covariance means the filter covariance is already
corrupted, and the caller must see it.
"""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np
from scipy.linalg import cho_factor, cho_solve

from manifold_kf.common.errors import DimensionMismatch, NumericalFailure

# (factor, lower) pair as returned by scipy.linalg.cho_factor
CholeskyFactor = Tuple[np.ndarray, bool]


def symmetrize(M: np.ndarray) -> np.ndarray:
    """Return 0.5 * (M + M^T)."""
    M = np.asarray(M, dtype=float)
    return 0.5 * (M + M.T)


def spd_cholesky_factor(V: np.ndarray, what: str = "innovation covariance") -> CholeskyFactor:
    """
    Cholesky-factor a symmetric positive-definite matrix.

    Raises:
        DimensionMismatch: V is not square
        NumericalFailure: V is not positive definite or not finite
    """
    V = np.asarray(V, dtype=float)
    if V.ndim != 2 or V.shape[0] != V.shape[1]:
        raise DimensionMismatch(f"Expected square {what}, got shape {V.shape}")
    try:
        return cho_factor(V, lower=True, check_finite=True)
    except (np.linalg.LinAlgError, ValueError) as exc:
        raise NumericalFailure(f"Cholesky factorization of {what} failed: {exc}") from exc


def spd_cholesky_solve(factor: CholeskyFactor, b: np.ndarray) -> np.ndarray:
    """Solve V x = b given the Cholesky factor of V. b may be (d,) or (d, k)."""
    return cho_solve(factor, np.asarray(b, dtype=float), check_finite=False)


def spd_logdet(factor: CholeskyFactor) -> float:
    """log|V| from its Cholesky factor."""
    c, _ = factor
    return 2.0 * float(np.sum(np.log(np.diag(c))))


def gaussian_log_pdf(V: np.ndarray, v: np.ndarray) -> float:
    """
    Log density of v under N(0, V).

        log p = -0.5 * (v^T V^-1 v + log|V| + k log(2 pi))
    """
    v = np.asarray(v, dtype=float).reshape(-1)
    factor = spd_cholesky_factor(V)
    if factor[0].shape[0] != v.shape[0]:
        raise DimensionMismatch(
            f"Residual has {v.shape[0]} elements but covariance is {factor[0].shape}"
        )
    mahal_sq = float(v @ spd_cholesky_solve(factor, v))
    k = v.shape[0]
    return -0.5 * (mahal_sq + spd_logdet(factor) + k * math.log(2.0 * math.pi))


def gaussian_pdf(V: np.ndarray, v: np.ndarray) -> float:
    """Density of v under N(0, V)."""
    return math.exp(gaussian_log_pdf(V, v))
