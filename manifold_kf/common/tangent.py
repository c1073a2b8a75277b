"""
Tangent-space algebra helpers.

Shape validation and the closed-form discrete transition matrix of a chain
of nested integrators.

Augmented tangent layout for a pose with tangent dimension D and N derivatives:

    x = [pose (D) | 1st deriv (D) | ... | Nth deriv (D)]      size (N+1)*D
"""

from __future__ import annotations

import functools
from typing import Callable, Optional, Tuple

import numpy as np

from manifold_kf.common.errors import DimensionMismatch

# Dynamically sized, validated at use
TransitionMatrix = np.ndarray
TransitionFunction = Callable[[float], TransitionMatrix]


def as_vector(x, dim: Optional[int] = None, name: str = "vector") -> np.ndarray:
    """
    Normalize any (n,), (n,1), (1,n) into a flat (n,) float vector copy.

    Raises DimensionMismatch if dim is given and does not match.
    """
    x = np.array(x, dtype=float).reshape(-1)
    if dim is not None and x.shape[0] != dim:
        raise DimensionMismatch(f"Expected {name} of length {dim}, got {x.shape[0]}")
    return x


def as_matrix(M, shape: Tuple[int, int], name: str = "matrix") -> np.ndarray:
    """Float matrix copy of the exact given shape, else DimensionMismatch."""
    M = np.array(M, dtype=float)
    if M.ndim == 1 and shape[1] == 1 and M.shape[0] == shape[0]:
        M = M.reshape(shape)
    if M.shape != tuple(shape):
        raise DimensionMismatch(f"Expected {name} of shape {tuple(shape)}, got {M.shape}")
    return M


def integral_matrix(dt: float, order: int, tangent_dim: int, num_derivs: int) -> TransitionMatrix:
    """
    Discrete-time integrator matrix for a pose and num_derivs derivatives.

    Block (i, i+k) is dt^k / k! * I for 1 <= k <= order; the diagonal is
    identity. Order 0 means no integration (identity). A negative order uses
    the maximum order num_derivs; larger orders are clamped to it.

    Args:
        dt: Time step
        order: Integration order
        tangent_dim: Tangent dimension D of the pose
        num_derivs: Number of derivatives N

    Returns:
        (N+1)*D square matrix
    """
    if tangent_dim < 1 or num_derivs < 0:
        raise ValueError(
            f"Invalid integrator dimensions tangent_dim={tangent_dim}, num_derivs={num_derivs}"
        )
    dim = tangent_dim * (num_derivs + 1)
    mat = np.eye(dim, dtype=float)

    if order < 0 or order > num_derivs:
        order = num_derivs

    int_term = 1.0
    for o in range(1, order + 1):
        int_term = int_term * dt / o
        offset = tangent_dim * o
        idx = np.arange(dim - offset)
        mat[idx, idx + offset] = int_term
    return mat


def integral_matrix_func(tangent_dim: int, num_derivs: int, order: int = -1) -> TransitionFunction:
    """Transition function dt -> integral_matrix(dt, order, tangent_dim, num_derivs)."""
    return functools.partial(
        integral_matrix, order=order, tangent_dim=tangent_dim, num_derivs=num_derivs
    )
