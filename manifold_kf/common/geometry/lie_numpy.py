"""
SO(2)/SE(2) and SO(3)/SE(3) Lie group primitives on homogeneous matrices.

Tangent Conventions
===================

Translation first, rotation last (same ordering as Sophus):
  - se(2): xi = (vx, vy, w)
  - se(3): xi = (vx, vy, vz, wx, wy, wz)

Adjoint
-------
Ad(T) moves a tangent vector expressed in T's local frame into the frame T is
expressed in:

    T @ exp(xi) @ T^-1 = exp(Ad(T) @ xi)

so covariance transport under conjugation is Sigma' = Ad(T) @ Sigma @ Ad(T).T.
The opposite direction is Ad(T^-1) = Ad(T)^-1.

Numerical Policy
----------------
Closed forms are used everywhere; below ROTATION_EPSILON the Taylor series of
each coefficient replaces the closed form to avoid 0/0. Near theta = pi the
SO(3) log reads the rotation axis from the symmetric part of R instead of the
skew part, which vanishes there.

References
----------
- Barfoot (2017): "State Estimation for Robotics"
- Sola et al. (2018): "A micro Lie theory for state estimation"
"""

from __future__ import annotations

import math

import numpy as np

from manifold_kf.common.constants import (
    ROTATION_EPSILON,
    SINGULARITY_EPSILON,
)
from manifold_kf.common.errors import DimensionMismatch


# =============================================================================
# Shape helpers
# =============================================================================


def _as_flat(v: np.ndarray, dim: int, what: str) -> np.ndarray:
    v = np.asarray(v, dtype=float).reshape(-1)
    if v.shape[0] != dim:
        raise DimensionMismatch(f"Expected {dim}D {what}, got shape {v.shape}")
    return v


def _as_square(M: np.ndarray, dim: int, what: str) -> np.ndarray:
    M = np.asarray(M, dtype=float)
    if M.shape != (dim, dim):
        raise DimensionMismatch(f"Expected {dim}x{dim} {what}, got shape {M.shape}")
    return M


def homogeneous_inverse(T: np.ndarray) -> np.ndarray:
    """Inverse of a rigid homogeneous transform [R t; 0 1] -> [R' -R't; 0 1]."""
    T = np.asarray(T, dtype=float)
    n = T.shape[0] - 1
    R = T[:n, :n]
    t = T[:n, n]
    out = np.eye(n + 1, dtype=float)
    out[:n, :n] = R.T
    out[:n, n] = -R.T @ t
    return out


# =============================================================================
# SO(2)
# =============================================================================


def wrap_angle(theta: float) -> float:
    """Wrap an angle to (-pi, pi]."""
    wrapped = math.remainder(float(theta), 2.0 * math.pi)
    if wrapped <= -math.pi:
        wrapped += 2.0 * math.pi
    return wrapped


def so2_matrix(theta: float) -> np.ndarray:
    c = math.cos(theta)
    s = math.sin(theta)
    return np.array([[c, -s], [s, c]], dtype=float)


def so2_angle(R: np.ndarray) -> float:
    """Angle of a 2x2 rotation block. Also serves as its projection onto SO(2)."""
    return math.atan2(R[1, 0], R[0, 0])


def _se2_v_coeffs(theta: float) -> tuple[float, float]:
    """
    Coefficients (a, b) of the SE(2) left Jacobian V = [[a, -b], [b, a]].

    a = sin(theta) / theta, b = (1 - cos(theta)) / theta
    """
    if abs(theta) < ROTATION_EPSILON:
        theta_sq = theta * theta
        return 1.0 - theta_sq / 6.0, 0.5 * theta - theta * theta_sq / 24.0
    return math.sin(theta) / theta, (1.0 - math.cos(theta)) / theta


# =============================================================================
# SE(2)
# =============================================================================


def se2_exp(xi: np.ndarray) -> np.ndarray:
    """
    Exponential map se(2) -> SE(2).

    Args:
        xi: 3D twist (vx, vy, w)

    Returns:
        3x3 homogeneous transform
    """
    xi = _as_flat(xi, 3, "se(2) twist")
    theta = float(xi[2])
    a, b = _se2_v_coeffs(theta)
    V = np.array([[a, -b], [b, a]], dtype=float)

    T = np.eye(3, dtype=float)
    T[:2, :2] = so2_matrix(theta)
    T[:2, 2] = V @ xi[:2]
    return T


def se2_log(T: np.ndarray) -> np.ndarray:
    """
    Logarithmic map SE(2) -> se(2). The angle is wrapped to (-pi, pi].

    Args:
        T: 3x3 homogeneous transform

    Returns:
        3D twist (vx, vy, w)
    """
    T = _as_square(T, 3, "SE(2) matrix")
    theta = so2_angle(T[:2, :2])
    a, b = _se2_v_coeffs(theta)
    # V^-1 for V = [[a, -b], [b, a]]
    V_inv = np.array([[a, b], [-b, a]], dtype=float) / (a * a + b * b)
    v = V_inv @ T[:2, 2]
    return np.array([v[0], v[1], theta], dtype=float)


def se2_adjoint(T: np.ndarray) -> np.ndarray:
    """
    Adjoint of an SE(2) transform.

        Ad = [R  (t_y, -t_x)^T]
             [0        1      ]
    """
    T = _as_square(T, 3, "SE(2) matrix")
    Ad = np.eye(3, dtype=float)
    Ad[:2, :2] = T[:2, :2]
    Ad[0, 2] = T[1, 2]
    Ad[1, 2] = -T[0, 2]
    return Ad


# =============================================================================
# SO(3)
# =============================================================================


def skew(v: np.ndarray) -> np.ndarray:
    """Skew-symmetric matrix from 3-vector (hat operator)."""
    v = np.asarray(v, dtype=float).reshape(-1)
    return np.array([
        [0.0, -v[2], v[1]],
        [v[2], 0.0, -v[0]],
        [-v[1], v[0], 0.0]
    ], dtype=float)


def unskew(S: np.ndarray) -> np.ndarray:
    """Extract 3-vector from skew-symmetric matrix (vee operator)."""
    return np.array([S[2, 1], S[0, 2], S[1, 0]], dtype=float)


def so3_exp(omega: np.ndarray) -> np.ndarray:
    """
    Rotation vector to rotation matrix (Rodrigues).

        R = I + sin(theta) K + (1 - cos(theta)) K^2,  K = [omega / theta]_x
    """
    omega = _as_flat(omega, 3, "rotation vector")
    theta = float(np.linalg.norm(omega))

    if theta < ROTATION_EPSILON:
        # Second-order Taylor; error is O(theta^3)
        K = skew(omega)
        return np.eye(3, dtype=float) + K + 0.5 * (K @ K)

    K = skew(omega / theta)
    return np.eye(3, dtype=float) + math.sin(theta) * K + (1.0 - math.cos(theta)) * (K @ K)


def so3_log(R: np.ndarray) -> np.ndarray:
    """
    Rotation matrix to rotation vector, angle on the principal branch [0, pi].

    Handles three cases:
    1. theta ~ 0: vee of the skew-symmetric part
    2. theta ~ pi: axis from the symmetric part (skew part vanishes)
    3. Otherwise: theta / sin(theta) * vee(skew part)
    """
    R = _as_square(R, 3, "rotation matrix")
    cos_theta = float(np.clip((np.trace(R) - 1.0) / 2.0, -1.0, 1.0))
    theta = math.acos(cos_theta)
    skew_part = unskew((R - R.T) / 2.0)  # = sin(theta) * axis

    if theta < ROTATION_EPSILON:
        return skew_part

    if math.pi - theta < SINGULARITY_EPSILON:
        # (R + R^T) / 2 = cos(theta) I + (1 - cos(theta)) a a^T
        aaT = ((R + R.T) / 2.0 - cos_theta * np.eye(3)) / (1.0 - cos_theta)
        k = int(np.argmax(np.diag(aaT)))
        axis = aaT[:, k] / math.sqrt(max(aaT[k, k], 0.0))
        axis = axis / np.linalg.norm(axis)
        if float(axis @ skew_part) < 0.0:
            axis = -axis
        return axis * theta

    return skew_part * (theta / math.sin(theta))


def so3_left_jacobian(omega: np.ndarray) -> np.ndarray:
    """
    Left Jacobian of SO(3), the V matrix of the SE(3) exponential.

        J = I + (1 - cos(theta)) / theta^2 K + (theta - sin(theta)) / theta^3 K^2
    """
    omega = _as_flat(omega, 3, "rotation vector")
    theta = float(np.linalg.norm(omega))
    K = skew(omega)

    if theta < ROTATION_EPSILON:
        return np.eye(3, dtype=float) + 0.5 * K + (K @ K) / 6.0

    theta_sq = theta * theta
    return (
        np.eye(3, dtype=float)
        + ((1.0 - math.cos(theta)) / theta_sq) * K
        + ((theta - math.sin(theta)) / (theta_sq * theta)) * (K @ K)
    )


def so3_left_jacobian_inv(omega: np.ndarray) -> np.ndarray:
    """
    Inverse left Jacobian of SO(3), valid for theta in [0, pi].

        J^-1 = I - K / 2 + (1 / theta^2) (1 - theta sin(theta) / (2 (1 - cos(theta)))) K^2
    """
    omega = _as_flat(omega, 3, "rotation vector")
    theta = float(np.linalg.norm(omega))
    K = skew(omega)

    if theta < ROTATION_EPSILON:
        return np.eye(3, dtype=float) - 0.5 * K + (K @ K) / 12.0

    theta_sq = theta * theta
    coeff = (1.0 - (theta * math.sin(theta)) / (2.0 * (1.0 - math.cos(theta)))) / theta_sq
    return np.eye(3, dtype=float) - 0.5 * K + coeff * (K @ K)


def so3_project(M: np.ndarray) -> np.ndarray:
    """Nearest rotation matrix (Frobenius norm) via SVD, with det fixed to +1."""
    M = _as_square(M, 3, "matrix")
    U, _, Vt = np.linalg.svd(M)
    if np.linalg.det(U @ Vt) < 0.0:
        U[:, -1] = -U[:, -1]
    return U @ Vt


# =============================================================================
# Quaternion conversions, [w, x, y, z] order
# =============================================================================


def quat_to_rotmat(q: np.ndarray) -> np.ndarray:
    """Convert quaternion (w, x, y, z) to rotation matrix. Input is normalized."""
    q = _as_flat(q, 4, "quaternion")
    norm = float(np.linalg.norm(q))
    if norm < 1e-10:
        raise ValueError("Quaternion norm is too small (near zero)")
    w, x, y, z = q / norm

    return np.array([
        [1 - 2*(y*y + z*z), 2*(x*y - z*w), 2*(x*z + y*w)],
        [2*(x*y + z*w), 1 - 2*(x*x + z*z), 2*(y*z - x*w)],
        [2*(x*z - y*w), 2*(y*z + x*w), 1 - 2*(x*x + y*y)]
    ], dtype=float)


def rotmat_to_quat(R: np.ndarray) -> np.ndarray:
    """
    Convert rotation matrix to quaternion (w, x, y, z) with w >= 0.

    Uses Shepperd's method for numerical stability.
    """
    R = _as_square(R, 3, "rotation matrix")
    trace = np.trace(R)

    if trace > 0:
        s = math.sqrt(trace + 1.0) * 2  # s = 4 * qw
        w = 0.25 * s
        x = (R[2, 1] - R[1, 2]) / s
        y = (R[0, 2] - R[2, 0]) / s
        z = (R[1, 0] - R[0, 1]) / s
    elif (R[0, 0] > R[1, 1]) and (R[0, 0] > R[2, 2]):
        s = math.sqrt(1.0 + R[0, 0] - R[1, 1] - R[2, 2]) * 2
        w = (R[2, 1] - R[1, 2]) / s
        x = 0.25 * s
        y = (R[0, 1] + R[1, 0]) / s
        z = (R[0, 2] + R[2, 0]) / s
    elif R[1, 1] > R[2, 2]:
        s = math.sqrt(1.0 + R[1, 1] - R[0, 0] - R[2, 2]) * 2
        w = (R[0, 2] - R[2, 0]) / s
        x = (R[0, 1] + R[1, 0]) / s
        y = 0.25 * s
        z = (R[1, 2] + R[2, 1]) / s
    else:
        s = math.sqrt(1.0 + R[2, 2] - R[0, 0] - R[1, 1]) * 2
        w = (R[1, 0] - R[0, 1]) / s
        x = (R[0, 2] + R[2, 0]) / s
        y = (R[1, 2] + R[2, 1]) / s
        z = 0.25 * s

    q = np.array([w, x, y, z], dtype=float)
    q /= np.linalg.norm(q)
    if q[0] < 0.0:
        q = -q
    return q


# =============================================================================
# SE(3)
# =============================================================================


def se3_exp(xi: np.ndarray) -> np.ndarray:
    """
    Exponential map se(3) -> SE(3).

    Args:
        xi: 6D twist (vx, vy, vz, wx, wy, wz)

    Returns:
        4x4 homogeneous transform
    """
    xi = _as_flat(xi, 6, "se(3) twist")
    v = xi[:3]
    omega = xi[3:6]

    T = np.eye(4, dtype=float)
    T[:3, :3] = so3_exp(omega)
    T[:3, 3] = so3_left_jacobian(omega) @ v
    return T


def se3_log(T: np.ndarray) -> np.ndarray:
    """
    Logarithmic map SE(3) -> se(3).

    Args:
        T: 4x4 homogeneous transform

    Returns:
        6D twist (vx, vy, vz, wx, wy, wz)
    """
    T = _as_square(T, 4, "SE(3) matrix")
    omega = so3_log(T[:3, :3])
    v = so3_left_jacobian_inv(omega) @ T[:3, 3]
    return np.concatenate([v, omega])


def se3_adjoint(T: np.ndarray) -> np.ndarray:
    """
    Adjoint of an SE(3) transform.

        Ad = [R  [t]_x R]
             [0     R   ]
    """
    T = _as_square(T, 4, "SE(3) matrix")
    R = T[:3, :3]
    t = T[:3, 3]

    Ad = np.zeros((6, 6), dtype=float)
    Ad[:3, :3] = R
    Ad[:3, 3:6] = skew(t) @ R
    Ad[3:6, 3:6] = R
    return Ad
