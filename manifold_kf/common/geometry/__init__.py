"""
Geometry package for manifold_kf.

SE(2) and SE(3) pose values built on NumPy Lie group primitives.

Modules:
- lie_numpy: Exp/Log/Adjoint and rotation conversions on homogeneous matrices
- pose_se2: PoseSE2 (planar, tangent dimension 3)
- pose_se3: PoseSE3 (spatial, tangent dimension 6)
- conversions: SE(2) <-> SE(3) projection and lifting
- euler: yaw-pitch-roll helpers

Usage:
    from manifold_kf.common.geometry import PoseSE3

    pose = PoseSE3.exp([0.1, 0.0, 0.0, 0.0, 0.0, 0.2])
    twist = (pose.inverse() * pose).log()
"""

from __future__ import annotations

from manifold_kf.common.geometry.lie_numpy import (
    wrap_angle,
    skew,
    unskew,
    so3_exp,
    so3_log,
    quat_to_rotmat,
    rotmat_to_quat,
    se2_exp,
    se2_log,
    se2_adjoint,
    se3_exp,
    se3_log,
    se3_adjoint,
)
from manifold_kf.common.geometry.pose_se2 import PoseSE2
from manifold_kf.common.geometry.pose_se3 import PoseSE3
from manifold_kf.common.geometry.conversions import se2_from_se3, se3_from_se2
from manifold_kf.common.geometry.euler import (
    EulerAngles,
    quaternion_to_euler,
    euler_to_quaternion,
)

__all__ = [
    # Primitives
    "wrap_angle",
    "skew",
    "unskew",
    "so3_exp",
    "so3_log",
    "quat_to_rotmat",
    "rotmat_to_quat",
    "se2_exp",
    "se2_log",
    "se2_adjoint",
    "se3_exp",
    "se3_log",
    "se3_adjoint",
    # Pose values
    "PoseSE2",
    "PoseSE3",
    "se2_from_se3",
    "se3_from_se2",
    # Euler
    "EulerAngles",
    "quaternion_to_euler",
    "euler_to_quaternion",
]
