"""
Yaw-pitch-roll Euler angles and quaternion conversion.

Intrinsic Z-Y-X order (yaw about z, then pitch about the new y, then roll about
the new x). Quaternions are [w, x, y, z].
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from scipy.spatial.transform import Rotation

from manifold_kf.common.errors import DimensionMismatch


@dataclass(frozen=True)
class EulerAngles:
    yaw: float = 0.0
    pitch: float = 0.0
    roll: float = 0.0

    def __str__(self) -> str:
        return f"Y: {self.yaw} P: {self.pitch} R: {self.roll}"


def quaternion_to_euler(quat) -> EulerAngles:
    """Convert quaternion [w, x, y, z] to yaw-pitch-roll."""
    q = np.asarray(quat, dtype=float).reshape(-1)
    if q.shape[0] != 4:
        raise DimensionMismatch(f"Expected 4-element quaternion, got {q.shape[0]}")
    # scipy uses scalar-last
    rot = Rotation.from_quat([q[1], q[2], q[3], q[0]])
    yaw, pitch, roll = rot.as_euler("ZYX")
    return EulerAngles(yaw=float(yaw), pitch=float(pitch), roll=float(roll))


def euler_to_quaternion(eul: EulerAngles) -> np.ndarray:
    """Convert yaw-pitch-roll to quaternion [w, x, y, z] with w >= 0."""
    x, y, z, w = Rotation.from_euler("ZYX", [eul.yaw, eul.pitch, eul.roll]).as_quat()
    q = np.array([w, x, y, z], dtype=float)
    if q[0] < 0.0:
        q = -q
    return q
