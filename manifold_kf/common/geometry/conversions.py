"""
Cross-conversion between planar and spatial poses.

Projection keeps x, y and the upper-left 2x2 rotation block of the spatial
transform (re-projected to SO(2)); everything out of plane is dropped. Lifting
places the planar pose at z = 0 with zero roll and pitch.
"""

from __future__ import annotations

import numpy as np

from manifold_kf.common.geometry.pose_se2 import PoseSE2
from manifold_kf.common.geometry.pose_se3 import PoseSE3


def se2_from_se3(pose: PoseSE3) -> PoseSE2:
    """Project a spatial pose onto the ground plane."""
    H = pose.to_matrix()
    H2 = np.eye(3, dtype=float)
    H2[:2, :2] = H[:2, :2]
    H2[:2, 2] = H[:2, 3]
    return PoseSE2.from_matrix(H2)


def se3_from_se2(pose: PoseSE2) -> PoseSE3:
    """Lift a planar pose into SE(3) at zero height, roll and pitch."""
    H2 = pose.to_matrix()
    H = np.eye(4, dtype=float)
    H[:2, :2] = H2[:2, :2]
    H[:2, 3] = H2[:2, 2]
    return PoseSE3.from_matrix(H)
