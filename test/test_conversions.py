"""Tests for SE(2) <-> SE(3) conversion and yaw-pitch-roll helpers."""

import math

import numpy as np
import pytest

from manifold_kf.common.errors import DimensionMismatch
from manifold_kf.common.geometry import (
    EulerAngles,
    PoseSE2,
    PoseSE3,
    euler_to_quaternion,
    quaternion_to_euler,
    se2_from_se3,
    se3_from_se2,
)


class TestPlanarSpatial:
    """Projection and lifting between planar and spatial poses."""

    def test_lift_places_pose_in_plane(self):
        pose = se3_from_se2(PoseSE2(1.0, 2.0, 0.3))
        assert np.allclose(pose.translation, [1.0, 2.0, 0.0])
        eul = quaternion_to_euler(pose.quaternion)
        assert eul.yaw == pytest.approx(0.3)
        assert eul.pitch == pytest.approx(0.0, abs=1e-12)
        assert eul.roll == pytest.approx(0.0, abs=1e-12)

    def test_lift_then_project_is_identity(self, random_se2):
        assert se2_from_se3(se3_from_se2(random_se2)).allclose(random_se2)

    def test_project_drops_height(self):
        pose = PoseSE3.from_translation_quaternion(
            [1.0, -1.0, 5.0], euler_to_quaternion(EulerAngles(yaw=0.4))
        )
        planar = se2_from_se3(pose)
        assert np.allclose(planar.to_vector(), [1.0, -1.0, 0.4])


class TestEuler:
    """Intrinsic Z-Y-X Euler angles."""

    def test_yaw_only(self):
        q = euler_to_quaternion(EulerAngles(yaw=0.3, pitch=0.0, roll=0.0))
        assert np.allclose(q, [math.cos(0.15), 0.0, 0.0, math.sin(0.15)])

    def test_round_trip(self):
        eul = EulerAngles(yaw=-1.2, pitch=0.4, roll=2.0)
        back = quaternion_to_euler(euler_to_quaternion(eul))
        assert back.yaw == pytest.approx(eul.yaw)
        assert back.pitch == pytest.approx(eul.pitch)
        assert back.roll == pytest.approx(eul.roll)

    def test_quaternion_has_nonnegative_w(self):
        q = euler_to_quaternion(EulerAngles(yaw=3.0, pitch=0.0, roll=0.0))
        assert q[0] >= 0.0

    def test_str(self):
        assert str(EulerAngles(1.0, 2.0, 3.0)) == "Y: 1.0 P: 2.0 R: 3.0"

    def test_bad_quaternion(self):
        with pytest.raises(DimensionMismatch):
            quaternion_to_euler([1.0, 0.0, 0.0])
