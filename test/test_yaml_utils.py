"""Tests for YAML node helpers."""

import math

import numpy as np
import pytest

from manifold_kf.common.errors import DimensionMismatch, MissingParameterError
from manifold_kf.common.geometry import EulerAngles, PoseSE2, PoseSE3
from manifold_kf.utils.yaml_utils import (
    copy_yaml,
    dump_yaml,
    get_matrix_yaml,
    get_orientation_yaml,
    get_pose_yaml,
    get_position_yaml,
    get_yaml_field,
    load_yaml,
    merge_yaml,
    set_matrix_yaml,
    set_orientation_yaml,
    set_pose_yaml,
    set_position_yaml,
    try_yaml_field,
)


class TestFields:
    """Generic field access and merging."""

    def test_get_and_try(self):
        node = {"a": {"b": {"c": 3}}}
        assert get_yaml_field(node, "a/b/c") == 3
        assert try_yaml_field(node, "a/x") == (False, None)
        with pytest.raises(MissingParameterError):
            get_yaml_field(node, "a/b/d")

    def test_copy_is_deep(self):
        node = {"a": {"b": [1, 2]}}
        dup = copy_yaml(node)
        dup["a"]["b"].append(3)
        assert node == {"a": {"b": [1, 2]}}

    def test_merge_does_not_mutate(self):
        base = {"a": {"b": 1, "c": 2}}
        override = {"a": {"c": 3}, "d": 4}
        merged = merge_yaml(base, override)
        assert merged == {"a": {"b": 1, "c": 3}, "d": 4}
        assert base == {"a": {"b": 1, "c": 2}}


class TestPose:
    """Pose, position and orientation nodes."""

    def test_pose_round_trip_through_text(self, random_se3):
        text = dump_yaml(set_pose_yaml(random_se3))
        assert get_pose_yaml(load_yaml(text)).allclose(random_se3, atol=1e-12)

    def test_planar_pose_is_lifted(self):
        node = set_pose_yaml(PoseSE2(1.0, 2.0, math.pi / 2))
        assert node["position"] == {"x": 1.0, "y": 2.0, "z": 0.0}
        assert node["orientation"]["w"] == pytest.approx(math.cos(math.pi / 4))
        assert node["orientation"]["z"] == pytest.approx(math.sin(math.pi / 4))

    def test_pose_rejects_other_types(self):
        with pytest.raises(TypeError):
            set_pose_yaml(np.eye(4))

    def test_position(self):
        assert np.allclose(get_position_yaml(set_position_yaml([1, 2, 3])), [1, 2, 3])
        with pytest.raises(MissingParameterError):
            get_position_yaml({"x": 1.0, "y": 2.0})
        with pytest.raises(DimensionMismatch):
            set_position_yaml([1.0, 2.0])

    def test_euler_orientation(self):
        node = set_orientation_yaml(EulerAngles(yaw=0.3))
        assert node == {"yaw": 0.3, "pitch": 0.0, "roll": 0.0}
        q = get_orientation_yaml(node)
        assert np.allclose(q, [math.cos(0.15), 0.0, 0.0, math.sin(0.15)])

    def test_quaternion_normalized(self):
        q = get_orientation_yaml({"w": 2.0, "x": 0.0, "y": 0.0, "z": 0.0})
        assert np.allclose(q, [1.0, 0.0, 0.0, 0.0])

    def test_orientation_missing_fields(self):
        with pytest.raises(MissingParameterError):
            get_orientation_yaml({"w": 1.0, "yaw": 0.0})

    def test_pose_from_text(self):
        text = """
position: {x: 1.0, y: 0.0, z: 0.5}
orientation: {yaw: 0.0, pitch: 0.0, roll: 0.0}
"""
        pose = get_pose_yaml(load_yaml(text))
        assert pose.allclose(PoseSE3(1.0, 0.0, 0.5))


class TestMatrix:
    """Matrix nodes."""

    def test_round_trip(self):
        mat = np.arange(6, dtype=float).reshape(2, 3)
        node = set_matrix_yaml(mat)
        assert node == {"rows": 2, "cols": 3, "data": [0.0, 1.0, 2.0, 3.0, 4.0, 5.0]}
        assert np.allclose(get_matrix_yaml(load_yaml(dump_yaml(node))), mat)

    def test_inconsistent_node(self):
        with pytest.raises(DimensionMismatch):
            get_matrix_yaml({"rows": 2, "cols": 2, "data": [1.0, 2.0, 3.0]})

    def test_required_shape(self):
        node = set_matrix_yaml(np.eye(3))
        with pytest.raises(DimensionMismatch):
            get_matrix_yaml(node, (2, 2))
