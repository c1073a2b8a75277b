"""
YAML node helpers for poses, orientations, positions and matrices.

Nodes are the plain dict/list trees produced by yaml.safe_load. Setters return
new nodes holding only builtin floats/ints so the result round-trips through
yaml.safe_dump.

Layouts:
    pose:        {position: {x, y, z}, orientation: {...}}
    orientation: {w, x, y, z} (quaternion) or {yaw, pitch, roll} (radians)
    matrix:      {rows, cols, data} with data row-major
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Tuple

import numpy as np
import yaml

from manifold_kf.common.errors import DimensionMismatch, MissingParameterError
from manifold_kf.common.geometry import (
    EulerAngles,
    PoseSE2,
    PoseSE3,
    euler_to_quaternion,
    se3_from_se2,
)

logger = logging.getLogger(__name__)

_QUAT_KEYS = ("w", "x", "y", "z")
_EULER_KEYS = ("yaw", "pitch", "roll")
_POSITION_KEYS = ("x", "y", "z")


# =============================================================================
# Generic fields
# =============================================================================


def _split_field(field: str):
    return [part for part in field.lstrip("~/").split("/") if part]


def try_yaml_field(node: Any, field: str) -> Tuple[bool, Any]:
    """
    Look up a slash-separated field in a nested node.

    Returns:
        (found, value); value is None when not found
    """
    current = node
    for part in _split_field(field):
        if not isinstance(current, dict) or part not in current:
            return False, None
        current = current[part]
    return True, current


def get_yaml_field(node: Any, field: str) -> Any:
    """Look up a slash-separated field; raises MissingParameterError if absent."""
    found, value = try_yaml_field(node, field)
    if not found:
        raise MissingParameterError(f"Could not retrieve field: {field}")
    return value


def copy_yaml(node: Any) -> Any:
    return copy.deepcopy(node)


def merge_yaml(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge two mapping nodes into a new node; override wins on conflicts."""
    result = copy.deepcopy(base) if base else {}
    for key, value in (override or {}).items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = merge_yaml(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def dump_yaml(node: Any) -> str:
    return yaml.safe_dump(node, default_flow_style=False, sort_keys=False)


def load_yaml(text: str) -> Any:
    return yaml.safe_load(text) or {}


def _fields_as_floats(node: Any, keys, what: str) -> np.ndarray:
    if not isinstance(node, dict):
        raise MissingParameterError(f"{what} node must be a mapping, got {type(node).__name__}")
    missing = [k for k in keys if k not in node]
    if missing:
        raise MissingParameterError(f"{what} node missing fields: {', '.join(missing)}")
    return np.array([float(node[k]) for k in keys], dtype=float)


# =============================================================================
# Position / orientation / pose
# =============================================================================


def set_position_yaml(translation) -> Dict[str, float]:
    t = np.asarray(translation, dtype=float).reshape(-1)
    if t.shape[0] != 3:
        raise DimensionMismatch(f"Expected 3D position, got {t.shape[0]} elements")
    return {k: float(v) for k, v in zip(_POSITION_KEYS, t)}


def get_position_yaml(node: Any) -> np.ndarray:
    return _fields_as_floats(node, _POSITION_KEYS, "Position")


def set_orientation_yaml(orientation) -> Dict[str, float]:
    """
    Orientation node from an EulerAngles value ({yaw, pitch, roll}) or a
    quaternion [w, x, y, z] ({w, x, y, z}).
    """
    if isinstance(orientation, EulerAngles):
        return {
            "yaw": float(orientation.yaw),
            "pitch": float(orientation.pitch),
            "roll": float(orientation.roll),
        }
    q = np.asarray(orientation, dtype=float).reshape(-1)
    if q.shape[0] != 4:
        raise DimensionMismatch(f"Expected 4-element quaternion, got {q.shape[0]}")
    return {k: float(v) for k, v in zip(_QUAT_KEYS, q)}


def get_orientation_yaml(node: Any) -> np.ndarray:
    """
    Parse an orientation node into a unit quaternion [w, x, y, z].

    Quaternion fields take precedence over Euler fields.
    """
    if isinstance(node, dict) and all(k in node for k in _QUAT_KEYS):
        q = _fields_as_floats(node, _QUAT_KEYS, "Orientation")
        norm = np.linalg.norm(q)
        if norm == 0.0:
            raise ValueError("Orientation quaternion has zero norm")
        return q / norm
    if isinstance(node, dict) and all(k in node for k in _EULER_KEYS):
        yaw, pitch, roll = _fields_as_floats(node, _EULER_KEYS, "Orientation")
        return euler_to_quaternion(EulerAngles(yaw=yaw, pitch=pitch, roll=roll))
    raise MissingParameterError(
        "Orientation node needs quaternion fields {w, x, y, z} or Euler fields {yaw, pitch, roll}"
    )


def set_pose_yaml(pose) -> Dict[str, Any]:
    """Pose node for a PoseSE3 (PoseSE2 values are lifted to the z = 0 plane)."""
    if isinstance(pose, PoseSE2):
        pose = se3_from_se2(pose)
    if not isinstance(pose, PoseSE3):
        raise TypeError(f"Expected PoseSE2 or PoseSE3, got {type(pose).__name__}")
    return {
        "position": set_position_yaml(pose.translation),
        "orientation": set_orientation_yaml(pose.quaternion),
    }


def get_pose_yaml(node: Any) -> PoseSE3:
    position = get_position_yaml(get_yaml_field(node, "position"))
    orientation = get_orientation_yaml(get_yaml_field(node, "orientation"))
    return PoseSE3.from_translation_quaternion(position, orientation)


# =============================================================================
# Matrices
# =============================================================================


def set_matrix_yaml(mat) -> Dict[str, Any]:
    mat = np.atleast_2d(np.asarray(mat, dtype=float))
    if mat.ndim != 2:
        raise DimensionMismatch(f"Expected 2D matrix, got shape {mat.shape}")
    rows, cols = mat.shape
    return {"rows": int(rows), "cols": int(cols), "data": [float(v) for v in mat.reshape(-1)]}


def get_matrix_yaml(node: Any, shape: Tuple[int, int] | None = None) -> np.ndarray:
    """
    Parse a {rows, cols, data} node.

    Args:
        node: Matrix node
        shape: Optional required shape; DimensionMismatch if it differs
    """
    rows = int(get_yaml_field(node, "rows"))
    cols = int(get_yaml_field(node, "cols"))
    data = get_yaml_field(node, "data")
    values = np.asarray(data, dtype=float).reshape(-1)
    if values.shape[0] != rows * cols:
        raise DimensionMismatch(
            f"Matrix node declares {rows}x{cols} but holds {values.shape[0]} values"
        )
    mat = values.reshape(rows, cols)
    if shape is not None and mat.shape != tuple(shape):
        raise DimensionMismatch(f"Expected {tuple(shape)} matrix, got {mat.shape}")
    return mat
