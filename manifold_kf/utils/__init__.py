"""
Utility modules for manifold_kf.

Configuration plumbing only: parameter lookup and YAML node conversion.
"""

from manifold_kf.utils.param_utils import (
    get_param,
    get_param_required,
    get_param_default,
    get_uint_param,
    get_matrix_param,
    get_diagonal_param,
    get_pose_param,
)
from manifold_kf.utils.yaml_utils import (
    get_yaml_field,
    try_yaml_field,
    copy_yaml,
    merge_yaml,
    set_pose_yaml,
    get_pose_yaml,
    set_orientation_yaml,
    get_orientation_yaml,
    set_position_yaml,
    get_position_yaml,
    set_matrix_yaml,
    get_matrix_yaml,
    dump_yaml,
    load_yaml,
)

__all__ = [
    "get_param",
    "get_param_required",
    "get_param_default",
    "get_uint_param",
    "get_matrix_param",
    "get_diagonal_param",
    "get_pose_param",
    "get_yaml_field",
    "try_yaml_field",
    "copy_yaml",
    "merge_yaml",
    "set_pose_yaml",
    "get_pose_yaml",
    "set_orientation_yaml",
    "get_orientation_yaml",
    "set_position_yaml",
    "get_position_yaml",
    "set_matrix_yaml",
    "get_matrix_yaml",
    "dump_yaml",
    "load_yaml",
]
