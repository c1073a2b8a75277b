"""
Parameter retrieval from nested configuration mappings.

Names are slash-separated paths ("filter/process_noise"); a leading "~" or "/"
is ignored so names written for a private or global namespace resolve against
the same mapping.

Missing optional parameters are logged at WARNING. Falling back to a default
is logged at ERROR so it shows up next to the value that was expected.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Tuple

import numpy as np

from manifold_kf.common.errors import DimensionMismatch, MissingParameterError
from manifold_kf.common.geometry import PoseSE3
from manifold_kf.utils.yaml_utils import get_matrix_yaml, get_pose_yaml, try_yaml_field

logger = logging.getLogger(__name__)

_NO_DEFAULT = object()


def get_param(params: Mapping[str, Any], name: str) -> Tuple[bool, Any]:
    """
    Retrieve a parameter.

    Returns:
        (found, value); value is None when not found
    """
    found, value = try_yaml_field(params, name)
    if not found:
        logger.warning("Could not retrieve parameter: %s", name)
    return found, value


def get_param_required(params: Mapping[str, Any], name: str) -> Any:
    found, value = get_param(params, name)
    if not found:
        raise MissingParameterError(f"Could not retrieve required parameter: {name}")
    return value


def get_param_default(params: Mapping[str, Any], name: str, default: Any) -> Any:
    found, value = try_yaml_field(params, name)
    if not found:
        logger.error("Could not retrieve parameter: %s. Using default value: %s", name, default)
        return default
    return value


def get_uint_param(params: Mapping[str, Any], name: str, default: Any = _NO_DEFAULT) -> int:
    """
    Retrieve a non-negative integer parameter.

    Without a default, a missing value raises MissingParameterError and an
    invalid one raises ValueError. With a default, both fall back to it.
    """
    found, value = try_yaml_field(params, name)
    valid = (
        found
        and isinstance(value, (int, np.integer))
        and not isinstance(value, bool)
        and value >= 0
    )
    if valid:
        return int(value)

    if default is not _NO_DEFAULT:
        logger.error(
            "Parameter %s is %s. Using default value: %s",
            name, "missing" if not found else f"not an unsigned int ({value!r})", default,
        )
        return default
    if not found:
        raise MissingParameterError(f"Could not retrieve required parameter: {name}")
    raise ValueError(f"Parameter {name} must be a non-negative integer, got {value!r}")


def get_matrix_param(params: Mapping[str, Any], name: str, shape: Tuple[int, int]) -> np.ndarray:
    """
    Retrieve a matrix given either as a flat row-major list or as a
    {rows, cols, data} node.

    Raises:
        MissingParameterError: parameter absent
        DimensionMismatch: values cannot fill the requested shape
    """
    value = get_param_required(params, name)
    if isinstance(value, dict):
        return get_matrix_yaml(value, shape)

    values = np.asarray(value, dtype=float).reshape(-1)
    rows, cols = shape
    if values.shape[0] != rows * cols:
        logger.error(
            "Could not parse values from %s into %d by %d matrix.", name, rows, cols
        )
        raise DimensionMismatch(
            f"Parameter {name} has {values.shape[0]} values, expected {rows * cols}"
        )
    return values.reshape(rows, cols)


def get_diagonal_param(params: Mapping[str, Any], name: str, dim: int) -> np.ndarray:
    """Retrieve a list of dim values as a dim x dim diagonal matrix."""
    values = np.asarray(get_param_required(params, name), dtype=float).reshape(-1)
    if values.shape[0] != dim:
        raise DimensionMismatch(
            f"Parameter {name} has {values.shape[0]} diagonal values, expected {dim}"
        )
    return np.diag(values)


def get_pose_param(params: Mapping[str, Any], name: str) -> PoseSE3:
    """Retrieve a {position, orientation} pose node."""
    return get_pose_yaml(get_param_required(params, name))
