"""
Filter configuration hooks.

Provides utilities for loading, validating, and instantiating filter
configuration from YAML files.

This module bridges:
1. YAML configuration files (config/manifold_kf_base.yaml, config/presets/*.yaml)
2. Pydantic validation models (common/param_models.py)
3. DerivativePoseFilter construction

Usage:
    from manifold_kf.config import load_filter_config, build_filter

    params = load_filter_config(base_path, get_preset_path("planar"))
    kf = build_filter(params)
    kf.predict(process_noise(params), params.default_dt)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np
import yaml
from pydantic import ValidationError

from manifold_kf.common import constants
from manifold_kf.common.geometry import PoseSE2, PoseSE3
from manifold_kf.common.param_models import FilterParams
from manifold_kf.common.tangent import integral_matrix_func
from manifold_kf.filters import DerivativePoseFilter

logger = logging.getLogger(__name__)

POSE_TYPES = {"se2": PoseSE2, "se3": PoseSE3}


def load_yaml_config(config_path: str | Path) -> Dict[str, Any]:
    """
    Load YAML configuration file.

    Args:
        config_path: Path to YAML file

    Returns:
        Dictionary with configuration values

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.debug("Loading filter config from %s", config_path)
    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}


def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge multiple configuration dictionaries (later configs override earlier).

    Args:
        configs: Variable number of config dicts to merge

    Returns:
        Merged configuration dictionary
    """
    result: Dict[str, Any] = {}
    for config in configs:
        if config:
            _deep_merge(result, config)
    return result


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """Deep merge override dict into base dict (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def load_filter_config(
    base_path: Optional[str | Path] = None,
    preset_path: Optional[str | Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
    section: str = constants.CONFIG_SECTION_DEFAULT,
) -> FilterParams:
    """
    Load and validate filter configuration from YAML files.

    Args:
        base_path: Path to base configuration YAML (manifold_kf_base.yaml)
        preset_path: Optional path to preset override YAML (e.g., presets/planar.yaml)
        overrides: Optional dictionary of parameter overrides
        section: Top-level YAML key holding the filter parameters

    Returns:
        Validated FilterParams model

    Raises:
        ValidationError: If configuration is invalid
    """
    base_config: Dict[str, Any] = {}
    if base_path:
        base_config = load_yaml_config(base_path).get(section, {}) or {}

    preset_config: Dict[str, Any] = {}
    if preset_path:
        preset_config = load_yaml_config(preset_path).get(section, {}) or {}

    # base <- preset <- overrides
    merged = merge_configs(base_config, preset_config, overrides or {})

    try:
        return FilterParams(**merged)
    except ValidationError as exc:
        logger.error("Invalid filter parameters: %s", exc)
        raise


def get_default_config_paths() -> tuple[Path, Path]:
    """
    Get default paths to configuration files relative to package.

    Returns:
        Tuple of (base_config_path, presets_dir_path)
    """
    pkg_root = Path(__file__).parent.parent
    base_config = pkg_root / "config" / "manifold_kf_base.yaml"
    presets_dir = pkg_root / "config" / "presets"
    return base_config, presets_dir


def get_preset_path(preset_name: str) -> Optional[Path]:
    """
    Get path to a preset configuration file.

    Args:
        preset_name: Name of preset (e.g., "planar")

    Returns:
        Path to preset file, or None if not found
    """
    _, presets_dir = get_default_config_paths()
    preset_path = presets_dir / f"{preset_name}.yaml"
    if not preset_path.exists():
        logger.warning("Preset '%s' not found in %s", preset_name, presets_dir)
        return None
    return preset_path


def process_noise(params: FilterParams) -> np.ndarray:
    """Full-size diagonal process noise; zeros when not configured."""
    if params.process_noise_diag is None:
        return np.zeros((params.cov_dim, params.cov_dim))
    return np.diag(np.asarray(params.process_noise_diag, dtype=float))


def build_filter(params: FilterParams) -> DerivativePoseFilter:
    """Instantiate a DerivativePoseFilter from validated parameters."""
    pose_type = POSE_TYPES[params.pose_type]
    pose = None
    if params.initial_pose is not None:
        pose = pose_type.from_vector(params.initial_pose)
    cov = None
    if params.initial_cov_diag is not None:
        cov = np.diag(np.asarray(params.initial_cov_diag, dtype=float))

    kf = DerivativePoseFilter(
        pose=pose,
        derivs=params.initial_derivs,
        cov=cov,
        num_derivs=params.num_derivs,
        pose_type=pose_type,
    )
    kf.transition_func = integral_matrix_func(
        kf.tangent_dim, kf.num_derivs, params.transition_order
    )
    logger.debug(
        "Built %s filter with %d derivative(s), transition order %d",
        params.pose_type, params.num_derivs, params.transition_order,
    )
    return kf
