import os
from pathlib import Path
from typing import Any, Dict

import numpy as np
import pytest

from manifold_kf.common.geometry import PoseSE2, PoseSE3

# =============================================================================
# Config Fixtures
# =============================================================================
# These fixtures point at the configuration files shipped with the package,
# so tests validate the same defaults a user gets.


def _config_dir() -> Path:
    test_dir = os.path.dirname(__file__)
    pkg_root = os.path.dirname(test_dir)
    return Path(pkg_root) / "config"


@pytest.fixture
def base_config_path() -> Path:
    """Path to config/manifold_kf_base.yaml."""
    path = _config_dir() / "manifold_kf_base.yaml"
    if not path.exists():
        pytest.skip("manifold_kf_base.yaml not found")
    return path


@pytest.fixture
def preset_dir() -> Path:
    """Directory holding config/presets/*.yaml."""
    path = _config_dir() / "presets"
    if not path.exists():
        pytest.skip("config/presets not found")
    return path


@pytest.fixture
def sample_params() -> Dict[str, Any]:
    """Nested parameter tree as loaded from YAML."""
    return {
        "filter": {
            "num_derivs": 2,
            "negative": -3,
            "flag": True,
            "noise": [1.0, 2.0, 3.0, 4.0],
            "noise_node": {"rows": 2, "cols": 2, "data": [1.0, 0.0, 0.0, 2.0]},
            "diag": [0.1, 0.2, 0.3],
            "initial_pose": {
                "position": {"x": 1.0, "y": 2.0, "z": 3.0},
                "orientation": {"yaw": 0.5, "pitch": 0.0, "roll": 0.0},
            },
        },
        "name": "kf",
    }


# =============================================================================
# Test Utility Fixtures
# =============================================================================


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


@pytest.fixture
def random_se2(rng) -> PoseSE2:
    """A random planar pose away from the angle wrap."""
    x, y = rng.normal(size=2)
    theta = rng.uniform(-2.5, 2.5)
    return PoseSE2(x, y, theta)


@pytest.fixture
def random_se3(rng) -> PoseSE3:
    """A random spatial pose with rotation angle well below pi."""
    tangent = np.concatenate([rng.normal(size=3), rng.normal(size=3) * 0.5])
    return PoseSE3.exp(tangent)


@pytest.fixture
def random_spd(rng):
    """Factory for random symmetric positive-definite matrices."""

    def _make(dim: int, scale: float = 1.0) -> np.ndarray:
        A = rng.normal(size=(dim, dim))
        return scale * (A @ A.T / dim + np.eye(dim))

    return _make
