"""
Tests for filter configuration loading.

Uses the YAML files shipped under config/ so the defaults users get are the
defaults under test.
"""

import numpy as np
import pytest
from pydantic import ValidationError

from manifold_kf.common.geometry import PoseSE2, PoseSE3
from manifold_kf.common.param_models import FilterParams
from manifold_kf.config import (
    build_filter,
    get_default_config_paths,
    get_preset_path,
    load_filter_config,
    load_yaml_config,
    merge_configs,
    process_noise,
)


class TestFilterParams:
    """Pydantic validation of FilterParams."""

    def test_defaults(self):
        params = FilterParams()
        assert params.pose_type == "se3"
        assert params.num_derivs == 1
        assert params.transition_order == -1
        assert params.cov_dim == 12

    def test_rejects_unknown_keys(self):
        with pytest.raises(ValidationError):
            FilterParams(unknown_key=1)

    def test_rejects_bad_values(self):
        with pytest.raises(ValidationError):
            FilterParams(pose_type="so3")
        with pytest.raises(ValidationError):
            FilterParams(num_derivs=0)
        with pytest.raises(ValidationError):
            FilterParams(default_dt=0.0)
        with pytest.raises(ValidationError):
            FilterParams(transition_order=-2)

    def test_length_validation(self):
        with pytest.raises(ValidationError):
            FilterParams(pose_type="se2", initial_pose=[0.0] * 7)
        with pytest.raises(ValidationError):
            FilterParams(pose_type="se2", num_derivs=2, process_noise_diag=[0.1] * 6)
        with pytest.raises(ValidationError):
            FilterParams(pose_type="se2", initial_cov_diag=[-1.0] + [1.0] * 5)
        params = FilterParams(pose_type="se2", num_derivs=2, process_noise_diag=[0.1] * 9)
        assert params.cov_dim == 9

    def test_validate_assignment(self):
        params = FilterParams()
        with pytest.raises(ValidationError):
            params.num_derivs = 0


class TestLoading:
    """YAML loading and merging."""

    def test_merge_configs_deep(self):
        merged = merge_configs(
            {"a": {"b": 1, "c": 2}, "d": 3},
            {"a": {"c": 20}},
            None,
            {"d": 30},
        )
        assert merged == {"a": {"b": 1, "c": 20}, "d": 30}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_yaml_config(tmp_path / "missing.yaml")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_yaml_config(path) == {}

    def test_base_config(self, base_config_path):
        params = load_filter_config(base_config_path)
        assert params.pose_type == "se3"
        assert len(params.process_noise_diag) == params.cov_dim

    def test_planar_preset(self, base_config_path, preset_dir):
        params = load_filter_config(base_config_path, preset_dir / "planar.yaml")
        assert params.pose_type == "se2"
        assert params.default_dt == pytest.approx(0.05)
        assert params.initial_pose == [0.0, 0.0, 0.0]

    def test_spatial_accel_preset(self, base_config_path, preset_dir):
        params = load_filter_config(base_config_path, preset_dir / "spatial_accel.yaml")
        assert params.num_derivs == 2
        assert params.cov_dim == 18

    def test_overrides_win(self, base_config_path, preset_dir):
        params = load_filter_config(
            base_config_path, preset_dir / "planar.yaml", overrides={"default_dt": 0.2}
        )
        assert params.default_dt == pytest.approx(0.2)

    def test_invalid_override(self, base_config_path):
        with pytest.raises(ValidationError):
            load_filter_config(base_config_path, overrides={"num_derivs": 3})

    def test_custom_section(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text("my_filter:\n  pose_type: se2\n")
        params = load_filter_config(path, section="my_filter")
        assert params.pose_type == "se2"

    def test_default_paths(self):
        base, presets = get_default_config_paths()
        assert base.name == "manifold_kf_base.yaml"
        assert presets.name == "presets"
        assert get_preset_path("planar") == presets / "planar.yaml"
        assert get_preset_path("does_not_exist") is None


class TestBuildFilter:
    """Filter instantiation from parameters."""

    def test_planar(self):
        params = FilterParams(
            pose_type="se2",
            initial_pose=[1.0, 2.0, 0.5],
            initial_derivs=[0.1, 0.0, 0.0],
            initial_cov_diag=[1.0, 2.0, 3.0, 4.0, 5.0, 6.0],
        )
        kf = build_filter(params)
        assert kf.pose_type is PoseSE2
        assert kf.pose.allclose(PoseSE2(1.0, 2.0, 0.5))
        assert np.allclose(kf.derivs, [0.1, 0.0, 0.0])
        assert np.allclose(kf.full_cov, np.diag([1.0, 2.0, 3.0, 4.0, 5.0, 6.0]))

    def test_defaults(self):
        kf = build_filter(FilterParams())
        assert kf.pose_type is PoseSE3
        assert np.allclose(kf.full_cov, np.eye(12))

    def test_transition_order(self):
        kf = build_filter(FilterParams(pose_type="se2", num_derivs=2, transition_order=0))
        assert np.allclose(kf.transition_func(1.0), np.eye(9))

    def test_process_noise(self):
        params = FilterParams(pose_type="se2", process_noise_diag=[1.0] * 6)
        assert np.allclose(process_noise(params), np.eye(6))
        assert np.allclose(process_noise(FilterParams()), np.zeros((12, 12)))

    def test_predict_with_config(self, base_config_path, preset_dir):
        params = load_filter_config(base_config_path, preset_dir / "planar.yaml")
        kf = build_filter(params)
        kf.derivs = [1.0, 0.0, 0.0]
        kf.predict(process_noise(params), params.default_dt)
        assert np.allclose(kf.pose.to_vector(), [params.default_dt, 0.0, 0.0])
