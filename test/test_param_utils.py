"""Tests for parameter retrieval from nested mappings."""

import logging

import numpy as np
import pytest

from manifold_kf.common.errors import DimensionMismatch, MissingParameterError
from manifold_kf.utils.param_utils import (
    get_diagonal_param,
    get_matrix_param,
    get_param,
    get_param_default,
    get_param_required,
    get_pose_param,
    get_uint_param,
)


class TestGetParam:
    """Basic lookup."""

    def test_nested_lookup(self, sample_params):
        assert get_param(sample_params, "filter/num_derivs") == (True, 2)
        assert get_param(sample_params, "name") == (True, "kf")

    def test_namespace_prefix_ignored(self, sample_params):
        assert get_param(sample_params, "~filter/num_derivs") == (True, 2)
        assert get_param(sample_params, "/filter/num_derivs") == (True, 2)

    def test_missing_warns(self, sample_params, caplog):
        with caplog.at_level(logging.WARNING):
            found, value = get_param(sample_params, "filter/missing")
        assert not found
        assert value is None
        assert "filter/missing" in caplog.text

    def test_required(self, sample_params):
        assert get_param_required(sample_params, "filter/diag") == [0.1, 0.2, 0.3]
        with pytest.raises(MissingParameterError):
            get_param_required(sample_params, "filter/missing")

    def test_missing_required_is_key_error(self, sample_params):
        with pytest.raises(KeyError):
            get_param_required(sample_params, "nope")

    def test_default(self, sample_params, caplog):
        assert get_param_default(sample_params, "filter/num_derivs", 5) == 2
        with caplog.at_level(logging.ERROR):
            assert get_param_default(sample_params, "filter/missing", 5) == 5
        assert "Using default value: 5" in caplog.text


class TestUintParam:
    """Unsigned integer validation."""

    def test_valid(self, sample_params):
        assert get_uint_param(sample_params, "filter/num_derivs") == 2

    def test_negative(self, sample_params):
        with pytest.raises(ValueError):
            get_uint_param(sample_params, "filter/negative")
        assert get_uint_param(sample_params, "filter/negative", default=1) == 1

    def test_bool_is_not_int(self, sample_params):
        with pytest.raises(ValueError):
            get_uint_param(sample_params, "filter/flag")

    def test_missing(self, sample_params):
        with pytest.raises(MissingParameterError):
            get_uint_param(sample_params, "filter/missing")
        assert get_uint_param(sample_params, "filter/missing", default=0) == 0


class TestMatrixParams:
    """Matrix, diagonal and pose parameters."""

    def test_flat_matrix(self, sample_params):
        mat = get_matrix_param(sample_params, "filter/noise", (2, 2))
        assert np.allclose(mat, [[1.0, 2.0], [3.0, 4.0]])

    def test_matrix_node(self, sample_params):
        mat = get_matrix_param(sample_params, "filter/noise_node", (2, 2))
        assert np.allclose(mat, np.diag([1.0, 2.0]))

    def test_matrix_wrong_shape(self, sample_params):
        with pytest.raises(DimensionMismatch):
            get_matrix_param(sample_params, "filter/noise", (3, 3))
        with pytest.raises(DimensionMismatch):
            get_matrix_param(sample_params, "filter/noise_node", (1, 4))

    def test_diagonal(self, sample_params):
        assert np.allclose(get_diagonal_param(sample_params, "filter/diag", 3), np.diag([0.1, 0.2, 0.3]))
        with pytest.raises(DimensionMismatch):
            get_diagonal_param(sample_params, "filter/diag", 4)

    def test_pose(self, sample_params):
        pose = get_pose_param(sample_params, "filter/initial_pose")
        assert np.allclose(pose.translation, [1.0, 2.0, 3.0])
        yaw = 2.0 * np.arctan2(pose.quaternion[3], pose.quaternion[0])
        assert yaw == pytest.approx(0.5)
