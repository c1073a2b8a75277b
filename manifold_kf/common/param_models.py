"""Pydantic parameter models for manifold_kf filters."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from manifold_kf.common import constants

_DIMS = {
    "se2": (constants.SE2_TANGENT_DIM, constants.SE2_VECTOR_DIM),
    "se3": (constants.SE3_TANGENT_DIM, constants.SE3_VECTOR_DIM),
}


class FilterParams(BaseModel):
    """DerivativePoseFilter parameter model."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    pose_type: Literal["se2", "se3"] = "se3"
    num_derivs: int = Field(constants.DEFAULT_NUM_DERIVS, ge=1)
    transition_order: int = Field(constants.DEFAULT_TRANSITION_ORDER, ge=-1)
    default_dt: float = Field(constants.DEFAULT_DT, gt=0.0)

    # Vector form of the pose: [x, y, theta] or [x, y, z, qw, qx, qy, qz]
    initial_pose: Optional[List[float]] = None
    initial_derivs: Optional[List[float]] = None
    initial_cov_diag: Optional[List[float]] = None
    process_noise_diag: Optional[List[float]] = None

    @property
    def tangent_dim(self) -> int:
        return _DIMS[self.pose_type][0]

    @property
    def cov_dim(self) -> int:
        return (self.num_derivs + 1) * self.tangent_dim

    @model_validator(mode="after")
    def _check_lengths(self) -> "FilterParams":
        tangent_dim, vector_dim = _DIMS[self.pose_type]
        expected = {
            "initial_pose": vector_dim,
            "initial_derivs": self.num_derivs * tangent_dim,
            "initial_cov_diag": (self.num_derivs + 1) * tangent_dim,
            "process_noise_diag": (self.num_derivs + 1) * tangent_dim,
        }
        for name, length in expected.items():
            value = getattr(self, name)
            if value is not None and len(value) != length:
                raise ValueError(
                    f"{name} must have {length} elements for pose_type={self.pose_type} "
                    f"with num_derivs={self.num_derivs}, got {len(value)}"
                )
        for name in ("initial_cov_diag", "process_noise_diag"):
            value = getattr(self, name)
            if value is not None and any(v < 0.0 for v in value):
                raise ValueError(f"{name} entries must be non-negative")
        return self
