"""
Diagnostic records returned by every DerivativePoseFilter operation.

Records are plain data: arrays are copied on construction and frozen, so a
record never aliases filter-owned storage and never influences filter state.
Intended for external logging and consistency checks (e.g. NIS tests).

Mean vectors use the augmented tangent layout [pose (D) | derivs (N*D)]. The
pose slice of xpre/xpost is always zero because the mean pose is the origin of
its own tangent space; the pose itself is recorded in pose_pre/pose_post.
"""

import json
from dataclasses import dataclass, fields
from typing import Any, Optional

import numpy as np


def _frozen_copy(value: Any) -> Any:
    if isinstance(value, np.ndarray):
        arr = np.array(value, dtype=float)
        arr.flags.writeable = False
        return arr
    return value


def _jsonable(value: Any) -> Any:
    if isinstance(value, np.ndarray):
        return value.tolist()
    if hasattr(value, "to_vector"):
        return value.to_vector().tolist()
    return value


class _InfoBase:
    def __post_init__(self):
        for f in fields(self):
            object.__setattr__(self, f.name, _frozen_copy(getattr(self, f.name)))

    def to_dict(self) -> dict:
        return {f.name: _jsonable(getattr(self, f.name)) for f in fields(self)}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)


@dataclass(frozen=True)
class PredictInfo(_InfoBase):
    """
    Record of a predict (or world displacement) step.

    Attributes:
        xpre: Augmented tangent mean before the step
        Spre: Full covariance before the step
        xpost: Augmented tangent mean after the step
        Spost: Full covariance after the step
        pose_pre: Mean pose before the step
        pose_post: Mean pose after the step
        dt: Time step (0 for a world displacement)
        Q: Full-size process noise that was added
        F: Effective transition matrix, pose block already replaced by the
           displacement transport
    """
    xpre: np.ndarray
    Spre: np.ndarray
    xpost: np.ndarray
    Spost: np.ndarray
    pose_pre: Any
    pose_post: Any
    dt: float
    Q: np.ndarray
    F: np.ndarray


@dataclass(frozen=True)
class UpdateInfo(_InfoBase):
    """
    Record of a measurement update.

    Attributes:
        xpre, Spre, xpost, Spost, pose_pre, pose_post: as in PredictInfo
        observation: Raw observation (pose observations in vector form)
        innovation: Pre-fit residual v
        post_innovation: Post-fit residual against the updated state
        delta_x: Applied tangent correction K v (pose slice included)
        H: Full observation matrix over the augmented state
        R: Observation noise
        V: Innovation covariance H S H^T + R
    """
    xpre: np.ndarray
    Spre: np.ndarray
    xpost: np.ndarray
    Spost: np.ndarray
    pose_pre: Any
    pose_post: Any
    observation: np.ndarray
    innovation: np.ndarray
    post_innovation: np.ndarray
    delta_x: np.ndarray
    H: np.ndarray
    R: np.ndarray
    V: Optional[np.ndarray] = None

    @property
    def nis(self) -> float:
        """Normalized innovation squared v^T V^-1 v."""
        if self.V is None:
            raise ValueError("UpdateInfo has no innovation covariance")
        return float(self.innovation @ np.linalg.solve(self.V, self.innovation))
