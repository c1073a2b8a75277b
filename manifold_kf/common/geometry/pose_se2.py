"""
Planar rigid-body pose on SE(2).

Stored as one 3x3 homogeneous transform. Every constructor re-projects the
rotation block through its angle, so composition and inversion always yield a
valid rotation.

Vector form: [x, y, theta]
Tangent form: [vx, vy, w]
"""

from __future__ import annotations

import numpy as np

from manifold_kf.common import constants
from manifold_kf.common.errors import DimensionMismatch
from manifold_kf.common.geometry.lie_numpy import (
    homogeneous_inverse,
    se2_adjoint,
    se2_exp,
    se2_log,
    so2_angle,
    so2_matrix,
)


class PoseSE2:
    """Immutable SE(2) pose value."""

    TANGENT_DIM = constants.SE2_TANGENT_DIM
    VECTOR_DIM = constants.SE2_VECTOR_DIM

    __slots__ = ("_tform",)

    def __init__(self, x: float = 0.0, y: float = 0.0, theta: float = 0.0):
        T = np.eye(3, dtype=float)
        T[:2, :2] = so2_matrix(float(theta))
        T[0, 2] = float(x)
        T[1, 2] = float(y)
        self._set(T)

    def _set(self, T: np.ndarray) -> None:
        T = np.array(T, dtype=float)
        T[:2, :2] = so2_matrix(so2_angle(T[:2, :2]))
        T[2, :] = (0.0, 0.0, 1.0)
        T.flags.writeable = False
        self._tform = T

    @classmethod
    def _from_tform(cls, T: np.ndarray) -> "PoseSE2":
        pose = cls.__new__(cls)
        pose._set(T)
        return pose

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_vector(cls, vec) -> "PoseSE2":
        """Create from [x, y, theta]."""
        vec = np.asarray(vec, dtype=float).reshape(-1)
        if vec.shape[0] != cls.VECTOR_DIM:
            raise DimensionMismatch(
                f"PoseSE2 must be constructed from {cls.VECTOR_DIM}-element vector, "
                f"got {vec.shape[0]}"
            )
        return cls(vec[0], vec[1], vec[2])

    @classmethod
    def from_matrix(cls, m) -> "PoseSE2":
        """Create from a 3x3 homogeneous matrix."""
        m = np.asarray(m, dtype=float)
        if m.shape != (3, 3):
            raise DimensionMismatch(f"PoseSE2 must be constructed from 3x3 matrix, got {m.shape}")
        return cls._from_tform(m)

    @classmethod
    def from_translation_rotation(cls, translation, rotation) -> "PoseSE2":
        """
        Create from a 2D translation and a rotation.

        Args:
            translation: (x, y)
            rotation: angle in radians or a 2x2 rotation matrix
        """
        t = np.asarray(translation, dtype=float).reshape(-1)
        if t.shape[0] != 2:
            raise DimensionMismatch(f"Expected 2D translation, got {t.shape[0]} elements")
        rot = np.asarray(rotation, dtype=float)
        if rot.ndim == 0:
            theta = float(rot)
        elif rot.shape == (2, 2):
            theta = so2_angle(rot)
        else:
            raise DimensionMismatch(f"Expected angle or 2x2 rotation, got shape {rot.shape}")
        return cls(t[0], t[1], theta)

    @classmethod
    def identity(cls) -> "PoseSE2":
        return cls()

    # -------------------------------------------------------------------------
    # Lie group
    # -------------------------------------------------------------------------

    @classmethod
    def exp(cls, tangent) -> "PoseSE2":
        """Exponentiate a tangent vector [vx, vy, w]."""
        tangent = np.asarray(tangent, dtype=float).reshape(-1)
        if tangent.shape[0] != cls.TANGENT_DIM:
            raise DimensionMismatch(
                f"Expected {cls.TANGENT_DIM}D tangent, got {tangent.shape[0]}"
            )
        return cls._from_tform(se2_exp(tangent))

    def log(self) -> np.ndarray:
        """Tangent vector [vx, vy, w] with w in (-pi, pi]."""
        return se2_log(self._tform)

    def adjoint(self) -> np.ndarray:
        """3x3 adjoint, local frame -> reference frame."""
        return se2_adjoint(self._tform)

    def inverse(self) -> "PoseSE2":
        return PoseSE2._from_tform(homogeneous_inverse(self._tform))

    def __mul__(self, other: "PoseSE2") -> "PoseSE2":
        if not isinstance(other, PoseSE2):
            return NotImplemented
        return PoseSE2._from_tform(self._tform @ other._tform)

    def compose(self, other: "PoseSE2") -> "PoseSE2":
        return self * other

    def transform_point(self, p) -> np.ndarray:
        """Apply the transform to a 2D point or an (N, 2) batch."""
        p = np.asarray(p, dtype=float)
        R = self._tform[:2, :2]
        t = self._tform[:2, 2]
        if p.ndim == 1:
            if p.shape[0] != 2:
                raise DimensionMismatch(f"Expected 2D point, got shape {p.shape}")
            return R @ p + t
        if p.ndim == 2 and p.shape[1] == 2:
            return (R @ p.T).T + t
        raise DimensionMismatch(f"Expected (2,) or (N, 2) points, got shape {p.shape}")

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def to_matrix(self) -> np.ndarray:
        return np.array(self._tform)

    def to_vector(self) -> np.ndarray:
        """[x, y, theta] with theta in (-pi, pi]."""
        return np.array(
            [self._tform[0, 2], self._tform[1, 2], so2_angle(self._tform[:2, :2])],
            dtype=float,
        )

    @property
    def translation(self) -> np.ndarray:
        return np.array(self._tform[:2, 2])

    @property
    def rotation(self) -> float:
        """Heading angle in radians."""
        return so2_angle(self._tform[:2, :2])

    @property
    def rotation_matrix(self) -> np.ndarray:
        return np.array(self._tform[:2, :2])

    def allclose(self, other: "PoseSE2", atol: float = 1e-9) -> bool:
        """Compare as homogeneous matrices (angle wraparound is irrelevant)."""
        return bool(np.allclose(self._tform, other._tform, rtol=0.0, atol=atol))

    def __repr__(self) -> str:
        x, y, theta = self.to_vector()
        return f"PoseSE2(x={x:.6g}, y={y:.6g}, theta={theta:.6g})"

    def __str__(self) -> str:
        x, y, theta = self.to_vector()
        return f"{x} {y} {theta}"

    def __reduce__(self):
        return (PoseSE2, tuple(self.to_vector()))

