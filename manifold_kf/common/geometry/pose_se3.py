"""
Spatial rigid-body pose on SE(3).

Stored as one 4x4 homogeneous transform. Every constructor projects the
rotation block onto SO(3), so composition and inversion always yield a valid
rotation.

Vector form: [x, y, z, qw, qx, qy, qz]
Tangent form: [vx, vy, vz, wx, wy, wz]
"""

from __future__ import annotations

import numpy as np

from manifold_kf.common import constants
from manifold_kf.common.errors import DimensionMismatch
from manifold_kf.common.geometry.lie_numpy import (
    homogeneous_inverse,
    quat_to_rotmat,
    rotmat_to_quat,
    se3_adjoint,
    se3_exp,
    se3_log,
    so3_project,
)


class PoseSE3:
    """Immutable SE(3) pose value."""

    TANGENT_DIM = constants.SE3_TANGENT_DIM
    VECTOR_DIM = constants.SE3_VECTOR_DIM

    __slots__ = ("_tform",)

    def __init__(
        self,
        x: float = 0.0,
        y: float = 0.0,
        z: float = 0.0,
        qw: float = 1.0,
        qx: float = 0.0,
        qy: float = 0.0,
        qz: float = 0.0,
    ):
        T = np.eye(4, dtype=float)
        T[:3, :3] = quat_to_rotmat([qw, qx, qy, qz])
        T[:3, 3] = (float(x), float(y), float(z))
        self._set(T)

    def _set(self, T: np.ndarray) -> None:
        T = np.array(T, dtype=float)
        T[:3, :3] = so3_project(T[:3, :3])
        T[3, :] = (0.0, 0.0, 0.0, 1.0)
        T.flags.writeable = False
        self._tform = T

    @classmethod
    def _from_tform(cls, T: np.ndarray) -> "PoseSE3":
        pose = cls.__new__(cls)
        pose._set(T)
        return pose

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_vector(cls, vec) -> "PoseSE3":
        """Create from [x, y, z, qw, qx, qy, qz]."""
        vec = np.asarray(vec, dtype=float).reshape(-1)
        if vec.shape[0] != cls.VECTOR_DIM:
            raise DimensionMismatch(
                f"PoseSE3: Need {cls.VECTOR_DIM} elements to populate, got {vec.shape[0]}"
            )
        return cls(*vec)

    @classmethod
    def from_matrix(cls, m) -> "PoseSE3":
        """
        Create from a 4x4 homogeneous matrix, or from a 3x3 rotation matrix
        with zero translation.
        """
        m = np.asarray(m, dtype=float)
        if m.shape == (4, 4):
            return cls._from_tform(m)
        if m.shape == (3, 3):
            T = np.eye(4, dtype=float)
            T[:3, :3] = m
            return cls._from_tform(T)
        raise DimensionMismatch(f"PoseSE3 must be constructed from 4x4 or 3x3 matrix, got {m.shape}")

    @classmethod
    def from_translation_quaternion(cls, translation, quaternion) -> "PoseSE3":
        """
        Create from a 3D translation and quaternion.

        Args:
            translation: (x, y, z)
            quaternion: (w, x, y, z), normalized on construction
        """
        t = np.asarray(translation, dtype=float).reshape(-1)
        q = np.asarray(quaternion, dtype=float).reshape(-1)
        if t.shape[0] != 3:
            raise DimensionMismatch(f"Expected 3D translation, got {t.shape[0]} elements")
        if q.shape[0] != 4:
            raise DimensionMismatch(f"Expected 4-element quaternion, got {q.shape[0]}")
        return cls(t[0], t[1], t[2], q[0], q[1], q[2], q[3])

    @classmethod
    def identity(cls) -> "PoseSE3":
        return cls()

    # -------------------------------------------------------------------------
    # Lie group
    # -------------------------------------------------------------------------

    @classmethod
    def exp(cls, tangent) -> "PoseSE3":
        """Exponentiate a tangent vector [vx, vy, vz, wx, wy, wz]."""
        tangent = np.asarray(tangent, dtype=float).reshape(-1)
        if tangent.shape[0] != cls.TANGENT_DIM:
            raise DimensionMismatch(
                f"Expected {cls.TANGENT_DIM}D tangent, got {tangent.shape[0]}"
            )
        return cls._from_tform(se3_exp(tangent))

    def log(self) -> np.ndarray:
        """Tangent vector; rotation angle on the principal branch [0, pi]."""
        return se3_log(self._tform)

    def adjoint(self) -> np.ndarray:
        """6x6 adjoint, local frame -> reference frame."""
        return se3_adjoint(self._tform)

    def inverse(self) -> "PoseSE3":
        return PoseSE3._from_tform(homogeneous_inverse(self._tform))

    def __mul__(self, other: "PoseSE3") -> "PoseSE3":
        if not isinstance(other, PoseSE3):
            return NotImplemented
        return PoseSE3._from_tform(self._tform @ other._tform)

    def compose(self, other: "PoseSE3") -> "PoseSE3":
        return self * other

    def transform_point(self, p) -> np.ndarray:
        """Apply the transform to a 3D point or an (N, 3) batch."""
        p = np.asarray(p, dtype=float)
        R = self._tform[:3, :3]
        t = self._tform[:3, 3]
        if p.ndim == 1:
            if p.shape[0] != 3:
                raise DimensionMismatch(f"Expected 3D point, got shape {p.shape}")
            return R @ p + t
        if p.ndim == 2 and p.shape[1] == 3:
            return (R @ p.T).T + t
        raise DimensionMismatch(f"Expected (3,) or (N, 3) points, got shape {p.shape}")

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def to_matrix(self) -> np.ndarray:
        return np.array(self._tform)

    def to_vector(self) -> np.ndarray:
        """[x, y, z, qw, qx, qy, qz] with qw >= 0."""
        return np.concatenate([self._tform[:3, 3], rotmat_to_quat(self._tform[:3, :3])])

    @property
    def translation(self) -> np.ndarray:
        return np.array(self._tform[:3, 3])

    @property
    def quaternion(self) -> np.ndarray:
        """Unit quaternion [qw, qx, qy, qz] with qw >= 0."""
        return rotmat_to_quat(self._tform[:3, :3])

    @property
    def rotation_matrix(self) -> np.ndarray:
        return np.array(self._tform[:3, :3])

    def allclose(self, other: "PoseSE3", atol: float = 1e-9) -> bool:
        """Compare as homogeneous matrices (quaternion sign is irrelevant)."""
        return bool(np.allclose(self._tform, other._tform, rtol=0.0, atol=atol))

    def __repr__(self) -> str:
        x, y, z, qw, qx, qy, qz = self.to_vector()
        return (
            f"PoseSE3(x={x:.6g}, y={y:.6g}, z={z:.6g}, "
            f"qw={qw:.6g}, qx={qx:.6g}, qy={qy:.6g}, qz={qz:.6g})"
        )

    def __str__(self) -> str:
        return " ".join(str(v) for v in self.to_vector())

    def __reduce__(self):
        return (PoseSE3, tuple(self.to_vector()))
