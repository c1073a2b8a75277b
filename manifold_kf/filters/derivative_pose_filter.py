"""
Kalman filter tracking a Lie group pose and N of its temporal derivatives.

State
=====
- pose: mean pose on SE(2) or SE(3)
- derivs: stacked 1st..Nth derivatives of the pose tangent coordinates (N*D)
- cov: joint covariance over [pose (D) | derivs (N*D)]

Error-state convention
----------------------
Right perturbation in the body frame: true_pose = pose * Exp(delta). Derivatives
and every covariance block are body-frame tangent quantities, and corrections
are applied as pose <- pose * Exp(correction).

With this convention:
- predict moves the body frame by Delta, so the pose error is carried into the
  new body frame by Ad(Delta^-1), which replaces the pose-pose block of the
  integrator before covariance propagation.
- world_displace left-multiplies the mean, which leaves a body-frame error
  unchanged; the displacement's world-frame noise Q enters the body frame
  through Ad(pose^-1).

Every operation validates shapes before touching state. Innovation
covariances are Cholesky-factored; failure raises NumericalFailure.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional, Type

import numpy as np

from manifold_kf.common import constants
from manifold_kf.common.errors import DimensionMismatch
from manifold_kf.common.geometry import PoseSE3
from manifold_kf.common.primitives import (
    gaussian_log_pdf,
    gaussian_pdf,
    spd_cholesky_factor,
    spd_cholesky_solve,
    symmetrize,
)
from manifold_kf.common.tangent import (
    TransitionFunction,
    as_matrix,
    as_vector,
    integral_matrix_func,
)
from manifold_kf.filters.filter_info import PredictInfo, UpdateInfo


class DerivativePoseFilter:
    """
    Extended Kalman filter over a pose and its derivatives.

    Args:
        pose: Initial mean pose (identity of pose_type if None)
        derivs: Initial derivatives, length num_derivs * D (zeros if None)
        cov: Initial full covariance (identity if None)
        num_derivs: Number of tracked derivatives N (>= 1)
        pose_type: PoseSE2 or PoseSE3; inferred from pose when given
    """

    def __init__(
        self,
        pose=None,
        derivs=None,
        cov=None,
        num_derivs: int = constants.DEFAULT_NUM_DERIVS,
        pose_type: Optional[Type] = None,
    ):
        if pose_type is None:
            pose_type = type(pose) if pose is not None else PoseSE3
        if pose is not None and not isinstance(pose, pose_type):
            raise TypeError(
                f"Initial pose is {type(pose).__name__}, expected {pose_type.__name__}"
            )
        if int(num_derivs) < 1:
            raise ValueError(f"num_derivs must be >= 1, got {num_derivs}")

        self._pose_type = pose_type
        self._tangent_dim = int(pose_type.TANGENT_DIM)
        self._num_derivs = int(num_derivs)

        n = self.cov_dim
        self._pose = pose if pose is not None else pose_type()
        self._derivs = (
            np.zeros(self.derivs_dim) if derivs is None
            else as_vector(derivs, self.derivs_dim, "derivatives")
        )
        self._cov = np.eye(n) if cov is None else as_matrix(cov, (n, n), "covariance")
        self._tfunc: TransitionFunction = integral_matrix_func(
            self._tangent_dim, self._num_derivs, constants.DEFAULT_TRANSITION_ORDER
        )

    # =========================================================================
    # Dimensions
    # =========================================================================

    @property
    def pose_type(self) -> Type:
        return self._pose_type

    @property
    def tangent_dim(self) -> int:
        return self._tangent_dim

    @property
    def num_derivs(self) -> int:
        return self._num_derivs

    @property
    def derivs_dim(self) -> int:
        return self._num_derivs * self._tangent_dim

    @property
    def cov_dim(self) -> int:
        return (self._num_derivs + 1) * self._tangent_dim

    # =========================================================================
    # State accessors (copies in, copies out)
    # =========================================================================

    @property
    def pose(self):
        return self._pose

    @pose.setter
    def pose(self, value) -> None:
        self._check_pose(value, "pose")
        self._pose = value

    @property
    def derivs(self) -> np.ndarray:
        return self._derivs.copy()

    @derivs.setter
    def derivs(self, value) -> None:
        self._derivs = as_vector(value, self.derivs_dim, "derivatives")

    @property
    def pose_cov(self) -> np.ndarray:
        D = self._tangent_dim
        return self._cov[:D, :D].copy()

    @pose_cov.setter
    def pose_cov(self, value) -> None:
        D = self._tangent_dim
        self._cov[:D, :D] = as_matrix(value, (D, D), "pose covariance")

    @property
    def derivs_cov(self) -> np.ndarray:
        D = self._tangent_dim
        return self._cov[D:, D:].copy()

    @derivs_cov.setter
    def derivs_cov(self, value) -> None:
        D = self._tangent_dim
        m = self.derivs_dim
        self._cov[D:, D:] = as_matrix(value, (m, m), "derivatives covariance")

    @property
    def full_cov(self) -> np.ndarray:
        return self._cov.copy()

    @full_cov.setter
    def full_cov(self, value) -> None:
        n = self.cov_dim
        self._cov = as_matrix(value, (n, n), "covariance")

    @property
    def transition_func(self) -> TransitionFunction:
        """Callable dt -> (N+1)*D transition matrix."""
        return self._tfunc

    @transition_func.setter
    def transition_func(self, func: TransitionFunction) -> None:
        if not callable(func):
            raise TypeError("transition_func must be callable with a time step")
        self._tfunc = func

    # =========================================================================
    # Operations
    # =========================================================================

    def world_displace(self, d, Q) -> PredictInfo:
        """
        Displace the mean pose by a world-frame displacement: pose <- d * pose.

        Only the pose block of the covariance changes; derivative and cross
        blocks are left as they are.

        Args:
            d: Displacement, same pose type as the filter
            Q: DxD uncertainty of d as a right perturbation d * Exp(e), i.e.
               expressed in the frame the pose is given in before the
               displacement. Noise given as a left perturbation in the
               post-displacement world frame would need Ad(pose_after^-1).
        """
        self._check_pose(d, "displacement")
        D = self._tangent_dim
        n = self.cov_dim
        Q = as_matrix(Q, (D, D), "displacement noise")

        xpre = self._full_mean()
        Spre = self._cov.copy()
        pose_pre = self._pose

        adj = pose_pre.inverse().adjoint()
        Q_body = adj @ Q @ adj.T

        cov = self._cov.copy()
        cov[:D, :D] = cov[:D, :D] + Q_body
        Q_full = np.zeros((n, n))
        Q_full[:D, :D] = Q_body

        self._pose = d * pose_pre
        self._cov = symmetrize(cov)

        return PredictInfo(
            xpre=xpre,
            Spre=Spre,
            xpost=self._full_mean(),
            Spost=self._cov,
            pose_pre=pose_pre,
            pose_post=self._pose,
            dt=0.0,
            Q=Q_full,
            F=np.eye(n),
        )

    def predict(self, Q, dt: float) -> PredictInfo:
        """
        Integrate the derivatives forward by dt and propagate covariance.

        The pose moves by Delta = Exp(dt * propagated first derivative) in its
        own body frame, i.e. the first-derivative slice of A @ [0; derivs]
        scaled by dt. The pose-pose block of A is replaced by Ad(Delta^-1) before
        P <- A P A^T + Q.

        Args:
            Q: Full (N+1)*D process noise
            dt: Time step
        """
        D = self._tangent_dim
        n = self.cov_dim
        dt = float(dt)
        Q = as_matrix(Q, (n, n), "process noise")
        A = as_matrix(self._tfunc(dt), (n, n), "transition matrix")

        x = self._full_mean()
        Spre = self._cov.copy()
        pose_pre = self._pose

        xup = A @ x
        displacement = self._pose_type.exp(xup[D:2 * D] * dt)
        # The integrator's pose block does not transport the body-frame error
        A[:D, :D] = displacement.inverse().adjoint()

        self._derivs = xup[D:].copy()
        self._pose = pose_pre * displacement
        self._cov = symmetrize(A @ self._cov @ A.T + Q)

        return PredictInfo(
            xpre=x,
            Spre=Spre,
            xpost=self._full_mean(),
            Spost=self._cov,
            pose_pre=pose_pre,
            pose_post=self._pose,
            dt=dt,
            Q=Q,
            F=A,
        )

    def update_derivs(self, obs, C, R) -> UpdateInfo:
        """
        Linear update from an observation of the derivatives: obs = C @ derivs + noise.

        Args:
            obs: Observation vector, length z
            C: z x (N*D) observation matrix over the derivatives only
            R: z x z observation noise
        """
        obs, C, R, v, C_full = self._derivs_innovation(obs, C, R)
        V = symmetrize(C_full @ self._cov @ C_full.T + R)
        info = self._correct(v, C_full, R, V, observation=obs)
        return replace(info, post_innovation=obs - C @ self._derivs)

    def update_pose(self, obs, R) -> UpdateInfo:
        """
        Update from a direct observation of the pose.

        The innovation is the body-frame residual Log(pose^-1 * obs).

        Args:
            obs: Observed pose, same pose type as the filter
            R: DxD observation noise in the body frame of the mean pose
        """
        self._check_pose(obs, "observation")
        D = self._tangent_dim
        n = self.cov_dim
        R = as_matrix(R, (D, D), "pose observation noise")

        C_full = np.zeros((D, n))
        C_full[:, :D] = np.eye(D)

        v = (self._pose.inverse() * obs).log()
        V = symmetrize(self._cov[:D, :D] + R)
        info = self._correct(v, C_full, R, V, observation=obs.to_vector())

        return replace(info, post_innovation=(self._pose.inverse() * obs).log())

    def derivs_likelihood(self, obs, C, R) -> float:
        """Gaussian density of a derivative observation under the predicted distribution."""
        _, _, R, v, C_full = self._derivs_innovation(obs, C, R)
        return gaussian_pdf(symmetrize(C_full @ self._cov @ C_full.T + R), v)

    def derivs_log_likelihood(self, obs, C, R) -> float:
        """Log form of derivs_likelihood. Does not modify the filter."""
        _, _, R, v, C_full = self._derivs_innovation(obs, C, R)
        V = symmetrize(C_full @ self._cov @ C_full.T + R)
        return gaussian_log_pdf(V, v)

    # =========================================================================
    # Internals
    # =========================================================================

    def _check_pose(self, value, what: str) -> None:
        if not isinstance(value, self._pose_type):
            raise TypeError(
                f"{what} is {type(value).__name__}, filter tracks {self._pose_type.__name__}"
            )

    def _full_mean(self) -> np.ndarray:
        x = np.zeros(self.cov_dim)
        x[self._tangent_dim:] = self._derivs
        return x

    def _derivs_innovation(self, obs, C, R):
        """Validate a derivative observation and build [0 | C] and v = obs - C derivs."""
        obs = as_vector(obs, name="observation")
        C = np.array(C, dtype=float)
        if C.ndim == 1:
            C = C.reshape(1, -1)
        z = obs.shape[0]
        if C.ndim != 2 or z != C.shape[0]:
            raise DimensionMismatch(
                f"Deriv update dimension mismatch: observation has {z} elements, "
                f"observation matrix has shape {C.shape}"
            )
        if C.shape[1] != self.derivs_dim:
            raise DimensionMismatch(
                f"Observation matrix must have {self.derivs_dim} columns, got {C.shape[1]}"
            )
        R = as_matrix(R, (z, z), "observation noise")

        v = obs - C @ self._derivs
        C_full = np.zeros((z, self.cov_dim))
        C_full[:, self._tangent_dim:] = C
        return obs, C, R, v, C_full

    def _correct(self, v, C_full, R, V, observation) -> UpdateInfo:
        """
        Apply gain, correction and Joseph-form covariance update.

        The factorization happens before any mutation, so NumericalFailure
        leaves the state untouched.
        """
        D = self._tangent_dim
        n = self.cov_dim
        P = self._cov

        factor = spd_cholesky_factor(V)
        # K = P H^T V^-1 = (V^-1 H P)^T since P and V are symmetric
        K = spd_cholesky_solve(factor, C_full @ P).T
        correction = K @ v

        xpre = self._full_mean()
        Spre = P.copy()
        pose_pre = self._pose

        self._pose = pose_pre * self._pose_type.exp(correction[:D])
        self._derivs = self._derivs + correction[D:]
        L = np.eye(n) - K @ C_full
        self._cov = symmetrize(L @ P @ L.T + K @ R @ K.T)

        return UpdateInfo(
            xpre=xpre,
            Spre=Spre,
            xpost=self._full_mean(),
            Spost=self._cov,
            pose_pre=pose_pre,
            pose_post=self._pose,
            observation=observation,
            innovation=v,
            post_innovation=v,
            delta_x=correction,
            H=C_full,
            R=R,
            V=V,
        )

    def __repr__(self) -> str:
        return (
            f"DerivativePoseFilter(pose={self._pose!r}, "
            f"derivs={np.array2string(self._derivs, precision=4)}, "
            f"num_derivs={self._num_derivs})"
        )