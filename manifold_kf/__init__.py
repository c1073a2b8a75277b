"""
manifold_kf: Kalman filtering of rigid-body poses and their derivatives.

The pose lives on SE(2) or SE(3); its velocity, acceleration and higher
derivatives live in the tangent space. Uncertainty is tracked over the joint
tangent-space error and propagated with group adjoints.
"""

from manifold_kf.common.errors import DimensionMismatch, MissingParameterError, NumericalFailure
from manifold_kf.common.geometry import PoseSE2, PoseSE3
from manifold_kf.common.tangent import integral_matrix, integral_matrix_func
from manifold_kf.filters import DerivativePoseFilter, PredictInfo, UpdateInfo

__version__ = "0.1.0"

__all__ = [
    "DerivativePoseFilter",
    "PredictInfo",
    "UpdateInfo",
    "PoseSE2",
    "PoseSE3",
    "integral_matrix",
    "integral_matrix_func",
    "DimensionMismatch",
    "MissingParameterError",
    "NumericalFailure",
]
