"""
Filters for manifold_kf.

- DerivativePoseFilter: pose on SE(2)/SE(3) plus N tangent derivatives
- PredictInfo / UpdateInfo: per-operation diagnostic records
"""

from manifold_kf.filters.filter_info import PredictInfo, UpdateInfo
from manifold_kf.filters.derivative_pose_filter import DerivativePoseFilter

__all__ = [
    "DerivativePoseFilter",
    "PredictInfo",
    "UpdateInfo",
]
