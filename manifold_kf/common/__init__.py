"""
Common package for manifold_kf.

Shared numerics, tangent-space helpers and pose types used by the filters.

Subpackages:
- geometry/: SE(2) / SE(3) pose values and Lie group operations
"""

from manifold_kf.common import constants
from manifold_kf.common.errors import DimensionMismatch, MissingParameterError, NumericalFailure
from manifold_kf.common.tangent import integral_matrix, integral_matrix_func

__all__ = [
    "constants",
    "DimensionMismatch",
    "MissingParameterError",
    "NumericalFailure",
    "integral_matrix",
    "integral_matrix_func",
]
