"""
Numerical and default constants for manifold_kf.

Epsilon thresholds are chosen for IEEE 754 double precision and only affect the
computational path (series vs closed form), not the mathematical result.
"""

# =============================================================================
# Numerical Constants (stability, not policy)
# =============================================================================

# Below this angle Exp/Log use Taylor series instead of closed forms
ROTATION_EPSILON: float = 1e-10

# Within this distance of pi the SO(3) log reads the axis from the symmetric
# part of R, where theta / sin(theta) loses precision
SINGULARITY_EPSILON: float = 1e-3

# =============================================================================
# Pose dimensions
# =============================================================================

SE2_TANGENT_DIM = 3
SE2_VECTOR_DIM = 3  # [x, y, theta]

SE3_TANGENT_DIM = 6
SE3_VECTOR_DIM = 7  # [x, y, z, qw, qx, qy, qz]

# =============================================================================
# Filter defaults
# =============================================================================

DEFAULT_NUM_DERIVS = 1
DEFAULT_TRANSITION_ORDER = -1  # negative = integrate up to num_derivs
DEFAULT_DT = 0.1

# Config file section holding filter parameters
CONFIG_SECTION_DEFAULT = "derivative_pose_filter"
