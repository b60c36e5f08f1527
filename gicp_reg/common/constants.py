"""
GICP registration constants only.

=============================================================================
CONVENTION QUICK REFERENCE
=============================================================================

POSES:
  4x4 homogeneous matrices, T_target_source maps source points into the
  target frame: p_target = T @ p_source (p homogeneous, w = 1)

TANGENT STEP (6D):
  [rot(0:3), trans(3:6)] = [wx, wy, wz, vx, vy, vz]
  Applied on the right: T <- T @ se3_exp(delta)

COVARIANCES:
  4x4 per point, 3x3 spatial block top-left, homogeneous row/column zero
=============================================================================
"""

import math

# =============================================================================
# NUMERICAL CONSTANTS (stability, not policy)
# =============================================================================

# Small-angle threshold for Taylor expansions (~sqrt(machine_epsilon) with margin)
ROTATION_EPSILON = 1e-10

# θ ≈ π branch of so3_log
SINGULARITY_EPSILON = 1e-6

# =============================================================================
# CORRESPONDENCE REJECTION
# =============================================================================

# DistanceRejector default (squared metres)
DISTANCE_REJECTOR_MAX_DIST_SQ_DEFAULT = 1.0
MAX_CORRESPONDENCE_DISTANCE_DEFAULT = 1.0

# =============================================================================
# COVARIANCE ESTIMATION
# =============================================================================

COVARIANCE_NUM_NEIGHBORS_DEFAULT = 20
# Fewer neighbours than this -> identity covariance
COVARIANCE_MIN_NEIGHBORS = 5
# Plane-like regularization: eigenvalues replaced by (normal, tangent, tangent)
COVARIANCE_PLANE_EIGENVALUES = (1e-3, 1.0, 1.0)

# =============================================================================
# OPTIMIZERS
# =============================================================================

MAX_ITERATIONS_DEFAULT = 20

# Gauss-Newton fixed damping
GN_DAMPING_DEFAULT = 1e-6

# Levenberg-Marquardt trust region
LM_MAX_INNER_ITERATIONS_DEFAULT = 10
LM_INIT_DAMPING_DEFAULT = 1e-3
LM_DAMPING_FACTOR_DEFAULT = 10.0

# =============================================================================
# TERMINATION
# =============================================================================

TRANSLATION_EPS_DEFAULT = 1e-3  # metres
ROTATION_EPS_DEFAULT = 0.1 * math.pi / 180.0  # radians

# =============================================================================
# REDUCTION
# =============================================================================

NUM_THREADS_DEFAULT = 1
