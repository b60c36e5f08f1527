"""
SE(3) geometry on 4x4 homogeneous matrices.

Pose representation: T = | R  t |  with R in SO(3), t in R^3.
                         | 0  1 |

Tangent representation (registration convention): xi = (omega, v) where
- omega = (wx, wy, wz): rotation vector in so(3)
- v = (vx, vy, vz): translational part

NOTE: this is [rotation; translation] ordering, matching the Jacobian layout
of the GICP factor. Perturbations are applied on the right: T <- T * Exp(xi).

Numerical Policy:
    ROTATION_EPSILON = 1e-10: below this angle the first-order Taylor
    expansions are used. This affects the computational path only.

References:
- Barfoot (2017): State Estimation for Robotics
- Sola et al. (2018): A micro Lie theory for state estimation
"""

import math
from typing import Optional

import numpy as np

from gicp_reg.common.constants import ROTATION_EPSILON, SINGULARITY_EPSILON


def skew(v: np.ndarray) -> np.ndarray:
    """Skew-symmetric matrix from 3-vector (hat operator)."""
    v = np.asarray(v, dtype=float).reshape(-1)
    return np.array([
        [0.0, -v[2], v[1]],
        [v[2], 0.0, -v[0]],
        [-v[1], v[0], 0.0]
    ], dtype=float)


def so3_exp(omega: np.ndarray) -> np.ndarray:
    """
    Exponential map so(3) -> SO(3) (Rodrigues' formula).

    R = I + sin(θ)[k]_× + (1-cos(θ))[k]_×², k = omega / θ
    """
    omega = np.asarray(omega, dtype=float).reshape(-1)
    theta = np.linalg.norm(omega)

    if theta < ROTATION_EPSILON:
        # Error is O(θ²)
        return np.eye(3, dtype=float) + skew(omega)

    K = skew(omega / theta)
    return np.eye(3, dtype=float) + math.sin(theta) * K + (1.0 - math.cos(theta)) * (K @ K)


def so3_log(R: np.ndarray) -> np.ndarray:
    """
    Logarithmic map SO(3) -> so(3).

    Handles three cases:
    1. θ ≈ 0: Extract from skew-symmetric part
    2. θ ≈ π: Deterministic axis extraction from the diagonal
    3. General: Standard formula
    """
    R = np.asarray(R, dtype=float)

    cos_theta = np.clip((np.trace(R) - 1.0) / 2.0, -1.0, 1.0)
    theta = math.acos(cos_theta)
    vee = np.array([R[2, 1] - R[1, 2], R[0, 2] - R[2, 0], R[1, 0] - R[0, 1]], dtype=float)

    if theta < ROTATION_EPSILON:
        return vee / 2.0

    if abs(theta - math.pi) < SINGULARITY_EPSILON:
        axis = np.sqrt(np.maximum((np.diag(R) + 1.0) * 0.5, 0.0))

        # Resolve sign ambiguity using off-diagonal elements
        if axis[0] > 1e-6:
            axis[1] = math.copysign(axis[1], R[0, 1])
            axis[2] = math.copysign(axis[2], R[0, 2])
        elif axis[1] > 1e-6:
            axis[2] = math.copysign(axis[2], R[1, 2])

        axis_norm = np.linalg.norm(axis)
        if axis_norm < 1e-12:
            return np.zeros(3, dtype=float)
        return axis / axis_norm * theta

    return vee / (2.0 * math.sin(theta)) * theta


def se3_exp(xi: np.ndarray) -> np.ndarray:
    """
    Exponential map se(3) -> SE(3).

    xi = (omega, v). Rotation via Rodrigues, translation via the left
    Jacobian of SO(3):
        V = I + (1-cos θ)/θ² [ω]_× + (θ - sin θ)/θ³ [ω]_×²
        t = V v
    """
    xi = np.asarray(xi, dtype=float).reshape(-1)
    omega = xi[:3]
    v = xi[3:6]

    T = np.eye(4, dtype=float)
    T[:3, :3] = so3_exp(omega)

    theta = np.linalg.norm(omega)
    if theta < ROTATION_EPSILON:
        T[:3, 3] = T[:3, :3] @ v
        return T

    W = skew(omega)
    V = (np.eye(3) +
         (1.0 - math.cos(theta)) / (theta * theta) * W +
         (theta - math.sin(theta)) / (theta * theta * theta) * (W @ W))
    T[:3, 3] = V @ v
    return T


def se3_inverse(T: np.ndarray) -> np.ndarray:
    """For T = (R, t), T^{-1} = (R^T, -R^T t)."""
    T = np.asarray(T, dtype=float)
    R_inv = T[:3, :3].T
    T_inv = np.eye(4, dtype=float)
    T_inv[:3, :3] = R_inv
    T_inv[:3, 3] = -R_inv @ T[:3, 3]
    return T_inv


def make_pose(rotvec: Optional[np.ndarray] = None, translation: Optional[np.ndarray] = None) -> np.ndarray:
    """Build a 4x4 pose from a rotation vector and a translation."""
    T = np.eye(4, dtype=float)
    if rotvec is not None:
        T[:3, :3] = so3_exp(rotvec)
    if translation is not None:
        T[:3, 3] = np.asarray(translation, dtype=float).reshape(3)
    return T


def as_pose(T: Optional[np.ndarray]) -> np.ndarray:
    """Validate and copy a homogeneous pose; None means identity."""
    if T is None:
        return np.eye(4, dtype=float)
    T = np.array(T, dtype=float)
    if T.shape != (4, 4):
        raise ValueError(f"pose must be a 4x4 matrix, got shape {T.shape}")
    return T
