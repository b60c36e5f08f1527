"""
Linear-algebra primitives shared by the factor and the optimizers.

All helpers are total: degenerate inputs produce a degenerate (finite where
possible) output instead of an exception.
"""

from typing import Tuple

import numpy as np
from scipy import linalg


def safe_inverse_3x3(M: np.ndarray) -> np.ndarray:
    """Inverse of a 3x3 block, falling back to the pseudo-inverse when singular."""
    M = np.asarray(M, dtype=float)
    try:
        return np.linalg.inv(M)
    except np.linalg.LinAlgError:
        return np.linalg.pinv(M)


def damped_symmetric_solve(H: np.ndarray, b: np.ndarray, damping: float) -> np.ndarray:
    """
    Solve (H + damping * I) x = -b with a symmetric LDL^T factorization.

    H is assumed symmetric positive semi-definite; the damping term is the
    only regularization. If the damped system is still exactly singular
    (damping = 0 and H rank deficient) the least-squares solution is
    returned instead.
    """
    H = np.asarray(H, dtype=float)
    b = np.asarray(b, dtype=float).reshape(-1)
    A = H + damping * np.eye(H.shape[0], dtype=float)
    try:
        return linalg.solve(A, -b, assume_a="sym")
    except linalg.LinAlgError:
        return np.linalg.lstsq(A, -b, rcond=None)[0]


def step_norms(delta: np.ndarray) -> Tuple[float, float]:
    """Return (rotation_norm, translation_norm) of a [rot; trans] tangent step."""
    delta = np.asarray(delta, dtype=float).reshape(-1)
    return float(np.linalg.norm(delta[:3])), float(np.linalg.norm(delta[3:6]))
