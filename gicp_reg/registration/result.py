"""
Registration result returned by the optimizers.
"""

from dataclasses import dataclass, field

import numpy as np


@dataclass
class RegistrationResult:
    """
    Outcome of one optimize() call.

    H, b and error are those of the last linearization. iterations is the
    zero-based index of the last executed iteration.
    """
    T_target_source: np.ndarray = field(default_factory=lambda: np.eye(4, dtype=float))
    converged: bool = False
    iterations: int = 0
    num_inliers: int = 0
    H: np.ndarray = field(default_factory=lambda: np.zeros((6, 6), dtype=float))
    b: np.ndarray = field(default_factory=lambda: np.zeros(6, dtype=float))
    error: float = 0.0

    @property
    def rotation(self) -> np.ndarray:
        return self.T_target_source[:3, :3]

    @property
    def translation(self) -> np.ndarray:
        return self.T_target_source[:3, 3]
