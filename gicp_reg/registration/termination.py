"""
Convergence test on the tangent step of an optimizer iteration.
"""

from dataclasses import dataclass
from typing import Protocol

import numpy as np

from gicp_reg.common.constants import ROTATION_EPS_DEFAULT, TRANSLATION_EPS_DEFAULT
from gicp_reg.common.primitives import step_norms


class ConvergenceCriteria(Protocol):
    def converged(self, delta: np.ndarray) -> bool:
        ...


@dataclass(frozen=True)
class TerminationCriteria:
    """
    Converged when both parts of delta = [rot; trans] are small.

    Attributes:
        translation_eps: Max translation step norm (m)
        rotation_eps: Max rotation step norm (rad)
    """
    translation_eps: float = TRANSLATION_EPS_DEFAULT
    rotation_eps: float = ROTATION_EPS_DEFAULT

    def converged(self, delta: np.ndarray) -> bool:
        dr, dt = step_norms(delta)
        return dr <= self.rotation_eps and dt <= self.translation_eps
