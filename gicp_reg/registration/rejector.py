"""
Correspondence rejectors.

A rejector is any callable (T, target_index, source_index, sq_dist) -> bool
returning True when the nearest-neighbour candidate must NOT be used.
Rejectors are immutable and evaluated once per nearest-neighbour query.
"""

import math
from dataclasses import dataclass
from typing import Optional, Protocol

import numpy as np

from gicp_reg.common.constants import DISTANCE_REJECTOR_MAX_DIST_SQ_DEFAULT


class CorrespondenceRejector(Protocol):
    def __call__(self, T: np.ndarray, target_index: int, source_index: int, sq_dist: float) -> bool:
        ...


@dataclass(frozen=True)
class NullRejector:
    """Accepts every correspondence."""

    def __call__(self, T: np.ndarray, target_index: int, source_index: int, sq_dist: float) -> bool:
        return False


@dataclass(frozen=True, init=False)
class DistanceRejector:
    """
    Rejects correspondences farther than a maximum distance.

    Configure with either max_dist (positional) or max_dist_sq (keyword);
    the threshold is stored squared.
    """
    max_dist_sq: float

    def __init__(self, max_dist: Optional[float] = None, *, max_dist_sq: Optional[float] = None):
        if max_dist is not None and max_dist_sq is not None:
            raise ValueError("pass either max_dist or max_dist_sq, not both")
        if max_dist is not None:
            max_dist_sq = float(max_dist) * float(max_dist)
        elif max_dist_sq is None:
            max_dist_sq = DISTANCE_REJECTOR_MAX_DIST_SQ_DEFAULT
        if max_dist_sq < 0.0:
            raise ValueError(f"max_dist_sq must be non-negative, got {max_dist_sq}")
        object.__setattr__(self, "max_dist_sq", float(max_dist_sq))

    @property
    def max_dist(self) -> float:
        return math.sqrt(self.max_dist_sq)

    def __call__(self, T: np.ndarray, target_index: int, source_index: int, sq_dist: float) -> bool:
        return sq_dist > self.max_dist_sq
