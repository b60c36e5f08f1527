"""
Generalized-ICP factor: per-correspondence linearization.

GENERATIVE MODEL (Segal et al. 2009):
    Source point a_i and target point b_j are samples of the same surface,
    a_i ~ N(â_i, C_i^A), b_j ~ N(b̂_j, C_j^B). For the true T:

        d_ij = b_j - T a_i ~ N(0, C_j^B + R C_i^A R^T)

    The factor cost is the Mahalanobis norm of d_ij:

        e = 0.5 * d^T W d,   W = (C_j^B + R C_i^A R^T)^{-1}

LINEARIZATION:
    Perturbation on the right, T(δ) = T Exp(δ), δ = [ω; v]:

        ∂d/∂ω = R [a_i]_×
        ∂d/∂v = -R

    H = J^T W J,  b = J^T W d

Everything is kept homogeneous (4-vectors, 4x4 W with only the 3x3 block
non-zero) so the pose multiplies points directly.
"""

from dataclasses import dataclass, field
from typing import NamedTuple, Optional

import numpy as np

from gicp_reg.common.primitives import safe_inverse_3x3
from gicp_reg.common.se3 import skew
from gicp_reg.points.kdtree import NearestNeighborSearch
from gicp_reg.points.point_cloud import PointCloudLike
from gicp_reg.registration.rejector import CorrespondenceRejector


def _zero_mahalanobis() -> np.ndarray:
    return np.zeros((4, 4), dtype=float)


@dataclass(frozen=True, eq=False)
class GICPFactor:
    """
    Correspondence state of one source point.

    Attributes:
        source_index: Index into the source cloud
        target_index: Matched target index, None when there is no correspondence
        mahalanobis: 4x4 weighting matrix (3x3 block non-zero)
    """
    source_index: int
    target_index: Optional[int] = None
    mahalanobis: np.ndarray = field(default_factory=_zero_mahalanobis)

    @property
    def inlier(self) -> bool:
        return self.target_index is not None

    @classmethod
    def linearize(
        cls,
        target: PointCloudLike,
        source: PointCloudLike,
        target_tree: NearestNeighborSearch,
        T: np.ndarray,
        source_index: int,
        rejector: CorrespondenceRejector,
    ) -> "LinearizedFactor":
        """
        Find the correspondence of source_index at pose T and linearize it.

        Never raises on missing data: a failed search or a rejected
        candidate yields a factor without correspondence and zero H, b, e.
        """
        source_pt = source.point(source_index)
        transed_source_pt = T @ source_pt

        indices, sq_dists = target_tree.knn_search(transed_source_pt, 1)
        if len(indices) == 0:
            return LinearizedFactor.failed(cls(source_index=source_index))

        target_index = int(indices[0])
        if rejector(T, target_index, source_index, float(sq_dists[0])):
            return LinearizedFactor.failed(cls(source_index=source_index))

        RCR = target.cov(target_index) + T @ source.cov(source_index) @ T.T
        mahalanobis = np.zeros((4, 4), dtype=float)
        mahalanobis[:3, :3] = safe_inverse_3x3(RCR[:3, :3])

        residual = target.point(target_index) - transed_source_pt

        R = T[:3, :3]
        J = np.zeros((4, 6), dtype=float)
        J[:3, :3] = R @ skew(source_pt[:3])
        J[:3, 3:6] = -R

        JtW = J.T @ mahalanobis
        H = JtW @ J
        b = JtW @ residual
        e = 0.5 * float(residual @ mahalanobis @ residual)

        factor = cls(source_index=source_index, target_index=target_index, mahalanobis=mahalanobis)
        return LinearizedFactor(factor=factor, H=H, b=b, e=e)

    def error(self, target: PointCloudLike, source: PointCloudLike, T: np.ndarray) -> float:
        """Cost at pose T with the cached correspondence and weighting (no search)."""
        if self.target_index is None:
            return 0.0

        residual = target.point(self.target_index) - T @ source.point(self.source_index)
        return 0.5 * float(residual @ self.mahalanobis @ residual)


class LinearizedFactor(NamedTuple):
    """A factor together with its contribution to the normal equations."""
    factor: GICPFactor
    H: np.ndarray
    b: np.ndarray
    e: float

    @property
    def success(self) -> bool:
        return self.factor.inlier

    @classmethod
    def failed(cls, factor: GICPFactor) -> "LinearizedFactor":
        return cls(factor=factor, H=np.zeros((6, 6), dtype=float), b=np.zeros(6, dtype=float), e=0.0)
