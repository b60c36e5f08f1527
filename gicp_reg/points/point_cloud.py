"""
Point cloud container with per-point covariances.

Points are stored homogeneous (N, 4) with w = 1 so a 4x4 pose applies
directly; covariances are (N, 4, 4) with the spatial block top-left and a
zero homogeneous row/column.

Covariance model (Segal et al. 2009, plane-to-plane GICP):
    Each point's covariance is the sample covariance of its k nearest
    neighbours, regularized to a flat disc: the eigenvalues are replaced by
    (1e-3, 1, 1) so that the surface normal direction is strongly weighted
    and in-plane directions are not.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Protocol

import numpy as np

from gicp_reg.common import constants

if TYPE_CHECKING:
    from gicp_reg.points.kdtree import NearestNeighborSearch


class PointCloudLike(Protocol):
    """Read-only point/covariance access used by the factors."""

    def __len__(self) -> int:
        ...

    def point(self, i: int) -> np.ndarray:
        """Homogeneous 4-vector of point i."""
        ...

    def cov(self, i: int) -> np.ndarray:
        """4x4 covariance of point i."""
        ...


def to_homogeneous(points: np.ndarray) -> np.ndarray:
    """(N, 3) or (N, 4) -> (N, 4) with w = 1."""
    points = np.asarray(points, dtype=float)
    if points.ndim != 2 or points.shape[1] not in (3, 4):
        raise ValueError(f"points must have shape (N, 3) or (N, 4), got {points.shape}")
    out = np.ones((points.shape[0], 4), dtype=float)
    out[:, :3] = points[:, :3]
    return out


@dataclass
class PointCloud:
    """
    Homogeneous points plus optional covariances.

    Attributes:
        points: (N, 4) homogeneous points
        covs: (N, 4, 4) covariances, or None until estimated
    """
    points: np.ndarray
    covs: Optional[np.ndarray] = None

    def __post_init__(self):
        self.points = to_homogeneous(self.points)
        if self.covs is not None:
            self.covs = _as_cov_array(self.covs, len(self.points))

    @classmethod
    def from_xyz(cls, xyz: np.ndarray, covs: Optional[np.ndarray] = None) -> "PointCloud":
        return cls(points=np.asarray(xyz, dtype=float), covs=covs)

    def __len__(self) -> int:
        return int(self.points.shape[0])

    @property
    def xyz(self) -> np.ndarray:
        return self.points[:, :3]

    def point(self, i: int) -> np.ndarray:
        return self.points[i]

    def cov(self, i: int) -> np.ndarray:
        if self.covs is None:
            raise ValueError("covariances have not been estimated for this cloud")
        return self.covs[i]

    def transformed(self, T: np.ndarray) -> "PointCloud":
        """Copy of the cloud with points and covariances mapped by T."""
        T = np.asarray(T, dtype=float)
        points = self.points @ T.T
        covs = None
        if self.covs is not None:
            covs = T @ self.covs @ T.T
        return PointCloud(points=points, covs=covs)


def _as_cov_array(covs: np.ndarray, n: int) -> np.ndarray:
    covs = np.asarray(covs, dtype=float)
    if covs.shape == (n, 3, 3):
        out = np.zeros((n, 4, 4), dtype=float)
        out[:, :3, :3] = covs
        return out
    if covs.shape != (n, 4, 4):
        raise ValueError(f"covs must have shape ({n}, 3, 3) or ({n}, 4, 4), got {covs.shape}")
    return covs.copy()


def isotropic_covariances(n: int, variance: float) -> np.ndarray:
    """(n, 4, 4) covariances equal to variance * I in the spatial block."""
    covs = np.zeros((n, 4, 4), dtype=float)
    covs[:, :3, :3] = variance * np.eye(3, dtype=float)
    return covs


def estimate_covariances(
    cloud: PointCloud,
    tree: "NearestNeighborSearch",
    num_neighbors: int = constants.COVARIANCE_NUM_NEIGHBORS_DEFAULT,
) -> PointCloud:
    """
    Estimate plane-regularized covariances in place and return the cloud.

    Points with fewer than COVARIANCE_MIN_NEIGHBORS neighbours get an
    identity spatial covariance.
    """
    n = len(cloud)
    covs = np.zeros((n, 4, 4), dtype=float)
    plane = np.diag(constants.COVARIANCE_PLANE_EIGENVALUES)

    for i in range(n):
        indices, _ = tree.knn_search(cloud.point(i), num_neighbors)
        if len(indices) < constants.COVARIANCE_MIN_NEIGHBORS:
            covs[i, :3, :3] = np.eye(3, dtype=float)
            continue

        neighbors = cloud.xyz[indices]
        centered = neighbors - neighbors.mean(axis=0)
        sample_cov = centered.T @ centered / len(indices)

        # eigh returns ascending eigenvalues; the smallest is the surface normal
        _, U = np.linalg.eigh(sample_cov)
        covs[i, :3, :3] = U @ plane @ U.T

    cloud.covs = covs
    return cloud
