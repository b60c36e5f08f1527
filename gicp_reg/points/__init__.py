"""
Point storage and nearest-neighbour search.

Modules:
- point_cloud: PointCloud container and covariance estimation
- kdtree: scipy-backed KD-tree
"""

from gicp_reg.points.point_cloud import (
    PointCloud,
    PointCloudLike,
    estimate_covariances,
    isotropic_covariances,
)
from gicp_reg.points.kdtree import KdTree, NearestNeighborSearch

__all__ = [
    "PointCloud",
    "PointCloudLike",
    "estimate_covariances",
    "isotropic_covariances",
    "KdTree",
    "NearestNeighborSearch",
]
