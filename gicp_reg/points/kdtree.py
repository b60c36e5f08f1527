"""
Nearest-neighbour search over a point cloud (scipy cKDTree).
"""

from typing import Protocol, Tuple, Union

import numpy as np
from scipy.spatial import cKDTree

from gicp_reg.points.point_cloud import PointCloud


class NearestNeighborSearch(Protocol):
    """k-nearest-neighbour query used by the factors and covariance estimation."""

    def knn_search(self, query: np.ndarray, k: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        Return (indices, squared distances) of up to k neighbours, nearest first.

        Both arrays are empty when nothing was found.
        """
        ...


class KdTree:
    """
    KD-tree over the spatial coordinates of a cloud.

    The tree is built once and is read-only afterwards, so it may be shared
    between threads.
    """

    def __init__(self, cloud: Union[PointCloud, np.ndarray], leafsize: int = 16):
        xyz = cloud.xyz if isinstance(cloud, PointCloud) else np.asarray(cloud, dtype=float)[:, :3]
        self.num_points = int(xyz.shape[0])
        self._tree = cKDTree(xyz, leafsize=leafsize) if self.num_points > 0 else None

    def __len__(self) -> int:
        return self.num_points

    def knn_search(self, query: np.ndarray, k: int = 1) -> Tuple[np.ndarray, np.ndarray]:
        if self._tree is None or k < 1:
            return np.zeros(0, dtype=int), np.zeros(0, dtype=float)

        query = np.asarray(query, dtype=float).reshape(-1)[:3]
        k = min(k, self.num_points)
        dists, indices = self._tree.query(query, k=k)
        dists = np.atleast_1d(dists)
        indices = np.atleast_1d(indices)

        # cKDTree pads missing neighbours with index n and infinite distance
        valid = indices < self.num_points
        return indices[valid].astype(int), dists[valid] ** 2

