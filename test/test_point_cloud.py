"""
Tests for PointCloud, covariance estimation and the KD-tree.
"""

import numpy as np
import pytest

from gicp_reg.common.se3 import make_pose
from gicp_reg.points.kdtree import KdTree
from gicp_reg.points.point_cloud import (
    PointCloud,
    estimate_covariances,
    isotropic_covariances,
)


class TestPointCloud:
    def test_points_are_homogeneous(self, small_pointcloud):
        cloud = PointCloud.from_xyz(small_pointcloud)
        assert cloud.points.shape == (len(small_pointcloud), 4)
        assert np.all(cloud.points[:, 3] == 1.0)
        assert np.allclose(cloud.point(3)[:3], small_pointcloud[3])

    def test_rejects_bad_shape(self):
        with pytest.raises(ValueError):
            PointCloud.from_xyz(np.zeros((5, 2)))

    def test_3x3_covariances_are_padded(self):
        covs = np.tile(np.eye(3), (4, 1, 1))
        cloud = PointCloud.from_xyz(np.zeros((4, 3)), covs)
        assert cloud.covs.shape == (4, 4, 4)
        assert np.all(cloud.cov(0)[3, :] == 0.0)

    def test_cov_before_estimation_is_error(self):
        cloud = PointCloud.from_xyz(np.zeros((2, 3)))
        with pytest.raises(ValueError):
            cloud.cov(0)

    def test_transformed(self):
        cloud = PointCloud.from_xyz(np.array([[1.0, 0.0, 0.0]]), isotropic_covariances(1, 2.0))
        T = make_pose(rotvec=[0.0, 0.0, np.pi / 2], translation=[0.0, 0.0, 1.0])
        moved = cloud.transformed(T)

        assert np.allclose(moved.point(0), [0.0, 1.0, 1.0, 1.0])
        # Isotropic covariance is rotation invariant
        assert np.allclose(moved.cov(0), cloud.cov(0))


class TestKdTree:
    def test_nearest_neighbor(self):
        tree = KdTree(np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 2.0, 0.0]]))
        indices, sq_dists = tree.knn_search(np.array([0.9, 0.1, 0.0, 1.0]), 1)

        assert list(indices) == [1]
        assert sq_dists[0] == pytest.approx(0.02)

    def test_k_neighbors_sorted(self, small_pointcloud):
        cloud = PointCloud.from_xyz(small_pointcloud)
        tree = KdTree(cloud)
        indices, sq_dists = tree.knn_search(cloud.point(0), 5)

        assert len(indices) == 5
        assert indices[0] == 0
        assert sq_dists[0] == 0.0
        assert np.all(np.diff(sq_dists) >= 0.0)

    def test_k_larger_than_cloud(self):
        tree = KdTree(np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]]))
        indices, _ = tree.knn_search(np.zeros(3), 10)
        assert sorted(indices) == [0, 1]

    def test_empty_tree_finds_nothing(self):
        tree = KdTree(np.zeros((0, 3)))
        indices, sq_dists = tree.knn_search(np.zeros(3), 1)

        assert len(tree) == 0
        assert len(indices) == 0
        assert len(sq_dists) == 0


class TestEstimateCovariances:
    def test_plane_regularized(self, numpy_seed):
        """Points on z = 0: normal direction gets the small eigenvalue."""
        xy = np.random.uniform(-1.0, 1.0, size=(200, 2))
        points = np.column_stack([xy, np.zeros(200)])
        cloud = PointCloud.from_xyz(points)
        estimate_covariances(cloud, KdTree(cloud), num_neighbors=10)

        for i in (0, 50, 199):
            C = cloud.cov(i)
            assert np.allclose(C, C.T)
            assert np.all(C[3, :] == 0.0) and np.all(C[:, 3] == 0.0)
            assert np.allclose(np.linalg.eigvalsh(C[:3, :3]), [1e-3, 1.0, 1.0])
            assert C[2, 2] == pytest.approx(1e-3)

    def test_too_few_neighbors_gives_identity(self):
        cloud = PointCloud.from_xyz(np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]]))
        estimate_covariances(cloud, KdTree(cloud), num_neighbors=20)

        assert np.allclose(cloud.cov(0)[:3, :3], np.eye(3))

    def test_returns_same_cloud(self, small_pointcloud):
        cloud = PointCloud.from_xyz(small_pointcloud)
        out = estimate_covariances(cloud, KdTree(cloud))
        assert out is cloud
        assert cloud.covs.shape == (len(small_pointcloud), 4, 4)
