import os
import sys

import numpy as np
import pytest

# Ensure local package import works for pytest collection.
_TEST_DIR = os.path.dirname(__file__)
_PKG_ROOT = os.path.abspath(os.path.join(_TEST_DIR, ".."))
if _PKG_ROOT not in sys.path:
    sys.path.insert(0, _PKG_ROOT)

from gicp_reg.common.se3 import make_pose, se3_inverse  # noqa: E402
from gicp_reg.points.kdtree import KdTree  # noqa: E402
from gicp_reg.points.point_cloud import PointCloud, isotropic_covariances  # noqa: E402


# =============================================================================
# Test Utility Fixtures
# =============================================================================


@pytest.fixture
def numpy_seed():
    """Set numpy random seed for reproducible tests."""
    np.random.seed(42)
    yield


@pytest.fixture
def small_pointcloud():
    """Generate a small random point cloud (100, 3)."""
    rng = np.random.default_rng(42)
    return rng.standard_normal((100, 3))


@pytest.fixture
def grid_points():
    """5x5x5 grid with 1 m spacing centred on the origin (125 points)."""
    axis = np.arange(-2.0, 3.0)
    X, Y, Z = np.meshgrid(axis, axis, axis, indexing="ij")
    return np.stack([X.ravel(), Y.ravel(), Z.ravel()], axis=1)


@pytest.fixture
def true_pose():
    """Small known rigid motion T_target_source (2 deg, 5 cm)."""
    return make_pose(
        rotvec=np.deg2rad([1.0, -1.5, 2.0]),
        translation=[0.05, -0.03, 0.04],
    )


@pytest.fixture
def grid_problem(grid_points, true_pose):
    """
    Noiseless problem with exact mutual nearest neighbours.

    source_i = T^{-1} target_i, isotropic covariances (point-to-point
    weighting). Returns (target, source, target_tree, true_pose).
    """
    eps = 1e-3
    target = PointCloud.from_xyz(grid_points, isotropic_covariances(len(grid_points), eps))
    source_xyz = (to_h(grid_points) @ se3_inverse(true_pose).T)[:, :3]
    source = PointCloud.from_xyz(source_xyz, isotropic_covariances(len(grid_points), eps))
    return target, source, KdTree(target), true_pose


def to_h(points):
    out = np.ones((points.shape[0], 4))
    out[:, :3] = points
    return out
