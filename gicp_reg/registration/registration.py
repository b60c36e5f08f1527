"""
One-call GICP registration.

align() takes raw (N, 3) arrays, estimates covariances, builds the target
KD-tree and runs the optimizer selected in RegistrationParams. align_clouds()
is the same without preprocessing, for callers that already hold clouds with
covariances and a tree.
"""

import logging
from typing import Optional, Tuple, Union

import numpy as np

from gicp_reg.common.param_models import RegistrationParams
from gicp_reg.points.kdtree import KdTree, NearestNeighborSearch
from gicp_reg.points.point_cloud import PointCloud, PointCloudLike, estimate_covariances
from gicp_reg.registration.optimizer import GaussNewtonOptimizer, LevenbergMarquardtOptimizer
from gicp_reg.registration.reduction import make_reduction
from gicp_reg.registration.rejector import CorrespondenceRejector, DistanceRejector, NullRejector
from gicp_reg.registration.result import RegistrationResult
from gicp_reg.registration.termination import TerminationCriteria

_logger = logging.getLogger(__name__)

Optimizer = Union[GaussNewtonOptimizer, LevenbergMarquardtOptimizer]


def make_rejector(params: RegistrationParams) -> CorrespondenceRejector:
    if params.rejector == "none":
        return NullRejector()
    return DistanceRejector(params.max_correspondence_distance)


def make_optimizer(params: RegistrationParams) -> Optimizer:
    if params.optimizer == "gauss_newton":
        return GaussNewtonOptimizer(
            verbose=params.verbose,
            max_iterations=params.max_iterations,
            damping=params.gn_damping,
        )
    return LevenbergMarquardtOptimizer(
        verbose=params.verbose,
        max_iterations=params.max_iterations,
        max_inner_iterations=params.max_inner_iterations,
        init_damping=params.lm_init_damping,
        damping_factor=params.lm_damping_factor,
    )


def make_criteria(params: RegistrationParams) -> TerminationCriteria:
    return TerminationCriteria(translation_eps=params.translation_eps, rotation_eps=params.rotation_eps)


def preprocess(points: np.ndarray, params: RegistrationParams) -> Tuple[PointCloud, KdTree]:
    """Build a cloud with estimated covariances and its KD-tree."""
    cloud = PointCloud.from_xyz(points)
    tree = KdTree(cloud)
    estimate_covariances(cloud, tree, params.num_neighbors)
    return cloud, tree


def align_clouds(
    target: PointCloudLike,
    source: PointCloudLike,
    target_tree: NearestNeighborSearch,
    init_T: Optional[np.ndarray] = None,
    params: Optional[RegistrationParams] = None,
) -> RegistrationResult:
    """Register prepared clouds (covariances already set) and return T_target_source."""
    params = params or RegistrationParams()

    optimizer = make_optimizer(params)
    return optimizer.optimize(
        target,
        source,
        target_tree,
        make_rejector(params),
        make_criteria(params),
        make_reduction(params.num_threads),
        init_T,
    )


def align(
    target_points: np.ndarray,
    source_points: np.ndarray,
    init_T: Optional[np.ndarray] = None,
    params: Optional[RegistrationParams] = None,
) -> RegistrationResult:
    """
    Estimate T_target_source aligning source_points onto target_points.

    Args:
        target_points: Target point cloud (M, 3)
        source_points: Source point cloud (N, 3)
        init_T: Initial 4x4 guess (identity if None)
        params: Registration parameters (defaults if None)

    Returns:
        RegistrationResult; inspect converged / num_inliers / error.
    """
    params = params or RegistrationParams()

    target, target_tree = preprocess(target_points, params)
    source, _ = preprocess(source_points, params)
    _logger.debug(f"align: target={len(target)} source={len(source)} optimizer={params.optimizer}")

    return align_clouds(target, source, target_tree, init_T, params)
