"""
Pose optimizers for GICP registration.

Both optimizers re-linearize all factors at the current estimate, solve the
damped normal equations

    (H + λI) δ = -b

for a tangent step δ = [ω; v], and update the pose on the right:
T <- T Exp(δ). They differ only in step acceptance:

- GaussNewtonOptimizer: fixed λ, every step is applied.
- LevenbergMarquardtOptimizer: a step is applied only if it lowers the
  cost evaluated with the cached correspondences; λ shrinks on acceptance
  and grows on rejection.

Degenerate problems are never raised: if every factor fails, H = b = 0 and
the solve returns a zero step. Callers inspect converged / num_inliers /
error on the result.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from gicp_reg.common.constants import (
    GN_DAMPING_DEFAULT,
    LM_DAMPING_FACTOR_DEFAULT,
    LM_INIT_DAMPING_DEFAULT,
    LM_MAX_INNER_ITERATIONS_DEFAULT,
    MAX_ITERATIONS_DEFAULT,
)
from gicp_reg.common.primitives import damped_symmetric_solve, step_norms
from gicp_reg.common.se3 import as_pose, se3_exp
from gicp_reg.points.kdtree import NearestNeighborSearch
from gicp_reg.points.point_cloud import PointCloudLike
from gicp_reg.registration.reduction import Reduction, ReductionResult
from gicp_reg.registration.rejector import CorrespondenceRejector
from gicp_reg.registration.result import RegistrationResult
from gicp_reg.registration.termination import ConvergenceCriteria

_logger = logging.getLogger(__name__)


def _record(result: RegistrationResult, i: int, lin: ReductionResult) -> None:
    result.iterations = i
    result.H = lin.H
    result.b = lin.b
    result.error = lin.e


@dataclass
class GaussNewtonOptimizer:
    """
    Fixed-damping Gauss-Newton.

    No monotonic-decrease guarantee: steps are applied unconditionally.
    """
    verbose: bool = False
    max_iterations: int = MAX_ITERATIONS_DEFAULT
    damping: float = GN_DAMPING_DEFAULT

    def optimize(
        self,
        target: PointCloudLike,
        source: PointCloudLike,
        target_tree: NearestNeighborSearch,
        rejector: CorrespondenceRejector,
        criteria: ConvergenceCriteria,
        reduction: Reduction,
        init_T: Optional[np.ndarray] = None,
    ) -> RegistrationResult:
        if self.verbose:
            _logger.info("--- GN optimization ---")

        result = RegistrationResult(T_target_source=as_pose(init_T))
        lin: Optional[ReductionResult] = None

        for i in range(self.max_iterations):
            if result.converged:
                break

            lin = reduction.linearize(target, source, target_tree, rejector, result.T_target_source)
            delta = damped_symmetric_solve(lin.H, lin.b, self.damping)

            if self.verbose:
                dr, dt = step_norms(delta)
                _logger.info(f"iter={i} e={lin.e:.6g} lambda={self.damping:.3g} dt={dt:.6g} dr={dr:.6g}")

            result.converged = criteria.converged(delta)
            result.T_target_source = result.T_target_source @ se3_exp(delta)
            _record(result, i, lin)

        result.num_inliers = lin.num_inliers if lin is not None else 0
        _logger.debug(
            f"GN finished: iterations={result.iterations} converged={result.converged} "
            f"error={result.error:.6g} inliers={result.num_inliers}"
        )
        return result


@dataclass
class LevenbergMarquardtOptimizer:
    """
    Levenberg-Marquardt with a bounded inner trust-region search.

    Each outer iteration linearizes once, then tries up to
    max_inner_iterations damped steps. Trial costs reuse the cached
    correspondences (no new search). An outer iteration that accepts nothing
    leaves the pose unchanged and the damping grown.
    """
    verbose: bool = False
    max_iterations: int = MAX_ITERATIONS_DEFAULT
    max_inner_iterations: int = LM_MAX_INNER_ITERATIONS_DEFAULT
    init_damping: float = LM_INIT_DAMPING_DEFAULT
    damping_factor: float = LM_DAMPING_FACTOR_DEFAULT

    def optimize(
        self,
        target: PointCloudLike,
        source: PointCloudLike,
        target_tree: NearestNeighborSearch,
        rejector: CorrespondenceRejector,
        criteria: ConvergenceCriteria,
        reduction: Reduction,
        init_T: Optional[np.ndarray] = None,
    ) -> RegistrationResult:
        if self.verbose:
            _logger.info("--- LM optimization ---")

        damping = self.init_damping
        result = RegistrationResult(T_target_source=as_pose(init_T))
        lin: Optional[ReductionResult] = None

        for i in range(self.max_iterations):
            if result.converged:
                break

            lin = reduction.linearize(target, source, target_tree, rejector, result.T_target_source)

            for j in range(self.max_inner_iterations):
                delta = damped_symmetric_solve(lin.H, lin.b, damping)
                new_T = result.T_target_source @ se3_exp(delta)
                new_e = reduction.error(target, source, new_T, lin.factors)

                if self.verbose:
                    dr, dt = step_norms(delta)
                    _logger.info(
                        f"iter={i} inner={j} e={lin.e:.6g} new_e={new_e:.6g} "
                        f"lambda={damping:.3g} dt={dt:.6g} dr={dr:.6g}"
                    )

                if new_e < lin.e:
                    result.converged = criteria.converged(delta)
                    result.T_target_source = new_T
                    damping /= self.damping_factor
                    break

                damping *= self.damping_factor

            _record(result, i, lin)

        result.num_inliers = lin.num_inliers if lin is not None else 0
        _logger.debug(
            f"LM finished: iterations={result.iterations} converged={result.converged} "
            f"error={result.error:.6g} inliers={result.num_inliers}"
        )
        return result
