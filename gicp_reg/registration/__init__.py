"""
GICP registration core.

Modules:
- rejector: correspondence rejectors
- gicp_factor: per-correspondence linearization
- reduction: serial / thread-pool aggregation of factors
- termination: convergence test on the tangent step
- optimizer: Gauss-Newton and Levenberg-Marquardt loops
- registration: align() front door
"""

from gicp_reg.registration.gicp_factor import GICPFactor, LinearizedFactor
from gicp_reg.registration.optimizer import GaussNewtonOptimizer, LevenbergMarquardtOptimizer
from gicp_reg.registration.reduction import ParallelReduction, ReductionResult, SerialReduction
from gicp_reg.registration.registration import align, align_clouds
from gicp_reg.registration.rejector import DistanceRejector, NullRejector
from gicp_reg.registration.result import RegistrationResult
from gicp_reg.registration.termination import TerminationCriteria

__all__ = [
    "GICPFactor",
    "LinearizedFactor",
    "GaussNewtonOptimizer",
    "LevenbergMarquardtOptimizer",
    "ParallelReduction",
    "ReductionResult",
    "SerialReduction",
    "align",
    "align_clouds",
    "DistanceRejector",
    "NullRejector",
    "RegistrationResult",
    "TerminationCriteria",
]
