"""
Reductions: sum factor contributions into (H, b, e).

Every linearization produces a fresh list of GICPFactor values, one per
source point, owned by the returned ReductionResult. Factors only read the
shared clouds and tree, so the per-factor loop can be split freely; the only
combination operator is summation.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import List, NamedTuple, Protocol, Sequence

import numpy as np

from gicp_reg.common.constants import NUM_THREADS_DEFAULT
from gicp_reg.points.kdtree import NearestNeighborSearch
from gicp_reg.points.point_cloud import PointCloudLike
from gicp_reg.registration.gicp_factor import GICPFactor
from gicp_reg.registration.rejector import CorrespondenceRejector


class ReductionResult(NamedTuple):
    H: np.ndarray
    b: np.ndarray
    e: float
    factors: List[GICPFactor]

    @property
    def num_inliers(self) -> int:
        return sum(1 for f in self.factors if f.inlier)


class Reduction(Protocol):
    def linearize(
        self,
        target: PointCloudLike,
        source: PointCloudLike,
        target_tree: NearestNeighborSearch,
        rejector: CorrespondenceRejector,
        T: np.ndarray,
    ) -> ReductionResult:
        ...

    def error(
        self,
        target: PointCloudLike,
        source: PointCloudLike,
        T: np.ndarray,
        factors: Sequence[GICPFactor],
    ) -> float:
        ...


def _linearize_range(target, source, target_tree, rejector, T, indices) -> ReductionResult:
    H = np.zeros((6, 6), dtype=float)
    b = np.zeros(6, dtype=float)
    e = 0.0
    factors = []
    for i in indices:
        lin = GICPFactor.linearize(target, source, target_tree, T, int(i), rejector)
        factors.append(lin.factor)
        if not lin.success:
            continue
        H += lin.H
        b += lin.b
        e += lin.e
    return ReductionResult(H=H, b=b, e=e, factors=factors)


def _error_range(target, source, T, factors) -> float:
    return sum(f.error(target, source, T) for f in factors)


class SerialReduction:
    """Sequential fold over all source points."""

    def linearize(self, target, source, target_tree, rejector, T) -> ReductionResult:
        return _linearize_range(target, source, target_tree, rejector, T, range(len(source)))

    def error(self, target, source, T, factors) -> float:
        return _error_range(target, source, T, factors)


class ParallelReduction:
    """
    Thread-pool map-reduce over contiguous chunks of source points.

    Partial sums are combined in chunk order and factors keep source order,
    so results match SerialReduction up to floating-point summation order.
    """

    def __init__(self, num_threads: int = NUM_THREADS_DEFAULT):
        if num_threads < 1:
            raise ValueError(f"num_threads must be >= 1, got {num_threads}")
        self.num_threads = int(num_threads)

    def _chunks(self, n: int) -> List[np.ndarray]:
        return [c for c in np.array_split(np.arange(n), self.num_threads) if len(c) > 0]

    def linearize(self, target, source, target_tree, rejector, T) -> ReductionResult:
        chunks = self._chunks(len(source))
        if len(chunks) <= 1:
            return _linearize_range(target, source, target_tree, rejector, T, range(len(source)))

        with ThreadPoolExecutor(max_workers=self.num_threads) as executor:
            futures = [
                executor.submit(_linearize_range, target, source, target_tree, rejector, T, chunk)
                for chunk in chunks
            ]
            partials = [f.result() for f in futures]

        H = np.zeros((6, 6), dtype=float)
        b = np.zeros(6, dtype=float)
        e = 0.0
        factors: List[GICPFactor] = []
        for partial in partials:
            H += partial.H
            b += partial.b
            e += partial.e
            factors.extend(partial.factors)
        return ReductionResult(H=H, b=b, e=e, factors=factors)

    def error(self, target, source, T, factors) -> float:
        factors = list(factors)
        chunks = [factors[c[0]:c[-1] + 1] for c in self._chunks(len(factors))]
        if len(chunks) <= 1:
            return _error_range(target, source, T, factors)

        with ThreadPoolExecutor(max_workers=self.num_threads) as executor:
            futures = [executor.submit(_error_range, target, source, T, chunk) for chunk in chunks]
            return float(sum(f.result() for f in futures))


def make_reduction(num_threads: int = NUM_THREADS_DEFAULT) -> Reduction:
    """SerialReduction for one thread, ParallelReduction otherwise."""
    if num_threads <= 1:
        return SerialReduction()
    return ParallelReduction(num_threads)
