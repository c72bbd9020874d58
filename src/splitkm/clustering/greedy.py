from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

import numpy as np

from .geometry import cluster_sse
from .lloyd import optimize
from .split import (
    check_target,
    local_kmeans,
    split_global,
    split_intra_cluster,
    split_local_repartition,
)
from .tracking import ProgressTracker
from .types import CentroidSet, PointSet


class SplitVariant(str, Enum):
    INTRA_CLUSTER = "intra_cluster"
    GLOBAL = "global"
    LOCAL_REPARTITION = "local_repartition"


_SPLITTERS = {
    SplitVariant.INTRA_CLUSTER: split_intra_cluster,
    SplitVariant.GLOBAL: split_global,
    SplitVariant.LOCAL_REPARTITION: split_local_repartition,
}


def tentative_sse_drop(
    points: PointSet,
    cluster: int,
    cluster_sse_value: float,
    max_iter: Optional[int],
    rng: np.random.Generator,
) -> float:
    """
    How much the SSE of `cluster` would fall if it were split in two.
    Throwaway local k-means; global state is not modified. Clusters with fewer
    than two members cannot be split and score 0.
    """
    members = points.members(cluster)
    if members.size < 2:
        return 0.0
    local = local_kmeans(points, members, max_iter, rng)
    return cluster_sse_value - local.sse


@dataclass
class SplitScores:
    """Per-cluster SSE and tentative SSE drop, indexed like the centroid set."""

    cluster_sse: List[float] = field(default_factory=list)
    sse_drop: List[float] = field(default_factory=list)

    def resize(self, k: int) -> None:
        while len(self.cluster_sse) < k:
            self.cluster_sse.append(0.0)
            self.sse_drop.append(0.0)

    def refresh(
        self,
        points: PointSet,
        centroids: CentroidSet,
        clusters: Iterable[int],
        max_iter: Optional[int],
        rng: np.random.Generator,
    ) -> None:
        self.resize(len(centroids))
        for c in sorted(clusters):
            self.cluster_sse[c] = cluster_sse(points, centroids, c)
            self.sse_drop[c] = tentative_sse_drop(points, c, self.cluster_sse[c], max_iter, rng)

    def best(self) -> int:
        # first maximum wins
        return int(np.argmax(self.sse_drop))


def run_sse_split(
    points: PointSet,
    centroids: CentroidSet,
    n_clusters: int,
    max_iter: Optional[int],
    rng: np.random.Generator,
    variant: SplitVariant | str = SplitVariant.INTRA_CLUSTER,
    tracker: Optional[ProgressTracker] = None,
) -> float:
    """
    Grow the centroid set one split at a time, always splitting the cluster with the
    largest tentative SSE drop, then finish with one global k-means. Returns the final SSE.
    """
    variant = SplitVariant(variant)
    splitter = _SPLITTERS[variant]
    check_target(n_clusters, points, centroids)
    if tracker is not None:
        tracker.record(points, centroids, 0)

    step = 1
    # a lone cluster needs no decision; every variant opens with an intra-cluster split
    if len(centroids) == 1 and n_clusters > 1:
        split_intra_cluster(points, centroids, 0, max_iter, rng)
        if tracker is not None:
            tracker.record(points, centroids, step, 0)
        step += 1

    scores = SplitScores()
    scores.refresh(points, centroids, range(len(centroids)), max_iter, rng)

    while len(centroids) < n_clusters:
        target = scores.best()
        res = splitter(points, centroids, target, max_iter, rng)
        scores.refresh(points, centroids, res.affected, max_iter, rng)
        if tracker is not None:
            tracker.record(points, centroids, step, target)
        step += 1

    final = optimize(points, centroids, max_iter)
    if tracker is not None:
        tracker.record(points, centroids, step)
    return final
