from __future__ import annotations

from typing import Optional, Set, Tuple

import numpy as np

from .errors import (
    ClusterTooSmallError,
    DegenerateDataError,
    InvalidParameterError,
    TooManyClustersError,
)
from .lloyd import optimize
from .tracking import ProgressTracker
from .types import CentroidSet, ClusteringResult, PointSet, Slot, SplitResult

# ===========================
#  Helpers
# ===========================


def check_target(n_clusters: int, points: PointSet, centroids: CentroidSet) -> None:
    if n_clusters > points.n:
        raise TooManyClustersError(f"n_clusters={n_clusters} exceeds the {points.n} available points")
    if n_clusters < len(centroids):
        raise InvalidParameterError(
            f"n_clusters={n_clusters} is below the current centroid count {len(centroids)}"
        )


def splittable_members(points: PointSet, cluster: int) -> np.ndarray:
    members = points.members(cluster)
    if members.size < 2:
        raise ClusterTooSmallError(f"cluster {cluster} has {members.size} member(s), need 2 to split")
    return members


def seed_pair(m: int, rng: np.random.Generator) -> Tuple[int, int]:
    """Two distinct local indices in [0, m)."""
    i1 = int(rng.integers(0, m))
    i2 = i1
    while i2 == i1:
        i2 = int(rng.integers(0, m))
    return i1, i2


def local_kmeans(
    points: PointSet,
    members: np.ndarray,
    max_iter: Optional[int],
    rng: np.random.Generator,
) -> ClusteringResult:
    """
    Two-centroid k-means restricted to `members`, seeded from two distinct members.
    Works on a copy: neither `points` nor any centroid set is touched.
    Returned labels are local (0 / 1), aligned with `members`.
    """
    sub = points.subset(members)
    i1, i2 = seed_pair(sub.n, rng)
    pair = CentroidSet.from_rows(sub.X, [i1, i2])
    local_sse = optimize(sub, pair, max_iter)
    return ClusteringResult(local_sse, sub.labels, pair.to_array())


def commit_pair(centroids: CentroidSet, target: int, pair: np.ndarray) -> Tuple[Slot, Slot]:
    retained = centroids.replace(target, pair[0])
    appended = centroids.append(pair[1])
    return retained, appended


# ===========================
#  Split variants
# ===========================


def split_intra_cluster(
    points: PointSet,
    centroids: CentroidSet,
    target: int,
    max_iter: Optional[int],
    rng: np.random.Generator,
) -> SplitResult:
    """
    Split `target` by local k-means over its own members. Only those members are relabelled.
    """
    members = splittable_members(points, target)
    local = local_kmeans(points, members, max_iter, rng)
    retained, appended = commit_pair(centroids, target, local.centroids)
    points.labels[members] = np.where(local.labels == 0, retained.index, appended.index)
    return SplitResult(target, retained, appended, frozenset({retained.index, appended.index}))


def split_global(
    points: PointSet,
    centroids: CentroidSet,
    target: int,
    max_iter: Optional[int],
    rng: np.random.Generator,
) -> SplitResult:
    """
    Seed the pair from two random members of `target`, then run k-means over the
    whole dataset so the new centroid can also take points from other clusters.
    """
    members = splittable_members(points, target)
    i1, i2 = seed_pair(members.size, rng)
    retained, appended = commit_pair(centroids, target, points.X[members[[i1, i2]]])
    optimize(points, centroids, max_iter)
    return SplitResult(target, retained, appended, frozenset(range(len(centroids))))


def local_repartition(points: PointSet, centroids: CentroidSet, retained: int, appended: int) -> Set[int]:
    """
    Pull points of other clusters over to the split pair when one of the pair is strictly
    closer than their current centroid. Returns the clusters that lost points.
    """
    labels = points.labels
    outside = np.flatnonzero((labels != retained) & (labels != appended))
    if outside.size == 0:
        return set()

    C = centroids.C
    Xo = points.X[outside]
    cur = labels[outside]
    d_cur = ((Xo - C[cur]) ** 2).sum(axis=1)
    d_split = ((Xo - C[retained]) ** 2).sum(axis=1)
    d_new = ((Xo - C[appended]) ** 2).sum(axis=1)

    move = (d_split < d_cur) | (d_new < d_cur)
    if not move.any():
        return set()
    affected = {int(c) for c in np.unique(cur[move])}
    labels[outside[move]] = np.where(d_split[move] <= d_new[move], retained, appended)
    return affected


def split_local_repartition(
    points: PointSet,
    centroids: CentroidSet,
    target: int,
    max_iter: Optional[int],
    rng: np.random.Generator,
) -> SplitResult:
    res = split_intra_cluster(points, centroids, target, max_iter, rng)
    lost = local_repartition(points, centroids, res.retained.index, res.appended.index)
    return SplitResult(res.target, res.retained, res.appended, res.affected | frozenset(lost))


# ===========================
#  Random split
# ===========================


def run_random_split(
    points: PointSet,
    centroids: CentroidSet,
    n_clusters: int,
    max_iter: Optional[int],
    rng: np.random.Generator,
    tracker: Optional[ProgressTracker] = None,
) -> float:
    """
    Split uniformly random clusters (intra-cluster) until `n_clusters` centroids exist,
    then run one global k-means. Returns the final SSE.
    """
    check_target(n_clusters, points, centroids)
    if tracker is not None:
        tracker.record(points, centroids, 0)

    step = 1
    while len(centroids) < n_clusters:
        target = int(rng.integers(0, len(centroids)))
        try:
            split_intra_cluster(points, centroids, target, max_iter, rng)
        except ClusterTooSmallError:
            sizes = np.bincount(points.labels, minlength=len(centroids))
            if sizes.max() < 2:
                raise DegenerateDataError("no cluster has two members left to split") from None
            continue
        if tracker is not None:
            tracker.record(points, centroids, step, target)
        step += 1

    final = optimize(points, centroids, max_iter)
    if tracker is not None:
        tracker.record(points, centroids, step)
    return final
