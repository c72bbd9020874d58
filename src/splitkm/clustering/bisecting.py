from __future__ import annotations

from typing import List, Optional

import numpy as np

from .errors import DegenerateDataError, InvalidParameterError
from .geometry import cluster_sse
from .lloyd import assign, optimize
from .split import check_target, commit_pair, local_kmeans, split_intra_cluster, splittable_members
from .tracking import ProgressTracker
from .types import CentroidSet, ClusteringResult, PointSet


def tentative_bisect(
    points: PointSet,
    cluster: int,
    max_iter: Optional[int],
    rng: np.random.Generator,
) -> ClusteringResult:
    """One disposable two-way split of `cluster`; nothing global is modified."""
    members = splittable_members(points, cluster)
    return local_kmeans(points, members, max_iter, rng)


def best_bisection(
    points: PointSet,
    cluster: int,
    trials: int,
    max_iter: Optional[int],
    rng: np.random.Generator,
) -> ClusteringResult:
    best: Optional[ClusteringResult] = None
    for _ in range(trials):
        cur = tentative_bisect(points, cluster, max_iter, rng)
        if best is None or cur.sse < best.sse:
            best = cur
    return best


def pick_target(points: PointSet, centroids: CentroidSet, sse_list: List[float]) -> int:
    """
    Highest-SSE cluster by the (possibly stale) `sse_list`, among clusters that still
    have two members. Entries of smaller clusters are refreshed in place.
    """
    sizes = np.bincount(points.labels, minlength=len(centroids))
    for c in np.flatnonzero(sizes < 2):
        sse_list[c] = cluster_sse(points, centroids, int(c))
    candidates = np.flatnonzero(sizes >= 2)
    if candidates.size == 0:
        raise DegenerateDataError("no cluster has two members left to bisect")
    scores = np.asarray(sse_list, dtype=np.float64)[candidates]
    return int(candidates[np.argmax(scores)])


def run_bisecting(
    points: PointSet,
    centroids: CentroidSet,
    n_clusters: int,
    max_iter: Optional[int],
    rng: np.random.Generator,
    trials: int = 5,
    tracker: Optional[ProgressTracker] = None,
) -> float:
    """
    Bisecting k-means: repeatedly split the cluster with the highest SSE, keeping the best
    of `trials` local two-means runs, reassign globally after each commit, and finish
    with one global k-means. Returns the final SSE.
    """
    if trials < 1:
        raise InvalidParameterError(f"trials must be >= 1, got {trials}")
    check_target(n_clusters, points, centroids)
    if tracker is not None:
        tracker.record(points, centroids, 0)

    step = 1
    if len(centroids) == 1 and n_clusters > 1:
        split_intra_cluster(points, centroids, 0, max_iter, rng)
        if tracker is not None:
            tracker.record(points, centroids, step, 0)
        step += 1

    sse_list: List[float] = [cluster_sse(points, centroids, c) for c in range(len(centroids))]

    while len(centroids) < n_clusters:
        target = pick_target(points, centroids, sse_list)
        best = best_bisection(points, target, trials, max_iter, rng)

        retained, appended = commit_pair(centroids, target, best.centroids)
        sse_list.append(0.0)
        assign(points, centroids)

        # only the split pair is refreshed
        sse_list[retained.index] = cluster_sse(points, centroids, retained.index)
        sse_list[appended.index] = cluster_sse(points, centroids, appended.index)

        if tracker is not None:
            tracker.record(points, centroids, step, target)
        step += 1

    final = optimize(points, centroids, max_iter)
    if tracker is not None:
        tracker.record(points, centroids, step)
    return final
