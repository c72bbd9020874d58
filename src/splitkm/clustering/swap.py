from __future__ import annotations

from typing import Optional

import numpy as np

from .errors import InvalidParameterError
from .geometry import sse
from .lloyd import assign, nearest, optimize
from .tracking import ProgressTracker
from .types import CentroidSet, PointSet, Snapshot


def repartition_after_swap(points: PointSet, centroids: CentroidSet, swapped: int) -> None:
    """
    Local repair after centroid `swapped` moved.
    1) its former members go to their nearest centroid
    2) everyone else moves to `swapped` only if it is now strictly closer
    """
    labels = points.labels
    C = centroids.C

    orphaned = np.flatnonzero(labels == swapped)
    if orphaned.size:
        idx, _ = nearest(points.X[orphaned], C)
        labels[orphaned] = idx

    others = np.flatnonzero(labels != swapped)
    if others.size:
        Xo = points.X[others]
        d_cur = ((Xo - C[labels[others]]) ** 2).sum(axis=1)
        d_swapped = ((Xo - C[swapped]) ** 2).sum(axis=1)
        labels[others[d_swapped < d_cur]] = swapped


def random_swap(
    points: PointSet,
    centroids: CentroidSet,
    max_swaps: int,
    rng: np.random.Generator,
    kmeans_iterations: int = 2,
    tracker: Optional[ProgressTracker] = None,
) -> float:
    """
    Random swap: move a random centroid onto a random point, repair, run a short k-means,
    keep the result if the SSE improved on the best so far, otherwise roll back exactly.
    Returns the best SSE.
    """
    if max_swaps < 0:
        raise InvalidParameterError(f"max_swaps must be >= 0, got {max_swaps}")
    if kmeans_iterations < 1:
        raise InvalidParameterError(f"kmeans_iterations must be >= 1, got {kmeans_iterations}")

    assign(points, centroids)
    if tracker is not None:
        tracker.record(points, centroids, 0)

    best = np.inf
    for i in range(max_swaps):
        backup = Snapshot.capture(points, centroids)

        c = int(rng.integers(0, len(centroids)))
        p = int(rng.integers(0, points.n))
        centroids.C[c] = points.X[p]
        repartition_after_swap(points, centroids, c)

        result = optimize(points, centroids, kmeans_iterations)
        if result < best:
            best = result
            if tracker is not None:
                tracker.record(points, centroids, i + 1)
        else:
            backup.restore(points, centroids)
    if max_swaps == 0:
        return sse(points, centroids)
    return float(best)
