from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np

from .errors import DimensionMismatchError, InvalidParameterError
from .geometry import pairwise_sq_dists, sse
from .types import CentroidSet, PointSet

# ===========================
#  Partition step
# ===========================


def nearest(X: np.ndarray, C: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Index of and squared distance to the nearest row of C for every row of X.
    argmin returns the first minimum, so ties go to the lowest centroid index.
    """
    D = pairwise_sq_dists(X, C)
    idx = D.argmin(axis=1)
    return idx, D[np.arange(D.shape[0]), idx]


def assign(points: PointSet, centroids: CentroidSet) -> None:
    if points.dimensions != centroids.dimensions:
        raise DimensionMismatchError(
            f"points have d={points.dimensions}, centroids d={centroids.dimensions}"
        )
    idx, _ = nearest(points.X, centroids.C)
    points.labels[:] = idx


# ===========================
#  Centroid step
# ===========================


def update_centroids(centroids: CentroidSet, points: PointSet) -> None:
    """
    Move every centroid to the mean of its members.
    A centroid with no members keeps its coordinates; nothing is reseeded.
    """
    k = len(centroids)
    labels = points.labels
    counts = np.bincount(labels, minlength=k)
    sums = np.stack(
        [np.bincount(labels, weights=points.X[:, j], minlength=k) for j in range(points.dimensions)],
        axis=1,
    )
    filled = counts > 0
    C = centroids.C
    C[filled] = sums[filled] / counts[filled, None]


# ===========================
#  Lloyd loop
# ===========================


def optimize(
    points: PointSet,
    centroids: CentroidSet,
    max_iter: Optional[int] = None,
    history: Optional[List[float]] = None,
) -> float:
    """
    Alternate partition and centroid steps until the SSE stops strictly improving
    or `max_iter` passes have run (None = no cap). Returns the best SSE seen.
    """
    if max_iter is not None and max_iter < 1:
        raise InvalidParameterError(f"max_iter must be >= 1 or None, got {max_iter}")

    best = np.inf
    it = 0
    while max_iter is None or it < max_iter:
        assign(points, centroids)
        update_centroids(centroids, points)
        current = sse(points, centroids)
        if history is not None:
            history.append(current)
        if current < best:
            best = current
        else:
            break
        it += 1
    return float(best)
