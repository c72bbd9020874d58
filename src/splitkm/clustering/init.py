from __future__ import annotations

import numpy as np

from .errors import DegenerateDataError, InvalidParameterError, TooManyClustersError
from .geometry import pairwise_sq_dists
from .types import CentroidSet, PointSet


def _check_k(k: int, points: PointSet) -> None:
    if k < 1:
        raise InvalidParameterError(f"n_clusters must be >= 1, got {k}")
    if k > points.n:
        raise TooManyClustersError(f"n_clusters={k} exceeds the {points.n} available points")


def random_centroids(k: int, points: PointSet, rng: np.random.Generator) -> CentroidSet:
    """
    k distinct rows chosen uniformly without replacement (partial Fisher-Yates).
    """
    _check_k(k, points)
    n = points.n
    idx = np.arange(n)
    for i in range(k):
        j = i + int(rng.integers(0, n - i))
        idx[i], idx[j] = idx[j], idx[i]
    return CentroidSet.from_rows(points.X, idx[:k])


def kmeanspp_centroids(k: int, points: PointSet, rng: np.random.Generator) -> CentroidSet:
    """
    k-means++ initialization.
    """
    _check_k(k, points)
    X = points.X
    n = points.n

    # 1) Pick first center uniformly
    chosen = [int(rng.integers(0, n))]
    D = pairwise_sq_dists(X, X[chosen[0] : chosen[0] + 1]).ravel()

    # 2) Roulette wheel over the squared distance to the nearest chosen center
    while len(chosen) < k:
        total = float(D.sum())
        if not np.isfinite(total) or total <= 0.0:
            raise DegenerateDataError(
                f"only {len(chosen)} distinct points available, n_clusters={k}"
            )
        cumulative = np.cumsum(D)
        r = rng.random() * total
        idx = min(int(np.searchsorted(cumulative, r, side="right")), n - 1)
        if D[idx] == 0.0:
            # already a center (or a duplicate of one); draw again
            continue
        chosen.append(idx)
        D = np.minimum(D, pairwise_sq_dists(X, X[idx : idx + 1]).ravel())
    return CentroidSet.from_rows(X, chosen)
