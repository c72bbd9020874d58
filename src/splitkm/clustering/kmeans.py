from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

import numpy as np

from .errors import InvalidParameterError
from .init import kmeanspp_centroids, random_centroids
from .lloyd import nearest, optimize
from .types import CentroidSet, PointSet

Initializer = Callable[[int, PointSet, np.random.Generator], CentroidSet]

INITIALIZERS: Dict[str, Initializer] = {
    "random": random_centroids,
    "kmeans++": kmeanspp_centroids,
}


def run_kmeans(
    points: PointSet,
    n_clusters: int,
    max_iter: Optional[int],
    rng: np.random.Generator,
    init: str = "random",
) -> tuple[CentroidSet, float]:
    """Seed once, run Lloyd until it stops improving. Labels are left on `points`."""
    if init not in INITIALIZERS:
        raise InvalidParameterError(f"unknown init {init!r}; expected one of {sorted(INITIALIZERS)}")
    centroids = INITIALIZERS[init](n_clusters, points, rng)
    result = optimize(points, centroids, max_iter)
    return centroids, result


def run_repeated_kmeans(
    points: PointSet,
    n_clusters: int,
    max_iter: Optional[int],
    n_repeats: int,
    rng: np.random.Generator,
    init: str = "random",
) -> tuple[CentroidSet, float]:
    """
    Independent restarts; keeps the centroids (and labels) of the lowest-SSE run.
    """
    if n_repeats < 1:
        raise InvalidParameterError(f"n_repeats must be >= 1, got {n_repeats}")
    best_sse = np.inf
    best_C: Optional[CentroidSet] = None
    best_labels: Optional[np.ndarray] = None
    for _ in range(n_repeats):
        C, result = run_kmeans(points, n_clusters, max_iter, rng, init=init)
        if result < best_sse:
            best_sse = result
            best_C = C
            best_labels = points.labels.copy()
    points.labels[:] = best_labels
    return best_C, float(best_sse)


@dataclass
class KMeans:
    n_clusters: int
    max_iter: Optional[int] = None  # None: run until the SSE stops improving
    init: str = "random"  # "random" or "kmeans++"
    n_init: int = 1  # > 1 is repeated k-means; keep best by SSE
    random_state: Optional[int] = 0

    cluster_centers_: np.ndarray | None = None  # (k, d)
    labels_: np.ndarray | None = None
    inertia_: float | None = None

    def fit(self, X: np.ndarray):
        points = PointSet(X)
        rng = np.random.default_rng(self.random_state)
        C, result = run_repeated_kmeans(
            points, int(self.n_clusters), self.max_iter, self.n_init, rng, init=self.init
        )
        self.cluster_centers_ = C.to_array()
        self.labels_ = points.labels.copy()
        self.inertia_ = float(result)
        return self

    def predict(self, X: np.ndarray) -> np.ndarray:
        assert self.cluster_centers_ is not None, "Call fit() first."
        idx, _ = nearest(np.asarray(X, dtype=np.float64), self.cluster_centers_)
        return idx

    def fit_predict(self, X: np.ndarray) -> np.ndarray:
        return self.fit(X).predict(X)
