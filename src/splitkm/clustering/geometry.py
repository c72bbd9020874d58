from __future__ import annotations

import numpy as np

from .errors import DimensionMismatchError
from .types import CentroidSet, PointSet

# rows per block in pairwise_sq_dists; bounds the (block, k, d) temporary
_BLOCK = 2048


def squared_distance(a: np.ndarray, b: np.ndarray) -> float:
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        raise DimensionMismatchError(f"cannot compare points of shape {a.shape} and {b.shape}")
    diff = a - b
    return float(np.dot(diff, diff))


def distance(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.sqrt(squared_distance(a, b)))


def pairwise_sq_dists(X: np.ndarray, C: np.ndarray) -> np.ndarray:
    """
    Squared Euclidean distances between every row in X and every center in C.
    X: (n, d), C: (k, d)  ->  D: (n, k)

    Computed as a sum of squared differences (not |x|^2 + |c|^2 - 2x.c) so that
    coincident points come out as exactly 0 and ties stay exact.
    """
    X = np.asarray(X, dtype=np.float64)
    C = np.asarray(C, dtype=np.float64)
    if X.ndim != 2 or C.ndim != 2 or X.shape[1] != C.shape[1]:
        raise DimensionMismatchError(f"shapes {X.shape} and {C.shape} are not comparable")
    n = X.shape[0]
    D = np.empty((n, C.shape[0]), dtype=np.float64)
    for lo in range(0, n, _BLOCK):
        diff = X[lo : lo + _BLOCK, None, :] - C[None, :, :]
        D[lo : lo + _BLOCK] = np.einsum("nkd,nkd->nk", diff, diff)
    return D


def sse(points: PointSet, centroids: CentroidSet) -> float:
    """Sum of squared errors of every point against its assigned centroid."""
    diff = points.X - centroids.C[points.labels]
    return float(np.einsum("nd,nd->", diff, diff))


def cluster_sse(points: PointSet, centroids: CentroidSet, label: int) -> float:
    idx = points.members(label)
    if idx.size == 0:
        return 0.0
    diff = points.X[idx] - centroids.C[label]
    return float(np.einsum("nd,nd->", diff, diff))


def mse(points: PointSet, centroids: CentroidSet) -> float:
    """SSE normalised by n * d."""
    return sse(points, centroids) / (points.n * points.dimensions)
