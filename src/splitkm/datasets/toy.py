from __future__ import annotations

import numpy as np


def make_blobs(n: int = 300, k: int = 3, d: int = 2, sep: float = 5.0, seed: int = 1):
    """
    Isotropic unit-variance Gaussian blobs around `k` random centers scaled by `sep`.
    Returns X (n', d), 1-based partition labels (n',) and the true centers (k, d),
    where n' = (n // k) * k.
    """
    rng = np.random.default_rng(seed)
    centers = rng.normal(size=(k, d)) * sep
    n_per = n // k
    Xs, ys = [], []
    for j in range(k):
        Xs.append(centers[j] + rng.normal(size=(n_per, d)))
        ys.append(np.full(n_per, j + 1))
    return np.vstack(Xs).astype(np.float64), np.hstack(ys).astype(np.int64), centers


def make_grid_blobs(k_side: int = 3, n_per: int = 50, spacing: float = 10.0, spread: float = 0.5, seed: int = 0):
    """Blobs on a regular k_side x k_side grid; well separated, so CI = 0 is reachable."""
    rng = np.random.default_rng(seed)
    g = np.arange(k_side, dtype=np.float64) * spacing
    centers = np.array([(x, y) for x in g for y in g])
    X = np.vstack([c + spread * rng.normal(size=(n_per, 2)) for c in centers])
    y = np.repeat(np.arange(1, len(centers) + 1), n_per)
    return X, y.astype(np.int64), centers
