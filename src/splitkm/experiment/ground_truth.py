from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from ..clustering.errors import DimensionMismatchError, InvalidParameterError


def ground_truth_from_partition(
    X: np.ndarray,
    partition: np.ndarray,
    one_based: bool = True,
    log: Optional[logging.Logger] = None,
) -> np.ndarray:
    """
    Mean of every labelled group -> (k, d) ground-truth centroids.

    A partition shorter than the data truncates the data; a longer one is truncated.
    Labels that never occur produce no row.
    """
    X = np.asarray(X, dtype=np.float64)
    labels = np.asarray(partition, dtype=np.int64).ravel()
    if X.ndim != 2:
        raise DimensionMismatchError(f"points must be a 2-D array, got shape {X.shape}")
    if labels.size != X.shape[0]:
        if log is not None:
            log.warning("partition has %d entries for %d points; using the overlap", labels.size, X.shape[0])
        m = min(labels.size, X.shape[0])
        X, labels = X[:m], labels[:m]
    if one_based:
        labels = labels - 1
    if labels.size and labels.min() < 0:
        raise InvalidParameterError(f"negative partition index at row {int(np.argmax(labels < 0))}")

    counts = np.bincount(labels)
    used = np.flatnonzero(counts)
    sums = np.stack([np.bincount(labels, weights=X[:, j], minlength=counts.size) for j in range(X.shape[1])], axis=1)
    return sums[used] / counts[used, None]
