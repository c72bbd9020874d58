from __future__ import annotations

from typing import Union

import numpy as np

from .errors import DimensionMismatchError, EmptyPointSetError
from .lloyd import nearest
from .types import CentroidSet

Centroids = Union[CentroidSet, np.ndarray]


def _as_array(c: Centroids) -> np.ndarray:
    C = c.C if isinstance(c, CentroidSet) else np.asarray(c, dtype=np.float64)
    if C.ndim != 2:
        raise DimensionMismatchError(f"centroids must be a 2-D array, got shape {C.shape}")
    if C.shape[0] == 0:
        raise EmptyPointSetError("centroid set is empty")
    return C


def orphan_count(a: Centroids, b: Centroids) -> int:
    """
    Map every centroid of `a` to its nearest centroid in `b`; count the centroids
    of `b` that nobody mapped to.
    """
    A, B = _as_array(a), _as_array(b)
    if A.shape[1] != B.shape[1]:
        raise DimensionMismatchError(f"centroid sets have d={A.shape[1]} and d={B.shape[1]}")
    idx, _ = nearest(A, B)
    hit = np.zeros(B.shape[0], dtype=bool)
    hit[idx] = True
    return int((~hit).sum())


def centroid_index(a: Centroids, b: Centroids) -> int:
    """
    Centroid Index: max of the orphan counts in both directions.
    0 means the two sets match one-to-one by nearest neighbour.
    """
    return max(orphan_count(a, b), orphan_count(b, a))
