from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional

import numpy as np

from .errors import DimensionMismatchError, EmptyPointSetError, InvalidParameterError

UNASSIGNED = -1


@dataclass
class PointSet:
    """
    Fixed (n, d) coordinates plus a mutable label per row.
    Rows are never added or removed while clustering; only `labels` changes.
    """

    X: np.ndarray
    labels: Optional[np.ndarray] = None

    def __post_init__(self):
        X = np.asarray(self.X, dtype=np.float64)
        if X.ndim != 2:
            raise DimensionMismatchError(f"points must be a 2-D array, got shape {X.shape}")
        if X.shape[0] == 0 or X.shape[1] == 0:
            raise EmptyPointSetError("point set is empty")
        self.X = X
        if self.labels is None:
            self.labels = np.full(X.shape[0], UNASSIGNED, dtype=np.int64)
        else:
            labels = np.array(self.labels, dtype=np.int64)
            if labels.shape != (X.shape[0],):
                raise DimensionMismatchError(
                    f"labels shape {labels.shape} does not match {X.shape[0]} points"
                )
            self.labels = labels

    @property
    def n(self) -> int:
        return int(self.X.shape[0])

    @property
    def dimensions(self) -> int:
        return int(self.X.shape[1])

    def __len__(self) -> int:
        return self.n

    def members(self, label: int) -> np.ndarray:
        """Global indices of the points currently labelled `label`."""
        return np.flatnonzero(self.labels == label)

    def subset(self, idx: np.ndarray) -> "PointSet":
        # fancy indexing copies, so the subset never aliases the parent
        return PointSet(self.X[idx], self.labels[idx])

    def reset_labels(self, value: int = UNASSIGNED) -> None:
        self.labels[:] = value

    def is_assigned(self, k: int) -> bool:
        return bool(np.all((self.labels >= 0) & (self.labels < k)))


class CentroidSet:
    """
    Growable (k, d) centroid container backed by a capacity-doubling buffer.

    `C` is a view onto the live rows. Do not hold on to it across `append`:
    the buffer may be reallocated. Indices stay stable.
    """

    def __init__(self, C: np.ndarray, capacity: Optional[int] = None):
        C = np.array(C, dtype=np.float64, ndmin=2)
        if C.ndim != 2:
            raise DimensionMismatchError(f"centroids must be a 2-D array, got shape {C.shape}")
        k, d = C.shape
        if k < 1:
            raise InvalidParameterError("a centroid set needs at least one centroid")
        if d < 1:
            raise DimensionMismatchError("centroids have zero dimensions")
        cap = max(k, capacity or k)
        self._buf = np.empty((cap, d), dtype=np.float64)
        self._buf[:k] = C
        self._k = k

    @classmethod
    def from_rows(cls, X: np.ndarray, idx, capacity: Optional[int] = None) -> "CentroidSet":
        return cls(np.asarray(X, dtype=np.float64)[np.asarray(idx)], capacity=capacity)

    @property
    def C(self) -> np.ndarray:
        return self._buf[: self._k]

    @property
    def dimensions(self) -> int:
        return int(self._buf.shape[1])

    @property
    def capacity(self) -> int:
        return int(self._buf.shape[0])

    def __len__(self) -> int:
        return self._k

    def __getitem__(self, i: int) -> np.ndarray:
        return self.C[i]

    def __repr__(self) -> str:
        return f"CentroidSet(k={self._k}, d={self.dimensions})"

    def _row(self, row) -> np.ndarray:
        r = np.asarray(row, dtype=np.float64)
        if r.shape != (self.dimensions,):
            raise DimensionMismatchError(
                f"centroid row has shape {r.shape}, expected ({self.dimensions},)"
            )
        return r

    def replace(self, i: int, row) -> "Slot":
        if not 0 <= i < self._k:
            raise IndexError(f"centroid index {i} out of range for k={self._k}")
        self._buf[i] = self._row(row)
        return Slot(SlotKind.RETAINED, int(i))

    def append(self, row) -> "Slot":
        r = self._row(row)
        if self._k == self.capacity:
            grown = np.empty((2 * self.capacity, self.dimensions), dtype=np.float64)
            grown[: self._k] = self.C
            self._buf = grown
        self._buf[self._k] = r
        self._k += 1
        return Slot(SlotKind.APPENDED, self._k - 1)

    def load(self, C: np.ndarray) -> None:
        """Overwrite the whole set (count included) with `C`."""
        C = np.asarray(C, dtype=np.float64)
        if C.ndim != 2 or C.shape[1] != self.dimensions:
            raise DimensionMismatchError(f"cannot load shape {C.shape} into d={self.dimensions}")
        if C.shape[0] < 1:
            raise InvalidParameterError("a centroid set needs at least one centroid")
        if C.shape[0] > self.capacity:
            self._buf = np.empty((C.shape[0], self.dimensions), dtype=np.float64)
        self._buf[: C.shape[0]] = C
        self._k = int(C.shape[0])

    def copy(self) -> "CentroidSet":
        return CentroidSet(self.C, capacity=self.capacity)

    def to_array(self) -> np.ndarray:
        return self.C.copy()


class SlotKind(str, Enum):
    RETAINED = "retained"
    APPENDED = "appended"


@dataclass(frozen=True)
class Slot:
    kind: SlotKind
    index: int


@dataclass(frozen=True)
class SplitResult:
    """
    Outcome of one split. `retained` is the split target's own index (first half),
    `appended` the new last index (second half). `affected` lists every cluster
    whose membership changed, the pair included.
    """

    target: int
    retained: Slot
    appended: Slot
    affected: FrozenSet[int] = field(default_factory=frozenset)


@dataclass(frozen=True)
class Snapshot:
    """Committed clustering state: centroid coordinates and every point's label."""

    centroids: np.ndarray
    labels: np.ndarray

    @classmethod
    def capture(cls, points: PointSet, centroids: CentroidSet) -> "Snapshot":
        return cls(centroids.to_array(), points.labels.copy())

    def restore(self, points: PointSet, centroids: CentroidSet) -> None:
        centroids.load(self.centroids)
        points.labels[:] = self.labels


@dataclass
class ClusteringResult:
    sse: float
    labels: np.ndarray
    centroids: np.ndarray
