from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from ..core.timers import Timer
from .geometry import sse
from .metrics import centroid_index
from .types import CentroidSet, PointSet


@dataclass(frozen=True)
class StepSample:
    iteration: int
    n_centroids: int
    sse: float
    ci: Optional[int]
    split_target: Optional[int] = None


@dataclass
class StepState:
    """Centroids and partition as they were at one tracked step."""

    iteration: int
    centroids: np.ndarray
    labels: np.ndarray


@dataclass
class ProgressTracker:
    """
    Collects per-step samples while an algorithm runs.

    record_steps:  compute SSE / CI and keep a StepSample at every step
    record_time:   keep elapsed milliseconds since the tracker was created
    record_states: keep a copy of the centroids and labels at every step
    """

    ground_truth: Optional[np.ndarray] = None
    record_steps: bool = True
    record_time: bool = True
    record_states: bool = False
    log: Optional[logging.Logger] = None
    samples: List[StepSample] = field(default_factory=list)
    states: List[StepState] = field(default_factory=list)
    timer: Timer = field(default_factory=Timer)

    @property
    def times_ms(self) -> List[float]:
        return self.timer.laps

    def record(
        self,
        points: PointSet,
        centroids: CentroidSet,
        iteration: int,
        split_target: Optional[int] = None,
    ) -> None:
        if self.record_time:
            self.timer.lap()
        if self.record_states:
            self.states.append(StepState(iteration, centroids.to_array(), points.labels.copy()))
        chatty = self.log is not None and self.log.isEnabledFor(logging.DEBUG)
        if not (self.record_steps or chatty):
            return
        cur = sse(points, centroids)
        ci = None if self.ground_truth is None else centroid_index(centroids, self.ground_truth)
        if self.record_steps:
            self.samples.append(StepSample(iteration, len(centroids), cur, ci, split_target))
        if chatty:
            self.log.debug(
                "step=%d k=%d sse=%.0f ci=%s split=%s",
                iteration,
                len(centroids),
                cur,
                "-" if ci is None else ci,
                "-" if split_target is None else split_target,
            )
