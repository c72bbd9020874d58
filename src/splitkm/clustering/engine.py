from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, Union

import numpy as np

from ..core.log import Verbosity, get_logger
from ..core.timers import Timer
from .bisecting import run_bisecting
from .errors import DimensionMismatchError
from .geometry import mse
from .greedy import SplitVariant, run_sse_split
from .init import random_centroids
from .kmeans import run_kmeans, run_repeated_kmeans
from .metrics import centroid_index
from .split import run_random_split
from .swap import random_swap
from .tracking import ProgressTracker, StepSample, StepState
from .types import CentroidSet, PointSet


class Algorithm(str, Enum):
    KMEANS = "kmeans"
    KMEANS_PP = "kmeans++"
    REPEATED_KMEANS = "repeated_kmeans"
    RANDOM_SWAP = "random_swap"
    RANDOM_SPLIT = "random_split"
    SSE_SPLIT_INTRA = "sse_split_intra"
    SSE_SPLIT_GLOBAL = "sse_split_global"
    SSE_SPLIT_LOCAL = "sse_split_local"
    BISECTING = "bisecting"

    @property
    def display_name(self) -> str:
        # names used for result rows and artifact file prefixes
        return _DISPLAY_NAMES[self]

    @property
    def grows(self) -> bool:
        """Starts from one centroid and splits its way up to k."""
        return self in _GROWING


_DISPLAY_NAMES = {
    Algorithm.KMEANS: "KMeans",
    Algorithm.KMEANS_PP: "KMeansPP",
    Algorithm.REPEATED_KMEANS: "RepeatedKMeans",
    Algorithm.RANDOM_SWAP: "RandomSwap",
    Algorithm.RANDOM_SPLIT: "RandomSplit",
    Algorithm.SSE_SPLIT_INTRA: "IntraCluster",
    Algorithm.SSE_SPLIT_GLOBAL: "Global",
    Algorithm.SSE_SPLIT_LOCAL: "LocalRepartition",
    Algorithm.BISECTING: "Bisecting",
}

_GROWING = {
    Algorithm.RANDOM_SPLIT,
    Algorithm.SSE_SPLIT_INTRA,
    Algorithm.SSE_SPLIT_GLOBAL,
    Algorithm.SSE_SPLIT_LOCAL,
    Algorithm.BISECTING,
}

_SSE_VARIANTS = {
    Algorithm.SSE_SPLIT_INTRA: SplitVariant.INTRA_CLUSTER,
    Algorithm.SSE_SPLIT_GLOBAL: SplitVariant.GLOBAL,
    Algorithm.SSE_SPLIT_LOCAL: SplitVariant.LOCAL_REPARTITION,
}


@dataclass
class EngineConfig:
    n_clusters: int
    max_iter: Optional[int] = None  # Lloyd passes per k-means call; None = until no improvement
    n_repeats: int = 10  # repeated k-means restarts
    max_swaps: int = 100  # random swap trials
    swap_kmeans_iterations: int = 2
    bisecting_trials: int = 5
    track_progress: bool = False  # keep StepSamples (SSE / CI per step)
    track_time: bool = False  # keep elapsed ms per step
    track_states: bool = False  # keep centroids and labels per step
    verbosity: Verbosity = Verbosity.QUIET


@dataclass
class RunResult:
    algorithm: Algorithm
    centroids: np.ndarray
    labels: np.ndarray
    sse: float
    mse: float
    ci: Optional[int]
    elapsed_ms: float
    samples: List[StepSample] = field(default_factory=list)
    times_ms: List[float] = field(default_factory=list)
    states: List[StepState] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.ci == 0


Handler = Callable[[PointSet, ProgressTracker], Tuple[CentroidSet, float]]


class ClusteringEngine:
    """
    Runs one clustering algorithm on one fully loaded point set.

    The engine owns its random Generator and logger; points are mutated in place
    (labels only), centroids are created per run.
    """

    def __init__(
        self,
        cfg: EngineConfig,
        rng: Optional[np.random.Generator] = None,
        log: Optional[logging.Logger] = None,
    ):
        self.cfg = cfg
        self.rng = rng if rng is not None else np.random.default_rng()
        self.log = log if log is not None else get_logger(verbosity=cfg.verbosity)
        self._handlers: Dict[Algorithm, Handler] = {
            Algorithm.KMEANS: self._kmeans,
            Algorithm.KMEANS_PP: self._kmeans_pp,
            Algorithm.REPEATED_KMEANS: self._repeated_kmeans,
            Algorithm.RANDOM_SWAP: self._random_swap,
            Algorithm.RANDOM_SPLIT: self._random_split,
            Algorithm.SSE_SPLIT_INTRA: self._sse_split,
            Algorithm.SSE_SPLIT_GLOBAL: self._sse_split,
            Algorithm.SSE_SPLIT_LOCAL: self._sse_split,
            Algorithm.BISECTING: self._bisecting,
        }
        self._current: Optional[Algorithm] = None

    # --------------- Public ---------------

    def run(
        self,
        points: PointSet,
        algorithm: Union[Algorithm, str],
        ground_truth: Union[CentroidSet, np.ndarray, None] = None,
    ) -> RunResult:
        algorithm = Algorithm(algorithm)
        gt = self._ground_truth(points, ground_truth)

        timer = Timer()
        tracker = ProgressTracker(
            ground_truth=gt,
            record_steps=self.cfg.track_progress,
            record_time=self.cfg.track_time,
            record_states=self.cfg.track_states,
            log=self.log,
        )
        self._current = algorithm
        centroids, result = self._handlers[algorithm](points, tracker)
        elapsed = timer.elapsed_ms

        ci = None if gt is None else centroid_index(centroids, gt)
        self.log.info(
            "(%s) k=%d sse=%.0f ci=%s time=%.0fms",
            algorithm.display_name,
            len(centroids),
            result,
            "-" if ci is None else ci,
            elapsed,
        )
        return RunResult(
            algorithm=algorithm,
            centroids=centroids.to_array(),
            labels=points.labels.copy(),
            sse=float(result),
            mse=mse(points, centroids),
            ci=ci,
            elapsed_ms=elapsed,
            samples=list(tracker.samples),
            times_ms=list(tracker.times_ms),
            states=list(tracker.states),
        )

    # --------------- Helpers ---------------

    @staticmethod
    def _ground_truth(points: PointSet, ground_truth) -> Optional[np.ndarray]:
        if ground_truth is None:
            return None
        gt = ground_truth.to_array() if isinstance(ground_truth, CentroidSet) else np.asarray(ground_truth, dtype=np.float64)
        if gt.ndim != 2 or gt.shape[1] != points.dimensions:
            raise DimensionMismatchError(
                f"ground truth has shape {gt.shape}, points have d={points.dimensions}"
            )
        return gt

    def _single_centroid(self, points: PointSet) -> CentroidSet:
        points.reset_labels(0)
        return random_centroids(1, points, self.rng)

    # --------------- Algorithms ---------------

    def _kmeans(self, points: PointSet, tracker: ProgressTracker):
        C, result = run_kmeans(points, self.cfg.n_clusters, self.cfg.max_iter, self.rng)
        tracker.record(points, C, 0)
        return C, result

    def _kmeans_pp(self, points: PointSet, tracker: ProgressTracker):
        C, result = run_kmeans(points, self.cfg.n_clusters, self.cfg.max_iter, self.rng, init="kmeans++")
        tracker.record(points, C, 0)
        return C, result

    def _repeated_kmeans(self, points: PointSet, tracker: ProgressTracker):
        C, result = run_repeated_kmeans(
            points, self.cfg.n_clusters, self.cfg.max_iter, self.cfg.n_repeats, self.rng
        )
        tracker.record(points, C, 0)
        return C, result

    def _random_swap(self, points: PointSet, tracker: ProgressTracker):
        C = random_centroids(self.cfg.n_clusters, points, self.rng)
        result = random_swap(
            points,
            C,
            self.cfg.max_swaps,
            self.rng,
            kmeans_iterations=self.cfg.swap_kmeans_iterations,
            tracker=tracker,
        )
        return C, result

    def _random_split(self, points: PointSet, tracker: ProgressTracker):
        C = self._single_centroid(points)
        result = run_random_split(points, C, self.cfg.n_clusters, self.cfg.max_iter, self.rng, tracker=tracker)
        return C, result

    def _sse_split(self, points: PointSet, tracker: ProgressTracker):
        C = self._single_centroid(points)
        result = run_sse_split(
            points,
            C,
            self.cfg.n_clusters,
            self.cfg.max_iter,
            self.rng,
            variant=_SSE_VARIANTS[self._current],
            tracker=tracker,
        )
        return C, result

    def _bisecting(self, points: PointSet, tracker: ProgressTracker):
        C = self._single_centroid(points)
        result = run_bisecting(
            points,
            C,
            self.cfg.n_clusters,
            self.cfg.max_iter,
            self.rng,
            trials=self.cfg.bisecting_trials,
            tracker=tracker,
        )
        return C, result
