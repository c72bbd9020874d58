from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

import numpy as np
import pandas as pd

from ..clustering.engine import Algorithm, ClusteringEngine, EngineConfig, RunResult
from ..clustering.errors import ClusteringError
from ..clustering.types import PointSet
from ..core.io import ensure_dir, read_points, save_yaml, write_centroids, write_partition
from ..core.log import get_logger
from ..core.manifest import start_manifest, write_manifest
from ..core.seeding import make_rng, seed_everything, spawn_rng
from ..core.timers import timed
from .config import ExperimentConfig
from .stats import SUMMARY_COLUMNS, Statistics

VERSION = "0.1.0"


@dataclass
class TrialReport:
    algorithm: Algorithm
    stats: Statistics
    outputs: Dict[str, str] = field(default_factory=dict)


# --------------- Artifact writers ---------------


def append_summary(path: Path, row: Dict[str, object], decimal: str = ",") -> Path:
    """Append one row to `<dataset>.csv`; the header is written only for a new file."""
    path = Path(path)
    ensure_dir(path.parent)
    df = pd.DataFrame([row], columns=SUMMARY_COLUMNS)
    df.to_csv(path, sep=";", decimal=decimal, mode="a", header=not path.exists(), index=False)
    return path


def write_progress_log(path: Path, res: RunResult) -> Path:
    df = pd.DataFrame(
        {
            "ci": pd.array([s.ci for s in res.samples], dtype="Int64"),
            "iteration": [s.iteration for s in res.samples],
            "sse": [round(s.sse) for s in res.samples],
        }
    )
    df.to_csv(path, sep=";", index=False, na_rep="")
    return Path(path)


def write_iteration_stats(path: Path, res: RunResult) -> Path:
    df = pd.DataFrame(
        {
            "Iteration": [s.iteration for s in res.samples],
            "NumCentroids": [s.n_centroids for s in res.samples],
            "SSE": [round(s.sse) for s in res.samples],
            "CI": pd.array([s.ci for s in res.samples], dtype="Int64"),
            "SplitCluster": pd.array([s.split_target for s in res.samples], dtype="Int64"),
        }
    )
    df.to_csv(path, sep=";", index=False, na_rep="")
    return Path(path)


def write_states(out_dir: Path, name: str, res: RunResult) -> Dict[str, str]:
    """`<Name>_centroids_iter_<i>.txt` and `<Name>_partitions_iter_<i>.txt` per tracked step."""
    written: Dict[str, str] = {}
    for st in res.states:
        c_key = f"{name}_centroids_iter_{st.iteration}"
        p_key = f"{name}_partitions_iter_{st.iteration}"
        written[c_key] = str(write_centroids(out_dir / f"{c_key}.txt", st.centroids))
        written[p_key] = str(write_partition(out_dir / f"{p_key}.txt", st.labels))
    return written


def write_times(path: Path, times_ms: List[float]) -> Path:
    np.savetxt(path, np.asarray(times_ms, dtype=np.float64), fmt="%.0f")
    return Path(path)


# --------------- Trials ---------------


def run_trials(
    points: PointSet,
    algorithm: Union[Algorithm, str],
    engine: ClusteringEngine,
    loop_count: int,
    ground_truth: Optional[np.ndarray] = None,
    out_dir: Optional[Path] = None,
    log: Optional[logging.Logger] = None,
) -> TrialReport:
    """
    Run `algorithm` `loop_count` times and fold every trial into one Statistics.

    A ClusteringError aborts only the trial that raised it; it is logged and counted
    by tag. With `out_dir`, the first perfect (CI == 0) and first failed trial get their
    centroids and partition written, the first completed trial gets its progress log
    and, with state tracking, its per-step centroids and partitions,
    and the step times of all trials go to `<Name>_times.txt`.
    """
    algorithm = Algorithm(algorithm)
    name = algorithm.display_name
    log = log or engine.log
    stats = Statistics()
    report = TrialReport(algorithm, stats)
    saved = {"perfect": False, "failed": False}
    times: List[float] = []

    for i in range(loop_count):
        log.debug("(%s) round %d/%d", name, i + 1, loop_count)
        try:
            res = engine.run(points, algorithm, ground_truth)
        except ClusteringError as e:
            stats.fail(e.tag)
            log.warning("(%s) round %d aborted [%s]: %s", name, i + 1, e.tag, e)
            continue

        stats.add(res.sse, res.ci, res.elapsed_ms, res.mse)
        times.extend(res.times_ms)
        if out_dir is None:
            continue

        if stats.completed == 1 and res.samples:
            report.outputs[f"{name}_log"] = str(write_progress_log(out_dir / f"{name}_log.csv", res))
            report.outputs[f"{name}_iteration_stats"] = str(
                write_iteration_stats(out_dir / f"{name}_iteration_stats.txt", res)
            )
        if stats.completed == 1 and res.states:
            report.outputs.update(write_states(out_dir, name, res))
        if res.ci is None:
            continue
        kind = "perfect" if res.success else "failed"
        if not saved[kind]:
            c_path = write_centroids(out_dir / f"{name}_centroids_{kind}.txt", res.centroids)
            p_path = write_partition(out_dir / f"{name}_partitions_{kind}.txt", res.labels)
            report.outputs[f"{name}_centroids_{kind}"] = str(c_path)
            report.outputs[f"{name}_partitions_{kind}"] = str(p_path)
            saved[kind] = True

    if out_dir is not None and times:
        report.outputs[f"{name}_times"] = str(write_times(out_dir / f"{name}_times.txt", times))
    if stats.failed:
        log.warning("(%s) %d/%d trials failed: %s", name, stats.failed, stats.trials, dict(stats.failures))
    return report


# --------------- Experiment ---------------


def engine_config(cfg: ExperimentConfig, n_clusters: int) -> EngineConfig:
    return EngineConfig(
        n_clusters=n_clusters,
        max_iter=cfg.max_iter,
        n_repeats=cfg.n_repeats,
        max_swaps=cfg.max_swaps,
        swap_kmeans_iterations=cfg.swap_kmeans_iterations,
        bisecting_trials=cfg.bisecting_trials,
        track_progress=cfg.track_progress,
        track_time=cfg.track_time,
        track_states=cfg.track_states,
        verbosity=cfg.verbosity,
    )


def run_experiment(
    cfg: ExperimentConfig,
    config_path: Optional[Path | str] = None,
    stamp: Optional[str] = None,
) -> Path:
    """
    Every configured algorithm on every configured dataset.
    Results land in `<output_root>/<stamp>/<dataset>/`; returns the run directory.
    """
    log = get_logger(verbosity=cfg.verbosity, log_file=cfg.log_file)
    if cfg.random_state is not None:
        seed_everything(cfg.random_state)
    rng = make_rng(cfg.random_state)
    stamp = stamp or datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    run_dir = ensure_dir(Path(cfg.output_root) / stamp)
    save_yaml(run_dir / "config.yaml", cfg.to_dict())

    man = start_manifest(
        name="clustering/benchmark",
        version=VERSION,
        config=str(config_path) if config_path else None,
        seed=cfg.random_state,
        algorithms=[a.display_name for a in cfg.algorithms],
    )
    for ds in cfg.datasets:
        X = read_points(ds.data)
        gt = read_points(ds.ground_truth) if ds.ground_truth else None
        points = PointSet(X)
        man.add_dataset(ds.name, points.n, points.dimensions, ds.k, [p for p in (ds.data, ds.ground_truth) if p])

        ds_dir = ensure_dir(run_dir / ds.name)
        # one sub-stream per dataset
        engine = ClusteringEngine(engine_config(cfg, ds.k), rng=spawn_rng(rng), log=log)
        log.info("dataset=%s n=%d d=%d k=%d loops=%d", ds.name, points.n, points.dimensions, ds.k, cfg.loop_count)

        summary_path = ds_dir / f"{ds.name}.csv"
        for algo in cfg.algorithms:
            with timed(f"{ds.name}/{algo.display_name}", log):
                report = run_trials(points, algo, engine, cfg.loop_count, ground_truth=gt, out_dir=ds_dir, log=log)
            row = report.stats.summary(algo.display_name, ds.k, cfg.scaling)
            append_summary(summary_path, row, cfg.decimal)
            man.add_summary(ds.name, row)
            log.info(
                "(%s) avg CI=%.2f SSE=%s MSE=%.4g rel CI=%.2f time=%sms success=%.2f",
                row["Algorithm"],
                row["Average CI"],
                row["SSE"],
                row["MSE"],
                row["Relative CI"],
                row["MS"],
                row["Success Rate"],
            )
            man.outputs.update({f"{ds.name}/{k}": v for k, v in report.outputs.items()})
        man.outputs[f"{ds.name}/summary"] = str(summary_path)

    write_manifest(run_dir, man)
    return run_dir
