from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..clustering.engine import Algorithm
from ..core.io import load_yaml
from ..core.log import Verbosity


@dataclass
class DatasetSpec:
    name: str
    data: str  # whitespace-delimited points, one per line
    ground_truth: Optional[str] = None  # centroid file; without it CI is not reported
    k: int = 15


@dataclass
class ExperimentConfig:
    datasets: List[DatasetSpec] = field(default_factory=list)
    algorithms: List[Algorithm] = field(default_factory=lambda: [Algorithm.KMEANS])
    loop_count: int = 10
    max_iter: Optional[int] = None
    n_repeats: int = 100
    max_swaps: int = 100
    swap_kmeans_iterations: int = 2
    bisecting_trials: int = 5
    track_progress: bool = False
    track_time: bool = False
    track_states: bool = False
    scaling: float = 1.0  # divisor applied to the reported SSE column
    output_root: str = "outputs"
    decimal: str = ","  # decimal separator in result CSVs
    verbosity: Verbosity = Verbosity.DEBUG
    log_file: Optional[str] = None
    random_state: Optional[int] = None

    def __post_init__(self):
        self.datasets = [d if isinstance(d, DatasetSpec) else DatasetSpec(**d) for d in self.datasets]
        self.algorithms = [Algorithm(a) for a in self.algorithms]
        self.verbosity = Verbosity(self.verbosity)
        if self.loop_count < 1:
            raise ValueError(f"loop_count must be >= 1, got {self.loop_count}")
        if len(self.decimal) != 1:
            raise ValueError(f"decimal must be a single character, got {self.decimal!r}")

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["algorithms"] = [a.value for a in self.algorithms]
        d["verbosity"] = self.verbosity.value
        return d


def load_config(path: Path | str) -> ExperimentConfig:
    raw = load_yaml(path) or {}
    known = ExperimentConfig.__dataclass_fields__
    unknown = sorted(set(raw) - set(known))
    if unknown:
        raise ValueError(f"unknown config keys in {path}: {unknown}")
    cfg = ExperimentConfig(**raw)
    # relative data paths resolve against the config file
    base = Path(path).parent
    for ds in cfg.datasets:
        ds.data = str(_resolve(base, ds.data))
        if ds.ground_truth:
            ds.ground_truth = str(_resolve(base, ds.ground_truth))
    return cfg


def _resolve(base: Path, p: str) -> Path:
    q = Path(p)
    return q if q.is_absolute() else base / q
