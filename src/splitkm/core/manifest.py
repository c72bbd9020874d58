from __future__ import annotations

import platform
import subprocess
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from .io import ensure_dir, save_json


@dataclass
class Manifest:
    """What a benchmark run read, what it wrote and how to reproduce it."""

    name: str  # e.g., "clustering/benchmark"
    version: str
    timestamp: str  # ISO8601, UTC
    config: Optional[str]  # YAML the run was started from, if any
    seed: Optional[int]
    datasets: List[Dict[str, Any]] = field(default_factory=list)  # name, n, d, k, inputs
    algorithms: List[str] = field(default_factory=list)
    outputs: Dict[str, str] = field(default_factory=dict)
    summary: List[Dict[str, Any]] = field(default_factory=list)  # one row per dataset x algorithm
    env: Dict[str, str] = field(default_factory=dict)
    git: Dict[str, str] = field(default_factory=dict)

    @property
    def inputs(self) -> List[str]:
        return [p for ds in self.datasets for p in ds.get("inputs", [])]

    def add_dataset(self, name: str, n: int, d: int, k: int, inputs: List[str]) -> None:
        self.datasets.append({"name": name, "n": int(n), "d": int(d), "k": int(k), "inputs": list(inputs)})

    def add_summary(self, dataset: str, row: Dict[str, Any]) -> None:
        self.summary.append({"dataset": dataset, **row})


def _git_info() -> Dict[str, str]:
    def _run(args):
        try:
            return subprocess.check_output(args, stderr=subprocess.DEVNULL).decode().strip()
        except (OSError, subprocess.CalledProcessError):
            return ""

    commit = _run(["git", "rev-parse", "--short", "HEAD"])
    dirty = "true" if _run(["git", "status", "--porcelain"]) else "false"
    return {"commit": commit, "dirty": dirty}


def _env_info() -> Dict[str, str]:
    return {
        "python": platform.python_version(),
        "numpy": np.__version__,
        "pandas": pd.__version__,
        "platform": platform.platform(),
    }


def start_manifest(
    name: str,
    version: str,
    config: Optional[str],
    seed: Optional[int],
    algorithms: List[str],
) -> Manifest:
    return Manifest(
        name=name,
        version=version,
        timestamp=datetime.now(timezone.utc).isoformat(),
        config=config,
        seed=seed,
        algorithms=list(algorithms),
        env=_env_info(),
        git=_git_info(),
    )


def write_manifest(out_dir: Path | str, man: Manifest) -> Path:
    out_dir = ensure_dir(Path(out_dir))
    payload = asdict(man)
    payload["inputs"] = man.inputs
    path = out_dir / "manifest.json"
    save_json(path, payload)
    return path
