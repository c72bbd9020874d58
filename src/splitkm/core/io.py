from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import numpy as np
import yaml


def ensure_dir(path: Path | str) -> Path:
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def load_json(path: Path | str) -> Any:
    return json.loads(Path(path).read_text())


def save_json(path: Path | str, payload: Any) -> None:
    p = Path(path)
    ensure_dir(p.parent)
    p.write_text(json.dumps(payload, indent=2))


def load_yaml(path: Path | str) -> Any:
    return yaml.safe_load(Path(path).read_text())


def save_yaml(path: Path | str, payload: Any) -> None:
    p = Path(path)
    ensure_dir(p.parent)
    p.write_text(yaml.safe_dump(payload, sort_keys=False))


def read_points(path: Path | str) -> np.ndarray:
    """
    Read a whitespace-delimited coordinate file, one point per line. Blank lines are skipped.
    Returns an (n, d) float64 array.
    """
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Cannot open point file: {p}")
    X = np.loadtxt(p, dtype=np.float64, ndmin=2)
    if X.size == 0:
        raise ValueError(f"No points read from {p}")
    return X


def read_partition(path: Path | str) -> np.ndarray:
    """One integer label per line (whitespace-separated also accepted)."""
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Cannot open partition file: {p}")
    return np.loadtxt(p, dtype=np.int64, ndmin=1)


def write_centroids(path: Path | str, C: np.ndarray) -> Path:
    p = Path(path)
    ensure_dir(p.parent)
    np.savetxt(p, np.asarray(C, dtype=np.float64), fmt="%f")
    return p


def write_partition(path: Path | str, labels: np.ndarray) -> Path:
    p = Path(path)
    ensure_dir(p.parent)
    np.savetxt(p, np.asarray(labels, dtype=np.int64), fmt="%d")
    return p
