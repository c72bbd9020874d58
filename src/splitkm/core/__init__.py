# Shared utilities for all domains. Explicit re-exports for a clean public API.

from .io import (
    ensure_dir as ensure_dir,
    load_json as load_json,
    load_yaml as load_yaml,
    read_partition as read_partition,
    read_points as read_points,
    save_json as save_json,
    save_yaml as save_yaml,
    write_centroids as write_centroids,
    write_partition as write_partition,
)
from .log import Verbosity as Verbosity, get_logger as get_logger
from .manifest import (
    Manifest as Manifest,
    start_manifest as start_manifest,
    write_manifest as write_manifest,
)
from .seeding import (
    make_rng as make_rng,
    seed_everything as seed_everything,
    spawn_rng as spawn_rng,
)
from .timers import Timer as Timer, timed as timed

__all__ = [
    "seed_everything",
    "make_rng",
    "spawn_rng",
    "ensure_dir",
    "load_json",
    "load_yaml",
    "save_json",
    "save_yaml",
    "read_points",
    "read_partition",
    "write_centroids",
    "write_partition",
    "Verbosity",
    "get_logger",
    "Manifest",
    "start_manifest",
    "write_manifest",
    "Timer",
    "timed",
]
