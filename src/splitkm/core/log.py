from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


class Verbosity(str, Enum):
    """
    How chatty a run is.
    quiet:   warnings and failures only
    debug:   one line per run / trial summary
    verbose: everything, including per-split and per-swap steps
    """

    QUIET = "quiet"
    DEBUG = "debug"
    VERBOSE = "verbose"

    @property
    def level(self) -> int:
        return {
            Verbosity.QUIET: logging.WARNING,
            Verbosity.DEBUG: logging.INFO,
            Verbosity.VERBOSE: logging.DEBUG,
        }[self]


def get_logger(
    name: str = "splitkm",
    verbosity: Verbosity | str = Verbosity.QUIET,
    log_file: Optional[Path | str] = None,
) -> logging.Logger:
    log = logging.getLogger(name)
    level = Verbosity(verbosity).level
    log.setLevel(level)
    # Avoid adding multiple handlers on repeated runs
    if not log.handlers:
        fmt = logging.Formatter(FORMAT)
        # Console
        ch = logging.StreamHandler()
        ch.setFormatter(fmt)
        log.addHandler(ch)
        # File
        if log_file:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(log_file)
            fh.setFormatter(fmt)
            log.addHandler(fh)
    for h in log.handlers:
        h.setLevel(level)
    return log
