from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import List


class Timer:
    """
    Wall-clock stopwatch in milliseconds. `lap()` stores the time since start,
    which is what the per-step time logs record.
    """

    def __init__(self):
        self.laps: List[float] = []
        self.reset()

    def reset(self):
        self._t0 = time.perf_counter()
        self.laps.clear()

    @property
    def elapsed(self) -> float:
        return time.perf_counter() - self._t0

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed * 1000.0

    def lap(self) -> float:
        ms = self.elapsed_ms
        self.laps.append(ms)
        return ms

    def __repr__(self) -> str:
        return f"{self.elapsed_ms:.0f}ms ({len(self.laps)} laps)"


@contextmanager
def timed(label: str, log: logging.Logger | None = None):
    t = Timer()
    yield t
    if log is None:
        print(f"[timer] {label}: {t.elapsed_ms:.0f}ms")
    else:
        log.info("[timer] %s: %.0fms", label, t.elapsed_ms)
