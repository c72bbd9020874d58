from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Optional

SUMMARY_COLUMNS = ["Algorithm", "Average CI", "SSE", "Relative CI", "MS", "Success Rate"]


@dataclass
class Statistics:
    """Running sums over the trials of one algorithm on one dataset."""

    sse_sum: float = 0.0
    mse_sum: float = 0.0
    ci_sum: int = 0
    time_sum: float = 0.0  # ms
    successes: int = 0
    completed: int = 0
    failures: Counter = field(default_factory=Counter)  # error tag -> count

    def add(self, sse: float, ci: Optional[int], elapsed_ms: float, mse: float = 0.0) -> None:
        self.sse_sum += float(sse)
        self.mse_sum += float(mse)
        self.time_sum += float(elapsed_ms)
        self.completed += 1
        if ci is not None:
            self.ci_sum += int(ci)
            if ci == 0:
                self.successes += 1

    def fail(self, tag: str) -> None:
        self.failures[tag] += 1

    @property
    def failed(self) -> int:
        return sum(self.failures.values())

    @property
    def trials(self) -> int:
        return self.completed + self.failed

    def summary(self, name: str, n_clusters: int, scaling: float = 1.0) -> Dict[str, object]:
        """
        One result row. Averages are over completed trials; a failed trial
        counts against the success rate.

        The row also carries the average MSE; the CSV keeps the six
        SUMMARY_COLUMNS, the manifest and the run log report it.
        """
        n = max(self.completed, 1)
        avg_ci = self.ci_sum / n
        return {
            "Algorithm": name,
            "Average CI": round(avg_ci, 2),
            "SSE": round(self.sse_sum / n / scaling),
            "Relative CI": round(avg_ci / n_clusters, 2),
            "MS": round(self.time_sum / n),
            "Success Rate": round(self.successes / max(self.trials, 1), 2),
            "MSE": self.mse_sum / n / scaling,
        }
