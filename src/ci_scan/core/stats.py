"""Per-analyzer, per-pull-request issue counters.

Stats is a nested mapping ``analyzer -> pr_number -> severity -> count``.
An analyzer mapped to ``None`` did not run; an analyzer that ran has an
entry for every pull request of the run, even when all counts are zero.
Key ordering carries no meaning.
"""

import copy
import logging
import threading
from typing import Dict, Iterable, Optional

from .issue import Analyzer, Issue, Severity

logger = logging.getLogger(__name__)

SeverityCounts = Dict[Severity, int]
PullRequestStats = Dict[int, SeverityCounts]
Stats = Dict[Analyzer, Optional[PullRequestStats]]


def empty_counts() -> SeverityCounts:
    """Zeroed counter for every severity."""
    return {severity: 0 for severity in Severity}


class StatsAggregator:
    """Commutative fold of issues into Stats.

    ``start`` and ``record`` may be called from several analyzer threads;
    a single lock guards the shared structure.
    """

    def __init__(self, analyzers: Iterable[Analyzer] = tuple(Analyzer)):
        self._lock = threading.Lock()
        self._stats: Stats = {Analyzer(a): None for a in analyzers}

    def start(self, analyzer: Analyzer, pr_numbers: Iterable[int]) -> None:
        """Mark an analyzer as run, with an explicit zero entry per pull request."""
        analyzer = Analyzer(analyzer)
        with self._lock:
            per_pr = self._stats.get(analyzer)
            if per_pr is None:
                per_pr = self._stats[analyzer] = {}
            for pr_number in pr_numbers:
                per_pr.setdefault(int(pr_number), empty_counts())

    def record(self, issue: Issue, pr_number: int) -> None:
        """Count one issue against a pull request."""
        with self._lock:
            per_pr = self._stats.get(issue.analyzer)
            if per_pr is None:
                per_pr = self._stats[issue.analyzer] = {}
            counts = per_pr.setdefault(int(pr_number), empty_counts())
            counts[issue.severity] += 1

    def record_all(self, issues: Iterable[Issue], pr_numbers: Iterable[int]) -> None:
        """Count every issue against every pull request."""
        pr_numbers = list(pr_numbers)
        for issue in issues:
            for pr_number in pr_numbers:
                self.record(issue, pr_number)

    def finalize(self) -> Stats:
        """Return a snapshot of the completed structure."""
        with self._lock:
            return copy.deepcopy(self._stats)


def stats_to_dict(stats: Stats) -> Dict[str, Optional[Dict[str, Dict[str, int]]]]:
    """Render Stats with plain string keys (PR numbers stay as strings for JSON)."""
    result: Dict[str, Optional[Dict[str, Dict[str, int]]]] = {}
    for analyzer, per_pr in stats.items():
        key = Analyzer(analyzer).value
        if per_pr is None:
            result[key] = None
            continue
        result[key] = {
            str(pr_number): {Severity(s).value: count for s, count in counts.items()}
            for pr_number, counts in per_pr.items()
        }
    return result
