"""Reduce aggregated Stats to the process exit status.

Any error-severity issue recorded by any analyzer, on any pull request,
fails the run. Warnings never do. Analyzers that did not run (``None``
entries) are not inspected.
"""

from enum import Enum
from typing import Any, List, Mapping, Optional

from .issue import Analyzer, Severity

EXIT_SUCCESS = 0
EXIT_FAILURE = 250
EXIT_USAGE = 253


class Verdict(str, Enum):
    """Outcome of a run. PENDING until the stats are complete."""
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"

    @property
    def exit_code(self) -> Optional[int]:
        if self is Verdict.SUCCESS:
            return EXIT_SUCCESS
        if self is Verdict.FAILURE:
            return EXIT_FAILURE
        return None


def _error_count(counts: Mapping[Any, int]) -> int:
    # Accepts Severity or plain string keys
    return sum(count for severity, count in counts.items() if Severity(severity) is Severity.ERROR)


def evaluate(stats: Mapping[Any, Optional[Mapping[int, Mapping[Any, int]]]]) -> Verdict:
    """Return SUCCESS when every recorded error count is zero."""
    for per_pr in stats.values():
        if per_pr is None:
            continue
        for counts in per_pr.values():
            if _error_count(counts) != 0:
                return Verdict.FAILURE
    return Verdict.SUCCESS


def exit_status(stats: Mapping[Any, Optional[Mapping[int, Mapping[Any, int]]]]) -> int:
    """Exit code for the run: 0 on success, EXIT_FAILURE otherwise."""
    return evaluate(stats).exit_code


def analyzers_not_run(stats: Mapping[Any, Optional[Mapping[int, Mapping[Any, int]]]]) -> List[Analyzer]:
    """Analyzers whose stats entry is absent (``None``)."""
    return [Analyzer(analyzer) for analyzer, per_pr in stats.items() if per_pr is None]
