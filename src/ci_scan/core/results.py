"""Results bundle handed to review submission and reporting."""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .auto_approval import ApprovalReason
from .issue import Analyzer, Issue, Severity
from .stats import Stats, stats_to_dict
from .verdict import Verdict, analyzers_not_run, evaluate


@dataclass
class Results:
    """Everything a single commit scan produced."""

    commit: str
    pull_requests: List[int] = field(default_factory=list)
    changed_files: List[str] = field(default_factory=list)
    issues: List[Issue] = field(default_factory=list)
    stats: Stats = field(default_factory=dict)
    auto_approved_files: Dict[str, ApprovalReason] = field(default_factory=dict)

    @property
    def verdict(self) -> Verdict:
        """FAILURE when the stats fail or any error-severity issue was reported.

        Issues are counted per pull request, so a commit outside any open pull
        request has no counts; its errors must still fail the run.
        """
        if any(issue.severity is Severity.ERROR for issue in self.issues):
            return Verdict.FAILURE
        return evaluate(self.stats)

    @property
    def exit_status(self) -> int:
        return self.verdict.exit_code

    @property
    def analyzers_not_run(self) -> List[Analyzer]:
        return analyzers_not_run(self.stats)

    @property
    def fully_auto_approvable(self) -> bool:
        """Every changed file qualified for auto-approval."""
        return bool(self.changed_files) and all(
            path in self.auto_approved_files for path in self.changed_files
        )

    def issues_by_file(self) -> Dict[str, List[Issue]]:
        grouped: Dict[str, List[Issue]] = {}
        for issue in sorted(self.issues, key=lambda i: (i.file_path, i.line)):
            grouped.setdefault(issue.file_path, []).append(issue)
        return grouped

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for logging and the --output file."""
        return {
            "commit": self.commit,
            "pull_requests": list(self.pull_requests),
            "changed_files": list(self.changed_files),
            "issues": [issue.to_dict() for issue in self.issues],
            "stats": stats_to_dict(self.stats),
            "auto_approved_files": {
                path: reason.value for path, reason in self.auto_approved_files.items()
            },
            "verdict": self.verdict.value,
            "exit_status": self.exit_status,
        }
