"""Result aggregation and decision engine."""

from .auto_approval import ApprovalReason, ApprovalRule, FileTypeRule, auto_approve_files
from .config import AutoApprovalPolicy, ScanConfig, load_config
from .issue import Analyzer, InvalidIssueError, Issue, Severity, collect_issues
from .results import Results
from .stats import Stats, StatsAggregator
from .verdict import EXIT_FAILURE, EXIT_SUCCESS, Verdict, exit_status

__all__ = [
    "ApprovalReason",
    "ApprovalRule",
    "FileTypeRule",
    "auto_approve_files",
    "AutoApprovalPolicy",
    "ScanConfig",
    "load_config",
    "Analyzer",
    "InvalidIssueError",
    "Issue",
    "Severity",
    "collect_issues",
    "Results",
    "Stats",
    "StatsAggregator",
    "EXIT_FAILURE",
    "EXIT_SUCCESS",
    "Verdict",
    "exit_status",
]
