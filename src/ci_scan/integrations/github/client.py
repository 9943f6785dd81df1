"""GitHub client for commit inspection and review submission."""

import logging
from typing import Dict, List, Optional

from github import Github
from github.Repository import Repository

from ...core.config import GitHubConfig
from ...core.issue import Analyzer, Severity
from ...core.results import Results
from ...core.verdict import Verdict
from ...utils.cache_annotation import cached_indication_str

logger = logging.getLogger(__name__)


class GitHubClient:
    """GitHub API client for the commit being scanned.

    API responses are memoized for the lifetime of the client.
    """

    def __init__(self, config: GitHubConfig, gh: Optional[Github] = None):
        self.config = config
        self.gh = gh or Github(config.token)
        self._repo: Optional[Repository] = None
        self._changed_files: Dict[str, List[str]] = {}
        self._pull_requests: Dict[str, List[int]] = {}

    @property
    def repo(self) -> Repository:
        if self._repo is None:
            self._repo = self.gh.get_repo(self.config.full_name)
        return self._repo

    def list_changed_files(self, commit: str) -> List[str]:
        """Paths touched by the commit."""
        cached = commit in self._changed_files
        if not cached:
            self._changed_files[commit] = [f.filename for f in self.repo.get_commit(commit).files]
        files = self._changed_files[commit]
        logger.info(f"Commit {commit[:8]} changes {len(files)} file(s){cached_indication_str(cached)}")
        return list(files)

    def list_pull_requests(self, commit: str) -> List[int]:
        """Open pull requests that contain the commit."""
        cached = commit in self._pull_requests
        if not cached:
            pulls = self.repo.get_commit(commit).get_pulls()
            self._pull_requests[commit] = sorted(pr.number for pr in pulls if pr.state == "open")
        numbers = self._pull_requests[commit]
        logger.info(
            f"Commit {commit[:8]} is part of pull request(s) {numbers}{cached_indication_str(cached)}"
        )
        return list(numbers)


def review_event(results: Results, autoapprove_enabled: bool) -> str:
    """APPROVE only a clean commit whose every changed file auto-approves."""
    if (
        autoapprove_enabled
        and results.verdict is Verdict.SUCCESS
        and not results.issues
        and results.fully_auto_approvable
    ):
        return "APPROVE"
    return "COMMENT"


def format_review_body(results: Results, pr_number: int) -> str:
    """Markdown review body for one pull request."""
    lines = [f"## Scan results for {results.commit[:8]}", ""]

    grouped = results.issues_by_file()
    if grouped:
        for file_path, issues in grouped.items():
            lines.append(f"### `{file_path}`")
            lines.append("")
            for issue in issues:
                marker = "**Error**" if issue.severity is Severity.ERROR else "Warning"
                lines.append(f"- {marker} line {issue.line} ({issue.analyzer.value}): {issue.message}")
            lines.append("")
    else:
        lines.extend(["No issues found.", ""])

    lines.append("| Analyzer | Errors | Warnings |")
    lines.append("| --- | --- | --- |")
    for analyzer, per_pr in results.stats.items():
        name = Analyzer(analyzer).value
        if per_pr is None:
            lines.append(f"| {name} | did not run | did not run |")
            continue
        counts = per_pr.get(pr_number, {})
        lines.append(
            f"| {name} | {counts.get(Severity.ERROR, 0)} | {counts.get(Severity.WARNING, 0)} |"
        )

    if results.auto_approved_files:
        lines.extend(["", "Auto-approvable files:", ""])
        for file_path, reason in sorted(results.auto_approved_files.items()):
            lines.append(f"- `{file_path}` ({reason.value})")

    return "\n".join(lines)


class GitHubReviewSubmitter:
    """Post scan results as pull request reviews."""

    def __init__(self, client: GitHubClient, autoapprove_enabled: bool = False):
        self.client = client
        self.autoapprove_enabled = autoapprove_enabled

    def submit(self, commit: str, results: Results) -> None:
        event = review_event(results, self.autoapprove_enabled)
        gh_commit = self.client.repo.get_commit(commit)

        for pr_number in results.pull_requests:
            pr = self.client.repo.get_pull(pr_number)
            pr.create_review(
                commit=gh_commit,
                body=format_review_body(results, pr_number),
                event=event,
            )
            logger.info(f"Submitted {event} review to PR #{pr_number}")
