"""Coding-standard checks using a phpcs-compatible JSON report."""

import json
import logging
from pathlib import Path
from typing import List, Sequence

from ..core.config import StyleConfig
from ..core.issue import Analyzer
from ..utils.subprocess_utils import run_command
from .base import AnalyzerOutputError, RawIssue, relative_to_repo, select_files

logger = logging.getLogger(__name__)

SEVERITY_MAP = {
    "ERROR": "error",
    "WARNING": "warning",
}


def parse_style_report(report: str, repo_path: Path) -> List[RawIssue]:
    """Convert a JSON report into raw issue records.

    Raises:
        AnalyzerOutputError: If the report is not valid JSON
    """
    try:
        data = json.loads(report)
    except json.JSONDecodeError as e:
        raise AnalyzerOutputError(f"Failed to parse style checker JSON output: {e}")

    issues: List[RawIssue] = []
    for reported_path, file_report in (data.get("files") or {}).items():
        file_path = relative_to_repo(repo_path, reported_path)
        for message in file_report.get("messages", []):
            issues.append({
                "file": file_path,
                "line": message.get("line"),
                # Unknown types fall through and are rejected by the issue model
                "severity": SEVERITY_MAP.get(str(message.get("type", "")).upper(), message.get("type")),
                "message": message.get("message", ""),
            })
    return issues


class StyleAnalyzer:
    """Run the configured style checker against changed files in a local checkout."""

    analyzer = Analyzer.STYLE

    def __init__(self, config: StyleConfig, repo_path: Path):
        self.config = config
        self.repo_path = repo_path

    def build_command(self, files: Sequence[str]) -> List[str]:
        cmd = [
            self.config.executable,
            "--report=json",
            f"--standard={self.config.standard}",
        ]
        if self.config.severity is not None:
            cmd.append(f"--severity={self.config.severity}")
        return cmd + list(files)

    def run(self, commit: str, changed_files: Sequence[str]) -> List[RawIssue]:
        files = select_files(self.repo_path, changed_files, self.config.file_extensions)
        logger.info(f"Style-checking {len(files)} file(s) of commit {commit[:8]}")
        if not files:
            return []

        result = run_command(
            self.build_command(files),
            cwd=self.repo_path,
            check=False,
            timeout=self.config.timeout,
        )
        if not result.stdout.strip():
            raise AnalyzerOutputError(
                f"Style checker produced no report (exit code {result.returncode}): {result.stderr.strip()}"
            )
        return parse_style_report(result.stdout, self.repo_path)
