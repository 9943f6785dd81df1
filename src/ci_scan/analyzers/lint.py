"""Syntax linting, one linter process per changed file."""

import logging
import re
from pathlib import Path
from typing import List, Sequence, Set, Tuple

from ..core.config import LintConfig
from ..core.issue import Analyzer
from ..utils.subprocess_utils import run_command
from .base import RawIssue, select_files

logger = logging.getLogger(__name__)

# php -l style: "PHP Parse error:  syntax error, unexpected '}' in foo.php on line 3"
LINT_ERROR_RE = re.compile(
    r"^(?:PHP\s+)?(?:Parse|Fatal)\s+error:\s*(?P<message>.+?)\s+in\s+(?P<file>.+?)\s+on\s+line\s+(?P<line>\d+)\s*$"
)


def parse_lint_output(output: str, file_path: str) -> List[RawIssue]:
    """Extract error records from linter output for a single file.

    php -l reports each error on stdout and again on stderr (``PHP `` prefix);
    repeated ``(line, message)`` pairs are reported once.
    """
    issues: List[RawIssue] = []
    seen: Set[Tuple[int, str]] = set()
    for line in output.splitlines():
        match = LINT_ERROR_RE.match(line.strip())
        if not match:
            continue
        line_number = int(match.group("line"))
        message = " ".join(match.group("message").split())
        if (line_number, message) in seen:
            continue
        seen.add((line_number, message))
        issues.append({
            # The linter may echo an absolute path; report the file we asked about
            "file": file_path,
            "line": line_number,
            "severity": "error",
            "message": message,
        })
    return issues


class LintAnalyzer:
    """Run the configured linter against changed files in a local checkout."""

    analyzer = Analyzer.LINT

    def __init__(self, config: LintConfig, repo_path: Path):
        self.config = config
        self.repo_path = repo_path

    def run(self, commit: str, changed_files: Sequence[str]) -> List[RawIssue]:
        files = select_files(self.repo_path, changed_files, self.config.file_extensions)
        logger.info(f"Linting {len(files)} file(s) of commit {commit[:8]}")

        issues: List[RawIssue] = []
        for file_path in files:
            result = run_command(
                [self.config.executable, "-l", file_path],
                cwd=self.repo_path,
                check=False,
                timeout=self.config.timeout,
            )
            if result.returncode == 0:
                continue
            found = parse_lint_output(result.stdout + "\n" + result.stderr, file_path)
            if not found:
                logger.warning(
                    f"Linter exited with {result.returncode} for {file_path} but reported no parseable errors"
                )
            issues.extend(found)

        return issues
