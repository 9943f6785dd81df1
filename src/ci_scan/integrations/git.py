"""Changed-file listing from a local git checkout."""

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from ..utils.subprocess_utils import run_git_command

logger = logging.getLogger(__name__)


def is_git_checkout(path: Optional[Path]) -> bool:
    return path is not None and (path / ".git").is_dir()


class LocalGitRepository:
    """Read commit contents from a local clone instead of the GitHub API."""

    def __init__(self, path: Path, pull_requests: Iterable[int] = ()):
        self.path = path
        self.pull_requests = [int(n) for n in pull_requests]

    def list_changed_files(self, commit: str) -> List[str]:
        result = run_git_command(
            ["diff-tree", "--no-commit-id", "--name-only", "-r", "--root", commit],
            cwd=self.path,
        )
        files = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        logger.debug(f"{len(files)} changed file(s) in {commit[:8]} (local git)")
        return files

    def list_pull_requests(self, commit: str) -> List[int]:
        # A local clone knows nothing about pull requests
        return list(self.pull_requests)
