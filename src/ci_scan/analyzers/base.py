"""Shared pieces of the analyzer adapters."""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List

from ..core.auto_approval import file_extension

logger = logging.getLogger(__name__)

RawIssue = Dict[str, Any]


class AnalyzerOutputError(Exception):
    """Raised when an analyzer's output cannot be parsed at all."""


def select_files(repo_path: Path, changed_files: Iterable[str], extensions: Iterable[str]) -> List[str]:
    """Changed files with a matching extension that still exist in the checkout.

    Files removed by the commit are skipped.
    """
    extensions = set(extensions)
    selected = []
    for file_path in changed_files:
        if file_extension(file_path) not in extensions:
            continue
        if not (repo_path / file_path).is_file():
            logger.debug(f"Skipping {file_path}: not present in checkout")
            continue
        selected.append(file_path)
    return selected


def relative_to_repo(repo_path: Path, reported: str) -> str:
    """Map a path reported by a tool back to a repository-relative path."""
    path = Path(reported)
    if path.is_absolute():
        try:
            return path.resolve().relative_to(repo_path.resolve()).as_posix()
        except ValueError:
            return reported
    return path.as_posix()
