"""Normalized analyzer findings."""

import logging
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping

from ..utils.error_handling import log_and_ignore

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    """Issue severity level. Only errors affect the verdict."""
    ERROR = "error"
    WARNING = "warning"


class Analyzer(str, Enum):
    """Analyzer that produced an issue."""
    LINT = "lint"
    STYLE = "style"


class InvalidIssueError(Exception):
    """Raised when a raw analyzer record cannot be normalized into an Issue."""

    def __init__(self, reason: str, raw: Any = None):
        self.reason = reason
        self.raw = raw
        super().__init__(f"Invalid issue ({reason}): {raw!r}")


@dataclass(frozen=True)
class Issue:
    """Individual analyzer finding."""
    file_path: str
    line: int
    severity: Severity
    message: str
    analyzer: Analyzer

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], analyzer: Analyzer) -> "Issue":
        """Normalize a raw analyzer record.

        Args:
            raw: Mapping with ``file``, ``line``, ``severity`` and ``message`` keys
            analyzer: Analyzer the record came from

        Returns:
            Issue with every field populated

        Raises:
            InvalidIssueError: If a field is missing or malformed
        """
        if not isinstance(raw, Mapping):
            raise InvalidIssueError("not a mapping", raw)

        file_path = raw.get("file")
        if not isinstance(file_path, str) or not file_path.strip():
            raise InvalidIssueError("missing file", raw)

        line = raw.get("line")
        # bool is an int subclass; True is not a line number
        if isinstance(line, bool) or line is None:
            raise InvalidIssueError("missing line", raw)
        if isinstance(line, float) and not line.is_integer():
            raise InvalidIssueError("line is not an integer", raw)
        try:
            line = int(line)
        except (TypeError, ValueError):
            raise InvalidIssueError("line is not an integer", raw)
        if line < 1:
            raise InvalidIssueError("line must be >= 1", raw)

        try:
            severity = Severity(str(raw.get("severity", "")).lower())
        except ValueError:
            raise InvalidIssueError("unknown severity", raw)

        message = raw.get("message")
        if not isinstance(message, str) or not message.strip():
            raise InvalidIssueError("empty message", raw)

        return cls(
            file_path=file_path,
            line=line,
            severity=severity,
            message=message.strip(),
            analyzer=Analyzer(analyzer),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-friendly dict."""
        data = asdict(self)
        data["severity"] = self.severity.value
        data["analyzer"] = self.analyzer.value
        return data


def collect_issues(raw_issues: Iterable[Mapping[str, Any]], analyzer: Analyzer) -> List[Issue]:
    """Normalize a batch of raw records, dropping the malformed ones.

    A single bad record is logged and skipped so it cannot block the rest
    of the batch from being aggregated.
    """
    issues: List[Issue] = []
    dropped = 0

    for raw in raw_issues:
        try:
            issues.append(Issue.from_raw(raw, analyzer))
        except InvalidIssueError as e:
            dropped += 1
            log_and_ignore(e, f"Dropping {Analyzer(analyzer).value} issue", logger_instance=logger)

    if dropped:
        logger.warning(f"Dropped {dropped} malformed {Analyzer(analyzer).value} issue(s)")

    return issues
