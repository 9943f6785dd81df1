"""Scan logging with commit/analyzer context and colored console output."""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

LEVEL_COLORS = {
    "DEBUG": "\033[36m",      # Cyan
    "INFO": "\033[32m",       # Green
    "WARNING": "\033[33m",    # Yellow
    "ERROR": "\033[31m",      # Red
    "CRITICAL": "\033[35m",   # Magenta
}
RESET = "\033[0m"


class ScanLogFormatter(logging.Formatter):
    """Formatter that prefixes messages with run id, commit and analyzer."""

    def __init__(self, run_id: str, use_colors: bool = True):
        super().__init__()
        self.run_id = run_id
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        commit_context = ""
        if getattr(record, "commit", None):
            commit_context = f"[{record.commit[:8]}] "

        analyzer_context = ""
        if getattr(record, "analyzer", None):
            analyzer_context = f"[{record.analyzer}] "

        if self.use_colors:
            level_color = LEVEL_COLORS.get(record.levelname, "")
            reset = RESET
        else:
            level_color = ""
            reset = ""

        message = (
            f"{timestamp} {level_color}{record.levelname:8s}{reset} "
            f"[{self.run_id}] {commit_context}{analyzer_context}{record.getMessage()}"
        )
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line, with the same run/commit/analyzer context."""

    def __init__(self, run_id: str):
        super().__init__()
        self.run_id = run_id

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "run": self.run_id,
            "level": record.levelname,
            "message": record.getMessage(),
            "module": record.module,
        }
        for key in ("commit", "analyzer"):
            if getattr(record, key, None):
                entry[key] = getattr(record, key)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that attaches the commit being scanned to every record."""

    def __init__(self, logger: logging.Logger, run_id: str):
        super().__init__(logger, {})
        self.run_id = run_id
        self.current_commit: Optional[str] = None

    def process(self, msg, kwargs):
        extra = dict(kwargs.get("extra") or {})
        if self.current_commit:
            extra.setdefault("commit", self.current_commit)
        kwargs["extra"] = extra
        return msg, kwargs

    def scan_started(self, commit: str, repo: str):
        self.current_commit = commit
        self.info(f"Starting scan of {repo}@{commit}")

    def scan_finished(self, run_time_seconds: float, exit_status: int):
        self.info(f"Shutting down (run time {run_time_seconds:.1f}s, exit status {exit_status})")
        self.current_commit = None


def setup_rich_logging(
    run_id: str = "ci-scan",
    log_dir: Optional[Path] = None,
    log_level: str = "INFO",
    use_json: bool = False,
) -> ContextLogger:
    """
    Configure the ``ci_scan`` logger hierarchy.

    Args:
        run_id: Identifier shown in every line
        log_dir: Also write a plain-text log file here when given
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        use_json: Use JSON structured logging on the console

    Returns:
        ContextLogger bound to the ``ci_scan`` logger
    """
    logger = logging.getLogger("ci_scan")
    logger.setLevel(getattr(logging, log_level.upper()))

    # Close existing handlers before clearing (prevents file descriptor leak)
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    if use_json:
        formatter = JsonLogFormatter(run_id)
    else:
        use_colors = hasattr(sys.stderr, "isatty") and sys.stderr.isatty()
        formatter = ScanLogFormatter(run_id, use_colors=use_colors)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / f"{run_id}.log")
        file_handler.setFormatter(ScanLogFormatter(run_id, use_colors=False))
        logger.addHandler(file_handler)

    return ContextLogger(logger, run_id)
