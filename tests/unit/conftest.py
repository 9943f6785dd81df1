"""Shared test fixtures for unit tests."""

import logging

import pytest

from ci_scan.core.config import clear_config_cache
from ci_scan.core.issue import Analyzer, Issue, Severity


@pytest.fixture(autouse=True)
def _reset_scan_logging():
    """setup_rich_logging attaches handlers to the package logger; drop them between tests."""
    yield
    scan_logger = logging.getLogger("ci_scan")
    for handler in scan_logger.handlers[:]:
        handler.close()
        scan_logger.removeHandler(handler)
    scan_logger.setLevel(logging.NOTSET)
    clear_config_cache()


@pytest.fixture
def make_issue():
    """Factory for Issue records with sensible defaults."""
    def _make(
        severity: Severity = Severity.ERROR,
        analyzer: Analyzer = Analyzer.LINT,
        file_path: str = "src/plugin.php",
        line: int = 10,
        message: str = "Unexpected token",
    ) -> Issue:
        return Issue(
            file_path=file_path,
            line=line,
            severity=severity,
            message=message,
            analyzer=analyzer,
        )
    return _make
