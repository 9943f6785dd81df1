"""Tests for scan logging setup and formatting."""

import json
import logging

from ci_scan.utils.rich_logging import ContextLogger, JsonLogFormatter, ScanLogFormatter, setup_rich_logging


def _record(msg="hello", **extra):
    record = logging.LogRecord("ci_scan.test", logging.WARNING, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestScanLogFormatter:
    def test_plain_format_includes_context(self):
        formatter = ScanLogFormatter("ci-scan", use_colors=False)

        line = formatter.format(_record(commit="deadbeefcafebabe", analyzer="lint"))

        assert "WARNING" in line
        assert "[ci-scan] [deadbeef] [lint] hello" in line
        assert "\033[" not in line

    def test_colors_when_enabled(self):
        formatter = ScanLogFormatter("ci-scan", use_colors=True)

        assert "\033[33m" in formatter.format(_record())


class TestContextLogger:
    def test_commit_attached_between_start_and_finish(self, caplog):
        log = ContextLogger(logging.getLogger("ci_scan.test"), "ci-scan")

        with caplog.at_level(logging.INFO):
            log.scan_started("deadbeef", "acme/site")
            log.info("working")
            log.scan_finished(1.25, 250)
            log.info("after")

        records = caplog.records
        assert records[0].getMessage() == "Starting scan of acme/site@deadbeef"
        assert records[1].commit == "deadbeef"
        assert "exit status 250" in records[2].getMessage()
        assert not hasattr(records[3], "commit")


def test_setup_rich_logging_writes_log_file(tmp_path):
    log = setup_rich_logging(run_id="scan-test", log_dir=tmp_path / "logs", log_level="DEBUG")

    log.info("written to file")
    for handler in log.logger.handlers:
        handler.flush()

    assert log.logger.level == logging.DEBUG
    assert "written to file" in (tmp_path / "logs" / "scan-test.log").read_text()


def test_setup_rich_logging_replaces_handlers():
    setup_rich_logging()
    log = setup_rich_logging()

    assert len(log.logger.handlers) == 1


def test_setup_rich_logging_json_format():
    log = setup_rich_logging(run_id="scan-json", use_json=True)

    assert isinstance(log.logger.handlers[0].formatter, JsonLogFormatter)


def test_json_format_escapes_quotes():
    formatter = JsonLogFormatter("scan-json")
    record = _record(
        "Dropping lint issue: unknown severity: {'severity': \"notice\"}",
        commit="deadbeefcafe",
        analyzer="lint",
    )

    entry = json.loads(formatter.format(record))

    assert entry["message"] == "Dropping lint issue: unknown severity: {'severity': \"notice\"}"
    assert entry["run"] == "scan-json"
    assert entry["level"] == "WARNING"
    assert entry["commit"] == "deadbeefcafe"
    assert entry["analyzer"] == "lint"
