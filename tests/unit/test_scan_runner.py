"""Tests for ScanRunner."""

import logging
from unittest.mock import MagicMock

import pytest

from ci_scan.core.auto_approval import ApprovalReason
from ci_scan.core.config import ScanConfig
from ci_scan.core.issue import Analyzer, Severity
from ci_scan.core.scan_runner import ScanRunner


class FakeSource:
    def __init__(self, files, pull_requests=(101,)):
        self.files = list(files)
        self.pull_requests = list(pull_requests)

    def list_changed_files(self, commit):
        return self.files

    def list_pull_requests(self, commit):
        return self.pull_requests


class FakeAdapter:
    def __init__(self, analyzer, raw_issues=(), error=None):
        self.analyzer = analyzer
        self.raw_issues = list(raw_issues)
        self.error = error
        self.calls = []

    def run(self, commit, changed_files):
        self.calls.append((commit, list(changed_files)))
        if self.error:
            raise self.error
        return self.raw_issues


def _raw(severity="error", line=1, file="plugin.php", message="Bad thing"):
    return {"file": file, "line": line, "severity": severity, "message": message}


@pytest.fixture
def config():
    return ScanConfig(autoapprove={"enabled": True, "allowed_extensions": ["txt", "jpg"]})


class TestScanRunner:
    def test_aggregates_issues_from_all_analyzers(self, config):
        lint = FakeAdapter(Analyzer.LINT, [_raw(severity="warning"), _raw(severity="warning", line=2)])
        style = FakeAdapter(Analyzer.STYLE, [_raw(severity="error")])
        runner = ScanRunner(config, FakeSource(["a.txt", "b.jpg", "plugin.php"]), [lint, style])

        results = runner.run("deadbeef")

        assert len(results.issues) == 3
        assert results.stats[Analyzer.LINT] == {101: {Severity.ERROR: 0, Severity.WARNING: 2}}
        assert results.stats[Analyzer.STYLE] == {101: {Severity.ERROR: 1, Severity.WARNING: 0}}
        assert results.exit_status == 250
        assert results.auto_approved_files == {
            "a.txt": ApprovalReason.FILETYPE,
            "b.jpg": ApprovalReason.FILETYPE,
        }
        assert lint.calls == [("deadbeef", ["a.txt", "b.jpg", "plugin.php"])]

    def test_clean_analyzer_gets_zero_entry(self, config):
        runner = ScanRunner(config, FakeSource(["plugin.php"], [7, 8]), [FakeAdapter(Analyzer.LINT)])

        results = runner.run("deadbeef")

        assert results.stats[Analyzer.LINT] == {
            7: {Severity.ERROR: 0, Severity.WARNING: 0},
            8: {Severity.ERROR: 0, Severity.WARNING: 0},
        }
        assert results.stats[Analyzer.STYLE] is None
        assert results.exit_status == 0

    def test_malformed_issue_does_not_block_others(self, config):
        adapter = FakeAdapter(Analyzer.LINT, [_raw(line=None), _raw(severity="error", line=4)])
        runner = ScanRunner(config, FakeSource(["plugin.php"]), [adapter])

        results = runner.run("deadbeef")

        assert [i.line for i in results.issues] == [4]
        assert results.stats[Analyzer.LINT][101][Severity.ERROR] == 1

    def test_errors_fail_run_without_pull_requests(self, config, caplog):
        lint = FakeAdapter(Analyzer.LINT, [_raw(severity="error", line=2)])
        runner = ScanRunner(config, FakeSource(["plugin.php"], pull_requests=()), [lint])

        with caplog.at_level(logging.WARNING):
            results = runner.run("deadbeef")

        assert results.stats[Analyzer.LINT] == {}
        assert results.exit_status == 250
        assert "No pull requests found" in caplog.text

    def test_failing_analyzer_is_reported_as_not_run(self, config, caplog):
        failing = FakeAdapter(Analyzer.STYLE, error=OSError("phpcs: not found"))
        lint = FakeAdapter(Analyzer.LINT, [_raw(severity="warning")])
        runner = ScanRunner(config, FakeSource(["plugin.php"]), [lint, failing])

        with caplog.at_level(logging.WARNING):
            results = runner.run("deadbeef")

        assert results.stats[Analyzer.STYLE] is None
        assert results.analyzers_not_run == [Analyzer.STYLE]
        assert results.exit_status == 0
        assert "Analyzer 'style' did not run" in caplog.text
        failure = next(r for r in caplog.records if r.levelno == logging.ERROR)
        assert failure.analyzer == "style"

    def test_configured_pull_requests_skip_discovery(self):
        config = ScanConfig(pull_requests=[55])
        pr_source = MagicMock()
        runner = ScanRunner(config, FakeSource(["a.php"]), [FakeAdapter(Analyzer.LINT)], pr_source=pr_source)

        results = runner.run("deadbeef")

        assert results.pull_requests == [55]
        pr_source.list_pull_requests.assert_not_called()

    def test_pull_requests_discovered_from_pr_source(self, config):
        pr_source = MagicMock()
        pr_source.list_pull_requests.return_value = [12, 13]
        runner = ScanRunner(config, FakeSource(["a.php"], []), [FakeAdapter(Analyzer.LINT)], pr_source=pr_source)

        results = runner.run("deadbeef")

        assert results.pull_requests == [12, 13]
        assert set(results.stats[Analyzer.LINT]) == {12, 13}

    def test_submits_results(self, config):
        submitter = MagicMock()
        runner = ScanRunner(config, FakeSource(["a.php"]), [FakeAdapter(Analyzer.LINT)], submitter=submitter)

        results = runner.run("deadbeef")

        submitter.submit.assert_called_once_with("deadbeef", results)

    def test_dry_run_skips_submission(self):
        config = ScanConfig(dry_run=True)
        submitter = MagicMock()
        runner = ScanRunner(config, FakeSource(["a.php"]), [FakeAdapter(Analyzer.LINT)], submitter=submitter)

        runner.run("deadbeef")

        submitter.submit.assert_not_called()

    def test_parallel_matches_sequential(self):
        def adapters():
            return [
                FakeAdapter(Analyzer.LINT, [_raw(severity="error"), _raw(severity="warning")]),
                FakeAdapter(Analyzer.STYLE, [_raw(severity="warning", line=n) for n in range(1, 20)]),
            ]

        source = FakeSource(["plugin.php"], [1, 2])

        sequential = ScanRunner(ScanConfig(), source, adapters()).run("deadbeef")
        parallel = ScanRunner(ScanConfig(parallel=True), source, adapters()).run("deadbeef")

        assert parallel.stats == sequential.stats
        assert len(parallel.issues) == len(sequential.issues) == 21
