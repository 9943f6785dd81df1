"""Tests for the Results bundle."""

from ci_scan.core.auto_approval import ApprovalReason
from ci_scan.core.issue import Analyzer, Severity
from ci_scan.core.results import Results
from ci_scan.core.verdict import Verdict


def _clean_stats():
    return {
        Analyzer.LINT: {101: {Severity.ERROR: 0, Severity.WARNING: 0}},
        Analyzer.STYLE: None,
    }


def test_exit_status_follows_stats(make_issue):
    results = Results(
        commit="abc123",
        pull_requests=[101],
        issues=[make_issue()],
        stats={Analyzer.LINT: {101: {Severity.ERROR: 1, Severity.WARNING: 0}}},
    )

    assert results.verdict is Verdict.FAILURE
    assert results.exit_status == 250


def test_error_issue_fails_without_counts(make_issue):
    results = Results(commit="abc123", issues=[make_issue()], stats={Analyzer.LINT: {}})

    assert results.verdict is Verdict.FAILURE
    assert results.exit_status == 250


def test_warning_issue_without_counts_passes(make_issue):
    results = Results(commit="abc123", issues=[make_issue(Severity.WARNING)], stats={Analyzer.LINT: {}})

    assert results.exit_status == 0


def test_analyzers_not_run():
    results = Results(commit="abc123", stats=_clean_stats())

    assert results.analyzers_not_run == [Analyzer.STYLE]
    assert results.exit_status == 0


def test_fully_auto_approvable():
    results = Results(
        commit="abc123",
        changed_files=["a.txt", "b.jpg"],
        auto_approved_files={"a.txt": ApprovalReason.FILETYPE, "b.jpg": ApprovalReason.FILETYPE},
    )
    partial = Results(
        commit="abc123",
        changed_files=["a.txt", "c.php"],
        auto_approved_files={"a.txt": ApprovalReason.FILETYPE},
    )

    assert results.fully_auto_approvable is True
    assert partial.fully_auto_approvable is False
    assert Results(commit="abc123").fully_auto_approvable is False


def test_issues_by_file_sorted(make_issue):
    results = Results(
        commit="abc123",
        issues=[
            make_issue(file_path="b.php", line=3),
            make_issue(file_path="a.php", line=9),
            make_issue(file_path="a.php", line=2),
        ],
    )

    grouped = results.issues_by_file()

    assert list(grouped) == ["a.php", "b.php"]
    assert [i.line for i in grouped["a.php"]] == [2, 9]


def test_to_dict(make_issue):
    results = Results(
        commit="abc123",
        pull_requests=[101],
        changed_files=["a.txt", "src/plugin.php"],
        issues=[make_issue(Severity.WARNING, Analyzer.LINT)],
        stats={
            Analyzer.LINT: {101: {Severity.ERROR: 0, Severity.WARNING: 1}},
            Analyzer.STYLE: None,
        },
        auto_approved_files={"a.txt": ApprovalReason.FILETYPE},
    )

    data = results.to_dict()

    assert data["stats"] == {"lint": {"101": {"error": 0, "warning": 1}}, "style": None}
    assert data["auto_approved_files"] == {"a.txt": "filetype"}
    assert data["issues"][0]["severity"] == "warning"
    assert data["verdict"] == "success"
    assert data["exit_status"] == 0
