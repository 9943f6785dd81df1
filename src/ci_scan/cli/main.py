"""Command-line entry point: scan one commit and exit with the verdict."""

import shutil
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Tuple

import click
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from ..analyzers import LintAnalyzer, StyleAnalyzer
from ..core.config import ScanConfig, load_config
from ..core.issue import Analyzer, Severity
from ..core.results import Results
from ..core.scan_runner import ScanRunner
from ..core.verdict import EXIT_USAGE
from ..integrations.git import LocalGitRepository, is_git_checkout
from ..integrations.github import GitHubClient, GitHubReviewSubmitter
from ..utils.atomic_io import atomic_write_data
from ..utils.error_handling import ErrorContext
from ..utils.rich_logging import setup_rich_logging

console = Console(stderr=True)


class ScanUsageError(click.UsageError):
    """Usage error reported with the scan's usage exit status."""
    exit_code = EXIT_USAGE


class ScanParameterError(click.BadParameter):
    exit_code = EXIT_USAGE


class StrictBool(click.ParamType):
    """Boolean option that only accepts the literal strings ``true`` and ``false``."""

    name = "true|false"

    def convert(self, value, param, ctx):
        if isinstance(value, bool):
            return value
        if value == "true":
            return True
        if value == "false":
            return False
        raise ScanParameterError("has to be either false or true", ctx=ctx, param=param)


STRICT_BOOL = StrictBool()


@click.group()
def cli():
    """ci-scan - lint and style-check a pull request commit."""


@cli.command()
@click.option("--repo-owner", help="Repository owner, can be an organization")
@click.option("--repo-name", help="Name of the repository")
@click.option("--commit", help="Exact commit to scan")
@click.option("--token", envvar="CI_SCAN_GITHUB_TOKEN", help="GitHub access token")
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=Path("ci-scan.yaml"),
              show_default=True, help="YAML configuration file")
@click.option("--local-git-repo", type=click.Path(path_type=Path),
              help="Local clone to read changed files from and run analyzers in")
@click.option("--pr", "pull_requests", type=int, multiple=True,
              help="Pull request number (repeatable); discovered from GitHub when omitted")
@click.option("--dry-run", type=STRICT_BOOL, help="If true, nothing is submitted to GitHub")
@click.option("--lint", type=STRICT_BOOL, help="Whether to run the linter")
@click.option("--style", type=STRICT_BOOL, help="Whether to run the style checker")
@click.option("--autoapprove", type=STRICT_BOOL, help="Whether to auto-approve by file type")
@click.option("--autoapprove-filetypes", help="Comma-separated extensions to auto-approve, e.g. txt,jpg")
@click.option("--parallel", type=STRICT_BOOL, help="Whether to run analyzers concurrently")
@click.option("--output", type=click.Path(path_type=Path), help="Write results as JSON to this file")
@click.option("--log-level", help="Logging level")
def scan(repo_owner, repo_name, commit, token, config_path, local_git_repo, pull_requests,
         dry_run, lint, style, autoapprove, autoapprove_filetypes, parallel, output, log_level):
    """Scan a commit, submit a review and exit non-zero when errors were found."""
    startup_time = time.time()

    if not commit:
        raise ScanUsageError("Missing required option: --commit")

    overrides = _build_overrides(
        repo_owner=repo_owner,
        repo_name=repo_name,
        token=token,
        local_git_repo=local_git_repo,
        pull_requests=list(pull_requests),
        dry_run=dry_run,
        lint=lint,
        style=style,
        autoapprove=autoapprove,
        autoapprove_filetypes=autoapprove_filetypes,
        parallel=parallel,
        output=output,
        log_level=log_level,
    )

    try:
        config = load_config(config_path, overrides)
    except (ValidationError, ValueError, OSError) as e:
        console.print(f"[red]Error: invalid configuration: {e}[/]")
        sys.exit(EXIT_USAGE)

    # Repository settings may come from the config file instead of flags
    missing = [
        flag for flag, value in (
            ("--repo-owner", config.github.owner),
            ("--repo-name", config.github.repo),
            ("--token", config.github.token),
        ) if not value
    ]
    if missing:
        raise ScanUsageError(f"Missing required option(s): {', '.join(missing)}")

    log = setup_rich_logging(
        run_id="ci-scan",
        log_dir=config.log_dir,
        log_level=config.log_level,
        use_json=config.log_json,
    )

    if not config.lint.enabled and not config.style.enabled:
        log.error("Both --lint and --style set to false, nothing to do!")
        sys.exit(EXIT_USAGE)

    if config.local_git_repo is not None and not is_git_checkout(config.local_git_repo):
        log.warning(f"Local git repository was not found: {config.local_git_repo}")
        config = config.model_copy(update={"local_git_repo": None})

    if config.local_git_repo is None:
        log.error("Analyzers need a local checkout; pass --local-git-repo")
        sys.exit(EXIT_USAGE)

    missing_tools = _missing_executables(config)
    if missing_tools:
        for name, executable in missing_tools:
            log.error(f"The {name} executable was not found: {executable}")
        sys.exit(EXIT_USAGE)

    log.scan_started(commit, config.github.full_name)

    github = GitHubClient(config.github)
    runner = ScanRunner(
        config,
        source=LocalGitRepository(config.local_git_repo, config.pull_requests),
        pr_source=github,
        adapters=_build_adapters(config),
        submitter=GitHubReviewSubmitter(github, autoapprove_enabled=config.autoapprove.enabled),
    )
    results = runner.run(commit)

    console.print(render_summary(results))

    if config.output is not None:
        with ErrorContext(f"writing results to {config.output}", raise_on_error=False):
            atomic_write_data(config.output, results.to_dict())

    log.scan_finished(time.time() - startup_time, results.exit_status)
    sys.exit(results.exit_status)


def _build_overrides(**values: Any) -> Dict[str, Any]:
    """Translate CLI flags into config overrides; unset flags keep file values."""
    overrides: Dict[str, Any] = {}
    github = {
        key: values[name]
        for key, name in (("owner", "repo_owner"), ("repo", "repo_name"), ("token", "token"))
        if values[name]
    }
    if github:
        overrides["github"] = github

    for section, name in (("lint", "lint"), ("style", "style")):
        if values[name] is not None:
            overrides[section] = {"enabled": values[name]}

    autoapprove: Dict[str, Any] = {}
    if values["autoapprove"] is not None:
        autoapprove["enabled"] = values["autoapprove"]
    if values["autoapprove_filetypes"] is not None:
        autoapprove["allowed_extensions"] = values["autoapprove_filetypes"]
    if autoapprove:
        overrides["autoapprove"] = autoapprove

    for name in ("dry_run", "parallel", "local_git_repo", "output", "log_level"):
        if values[name] is not None:
            overrides[name] = values[name]
    if values["pull_requests"]:
        overrides["pull_requests"] = values["pull_requests"]

    return overrides


def _missing_executables(config: ScanConfig) -> List[Tuple[str, str]]:
    """Enabled analyzers whose executable is neither on PATH nor an executable file."""
    return [
        (name, section.executable)
        for name, section in (("lint", config.lint), ("style", config.style))
        if section.enabled and shutil.which(section.executable) is None
    ]


def _build_adapters(config: ScanConfig) -> List:
    adapters: List = []
    if config.lint.enabled:
        adapters.append(LintAnalyzer(config.lint, config.local_git_repo))
    if config.style.enabled:
        adapters.append(StyleAnalyzer(config.style, config.local_git_repo))
    return adapters


def render_summary(results: Results) -> Table:
    """Per-analyzer, per-PR counts as a rich table."""
    table = Table(title=f"Scan of {results.commit[:8]}: {results.verdict.value.upper()}")
    table.add_column("Analyzer")
    table.add_column("PR")
    table.add_column("Errors", justify="right")
    table.add_column("Warnings", justify="right")

    for analyzer, per_pr in results.stats.items():
        name = Analyzer(analyzer).value
        if per_pr is None:
            table.add_row(name, "-", "[dim]did not run[/]", "[dim]did not run[/]")
            continue
        for pr_number, counts in sorted(per_pr.items()):
            errors = counts.get(Severity.ERROR, 0)
            table.add_row(
                name,
                f"#{pr_number}",
                f"[red]{errors}[/]" if errors else "0",
                str(counts.get(Severity.WARNING, 0)),
            )

    return table


if __name__ == "__main__":
    cli()
