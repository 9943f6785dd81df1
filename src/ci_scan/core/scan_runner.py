"""Run the enabled analyzers over one commit and aggregate the outcome."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, List, Mapping, Optional, Protocol, Sequence

from .auto_approval import auto_approve_files
from .config import ScanConfig
from .issue import Analyzer, Issue, collect_issues
from .results import Results
from .stats import StatsAggregator

logger = logging.getLogger(__name__)


class ChangedFileSource(Protocol):
    def list_changed_files(self, commit: str) -> Sequence[str]: ...

    def list_pull_requests(self, commit: str) -> Sequence[int]: ...


class AnalyzerAdapter(Protocol):
    analyzer: Analyzer

    def run(self, commit: str, changed_files: Sequence[str]) -> Sequence[Mapping[str, Any]]: ...


class ReviewSubmitter(Protocol):
    def submit(self, commit: str, results: Results) -> None: ...


class ScanRunner:
    """Drive a single commit scan.

    Every analyzer that completes gets an explicit Stats entry for each pull
    request, even with no issues. An analyzer that fails keeps a ``None``
    entry so it is reported as not run rather than clean.
    """

    def __init__(
        self,
        config: ScanConfig,
        source: ChangedFileSource,
        adapters: Sequence[AnalyzerAdapter],
        submitter: Optional[ReviewSubmitter] = None,
        pr_source: Optional[ChangedFileSource] = None,
    ):
        self.config = config
        self.source = source
        self.pr_source = pr_source or source
        self.adapters = list(adapters)
        self.submitter = submitter

    def run(self, commit: str) -> Results:
        startup_time = time.monotonic()

        changed_files = list(self.source.list_changed_files(commit))
        pull_requests = list(self.config.pull_requests) or list(self.pr_source.list_pull_requests(commit))
        if not pull_requests:
            logger.warning(f"No pull requests found for commit {commit[:8]}; counts will not be recorded")

        aggregator = StatsAggregator()
        issues: List[Issue] = []

        if self.config.parallel and len(self.adapters) > 1:
            with ThreadPoolExecutor(max_workers=len(self.adapters)) as executor:
                futures = {
                    executor.submit(self._run_adapter, adapter, commit, changed_files, pull_requests, aggregator): adapter
                    for adapter in self.adapters
                }
                for future in as_completed(futures):
                    issues.extend(future.result())
        else:
            for adapter in self.adapters:
                issues.extend(self._run_adapter(adapter, commit, changed_files, pull_requests, aggregator))

        results = Results(
            commit=commit,
            pull_requests=pull_requests,
            changed_files=changed_files,
            issues=issues,
            stats=aggregator.finalize(),
            auto_approved_files=auto_approve_files(changed_files, self.config.autoapprove),
        )

        enabled = {adapter.analyzer for adapter in self.adapters}
        for analyzer in results.analyzers_not_run:
            if analyzer in enabled:
                logger.warning(f"Analyzer '{analyzer.value}' did not run; its results are missing, not clean")

        if self.config.dry_run:
            logger.info("Dry run: not submitting results")
        elif self.submitter is not None:
            self.submitter.submit(commit, results)

        logger.info(
            f"Scan of {commit[:8]} finished in {time.monotonic() - startup_time:.1f}s: "
            f"{len(results.issues)} issue(s), verdict {results.verdict.value}"
        )
        return results

    def _run_adapter(
        self,
        adapter: AnalyzerAdapter,
        commit: str,
        changed_files: Sequence[str],
        pull_requests: Sequence[int],
        aggregator: StatsAggregator,
    ) -> List[Issue]:
        analyzer = Analyzer(adapter.analyzer)
        try:
            raw_issues = adapter.run(commit, changed_files)
        except Exception as e:
            # Leave the stats entry as None: the analyzer did not run
            logger.error(f"Analyzer failed: {e}", extra={"analyzer": analyzer.value})
            return []

        issues = collect_issues(raw_issues, analyzer)
        aggregator.start(analyzer, pull_requests)
        aggregator.record_all(issues, pull_requests)
        logger.info(f"Reported {len(issues)} issue(s)", extra={"analyzer": analyzer.value})
        return issues
