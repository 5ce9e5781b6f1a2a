"""End-to-end commit intelligence for one release range.

Parses the raw entries once, then fans the resulting change set out to
the analyzers on a thread pool. The analyzers only read the change set,
so no coordination between them is needed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from commit_intel.analysis.risk import DiffAnalyzer, RiskAssessment
from commit_intel.analysis.search import SearchEngine
from commit_intel.analysis.stats import StatsAnalysis, StatsAnalyzer
from commit_intel.analysis.versioning import VersionAnalysis, VersionAnalyzer
from commit_intel.config.models import CommitIntelConfig
from commit_intel.core.changeset import ChangeSet
from commit_intel.core.commits import CommitParser
from commit_intel.core.version import Version
from commit_intel.vcs.entries import DiffStats, RawCommitEntry

logger = logging.getLogger(__name__)

ANALYZER_COUNT = 4


@dataclass(frozen=True)
class ReleaseIntelligence:
    """Everything the analyzers derived from one range."""

    changes: ChangeSet
    version: VersionAnalysis
    risk: RiskAssessment
    stats: StatsAnalysis
    search: SearchEngine


def analyze_release(
    entries: Iterable[RawCommitEntry],
    baseline: str | Version,
    diff_stats: DiffStats,
    config: CommitIntelConfig | None = None,
    *,
    from_ref: str | None = None,
    to_ref: str | None = None,
) -> ReleaseIntelligence:
    """Run the full pipeline for a range.

    Commits outside ``commits.scope_filter`` are dropped before any
    analysis. Commits of a ``commits.hidden_types`` type are left out of
    the statistics and the search index only.

    Args:
        entries: Raw commits for the range
        baseline: Version the range starts from
        diff_stats: Diff statistics for the same range
        config: Configuration (defaults when omitted)
        from_ref: Range start, for reference only
        to_ref: Range end, for reference only

    Returns:
        The change set and every analysis result, plus a search engine
        whose index is built over the visible commits

    Raises:
        InvalidBaselineError: If ``baseline`` is not a semantic version
    """
    config = config or CommitIntelConfig()
    changes = ChangeSet.from_entries(
        entries, CommitParser.from_config(config), from_ref=from_ref, to_ref=to_ref
    )
    if config.commits.scope_filter:
        changes = changes.filter(scopes=config.commits.scope_filter)
    # Hidden types still count toward the version and the risk score
    visible = changes.filter(hidden_types=config.commits.hidden_types)
    logger.debug("Analyzing %r (%d visible)", changes, len(visible))

    search = SearchEngine(config.search)
    workers = config.parallel_workers or ANALYZER_COUNT

    with ThreadPoolExecutor(max_workers=workers) as executor:
        version_future = executor.submit(VersionAnalyzer().suggest, baseline, changes)
        risk_future = executor.submit(DiffAnalyzer(config.risk).analyze, diff_stats, changes)
        stats_future = executor.submit(StatsAnalyzer(config.stats).analyze, visible)
        index_future = executor.submit(search.build_index, visible)

        # result() re-raises whatever the analyzer raised
        version = version_future.result()
        risk = risk_future.result()
        stats = stats_future.result()
        index_future.result()

    return ReleaseIntelligence(
        changes=changes,
        version=version,
        risk=risk,
        stats=stats,
        search=search,
    )
