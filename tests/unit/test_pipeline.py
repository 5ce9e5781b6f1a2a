"""Tests for the end-to-end release analysis."""

from __future__ import annotations

import pytest
from factories import make_entry

from commit_intel import analyze_release
from commit_intel.analysis.search import SearchQuery
from commit_intel.config.models import CommitIntelConfig, CommitsConfig, RepositoryConfig
from commit_intel.core.version import BumpType
from commit_intel.exceptions import InvalidBaselineError
from commit_intel.vcs.entries import DiffStats


class TestAnalyzeRelease:
    """Tests for analyze_release()."""

    def test_full_run(self, sample_entries):
        stats = DiffStats.from_numstat(
            [("src/core/config.py", "120", "80"), ("README.md", "4", "1")]
        )

        intel = analyze_release(sample_entries, "1.2.3", stats, from_ref="v1.2.3", to_ref="HEAD")

        assert len(intel.changes) == 5
        assert intel.changes.from_ref == "v1.2.3"
        assert intel.version.recommended.bump_type is BumpType.MAJOR
        assert intel.version.recommended.version == "2.0.0"
        assert intel.risk.score == 57
        assert intel.risk.level == "medium"
        assert intel.risk.affected_modules == ["src/core/config.py"]
        assert intel.stats.total_commits == 5
        assert intel.search.search(SearchQuery(keyword="auth")).total == 2

    def test_uses_config(self, sample_entries):
        config = CommitIntelConfig(
            repository=RepositoryConfig(url="https://github.com/acme/widgets"),
            parallel_workers=2,
        )

        intel = analyze_release(sample_entries, "1.2.3", DiffStats(), config)

        assert intel.changes[0].pr_link == "https://github.com/acme/widgets/pull/42"

    def test_scope_filter(self, sample_entries):
        """Only commits in the listed scopes are analyzed."""
        config = CommitIntelConfig(commits=CommitsConfig(scope_filter=["auth"]))

        intel = analyze_release(sample_entries, "1.2.3", DiffStats(), config)

        assert intel.changes.hashes == ["a" * 40, "b" * 40]
        assert intel.version.recommended.version == "1.3.0"
        assert intel.stats.total_commits == 2

    def test_hidden_types(self, sample_entries):
        """Hidden types are left out of stats and search but still drive the version."""
        config = CommitIntelConfig(commits=CommitsConfig(hidden_types=["refactor", "docs"]))

        intel = analyze_release(sample_entries, "1.2.3", DiffStats(), config)

        assert intel.version.recommended.bump_type is BumpType.MAJOR
        assert intel.risk.factors == ["Breaking changes: 1 commit(s)"]
        assert intel.stats.total_commits == 3
        assert intel.search.search(SearchQuery(types=["refactor"])).total == 0

    def test_empty_range(self):
        intel = analyze_release([], "0.1.0", DiffStats())

        assert intel.version.recommended.version == "0.1.1"
        assert intel.risk.score == 0
        assert intel.stats.total_commits == 0
        assert intel.search.search(SearchQuery()).total == 0

    def test_invalid_baseline_propagates(self):
        with pytest.raises(InvalidBaselineError):
            analyze_release([make_entry("fix: a")], "next", DiffStats())
