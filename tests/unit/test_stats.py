"""Tests for commit statistics."""

from __future__ import annotations

from datetime import date

import pytest
from factories import make_entry

from commit_intel.analysis.stats import StatsAnalyzer, iso_week, percentage, period_key
from commit_intel.config.models import StatsConfig
from commit_intel.core.changeset import ChangeSet


class TestHelpers:
    """Tests for the percentage and period helpers."""

    def test_percentage(self):
        assert percentage(1, 3) == 33.33
        assert percentage(0, 0) == 0.0

    def test_iso_week(self):
        assert iso_week(date(2024, 1, 1)) == "2024-W01"
        assert iso_week(date(2021, 1, 3)) == "2020-W53"

    @pytest.mark.parametrize(
        ("group", "expected"),
        [("day", "2024-03-05"), ("week", "2024-W10"), ("month", "2024-03")],
    )
    def test_period_key(self, group, expected):
        assert period_key(date(2024, 3, 5), group) == expected


class TestStatsAnalyzer:
    """Tests for StatsAnalyzer.analyze()."""

    def test_by_type(self, sample_changes):
        """Types are sorted by count, then name."""
        stats = StatsAnalyzer().analyze(sample_changes)

        assert stats.total_commits == 5
        assert [(t.type, t.count, t.percentage) for t in stats.by_type] == [
            ("docs", 1, 20.0),
            ("feat", 1, 20.0),
            ("fix", 1, 20.0),
            ("refactor", 1, 20.0),
            ("unknown", 1, 20.0),
        ]
        assert stats.by_type[0].commits is None

    def test_by_type_counts(self):
        entries = [make_entry("fix: a"), make_entry("feat: b"), make_entry("fix: c")]

        stats = StatsAnalyzer().analyze(ChangeSet.from_entries(entries))

        assert [(t.type, t.count) for t in stats.by_type] == [("fix", 2), ("feat", 1)]
        assert stats.by_type[0].percentage == 66.67

    def test_by_date_day(self, sample_changes):
        stats = StatsAnalyzer().analyze(sample_changes)

        assert [d.period for d in stats.by_date] == [
            "2024-02-28",
            "2024-03-01",
            "2024-03-03",
            "2024-03-04",
            "2024-03-05",
        ]

    def test_by_date_week(self, sample_changes):
        stats = StatsAnalyzer(StatsConfig(date_group="week")).analyze(sample_changes)

        assert [(d.period, d.count) for d in stats.by_date] == [("2024-W09", 3), ("2024-W10", 2)]

    def test_by_date_month_with_commits(self, sample_changes):
        config = StatsConfig(date_group="month", include_commits=True)

        stats = StatsAnalyzer(config).analyze(sample_changes)

        assert [(d.period, d.count) for d in stats.by_date] == [("2024-02", 1), ("2024-03", 4)]
        assert stats.by_date[0].commits == ["e" * 40]

    def test_undated_commits_are_skipped(self):
        changes = ChangeSet.from_entries([make_entry("fix: a", date="unknown")])

        stats = StatsAnalyzer().analyze(changes)

        assert stats.by_date == []
        assert stats.total_commits == 1
        assert stats.frequency.duration_days == 0

    def test_contributors(self, sample_changes):
        """Contributors are keyed by email and sorted by activity."""
        stats = StatsAnalyzer().analyze(sample_changes)

        assert [(c.name, c.commit_count) for c in stats.contributors] == [
            ("Alice", 2),
            ("Bob", 2),
            ("Carol", 1),
        ]
        alice = stats.contributors[0]
        assert alice.commits_by_type == {"feat": 1, "docs": 1}
        assert alice.first_commit_date == date(2024, 3, 3)
        assert alice.last_commit_date == date(2024, 3, 5)
        assert alice.percentage == 40.0
        assert stats.contributors[2].handle == "carol"

    def test_frequency(self, sample_changes):
        frequency = StatsAnalyzer().analyze(sample_changes).frequency

        # 2024-02-28 through 2024-03-05 spans a leap day
        assert frequency.duration_days == 7
        assert frequency.commits_per_day == 0.71
        assert frequency.commits_per_week == 5.0
        assert frequency.commits_per_month == 21.43
        assert frequency.most_active_day.period == "2024-02-28"
        assert frequency.most_active_day.count == 1
        assert frequency.most_active_week.period == "2024-W09"
        assert frequency.most_active_week.count == 3

    def test_references(self, sample_changes):
        references = StatsAnalyzer().analyze(sample_changes).references

        assert references.pr_count == 1
        assert references.prs == [42]
        assert references.issue_count == 1
        assert references.issues == ["10"]

    def test_empty(self):
        stats = StatsAnalyzer().analyze(ChangeSet())

        assert stats.total_commits == 0
        assert stats.by_type == []
        assert stats.contributors == []
        assert stats.frequency.most_active_day is None
