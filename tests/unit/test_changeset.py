"""Tests for ChangeSet."""

from __future__ import annotations

from factories import make_entry, make_records

from commit_intel.core.changeset import ChangeSet
from commit_intel.core.commits import CommitParser


class TestChangeSet:
    """Tests for ChangeSet construction and lookup."""

    def test_from_entries(self, sample_entries):
        """Entries are parsed in order and refs are kept."""
        changes = ChangeSet.from_entries(sample_entries, from_ref="v1.0.0", to_ref="HEAD")

        assert len(changes) == 5
        assert changes.hashes == [e.hash for e in sample_entries]
        assert changes.from_ref == "v1.0.0"
        assert changes.to_ref == "HEAD"

    def test_duplicate_hashes_keep_first(self):
        """The first record for a hash wins."""
        first = make_entry("feat: first", hash="abc")
        second = make_entry("fix: second", hash="abc")
        parser = CommitParser()

        changes = ChangeSet(parser.parse([first, second]))

        assert len(changes) == 1
        assert changes[0].subject == "first"

    def test_sequence_protocol(self, sample_changes):
        """ChangeSet behaves like a read-only sequence."""
        assert sample_changes[0].hash == "a" * 40
        assert [r.hash for r in sample_changes[1:3]] == ["b" * 40, "c" * 40]
        assert len(list(iter(sample_changes))) == 5
        assert isinstance(sample_changes.records, tuple)

    def test_contains_by_hash_or_record(self, sample_changes):
        record = sample_changes[0]

        assert "a" * 40 in sample_changes
        assert record in sample_changes
        assert "0" * 40 not in sample_changes
        assert 42 not in sample_changes

    def test_get(self, sample_changes):
        assert sample_changes.get("b" * 40).type == "fix"
        assert sample_changes.get("missing") is None

    def test_empty(self):
        changes = ChangeSet()

        assert len(changes) == 0
        assert changes.breaking_changes() == []
        assert changes.parse_failures() == []

    def test_repr(self, sample_changes):
        assert repr(sample_changes) == "ChangeSet('v1.2.3'..'HEAD', 5 commits)"


class TestChangeSetQueries:
    """Tests for ChangeSet grouping and filtering."""

    def test_group_by_type(self, sample_changes):
        groups = sample_changes.group_by_type()

        assert set(groups) == {"feat", "fix", "docs", "refactor", "unknown"}

    def test_breaking_changes(self, sample_changes):
        assert [r.hash for r in sample_changes.breaking_changes()] == ["d" * 40]

    def test_parse_failures(self, sample_changes):
        """Non-conventional subjects are reported, not dropped."""
        failures = sample_changes.parse_failures()

        assert len(failures) == 1
        assert failures[0].hash == "e" * 40
        assert failures[0].raw_subject == "Merge branch 'main' into feature"

    def test_filter_hidden_types(self, sample_changes):
        filtered = sample_changes.filter(hidden_types=["docs", "unknown"])

        assert [r.type for r in filtered] == ["feat", "fix", "refactor"]
        assert filtered.from_ref == "v1.2.3"

    def test_filter_scopes(self, sample_changes):
        """Only commits with a listed scope survive a scope filter."""
        filtered = sample_changes.filter(scopes=["auth"])

        assert [r.hash for r in filtered] == ["a" * 40, "b" * 40]

    def test_filter_without_arguments_keeps_everything(self):
        changes = ChangeSet(make_records("feat: a", "chore: b"))

        assert len(changes.filter()) == 2
