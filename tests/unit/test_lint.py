"""Tests for commit message validation."""

from __future__ import annotations

from factories import make_records

from commit_intel.config.models import CommitsConfig
from commit_intel.core.lint import (
    CommitLinter,
    IssueKind,
    Severity,
    validate_subject,
    validate_subjects_batch,
)


class TestValidateSubject:
    """Tests for validate_subject()."""

    def test_valid_simple(self):
        """Valid simple subject."""
        result = validate_subject("feat: add new feature")

        assert result.is_valid
        assert result.commit_type == "feat"
        assert result.scope is None
        assert result.description == "add new feature"
        assert result.error is None

    def test_valid_with_scope_and_breaking(self):
        result = validate_subject("fix(api)!: drop v1 routes")

        assert result.is_valid
        assert result.scope == "api"
        assert result.is_breaking

    def test_empty(self):
        result = validate_subject("   ")

        assert not result.is_valid
        assert result.error == "Subject cannot be empty"
        assert result.kind is IssueKind.INVALID_FORMAT

    def test_invalid_format(self):
        """Subjects without a type are rejected."""
        result = validate_subject("Add new feature")

        assert not result.is_valid
        assert "conventional commit format" in result.error
        assert result.kind is IssueKind.INVALID_FORMAT

    def test_invalid_type(self):
        """Unknown types are rejected."""
        result = validate_subject("feature: add thing")

        assert not result.is_valid
        assert result.kind is IssueKind.INVALID_TYPE
        assert "Invalid commit type 'feature'" in result.error
        assert result.commit_type == "feature"

    def test_type_is_case_sensitive(self):
        result = validate_subject("Feat: add thing")

        assert result.kind is IssueKind.INVALID_TYPE

    def test_custom_allowed_types(self):
        allowed = frozenset({"feat", "fix", "custom"})

        assert validate_subject("custom: do thing", allowed_types=allowed).is_valid
        assert not validate_subject("docs: write", allowed_types=allowed).is_valid

    def test_too_long(self):
        """Length is checked before the format."""
        result = validate_subject("x" * 80, max_length=72)

        assert result.kind is IssueKind.SUBJECT_TOO_LONG
        assert result.error == "Subject exceeds 72 characters (80 characters)"

    def test_require_scope(self):
        result = validate_subject("feat: add thing", require_scope=True)

        assert not result.is_valid
        assert result.kind is IssueKind.MISSING_SCOPE

        assert validate_subject("feat(ui): add thing", require_scope=True).is_valid

    def test_uppercase_description(self):
        """A capitalised description is rejected unless explicitly allowed."""
        result = validate_subject("feat: Add thing")

        assert result.kind is IssueKind.UPPERCASE_SUBJECT
        assert validate_subject("feat: Add thing", allow_uppercase=True).is_valid

    def test_defaults_match_linter(self):
        """Direct validation and the default linter agree on the same subject."""
        direct = validate_subject("feat: Add thing")
        linted = CommitLinter().lint(make_records("feat: Add thing"))

        assert not direct.is_valid
        assert not linted.passed
        assert [issue.kind for issue in linted.issues] == [direct.kind]

    def test_batch(self):
        results = validate_subjects_batch(["feat: a", "nope", "fix(x): b"])

        assert [r.is_valid for r in results] == [True, False, True]

    def test_batch_uppercase(self):
        subjects = ["feat: Add thing", "fix: b"]

        assert [r.is_valid for r in validate_subjects_batch(subjects)] == [False, True]
        assert all(r.is_valid for r in validate_subjects_batch(subjects, allow_uppercase=True))


class TestCommitLinter:
    """Tests for CommitLinter."""

    def test_all_valid(self):
        result = CommitLinter().lint(make_records("feat: add a", "fix(core): repair b"))

        assert result.passed
        assert result.total == 2
        assert result.valid == 2
        assert result.invalid == 0
        assert result.stats.by_type == {"feat": 1, "fix": 1}
        assert result.stats.with_scope == 1

    def test_reports_issues(self):
        """One issue per failing commit, with severity and suggestion."""
        records = make_records("feat: ok", "Update stuff", "feature: add", "fix: Capital")

        result = CommitLinter().lint(records)

        assert result.total == 4
        assert result.valid == 1
        kinds = [issue.kind for issue in result.issues]
        assert kinds == [
            IssueKind.INVALID_FORMAT,
            IssueKind.INVALID_TYPE,
            IssueKind.UPPERCASE_SUBJECT,
        ]
        assert len(result.errors) == 2
        assert result.issues[2].severity is Severity.WARNING
        assert result.issues[2].suggestion == "capital"
        assert result.issues[0].suggestion == "type(scope): description"

    def test_uses_config(self):
        config = CommitsConfig(
            types=["feat"],
            require_scope=True,
            allow_uppercase_subject=True,
            max_subject_length=20,
        )
        records = make_records(
            "feat(ui): Fine",
            "feat: no scope",
            "feat(ui): far too long a subject",
        )

        result = CommitLinter(config).lint(records)

        assert [issue.kind for issue in result.issues] == [
            IssueKind.MISSING_SCOPE,
            IssueKind.SUBJECT_TOO_LONG,
        ]

    def test_linting_does_not_change_records(self):
        records = make_records("feature: add")

        CommitLinter().lint(records)

        assert records[0].type == "feature"
        assert records[0].is_conventional
