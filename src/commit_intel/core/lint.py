"""Commit message validation.

This is the strict counterpart to :class:`~commit_intel.core.commits.CommitParser`.
The parser accepts anything and classifies what it can; the linter
reports subjects that break the project's rules (unknown types, missing
scope, over-long headers, ...). Linting is optional and never changes
the parsed records.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from commit_intel.config.models import DEFAULT_COMMIT_TYPES, CommitsConfig
from commit_intel.core.commits import HEADER_PATTERN

if TYPE_CHECKING:
    from commit_intel.core.commits import CommitRecord

DEFAULT_ALLOWED_TYPES: frozenset[str] = frozenset(DEFAULT_COMMIT_TYPES)


class IssueKind(StrEnum):
    INVALID_FORMAT = "invalid_format"
    INVALID_TYPE = "invalid_type"
    MISSING_SCOPE = "missing_scope"
    EMPTY_DESCRIPTION = "empty_description"
    SUBJECT_TOO_LONG = "subject_too_long"
    UPPERCASE_SUBJECT = "uppercase_subject"


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class SubjectValidation:
    """Result of validating a single commit subject (or PR title)."""

    is_valid: bool
    error: str | None = None
    kind: IssueKind | None = None
    commit_type: str | None = None
    scope: str | None = None
    description: str | None = None
    is_breaking: bool = False


def validate_subject(
    subject: str,
    allowed_types: frozenset[str] | None = None,
    max_length: int | None = None,
    require_scope: bool = False,
    allow_uppercase: bool = False,
) -> SubjectValidation:
    """Validate a subject line against the conventional commit rules.

    Types are compared case-sensitively against ``allowed_types``.

    Args:
        subject: Subject line to validate
        allowed_types: Permitted commit types (defaults to DEFAULT_ALLOWED_TYPES)
        max_length: Maximum subject length (None for no limit)
        require_scope: Whether a scope is mandatory
        allow_uppercase: Whether the description may start with a capital letter

    Returns:
        SubjectValidation describing the first problem found, if any
    """
    if allowed_types is None:
        allowed_types = DEFAULT_ALLOWED_TYPES

    subject = subject.strip()
    if not subject:
        return SubjectValidation(
            is_valid=False, error="Subject cannot be empty", kind=IssueKind.INVALID_FORMAT
        )

    if max_length is not None and len(subject) > max_length:
        return SubjectValidation(
            is_valid=False,
            error=f"Subject exceeds {max_length} characters ({len(subject)} characters)",
            kind=IssueKind.SUBJECT_TOO_LONG,
        )

    match = HEADER_PATTERN.match(subject)
    if not match:
        return SubjectValidation(
            is_valid=False,
            error=(
                "Subject must follow conventional commit format: "
                "type(scope): description or type: description"
            ),
            kind=IssueKind.INVALID_FORMAT,
        )

    commit_type = match.group("type")
    scope = match.group("scope")
    description = match.group("description").strip()
    is_breaking = match.group("breaking") is not None
    parsed = {
        "commit_type": commit_type,
        "scope": scope,
        "description": description,
        "is_breaking": is_breaking,
    }

    if commit_type not in allowed_types:
        return SubjectValidation(
            is_valid=False,
            error=(
                f"Invalid commit type '{commit_type}'. "
                f"Allowed types: {', '.join(sorted(allowed_types))}"
            ),
            kind=IssueKind.INVALID_TYPE,
            **parsed,
        )

    if require_scope and not scope:
        return SubjectValidation(
            is_valid=False,
            error="Subject must include a scope: type(scope): description",
            kind=IssueKind.MISSING_SCOPE,
            **parsed,
        )

    if not description:
        return SubjectValidation(
            is_valid=False,
            error="Description cannot be empty",
            kind=IssueKind.EMPTY_DESCRIPTION,
            **parsed,
        )

    if not allow_uppercase and description[0].isupper():
        return SubjectValidation(
            is_valid=False,
            error="Description should not start with an uppercase letter",
            kind=IssueKind.UPPERCASE_SUBJECT,
            **parsed,
        )

    return SubjectValidation(is_valid=True, **parsed)


_SEVERITIES = {
    IssueKind.INVALID_FORMAT: Severity.ERROR,
    IssueKind.INVALID_TYPE: Severity.ERROR,
    IssueKind.EMPTY_DESCRIPTION: Severity.ERROR,
    IssueKind.MISSING_SCOPE: Severity.WARNING,
    IssueKind.SUBJECT_TOO_LONG: Severity.WARNING,
    IssueKind.UPPERCASE_SUBJECT: Severity.WARNING,
}


@dataclass(frozen=True)
class LintIssue:
    """A rule violation found in one commit."""

    hash: str
    subject: str
    kind: IssueKind
    message: str
    severity: Severity
    suggestion: str | None = None


@dataclass
class LintStats:
    by_type: dict[str, int] = field(default_factory=dict)
    with_scope: int = 0
    with_body: int = 0
    with_breaking_change: int = 0


@dataclass
class LintResult:
    """Outcome of linting a batch of commits."""

    total: int
    valid: int
    issues: list[LintIssue]
    stats: LintStats

    @property
    def invalid(self) -> int:
        return self.total - self.valid

    @property
    def passed(self) -> bool:
        return not self.issues

    @property
    def errors(self) -> list[LintIssue]:
        return [issue for issue in self.issues if issue.severity is Severity.ERROR]


class CommitLinter:
    """Validates parsed commits against a :class:`CommitsConfig`."""

    def __init__(self, config: CommitsConfig | None = None) -> None:
        self.config = config or CommitsConfig()

    def lint(self, records: Iterable[CommitRecord]) -> LintResult:
        """Lint every record, collecting at most one issue per commit."""
        issues: list[LintIssue] = []
        stats = LintStats()
        total = 0
        valid = 0

        for record in records:
            total += 1
            result = validate_subject(
                record.raw_subject,
                allowed_types=self.config.allowed_types,
                max_length=self.config.max_subject_length,
                require_scope=self.config.require_scope,
                allow_uppercase=self.config.allow_uppercase_subject,
            )

            if result.commit_type and result.kind is not IssueKind.INVALID_TYPE:
                stats.by_type[result.commit_type] = stats.by_type.get(result.commit_type, 0) + 1
            if record.scope:
                stats.with_scope += 1
            if record.body:
                stats.with_body += 1
            if record.breaking:
                stats.with_breaking_change += 1

            if result.is_valid:
                valid += 1
                continue

            kind = result.kind or IssueKind.INVALID_FORMAT
            issues.append(
                LintIssue(
                    hash=record.short_hash,
                    subject=record.raw_subject,
                    kind=kind,
                    message=result.error or "",
                    severity=_SEVERITIES[kind],
                    suggestion=self._suggest(result),
                )
            )

        return LintResult(total=total, valid=valid, issues=issues, stats=stats)

    def _suggest(self, result: SubjectValidation) -> str | None:
        match result.kind:
            case IssueKind.INVALID_FORMAT:
                return "type(scope): description"
            case IssueKind.INVALID_TYPE:
                return f"Use one of: {', '.join(self.config.types)}"
            case IssueKind.SUBJECT_TOO_LONG:
                return "Move details into the commit body"
            case IssueKind.UPPERCASE_SUBJECT if result.description:
                return result.description[0].lower() + result.description[1:]
            case _:
                return None


def validate_subjects_batch(
    subjects: list[str],
    allowed_types: frozenset[str] | None = None,
    max_length: int | None = None,
    require_scope: bool = False,
    allow_uppercase: bool = False,
) -> list[SubjectValidation]:
    """Validate several subjects (e.g. all PR titles in a merge queue)."""
    return [
        validate_subject(
            subject,
            allowed_types=allowed_types,
            max_length=max_length,
            require_scope=require_scope,
            allow_uppercase=allow_uppercase,
        )
        for subject in subjects
    ]
