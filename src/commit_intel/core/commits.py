"""Conventional commit parsing.

This module turns raw commit entries into :class:`CommitRecord` objects.
Only the subject line is matched against the grammar::

    type(scope)!: description

The parser is deliberately permissive and total:

- Every entry produces exactly one record, in input order.
- A subject that does not follow the grammar yields a record typed
  ``unknown`` with the whole subject as its description; the reason is
  kept on the record (see :class:`ParseFailure`).
- Types outside the configured allow-list are kept as-is. Rejecting them
  is the job of :mod:`commit_intel.core.lint`.

See https://www.conventionalcommits.org/ for the convention itself.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING

from commit_intel.vcs.links import RepositoryInfo, commit_link, issue_link, pr_link

if TYPE_CHECKING:
    from commit_intel.config.models import CommitIntelConfig
    from commit_intel.vcs.entries import RawCommitEntry

logger = logging.getLogger(__name__)


class CommitType(StrEnum):
    """Well-known commit types.

    Records store their type as a plain string so custom types survive
    parsing; these members compare equal to the matching strings.
    """

    FEAT = "feat"
    FIX = "fix"
    PERF = "perf"
    REFACTOR = "refactor"
    DOCS = "docs"
    STYLE = "style"
    TEST = "test"
    BUILD = "build"
    CI = "ci"
    CHORE = "chore"
    REVERT = "revert"
    UNKNOWN = "unknown"


UNKNOWN_TYPE = CommitType.UNKNOWN.value

# type(scope)!: description
# The scope ends at the first ")" after "(", there is no balanced scan.
HEADER_PATTERN = re.compile(
    r"^(?P<type>\w+)(?:\((?P<scope>[^)]+)\))?(?P<breaking>!)?: (?P<description>.+)$"
)

BREAKING_FOOTER_PATTERN = re.compile(r"BREAKING[ -]CHANGE:[ \t]*(?P<text>.*)")

FOOTER_PATTERN = re.compile(
    r"^(?P<token>BREAKING[ -]CHANGE|[\w-]+)(?:: (?P<value>.*)| (?P<ref>#.*))$"
)

PR_PATTERN = re.compile(r"\(#(\d+)\)")

ISSUE_REF_PATTERN = re.compile(r"(?:[\w.-]+/[\w.-]+)?#(\d+)|\b([A-Z][A-Z0-9]+-\d+)\b")

INLINE_ISSUE_PATTERN = re.compile(
    r"\b(?:close[sd]?|fix(?:e[sd])?|resolve[sd]?)\s+#(\d+)", re.IGNORECASE
)

ISSUE_FOOTER_TOKENS = frozenset(
    {"close", "closes", "closed", "fix", "fixes", "fixed", "resolve", "resolves", "resolved"}
)

NOREPLY_PATTERN = re.compile(r"^(?:\d+\+)?(?P<handle>[^@]+)@users\.noreply\.github\.com$")

SECURITY_KEYWORDS: tuple[str, ...] = (
    "security",
    "vulnerability",
    "cve",
    "xss",
    "csrf",
    "injection",
    "exploit",
)

DEPENDENCY_KEYWORDS: tuple[str, ...] = ("deps", "dependencies", "dep", "dependency", "package")


@dataclass(frozen=True)
class Author:
    """Commit author as recorded by the history source."""

    name: str
    email: str
    handle: str | None = None


@dataclass(frozen=True)
class CommitRecord:
    """A single commit, semantically classified.

    Records are immutable and hashable; analyzers only ever read them.
    ``footers`` is exposed as a read-only mapping.
    """

    hash: str
    short_hash: str
    type: str
    subject: str
    author: Author
    date: str
    raw_subject: str
    scope: str | None = None
    body: str | None = None
    breaking: bool = False
    breaking_description: str | None = None
    footers: Mapping[str, str] = field(default_factory=dict, hash=False)
    pr_number: int | None = None
    pr_link: str | None = None
    issue_refs: frozenset[str] = frozenset()
    issue_links: tuple[str, ...] = ()
    commit_link: str | None = None
    refs: tuple[str, ...] = ()
    parse_error: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "footers", MappingProxyType(dict(self.footers)))

    @property
    def is_conventional(self) -> bool:
        return self.parse_error is None

    @property
    def is_security(self) -> bool:
        """True for security-typed commits or subjects naming a security keyword."""
        if "security" in self.type.lower():
            return True
        subject = self.subject.lower()
        return any(keyword in subject for keyword in SECURITY_KEYWORDS)

    @property
    def is_dependency(self) -> bool:
        """True for dependency updates (``chore(deps): bump ...`` and friends)."""
        if self.scope and any(kw in self.scope.lower() for kw in DEPENDENCY_KEYWORDS):
            return True
        subject = self.subject.lower()
        return "bump" in subject or (
            "update" in subject and any(kw in subject for kw in DEPENDENCY_KEYWORDS)
        )

    @property
    def timestamp(self) -> datetime | None:
        """The author date as a naive UTC datetime, or None if unparseable."""
        return parse_timestamp(self.date)

    @property
    def commit_date(self) -> date | None:
        ts = self.timestamp
        return ts.date() if ts else None


@dataclass(frozen=True)
class ParseFailure:
    """A commit whose subject did not follow the grammar."""

    hash: str
    raw_subject: str
    reason: str

    @classmethod
    def from_record(cls, record: CommitRecord) -> ParseFailure:
        return cls(
            hash=record.hash,
            raw_subject=record.raw_subject,
            reason=record.parse_error or "",
        )


def parse_timestamp(value: str) -> datetime | None:
    """Leniently parse an ISO-8601 date or datetime.

    Aware values are converted to UTC and made naive so that all parsed
    timestamps are mutually comparable.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            parsed = datetime.fromisoformat(text[:10])
        except ValueError:
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return parsed


class CommitParser:
    """Converts raw commit entries into :class:`CommitRecord` objects.

    Args:
        repository: Repository location used to build links (optional)
        max_workers: Parse with a thread pool of this size when > 1
    """

    def __init__(
        self,
        repository: RepositoryInfo | None = None,
        *,
        max_workers: int | None = None,
    ) -> None:
        self.repository = repository
        self.max_workers = max_workers

    @classmethod
    def from_config(cls, config: CommitIntelConfig) -> CommitParser:
        repository = None
        if config.repository.url:
            repository = RepositoryInfo.from_url(config.repository.url, config.repository.host)
        return cls(repository, max_workers=config.parallel_workers)

    def parse(self, entries: Iterable[RawCommitEntry]) -> list[CommitRecord]:
        """Parse a batch of entries.

        Never raises for malformed messages and never drops an entry. With
        a thread pool the output still follows input order.
        """
        entries = list(entries)
        if self.max_workers and self.max_workers > 1 and len(entries) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                records = list(executor.map(self.parse_entry, entries))
        else:
            records = [self.parse_entry(entry) for entry in entries]

        failures = sum(1 for r in records if not r.is_conventional)
        if failures:
            logger.debug("%d of %d commits did not match the grammar", failures, len(records))
        return records

    def parse_entry(self, entry: RawCommitEntry) -> CommitRecord:
        """Parse a single entry into a record."""
        raw_subject = entry.subject
        header = raw_subject.strip()
        body = entry.body.strip("\n") if entry.body else ""

        commit_type = UNKNOWN_TYPE
        scope: str | None = None
        description = header
        bang = False
        parse_error: str | None = None

        match = HEADER_PATTERN.match(header)
        if not match:
            parse_error = _describe_mismatch(header)
        elif not match.group("description").strip():
            parse_error = "empty description"
        else:
            commit_type = match.group("type")
            scope = match.group("scope")
            description = match.group("description").strip()
            bang = match.group("breaking") is not None

        if parse_error:
            logger.debug("Commit %s not conventional: %s", entry.short_hash, parse_error)

        footers, footer_lines = parse_footers(body)

        breaking_text = _find_breaking_text(body)
        breaking = bang or breaking_text is not None
        breaking_description: str | None = None
        if breaking:
            breaking_description = breaking_text or description

        pr_number = _find_pr_number(header, footer_lines)
        issue_refs = _find_issue_refs(body, footer_lines)

        repo = self.repository
        return CommitRecord(
            hash=entry.hash,
            short_hash=entry.short_hash,
            type=commit_type,
            scope=scope,
            subject=description,
            body=body or None,
            author=Author(
                name=entry.author_name,
                email=entry.author_email,
                handle=_handle_from_email(entry.author_email),
            ),
            date=entry.date,
            raw_subject=raw_subject,
            breaking=breaking,
            breaking_description=breaking_description,
            footers=footers,
            pr_number=pr_number,
            pr_link=pr_link(pr_number, repo) if repo and pr_number is not None else None,
            issue_refs=frozenset(issue_refs),
            issue_links=tuple(issue_link(i, repo) for i in issue_refs) if repo else (),
            commit_link=commit_link(entry.hash, repo) if repo else None,
            refs=tuple(entry.refs),
            parse_error=parse_error,
        )


def parse_footers(body: str) -> tuple[dict[str, str], list[tuple[str, str]]]:
    """Parse the trailing footer block of a commit body.

    The footer block is the last paragraph of the body, provided its
    first line looks like ``Token: value`` or ``Token #value``. Lines that
    do not start a new footer continue the previous footer's value.

    Returns:
        A tuple of (mapping of token to first value, all (token, value)
        pairs in order)
    """
    if not body.strip():
        return {}, []

    paragraphs = re.split(r"\n\s*\n", body.strip())
    lines = paragraphs[-1].splitlines()
    if not lines or not FOOTER_PATTERN.match(lines[0]):
        return {}, []

    pairs: list[list[str]] = []
    for line in lines:
        match = FOOTER_PATTERN.match(line)
        if match:
            value = match.group("value") if match.group("value") is not None else match.group("ref")
            pairs.append([match.group("token"), value.strip()])
        else:
            pairs[-1][1] = f"{pairs[-1][1]}\n{line.strip()}".strip()

    footers: dict[str, str] = {}
    for token, value in pairs:
        # Repeated tokens keep their first value
        footers.setdefault(token, value)
    return footers, [(token, value) for token, value in pairs]


def _describe_mismatch(header: str) -> str:
    if not header:
        return "empty subject"
    if ":" not in header:
        return "missing ':' separator"
    if not re.match(r"^\w+", header):
        return "missing commit type"
    if "(" in header.split(":", 1)[0] and not HEADER_PATTERN.match(header):
        return "malformed scope"
    return "subject does not match 'type(scope): description'"


def _find_breaking_text(body: str) -> str | None:
    """Return the text of the first BREAKING CHANGE footer, '' if it is blank, None if absent."""
    if not body:
        return None
    match = BREAKING_FOOTER_PATTERN.search(body)
    if not match:
        return None
    text = match.group("text").strip()
    if text:
        return text
    # Description on the following line
    for line in body[match.end() :].splitlines():
        if line.strip():
            return line.strip()
    return ""


def _find_pr_number(header: str, footer_lines: Sequence[tuple[str, str]]) -> int | None:
    match = PR_PATTERN.search(header)
    if match:
        return int(match.group(1))
    for _, value in footer_lines:
        match = PR_PATTERN.search(value)
        if match:
            return int(match.group(1))
    return None


def _find_issue_refs(body: str, footer_lines: Sequence[tuple[str, str]]) -> list[str]:
    refs: list[str] = []
    for token, value in footer_lines:
        if token.lower() not in ISSUE_FOOTER_TOKENS:
            continue
        for number, key in ISSUE_REF_PATTERN.findall(value):
            ref = number or key
            if ref not in refs:
                refs.append(ref)
    for number in INLINE_ISSUE_PATTERN.findall(body):
        if number not in refs:
            refs.append(number)
    return refs


def _handle_from_email(email: str) -> str | None:
    match = NOREPLY_PATTERN.match(email.strip())
    return match.group("handle") if match else None


def parse_commits(
    entries: Iterable[RawCommitEntry],
    config: CommitIntelConfig | None = None,
) -> list[CommitRecord]:
    """Parse entries with a parser built from ``config``.

    Args:
        entries: Raw entries from the history source
        config: Configuration (defaults when omitted)

    Returns:
        One record per entry, in input order
    """
    if config is None:
        return CommitParser().parse(entries)
    return CommitParser.from_config(config).parse(entries)


def group_commits_by_type(records: Iterable[CommitRecord]) -> dict[str, list[CommitRecord]]:
    """Group records by type, preserving first-seen type order."""
    groups: dict[str, list[CommitRecord]] = {}
    for record in records:
        groups.setdefault(record.type, []).append(record)
    return groups


def get_breaking_changes(records: Iterable[CommitRecord]) -> list[CommitRecord]:
    return [record for record in records if record.breaking]
