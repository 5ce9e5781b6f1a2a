"""Builders for raw commit entries and parsed records used across tests."""

from __future__ import annotations

from itertools import count

from commit_intel.core.commits import CommitParser, CommitRecord
from commit_intel.vcs.entries import RawCommitEntry

_hash_counter = count(1)


def make_entry(
    subject: str,
    body: str = "",
    *,
    hash: str | None = None,
    author_name: str = "Test",
    author_email: str = "test@example.com",
    date: str = "2024-01-15T10:00:00+00:00",
    refs: tuple[str, ...] = (),
) -> RawCommitEntry:
    """Build a raw entry with a unique hash unless one is given."""
    commit_hash = hash or f"{next(_hash_counter):040x}"
    return RawCommitEntry(
        hash=commit_hash,
        short_hash=commit_hash[:7],
        subject=subject,
        body=body,
        author_name=author_name,
        author_email=author_email,
        date=date,
        refs=refs,
    )


def parse_one(subject: str, body: str = "", **kwargs) -> CommitRecord:
    return CommitParser().parse_entry(make_entry(subject, body, **kwargs))


def make_records(*subjects: str) -> list[CommitRecord]:
    return CommitParser().parse([make_entry(subject) for subject in subjects])
