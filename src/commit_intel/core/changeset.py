"""Ordered, de-duplicated collections of parsed commits."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from typing import TYPE_CHECKING, overload

from commit_intel.core.commits import (
    CommitParser,
    CommitRecord,
    ParseFailure,
    get_breaking_changes,
    group_commits_by_type,
)

if TYPE_CHECKING:
    from commit_intel.vcs.entries import RawCommitEntry

logger = logging.getLogger(__name__)


class ChangeSet(Sequence[CommitRecord]):
    """Commits for a ``from_ref`` -> ``to_ref`` range.

    Order is the order of the history traversal that produced the
    records. Hashes are unique: when the same hash appears more than
    once, the first occurrence is kept. A change set is never modified
    after construction, so analyzers may share it freely across threads.
    """

    __slots__ = ("_by_hash", "_records", "from_ref", "to_ref")

    def __init__(
        self,
        records: Iterable[CommitRecord] = (),
        *,
        from_ref: str | None = None,
        to_ref: str | None = None,
    ) -> None:
        unique: list[CommitRecord] = []
        by_hash: dict[str, CommitRecord] = {}
        for record in records:
            if record.hash in by_hash:
                logger.debug("Dropping duplicate commit %s", record.short_hash)
                continue
            by_hash[record.hash] = record
            unique.append(record)

        self._records: tuple[CommitRecord, ...] = tuple(unique)
        self._by_hash = by_hash
        self.from_ref = from_ref
        self.to_ref = to_ref

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[RawCommitEntry],
        parser: CommitParser | None = None,
        *,
        from_ref: str | None = None,
        to_ref: str | None = None,
    ) -> ChangeSet:
        """Parse raw entries and collect them into a change set."""
        parser = parser or CommitParser()
        return cls(parser.parse(entries), from_ref=from_ref, to_ref=to_ref)

    @overload
    def __getitem__(self, index: int) -> CommitRecord: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[CommitRecord]: ...

    def __getitem__(self, index: int | slice) -> CommitRecord | Sequence[CommitRecord]:
        return self._records[index]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[CommitRecord]:
        return iter(self._records)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, str):
            return item in self._by_hash
        if isinstance(item, CommitRecord):
            return self._by_hash.get(item.hash) is item
        return False

    def __repr__(self) -> str:
        return f"ChangeSet({self.from_ref!r}..{self.to_ref!r}, {len(self)} commits)"

    @property
    def records(self) -> tuple[CommitRecord, ...]:
        return self._records

    @property
    def hashes(self) -> list[str]:
        return [record.hash for record in self._records]

    def get(self, commit_hash: str) -> CommitRecord | None:
        return self._by_hash.get(commit_hash)

    def group_by_type(self) -> dict[str, list[CommitRecord]]:
        return group_commits_by_type(self._records)

    def breaking_changes(self) -> list[CommitRecord]:
        return get_breaking_changes(self._records)

    def parse_failures(self) -> list[ParseFailure]:
        """Records whose subject did not follow the commit grammar."""
        return [ParseFailure.from_record(r) for r in self._records if not r.is_conventional]

    def filter(
        self,
        *,
        hidden_types: Iterable[str] = (),
        scopes: Iterable[str] = (),
    ) -> ChangeSet:
        """Return a new change set without hidden types and outside ``scopes``.

        An empty ``scopes`` keeps every scope (including unscoped commits).
        """
        hidden = set(hidden_types)
        wanted = set(scopes)
        kept = [
            record
            for record in self._records
            if record.type not in hidden and (not wanted or record.scope in wanted)
        ]
        return ChangeSet(kept, from_ref=self.from_ref, to_ref=self.to_ref)
