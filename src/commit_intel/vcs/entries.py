"""Boundary types supplied by the version-control collaborator.

commit-intel never talks to git itself. Whoever drives it hands over
already-delimited commit entries and aggregated diff statistics using
the plain data types in this module.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass(frozen=True)
class RawCommitEntry:
    """One commit as delivered by the history source.

    Attributes:
        hash: Full commit identifier
        short_hash: Abbreviated identifier for display
        subject: First line of the commit message
        body: Remaining message lines (may be empty)
        author_name: Author name, verbatim
        author_email: Author email, verbatim
        date: Author date as an ISO-8601 string, verbatim
        refs: Tags or branch names pointing at the commit
    """

    hash: str
    short_hash: str
    subject: str
    body: str = ""
    author_name: str = ""
    author_email: str = ""
    date: str = ""
    refs: tuple[str, ...] = ()


@dataclass(frozen=True)
class DiffStats:
    """Aggregated line/file statistics for a commit range."""

    files_changed: int = 0
    lines_added: int = 0
    lines_removed: int = 0
    touched_paths: tuple[str, ...] = field(default_factory=tuple)

    @property
    def total_lines(self) -> int:
        return self.lines_added + self.lines_removed

    @classmethod
    def from_numstat(cls, rows: Iterable[tuple[str, str | int, str | int]]) -> DiffStats:
        """Aggregate per-file ``(path, added, removed)`` rows.

        The counts may be given as strings as printed by ``git diff
        --numstat``; binary files report ``-`` and count as zero lines.

        Args:
            rows: Iterable of (path, added, removed) tuples

        Returns:
            Aggregated diff statistics
        """
        paths: list[str] = []
        added_total = 0
        removed_total = 0

        for path, added, removed in rows:
            paths.append(path)
            added_total += _numstat_count(added)
            removed_total += _numstat_count(removed)

        return cls(
            files_changed=len(paths),
            lines_added=added_total,
            lines_removed=removed_total,
            touched_paths=tuple(paths),
        )


def _numstat_count(value: str | int) -> int:
    if isinstance(value, int):
        return value
    value = value.strip()
    if not value or value == "-":
        return 0
    try:
        return int(value)
    except ValueError:
        return 0
