"""In-memory search over a change set.

:class:`SearchEngine` builds a :class:`SearchIndex` from a change set
and answers filter/sort/paginate queries against it.

Keyword matching is a substring test over each commit's subject, body
and scope. The token postings are only used to narrow the candidates
before that test, so a keyword such as ``auth`` still matches ``oauth``.

Index rebuilds never expose a half-built index: a new index is built
completely and then published with a single reference assignment.
Searches read that reference once, so a query runs against exactly one
snapshot.
"""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum

from commit_intel.config.models import SearchConfig
from commit_intel.core.commits import CommitRecord
from commit_intel.core.version import Version
from commit_intel.exceptions import InvalidQueryError, InvalidVersionError

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r"\w+")


class SortBy(StrEnum):
    DATE = "date"
    TYPE = "type"
    RELEVANCE = "relevance"


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-date bounds; either side may be open.

    ``datetime`` bounds and values are reduced to their calendar date.
    """

    start: date | None = None
    end: date | None = None

    def __post_init__(self) -> None:
        for name in ("start", "end"):
            bound = getattr(self, name)
            if isinstance(bound, datetime):
                object.__setattr__(self, name, bound.date())

    def __contains__(self, day: object) -> bool:
        if not isinstance(day, date):
            return False
        if isinstance(day, datetime):
            day = day.date()
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True


@dataclass(frozen=True)
class VersionRange:
    """Inclusive release version bounds, compared by semver precedence.

    Bounds may be version strings or :class:`Version` objects; strings are
    parsed when the query runs. Commits without a version label are not
    excluded by a version range.
    """

    start: str | Version | None = None
    end: str | Version | None = None


@dataclass(frozen=True)
class Pagination:
    page: int = 1
    page_size: int = 20


@dataclass(frozen=True)
class SearchQuery:
    """Search parameters.

    Filters combine with AND across fields and OR within a field. An
    empty or missing filter matches everything.
    """

    keyword: str | None = None
    types: Sequence[str] = ()
    scopes: Sequence[str] = ()
    authors: Sequence[str] = ()
    date_range: DateRange | None = None
    version_range: VersionRange | None = None
    sections: Sequence[str] = ()
    sort_by: SortBy | str = SortBy.DATE
    sort_order: SortOrder | str = SortOrder.DESC
    pagination: Pagination | None = None


@dataclass(frozen=True)
class SearchResult:
    entries: list[CommitRecord]
    total: int
    page: int
    page_size: int

    @property
    def has_more(self) -> bool:
        return self.page * self.page_size < self.total


@dataclass(frozen=True)
class IndexStats:
    total_entries: int
    types: dict[str, int]
    scopes: dict[str, int]
    authors: dict[str, int]
    sections: dict[str, int]


def tokenize(text: str) -> list[str]:
    return TOKEN_PATTERN.findall(text.lower())


class SearchIndex:
    """Immutable lookup structures for one change set snapshot.

    Attributes:
        records: Commits in change set order
        postings: Lower-cased token -> hashes whose subject, body, scope or
            author name contain it
        by_type: Commit type -> hashes
        by_scope: Scope -> hashes
        by_author: Author name and email -> hashes
        by_section: Section label -> hashes
        versions: Hash -> release version label, for labelled commits only
        date_rank: Hash -> dense rank of the commit timestamp (-1 if undated)
    """

    def __init__(
        self,
        records: Iterable[CommitRecord],
        *,
        case_sensitive: bool = False,
        versions: Mapping[str, Version] | None = None,
        sections: Mapping[str, str] | None = None,
    ) -> None:
        self.case_sensitive = case_sensitive
        self.records: tuple[CommitRecord, ...] = tuple(records)
        known = {record.hash for record in self.records}
        # Labels for commits outside the change set are ignored
        self.versions: dict[str, Version] = {
            h: version for h, version in (versions or {}).items() if h in known
        }
        by_section: dict[str, set[str]] = {}
        for commit_hash, section in (sections or {}).items():
            if commit_hash in known:
                by_section.setdefault(section, set()).add(commit_hash)
        self.by_section = {key: frozenset(hashes) for key, hashes in by_section.items()}
        self.by_hash: dict[str, CommitRecord] = {}
        self.position: dict[str, int] = {}
        self.search_text: dict[str, str] = {}
        postings: dict[str, set[str]] = {}
        by_type: dict[str, set[str]] = {}
        by_scope: dict[str, set[str]] = {}
        by_author: dict[str, set[str]] = {}

        for position, record in enumerate(self.records):
            commit_hash = record.hash
            self.by_hash[commit_hash] = record
            self.position[commit_hash] = position

            text = "\n".join((record.subject, record.body or "", record.scope or ""))
            self.search_text[commit_hash] = text if case_sensitive else text.lower()

            for token in tokenize(f"{text}\n{record.author.name}"):
                postings.setdefault(token, set()).add(commit_hash)

            by_type.setdefault(record.type, set()).add(commit_hash)
            if record.scope:
                by_scope.setdefault(record.scope, set()).add(commit_hash)
            for key in (record.author.name, record.author.email, record.author.handle):
                if key:
                    by_author.setdefault(key, set()).add(commit_hash)

        self.postings = {token: frozenset(hashes) for token, hashes in postings.items()}
        self.by_type = {key: frozenset(hashes) for key, hashes in by_type.items()}
        self.by_scope = {key: frozenset(hashes) for key, hashes in by_scope.items()}
        self.by_author = {key: frozenset(hashes) for key, hashes in by_author.items()}

        timestamps = sorted({ts for r in self.records if (ts := r.timestamp) is not None})
        rank = {ts: i for i, ts in enumerate(timestamps)}
        self.date_rank: dict[str, int] = {
            r.hash: rank[ts] if (ts := r.timestamp) is not None else -1 for r in self.records
        }

    def __len__(self) -> int:
        return len(self.records)

    def keyword_candidates(self, keyword: str) -> set[str]:
        """Hashes that may contain ``keyword``; a superset of the real matches."""
        tokens = tokenize(keyword)
        if not tokens:
            return set(self.by_hash)

        candidates: set[str] | None = None
        for token in tokens:
            matched: set[str] = set()
            for indexed, hashes in self.postings.items():
                if token in indexed:
                    matched.update(hashes)
            candidates = matched if candidates is None else candidates & matched
            if not candidates:
                break
        return candidates or set()


class SearchEngine:
    """Keyword/filter search over a change set.

    Call :meth:`build_index` before searching; calling it again replaces
    the index wholesale.
    """

    def __init__(self, config: SearchConfig | None = None) -> None:
        self.config = config or SearchConfig()
        self._index = SearchIndex((), case_sensitive=self.config.case_sensitive)
        self._write_lock = threading.Lock()

    @property
    def index(self) -> SearchIndex:
        return self._index

    def build_index(
        self,
        changes: Iterable[CommitRecord],
        *,
        version: str | Version | None = None,
        versions: Mapping[str, str | Version] | None = None,
        sections: Mapping[str, str] | None = None,
    ) -> None:
        """Build a fresh index from ``changes`` and publish it atomically.

        Args:
            changes: Commits to index
            version: Release version label for every commit
            versions: Per-hash release version labels, overriding ``version``
            sections: Per-hash changelog section labels

        Raises:
            InvalidVersionError: If a version label is not a semantic version
        """
        records = list(changes)
        labels: dict[str, Version] = {}
        if version is not None:
            default = _as_version(version)
            labels = {record.hash: default for record in records}
        for commit_hash, label in (versions or {}).items():
            labels[commit_hash] = _as_version(label)

        with self._write_lock:
            index = SearchIndex(
                records,
                case_sensitive=self.config.case_sensitive,
                versions=labels,
                sections=sections,
            )
            self._index = index
        logger.debug("Search index built with %d entries", len(index))

    def search(self, query: SearchQuery) -> SearchResult:
        """Run ``query`` against the current index.

        Raises:
            InvalidQueryError: If pagination, sort or version range parameters
                are invalid
        """
        page, page_size = self._resolve_pagination(query.pagination)
        sort_by, sort_order = self._resolve_sort(query)
        bounds = self._resolve_version_range(query.version_range)

        index = self._index
        if not len(index):
            logger.warning("Search index is empty; call build_index() first")

        keyword = query.keyword or None
        if keyword is not None and not self.config.case_sensitive:
            keyword = keyword.lower()

        matches = self._filter(index, query, keyword, bounds)
        ordered = self._sort(index, matches, keyword, sort_by, sort_order)

        start = (page - 1) * page_size
        return SearchResult(
            entries=[index.by_hash[h] for h in ordered[start : start + page_size]],
            total=len(ordered),
            page=page,
            page_size=page_size,
        )

    def _resolve_pagination(self, pagination: Pagination | None) -> tuple[int, int]:
        if pagination is None:
            return 1, min(self.config.default_page_size, self.config.max_page_size)

        if pagination.page < 1:
            raise InvalidQueryError(
                f"page must be >= 1, got {pagination.page}", field="page", value=pagination.page
            )
        if pagination.page_size < 1:
            raise InvalidQueryError(
                f"page_size must be >= 1, got {pagination.page_size}",
                field="page_size",
                value=pagination.page_size,
            )

        page_size = pagination.page_size
        if page_size > self.config.max_page_size:
            logger.debug("Clamping page size %d to %d", page_size, self.config.max_page_size)
            page_size = self.config.max_page_size
        return pagination.page, page_size

    def _resolve_sort(self, query: SearchQuery) -> tuple[SortBy, SortOrder]:
        try:
            sort_by = SortBy(query.sort_by)
        except ValueError as e:
            raise InvalidQueryError(
                f"Unknown sort field: {query.sort_by!r}", field="sort_by", value=query.sort_by
            ) from e
        try:
            sort_order = SortOrder(query.sort_order)
        except ValueError as e:
            raise InvalidQueryError(
                f"Unknown sort order: {query.sort_order!r}",
                field="sort_order",
                value=query.sort_order,
            ) from e
        return sort_by, sort_order

    def _resolve_version_range(
        self, version_range: VersionRange | None
    ) -> tuple[Version | None, Version | None] | None:
        if version_range is None:
            return None
        try:
            return (
                _as_version(version_range.start) if version_range.start is not None else None,
                _as_version(version_range.end) if version_range.end is not None else None,
            )
        except InvalidVersionError as e:
            raise InvalidQueryError(
                f"Invalid version range bound: {e}", field="version_range", value=version_range
            ) from e

    def _filter(
        self,
        index: SearchIndex,
        query: SearchQuery,
        keyword: str | None,
        bounds: tuple[Version | None, Version | None] | None,
    ) -> list[str]:
        candidates: set[str] | None = None

        for values, postings in (
            (query.types, index.by_type),
            (query.scopes, index.by_scope),
            (query.authors, index.by_author),
            (query.sections, index.by_section),
        ):
            if not values:
                continue
            allowed: set[str] = set()
            for value in values:
                allowed.update(postings.get(value, ()))
            candidates = allowed if candidates is None else candidates & allowed

        if keyword is not None:
            narrowed = index.keyword_candidates(keyword)
            candidates = narrowed if candidates is None else candidates & narrowed
            candidates = {h for h in candidates if keyword in index.search_text[h]}

        if query.date_range is not None:
            pool = candidates if candidates is not None else index.by_hash.keys()
            candidates = {h for h in pool if index.by_hash[h].commit_date in query.date_range}

        if bounds is not None:
            start, end = bounds
            pool = candidates if candidates is not None else index.by_hash.keys()
            candidates = {
                h
                for h in pool
                if (version := index.versions.get(h)) is None
                or ((start is None or version >= start) and (end is None or version <= end))
            }

        if candidates is None:
            return [record.hash for record in index.records]
        # Back to change set order so that sorting ties are deterministic
        return sorted(candidates, key=index.position.__getitem__)

    def _sort(
        self,
        index: SearchIndex,
        hashes: list[str],
        keyword: str | None,
        sort_by: SortBy,
        sort_order: SortOrder,
    ) -> list[str]:
        descending = sort_order is SortOrder.DESC

        if sort_by is SortBy.RELEVANCE:
            if keyword is None:
                # No relevance signal without a keyword
                return sorted(hashes, key=index.date_rank.__getitem__, reverse=True)
            needle = keyword
            return sorted(
                hashes,
                key=lambda h: (index.search_text[h].count(needle), index.date_rank[h]),
                reverse=descending,
            )

        if sort_by is SortBy.TYPE:
            return sorted(hashes, key=lambda h: index.by_hash[h].type, reverse=descending)

        return sorted(hashes, key=index.date_rank.__getitem__, reverse=descending)

    def suggestions(self, partial: str, limit: int = 10) -> list[str]:
        """Subject words containing ``partial``, in first-seen order."""
        if not partial:
            return []
        needle = partial if self.config.case_sensitive else partial.lower()
        found: list[str] = []
        for record in self._index.records:
            for word in record.subject.split():
                candidate = word if self.config.case_sensitive else word.lower()
                if needle in candidate and word not in found:
                    found.append(word)
                    if len(found) >= limit:
                        return found
        return found

    def index_stats(self) -> IndexStats:
        index = self._index
        return IndexStats(
            total_entries=len(index),
            types={key: len(hashes) for key, hashes in index.by_type.items()},
            scopes={key: len(hashes) for key, hashes in index.by_scope.items()},
            authors=_count_by(r.author.name for r in index.records),
            sections={key: len(hashes) for key, hashes in index.by_section.items()},
        )


def _as_version(value: str | Version) -> Version:
    return value if isinstance(value, Version) else Version.parse(value)


def _count_by(values: Iterable[str]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    return counts
