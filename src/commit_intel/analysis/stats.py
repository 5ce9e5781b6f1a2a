"""Commit statistics: type distribution, activity over time, contributors."""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from collections.abc import Iterable
from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from commit_intel.config.models import StatsConfig
from commit_intel.core.commits import CommitRecord

logger = logging.getLogger(__name__)


class TypeStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    count: int
    percentage: float
    commits: list[str] | None = None


class DateStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    period: str
    count: int
    commits: list[str] | None = None


class ContributorStats(BaseModel):
    """Activity of one author, identified by email."""

    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    handle: str | None = None
    commit_count: int
    percentage: float
    commits_by_type: dict[str, int]
    first_commit_date: date | None = None
    last_commit_date: date | None = None


class PeriodCount(BaseModel):
    model_config = ConfigDict(frozen=True)

    period: str
    count: int


class FrequencyStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    commits_per_day: float = 0.0
    commits_per_week: float = 0.0
    commits_per_month: float = 0.0
    duration_days: int = 0
    most_active_day: PeriodCount | None = None
    most_active_week: PeriodCount | None = None


class ReferenceStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    issue_count: int = 0
    pr_count: int = 0
    issues: list[str] = Field(default_factory=list)
    prs: list[int] = Field(default_factory=list)


class StatsAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_commits: int
    by_type: list[TypeStats]
    by_date: list[DateStats]
    contributors: list[ContributorStats]
    frequency: FrequencyStats
    references: ReferenceStats


def percentage(value: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round(value / total * 100, 2)


def iso_week(day: date) -> str:
    year, week, _ = day.isocalendar()
    return f"{year}-W{week:02d}"


def period_key(day: date, group: str) -> str:
    if group == "week":
        return iso_week(day)
    if group == "month":
        return f"{day.year:04d}-{day.month:02d}"
    return day.isoformat()


class StatsAnalyzer:
    """Aggregates a change set into distributions."""

    def __init__(self, config: StatsConfig | None = None) -> None:
        self.config = config or StatsConfig()

    def analyze(self, changes: Iterable[CommitRecord]) -> StatsAnalysis:
        records = list(changes)
        total = len(records)
        return StatsAnalysis(
            total_commits=total,
            by_type=self._by_type(records, total),
            by_date=self._by_date(records),
            contributors=self._contributors(records, total),
            frequency=self._frequency(records),
            references=self._references(records),
        )

    def _by_type(self, records: list[CommitRecord], total: int) -> list[TypeStats]:
        groups: dict[str, list[str]] = defaultdict(list)
        for record in records:
            groups[record.type].append(record.hash)

        stats = [
            TypeStats(
                type=commit_type,
                count=len(hashes),
                percentage=percentage(len(hashes), total),
                commits=hashes if self.config.include_commits else None,
            )
            for commit_type, hashes in groups.items()
        ]
        stats.sort(key=lambda s: (-s.count, s.type))
        return stats

    def _by_date(self, records: list[CommitRecord]) -> list[DateStats]:
        groups: dict[str, list[str]] = defaultdict(list)
        for record in records:
            day = record.commit_date
            if day is None:
                logger.debug("Commit %s has no usable date", record.short_hash)
                continue
            groups[period_key(day, self.config.date_group)].append(record.hash)

        return [
            DateStats(
                period=period,
                count=len(hashes),
                commits=hashes if self.config.include_commits else None,
            )
            for period, hashes in sorted(groups.items())
        ]

    def _contributors(self, records: list[CommitRecord], total: int) -> list[ContributorStats]:
        by_email: dict[str, list[CommitRecord]] = defaultdict(list)
        for record in records:
            by_email[record.author.email].append(record)

        stats: list[ContributorStats] = []
        for email, authored in by_email.items():
            first = authored[0].author
            dates = sorted(d for r in authored if (d := r.commit_date) is not None)
            handle = next((r.author.handle for r in authored if r.author.handle), None)
            stats.append(
                ContributorStats(
                    name=first.name,
                    email=email,
                    handle=handle,
                    commit_count=len(authored),
                    percentage=percentage(len(authored), total),
                    commits_by_type=dict(Counter(r.type for r in authored)),
                    first_commit_date=dates[0] if dates else None,
                    last_commit_date=dates[-1] if dates else None,
                )
            )

        stats.sort(key=lambda s: (-s.commit_count, s.name))
        return stats

    def _frequency(self, records: list[CommitRecord]) -> FrequencyStats:
        days = [d for r in records if (d := r.commit_date) is not None]
        if not days:
            return FrequencyStats()

        first, last = min(days), max(days)
        duration_days = (last - first).days + 1
        per_day = len(days) / duration_days

        day_counts = Counter(d.isoformat() for d in days)
        week_counts = Counter(iso_week(d) for d in days)

        return FrequencyStats(
            commits_per_day=round(per_day, 2),
            commits_per_week=round(per_day * 7, 2),
            commits_per_month=round(per_day * 30, 2),
            duration_days=duration_days,
            most_active_day=_most_active(day_counts),
            most_active_week=_most_active(week_counts),
        )

    def _references(self, records: list[CommitRecord]) -> ReferenceStats:
        issues: list[str] = []
        prs: list[int] = []
        for record in records:
            if record.pr_number is not None and record.pr_number not in prs:
                prs.append(record.pr_number)
            for issue in sorted(record.issue_refs):
                if issue not in issues:
                    issues.append(issue)
        return ReferenceStats(issue_count=len(issues), pr_count=len(prs), issues=issues, prs=prs)


def _most_active(counts: Counter[str]) -> PeriodCount:
    # Earliest period wins ties
    period, count = min(counts.items(), key=lambda item: (-item[1], item[0]))
    return PeriodCount(period=period, count=count)
