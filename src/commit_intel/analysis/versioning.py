"""Next-version recommendation.

The bump type is decided by severity alone: one breaking commit forces
a major bump no matter how many fixes surround it. How *dominant* the
deciding category is within the change set only moves the confidence.

Confidence for a winning category is a linear curve over its share of
all commits::

    confidence = floor + (ceiling - floor) * (category_count / total)

The floors and ceilings in :data:`CONFIDENCE_CURVES` are tunable; pass
a different mapping to :class:`VersionAnalyzer` to change them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field

from commit_intel.core.commits import CommitRecord, CommitType
from commit_intel.core.version import BumpType, Version
from commit_intel.exceptions import InvalidBaselineError, InvalidVersionError

logger = logging.getLogger(__name__)

CONFIDENCE_CURVES: dict[BumpType, tuple[float, float]] = {
    BumpType.MAJOR: (0.75, 0.99),
    BumpType.MINOR: (0.6, 0.9),
    BumpType.PATCH: (0.5, 0.85),
}

LOW_CONFIDENCE = 0.3

# Each step an alternative sits below the recommendation halves its confidence
ALTERNATIVE_PENALTY = 0.5

NO_SIGNIFICANT_CHANGES = "no significant changes detected"


class VersionEvidence(BaseModel):
    """Commit counts backing a suggestion."""

    model_config = ConfigDict(frozen=True)

    breaking: int = 0
    feature: int = 0
    fix: int = 0
    other: int = 0

    @property
    def total(self) -> int:
        return self.breaking + self.feature + self.fix + self.other


class VersionSuggestion(BaseModel):
    """A candidate next version."""

    model_config = ConfigDict(frozen=True)

    version: str
    bump_type: BumpType
    confidence: float = Field(ge=0.0, le=1.0)
    reason: str
    evidence: VersionEvidence


class VersionAnalysis(BaseModel):
    """All suggestions for a change set plus the recommended one."""

    model_config = ConfigDict(frozen=True)

    baseline: str
    suggestions: list[VersionSuggestion]
    recommended: VersionSuggestion
    summary: list[str]


def count_categories(records: Iterable[CommitRecord]) -> VersionEvidence:
    """Partition commits into breaking / feature / fix / other."""
    breaking = feature = fix = other = 0
    for record in records:
        if record.breaking:
            breaking += 1
        elif record.type == CommitType.FEAT:
            feature += 1
        elif record.type == CommitType.FIX:
            fix += 1
        else:
            other += 1
    return VersionEvidence(breaking=breaking, feature=feature, fix=fix, other=other)


def calculate_bump(records: Iterable[CommitRecord]) -> BumpType:
    """Bump type implied by the commits; NONE when nothing warrants a release."""
    evidence = count_categories(records)
    if evidence.breaking:
        return BumpType.MAJOR
    if evidence.feature:
        return BumpType.MINOR
    if evidence.fix:
        return BumpType.PATCH
    return BumpType.NONE


def _sort_key(suggestion: VersionSuggestion) -> tuple[float, int]:
    return (-suggestion.confidence, -suggestion.bump_type.severity)


class VersionAnalyzer:
    """Recommends the next semantic version for a change set."""

    def __init__(self, curves: Mapping[BumpType, tuple[float, float]] | None = None) -> None:
        self.curves = dict(CONFIDENCE_CURVES)
        if curves:
            self.curves.update(curves)

    def suggest(self, baseline: str | Version, changes: Iterable[CommitRecord]) -> VersionAnalysis:
        """Produce ranked suggestions for the release following ``baseline``.

        Args:
            baseline: Current version
            changes: Parsed commits since ``baseline``

        Returns:
            Suggestions ordered by confidence (severity breaks ties) and
            the recommended suggestion

        Raises:
            InvalidBaselineError: If ``baseline`` is not a semantic version
        """
        current = self._parse_baseline(baseline)
        evidence = count_categories(changes)
        total = evidence.total
        logger.debug("Analyzing %d commits against baseline %s", total, current)

        primary = self._primary(current, evidence)
        suggestions = [primary, *self._alternatives(current, evidence, primary.bump_type)]
        recommended = primary

        if current.is_prerelease:
            recommended = VersionSuggestion(
                version=str(current.bump(BumpType.PRERELEASE)),
                bump_type=BumpType.PRERELEASE,
                confidence=primary.confidence,
                reason=(
                    f"baseline {current} is a pending prerelease, which overrides "
                    f"category analysis ({primary.bump_type} indicated by commits)"
                ),
                evidence=evidence,
            )
            suggestions.append(recommended)

        suggestions.sort(key=_sort_key)

        return VersionAnalysis(
            baseline=str(current),
            suggestions=suggestions,
            recommended=recommended,
            summary=_summarize(evidence),
        )

    def _parse_baseline(self, baseline: str | Version) -> Version:
        if isinstance(baseline, Version):
            return baseline
        try:
            return Version.parse(baseline)
        except InvalidVersionError as e:
            raise InvalidBaselineError(
                f"Baseline {baseline!r} is not a semantic version", baseline=str(baseline)
            ) from e

    def _curve(self, bump_type: BumpType, count: int, total: int) -> float:
        floor, ceiling = self.curves[bump_type]
        dominance = count / total if total else 0.0
        return round(min(1.0, max(0.0, floor + (ceiling - floor) * dominance)), 4)

    def _primary(self, current: Version, evidence: VersionEvidence) -> VersionSuggestion:
        total = evidence.total
        if evidence.breaking:
            bump_type = BumpType.MAJOR
            confidence = self._curve(bump_type, evidence.breaking, total)
            reason = f"{evidence.breaking} breaking change(s) detected"
        elif evidence.feature:
            bump_type = BumpType.MINOR
            confidence = self._curve(bump_type, evidence.feature, total)
            reason = f"{evidence.feature} new feature(s) added"
        elif evidence.fix:
            bump_type = BumpType.PATCH
            confidence = self._curve(bump_type, evidence.fix, total)
            reason = f"{evidence.fix} fix(es) applied"
        else:
            bump_type = BumpType.PATCH
            confidence = LOW_CONFIDENCE
            reason = NO_SIGNIFICANT_CHANGES

        return VersionSuggestion(
            version=str(current.bump(bump_type)),
            bump_type=bump_type,
            confidence=confidence,
            reason=reason,
            evidence=evidence,
        )

    def _alternatives(
        self,
        current: Version,
        evidence: VersionEvidence,
        decided: BumpType,
    ) -> list[VersionSuggestion]:
        """Suggestions for each bump type below the decided one.

        Each alternative is simulated as if the higher-severity commits
        were absent, and carries those reduced counts as its evidence.
        """
        alternatives: list[VersionSuggestion] = []
        total = evidence.total
        steps = 0

        if decided is BumpType.MAJOR:
            steps += 1
            simulated = evidence.model_copy(update={"breaking": 0})
            if evidence.feature:
                confidence = self._curve(BumpType.MINOR, evidence.feature, total)
                reason = (
                    f"{evidence.feature} new feature(s) would warrant a minor bump "
                    "without the breaking changes"
                )
            else:
                confidence = LOW_CONFIDENCE
                reason = "no new features; minor bump shown for comparison"
            alternatives.append(
                VersionSuggestion(
                    version=str(current.bump(BumpType.MINOR)),
                    bump_type=BumpType.MINOR,
                    confidence=round(confidence * ALTERNATIVE_PENALTY**steps, 4),
                    reason=reason,
                    evidence=simulated,
                )
            )

        if decided in (BumpType.MAJOR, BumpType.MINOR):
            steps += 1
            simulated = evidence.model_copy(update={"breaking": 0, "feature": 0})
            if evidence.fix:
                confidence = self._curve(BumpType.PATCH, evidence.fix, total)
                reason = (
                    f"{evidence.fix} fix(es) would warrant a patch bump "
                    "without the higher-severity changes"
                )
            else:
                confidence = LOW_CONFIDENCE
                reason = "no fixes; patch bump shown for comparison"
            alternatives.append(
                VersionSuggestion(
                    version=str(current.bump(BumpType.PATCH)),
                    bump_type=BumpType.PATCH,
                    confidence=round(confidence * ALTERNATIVE_PENALTY**steps, 4),
                    reason=reason,
                    evidence=simulated,
                )
            )

        return alternatives


def _summarize(evidence: VersionEvidence) -> list[str]:
    lines: list[str] = []
    if evidence.breaking:
        lines.append(f"{evidence.breaking} breaking change(s)")
    if evidence.feature:
        lines.append(f"{evidence.feature} new feature(s)")
    if evidence.fix:
        lines.append(f"{evidence.fix} fix(es)")
    if evidence.other:
        lines.append(f"{evidence.other} other change(s)")
    return lines


def suggest_version(baseline: str | Version, changes: Iterable[CommitRecord]) -> VersionAnalysis:
    """Convenience wrapper around :meth:`VersionAnalyzer.suggest`."""
    return VersionAnalyzer().suggest(baseline, changes)
