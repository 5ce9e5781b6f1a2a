"""Change-impact risk scoring.

The score is additive over independent signals, evaluated in a fixed
order and clamped to 0..100:

1. breaking changes present
2. core module paths touched
3. large refactor (many files)
4. code volume (scaled, saturating)
5. security-sensitive commits

The factor strings are consumed verbatim by report renderers, so their
wording is part of the public contract.
"""

from __future__ import annotations

import fnmatch
import logging
from collections.abc import Iterable, Sequence
from typing import Literal

from pydantic import BaseModel, ConfigDict

from commit_intel.config.models import RiskConfig
from commit_intel.core.commits import CommitRecord
from commit_intel.vcs.entries import DiffStats

logger = logging.getLogger(__name__)

RiskLevel = Literal["low", "medium", "high"]

HIGH_RISK_THRESHOLD = 70
MEDIUM_RISK_THRESHOLD = 40

_GLOB_CHARS = frozenset("*?[")


class RiskAssessment(BaseModel):
    """Risk score for a change range together with its inputs."""

    model_config = ConfigDict(frozen=True)

    score: int
    level: RiskLevel
    factors: list[str]
    files_changed: int
    lines_added: int
    lines_removed: int
    affected_modules: list[str]


class ModuleImpact(BaseModel):
    """How much of a change set landed in one scope."""

    model_config = ConfigDict(frozen=True)

    name: str
    commit_count: int
    percentage: float
    is_core: bool


def risk_level(score: int) -> RiskLevel:
    if score >= HIGH_RISK_THRESHOLD:
        return "high"
    if score >= MEDIUM_RISK_THRESHOLD:
        return "medium"
    return "low"


def matches_pattern(path: str, pattern: str) -> bool:
    """Glob match, or plain substring match for patterns without wildcards.

    ``**`` and ``*`` both cross directory separators. Globs may match
    starting at any path segment, so ``core/**`` matches ``app/core/x.py``.
    """
    path = path.replace("\\", "/")
    if not _GLOB_CHARS.intersection(pattern):
        return pattern in path
    parts = path.split("/")
    directory = pattern[: -len("/**")] if pattern.endswith("/**") else None
    for i in range(len(parts)):
        tail = "/".join(parts[i:])
        if fnmatch.fnmatchcase(tail, pattern):
            return True
        # "src/core/**" should also match the directory entry "src/core"
        if directory is not None and fnmatch.fnmatchcase(tail, directory):
            return True
    return False


class DiffAnalyzer:
    """Scores the risk of releasing a change range."""

    def __init__(self, config: RiskConfig | None = None) -> None:
        self.config = config or RiskConfig()

    def analyze(
        self,
        stats: DiffStats,
        changes: Iterable[CommitRecord],
        *,
        core_module_patterns: Sequence[str] | None = None,
        large_refactor_threshold: int | None = None,
    ) -> RiskAssessment:
        """Score ``stats`` and ``changes``.

        Args:
            stats: Diff statistics for the range
            changes: Parsed commits for the same range
            core_module_patterns: Override for the configured patterns
            large_refactor_threshold: Override for the configured threshold

        Returns:
            The risk assessment
        """
        patterns = (
            list(core_module_patterns)
            if core_module_patterns is not None
            else self.config.core_module_patterns
        )
        threshold = (
            large_refactor_threshold
            if large_refactor_threshold is not None
            else self.config.large_refactor_threshold
        )
        weights = self.config.weights
        records = list(changes)

        score = 0
        factors: list[str] = []

        breaking_count = sum(1 for r in records if r.breaking)
        if breaking_count:
            score += weights.breaking_change
            factors.append(f"Breaking changes: {breaking_count} commit(s)")

        affected = [
            path
            for path in stats.touched_paths
            if any(matches_pattern(path, pattern) for pattern in patterns)
        ]
        if affected:
            score += weights.core_module
            factors.append(f"Core modules affected: {', '.join(affected)}")

        if stats.files_changed >= threshold:
            score += weights.large_refactor
            factors.append(f"Large refactor: {stats.files_changed} files changed")

        volume_points = self._volume_points(stats.total_lines)
        if volume_points:
            score += volume_points
            factors.append(f"Code volume: {stats.total_lines} lines modified")

        security_count = sum(1 for r in records if self._is_security(r))
        if security_count:
            score += weights.security
            factors.append(f"Security-related changes: {security_count} commit(s)")

        score = max(0, min(100, score))
        logger.debug("Risk score %d from %d signal(s)", score, len(factors))

        return RiskAssessment(
            score=score,
            level=risk_level(score),
            factors=factors,
            files_changed=stats.files_changed,
            lines_added=stats.lines_added,
            lines_removed=stats.lines_removed,
            affected_modules=affected,
        )

    def _volume_points(self, total_lines: int) -> int:
        cap = self.config.weights.volume_cap
        normalization = self.config.volume_normalization
        return min(cap, cap * total_lines // normalization)

    def _is_security(self, record: CommitRecord) -> bool:
        if "security" in record.type.lower():
            return True
        subject = record.subject.lower()
        return any(keyword.lower() in subject for keyword in self.config.security_keywords)

    def is_core(self, name: str) -> bool:
        """Whether a module (scope) name matches the core module patterns."""
        return any(matches_pattern(name, pattern) for pattern in self.config.core_module_patterns)

    def module_impacts(self, changes: Iterable[CommitRecord]) -> list[ModuleImpact]:
        """Break a change set down by scope.

        Unscoped commits count toward the total but not toward any module.
        """
        records = list(changes)
        counts: dict[str, int] = {}
        for record in records:
            if record.scope:
                counts[record.scope] = counts.get(record.scope, 0) + 1

        total = len(records)
        impacts = [
            ModuleImpact(
                name=name,
                commit_count=count,
                percentage=round(count / total * 100, 2) if total else 0.0,
                is_core=self.is_core(name),
            )
            for name, count in counts.items()
        ]
        impacts.sort(key=lambda impact: (-impact.commit_count, impact.name))
        return impacts
