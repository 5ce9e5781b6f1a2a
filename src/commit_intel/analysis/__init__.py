"""Read-only analyzers over a parsed change set.

- :mod:`~commit_intel.analysis.versioning`: next-version recommendation
- :mod:`~commit_intel.analysis.risk`: change-impact risk scoring
- :mod:`~commit_intel.analysis.stats`: commit statistics
- :mod:`~commit_intel.analysis.search`: keyword and filter search

None of them mutate their input, so they can run concurrently over the
same change set.
"""

from __future__ import annotations

from commit_intel.analysis.risk import DiffAnalyzer, ModuleImpact, RiskAssessment
from commit_intel.analysis.search import (
    DateRange,
    Pagination,
    SearchEngine,
    SearchQuery,
    SearchResult,
    SortBy,
    SortOrder,
    VersionRange,
)
from commit_intel.analysis.stats import StatsAnalysis, StatsAnalyzer
from commit_intel.analysis.versioning import (
    VersionAnalysis,
    VersionAnalyzer,
    VersionEvidence,
    VersionSuggestion,
    calculate_bump,
)

__all__ = [
    "DateRange",
    "DiffAnalyzer",
    "ModuleImpact",
    "Pagination",
    "RiskAssessment",
    "SearchEngine",
    "SearchQuery",
    "SearchResult",
    "SortBy",
    "SortOrder",
    "StatsAnalysis",
    "StatsAnalyzer",
    "VersionAnalysis",
    "VersionAnalyzer",
    "VersionEvidence",
    "VersionRange",
    "VersionSuggestion",
    "calculate_bump",
]
