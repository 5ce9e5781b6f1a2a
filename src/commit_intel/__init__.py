"""commit-intel: release intelligence from conventional commit history.

Turns raw commit entries into typed records and derives from them a
next-version recommendation, a change-impact risk score, commit
statistics, and a searchable index.
"""

from __future__ import annotations

from commit_intel.analysis import (
    DiffAnalyzer,
    SearchEngine,
    SearchQuery,
    StatsAnalyzer,
    VersionAnalyzer,
)
from commit_intel.core import ChangeSet, CommitParser, CommitRecord, Version
from commit_intel.pipeline import ReleaseIntelligence, analyze_release
from commit_intel.vcs import DiffStats, RawCommitEntry

__version__ = "0.1.0"

__all__ = [
    "ChangeSet",
    "CommitParser",
    "CommitRecord",
    "DiffAnalyzer",
    "DiffStats",
    "RawCommitEntry",
    "ReleaseIntelligence",
    "SearchEngine",
    "SearchQuery",
    "StatsAnalyzer",
    "Version",
    "VersionAnalyzer",
    "__version__",
    "analyze_release",
]
