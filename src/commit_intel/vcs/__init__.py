"""Version-control boundary types."""

from __future__ import annotations

from commit_intel.vcs.entries import DiffStats, RawCommitEntry
from commit_intel.vcs.links import (
    HostType,
    RepositoryInfo,
    commit_link,
    compare_link,
    issue_link,
    pr_link,
)

__all__ = [
    "DiffStats",
    "HostType",
    "RawCommitEntry",
    "RepositoryInfo",
    "commit_link",
    "compare_link",
    "issue_link",
    "pr_link",
]
