"""Core building blocks for commit-intel.

This package contains:
- Semantic version parsing and bumping
- Conventional commit parsing into immutable records
- Change sets (ordered, de-duplicated record collections)
- The optional commit message lint pass
"""

from __future__ import annotations

from commit_intel.core.changeset import ChangeSet
from commit_intel.core.commits import (
    Author,
    CommitParser,
    CommitRecord,
    CommitType,
    ParseFailure,
    get_breaking_changes,
    group_commits_by_type,
    parse_commits,
)
from commit_intel.core.lint import CommitLinter, LintResult, validate_subject
from commit_intel.core.version import BumpType, PreRelease, Version, parse_version

__all__ = [
    # Commits
    "Author",
    # Version
    "BumpType",
    "ChangeSet",
    # Lint
    "CommitLinter",
    "CommitParser",
    "CommitRecord",
    "CommitType",
    "LintResult",
    "ParseFailure",
    "PreRelease",
    "Version",
    "get_breaking_changes",
    "group_commits_by_type",
    "parse_commits",
    "parse_version",
    "validate_subject",
]
