"""Exception hierarchy for commit-intel.

All errors raised by the library derive from :class:`CommitIntelError`
so callers can catch everything with a single ``except`` clause while
still being able to handle specific failures.

Parse problems in individual commits are *not* exceptions: they are
recorded on the resulting :class:`~commit_intel.core.commits.CommitRecord`
and surfaced through :class:`~commit_intel.core.commits.ParseFailure`.
"""

from __future__ import annotations


class CommitIntelError(Exception):
    """Base exception for all commit-intel errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# =============================================================================
# Configuration
# =============================================================================


class ConfigError(CommitIntelError):
    """Base class for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """No pyproject.toml could be located."""


class ConfigValidationError(ConfigError):
    """Configuration exists but could not be read or validated."""


# =============================================================================
# Versions
# =============================================================================


class VersionError(CommitIntelError):
    """Base class for version errors."""


class InvalidVersionError(VersionError):
    """A string is not a valid semantic version."""


class InvalidBaselineError(InvalidVersionError):
    """The baseline handed to the version analyzer cannot be parsed."""

    def __init__(self, message: str, *, baseline: str) -> None:
        self.baseline = baseline
        super().__init__(message)


# =============================================================================
# Search
# =============================================================================


class SearchError(CommitIntelError):
    """Base class for search errors."""


class InvalidQueryError(SearchError):
    """A search query violates the query contract (e.g. ``page < 1``)."""

    def __init__(self, message: str, *, field: str, value: object) -> None:
        self.field = field
        self.value = value
        super().__init__(message)
