"""Semantic version parsing and manipulation.

Versions follow Semantic Versioning 2.0.0::

    MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]

A leading ``v`` (as commonly found in tag names) is accepted and
dropped. Bumping follows the usual semver increment rules: bumping a
prerelease to the level it already anticipates simply releases it
(``2.0.0-rc.1`` bumped major is ``2.0.0``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from functools import total_ordering

from commit_intel.exceptions import InvalidVersionError

_SEMVER_RE = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


class BumpType(StrEnum):
    """Version component to increment.

    Ordered by severity: MAJOR > MINOR > PATCH > PRERELEASE > NONE.
    """

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    PRERELEASE = "prerelease"
    NONE = "none"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {
    BumpType.MAJOR: 4,
    BumpType.MINOR: 3,
    BumpType.PATCH: 2,
    BumpType.PRERELEASE: 1,
    BumpType.NONE: 0,
}


@dataclass(frozen=True)
class PreRelease:
    """Dot-separated prerelease identifiers, e.g. ``beta.2``."""

    identifiers: tuple[str, ...]

    @classmethod
    def parse(cls, value: str) -> PreRelease:
        return cls(tuple(value.split(".")))

    def bump(self) -> PreRelease:
        """Increment the right-most numeric identifier, appending ``.0`` if none."""
        parts = list(self.identifiers)
        for i in range(len(parts) - 1, -1, -1):
            if parts[i].isdigit():
                parts[i] = str(int(parts[i]) + 1)
                return PreRelease(tuple(parts))
        return PreRelease((*parts, "0"))

    def _key(self) -> tuple[tuple[int, int | str], ...]:
        # Numeric identifiers sort before alphanumeric ones
        return tuple((0, int(p)) if p.isdigit() else (1, p) for p in self.identifiers)

    def __lt__(self, other: PreRelease) -> bool:
        return self._key() < other._key()

    def __str__(self) -> str:
        return ".".join(self.identifiers)


@total_ordering
@dataclass(frozen=True)
class Version:
    """An immutable semantic version."""

    major: int
    minor: int
    patch: int
    prerelease: PreRelease | None = None
    build: str | None = None

    @classmethod
    def parse(cls, value: str) -> Version:
        """Parse a version string.

        Raises:
            InvalidVersionError: If ``value`` is not a semantic version
        """
        match = _SEMVER_RE.match(value.strip()) if isinstance(value, str) else None
        if not match:
            raise InvalidVersionError(f"Invalid semantic version: {value!r}")

        prerelease = match.group("prerelease")
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            prerelease=PreRelease.parse(prerelease) if prerelease else None,
            build=match.group("build"),
        )

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease is not None

    def bump(self, bump_type: BumpType) -> Version:
        """Return the next version for ``bump_type``.

        Build metadata is always dropped.
        """
        pre = self.prerelease
        match bump_type:
            case BumpType.MAJOR:
                if pre and self.minor == 0 and self.patch == 0:
                    return Version(self.major, 0, 0)
                return Version(self.major + 1, 0, 0)
            case BumpType.MINOR:
                if pre and self.patch == 0:
                    return Version(self.major, self.minor, 0)
                return Version(self.major, self.minor + 1, 0)
            case BumpType.PATCH:
                if pre:
                    return Version(self.major, self.minor, self.patch)
                return Version(self.major, self.minor, self.patch + 1)
            case BumpType.PRERELEASE:
                if pre:
                    return Version(self.major, self.minor, self.patch, pre.bump())
                return Version(self.major, self.minor, self.patch + 1, PreRelease(("0",)))
            case _:
                return Version(self.major, self.minor, self.patch, pre)

    def with_prerelease(self, identifier: str) -> Version:
        """Attach a prerelease identifier (``rc`` becomes ``rc.0``)."""
        pre = PreRelease.parse(identifier)
        if not any(p.isdigit() for p in pre.identifiers):
            pre = PreRelease((*pre.identifiers, "0"))
        return Version(self.major, self.minor, self.patch, pre)

    def _core(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        if self._core() != other._core():
            return self._core() < other._core()
        # A prerelease has lower precedence than the release itself
        if self.prerelease is None:
            return False
        if other.prerelease is None:
            return True
        return self.prerelease < other.prerelease

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._core() == other._core() and self.prerelease == other.prerelease

    def __hash__(self) -> int:
        return hash((self._core(), self.prerelease))

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.build:
            text += f"+{self.build}"
        return text


def parse_version(value: str) -> Version:
    """Parse a version string. See :meth:`Version.parse`."""
    return Version.parse(value)
