"""Web links into the hosting service for commits, PRs and issues."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class HostType(StrEnum):
    """Known repository hosting services."""

    GITHUB = "github"
    GITLAB = "gitlab"
    GITEE = "gitee"
    BITBUCKET = "bitbucket"
    OTHER = "other"


@dataclass(frozen=True)
class RepositoryInfo:
    """Location of the repository on its hosting service."""

    url: str
    host: HostType = HostType.OTHER

    @classmethod
    def from_url(cls, url: str, host: str | None = None) -> RepositoryInfo:
        """Build repository info, detecting the host from the URL if not given."""
        url = url.rstrip("/")
        if url.endswith(".git"):
            url = url[: -len(".git")]

        if host:
            return cls(url=url, host=HostType(host))

        lowered = url.lower()
        for candidate in (HostType.GITHUB, HostType.GITLAB, HostType.GITEE, HostType.BITBUCKET):
            if candidate.value in lowered:
                return cls(url=url, host=candidate)
        return cls(url=url)


def pr_link(pr_number: int, repo: RepositoryInfo) -> str:
    match repo.host:
        case HostType.GITHUB | HostType.GITEE:
            return f"{repo.url}/pull/{pr_number}"
        case HostType.GITLAB:
            return f"{repo.url}/merge_requests/{pr_number}"
        case HostType.BITBUCKET:
            return f"{repo.url}/pull-requests/{pr_number}"
        case _:
            return f"#{pr_number}"


def issue_link(issue: str, repo: RepositoryInfo) -> str:
    # Tracker keys such as PROJ-12 live outside the forge
    if not issue.isdigit():
        return issue
    if repo.host is HostType.OTHER:
        return f"#{issue}"
    return f"{repo.url}/issues/{issue}"


def commit_link(commit_hash: str, repo: RepositoryInfo) -> str:
    return f"{repo.url}/commit/{commit_hash}"


def compare_link(from_ref: str, to_ref: str, repo: RepositoryInfo) -> str:
    """Link comparing two refs on the hosting service."""
    match repo.host:
        case HostType.GITHUB | HostType.GITEE:
            return f"{repo.url}/compare/{from_ref}...{to_ref}"
        case HostType.GITLAB:
            return f"{repo.url}/-/compare/{from_ref}...{to_ref}"
        case HostType.BITBUCKET:
            return f"{repo.url}/branches/compare/{to_ref}..{from_ref}"
        case _:
            return repo.url
