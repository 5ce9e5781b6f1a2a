"""Pydantic models for commit-intel configuration.

Configuration lives under ``[tool.commit-intel]`` in pyproject.toml.
Every field has a default, so an empty table (or no table at all)
produces a fully usable configuration.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

DEFAULT_COMMIT_TYPES: list[str] = [
    "feat",
    "fix",
    "perf",
    "refactor",
    "docs",
    "style",
    "test",
    "build",
    "ci",
    "chore",
    "revert",
]

DEFAULT_CORE_MODULE_PATTERNS: list[str] = [
    "src/core/**",
    "src/lib/**",
    "lib/**",
    "core/**",
]

DEFAULT_SECURITY_KEYWORDS: list[str] = [
    "security",
    "vulnerability",
    "cve",
    "xss",
    "csrf",
    "injection",
    "exploit",
]


class CommitsConfig(BaseModel):
    """Commit parsing and lint settings."""

    types: list[str] = Field(default_factory=lambda: list(DEFAULT_COMMIT_TYPES))
    max_subject_length: int = Field(default=72, ge=1)
    require_scope: bool = False
    allow_uppercase_subject: bool = False
    hidden_types: list[str] = Field(default_factory=list)
    scope_filter: list[str] = Field(default_factory=list)

    @property
    def allowed_types(self) -> frozenset[str]:
        return frozenset(self.types)


class RiskWeights(BaseModel):
    """Points contributed by each risk signal."""

    breaking_change: int = Field(default=35, ge=0)
    core_module: int = Field(default=20, ge=0)
    large_refactor: int = Field(default=15, ge=0)
    volume_cap: int = Field(default=20, ge=0)
    security: int = Field(default=10, ge=0)


class RiskConfig(BaseModel):
    """Change-impact scoring settings."""

    core_module_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CORE_MODULE_PATTERNS)
    )
    large_refactor_threshold: int = Field(default=20, ge=1)
    volume_normalization: int = Field(default=2000, ge=1)
    security_keywords: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SECURITY_KEYWORDS)
    )
    weights: RiskWeights = Field(default_factory=RiskWeights)


class SearchConfig(BaseModel):
    """Search engine settings."""

    case_sensitive: bool = False
    default_page_size: int = Field(default=20, ge=1)
    max_page_size: int = Field(default=100, ge=1)


class StatsConfig(BaseModel):
    """Statistics settings."""

    date_group: Literal["day", "week", "month"] = "day"
    include_commits: bool = False


class RepositoryConfig(BaseModel):
    """Where the repository is hosted, used to build links."""

    url: str | None = None
    host: Literal["github", "gitlab", "gitee", "bitbucket", "other"] | None = None


class CommitIntelConfig(BaseModel):
    """Root configuration model."""

    commits: CommitsConfig = Field(default_factory=CommitsConfig)
    risk: RiskConfig = Field(default_factory=RiskConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    stats: StatsConfig = Field(default_factory=StatsConfig)
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    parallel_workers: int | None = Field(default=None, ge=1)
