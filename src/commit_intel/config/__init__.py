"""Configuration management for commit-intel."""

from __future__ import annotations

from commit_intel.config.loader import load_config
from commit_intel.config.models import (
    CommitIntelConfig,
    CommitsConfig,
    RepositoryConfig,
    RiskConfig,
    RiskWeights,
    SearchConfig,
    StatsConfig,
)

__all__ = [
    "CommitIntelConfig",
    "CommitsConfig",
    "RepositoryConfig",
    "RiskConfig",
    "RiskWeights",
    "SearchConfig",
    "StatsConfig",
    "load_config",
]
