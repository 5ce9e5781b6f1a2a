"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from factories import make_entry

from commit_intel.core.changeset import ChangeSet
from commit_intel.vcs.entries import RawCommitEntry

EntryFactory = Callable[..., RawCommitEntry]


@pytest.fixture
def entry_factory() -> EntryFactory:
    return make_entry


@pytest.fixture
def feat_entry() -> RawCommitEntry:
    return make_entry("feat: add user authentication", hash="feat1234567890")


@pytest.fixture
def fix_entry() -> RawCommitEntry:
    return make_entry("fix(core): resolve memory leak", hash="fix1234567890")


@pytest.fixture
def breaking_entry() -> RawCommitEntry:
    return make_entry(
        "feat!: redesign public API",
        "The old client is gone.\n\nBREAKING CHANGE: Client() was removed",
        hash="break1234567890",
    )


@pytest.fixture
def sample_entries() -> list[RawCommitEntry]:
    """A small, varied history (newest first)."""
    return [
        make_entry(
            "feat(auth): add OAuth2 login (#42)",
            "Adds the login flow.\n\nCloses #10",
            hash="a" * 40,
            author_name="Alice",
            author_email="alice@example.com",
            date="2024-03-05T09:00:00+00:00",
        ),
        make_entry(
            "fix(auth): handle expired token",
            hash="b" * 40,
            author_name="Bob",
            author_email="bob@example.com",
            date="2024-03-04T12:00:00+00:00",
        ),
        make_entry(
            "docs: update readme",
            hash="c" * 40,
            author_name="Alice",
            author_email="alice@example.com",
            date="2024-03-03T08:30:00+00:00",
        ),
        make_entry(
            "refactor(core)!: drop legacy config loader",
            hash="d" * 40,
            author_name="Carol",
            author_email="1234+carol@users.noreply.github.com",
            date="2024-03-01T17:45:00+00:00",
        ),
        make_entry(
            "Merge branch 'main' into feature",
            hash="e" * 40,
            author_name="Bob",
            author_email="bob@example.com",
            date="2024-02-28T10:00:00+00:00",
        ),
    ]


@pytest.fixture
def sample_changes(sample_entries: list[RawCommitEntry]) -> ChangeSet:
    return ChangeSet.from_entries(sample_entries, from_ref="v1.2.3", to_ref="HEAD")


@pytest.fixture
def temp_project_with_pyproject(tmp_path: Path) -> Path:
    """A project directory with a commit-intel configured pyproject.toml."""
    (tmp_path / "pyproject.toml").write_text(
        """\
[project]
name = "test-project"
version = "1.0.0"

[tool.commit-intel]
parallel_workers = 2

[tool.commit-intel.commits]
types = ["feat", "fix", "chore"]
max_subject_length = 50

[tool.commit-intel.risk]
large_refactor_threshold = 10
core_module_patterns = ["src/engine/**"]

[tool.commit-intel.risk.weights]
security = 25

[tool.commit-intel.repository]
url = "https://github.com/acme/widgets"
"""
    )
    return tmp_path
