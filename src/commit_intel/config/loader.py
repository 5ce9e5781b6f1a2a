"""Configuration loading from pyproject.toml."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from commit_intel.config.models import CommitIntelConfig
from commit_intel.exceptions import ConfigNotFoundError, ConfigValidationError

logger = logging.getLogger(__name__)

TOOL_SECTION = "commit-intel"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Walk up from ``start`` looking for a pyproject.toml.

    Args:
        start: Directory to start from (defaults to the working directory)

    Returns:
        Path to the nearest pyproject.toml

    Raises:
        ConfigNotFoundError: If no pyproject.toml exists up to the filesystem root
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate

    raise ConfigNotFoundError(f"No pyproject.toml found in {current} or any parent directory")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Read and parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Configuration file not found: {path}")

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_commit_intel_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.commit-intel]`` table, or an empty dict."""
    return pyproject.get("tool", {}).get(TOOL_SECTION, {})


def load_config(path: Path | None = None) -> CommitIntelConfig:
    """Load configuration for the project at ``path``.

    Args:
        path: A pyproject.toml file or a directory to search from

    Returns:
        Validated configuration (defaults when no tool table is present)

    Raises:
        ConfigNotFoundError: If no pyproject.toml can be found
        ConfigValidationError: If the configuration is invalid
    """
    if path is not None and path.is_file():
        pyproject_path = path
    else:
        pyproject_path = find_pyproject_toml(path)

    data = extract_commit_intel_config(load_pyproject_toml(pyproject_path))
    if not data:
        logger.debug("No [tool.%s] table in %s, using defaults", TOOL_SECTION, pyproject_path)

    try:
        return CommitIntelConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid configuration in {pyproject_path}:\n{e}") from e
