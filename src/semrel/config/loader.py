"""Configuration loading from pyproject.toml.

semrel reads its settings from the ``[tool.semrel]`` table of the nearest
``pyproject.toml``. Repositories without one (or without the table) get
the defaults from :mod:`semrel.config.models`.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from semrel.config.models import SemrelConfig
from semrel.exceptions import ConfigNotFoundError, ConfigValidationError
from semrel.logging import get_logger

logger = get_logger(__name__)

TOOL_KEY = "semrel"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find pyproject.toml in ``start`` or any of its parents.

    Args:
        start: Directory to start searching from (defaults to cwd)

    Returns:
        Path to the pyproject.toml file

    Raises:
        ConfigNotFoundError: If no pyproject.toml is found
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No pyproject.toml found in {current} or any parent directory")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Parse a pyproject.toml file.

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


def extract_semrel_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.semrel]`` table, or an empty dict."""
    return dict(pyproject.get("tool", {}).get(TOOL_KEY, {}))


def load_config(path: Path | None = None) -> SemrelConfig:
    """Load semrel configuration for a project.

    Args:
        path: Project directory or path to a pyproject.toml file

    Returns:
        Validated configuration; defaults when nothing is configured

    Raises:
        ConfigValidationError: If the configuration is invalid
    """
    if path is not None and path.is_file():
        pyproject_path = path
    else:
        try:
            pyproject_path = find_pyproject_toml(path)
        except ConfigNotFoundError:
            logger.debug("config_defaults", reason="no pyproject.toml found")
            return SemrelConfig()

    data = extract_semrel_config(load_pyproject_toml(pyproject_path))
    logger.debug(
        "config_loaded", table=f"tool.{TOOL_KEY}", path=str(pyproject_path), data=data
    )

    try:
        return SemrelConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid [tool.{TOOL_KEY}] in {pyproject_path}:\n{e}") from e
