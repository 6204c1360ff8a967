"""Configuration discovery and loading.

Configuration lives in a standalone ``release-boss.toml`` (or
``.release-boss.toml``) at the project root, or in the
``[tool.release-boss]`` table of ``pyproject.toml``. Without either,
defaults apply.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from release_boss.config.models import ReleaseBossConfig
from release_boss.exceptions import ConfigNotFoundError, ConfigValidationError
from release_boss.logging import get_logger

log = get_logger(__name__)

CONFIG_FILENAMES: tuple[str, ...] = ("release-boss.toml", ".release-boss.toml")
PYPROJECT = "pyproject.toml"
TOOL_KEY = "release-boss"


def load_toml(path: Path) -> dict[str, Any]:
    """Read a TOML file.

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


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find the nearest pyproject.toml, searching upwards from ``start``.

    Raises:
        ConfigNotFoundError: If no pyproject.toml exists up to the root
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / PYPROJECT
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No {PYPROJECT} found in {current} or its parents")


def extract_tool_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.release-boss]`` table, or an empty dict."""
    section = pyproject.get("tool", {}).get(TOOL_KEY, {})
    return dict(section)


def find_config_file(project_path: Path) -> Path | None:
    """Locate the configuration source for a project directory."""
    for name in CONFIG_FILENAMES:
        candidate = project_path / name
        if candidate.is_file():
            return candidate
    try:
        return find_pyproject_toml(project_path)
    except ConfigNotFoundError:
        return None


def parse_config(data: dict[str, Any], source: str = "<config>") -> ReleaseBossConfig:
    """Validate raw configuration data.

    Raises:
        ConfigValidationError: If any value is invalid
    """
    try:
        return ReleaseBossConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid configuration in {source}:\n{e}") from e


def load_config(
    project_path: Path | None = None,
    config_file: Path | None = None,
) -> ReleaseBossConfig:
    """Load configuration for a project.

    Args:
        project_path: Project root, defaults to the working directory
        config_file: Explicit configuration file; must exist when given

    Returns:
        Validated configuration

    Raises:
        ConfigNotFoundError: If ``config_file`` is given but missing
        ConfigValidationError: If the configuration is invalid
    """
    project_path = project_path or Path.cwd()
    path = config_file if config_file is not None else find_config_file(project_path)

    if path is None:
        log.info("no configuration found, using defaults", project=str(project_path))
        return ReleaseBossConfig()

    data = load_toml(path)
    if path.name == PYPROJECT:
        data = extract_tool_config(data)

    log.debug("loaded configuration", source=str(path))
    return parse_config(data, source=str(path))
