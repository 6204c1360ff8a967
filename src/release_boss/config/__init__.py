"""Configuration management for release-boss."""

from __future__ import annotations

from release_boss.config.loader import load_config
from release_boss.config.models import (
    ChangelogConfig,
    ChangelogSection,
    ChangelogTableConfig,
    GitHubConfig,
    ReleaseBossConfig,
    TaggingConfig,
    TemplatesConfig,
    VersionConfig,
)

__all__ = [
    "ChangelogConfig",
    "ChangelogSection",
    "ChangelogTableConfig",
    "GitHubConfig",
    "ReleaseBossConfig",
    "TaggingConfig",
    "TemplatesConfig",
    "VersionConfig",
    "load_config",
]
