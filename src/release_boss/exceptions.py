"""Exception hierarchy for release-boss.

All errors raised by release-boss derive from ReleaseBossError so callers
can catch the whole family with a single handler.
"""

from __future__ import annotations

from pathlib import Path


class ReleaseBossError(Exception):
    """Base class for all release-boss errors."""


# =============================================================================
# Configuration
# =============================================================================


class ConfigError(ReleaseBossError):
    """Configuration could not be loaded."""


class ConfigNotFoundError(ConfigError):
    """No configuration file was found."""


class ConfigValidationError(ConfigError):
    """Configuration values are invalid."""


# =============================================================================
# Versions
# =============================================================================


class VersionParseError(ReleaseBossError, ValueError):
    """A string is not a valid semantic version."""


# =============================================================================
# Templates
# =============================================================================


class TemplateError(ReleaseBossError):
    """Template processing failed."""


class TemplateWriteError(TemplateError):
    """Writing a rendered file failed, aborting the batch.

    Attributes:
        written: Paths successfully written before the failure
        failed: Path whose write failed
    """

    def __init__(self, message: str, *, written: list[Path], failed: Path) -> None:
        super().__init__(message)
        self.written = list(written)
        self.failed = failed

    def __str__(self) -> str:
        done = ", ".join(str(p) for p in self.written) or "none"
        return f"{self.args[0]} (failed: {self.failed}; written before failure: {done})"


# =============================================================================
# VCS / GitHub
# =============================================================================


class GitError(ReleaseBossError):
    """A git command failed."""

    def __init__(self, message: str, *, stderr: str | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr


class GitHubError(ReleaseBossError):
    """A GitHub API request failed."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class GitHubAuthError(GitHubError):
    """GitHub rejected the credentials or none were provided."""


class GitHubNotFoundError(GitHubError):
    """The requested GitHub resource does not exist."""


class ReleaseError(ReleaseBossError):
    """The release workflow cannot continue."""
