"""Version control access."""

from __future__ import annotations

from release_boss.vcs.git import GitRepository

__all__ = ["GitRepository"]
