"""Shared fixtures for release-boss tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from release_boss.config.models import ReleaseBossConfig
from release_boss.core.commits import CommitRecord


@pytest.fixture
def make_commit() -> Callable[..., CommitRecord]:
    """Build CommitRecords from messages with generated SHAs."""
    counter = iter(range(1, 10_000))

    def _make(message: str, **kwargs: str | None) -> CommitRecord:
        sha = f"{next(counter):07x}" + "0" * 33
        return CommitRecord.from_message(sha, message, **kwargs)

    return _make


@pytest.fixture
def config() -> ReleaseBossConfig:
    return ReleaseBossConfig()
