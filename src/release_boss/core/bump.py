"""Version bump decisions.

Turns a list of commits and the current version into the next version:
aggregate the commit bumps, apply an optional ``release_as`` override,
dampen bumps while the project is still pre-1.0 and increment.

A manual ``/bump major|minor`` command is resolved separately by
:func:`apply_manual_bump_command` just before tagging.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from release_boss.core.commits import aggregate_bump
from release_boss.core.version import BumpType, Version

if TYPE_CHECKING:
    from collections.abc import Iterable

    from release_boss.core.commits import CommitRecord

MANUAL_BUMP_KINDS = frozenset({BumpType.MAJOR, BumpType.MINOR})


class ReleaseState(StrEnum):
    """Stages a release moves through across action runs."""

    ANALYZING = "analyzing"
    BUMP_DETERMINED = "bump_determined"
    IDLE = "idle"
    FILES_RENDERED = "files_rendered"
    PR_OPEN = "pr_open"
    PR_MERGED = "pr_merged"
    TAGGED = "tagged"


@dataclass(frozen=True)
class BumpDecision:
    """Outcome of :func:`determine_version_bump`.

    Attributes:
        bump_type: Bump derived from commits (or the override)
        current_version: Version before the bump
        new_version: Version after the bump
        applied_bump: Bump actually applied after pre-1.0 dampening
    """

    bump_type: BumpType
    current_version: Version
    new_version: Version
    applied_bump: BumpType

    @property
    def is_release(self) -> bool:
        return self.bump_type != BumpType.NONE

    @property
    def was_dampened(self) -> bool:
        return self.applied_bump != self.bump_type


def dampen_pre_1_0(
    bump_type: BumpType,
    current_version: Version,
    *,
    dampen_minor: bool = False,
) -> BumpType:
    """Reduce a bump by one step while the major version is 0.

    ``major`` becomes ``minor``. With ``dampen_minor`` set, ``minor``
    becomes ``patch`` too. The check looks at the version *before* the
    bump, so automatic bumping never crosses 1.0.0.
    """
    if not current_version.is_pre_1_0:
        return bump_type
    if bump_type == BumpType.MAJOR:
        return BumpType.MINOR
    if bump_type == BumpType.MINOR and dampen_minor:
        return BumpType.PATCH
    return bump_type


def determine_version_bump(
    commits: Iterable[CommitRecord],
    current_version: Version,
    *,
    release_as: BumpType | None = None,
    dampen_minor: bool = False,
) -> BumpDecision:
    """Decide the next version from a set of commits.

    Args:
        commits: Commits in the release range (excluded ones are dropped)
        current_version: Latest released version, ``0.0.0`` if none
        release_as: Bump type that replaces the commit-derived one
        dampen_minor: Also turn ``minor`` into ``patch`` before 1.0.0

    Returns:
        BumpDecision with the current and new versions
    """
    bump_type = aggregate_bump(commits)
    if release_as is not None:
        bump_type = release_as

    if bump_type == BumpType.NONE:
        return BumpDecision(
            bump_type=BumpType.NONE,
            current_version=current_version,
            new_version=current_version,
            applied_bump=BumpType.NONE,
        )

    applied = dampen_pre_1_0(bump_type, current_version, dampen_minor=dampen_minor)
    return BumpDecision(
        bump_type=bump_type,
        current_version=current_version,
        new_version=current_version.bump(applied),
        applied_bump=applied,
    )


def apply_manual_bump_command(current_version: Version, requested: BumpType) -> Version:
    """Apply a ``/bump major`` or ``/bump minor`` command.

    The command is idempotent: a version already sitting on the requested
    boundary (``x.y.0`` for minor, ``x.0.0`` for major) is returned as is.

    Args:
        current_version: Version the release PR currently targets
        requested: ``BumpType.MAJOR`` or ``BumpType.MINOR``

    Returns:
        The version to tag

    Raises:
        ValueError: If ``requested`` is not major or minor
    """
    if requested not in MANUAL_BUMP_KINDS:
        raise ValueError(f"Manual bump must be 'major' or 'minor', got {requested!r}")

    if requested == BumpType.MINOR and current_version.patch == 0:
        return current_version
    if requested == BumpType.MAJOR and current_version.minor == 0 and current_version.patch == 0:
        return current_version
    return current_version.bump(requested)
