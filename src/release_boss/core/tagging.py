"""Release tag naming."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from release_boss.config.models import TaggingConfig
    from release_boss.core.version import Version

LATEST_TAG = "latest"


@dataclass(frozen=True)
class TagPlan:
    """Tags to point at a release commit.

    The primary tag is created once and never moved. Floating tags
    (``latest``, ``v1``, ``v1.2``) are moved to each new release.
    """

    primary: str
    floating: tuple[str, ...] = ()

    @property
    def all(self) -> list[str]:
        return [self.primary, *self.floating]


def plan_tags(version: Version, config: TaggingConfig, prefix: str = "v") -> TagPlan:
    floating: list[str] = []
    if config.tag_latest:
        floating.append(LATEST_TAG)
    if config.tag_major:
        floating.append(f"{prefix}{version.major}")
    if config.tag_minor:
        floating.append(f"{prefix}{version.major}.{version.minor}")
    return TagPlan(primary=f"{prefix}{version}", floating=tuple(floating))
