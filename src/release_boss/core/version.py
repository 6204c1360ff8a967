"""Semantic version parsing and manipulation.

Versions are plain ``MAJOR.MINOR.PATCH`` triples with an optional
pre-release suffix. The suffix is carried along but not interpreted:
ordering looks at the numeric triple only.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import ClassVar

from release_boss.exceptions import VersionParseError

_VERSION_RE = re.compile(
    r"^[vV]?(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>[0-9A-Za-z.-]+))?"
    r"(?:\+[0-9A-Za-z.-]+)?$"
)


class BumpType(StrEnum):
    """Kind of version increment, ordered by severity."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    NONE = "none"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {
    BumpType.NONE: 0,
    BumpType.PATCH: 1,
    BumpType.MINOR: 2,
    BumpType.MAJOR: 3,
}


def max_bump(a: BumpType, b: BumpType) -> BumpType:
    """Return the more severe of two bump types.

    >>> max_bump(BumpType.MINOR, BumpType.PATCH)
    <BumpType.MINOR: 'minor'>
    """
    return a if a.severity >= b.severity else b


@dataclass(frozen=True, order=True)
class Version:
    """A semantic version.

    Comparison is lexicographic over (major, minor, patch); the
    pre-release suffix does not take part in ordering.
    """

    major: int
    minor: int
    patch: int
    prerelease: str | None = field(default=None, compare=False)

    ZERO: ClassVar[Version]

    def __post_init__(self) -> None:
        if min(self.major, self.minor, self.patch) < 0:
            raise VersionParseError(f"Version components must be non-negative: {self!r}")

    @classmethod
    def parse(cls, value: str) -> Version:
        """Parse a version string such as ``1.2.3``, ``v0.4.0`` or ``2.0.0-rc.1``.

        Args:
            value: Version string, optionally prefixed with ``v``

        Returns:
            Parsed Version

        Raises:
            VersionParseError: If the string is not a semantic version
        """
        match = _VERSION_RE.match(value.strip())
        if not match:
            raise VersionParseError(f"Invalid semantic version: {value!r}")
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            prerelease=match.group("prerelease"),
        )

    @classmethod
    def try_parse(cls, value: str) -> Version | None:
        """Parse a version string, returning None instead of raising."""
        try:
            return cls.parse(value)
        except VersionParseError:
            return None

    def bump(self, bump_type: BumpType) -> Version:
        """Return the next version for the given bump type.

        A bump always drops the pre-release suffix. ``BumpType.NONE``
        returns the version unchanged.
        """
        if bump_type == BumpType.MAJOR:
            return Version(self.major + 1, 0, 0)
        if bump_type == BumpType.MINOR:
            return Version(self.major, self.minor + 1, 0)
        if bump_type == BumpType.PATCH:
            return Version(self.major, self.minor, self.patch + 1)
        return self

    @property
    def core(self) -> str:
        """The ``M.m.p`` triple without any pre-release suffix."""
        return f"{self.major}.{self.minor}.{self.patch}"

    @property
    def is_pre_1_0(self) -> bool:
        return self.major == 0

    def __str__(self) -> str:
        if self.prerelease:
            return f"{self.core}-{self.prerelease}"
        return self.core


Version.ZERO = Version(0, 0, 0)


def parse_version(value: str) -> Version:
    """Parse a version string. See :meth:`Version.parse`."""
    return Version.parse(value)


def strip_tag_prefix(tag: str, prefix: str = "v") -> str:
    """Remove a tag prefix (``v1.2.3`` -> ``1.2.3``) if present."""
    if prefix and tag.startswith(prefix):
        return tag[len(prefix) :]
    return tag


def latest_version(tags: list[str], prefix: str = "v") -> Version | None:
    """Return the highest semantic version among tag names.

    Tags that do not parse as versions are ignored.

    Args:
        tags: Tag names, e.g. ``["v1.0.0", "latest", "v1.2.0"]``
        prefix: Tag prefix to strip before parsing

    Returns:
        Highest version found, or None if no tag is a version
    """
    versions = [
        v for v in (Version.try_parse(strip_tag_prefix(t, prefix)) for t in tags) if v is not None
    ]
    return max(versions, default=None)
