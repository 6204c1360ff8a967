"""Tests for semantic version handling."""

from __future__ import annotations

import pytest

from release_boss.core.version import (
    BumpType,
    Version,
    latest_version,
    max_bump,
    parse_version,
    strip_tag_prefix,
)
from release_boss.exceptions import VersionParseError


class TestVersionParse:
    """Tests for Version.parse()."""

    def test_parse_plain(self):
        """Parse a plain version triple."""
        v = Version.parse("1.2.3")

        assert (v.major, v.minor, v.patch) == (1, 2, 3)
        assert v.prerelease is None

    def test_parse_v_prefix(self):
        """A leading v is accepted."""
        assert Version.parse("v0.4.0") == Version(0, 4, 0)

    def test_parse_prerelease(self):
        """Pre-release suffix is kept."""
        v = Version.parse("2.0.0-rc.1")

        assert v.prerelease == "rc.1"
        assert str(v) == "2.0.0-rc.1"

    def test_parse_build_metadata_dropped(self):
        """Build metadata parses but is not kept."""
        assert str(Version.parse("1.0.0+build.5")) == "1.0.0"

    @pytest.mark.parametrize("value", ["1.2", "1.2.3.4", "01.2.3", "latest", "", "v"])
    def test_parse_invalid(self, value):
        """Invalid strings raise VersionParseError."""
        with pytest.raises(VersionParseError):
            Version.parse(value)

    def test_parse_error_is_value_error(self):
        """VersionParseError can be caught as ValueError."""
        with pytest.raises(ValueError):
            parse_version("nope")

    def test_try_parse(self):
        """try_parse returns None instead of raising."""
        assert Version.try_parse("nope") is None
        assert Version.try_parse("1.0.0") == Version(1, 0, 0)


class TestVersionBump:
    """Tests for Version.bump()."""

    def test_bump_major(self):
        assert Version(1, 2, 3).bump(BumpType.MAJOR) == Version(2, 0, 0)

    def test_bump_minor(self):
        assert Version(1, 2, 3).bump(BumpType.MINOR) == Version(1, 3, 0)

    def test_bump_patch(self):
        assert Version(1, 2, 3).bump(BumpType.PATCH) == Version(1, 2, 4)

    def test_bump_none(self):
        """NONE returns the same version."""
        v = Version(1, 2, 3)
        assert v.bump(BumpType.NONE) is v

    def test_bump_drops_prerelease(self):
        """Bumping drops the pre-release suffix."""
        bumped = Version.parse("1.2.3-beta").bump(BumpType.PATCH)

        assert bumped.prerelease is None
        assert str(bumped) == "1.2.4"


class TestVersionOrdering:
    """Tests for version comparison."""

    def test_numeric_ordering(self):
        """Components compare numerically, not as strings."""
        assert Version.parse("0.10.0") > Version.parse("0.9.5")

    def test_prerelease_ignored(self):
        """Ordering ignores the pre-release suffix."""
        assert Version.parse("1.0.0-rc.1") == Version.parse("1.0.0")

    def test_is_pre_1_0(self):
        assert Version(0, 9, 9).is_pre_1_0
        assert not Version(1, 0, 0).is_pre_1_0

    def test_negative_components_rejected(self):
        with pytest.raises(VersionParseError):
            Version(-1, 0, 0)


class TestBumpType:
    """Tests for BumpType precedence."""

    def test_max_bump(self):
        """The more severe bump wins."""
        assert max_bump(BumpType.PATCH, BumpType.MINOR) == BumpType.MINOR
        assert max_bump(BumpType.MAJOR, BumpType.MINOR) == BumpType.MAJOR
        assert max_bump(BumpType.NONE, BumpType.NONE) == BumpType.NONE

    def test_severity_order(self):
        ordered = sorted(BumpType, key=lambda b: b.severity)
        assert ordered == [BumpType.NONE, BumpType.PATCH, BumpType.MINOR, BumpType.MAJOR]


class TestTags:
    """Tests for tag helpers."""

    def test_strip_tag_prefix(self):
        assert strip_tag_prefix("v1.2.3") == "1.2.3"
        assert strip_tag_prefix("1.2.3") == "1.2.3"
        assert strip_tag_prefix("release-1.2.3", "release-") == "1.2.3"

    def test_latest_version(self):
        """Highest version wins; non-version tags are ignored."""
        tags = ["v1.0.0", "latest", "v1.10.0", "v1.9.0", "v1"]
        assert latest_version(tags) == Version(1, 10, 0)

    def test_latest_version_none(self):
        assert latest_version(["latest", "nightly"]) is None
        assert latest_version([]) is None
