"""Configuration models for release-boss.

All models are pydantic v2 models with defaults matching a plain
``main`` -> ``release`` workflow. Keys may be written in snake_case or
kebab-case (``merge-branch``).
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_snake

from release_boss.core.templates import DEFAULT_MARKER_ID, marker_token
from release_boss.core.version import BumpType, Version


def _kebab(name: str) -> str:
    return to_snake(name).replace("_", "-")


class _Model(BaseModel):
    model_config = ConfigDict(
        alias_generator=_kebab,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )


class ChangelogSection(_Model):
    """Maps a commit type to a changelog heading."""

    type: str
    section: str
    hidden: bool = False


DEFAULT_SECTIONS: list[ChangelogSection] = [
    ChangelogSection(type="feat", section="Features"),
    ChangelogSection(type="fix", section="Bug Fixes"),
    ChangelogSection(type="perf", section="Performance Improvements"),
    ChangelogSection(type="refactor", section="Code Refactoring"),
    ChangelogSection(type="docs", section="Documentation"),
    ChangelogSection(type="test", section="Tests"),
    ChangelogSection(type="ci", section="Continuous Integration"),
    ChangelogSection(type="build", section="Build System"),
]


class ChangelogConfig(_Model):
    enabled: bool = True
    sections: list[ChangelogSection] = Field(default_factory=lambda: list(DEFAULT_SECTIONS))


class ChangelogTableConfig(_Model):
    """PR-description changelog table settings."""

    enabled: bool = True
    start_marker: str = "<!-- RELEASE_BOSS_CHANGELOG_START -->"
    end_marker: str = "<!-- RELEASE_BOSS_CHANGELOG_END -->"
    order: list[str] = Field(
        default_factory=lambda: [
            "feat",
            "fix",
            "perf",
            "refactor",
            "docs",
            "test",
            "ci",
            "build",
            "chore",
        ]
    )
    exclude_types: list[str] = Field(default_factory=lambda: ["chore"])
    require_scope: bool = False

    @model_validator(mode="after")
    def _markers_differ(self) -> ChangelogTableConfig:
        if self.start_marker == self.end_marker:
            raise ValueError("changelog table start and end markers must differ")
        return self


class VersionConfig(_Model):
    """How versions are read from tags and bumped.

    While the major version is 0 a breaking change only bumps the minor
    version. ``pre_1_0_minor_to_patch`` additionally turns ``feat`` bumps
    into patch bumps. It is off by default, unlike earlier release-boss
    versions that always did this: 0.4.0 plus a ``feat`` used to give
    0.4.1 and now gives 0.5.0.
    """

    tag_prefix: str = "v"
    initial_version: str = "0.0.0"
    pre_1_0_minor_to_patch: bool = False

    @field_validator("initial_version")
    @classmethod
    def _valid_version(cls, value: str) -> str:
        Version.parse(value)
        return value


class TemplatesConfig(_Model):
    """Files rewritten with the new version on every release."""

    marker_id: str = DEFAULT_MARKER_ID
    version_files: list[Path] = Field(default_factory=list)
    template_files: list[Path] = Field(default_factory=list)

    @field_validator("marker_id")
    @classmethod
    def _valid_marker(cls, value: str) -> str:
        marker_token(value)
        return value


class TaggingConfig(_Model):
    tag_latest: bool = True
    tag_major: bool = False
    tag_minor: bool = False


class GitHubConfig(_Model):
    owner: str | None = None
    repo: str | None = None
    api_url: str = "https://api.github.com"
    server_url: str = "https://github.com"
    timeout_s: float = 30.0

    @property
    def repo_url(self) -> str | None:
        if not (self.owner and self.repo):
            return None
        return f"{self.server_url.rstrip('/')}/{self.owner}/{self.repo}"


class ReleaseBossConfig(_Model):
    """Root configuration."""

    merge_branch: str = "main"
    staging_branch: str = "staging"
    release_branch: str = "release"
    delete_staging_branch: bool = True
    pull_request_title: str = "chore: release {version}"
    pull_request_header: str = "Release PR"
    changelog_path: Path = Path("CHANGELOG.md")
    release_as: BumpType | None = None

    version: VersionConfig = Field(default_factory=VersionConfig)
    templates: TemplatesConfig = Field(default_factory=TemplatesConfig)
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    changelog_table: ChangelogTableConfig = Field(default_factory=ChangelogTableConfig)
    tagging: TaggingConfig = Field(default_factory=TaggingConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)

    @field_validator("pull_request_title")
    @classmethod
    def _title_has_version(cls, value: str) -> str:
        if "{version}" not in value:
            raise ValueError("pull_request_title must contain a {version} placeholder")
        return value

    @field_validator("release_as")
    @classmethod
    def _release_as_bumps(cls, value: BumpType | None) -> BumpType | None:
        if value == BumpType.NONE:
            raise ValueError("release_as must be major, minor or patch")
        return value

    @model_validator(mode="after")
    def _distinct_branches(self) -> ReleaseBossConfig:
        if self.merge_branch == self.release_branch:
            raise ValueError("merge_branch and release_branch must differ")
        return self

    @property
    def effective_tag_prefix(self) -> str:
        return self.version.tag_prefix

    @property
    def initial_version(self) -> Version:
        return Version.parse(self.version.initial_version)

    @property
    def preserved_paths(self) -> list[Path]:
        """Files the release branch owns when reconciling a staging branch."""
        return [self.changelog_path, *self.templates.version_files]
