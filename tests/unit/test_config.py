"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from release_boss.config.loader import (
    extract_tool_config,
    find_config_file,
    find_pyproject_toml,
    load_config,
    load_toml,
    parse_config,
)
from release_boss.config.models import (
    ChangelogTableConfig,
    GitHubConfig,
    ReleaseBossConfig,
    TemplatesConfig,
)
from release_boss.core.version import BumpType, Version
from release_boss.exceptions import ConfigNotFoundError, ConfigValidationError


class TestReleaseBossConfig:
    """Tests for ReleaseBossConfig model."""

    def test_default_config(self):
        """Default configuration has sensible values."""
        config = ReleaseBossConfig()

        assert config.merge_branch == "main"
        assert config.staging_branch == "staging"
        assert config.release_branch == "release"
        assert config.pull_request_title == "chore: release {version}"
        assert config.changelog_path == Path("CHANGELOG.md")
        assert config.release_as is None

    def test_nested_defaults(self):
        """Nested configurations have defaults."""
        config = ReleaseBossConfig()

        assert config.effective_tag_prefix == "v"
        assert config.initial_version == Version(0, 0, 0)
        assert config.version.pre_1_0_minor_to_patch is False
        assert config.templates.marker_id == "release-boss"
        assert config.tagging.tag_latest is True
        assert config.changelog.sections[0].type == "feat"

    def test_kebab_case_keys(self):
        config = parse_config({"merge-branch": "develop", "version": {"tag-prefix": "rel-"}})

        assert config.merge_branch == "develop"
        assert config.effective_tag_prefix == "rel-"

    def test_unknown_key_rejected(self):
        with pytest.raises(ConfigValidationError, match="unknown_key"):
            parse_config({"unknown_key": 1})

    def test_title_requires_placeholder(self):
        with pytest.raises(ConfigValidationError, match="placeholder"):
            parse_config({"pull_request_title": "Release"})

    def test_same_branches_rejected(self):
        with pytest.raises(ConfigValidationError, match="must differ"):
            parse_config({"merge_branch": "main", "release_branch": "main"})

    def test_release_as(self):
        assert parse_config({"release_as": "minor"}).release_as == BumpType.MINOR
        with pytest.raises(ConfigValidationError):
            parse_config({"release_as": "none"})

    def test_invalid_initial_version(self):
        with pytest.raises(ConfigValidationError):
            parse_config({"version": {"initial_version": "one"}})

    def test_invalid_marker_id(self):
        with pytest.raises(ConfigValidationError):
            parse_config({"templates": {"marker_id": "bad id"}})

    def test_table_markers_differ(self):
        with pytest.raises(ValueError):
            ChangelogTableConfig(start_marker="<!-- X -->", end_marker="<!-- X -->")

    def test_preserved_paths(self):
        config = ReleaseBossConfig(
            templates=TemplatesConfig(version_files=[Path("src/pkg/__init__.py")])
        )
        assert config.preserved_paths == [Path("CHANGELOG.md"), Path("src/pkg/__init__.py")]

    def test_repo_url(self):
        assert GitHubConfig().repo_url is None
        assert GitHubConfig(owner="acme", repo="w").repo_url == "https://github.com/acme/w"


class TestLoader:
    """Tests for config file discovery and loading."""

    def test_defaults_without_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        # A pyproject.toml further up the tree would be picked up otherwise.
        monkeypatch.setattr("release_boss.config.loader.find_config_file", lambda path: None)

        assert load_config(tmp_path) == ReleaseBossConfig()

    def test_standalone_file(self, tmp_path: Path):
        (tmp_path / "release-boss.toml").write_text('merge_branch = "trunk"\n')
        (tmp_path / "pyproject.toml").write_text('[tool.release-boss]\nmerge_branch = "main"\n')

        assert load_config(tmp_path).merge_branch == "trunk"

    def test_hidden_standalone_file(self, tmp_path: Path):
        (tmp_path / ".release-boss.toml").write_text('release_branch = "stable"\n')
        assert find_config_file(tmp_path) == tmp_path / ".release-boss.toml"

    def test_pyproject_tool_table(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text(
            "[project]\nname = 'x'\n\n"
            "[tool.release-boss]\n"
            'staging-branch = "next"\n\n'
            "[tool.release-boss.templates]\n"
            'version-files = ["src/x/__init__.py"]\n'
        )

        config = load_config(tmp_path)

        assert config.staging_branch == "next"
        assert config.templates.version_files == [Path("src/x/__init__.py")]

    def test_pyproject_without_table(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text("[project]\nname = 'x'\n")
        assert load_config(tmp_path) == ReleaseBossConfig()

    def test_explicit_file_missing(self, tmp_path: Path):
        with pytest.raises(ConfigNotFoundError):
            load_config(tmp_path, tmp_path / "nope.toml")

    def test_invalid_toml(self, tmp_path: Path):
        path = tmp_path / "release-boss.toml"
        path.write_text("merge_branch = \n")

        with pytest.raises(ConfigValidationError, match="Invalid TOML"):
            load_toml(path)

    def test_find_pyproject_upwards(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text("")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        assert find_pyproject_toml(nested) == tmp_path / "pyproject.toml"

    def test_extract_tool_config(self):
        assert extract_tool_config({"tool": {"release-boss": {"a": 1}}}) == {"a": 1}
        assert extract_tool_config({}) == {}
