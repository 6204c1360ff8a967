"""Tests for staging branch, release PR and tag management."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, call

import pytest

from release_boss.config.models import ReleaseBossConfig, TaggingConfig, TemplatesConfig
from release_boss.core.version import Version
from release_boss.exceptions import GitHubError, GitHubNotFoundError
from release_boss.github.pr_manager import ReleasePRManager

V = Version(1, 3, 0)


@pytest.fixture
def client() -> MagicMock:
    client = MagicMock()
    client.get_branch_sha.side_effect = lambda branch: {"main": "main-sha", "release": "rel-sha"}[
        branch
    ]
    return client


def _manager(client: MagicMock, **overrides) -> ReleasePRManager:
    return ReleasePRManager(client, ReleaseBossConfig(**overrides))


class TestStagingBranch:
    """Tests for staging branch preparation."""

    def test_creates_branch_and_merges(self, client):
        client.get_ref.return_value = None
        client.merge.return_value = "merge-sha"

        branch = _manager(client).prepare_staging_branch(V)

        assert branch == "staging-v1.3.0"
        client.create_ref.assert_called_once_with("heads/staging-v1.3.0", "rel-sha")
        assert client.merge.call_args.args[:2] == ("staging-v1.3.0", "main-sha")

    def test_existing_branch_refreshed(self, client):
        client.get_ref.return_value = "old-sha"
        client.merge.return_value = None

        _manager(client).prepare_staging_branch(V)

        client.create_ref.assert_not_called()
        client.merge.assert_called_once()

    def test_conflict_rebuilds_with_policy(self, client):
        """On conflict, release-owned files keep their release content."""
        client.get_ref.return_value = "old-sha"
        client.merge.side_effect = GitHubError("conflict", status=409)
        client.list_tree.return_value = ["CHANGELOG.md", "src/pkg/__init__.py", "src/pkg/core.py"]
        client.get_file.return_value = ("content", "blob")
        manager = _manager(
            client, templates=TemplatesConfig(version_files=[Path("src/pkg/__init__.py")])
        )

        manager.prepare_staging_branch(V)

        client.update_ref.assert_called_once_with("heads/staging-v1.3.0", "rel-sha", force=True)
        copied = [c.args[0] for c in client.put_file.call_args_list]
        assert copied == ["src/pkg/core.py"]

    def test_other_merge_errors_propagate(self, client):
        client.get_ref.return_value = "old-sha"
        client.merge.side_effect = GitHubError("server", status=500)

        with pytest.raises(GitHubError):
            _manager(client).prepare_staging_branch(V)

    def test_commit_files(self, client, tmp_path: Path):
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "v.py").write_text("V = '1.3.0'\n")

        committed = _manager(client).commit_files(
            "staging-v1.3.0", [tmp_path / "src" / "v.py"], tmp_path, V
        )

        assert committed == ["src/v.py"]
        client.put_file.assert_called_once_with(
            "src/v.py",
            "V = '1.3.0'\n",
            "chore: update src/v.py for release 1.3.0",
            "staging-v1.3.0",
        )

    def test_commit_files_keeps_crlf(self, client, tmp_path: Path):
        (tmp_path / "VERSION").write_bytes(b"# %%release-boss: {{version}}%%\r\n1.3.0\r\n")

        _manager(client).commit_files("staging-v1.3.0", [Path("VERSION")], tmp_path, V)

        content = client.put_file.call_args.args[1]
        assert content == "# %%release-boss: {{version}}%%\r\n1.3.0\r\n"

    def test_update_changelog_uses_release_base(self, client):
        client.get_file.return_value = ("# Changelog\n\n## 1.2.0\n", "blob")

        _manager(client).update_changelog("staging-v1.3.0", "## 1.3.0\n", V)

        client.get_file.assert_called_once_with("CHANGELOG.md", "release")
        content = client.put_file.call_args.args[1]
        assert content == "# Changelog\n\n## 1.3.0\n\n## 1.2.0\n"

    def test_delete_staging_branch(self, client):
        _manager(client).delete_staging_branch("staging-v1.3.0")
        client.delete_ref.assert_called_once_with("heads/staging-v1.3.0")

    def test_delete_disabled(self, client):
        _manager(client, delete_staging_branch=False).delete_staging_branch("staging-v1.3.0")
        client.delete_ref.assert_not_called()

    def test_delete_already_gone(self, client):
        client.delete_ref.side_effect = GitHubNotFoundError("gone", status=404)
        _manager(client).delete_staging_branch("staging-v1.3.0")


class TestPullRequest:
    """Tests for create_or_update_pr()."""

    def test_create(self, client, make_commit):
        client.find_open_pull.return_value = None
        client.create_pull.return_value = {"number": 9, "html_url": "u", "state": "open"}

        result = _manager(client).create_or_update_pr(
            V, "## 1.3.0\n", [make_commit("feat: a")], "staging-v1.3.0"
        )

        assert result.created
        assert result.number == 9
        title, body, head, base = client.create_pull.call_args.args
        assert title == "chore: release 1.3.0"
        assert (head, base) == ("staging-v1.3.0", "release")
        assert body.startswith("Release PR\n\n<!-- RELEASE_BOSS_CHANGELOG_START -->")
        assert "## 1.3.0" in body

    def test_update_keeps_table_rows(self, client, make_commit):
        """Rows from the previous description survive an update."""
        manager = _manager(client)
        old_commit = make_commit("fix: old")
        previous = manager.build_pr_body("## 1.2.1\n", [old_commit])
        client.find_open_pull.return_value = {"number": 9, "body": previous}
        client.update_pull.return_value = {"number": 9, "html_url": "u", "state": "open"}

        result = manager.create_or_update_pr(V, "## 1.3.0\n", [make_commit("feat: new")], "b")

        assert not result.created
        body = client.update_pull.call_args.kwargs["body"]
        assert old_commit.short_hash in body
        assert "| feat |" in body
        assert client.update_pull.call_args.kwargs["title"] == "chore: release 1.3.0"

    def test_table_disabled(self, client):
        manager = ReleasePRManager(
            client, ReleaseBossConfig.model_validate({"changelog_table": {"enabled": False}})
        )
        assert manager.build_pr_body("## 1.3.0", []) == "Release PR\n\n## 1.3.0\n"


class TestTagRelease:
    """Tests for tag_release()."""

    def test_creates_primary_and_floating(self, client):
        client.get_ref.return_value = None
        config = ReleaseBossConfig(tagging=TaggingConfig(tag_major=True))

        result = ReleasePRManager(client, config).tag_release(V, "merge-sha")

        assert result.tags == ["v1.3.0", "latest", "v1"]
        assert result.failed == []
        assert result.sha == "merge-sha"
        client.create_ref.assert_has_calls(
            [
                call("tags/v1.3.0", "merge-sha"),
                call("tags/latest", "merge-sha"),
                call("tags/v1", "merge-sha"),
            ]
        )

    def test_existing_tag_not_moved(self, client):
        refs = {"tags/v1.3.0": "tagged", "tags/latest": "x"}
        client.get_ref.side_effect = refs.get

        result = _manager(client).tag_release(V, "merge-sha")

        assert result.sha == "tagged"
        client.create_ref.assert_not_called()
        client.update_ref.assert_called_once_with("tags/latest", "tagged", force=True)

    def test_defaults_to_release_branch_head(self, client):
        client.get_ref.return_value = None
        result = _manager(client).tag_release(V)
        assert result.sha == "rel-sha"

    def test_floating_failure_reported(self, client):
        client.get_ref.return_value = None
        client.create_ref.side_effect = [None, GitHubError("denied", status=422)]

        result = _manager(client).tag_release(V, "sha")

        assert result.tags == ["v1.3.0"]
        assert result.failed == ["latest"]
