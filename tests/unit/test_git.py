"""Tests for the local git wrapper."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from release_boss.core.version import Version
from release_boss.exceptions import GitError
from release_boss.vcs.git import GitRepository

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def _git(path: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=path, check=True, capture_output=True)


def _commit(path: Path, message: str) -> None:
    (path / "file.txt").write_text(message)
    _git(path, "add", "file.txt")
    _git(path, "commit", "-q", "-m", message)


@pytest.fixture
def repo_path(tmp_path: Path) -> Path:
    _git(tmp_path, "init", "-q", "-b", "main")
    _git(tmp_path, "config", "user.email", "dev@example.com")
    _git(tmp_path, "config", "user.name", "Dev")
    _git(tmp_path, "config", "commit.gpgsign", "false")
    _git(tmp_path, "config", "tag.gpgsign", "false")
    return tmp_path


class TestGitRepository:
    """Tests for GitRepository."""

    def test_not_a_repo(self, tmp_path: Path):
        with pytest.raises(GitError, match="Not a git repository"):
            GitRepository(tmp_path)

    def test_commits_since_tag(self, repo_path: Path):
        """Commits after the latest tag come back oldest first."""
        _commit(repo_path, "feat: initial")
        _git(repo_path, "tag", "v0.1.0")
        _commit(repo_path, "fix: one")
        _commit(repo_path, "feat(api): two\n\nBREAKING CHANGE: new shape")

        repo = GitRepository(repo_path)
        latest = repo.get_latest_version()

        assert latest == (Version(0, 1, 0), "v0.1.0")
        commits = repo.get_commits(latest[1])
        assert [c.subject for c in commits] == ["one", "two"]
        assert commits[1].breaking_notes == frozenset({"new shape"})
        assert commits[0].author == "Dev"
        assert len(commits[0].hash) == 40

    def test_all_history(self, repo_path: Path):
        _commit(repo_path, "feat: a")
        _commit(repo_path, "fix: b")

        commits = GitRepository(repo_path).get_commits(None)

        assert [c.type for c in commits] == ["feat", "fix"]

    def test_latest_version_ignores_other_tags(self, repo_path: Path):
        _commit(repo_path, "feat: a")
        for tag in ("v1.2.0", "v1.10.0", "latest", "v1"):
            _git(repo_path, "tag", tag)

        assert GitRepository(repo_path).get_latest_version() == (Version(1, 10, 0), "v1.10.0")

    def test_no_version_tags(self, repo_path: Path):
        _commit(repo_path, "feat: a")
        assert GitRepository(repo_path).get_latest_version() is None

    def test_is_dirty(self, repo_path: Path):
        _commit(repo_path, "feat: a")
        repo = GitRepository(repo_path)
        assert not repo.is_dirty()

        (repo_path / "new.txt").write_text("x")
        assert repo.is_dirty()

    def test_bad_range(self, repo_path: Path):
        _commit(repo_path, "feat: a")
        with pytest.raises(GitError) as exc_info:
            GitRepository(repo_path).get_commits("does-not-exist")
        assert exc_info.value.stderr
