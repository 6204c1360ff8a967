"""Local git repository access.

Thin wrapper over the ``git`` command line used by the local CLI
commands. Commits come out as :class:`CommitRecord` so they feed the
same decision engine as commits fetched from GitHub.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from release_boss.core.commits import CommitRecord
from release_boss.core.version import Version, latest_version
from release_boss.exceptions import GitError

# Unit and record separators keep multi-line messages intact.
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = f"%H{_FIELD_SEP}%an{_FIELD_SEP}%B{_RECORD_SEP}"


class GitRepository:
    """A git working copy on disk."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).resolve()
        try:
            top = self._run("rev-parse", "--show-toplevel")
        except GitError as e:
            raise GitError(f"Not a git repository: {self.path}", stderr=e.stderr) from e
        self.root = Path(top)

    def _run(self, *args: str) -> str:
        try:
            result = subprocess.run(
                ["git", *args],
                capture_output=True,
                text=True,
                check=True,
                cwd=self.path,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e
        except subprocess.CalledProcessError as e:
            raise GitError(
                f"git {' '.join(args)} failed with exit code {e.returncode}",
                stderr=e.stderr,
            ) from e
        return result.stdout.strip()

    def is_dirty(self) -> bool:
        return bool(self._run("status", "--porcelain"))

    def list_tags(self, pattern: str | None = None) -> list[str]:
        args = ["tag", "--list"]
        if pattern:
            args.append(pattern)
        return [t for t in self._run(*args).splitlines() if t]

    def get_latest_version(self, prefix: str = "v") -> tuple[Version, str] | None:
        """Highest semantic version among the repository's tags.

        Returns:
            ``(version, tag)`` or None when no tag is a version
        """
        tags = self.list_tags()
        best = latest_version(tags, prefix)
        if best is None:
            return None
        for tag in tags:
            if Version.try_parse(tag.removeprefix(prefix)) == best:
                return best, tag
        return None

    def get_commits(self, base: str | None, head: str = "HEAD") -> list[CommitRecord]:
        """Commits reachable from ``head`` but not ``base``, oldest first.

        Args:
            base: Exclusive start of the range; None means all history
            head: Inclusive end of the range
        """
        rev_range = f"{base}..{head}" if base else head
        output = self._run("log", "--reverse", f"--format={_LOG_FORMAT}", rev_range)
        commits = []
        for record in output.split(_RECORD_SEP):
            record = record.strip("\n")
            if not record:
                continue
            sha, author, message = record.split(_FIELD_SEP, 2)
            commits.append(CommitRecord.from_message(sha, message.strip(), author=author))
        return commits
