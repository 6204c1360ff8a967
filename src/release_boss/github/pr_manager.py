"""Staging branch, release PR and tag management.

A release is prepared on a staging branch ``<staging>-v<version>`` cut
from the release branch with the merge branch merged in. Rendered
version files and the changelog are committed there and a PR into the
release branch is opened (or refreshed on later runs). Once that PR is
merged, the release commit is tagged.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from release_boss.core import changelog_table
from release_boss.core.changelog import prepend_changelog
from release_boss.core.commands import format_pr_title, staging_branch_name
from release_boss.core.reconcile import FileSource, ReconcilePolicy
from release_boss.core.tagging import TagPlan, plan_tags
from release_boss.core.templates import LocalFileSystem
from release_boss.exceptions import GitHubError, GitHubNotFoundError
from release_boss.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from release_boss.config.models import ReleaseBossConfig
    from release_boss.core.commits import CommitRecord
    from release_boss.core.version import Version
    from release_boss.github.client import GitHubClient

log = get_logger(__name__)

MERGE_CONFLICT = 409


@dataclass(frozen=True)
class PullRequestResult:
    number: int
    url: str
    status: str
    branch: str
    created: bool


@dataclass(frozen=True)
class TagResult:
    sha: str
    tags: list[str]
    failed: list[str]


class ReleasePRManager:
    """Drives the staging branch / PR / tag lifecycle on GitHub."""

    def __init__(self, client: GitHubClient, config: ReleaseBossConfig) -> None:
        self.client = client
        self.config = config
        self.policy = ReconcilePolicy.from_preserved(config.preserved_paths)

    # -- staging branch -----------------------------------------------------

    def staging_branch(self, version: Version) -> str:
        return staging_branch_name(self.config.staging_branch, str(version))

    def prepare_staging_branch(self, version: Version) -> str:
        """Create or refresh the staging branch for ``version``.

        Returns:
            Name of the staging branch
        """
        cfg = self.config
        branch = self.staging_branch(version)
        merge_sha = self.client.get_branch_sha(cfg.merge_branch)
        release_sha = self.client.get_branch_sha(cfg.release_branch)

        if self.client.get_ref(f"heads/{branch}") is None:
            log.info("creating staging branch", branch=branch, base=cfg.release_branch)
            self.client.create_ref(f"heads/{branch}", release_sha)
        else:
            log.info("staging branch exists, refreshing", branch=branch)

        message = f"Merge {cfg.merge_branch} into {branch} for release {version}"
        try:
            merged = self.client.merge(branch, merge_sha, message)
        except GitHubError as e:
            if e.status != MERGE_CONFLICT:
                raise
            log.warning("merge conflict, rebuilding staging branch", branch=branch)
            self.rebuild_staging_branch(branch, release_sha, merge_sha, version)
        else:
            if merged:
                log.info("merged into staging branch", branch=branch, sha=merged[:7])
            else:
                log.info("staging branch already up to date", branch=branch)
        return branch

    def rebuild_staging_branch(
        self, branch: str, release_sha: str, merge_sha: str, version: Version
    ) -> None:
        """Reset ``branch`` to the release branch and copy files per policy.

        Release-owned files keep their release branch content; every
        other file is taken from the merge branch.
        """
        cfg = self.config
        self.client.update_ref(f"heads/{branch}", release_sha, force=True)
        log.info(
            "reset staging branch",
            branch=branch,
            to=cfg.release_branch,
            preserved=self.policy.release_owned(),
        )

        for path in self.client.list_tree(merge_sha):
            if self.policy.source_for(path) == FileSource.RELEASE:
                continue
            found = self.client.get_file(path, cfg.merge_branch)
            if found is None:
                continue
            self.client.put_file(
                path,
                found[0],
                f"chore: update {path} from {cfg.merge_branch} for release {version}",
                branch,
            )

    def commit_files(
        self, branch: str, paths: Iterable[Path], root: Path, version: Version
    ) -> list[str]:
        """Commit local files to the staging branch.

        Args:
            branch: Target branch
            paths: Local files, absolute or relative to ``root``
            root: Repository root on disk
            version: Release version, for commit messages

        Returns:
            Repository paths that were committed
        """
        committed = []
        for path in paths:
            local = path if path.is_absolute() else root / path
            repo_path = local.resolve().relative_to(root.resolve()).as_posix()
            content = LocalFileSystem().read_text(local)
            self.client.put_file(
                repo_path, content, f"chore: update {repo_path} for release {version}", branch
            )
            committed.append(repo_path)
        log.info("committed release files", branch=branch, files=committed)
        return committed

    def update_changelog(self, branch: str, section: str, version: Version) -> None:
        """Prepend ``section`` to the changelog on ``branch``.

        The release branch copy is the base so repeated runs do not stack
        sections for the same release.
        """
        path = self.config.changelog_path.as_posix()
        found = self.client.get_file(path, self.config.release_branch)
        if found is None:
            found = self.client.get_file(path, branch)
        existing = found[0] if found else None
        self.client.put_file(
            path,
            prepend_changelog(existing, section),
            f"chore: update changelog for release {version}",
            branch,
        )

    # -- pull request -------------------------------------------------------

    def build_pr_body(
        self, changelog: str, commits: Sequence[CommitRecord], previous_body: str | None = None
    ) -> str:
        cfg = self.config
        body = f"{cfg.pull_request_header}\n\n{changelog}".rstrip() + "\n"
        table_cfg = cfg.changelog_table
        if not table_cfg.enabled:
            return body

        old_table = changelog_table.extract_table(previous_body, table_cfg)
        if old_table:
            body = (
                f"{cfg.pull_request_header}\n\n"
                f"{table_cfg.start_marker}\n{old_table}\n{table_cfg.end_marker}\n\n"
                f"{changelog}"
            )
        return changelog_table.update_description(body, commits, table_cfg)

    def create_or_update_pr(
        self,
        version: Version,
        changelog: str,
        commits: Sequence[CommitRecord],
        branch: str,
    ) -> PullRequestResult:
        """Open the release PR, or refresh title and body of the open one."""
        cfg = self.config
        title = format_pr_title(cfg.pull_request_title, str(version))
        existing = self.client.find_open_pull(branch, cfg.release_branch)

        if existing is not None:
            body = self.build_pr_body(changelog, commits, existing.get("body"))
            pr = self.client.update_pull(existing["number"], title=title, body=body)
            log.info("updated release PR", number=pr["number"], version=str(version))
            created = False
        else:
            body = self.build_pr_body(changelog, commits)
            pr = self.client.create_pull(title, body, branch, cfg.release_branch)
            log.info("opened release PR", number=pr["number"], version=str(version))
            created = True

        return PullRequestResult(
            number=pr["number"],
            url=pr.get("html_url", ""),
            status=pr.get("state", "open"),
            branch=branch,
            created=created,
        )

    def delete_staging_branch(self, branch: str) -> None:
        if not self.config.delete_staging_branch:
            return
        try:
            self.client.delete_ref(f"heads/{branch}")
        except GitHubNotFoundError:
            log.debug("staging branch already gone", branch=branch)
        else:
            log.info("deleted staging branch", branch=branch)

    # -- tags ---------------------------------------------------------------

    def tag_release(self, version: Version, sha: str | None = None) -> TagResult:
        """Create the release tag and move floating tags to it.

        An existing primary tag is left where it is and its commit is used
        for the floating tags. A floating tag that cannot be moved is
        reported in ``failed`` without stopping the others.
        """
        cfg = self.config
        plan: TagPlan = plan_tags(version, cfg.tagging, cfg.effective_tag_prefix)

        existing = self.client.get_ref(f"tags/{plan.primary}")
        if existing is not None:
            log.info("tag already exists", tag=plan.primary, sha=existing[:7])
            commit_sha = existing
        else:
            commit_sha = sha or self.client.get_branch_sha(cfg.release_branch)
            self.client.create_ref(f"tags/{plan.primary}", commit_sha)
            log.info("created tag", tag=plan.primary, sha=commit_sha[:7])

        created = [plan.primary]
        failed = []
        for tag in plan.floating:
            try:
                if self.client.get_ref(f"tags/{tag}") is None:
                    self.client.create_ref(f"tags/{tag}", commit_sha)
                else:
                    self.client.update_ref(f"tags/{tag}", commit_sha, force=True)
            except GitHubError as e:
                log.error("failed to move floating tag", tag=tag, error=str(e))
                failed.append(tag)
            else:
                created.append(tag)

        return TagResult(sha=commit_sha, tags=created, failed=failed)
