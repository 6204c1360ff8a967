"""Release orchestration for one GitHub Actions run.

A run is one of:

- **release**: a release PR was merged; tag the release.
- **pr**: commits landed on the merge branch; decide the next version,
  render version files and open or refresh the release PR.
- **none**: nothing in the commit range warrants a release.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from release_boss.core.bump import (
    BumpDecision,
    ReleaseState,
    apply_manual_bump_command,
    determine_version_bump,
)
from release_boss.core.changelog import generate_changelog
from release_boss.core.commands import (
    extract_version_from_branch,
    extract_version_from_title,
    find_bump_command,
    staging_branch_name,
)
from release_boss.core.commits import filter_excluded
from release_boss.core.templates import (
    BatchResult,
    RenderContext,
    process_template_files,
    process_version_files,
)
from release_boss.core.version import BumpType, Version, latest_version, strip_tag_prefix
from release_boss.exceptions import ReleaseError, TemplateWriteError
from release_boss.github.actions import log_group
from release_boss.github.pr_manager import PullRequestResult, ReleasePRManager, TagResult
from release_boss.logging import get_logger

if TYPE_CHECKING:
    from release_boss.config.models import ReleaseBossConfig
    from release_boss.core.templates import FileSystem
    from release_boss.github.actions import ActionContext
    from release_boss.github.client import GitHubClient

log = get_logger(__name__)


@dataclass
class RunResult:
    run_type: str
    state: ReleaseState
    previous_version: Version
    new_version: Version
    bump_type: BumpType = BumpType.NONE
    files: list[str] = field(default_factory=list)
    pr: PullRequestResult | None = None
    tags: TagResult | None = None

    def outputs(self) -> dict[str, str]:
        """Step outputs exposed by the action."""
        prev, new = self.previous_version, self.new_version
        values = {
            "run_type": self.run_type,
            "is_pr_run": str(self.run_type == "pr").lower(),
            "is_release_run": str(self.run_type == "release").lower(),
            "previous_version": str(prev),
            "new_version": str(new),
            "bump_type": str(self.bump_type),
            "previous_major": str(prev.major),
            "previous_minor": str(prev.minor),
            "previous_patch": str(prev.patch),
            "new_major": str(new.major),
            "new_minor": str(new.minor),
            "new_patch": str(new.patch),
            "updated_files": ",".join(self.files),
        }
        if self.pr is not None:
            values.update(
                pr_number=str(self.pr.number), pr_url=self.pr.url, pr_status=self.pr.status
            )
        if self.tags is not None:
            values.update(
                release_tag=self.tags.tags[0],
                release_commit_sha=self.tags.sha,
                additional_tags=",".join(self.tags.tags[1:]),
            )
        return values


def resolve_current_version(client: GitHubClient, config: ReleaseBossConfig) -> Version:
    """Latest released version: highest version tag, then latest release."""
    prefix = config.effective_tag_prefix
    found = latest_version(client.list_tags(), prefix)
    if found is not None:
        return found

    release_tag = client.get_latest_release_tag()
    if release_tag:
        parsed = Version.try_parse(strip_tag_prefix(release_tag, prefix))
        if parsed is not None:
            return parsed

    log.info("no version tags or releases found", initial=config.version.initial_version)
    return config.initial_version


def render_release_files(
    config: ReleaseBossConfig,
    version: Version,
    workspace: Path,
    fs: FileSystem | None = None,
) -> BatchResult:
    """Rewrite configured version files and render template files."""
    ctx = RenderContext.from_version(version)
    templates = config.templates
    result = process_version_files(
        (workspace / p for p in templates.version_files),
        ctx,
        marker_id=templates.marker_id,
        fs=fs,
    )
    try:
        rendered = process_template_files(
            (workspace / p for p in templates.template_files), ctx, fs=fs
        )
    except TemplateWriteError as e:
        raise TemplateWriteError(
            e.args[0], written=[*result.written, *e.written], failed=e.failed
        ) from e
    result.extend(rendered)
    return result


class ReleaseRunner:
    """Runs the release workflow for one action invocation."""

    def __init__(
        self,
        client: GitHubClient,
        config: ReleaseBossConfig,
        context: ActionContext,
        workspace: Path,
        *,
        fs: FileSystem | None = None,
        manager: ReleasePRManager | None = None,
    ) -> None:
        self.client = client
        self.config = config
        self.context = context
        self.workspace = workspace
        self.fs = fs
        self.manager = manager or ReleasePRManager(client, config)

    @property
    def repo_url(self) -> str:
        server = self.config.github.server_url.rstrip("/")
        return f"{server}/{self.context.owner}/{self.context.repo}"

    def run(self) -> RunResult:
        if self.context.is_pr_merge and self._release_pr_version() is not None:
            return self.run_release()
        return self.run_pr()

    # -- merged release PR --------------------------------------------------

    def _release_pr_version(self) -> str | None:
        pr = self.context.pull_request or {}
        head = (pr.get("head") or {}).get("ref", "")
        from_branch = extract_version_from_branch(head, self.config.staging_branch)
        from_title = extract_version_from_title(
            pr.get("title", ""), self.config.pull_request_title
        )
        return from_branch or from_title

    def _apply_bump_command(self, pr_number: int, version: Version) -> Version:
        command = find_bump_command(self.client.list_issue_comments(pr_number))
        if command is None:
            return version
        bumped = apply_manual_bump_command(version, command.kind)
        log.info(
            "applied bump command",
            command=f"/bump {command.kind}",
            author=command.author,
            before=str(version),
            after=str(bumped),
        )
        return bumped

    def _open_release_pr(self, version: Version) -> int | None:
        """Number of the open release PR staged for ``version``, if any.

        The staging branch keeps the commit-derived version in its name even
        after a ``/bump`` command re-targets the release.
        """
        cfg = self.config
        branch = staging_branch_name(cfg.staging_branch, str(version))
        pull = self.client.find_open_pull(branch, cfg.release_branch)
        return pull["number"] if pull else None

    def run_release(self) -> RunResult:
        pr = self.context.pull_request or {}
        raw = self._release_pr_version()
        if raw is None:
            raise ReleaseError("Cannot determine the release version from the PR branch or title")

        merged_version = Version.parse(raw)
        with log_group("Release tagging"):
            version = self._apply_bump_command(pr["number"], merged_version)
            tags = self.manager.tag_release(version, pr.get("merge_commit_sha") or None)
            head = (pr.get("head") or {}).get("ref")
            if head:
                self.manager.delete_staging_branch(head)

        log.info("release tagged", tags=tags.tags, sha=tags.sha[:7])
        return RunResult(
            run_type="release",
            state=ReleaseState.TAGGED,
            previous_version=merged_version,
            new_version=version,
            tags=tags,
        )

    # -- commits on the merge branch ----------------------------------------

    def decide(self) -> tuple[BumpDecision, list]:
        cfg = self.config
        with log_group("Commit analysis"):
            current = resolve_current_version(self.client, cfg)
            commits = self.client.compare_commits(cfg.release_branch, cfg.merge_branch)
            decision = determine_version_bump(
                commits,
                current,
                release_as=cfg.release_as,
                dampen_minor=cfg.version.pre_1_0_minor_to_patch,
            )
        log.info(
            "bump determined",
            current=str(decision.current_version),
            bump=str(decision.bump_type),
            applied=str(decision.applied_bump),
            new=str(decision.new_version),
        )
        return decision, filter_excluded(commits)

    def run_pr(self) -> RunResult:
        cfg = self.config
        decision, commits = self.decide()
        if not decision.is_release:
            return RunResult(
                run_type="none",
                state=ReleaseState.IDLE,
                previous_version=decision.current_version,
                new_version=decision.current_version,
            )

        version = decision.new_version
        pr = self.context.pull_request or {}
        head = (pr.get("head") or {}).get("ref", "")
        on_release_pr = extract_version_from_branch(head, cfg.staging_branch) is not None
        pr_number = pr["number"] if on_release_pr else self._open_release_pr(version)
        if pr_number is not None:
            version = self._apply_bump_command(pr_number, version)

        with log_group("Template processing"):
            rendered = render_release_files(cfg, version, self.workspace, self.fs)
            for note in rendered.diagnostics:
                log.warning("template diagnostic", detail=note)

        changelog = generate_changelog(
            commits,
            version,
            decision.current_version,
            sections=cfg.changelog.sections,
            repo_url=self.repo_url,
            tag_prefix=cfg.effective_tag_prefix,
        )

        with log_group("Pull request management"):
            branch = (
                head
                if on_release_pr
                else self.manager.prepare_staging_branch(decision.new_version)
            )
            files = self.manager.commit_files(branch, rendered.written, self.workspace, version)
            if cfg.changelog.enabled:
                self.manager.update_changelog(branch, changelog, version)
                files.append(cfg.changelog_path.as_posix())
            pr_result = self.manager.create_or_update_pr(version, changelog, commits, branch)

        return RunResult(
            run_type="pr",
            state=ReleaseState.PR_OPEN,
            previous_version=decision.current_version,
            new_version=version,
            bump_type=decision.bump_type,
            files=files,
            pr=pr_result,
        )
