"""GitHub integration: REST client, Actions runner glue and release PRs."""

from __future__ import annotations

from release_boss.github.actions import ActionContext, ActionOutputs, log_group
from release_boss.github.client import GitHubClient
from release_boss.github.pr_manager import PullRequestResult, ReleasePRManager, TagResult

__all__ = [
    "ActionContext",
    "ActionOutputs",
    "GitHubClient",
    "PullRequestResult",
    "ReleasePRManager",
    "TagResult",
    "log_group",
]
