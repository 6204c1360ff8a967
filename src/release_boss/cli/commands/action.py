"""Implementation of the 'action' command.

Entry point for the GitHub Action. Reads the workflow environment,
runs one release step and publishes the step outputs.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from release_boss.config import load_config
from release_boss.exceptions import ReleaseBossError
from release_boss.github.actions import ActionContext, ActionOutputs
from release_boss.github.client import GitHubClient
from release_boss.logging import get_logger
from release_boss.release import ReleaseRunner

if TYPE_CHECKING:
    from collections.abc import Mapping

    from rich.console import Console

log = get_logger(__name__)

TOKEN_ENV_VARS = ("INPUT_TOKEN", "GITHUB_TOKEN", "GH_TOKEN")


def resolve_token(env: Mapping[str, str]) -> str:
    for name in TOKEN_ENV_VARS:
        if env.get(name):
            return env[name]
    return ""


def run_action(
    config_file: Path | None,
    workspace: str | None,
    console: Console,
    err_console: Console,
    env: Mapping[str, str] | None = None,
) -> None:
    """Run the action command.

    Args:
        config_file: Explicit configuration file
        workspace: Repository checkout, defaults to ``$GITHUB_WORKSPACE``
        console: Console for standard output
        err_console: Console for error output
        env: Environment to read, defaults to the process environment
    """
    env = os.environ if env is None else env
    root = Path(workspace or env.get("GITHUB_WORKSPACE") or Path.cwd())

    try:
        context = ActionContext.from_env(env)
        config = load_config(root, config_file)
        client = GitHubClient(
            resolve_token(env),
            config.github.owner or context.owner,
            config.github.repo or context.repo,
            api_url=env.get("GITHUB_API_URL") or config.github.api_url,
            timeout_s=config.github.timeout_s,
        )
        result = ReleaseRunner(client, config, context, root).run()
    except ReleaseBossError as e:
        log.error("release run failed", error=str(e), error_type=type(e).__name__)
        err_console.print(f"::error::{e}", markup=False, highlight=False)
        raise SystemExit(1) from e

    outputs = ActionOutputs(Path(env["GITHUB_OUTPUT"]) if env.get("GITHUB_OUTPUT") else None)
    outputs.update(result.outputs())
    outputs.flush()

    if result.run_type == "release" and result.tags is not None:
        console.print(f"[green]Released {result.new_version}[/] ({', '.join(result.tags.tags)})")
    elif result.run_type == "pr" and result.pr is not None:
        verb = "Opened" if result.pr.created else "Updated"
        console.print(
            f"[green]{verb} release PR #{result.pr.number}[/] for "
            f"{result.previous_version} -> {result.new_version}"
        )
    else:
        console.print(f"[yellow]No release needed[/] (current version {result.previous_version})")
