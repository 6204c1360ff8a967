"""Implementation of the 'analyze' command.

Shows which version the commits since the last release would produce,
without touching any file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

from rich.panel import Panel
from rich.table import Table

from release_boss.config import load_config
from release_boss.core.bump import determine_version_bump
from release_boss.core.version import Version
from release_boss.exceptions import ReleaseBossError
from release_boss.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console


def run_analyze(
    path: str | None,
    config_file: Path | None,
    base: str | None,
    head: str,
    current: str | None,
    as_json: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Run the analyze command.

    Args:
        path: Optional path to project directory
        config_file: Explicit configuration file
        base: Exclusive start of the commit range, defaults to the latest version tag
        head: Inclusive end of the commit range
        current: Current version override (e.g., "0.4.0")
        as_json: Print the decision as JSON instead of tables
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = Path(path) if path else Path.cwd()

    try:
        config = load_config(project_path, config_file)
        repo = GitRepository(project_path)
        latest = repo.get_latest_version(config.effective_tag_prefix)
        current_version = (
            Version.parse(current)
            if current
            else latest[0]
            if latest
            else config.initial_version
        )
        if base is None and latest is not None:
            base = latest[1]
        commits = repo.get_commits(base, head)
    except ReleaseBossError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    decision = determine_version_bump(
        commits,
        current_version,
        release_as=config.release_as,
        dampen_minor=config.version.pre_1_0_minor_to_patch,
    )

    if as_json:
        console.print_json(
            json.dumps(
                {
                    "current_version": str(decision.current_version),
                    "new_version": str(decision.new_version),
                    "bump_type": str(decision.bump_type),
                    "applied_bump": str(decision.applied_bump),
                    "commits": [
                        {
                            "hash": c.short_hash,
                            "type": c.type or None,
                            "scope": c.scope,
                            "breaking": c.is_breaking,
                            "excluded": c.excluded,
                            "bump": str(c.bump_type),
                        }
                        for c in commits
                    ],
                }
            )
        )
        return

    range_label = f"{base}..{head}" if base else head
    if commits:
        table = Table(title=f"Commits in {range_label}")
        table.add_column("SHA", style="dim")
        table.add_column("Type")
        table.add_column("Scope")
        table.add_column("Subject")
        table.add_column("Bump")
        for c in commits:
            bump = "[dim]excluded[/]" if c.excluded else str(c.bump_type)
            if c.is_breaking and not c.excluded:
                bump = f"[red]{bump}[/]"
            table.add_row(
                c.short_hash,
                c.type or "[dim]?[/]",
                c.scope or "",
                c.subject,
                bump,
            )
        console.print(table)
    else:
        console.print(f"[yellow]No commits found in {range_label}.[/]")

    if not decision.is_release:
        console.print(
            Panel(
                f"Current version [cyan]{decision.current_version}[/]\n"
                "No releasable changes found.",
                title="[yellow]No Release[/]",
                border_style="yellow",
            )
        )
        return

    note = ""
    if decision.was_dampened:
        note = f"\n[dim]{decision.bump_type} reduced to {decision.applied_bump} before 1.0.0[/]"
    console.print(
        Panel(
            f"[cyan]{decision.current_version}[/] -> [green]{decision.new_version}[/] "
            f"([bold]{decision.applied_bump}[/]){note}",
            title="[green]Next Release[/]",
            border_style="green",
        )
    )
