"""Implementation of the 'update' command.

The update command rewrites version files, renders templates and
prepends the changelog locally, the same way the action prepares a
release PR.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.panel import Panel

from release_boss.config import load_config
from release_boss.core.bump import determine_version_bump
from release_boss.core.changelog import generate_changelog, prepend_changelog
from release_boss.core.commits import filter_excluded
from release_boss.core.version import Version
from release_boss.exceptions import ReleaseBossError, TemplateWriteError
from release_boss.release import render_release_files
from release_boss.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console


def run_update(
    path: str | None,
    config_file: Path | None,
    execute: bool,
    version_override: str | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the update command.

    Args:
        path: Optional path to project directory
        config_file: Explicit configuration file
        execute: Whether to actually apply changes
        version_override: Manual version override (e.g., "2.0.0")
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = Path(path) if path else Path.cwd()

    try:
        config = load_config(project_path, config_file)
    except ReleaseBossError as e:
        err_console.print(f"[red]Error loading config:[/] {e}")
        raise SystemExit(1) from e

    try:
        repo = GitRepository(project_path)
        latest = repo.get_latest_version(config.effective_tag_prefix)
        commits = repo.get_commits(latest[1] if latest else None)
    except ReleaseBossError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    if repo.is_dirty():
        console.print("[yellow]Warning:[/] repository has uncommitted changes.")

    current_version = latest[0] if latest else config.initial_version
    decision = determine_version_bump(
        commits,
        current_version,
        release_as=config.release_as,
        dampen_minor=config.version.pre_1_0_minor_to_patch,
    )

    if version_override:
        try:
            next_version = Version.parse(version_override)
        except ReleaseBossError as e:
            err_console.print(f"[red]Invalid version format:[/] {e}")
            raise SystemExit(1) from e
    elif not decision.is_release:
        console.print(
            "[yellow]No releasable changes found since the last release.[/]\n"
            "[dim]Use [cyan]--version[/] to force a specific version.[/]"
        )
        return
    else:
        next_version = decision.new_version

    mode_str = "[green]EXECUTING[/]" if execute else "[yellow]DRY-RUN[/]"
    console.print(
        f"\n{mode_str} - Updating from [cyan]{current_version}[/] to [green]{next_version}[/]\n"
    )

    templates = config.templates
    if not execute:
        planned = [f"  - Rewrite markers in [cyan]{p}[/]" for p in templates.version_files]
        planned += [f"  - Render template [cyan]{p}[/]" for p in templates.template_files]
        if config.changelog.enabled:
            planned.append(f"  - Prepend release notes to [cyan]{config.changelog_path}[/]")
        console.print(
            Panel(
                "[bold]Would make the following changes:[/]\n\n"
                + ("\n".join(planned) or "  (no files configured)"),
                title="[yellow]Dry Run Preview[/]",
                border_style="yellow",
            )
        )
        console.print("\n[dim]Run with [cyan]--execute[/] to apply these changes.[/]")
        return

    try:
        rendered = render_release_files(config, next_version, project_path)
    except TemplateWriteError as e:
        err_console.print(f"[red]Error writing {e.failed}:[/] {e}")
        for written in e.written:
            err_console.print(f"  [yellow]already written:[/] {written}")
        raise SystemExit(1) from e

    for written in rendered.written:
        console.print(f"  [green]✓[/] Updated {_display(written, project_path)}")
    for skipped in rendered.skipped:
        console.print(f"  [yellow]-[/] Skipped {_display(skipped, project_path)}")
    for note in rendered.diagnostics:
        console.print(f"  [yellow]![/] {note}")

    if config.changelog.enabled:
        section = generate_changelog(
            filter_excluded(commits),
            next_version,
            current_version,
            sections=config.changelog.sections,
            repo_url=config.github.repo_url,
            tag_prefix=config.effective_tag_prefix,
        )
        changelog_path = project_path / config.changelog_path
        existing = changelog_path.read_text(encoding="utf-8") if changelog_path.exists() else None
        changelog_path.write_text(prepend_changelog(existing, section), encoding="utf-8")
        console.print(f"  [green]✓[/] Updated {config.changelog_path}")

    console.print(
        Panel(
            f"[green]Successfully updated to version {next_version}![/]\n\n"
            "Next steps:\n"
            "  1. Review the changes\n"
            f"  2. Commit: [cyan]git add . && git commit -m "
            f"'chore: release {next_version}'[/]",
            title="[green]Update Complete[/]",
            border_style="green",
        )
    )


def _display(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)
