"""Root Typer application for the release-boss CLI."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer
from rich.console import Console

from release_boss import __version__
from release_boss.logging import configure_logging

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="release-boss",
    help="release-boss - semantic versioning and release PRs from conventional commits.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@dataclass
class CLIState:
    config_file: Path | None = None


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"release-boss {__version__}")
        raise typer.Exit()


@app.callback()
def callback(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Configuration file (default: auto-detect)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log warnings and errors."),
    json_log: bool = typer.Option(False, "--json-log", help="Emit logs as JSON lines."),
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Decide versions from conventional commits and manage release PRs."""
    configure_logging(verbose=verbose, quiet=quiet, json_log=json_log)
    ctx.obj = CLIState(config_file=config)


def _config_file(ctx: typer.Context) -> Path | None:
    state = ctx.obj
    return state.config_file if isinstance(state, CLIState) else None


@app.command("analyze")
def analyze(
    ctx: typer.Context,
    path: str | None = typer.Argument(None, help="Project directory."),
    base: str | None = typer.Option(None, "--base", help="Start of range (default: last tag)."),
    head: str = typer.Option("HEAD", "--head", help="End of the commit range."),
    current: str | None = typer.Option(None, "--current", help="Override the current version."),
    as_json: bool = typer.Option(False, "--json", help="Print the decision as JSON."),
) -> None:
    """Show the version the unreleased commits would produce."""
    from release_boss.cli.commands.analyze import run_analyze

    run_analyze(path, _config_file(ctx), base, head, current, as_json, console, err_console)


@app.command("update")
def update(
    ctx: typer.Context,
    path: str | None = typer.Argument(None, help="Project directory."),
    execute: bool = typer.Option(False, "--execute", help="Apply changes (default: dry-run)."),
    version_override: str | None = typer.Option(
        None, "--version", help="Release this exact version."
    ),
) -> None:
    """Update version files and the changelog for the next release."""
    from release_boss.cli.commands.update import run_update

    run_update(path, _config_file(ctx), execute, version_override, console, err_console)


@app.command("render")
def render(
    ctx: typer.Context,
    version: str = typer.Argument(..., help="Version to render, e.g. 1.2.3."),
    files: list[Path] | None = typer.Option(
        None, "--file", "-f", help="Version file to rewrite (repeatable)."
    ),
    templates: list[Path] | None = typer.Option(
        None, "--template", "-t", help="Template file to render (repeatable)."
    ),
    path: str | None = typer.Option(None, "--path", help="Project directory."),
) -> None:
    """Render version markers and template files for a version."""
    from release_boss.cli.commands.render import run_render

    run_render(version, files, templates, path, _config_file(ctx), console, err_console)


@app.command("action")
def action(
    ctx: typer.Context,
    workspace: str | None = typer.Option(
        None, "--workspace", help="Repository checkout (default: $GITHUB_WORKSPACE)."
    ),
) -> None:
    """Run as a GitHub Action step."""
    from release_boss.cli.commands.action import run_action

    run_action(_config_file(ctx), workspace, console, err_console)


def main() -> None:
    app()
