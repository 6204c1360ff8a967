"""Implementation of the 'render' command.

Runs only the template engine for an explicit version: no git history,
no changelog.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.table import Table

from release_boss.config import load_config
from release_boss.core.templates import (
    BatchResult,
    RenderContext,
    process_template_files,
    process_version_files,
)
from release_boss.exceptions import ReleaseBossError, TemplateWriteError

if TYPE_CHECKING:
    from rich.console import Console


def run_render(
    version: str,
    files: list[Path] | None,
    templates: list[Path] | None,
    path: str | None,
    config_file: Path | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the render command.

    Without ``files`` or ``templates`` the configured lists are used.

    Args:
        version: Version to render (e.g., "1.2.3")
        files: Version files to rewrite in place
        templates: Template files to render
        path: Optional path to project directory
        config_file: Explicit configuration file
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = Path(path) if path else Path.cwd()

    try:
        config = load_config(project_path, config_file)
        ctx = RenderContext.from_version(version)
    except ReleaseBossError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    if not files and not templates:
        files = [project_path / p for p in config.templates.version_files]
        templates = [project_path / p for p in config.templates.template_files]

    result = BatchResult()
    try:
        result.extend(
            process_version_files(files or [], ctx, marker_id=config.templates.marker_id)
        )
        result.extend(process_template_files(templates or [], ctx))
    except TemplateWriteError as e:
        err_console.print(f"[red]Error:[/] {e}")
        for written in [*result.written, *e.written]:
            err_console.print(f"  [yellow]already written:[/] {written}")
        raise SystemExit(1) from e

    table = Table(title=f"Rendered {ctx.version}")
    table.add_column("File")
    table.add_column("Status")
    for written in result.written:
        table.add_row(str(written), "[green]written[/]")
    for skipped in result.skipped:
        table.add_row(str(skipped), "[yellow]skipped[/]")
    console.print(table)

    for note in result.diagnostics:
        console.print(f"[yellow]![/] {note}")
