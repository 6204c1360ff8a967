"""Version template rendering and in-place marker rewriting.

Two modes share one render primitive:

**Version files** keep their templates inline, next to the code they
generate::

    // %%release-boss: const Version = "v{{version}}"%%
    const Version = "v1.2.3"

    /* %%release-boss:
    const Major = "{{major}}"
    const Minor = "{{minor}}"
    %% */
    const Major = "1"
    const Minor = "2"

The marker lines stay in the file. The lines right after a region (the
"implementation block") are replaced with the freshly rendered template.
The block is as many lines long as the rendered output, so running the
rewrite twice with the same version leaves the file byte-identical.

**Template files** are rendered whole and written next to the template:
``config.tpl.json`` becomes ``config.json``, ``version.js`` becomes
``version.new.js``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from release_boss.core.version import Version
from release_boss.exceptions import TemplateWriteError
from release_boss.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

log = get_logger(__name__)

DEFAULT_MARKER_ID = "release-boss"
CLOSE_MARKER = "%%"
TEMPLATE_SUFFIX = ".tpl"
NEW_FILE_INFIX = ".new"

_PLACEHOLDER = re.compile(r"\{\{(version|major|minor|patch)\}\}")
_MARKER_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


def marker_token(marker_id: str = DEFAULT_MARKER_ID) -> str:
    """Opening marker for a tool id, e.g. ``%%release-boss:``.

    Raises:
        ValueError: If the id contains characters that would make the
            marker ambiguous (``%``, ``:``, whitespace)
    """
    if not _MARKER_ID.match(marker_id):
        raise ValueError(f"Invalid template marker id: {marker_id!r}")
    return f"%%{marker_id}:"


@dataclass(frozen=True)
class RenderContext:
    """Values substituted into templates."""

    version: str
    major: str
    minor: str
    patch: str

    @classmethod
    def from_version(cls, version: Version | str) -> RenderContext:
        if isinstance(version, str):
            version = Version.parse(version)
        return cls(
            version=str(version),
            major=str(version.major),
            minor=str(version.minor),
            patch=str(version.patch),
        )


@dataclass(frozen=True)
class TemplateRegion:
    """A marker-delimited template found in a file.

    Line indexes are zero-based and refer to the input text.
    """

    start_line: int
    end_line: int
    template_text: str
    is_multiline: bool


@dataclass
class RewriteResult:
    text: str
    regions: list[TemplateRegion] = field(default_factory=list)
    diagnostics: list[str] = field(default_factory=list)


@dataclass
class BatchResult:
    """Outcome of processing a batch of files.

    Attributes:
        written: Files written, in processing order
        skipped: Input files that were missing or unreadable
        diagnostics: Human-readable notes about recoverable problems
    """

    written: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    diagnostics: list[str] = field(default_factory=list)

    def extend(self, other: BatchResult) -> None:
        self.written.extend(other.written)
        self.skipped.extend(other.skipped)
        self.diagnostics.extend(other.diagnostics)


class FileSystem(Protocol):
    def read_text(self, path: Path) -> str: ...

    def write_text(self, path: Path, text: str) -> None: ...

    def exists(self, path: Path) -> bool: ...


class LocalFileSystem:
    """FileSystem backed by the local disk.

    Line endings are passed through untouched in both directions.
    """

    def read_text(self, path: Path) -> str:
        with path.open(encoding="utf-8", newline="") as fh:
            return fh.read()

    def write_text(self, path: Path, text: str) -> None:
        path.write_text(text, encoding="utf-8", newline="")

    def exists(self, path: Path) -> bool:
        return path.is_file()


def render_template(template: str, ctx: RenderContext) -> str:
    """Substitute ``{{version}}``, ``{{major}}``, ``{{minor}}`` and ``{{patch}}``.

    Substitution is a single pass, so values are never rescanned. Any
    other ``{{...}}`` token is left as is.
    """
    return _PLACEHOLDER.sub(lambda m: getattr(ctx, m.group(1)), template)


def rewrite_version_markers(
    text: str,
    ctx: RenderContext,
    *,
    marker_id: str = DEFAULT_MARKER_ID,
    source: str = "<text>",
) -> RewriteResult:
    """Re-render every template region in ``text``.

    Args:
        text: File content
        ctx: Values to render
        marker_id: Tool id inside the opening marker
        source: Name used in diagnostics

    Returns:
        RewriteResult with the new text, the regions found and any
        diagnostics for unterminated regions
    """
    opener = marker_token(marker_id)
    newline = "\r\n" if "\r\n" in text else "\n"
    lines = text.split(newline)
    # A trailing newline leaves an empty last element that is never part
    # of an implementation block.
    limit = len(lines) - 1 if lines[-1] == "" else len(lines)

    out: list[str] = []
    result = RewriteResult(text=text)
    i = 0

    while i < len(lines):
        line = lines[i]
        start = line.find(opener)
        if start == -1:
            out.append(line)
            i += 1
            continue

        out.append(line)
        body_start = start + len(opener)
        close = line.find(CLOSE_MARKER, body_start)

        if close != -1:
            region = TemplateRegion(
                start_line=i,
                end_line=i,
                template_text=line[body_start:close].strip(),
                is_multiline=False,
            )
        else:
            end = _find_close(lines, i + 1)
            if end is None:
                message = f"{source}:{i + 1}: template marker has no closing '{CLOSE_MARKER}'"
                result.diagnostics.append(message)
                log.warning("unterminated template region", path=source, line=i + 1)
                i += 1
                continue
            out.extend(lines[i + 1 : end + 1])
            region = TemplateRegion(
                start_line=i,
                end_line=end,
                template_text=_multiline_template(lines, i, end, body_start),
                is_multiline=True,
            )

        rendered = render_template(region.template_text, ctx).split("\n")
        i = region.end_line + 1

        # The old implementation block has as many lines as the rendered
        # output, but stops early at the next marker or end of file.
        skip = 0
        while skip < len(rendered) and i + skip < limit and opener not in lines[i + skip]:
            skip += 1
        i += skip

        out.extend(rendered)
        result.regions.append(region)
        log.debug(
            "rendered template region",
            path=source,
            line=region.start_line + 1,
            multiline=region.is_multiline,
            replaced=skip,
        )

    result.text = newline.join(out)
    return result


def _find_close(lines: list[str], start: int) -> int | None:
    for j in range(start, len(lines)):
        if CLOSE_MARKER in lines[j]:
            return j
    return None


def _multiline_template(lines: list[str], start: int, end: int, body_start: int) -> str:
    """Text between the opening and closing markers of a multi-line region.

    Text sharing a line with a marker is stripped; lines in between keep
    their indentation. Blank lines at either end are dropped.
    """
    parts = [lines[start][body_start:].strip()]
    parts.extend(line.rstrip() for line in lines[start + 1 : end])
    parts.append(lines[end][: lines[end].find(CLOSE_MARKER)].strip())

    while parts and not parts[0]:
        parts.pop(0)
    while parts and not parts[-1]:
        parts.pop()
    return "\n".join(parts)


def template_output_path(path: Path | str) -> Path:
    """Where a rendered template file is written.

    Every ``.tpl`` in the path is removed; paths without ``.tpl`` get
    ``.new`` before their extension.

    >>> template_output_path("config.tpl.json")
    PosixPath('config.json')
    >>> template_output_path("version.js")
    PosixPath('version.new.js')
    """
    raw = str(path)
    if TEMPLATE_SUFFIX in raw:
        return Path(raw.replace(TEMPLATE_SUFFIX, ""))
    p = Path(raw)
    return p.with_name(f"{p.stem}{NEW_FILE_INFIX}{p.suffix}")


def _read_input(fs: FileSystem, path: Path, result: BatchResult) -> str | None:
    """Read an input file, recording it as skipped if that fails."""
    if not fs.exists(path):
        result.skipped.append(path)
        result.diagnostics.append(f"{path}: file does not exist")
        log.error("input file missing, skipping", path=str(path))
        return None
    try:
        return fs.read_text(path)
    except (OSError, UnicodeDecodeError) as e:
        result.skipped.append(path)
        result.diagnostics.append(f"{path}: cannot read file: {e}")
        log.error("input file unreadable, skipping", path=str(path), error=str(e))
        return None


def _write_output(fs: FileSystem, path: Path, text: str, result: BatchResult) -> None:
    try:
        fs.write_text(path, text)
    except OSError as e:
        log.error("write failed, aborting batch", path=str(path), error=str(e))
        raise TemplateWriteError(
            f"Failed to write {path}: {e}", written=result.written, failed=path
        ) from e
    result.written.append(path)


def process_version_files(
    paths: Iterable[Path | str],
    ctx: RenderContext,
    *,
    marker_id: str = DEFAULT_MARKER_ID,
    fs: FileSystem | None = None,
) -> BatchResult:
    """Rewrite inline version templates in place.

    Files are processed one after the other. Missing or unreadable files
    are skipped; a failed write aborts the batch.

    Args:
        paths: Files containing ``%%<marker_id>:`` regions
        ctx: Values to render
        marker_id: Tool id inside the opening marker
        fs: File system to use, local disk by default

    Returns:
        BatchResult listing written and skipped files

    Raises:
        TemplateWriteError: If a file cannot be written. The error lists
            the files written before the failure.
    """
    fs = fs or LocalFileSystem()
    result = BatchResult()

    for raw_path in paths:
        path = Path(raw_path)
        content = _read_input(fs, path, result)
        if content is None:
            continue

        rewrite = rewrite_version_markers(content, ctx, marker_id=marker_id, source=str(path))
        result.diagnostics.extend(rewrite.diagnostics)
        if not rewrite.regions:
            result.diagnostics.append(f"{path}: no template markers found")
            log.warning("no template markers found", path=str(path))

        _write_output(fs, path, rewrite.text, result)
        log.info("updated version file", path=str(path), regions=len(rewrite.regions))

    return result


def process_template_files(
    paths: Iterable[Path | str],
    ctx: RenderContext,
    *,
    fs: FileSystem | None = None,
) -> BatchResult:
    """Render whole-file templates to their output paths.

    The template itself is never modified; an existing output file is
    replaced. Failure handling matches :func:`process_version_files`.

    Returns:
        BatchResult whose ``written`` lists the generated output files
    """
    fs = fs or LocalFileSystem()
    result = BatchResult()

    for raw_path in paths:
        path = Path(raw_path)
        content = _read_input(fs, path, result)
        if content is None:
            continue

        output = template_output_path(path)
        _write_output(fs, output, render_template(content, ctx), result)
        log.info("rendered template file", template=str(path), output=str(output))

    return result
