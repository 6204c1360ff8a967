"""Changelog table kept in the release PR description.

The table is rendered between two HTML comment markers so later runs can
find it, read back the rows and merge in new commits. Reading it back is
best effort: the description is free text that people edit by hand, so
rows that cannot be parsed turn into placeholder entries instead of
failing the run. Nothing here feeds into version decisions.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from release_boss.config.models import ChangelogTableConfig
    from release_boss.core.commits import CommitRecord

COLUMNS: tuple[str, ...] = ("Type", "Scope", "Description", "PR", "Commit", "Author")
UNPARSED_TYPE = "unknown"


@dataclass(frozen=True)
class ChangelogEntry:
    type: str
    scope: str
    description: str
    pr: str
    commit: str
    author: str

    def as_row(self) -> str:
        cells = (_escape_cell(v) for v in asdict(self).values())
        return "| " + " | ".join(cells) + " |"


def _escape_cell(value: str) -> str:
    return value.replace("|", "\\|").replace("\n", " ")


def commits_to_entries(commits: Iterable[CommitRecord]) -> list[ChangelogEntry]:
    entries = []
    for commit in commits:
        pr = commit.pr_number
        entries.append(
            ChangelogEntry(
                type=commit.type or "other",
                scope=commit.scope or "",
                description=commit.subject or commit.raw_message.split("\n", 1)[0],
                pr=f"#{pr}" if pr else "",
                commit=commit.short_hash,
                author=f"@{commit.author}" if commit.author else "",
            )
        )
    return entries


def filter_entries(
    entries: Iterable[ChangelogEntry], config: ChangelogTableConfig
) -> list[ChangelogEntry]:
    """Drop excluded types and, when required, entries without a scope."""
    excluded = set(config.exclude_types)
    return [
        e
        for e in entries
        if e.type not in excluded and (e.scope or not config.require_scope)
    ]


def render_table(entries: Sequence[ChangelogEntry], config: ChangelogTableConfig) -> str:
    """Render entries as a marker-wrapped markdown table."""
    header = "| " + " | ".join(COLUMNS) + " |"
    separator = "|" + "|".join("---" for _ in COLUMNS) + "|"
    return "\n".join(
        [
            config.start_marker,
            header,
            separator,
            *(entry.as_row() for entry in entries),
            config.end_marker,
        ]
    )


def _table_pattern(config: ChangelogTableConfig) -> re.Pattern[str]:
    return re.compile(
        re.escape(config.start_marker) + r"(.*?)" + re.escape(config.end_marker), re.DOTALL
    )


def extract_table(description: str | None, config: ChangelogTableConfig) -> str | None:
    """Return the text between the table markers, or None if absent."""
    if not description:
        return None
    match = _table_pattern(config).search(description)
    return match.group(1).strip() if match else None


def _split_row(row: str) -> list[str]:
    body = row.strip()
    if body.startswith("|"):
        body = body[1:]
    if body.endswith("|") and not body.endswith("\\|"):
        body = body[:-1]
    cells = re.split(r"(?<!\\)\|", body)
    return [c.strip().replace("\\|", "|") for c in cells]


def parse_table(table: str | None) -> list[ChangelogEntry]:
    """Parse table rows back into entries.

    The first two non-blank lines (header and separator) are skipped. A
    row with the wrong number of cells becomes a placeholder entry that
    keeps the raw text as its description.
    """
    if not table:
        return []
    lines = [line for line in table.splitlines() if line.strip()]
    entries = []
    for row in lines[2:]:
        cells = _split_row(row)
        if len(cells) == len(COLUMNS):
            entries.append(ChangelogEntry(*cells))
        else:
            entries.append(
                ChangelogEntry(
                    type=UNPARSED_TYPE,
                    scope="",
                    description=row.strip(),
                    pr="",
                    commit="",
                    author="",
                )
            )
    return entries


def merge_entries(
    existing: Iterable[ChangelogEntry],
    new: Iterable[ChangelogEntry],
    order: Sequence[str],
) -> list[ChangelogEntry]:
    """Merge entries keyed by short commit hash; new entries win.

    Placeholder entries have no commit and are kept as they are. The
    result is sorted by ``order``; unknown types go last and ties keep
    their original order.
    """
    merged: dict[str, ChangelogEntry] = {}
    loose: list[ChangelogEntry] = []
    for entry in (*existing, *new):
        if entry.commit:
            merged[entry.commit] = entry
        else:
            loose.append(entry)

    rank = {t: i for i, t in enumerate(order)}
    return sorted([*merged.values(), *loose], key=lambda e: rank.get(e.type, len(rank)))


def update_description(
    description: str | None,
    commits: Iterable[CommitRecord],
    config: ChangelogTableConfig,
) -> str:
    """Insert or refresh the changelog table in a PR description.

    An existing table is replaced in place. Otherwise the table goes
    after the first paragraph (the PR header), or at the end.
    """
    description = description or ""
    existing = parse_table(extract_table(description, config))
    new = filter_entries(commits_to_entries(commits), config)
    table = render_table(merge_entries(existing, new, config.order), config)

    pattern = _table_pattern(config)
    if pattern.search(description):
        return pattern.sub(lambda _: table, description, count=1)

    split_at = description.find("\n\n")
    if split_at != -1:
        return f"{description[: split_at + 2]}{table}\n\n{description[split_at + 2 :]}"
    if description:
        return f"{description}\n\n{table}"
    return table
