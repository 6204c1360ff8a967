"""Markdown changelog generation.

Builds one release section from analyzed commits and splices it into an
existing ``CHANGELOG.md``. Commit grouping follows the configured
changelog sections; chore and ``no-release`` commits never appear.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from release_boss.core.commits import filter_excluded, group_commits_by_type

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from release_boss.config.models import ChangelogSection
    from release_boss.core.commits import CommitRecord
    from release_boss.core.version import Version

CHANGELOG_HEADER = "# Changelog"


def generate_changelog(
    commits: Iterable[CommitRecord],
    new_version: Version,
    current_version: Version,
    *,
    sections: Sequence[ChangelogSection],
    repo_url: str | None = None,
    tag_prefix: str = "v",
    today: date | None = None,
) -> str:
    """Generate the changelog section for a release.

    Args:
        commits: Commits in the release range
        new_version: Version being released
        current_version: Previous version, used for the compare link
        sections: Ordered section definitions; hidden ones are skipped
        repo_url: ``https://github.com/owner/repo``; omits links when None
        tag_prefix: Prefix used for tags in the compare link
        today: Release date, defaults to the current UTC date

    Returns:
        Markdown starting with a ``## [version]`` heading
    """
    release_date = (today or datetime.now(UTC).date()).isoformat()
    grouped = group_commits_by_type(c for c in filter_excluded(commits) if c.type)

    if repo_url:
        compare = f"{repo_url}/compare/{tag_prefix}{current_version}...{tag_prefix}{new_version}"
        lines = [f"## [{new_version}]({compare}) ({release_date})", ""]
    else:
        lines = [f"## {new_version} ({release_date})", ""]

    for section in sections:
        entries = grouped.get(section.type, [])
        if section.hidden or not entries:
            continue
        lines.append(f"### {section.section}")
        lines.append("")
        lines.extend(format_changelog_entry(commit, repo_url) for commit in entries)
        lines.append("")

    return "\n".join(lines)


def format_changelog_entry(commit: CommitRecord, repo_url: str | None = None) -> str:
    """Format ``* **scope:** subject ([abc1234](url)) ([#12](url))``."""
    entry = "* "
    if commit.scope:
        entry += f"**{commit.scope}:** "
    entry += commit.subject

    if commit.url:
        entry += f" ([{commit.short_hash}]({commit.url}))"
    elif repo_url:
        entry += f" ([{commit.short_hash}]({repo_url}/commit/{commit.hash}))"
    else:
        entry += f" ({commit.short_hash})"

    pr = commit.pr_number
    if pr:
        entry += f" ([#{pr}]({repo_url}/pull/{pr}))" if repo_url else f" (#{pr})"
    return entry


def prepend_changelog(existing: str | None, new_section: str) -> str:
    """Insert a release section at the top of a changelog.

    The section goes right after the ``# Changelog`` header when there is
    one. Without existing content a new changelog is started.
    """
    section = new_section.rstrip("\n") + "\n"
    if not existing or not existing.strip():
        return f"{CHANGELOG_HEADER}\n\n{section}"

    header_at = existing.find(CHANGELOG_HEADER)
    if header_at == -1:
        return f"{section}\n{existing}"

    body_at = existing.find("\n\n", header_at)
    if body_at == -1:
        return f"{existing.rstrip()}\n\n{section}"
    body_at += 2
    return f"{existing[:body_at]}{section}\n{existing[body_at:]}"
