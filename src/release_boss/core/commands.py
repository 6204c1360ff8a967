"""Release PR commands and naming conventions.

Maintainers can comment ``/bump major`` or ``/bump minor`` on a release
PR to push the version past what the commits alone would give (for
example to leave 0.x behind). Comments are parsed conservatively:
commands inside fenced code, inline code or quotes are ignored.

The release version is also encoded in the staging branch name
(``staging-v1.2.3``) and in the PR title, and is read back from there
once the PR is merged.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from release_boss.core.version import BumpType

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

_BUMP_COMMAND = re.compile(r"(?<![\w/])/bump\s+(major|minor)\b", re.IGNORECASE)
_INLINE_CODE = re.compile(r"`[^`]*`")
_VERSION_CAPTURE = r"([0-9]+\.[0-9]+\.[0-9]+(?:-[\w.-]+)?)"


@dataclass(frozen=True)
class BumpCommand:
    kind: BumpType
    author: str | None = None
    url: str | None = None
    comment_id: int | None = None


def parse_bump_command(body: str | None) -> BumpType | None:
    """Return the bump kind requested in one comment body, if any."""
    if not body:
        return None

    in_fence = False
    for raw in body.splitlines():
        stripped = raw.strip()
        if stripped.startswith("```") or stripped.startswith("~~~"):
            in_fence = not in_fence
            continue
        if in_fence or stripped.startswith(">"):
            continue
        match = _BUMP_COMMAND.search(_INLINE_CODE.sub("", raw))
        if match:
            return BumpType(match.group(1).lower())
    return None


def find_bump_command(comments: Iterable[Mapping[str, Any]]) -> BumpCommand | None:
    """Find the first bump command among GitHub issue comments.

    Args:
        comments: Comment payloads as returned by the GitHub API

    Returns:
        The first command found, or None
    """
    for comment in comments:
        kind = parse_bump_command(comment.get("body"))
        if kind is None:
            continue
        user = comment.get("user") or {}
        return BumpCommand(
            kind=kind,
            author=user.get("login"),
            url=comment.get("html_url"),
            comment_id=comment.get("id"),
        )
    return None


def staging_branch_name(prefix: str, version: str) -> str:
    return f"{prefix}-v{version}"


def extract_version_from_branch(branch: str, staging_prefix: str) -> str | None:
    """``staging-v1.2.3`` -> ``1.2.3``; None for other branches."""
    match = re.match(rf"^{re.escape(staging_prefix)}-v?{_VERSION_CAPTURE}$", branch)
    return match.group(1) if match else None


def format_pr_title(template: str, version: str) -> str:
    return template.replace("{version}", version)


def extract_version_from_title(title: str, template: str) -> str | None:
    """Read the version back out of a PR title built from ``template``.

    >>> extract_version_from_title("chore: release 1.4.0", "chore: release {version}")
    '1.4.0'
    """
    pattern = re.escape(template).replace(re.escape("{version}"), _VERSION_CAPTURE, 1)
    match = re.search(pattern, title)
    if match:
        return match.group(1)

    prefix = template.split("{version}", 1)[0]
    if prefix and prefix in title:
        rest = title[title.index(prefix) + len(prefix) :].strip()
        loose = re.match(_VERSION_CAPTURE, rest)
        if loose:
            return loose.group(1)
    return None
