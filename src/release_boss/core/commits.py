"""Conventional commit parsing and classification.

Commit messages follow ``type(scope)!: subject`` with optional
``BREAKING CHANGE:`` footers. Parsing never fails: a message that does
not follow the convention yields a record with an empty type, which
classifies as "no bump".

Everything in this module is pure; fetching commits is the job of
:mod:`release_boss.vcs.git` and :mod:`release_boss.github.client`.
"""

from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from release_boss.core.version import BumpType, max_bump

if TYPE_CHECKING:
    from collections.abc import Iterable

# Commit types by bump impact. Breaking changes are major regardless of type.
MINOR_BUMP_TYPES: frozenset[str] = frozenset({"feat"})
PATCH_BUMP_TYPES: frozenset[str] = frozenset({"fix", "perf", "refactor"})
NO_BUMP_TYPES: frozenset[str] = frozenset({"docs", "style", "test", "ci", "build"})
EXCLUDED_TYPES: frozenset[str] = frozenset({"chore"})
EXCLUDED_SCOPE = "no-release"

BREAKING_KEYWORDS: tuple[str, ...] = ("BREAKING CHANGE", "BREAKING-CHANGE")

HEADER_PATTERN = re.compile(
    r"^(?P<type>\w*)"
    r"(?:\((?P<scope>[\w$.\-*\s]*)\))?"
    r"(?P<breaking>!)?"
    r": (?P<subject>.*)$"
)
_NOTE_PATTERN = re.compile(r"^(?P<keyword>BREAKING[ -]CHANGE):\s*(?P<text>.*)$")
_FOOTER_TOKEN = re.compile(r"^[A-Za-z][\w-]*(?::\s| #)")
_PR_REF = re.compile(r"#(\d+)")


@dataclass(frozen=True)
class CommitRecord:
    """One analyzed commit.

    ``bump_type`` and ``excluded`` are derived on access and never stored.
    """

    hash: str
    raw_message: str
    type: str = ""
    scope: str | None = None
    subject: str = ""
    breaking_notes: frozenset[str] = field(default_factory=frozenset)
    has_breaking_marker: bool = False
    author: str | None = None
    url: str | None = None

    @classmethod
    def from_message(
        cls,
        hash: str,
        message: str,
        *,
        author: str | None = None,
        url: str | None = None,
    ) -> CommitRecord:
        """Build a record by parsing a raw commit message.

        Args:
            hash: Full commit SHA
            message: Raw commit message, possibly multi-line
            author: Author login, if known
            url: Web URL of the commit, if known

        Returns:
            Parsed CommitRecord
        """
        lines = message.splitlines()
        header = lines[0].strip() if lines else ""
        match = HEADER_PATTERN.match(header)

        if match:
            scope = match.group("scope")
            return cls(
                hash=hash,
                raw_message=message,
                type=match.group("type").lower(),
                scope=scope.strip() if scope and scope.strip() else None,
                subject=match.group("subject").strip(),
                breaking_notes=_parse_breaking_notes(lines[1:]),
                has_breaking_marker=match.group("breaking") is not None,
                author=author,
                url=url,
            )

        return cls(
            hash=hash,
            raw_message=message,
            subject=header,
            breaking_notes=_parse_breaking_notes(lines[1:]),
            author=author,
            url=url,
        )

    @property
    def short_hash(self) -> str:
        return self.hash[:7]

    @property
    def is_conventional(self) -> bool:
        return bool(self.type)

    @property
    def is_breaking(self) -> bool:
        return self.has_breaking_marker or bool(self.breaking_notes)

    @property
    def bump_type(self) -> BumpType:
        return classify_commit(self)

    @property
    def excluded(self) -> bool:
        return is_excluded_from_changelog(self)

    @property
    def pr_number(self) -> str | None:
        """First ``#123`` reference in the message, if any."""
        match = _PR_REF.search(self.raw_message)
        return match.group(1) if match else None


def _parse_breaking_notes(body_lines: list[str]) -> frozenset[str]:
    """Collect BREAKING CHANGE footer texts.

    A note runs from its keyword line up to the next blank line or the
    next footer token.
    """
    notes: list[str] = []
    current: list[str] | None = None

    for raw in body_lines:
        line = raw.rstrip()
        note_match = _NOTE_PATTERN.match(line)
        if note_match:
            if current is not None:
                notes.append(" ".join(current).strip())
            current = [note_match.group("text")]
            continue
        if current is None:
            continue
        if not line.strip() or _FOOTER_TOKEN.match(line):
            notes.append(" ".join(current).strip())
            current = None
        else:
            current.append(line.strip())

    if current is not None:
        notes.append(" ".join(current).strip())

    # An empty note still flags the commit as breaking.
    return frozenset(note or BREAKING_KEYWORDS[0] for note in notes)


def classify_commit(commit: CommitRecord) -> BumpType:
    """Classify a single commit into a bump type.

    Rules, first match wins:

    1. breaking marker or breaking note -> MAJOR
    2. ``feat`` -> MINOR
    3. ``fix``, ``perf``, ``refactor`` -> PATCH
    4. anything else -> NONE
    """
    if commit.has_breaking_marker or commit.breaking_notes:
        return BumpType.MAJOR
    if commit.type in MINOR_BUMP_TYPES:
        return BumpType.MINOR
    if commit.type in PATCH_BUMP_TYPES:
        return BumpType.PATCH
    return BumpType.NONE


def is_excluded_from_changelog(commit: CommitRecord) -> bool:
    """True for ``chore`` commits and commits scoped ``no-release``.

    Exclusion wins over classification: a ``chore!`` commit is dropped
    before bumps are aggregated and contributes nothing.
    """
    return commit.type in EXCLUDED_TYPES or commit.scope == EXCLUDED_SCOPE


def filter_excluded(commits: Iterable[CommitRecord]) -> list[CommitRecord]:
    """Drop commits excluded from the changelog and from bump aggregation."""
    return [c for c in commits if not is_excluded_from_changelog(c)]


def aggregate_bump(commits: Iterable[CommitRecord]) -> BumpType:
    """Reduce commits to the single most severe bump type.

    Excluded commits are removed first. An empty list, or one that only
    holds non-bumping commits, yields ``BumpType.NONE``.
    """
    result = BumpType.NONE
    for commit in filter_excluded(commits):
        result = max_bump(result, classify_commit(commit))
        if result == BumpType.MAJOR:
            break
    return result


def group_commits_by_type(commits: Iterable[CommitRecord]) -> dict[str, list[CommitRecord]]:
    """Group commits by conventional type; unparsable commits go under ``other``."""
    grouped: dict[str, list[CommitRecord]] = defaultdict(list)
    for commit in commits:
        grouped[commit.type or "other"].append(commit)
    return dict(grouped)
