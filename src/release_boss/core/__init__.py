"""Core business logic for release-boss.

This module contains the fundamental building blocks:
- Version parsing and manipulation (semantic versions)
- Conventional commit parsing and bump classification
- Version bump decisions, including pre-1.0 rules and manual commands
- Version-marker rewriting and template rendering
- Changelog generation
"""

from __future__ import annotations

from release_boss.core.bump import (
    BumpDecision,
    ReleaseState,
    apply_manual_bump_command,
    determine_version_bump,
)
from release_boss.core.changelog import generate_changelog, prepend_changelog
from release_boss.core.commits import (
    CommitRecord,
    aggregate_bump,
    classify_commit,
    group_commits_by_type,
    is_excluded_from_changelog,
)
from release_boss.core.templates import (
    BatchResult,
    RenderContext,
    TemplateRegion,
    process_template_files,
    process_version_files,
    render_template,
    rewrite_version_markers,
    template_output_path,
)
from release_boss.core.version import BumpType, Version, parse_version

__all__ = [
    # Version
    "BumpType",
    "Version",
    "parse_version",
    # Commits
    "CommitRecord",
    "aggregate_bump",
    "classify_commit",
    "group_commits_by_type",
    "is_excluded_from_changelog",
    # Bump decisions
    "BumpDecision",
    "ReleaseState",
    "apply_manual_bump_command",
    "determine_version_bump",
    # Templates
    "BatchResult",
    "RenderContext",
    "TemplateRegion",
    "process_template_files",
    "process_version_files",
    "render_template",
    "rewrite_version_markers",
    "template_output_path",
    # Changelog
    "generate_changelog",
    "prepend_changelog",
]
