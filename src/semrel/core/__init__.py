"""Core business logic for semrel.

This module contains the fundamental building blocks:
- Version value type and tag parsing
- Conventional commit parsing and scope filtering
- Next version calculation
- Release notes rendering
"""

from __future__ import annotations

from semrel.core.analyzer import (
    AnalysisResult,
    BumpPolicy,
    VersionCalculation,
    analyze_commits,
    calculate_last_incompatible_codepush_version,
    calculate_next_version,
)
from semrel.core.changelog import (
    ReleaseNotes,
    Section,
    build_release_notes,
    generate_changelog,
    render_changelog,
)
from semrel.core.commits import (
    ClassifiedCommit,
    CommitFormat,
    parse_commit,
    parse_commits,
    should_exclude,
)
from semrel.core.version import BumpType, Version, parse_version, version_from_tag

__all__ = [
    # Analysis
    "AnalysisResult",
    "BumpPolicy",
    # Version
    "BumpType",
    # Commits
    "ClassifiedCommit",
    "CommitFormat",
    # Changelog
    "ReleaseNotes",
    "Section",
    "Version",
    "VersionCalculation",
    "analyze_commits",
    "build_release_notes",
    "calculate_last_incompatible_codepush_version",
    "calculate_next_version",
    "generate_changelog",
    "parse_commit",
    "parse_commits",
    "parse_version",
    "render_changelog",
    "should_exclude",
    "version_from_tag",
]
