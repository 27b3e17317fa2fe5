"""Release notes rendering.

Classified commits are grouped into sections following the configured
type order, then rendered in one of three styles:

- ``markdown``: ``# title``, ``### section``, ``**bold**``, ``[hash](url)``
- ``slack``: ``*title*``, ``*section*``, ``*bold*``, ``<url|hash>``
- ``plain``: ``title``, ``section:``, no bold, bare ``url``

Notes are first built as a :class:`ReleaseNotes` value (a title plus a
list of sections, each a list of rendered lines) and joined into text
once at the end, so every section can be inspected on its own.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from semrel.core.commits import filter_commits, parse_commits
from semrel.logging import get_logger

if TYPE_CHECKING:
    from semrel.config.models import ChangelogConfig, SemrelConfig
    from semrel.core.analyzer import AnalysisResult
    from semrel.core.commits import ClassifiedCommit
    from semrel.core.version import Version
    from semrel.vcs.git import GitRepository

logger = get_logger(__name__)

BREAKING_CHANGES_TITLE = "BREAKING CHANGES"
OTHER_WORK_SCOPE = "Other work"
SUBLIST_INDENT = "   "


@dataclass(frozen=True, slots=True)
class TextStyle:
    """Format strings for one output style."""

    title: str
    heading: str
    bold: str
    link: str

    def link_to(self, commit: ClassifiedCommit, commit_url: str) -> str:
        url = f"{commit_url}/{commit.full_hash}"
        return self.link.format(url=url, short=commit.short_hash)


STYLES: dict[str, TextStyle] = {
    "markdown": TextStyle(title="# {}", heading="### {}", bold="**{}**", link="[{short}]({url})"),
    "slack": TextStyle(title="*{}*", heading="*{}*", bold="*{}*", link="<{url}|{short}>"),
    "plain": TextStyle(title="{}", heading="{}:", bold="{}", link="{url}"),
}


@dataclass(frozen=True, slots=True)
class Section:
    """A rendered section: heading line plus entry lines."""

    heading: str
    lines: tuple[str, ...]

    def render(self) -> str:
        return "\n".join((self.heading, *self.lines))


@dataclass(frozen=True, slots=True)
class ReleaseNotes:
    """Release notes before being joined into text."""

    title: str | None
    sections: tuple[Section, ...]

    def render(self) -> str:
        blocks = [section.render() for section in self.sections]
        if self.title:
            blocks.insert(0, self.title)
        return "\n\n".join(blocks).rstrip()


class _EntryFormatter:
    """Formats the text of a single commit entry."""

    def __init__(self, config: ChangelogConfig, style: TextStyle) -> None:
        self.config = config
        self.style = style

    def decorate(self, text: str, commit: ClassifiedCommit) -> str:
        if self.config.display_links:
            text += f" ({self.style.link_to(commit, self.config.commit_url)})"
        if self.config.display_author:
            text += f" - {commit.author_name}"
        return text

    def scope_label(self, scope: str) -> str:
        return self.style.bold.format(f"{scope}:")

    def line(self, commit: ClassifiedCommit) -> str:
        prefix = f"{self.scope_label(commit.scope)} " if commit.scope else ""
        return f"- {prefix}{self.decorate(commit.subject, commit)}"

    def breaking_line(self, commit: ClassifiedCommit) -> str:
        return f"- {self.decorate(commit.breaking_change or '', commit)}"

    def grouped_lines(self, commits: Sequence[ClassifiedCommit]) -> list[str]:
        groups: dict[str, list[ClassifiedCommit]] = {}
        unscoped: list[ClassifiedCommit] = []
        for commit in commits:
            if commit.scope is None:
                unscoped.append(commit)
            else:
                groups.setdefault(commit.scope, []).append(commit)
        if unscoped:
            groups.setdefault(OTHER_WORK_SCOPE, []).extend(unscoped)

        lines = []
        for scope, members in groups.items():
            label = self.scope_label(scope)
            if len(members) == 1:
                lines.append(f"{label} {self.decorate(members[0].subject, members[0])}")
                continue
            lines.append(label)
            lines.extend(
                f"{SUBLIST_INDENT}- {self.decorate(member.subject, member)}" for member in members
            )
        return lines


def build_release_notes(
    commits: Sequence[ClassifiedCommit],
    version: Version,
    config: ChangelogConfig,
    *,
    include_scopes: Sequence[str] = (),
    ignore_scopes: Sequence[str] = (),
    today: date | None = None,
) -> ReleaseNotes:
    """Group commits into sections.

    Merge commits and commits excluded by scope are left out. Commits keep
    the order they were given in.
    """
    style = STYLES[config.format]
    formatter = _EntryFormatter(config, style)
    eligible = filter_commits(commits, include_scopes, ignore_scopes)

    title = None
    if config.display_title:
        text = str(version)
        if config.title:
            text += f" {config.title}"
        text += f" ({(today or date.today()).isoformat()})"
        title = style.title.format(text)

    sections = []
    for commit_type in config.order:
        members = [commit for commit in eligible if commit.type == commit_type]
        if not members:
            continue
        if config.group_by_scope:
            lines = formatter.grouped_lines(members)
        else:
            lines = [formatter.line(commit) for commit in members]
        heading = style.heading.format(config.section_title(commit_type))
        sections.append(Section(heading=heading, lines=tuple(lines)))

    breaking = [commit for commit in eligible if commit.is_breaking_change]
    if breaking:
        sections.append(
            Section(
                heading=style.heading.format(BREAKING_CHANGES_TITLE),
                lines=tuple(formatter.breaking_line(commit) for commit in breaking),
            )
        )

    return ReleaseNotes(title=title, sections=tuple(sections))


def render_changelog(
    commits: Sequence[ClassifiedCommit],
    version: Version,
    config: ChangelogConfig,
    *,
    include_scopes: Sequence[str] = (),
    ignore_scopes: Sequence[str] = (),
    today: date | None = None,
) -> str:
    """Render release notes for ``version`` as text.

    Args:
        commits: Classified commits, oldest first
        version: Version the notes are for
        config: Changelog settings
        include_scopes: Scope allow-list
        ignore_scopes: Scope deny-list
        today: Release date (defaults to the current date)

    Returns:
        Release notes with trailing whitespace removed
    """
    notes = build_release_notes(
        commits,
        version,
        config,
        include_scopes=include_scopes,
        ignore_scopes=ignore_scopes,
        today=today,
    )
    return notes.render()


def generate_changelog(
    repo: GitRepository,
    analysis: AnalysisResult,
    config: SemrelConfig,
    *,
    today: date | None = None,
) -> str:
    """Render release notes for the commits since the last release.

    Args:
        repo: Git repository
        analysis: Result of ``analyze_commits`` for the same repository
        config: semrel configuration
        today: Release date (defaults to the current date)

    Returns:
        Release notes for ``analysis.next_version``
    """
    raw_commits = repo.get_commits(analysis.last_tag_hash)
    commits = parse_commits(raw_commits, config.commits)
    logger.info("commits_found", count=len(commits))

    return render_changelog(
        commits,
        analysis.next_version,
        config.changelog,
        include_scopes=config.commits.include_scopes,
        ignore_scopes=config.commits.ignore_scopes,
        today=today,
    )
