"""Conventional commit parsing.

A commit subject is matched against a *commit format*: a pattern exposing
four groups in fixed order (type, scope, exclamation mark, subject).
Two presets are built in:

- ``default``: only ``docs``, ``fix``, ``feat``, ``chore``, ``style``,
  ``refactor``, ``perf`` and ``test`` are accepted as types
- ``angular``: any word is accepted as a type

Example subjects::

    feat: add user authentication
    fix(api): handle null response
    refactor(core)!: drop legacy config loader

The body is searched for ``BREAKING CHANGE:`` and ``codepush:`` markers at
the start of a line.
Parsing never raises: a subject that does not match is represented as an
invalid commit of type ``no_type``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from semrel.core.version import BumpType
from semrel.exceptions import ConfigValidationError

if TYPE_CHECKING:
    from semrel.config.models import CommitsConfig
    from semrel.vcs.git import RawCommit

NO_TYPE = "no_type"

DEFAULT_RELEASES: dict[str, str] = {"fix": "patch", "feat": "minor"}
DEFAULT_CODEPUSH_FRIENDLY: tuple[str, ...] = ("chore", "test", "docs")

FORMAT_PRESETS: dict[str, str] = {
    "default": (
        r"^(?P<type>docs|fix|feat|chore|style|refactor|perf|test)"
        r"(?:\((?P<scope>.*)\))?"
        r"(?P<exclamation_mark>!?): "
        r"(?P<subject>.*)"
    ),
    "angular": (
        r"^(?P<type>\w*)"
        r"(?:\((?P<scope>.*)\))?"
        r"(?P<exclamation_mark>!?): "
        r"(?P<subject>.*)"
    ),
}

GROUP_NAMES: tuple[str, ...] = ("type", "scope", "exclamation_mark", "subject")

_BREAKING_CHANGE_PATTERN = re.compile(r"^BREAKING CHANGES?:[ \t]*(?P<text>.*)", re.MULTILINE)
_CODEPUSH_PATTERN = re.compile(r"^codepush(?::[ \t]*(?P<token>.*?))?[ \t]*$", re.MULTILINE)


@dataclass(frozen=True, slots=True)
class CommitFormat:
    """A validated commit subject pattern with four capture groups."""

    name: str
    pattern: re.Pattern[str]

    @classmethod
    def resolve(cls, commit_format: str) -> CommitFormat:
        """Build a commit format from a preset name or a custom pattern.

        Args:
            commit_format: ``"default"``, ``"angular"`` or a regular expression

        Returns:
            Validated CommitFormat

        Raises:
            ConfigValidationError: If the pattern does not compile or does not
                expose exactly four groups (type, scope, exclamation mark,
                subject)
        """
        source = FORMAT_PRESETS.get(commit_format, commit_format)
        name = commit_format if commit_format in FORMAT_PRESETS else "custom"

        try:
            pattern = re.compile(source)
        except re.error as e:
            raise ConfigValidationError(f"Invalid commit_format pattern '{source}': {e}") from e

        if pattern.groups != len(GROUP_NAMES):
            raise ConfigValidationError(
                f"commit_format pattern '{source}' has {pattern.groups} groups; expected "
                "exactly 4 (type, scope, exclamation mark, subject)"
            )
        named = set(pattern.groupindex)
        if named and named != set(GROUP_NAMES):
            raise ConfigValidationError(
                f"commit_format pattern '{source}' names groups {sorted(named)}; "
                f"named groups must be exactly {list(GROUP_NAMES)}"
            )

        return cls(name=name, pattern=pattern)

    def match(self, subject: str) -> tuple[str, str | None, str | None, str] | None:
        """Match a subject and return its (type, scope, mark, subject) groups."""
        match = self.pattern.match(subject)
        if match is None:
            return None
        if self.pattern.groupindex:
            type_, scope, mark, text = (match.group(name) for name in GROUP_NAMES)
        else:
            type_, scope, mark, text = match.groups()
        return type_ or "", scope, mark, text or ""


@dataclass(frozen=True, slots=True)
class ClassifiedCommit:
    """A commit classified against a commit format.

    ``release`` and ``is_breaking_change`` are independent signals: the
    first comes from the type, the second from the body.
    """

    is_valid: bool
    type: str
    subject: str
    is_merge: bool
    scope: str | None = None
    has_exclamation_mark: bool = False
    release: BumpType | None = None
    is_breaking_change: bool = False
    breaking_change: str | None = None
    is_codepush_friendly: bool | None = None
    full_hash: str = ""
    short_hash: str = ""
    author_name: str = ""
    commit_timestamp: str = ""

    @property
    def bump_type(self) -> BumpType:
        """Bump this commit asks for on its own."""
        if self.is_breaking_change or self.release == BumpType.MAJOR:
            return BumpType.MAJOR
        return self.release or BumpType.NONE


def parse_commit(
    subject: str,
    body: str | None,
    commit_format: CommitFormat,
    releases: Mapping[str, str] | None = None,
    codepush_friendly: Iterable[str] = DEFAULT_CODEPUSH_FRIENDLY,
) -> ClassifiedCommit:
    """Classify a single commit.

    Args:
        subject: First line of the commit message
        body: Rest of the commit message (may be empty)
        commit_format: Pattern the subject is matched against
        releases: Map of commit type to ``major`` / ``minor`` / ``patch``
        codepush_friendly: Types considered safe for over-the-air updates

    Returns:
        ClassifiedCommit; ``is_valid`` is False when the subject did not match
    """
    releases = DEFAULT_RELEASES if releases is None else releases
    body = body or ""
    is_merge = subject.startswith("Merge")

    groups = commit_format.match(subject.strip())
    if groups is None:
        return ClassifiedCommit(is_valid=False, type=NO_TYPE, subject=subject, is_merge=is_merge)

    raw_type, scope, mark, text = groups
    commit_type = raw_type.lower()

    release = releases.get(commit_type)

    breaking_change = None
    breaking = _BREAKING_CHANGE_PATTERN.search(body)
    if breaking:
        breaking_change = breaking.group("text").strip()

    is_codepush_friendly = commit_type in set(codepush_friendly)
    codepush = _CODEPUSH_PATTERN.search(body)
    if codepush:
        is_codepush_friendly = codepush.group("token") == "ok"

    return ClassifiedCommit(
        is_valid=True,
        type=commit_type,
        subject=text.strip(),
        is_merge=is_merge,
        scope=scope or None,
        has_exclamation_mark=mark == "!",
        release=BumpType(release) if release else None,
        is_breaking_change=breaking is not None,
        breaking_change=breaking_change,
        is_codepush_friendly=is_codepush_friendly,
    )


def parse_raw_commit(
    commit: RawCommit,
    commit_format: CommitFormat,
    releases: Mapping[str, str] | None = None,
    codepush_friendly: Iterable[str] = DEFAULT_CODEPUSH_FRIENDLY,
) -> ClassifiedCommit:
    """Classify a commit read from git, keeping its hash and author."""
    classified = parse_commit(
        commit.subject, commit.body, commit_format, releases, codepush_friendly
    )
    return _with_decorations(classified, commit)


def parse_commits(commits: Iterable[RawCommit], config: CommitsConfig) -> list[ClassifiedCommit]:
    """Classify commits using the commit settings of a configuration.

    Order is preserved.
    """
    commit_format = config.format
    return [
        parse_raw_commit(commit, commit_format, config.releases, config.codepush_friendly)
        for commit in commits
    ]


def should_exclude(
    scope: str | None,
    include_scopes: Sequence[str] = (),
    ignore_scopes: Sequence[str] = (),
) -> bool:
    """Decide whether a commit is filtered out by its scope.

    A non-empty include list is an allow-list and wins; commits without a
    scope are excluded while it is active. Otherwise only scoped commits
    listed in ``ignore_scopes`` are excluded.
    """
    if include_scopes:
        return scope not in include_scopes
    if scope is not None:
        return scope in ignore_scopes
    return False


def filter_commits(
    commits: Iterable[ClassifiedCommit],
    include_scopes: Sequence[str] = (),
    ignore_scopes: Sequence[str] = (),
) -> list[ClassifiedCommit]:
    """Drop scope-excluded and merge commits, keeping order."""
    return [
        commit
        for commit in commits
        if not commit.is_merge and not should_exclude(commit.scope, include_scopes, ignore_scopes)
    ]


def _with_decorations(classified: ClassifiedCommit, commit: RawCommit) -> ClassifiedCommit:
    return replace(
        classified,
        full_hash=commit.full_hash,
        short_hash=commit.short_hash,
        author_name=commit.author_name,
        commit_timestamp=commit.commit_timestamp,
    )
