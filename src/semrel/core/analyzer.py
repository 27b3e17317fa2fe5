"""Next-version calculation from classified commits.

Commits are folded oldest first into a working version:

- ``major`` type or a ``BREAKING CHANGE`` body marker: bump major
- ``minor`` type: bump minor
- ``patch`` type: bump patch
- anything else: no change

Merge commits and commits excluded by their scope never contribute.
Two optional policies change how bumps accumulate:

- single step: each level is applied at most once; applying a level
  re-arms every lower level
- fold: only the highest boundary crossed is applied, once

The repository is releasable when the resulting version is greater than
the starting one.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from semrel.core.commits import filter_commits, parse_commits
from semrel.core.version import BumpType, Version, version_from_tag
from semrel.logging import get_logger

if TYPE_CHECKING:
    from semrel.config.models import SemrelConfig, VersionConfig
    from semrel.core.commits import ClassifiedCommit
    from semrel.vcs.git import GitRepository

logger = get_logger(__name__)


class BumpPolicy(StrEnum):
    """How individual commit bumps accumulate."""

    STANDARD = "standard"
    SINGLE_STEP = "single_step"
    FOLD = "fold"

    @classmethod
    def from_config(cls, config: VersionConfig) -> BumpPolicy:
        if config.single_step:
            return cls.SINGLE_STEP
        if config.fold:
            return cls.FOLD
        return cls.STANDARD


@dataclass(frozen=True, slots=True)
class VersionStep:
    """Version reached after a commit that changed it."""

    version: Version
    bump: BumpType
    subject: str


@dataclass(frozen=True, slots=True)
class VersionCalculation:
    """Result of folding commits into a version."""

    start: Version
    version: Version
    commits_found: int
    steps: tuple[VersionStep, ...] = ()

    @property
    def is_releasable(self) -> bool:
        return self.version > self.start


def calculate_next_version(
    start: Version,
    commits: Sequence[ClassifiedCommit],
    policy: BumpPolicy = BumpPolicy.STANDARD,
    include_scopes: Sequence[str] = (),
    ignore_scopes: Sequence[str] = (),
) -> VersionCalculation:
    """Fold chronologically ordered commits into the next version.

    Args:
        start: Version of the last release
        commits: Classified commits, oldest first
        policy: Bump accumulation policy
        include_scopes: Scope allow-list (see ``should_exclude``)
        ignore_scopes: Scope deny-list (see ``should_exclude``)

    Returns:
        VersionCalculation with the resulting version and the path taken
    """
    eligible = filter_commits(commits, include_scopes, ignore_scopes)

    version = start
    steps: list[VersionStep] = []
    applied: set[BumpType] = set()

    for commit in eligible:
        bump = commit.bump_type
        if bump == BumpType.NONE:
            continue

        if policy == BumpPolicy.SINGLE_STEP:
            if bump in applied:
                logger.debug("bump_skipped", bump=str(bump), subject=commit.subject)
                continue
            applied.add(bump)
            applied -= {level for level in applied if level.severity < bump.severity}

        version = version.bump(bump)
        steps.append(VersionStep(version=version, bump=bump, subject=commit.subject))
        logger.debug(
            "version_step", version=str(version), bump=str(bump), subject=commit.subject
        )

    if policy == BumpPolicy.FOLD:
        version = start.bump(_highest_boundary(start, version))

    return VersionCalculation(
        start=start,
        version=version,
        commits_found=len(commits),
        steps=tuple(steps),
    )


def _highest_boundary(start: Version, end: Version) -> BumpType:
    if end.major > start.major:
        return BumpType.MAJOR
    if end.minor > start.minor:
        return BumpType.MINOR
    if end.patch > start.patch:
        return BumpType.PATCH
    return BumpType.NONE


def calculate_last_incompatible_codepush_version(commits: Iterable[ClassifiedCommit]) -> Version:
    """Find the last version that could not be shipped over the air.

    Replays the standard fold from ``0.0.0`` over the whole history and
    records the version at every commit that is not codepush friendly.

    Returns:
        Last recorded version, or ``0.0.0`` if every commit is friendly
    """
    version = Version.zero()
    last_incompatible = Version.zero()
    for commit in commits:
        version = version.bump(commit.bump_type)
        if commit.is_codepush_friendly is not True:
            last_incompatible = version
    return last_incompatible


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Everything known about the next release after analyzing history."""

    last_version: Version
    next_version: Version
    last_tag: str | None
    last_tag_hash: str
    last_incompatible_codepush_version: Version
    commits: tuple[ClassifiedCommit, ...] = ()
    version_path: tuple[VersionStep, ...] = ()

    @property
    def is_releasable(self) -> bool:
        return self.next_version > self.last_version

    @property
    def commits_found(self) -> int:
        return len(self.commits)

    @property
    def next_major(self) -> int:
        return self.next_version.major

    @property
    def next_minor(self) -> int:
        return self.next_version.minor

    @property
    def next_patch(self) -> int:
        return self.next_version.patch

    def as_outputs(self) -> dict[str, str]:
        """Flatten the result into string values for CI consumption."""
        return {
            "RELEASE_ANALYZED": "true",
            "RELEASE_IS_NEXT_VERSION_HIGHER": str(self.is_releasable).lower(),
            "RELEASE_LAST_TAG_HASH": self.last_tag_hash,
            "RELEASE_LAST_VERSION": str(self.last_version),
            "RELEASE_NEXT_MAJOR_VERSION": str(self.next_major),
            "RELEASE_NEXT_MINOR_VERSION": str(self.next_minor),
            "RELEASE_NEXT_PATCH_VERSION": str(self.next_patch),
            "RELEASE_NEXT_VERSION": str(self.next_version),
            "RELEASE_LAST_INCOMPATIBLE_CODEPUSH_VERSION": str(
                self.last_incompatible_codepush_version
            ),
        }


def analyze_commits(repo: GitRepository, config: SemrelConfig) -> AnalysisResult:
    """Find the last release and compute the next version.

    Args:
        repo: Git repository to analyze
        config: semrel configuration

    Returns:
        AnalysisResult

    Raises:
        TagVersionMismatchError: If the last tag does not contain a version
            matching ``tag_version_match``
        MultipleRootCommitsError: If the history has several root commits
    """
    version_config = config.version
    tag = repo.get_last_tag(version_config.match)

    if tag is None:
        logger.info("tag_not_found", match=version_config.match, start="root commit")
        last_version = Version.zero()
        tag_hash = repo.root_commit()
    else:
        last_version = version_from_tag(tag, version_config.tag_version_match)
        tag_hash = repo.hash_of(tag)
        logger.info("tag_found", tag=tag, version=str(last_version))

    commits = parse_commits(repo.get_commits(tag_hash), config.commits)
    logger.info("commits_found", count=len(commits))

    calculation = calculate_next_version(
        last_version,
        commits,
        BumpPolicy.from_config(version_config),
        config.commits.include_scopes,
        config.commits.ignore_scopes,
    )

    history = parse_commits(repo.get_commits(repo.root_commit()), config.commits)
    codepush_version = calculate_last_incompatible_codepush_version(history)

    return AnalysisResult(
        last_version=last_version,
        next_version=calculation.version,
        last_tag=tag,
        last_tag_hash=tag_hash,
        last_incompatible_codepush_version=codepush_version,
        commits=tuple(commits),
        version_path=calculation.steps,
    )
