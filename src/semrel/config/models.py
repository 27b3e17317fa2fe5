"""Configuration models for semrel.

All settings live under ``[tool.semrel]`` in ``pyproject.toml`` and are
validated with pydantic. Every field has a default, so an empty section
(or no section at all) yields a working configuration.

Example::

    [tool.semrel.commits]
    commit_format = "angular"
    releases = { fix = "patch", feat = "minor", perf = "patch" }

    [tool.semrel.version]
    match = "ios/release/*"

    [tool.semrel.changelog]
    format = "slack"
    commit_url = "https://github.com/acme/app/commit"
"""

from __future__ import annotations

import re
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    ValidationError,
    field_validator,
    model_validator,
)

from semrel.core.commits import DEFAULT_CODEPUSH_FRIENDLY, DEFAULT_RELEASES, NO_TYPE, CommitFormat
from semrel.core.version import DEFAULT_TAG_VERSION_MATCH
from semrel.exceptions import ConfigValidationError

ReleaseLevel = Literal["major", "minor", "patch"]
ChangelogFormat = Literal["markdown", "slack", "plain"]

DEFAULT_ORDER: list[str] = ["feat", "fix", "refactor", "perf", "chore", "test", "docs", NO_TYPE]
DEFAULT_SECTIONS: dict[str, str] = {
    "feat": "Features",
    "fix": "Bug fixes",
    "refactor": "Code refactoring",
    "perf": "Performance improvement",
    "chore": "Building system",
    "test": "Testing",
    "docs": "Documentation",
    NO_TYPE: "Other work",
}


class _Model(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class CommitsConfig(_Model):
    """How commits are classified and filtered."""

    commit_format: str = Field(
        default="default",
        description='"default", "angular" or a custom pattern with four groups',
    )
    releases: dict[str, ReleaseLevel] = Field(default_factory=lambda: dict(DEFAULT_RELEASES))
    codepush_friendly: list[str] = Field(default_factory=lambda: list(DEFAULT_CODEPUSH_FRIENDLY))
    include_scopes: list[str] = Field(default_factory=list)
    ignore_scopes: list[str] = Field(default_factory=list)

    _format: CommitFormat = PrivateAttr()

    @field_validator("commit_format")
    @classmethod
    def _check_commit_format(cls, value: str) -> str:
        try:
            CommitFormat.resolve(value)
        except ConfigValidationError as e:
            raise ValueError(str(e)) from e
        return value

    def model_post_init(self, __context: Any) -> None:
        self._format = CommitFormat.resolve(self.commit_format)

    @property
    def format(self) -> CommitFormat:
        """Commit format resolved when the model is built."""
        return self._format


class VersionConfig(_Model):
    """How the last release is found and the next version computed."""

    match: str = Field(default="v*", min_length=1, description="git describe --match glob")
    tag_version_match: str = DEFAULT_TAG_VERSION_MATCH
    single_step: bool = False
    fold: bool = False
    show_version_path: bool = False
    debug: bool = False

    @field_validator("tag_version_match")
    @classmethod
    def _check_tag_version_match(cls, value: str) -> str:
        try:
            pattern = re.compile(value)
        except re.error as e:
            raise ValueError(f"Invalid tag_version_match pattern '{value}': {e}") from e
        missing = {"major", "minor", "patch"} - set(pattern.groupindex)
        if missing:
            raise ValueError(
                f"tag_version_match '{value}' is missing named groups: {', '.join(sorted(missing))}"
            )
        return value

    @model_validator(mode="after")
    def _check_policy(self) -> VersionConfig:
        if self.single_step and self.fold:
            raise ValueError("single_step and fold cannot be enabled together")
        return self


class ChangelogConfig(_Model):
    """How release notes are rendered."""

    format: ChangelogFormat = "markdown"
    title: str | None = None
    commit_url: str = ""
    order: list[str] = Field(default_factory=lambda: list(DEFAULT_ORDER))
    sections: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_SECTIONS))
    display_author: bool = False
    display_title: bool = True
    display_links: bool = True
    group_by_scope: bool = False

    def section_title(self, commit_type: str) -> str:
        return self.sections.get(commit_type, commit_type)


class SemrelConfig(_Model):
    """Root configuration."""

    commits: CommitsConfig = Field(default_factory=CommitsConfig)
    version: VersionConfig = Field(default_factory=VersionConfig)
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)

    @property
    def debug(self) -> bool:
        return self.version.debug

    def with_overrides(self, **sections: dict[str, object]) -> SemrelConfig:
        """Return a copy with some fields of each section replaced.

        Values of ``None`` are ignored so CLI options that were not given
        keep the configured value.

        Raises:
            ConfigValidationError: If the merged values are invalid
        """
        data = self.model_dump()
        for section, values in sections.items():
            data[section].update({k: v for k, v in values.items() if v is not None})
        try:
            return SemrelConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigValidationError(f"Invalid configuration: {e}") from e
