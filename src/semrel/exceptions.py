"""Exception hierarchy for semrel.

Every error raised on purpose by semrel derives from :class:`SemrelError`,
so callers (and the CLI) can catch a single type.

Expected absences such as "no tag found" or "no commit matched the
pattern" are not errors and never raise.
"""

from __future__ import annotations


class SemrelError(Exception):
    """Base class for all semrel errors."""


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------


class ConfigError(SemrelError):
    """Configuration could not be loaded or is invalid."""


class ConfigNotFoundError(ConfigError):
    """No configuration file could be found."""


class ConfigValidationError(ConfigError):
    """Configuration values failed validation."""


class TagVersionMismatchError(ConfigError):
    """A release tag was found but no version could be extracted from it."""

    def __init__(self, tag: str, pattern: str) -> None:
        self.tag = tag
        self.pattern = pattern
        super().__init__(
            f"Could not parse a version from tag '{tag}' using "
            f"tag_version_match '{pattern}'. Check that the tag contains the "
            "version you expect and that the pattern defines the named groups "
            "'major', 'minor' and 'patch'."
        )


# -----------------------------------------------------------------------------
# Versions
# -----------------------------------------------------------------------------


class VersionError(SemrelError):
    """Version handling failed."""


class InvalidVersionError(VersionError):
    """A string is not a valid MAJOR.MINOR.PATCH version."""


# -----------------------------------------------------------------------------
# Git
# -----------------------------------------------------------------------------


class GitError(SemrelError):
    """A git command failed."""

    def __init__(self, message: str, stderr: str | None = None) -> None:
        self.stderr = stderr
        if stderr:
            message = f"{message}\n{stderr.strip()}"
        super().__init__(message)


class NotAGitRepositoryError(GitError):
    """The given path is not inside a git work tree."""


class MultipleRootCommitsError(GitError):
    """History has more than one root commit.

    This almost always means the repository is a shallow or partial clone.
    """

    def __init__(self, roots: list[str]) -> None:
        self.roots = roots
        super().__init__(
            f"Found {len(roots)} root commits ({', '.join(roots)}) instead of one. "
            "This usually happens when only part of the git history was fetched. "
            "Fetch the full history (for example `git fetch --unshallow`, or "
            "`fetch-depth: 0` with actions/checkout) and run again."
        )
