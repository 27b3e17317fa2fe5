"""Semantic version value type.

Versions are plain ``MAJOR.MINOR.PATCH`` triples. They are immutable and
totally ordered (major, then minor, then patch), so "is this release
newer" is just ``next_version > last_version``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from semrel.exceptions import InvalidVersionError, TagVersionMismatchError

DEFAULT_TAG_VERSION_MATCH = r"(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)"

_VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


class BumpType(StrEnum):
    """Severity of a version increment."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    NONE = "none"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {
    BumpType.NONE: 0,
    BumpType.PATCH: 1,
    BumpType.MINOR: 2,
    BumpType.MAJOR: 3,
}


@dataclass(frozen=True, order=True, slots=True)
class Version:
    """A ``MAJOR.MINOR.PATCH`` version.

    Field order drives the generated comparison methods, which gives the
    lexicographic total order on (major, minor, patch).
    """

    major: int = 0
    minor: int = 0
    patch: int = 0

    def __post_init__(self) -> None:
        if min(self.major, self.minor, self.patch) < 0:
            raise InvalidVersionError(f"Version components must be non-negative: {self!s}")

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    @classmethod
    def zero(cls) -> Version:
        return cls(0, 0, 0)

    @classmethod
    def parse(cls, value: str) -> Version:
        """Parse a strict ``MAJOR.MINOR.PATCH`` string.

        Args:
            value: Version string, e.g. ``"1.2.3"``

        Returns:
            Parsed Version

        Raises:
            InvalidVersionError: If the string is not a valid version
        """
        match = _VERSION_PATTERN.match(value.strip())
        if not match:
            raise InvalidVersionError(f"Invalid version: '{value}'. Expected MAJOR.MINOR.PATCH")
        return cls(*(int(part) for part in match.groups()))

    def bump(self, bump_type: BumpType) -> Version:
        """Return the version incremented by ``bump_type``.

        A major bump resets minor and patch; a minor bump resets patch.
        """
        if bump_type == BumpType.MAJOR:
            return Version(self.major + 1, 0, 0)
        if bump_type == BumpType.MINOR:
            return Version(self.major, self.minor + 1, 0)
        if bump_type == BumpType.PATCH:
            return Version(self.major, self.minor, self.patch + 1)
        return self


def parse_version(value: str) -> Version:
    """Parse a version string. Shortcut for :meth:`Version.parse`."""
    return Version.parse(value)


def version_from_tag(tag: str, tag_version_match: str = DEFAULT_TAG_VERSION_MATCH) -> Version:
    """Extract the version embedded in a tag name.

    The pattern is searched (not anchored) in the tag, so prefixes such as
    ``v`` or ``ios/release/`` need no special handling.

    Args:
        tag: Tag name, e.g. ``"v1.0.8"``
        tag_version_match: Pattern with named groups ``major``, ``minor``
            and ``patch``

    Returns:
        Version found in the tag

    Raises:
        TagVersionMismatchError: If the pattern does not match the tag
    """
    match = re.search(tag_version_match, tag)
    if match is None:
        raise TagVersionMismatchError(tag, tag_version_match)
    groups = match.groupdict()
    try:
        return Version(int(groups["major"]), int(groups["minor"]), int(groups["patch"]))
    except (KeyError, TypeError, ValueError) as e:
        raise TagVersionMismatchError(tag, tag_version_match) from e
