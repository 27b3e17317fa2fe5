"""Version control access for semrel."""

from __future__ import annotations

from semrel.vcs.git import GitRepository, RawCommit

__all__ = ["GitRepository", "RawCommit"]
