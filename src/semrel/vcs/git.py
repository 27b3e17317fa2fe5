"""Git access through the ``git`` command line.

Only the handful of queries semrel needs are implemented: the last
release tag, the commit a tag points at, the root commit, and the log of
commits since a given commit. Every call blocks until git exits and its
output is fully read.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from semrel.exceptions import GitError, MultipleRootCommitsError, NotAGitRepositoryError
from semrel.logging import get_logger

logger = get_logger(__name__)

# ASCII unit and record separators; commit bodies may contain anything else.
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = _FIELD_SEP.join(["%s", "%b", "%H", "%h", "%an", "%at"]) + _RECORD_SEP


@dataclass(frozen=True, slots=True)
class RawCommit:
    """A commit as read from ``git log``."""

    subject: str
    body: str
    full_hash: str
    short_hash: str
    author_name: str
    commit_timestamp: str

    @classmethod
    def from_log_record(cls, record: str) -> RawCommit:
        """Build a commit from one ``git log`` record in semrel's format."""
        fields = record.split(_FIELD_SEP)
        fields += [""] * (6 - len(fields))
        subject, body, full_hash, short_hash, author_name, timestamp = fields[:6]
        return cls(
            subject=subject,
            body=body.strip(),
            full_hash=full_hash,
            short_hash=short_hash,
            author_name=author_name,
            commit_timestamp=timestamp,
        )


class GitRepository:
    """A git work tree on disk."""

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path else Path.cwd()
        try:
            self._run("rev-parse", "--is-inside-work-tree")
        except GitError as e:
            raise NotAGitRepositoryError(f"Not a git repository: {self.path}") from e

    def _run(self, *args: str) -> str:
        """Run a git command and return its stdout.

        Raises:
            GitError: If git is missing or exits with a non-zero status
        """
        command = ["git", *args]
        logger.debug("git_run", command=" ".join(command))
        try:
            result = subprocess.run(
                command,
                cwd=self.path,
                capture_output=True,
                text=True,
                check=True,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e
        except subprocess.CalledProcessError as e:
            raise GitError(
                f"git {' '.join(args)} failed with exit code {e.returncode}",
                stderr=e.stderr,
            ) from e
        return result.stdout

    def get_last_tag(self, match: str) -> str | None:
        """Find the nearest tag reachable from HEAD matching a glob.

        A failing ``git describe`` (typically: no matching tag) means there
        is no previous release; it is logged and reported as ``None``.

        Args:
            match: Glob passed to ``git describe --match``, e.g. ``"v*"``

        Returns:
            Tag name, or None if no tag matches
        """
        try:
            tag = self._run("describe", "--tags", "--abbrev=0", f"--match={match}").strip()
        except GitError as e:
            logger.info("tag_not_found", match=match, stderr=(e.stderr or str(e)).strip())
            return None
        return tag or None

    def hash_of(self, tag: str) -> str:
        """Resolve a tag to the hash of the commit it points at."""
        return self._run("rev-list", "-n", "1", tag).strip()

    def root_commit(self) -> str:
        """Return the hash of the first commit of the history.

        Raises:
            MultipleRootCommitsError: If more than one root commit exists,
                which signals a shallow or partial clone
        """
        roots = self._run("rev-list", "--max-parents=0", "HEAD").split()
        if len(roots) != 1:
            raise MultipleRootCommitsError(roots)
        return roots[0]

    def get_commits(
        self, since: str | None = None, *, oldest_first: bool = True
    ) -> list[RawCommit]:
        """Read the commits in ``(since, HEAD]``.

        Args:
            since: Commit to start after; None reads the whole history
            oldest_first: Chronological order when True, newest first otherwise

        Returns:
            Commits in the requested order
        """
        args = ["log", f"--pretty=format:{_LOG_FORMAT}"]
        if oldest_first:
            args.append("--reverse")
        args.append(f"{since}..HEAD" if since else "HEAD")

        output = self._run(*args)
        records = [record.strip("\n") for record in output.split(_RECORD_SEP)]
        return [RawCommit.from_log_record(record) for record in records if record.strip()]
