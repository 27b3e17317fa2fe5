"""Shared fixtures for semrel tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from semrel.vcs.git import RawCommit

CommitFactory = Callable[..., RawCommit]


def make_commit(
    subject: str,
    body: str = "",
    full_hash: str = "long_hash",
    short_hash: str = "short_hash",
    author_name: str = "Jiri Otahal",
    commit_timestamp: str = "time",
) -> RawCommit:
    """Build a RawCommit with placeholder decorations."""
    return RawCommit(
        subject=subject,
        body=body,
        full_hash=full_hash,
        short_hash=short_hash,
        author_name=author_name,
        commit_timestamp=commit_timestamp,
    )


@pytest.fixture
def commit_factory() -> CommitFactory:
    return make_commit


@pytest.fixture
def feat_commit() -> RawCommit:
    return make_commit("feat: add user authentication", full_hash="feat123", short_hash="feat1")


@pytest.fixture
def fix_commit() -> RawCommit:
    return make_commit("fix(core): handle null response", full_hash="fix456", short_hash="fix4")


@pytest.fixture
def breaking_commit() -> RawCommit:
    return make_commit(
        "fix: drop legacy config",
        body="BREAKING CHANGE: the legacy config loader was removed",
        full_hash="break789",
        short_hash="brk7",
    )


@pytest.fixture
def sample_commits(
    feat_commit: RawCommit, fix_commit: RawCommit, breaking_commit: RawCommit
) -> list[RawCommit]:
    return [
        make_commit("docs: update readme"),
        feat_commit,
        fix_commit,
        make_commit("chore: bump dependencies"),
        breaking_commit,
        make_commit("Merge branch 'feature/x'"),
    ]
