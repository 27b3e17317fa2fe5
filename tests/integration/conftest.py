"""Fixtures creating real git repositories."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

import pytest

_GIT_IDENTITY = {
    "GIT_AUTHOR_NAME": "Test Author",
    "GIT_AUTHOR_EMAIL": "author@example.com",
    "GIT_COMMITTER_NAME": "Test Author",
    "GIT_COMMITTER_EMAIL": "author@example.com",
    "GIT_CONFIG_NOSYSTEM": "1",
}


class GitRepoBuilder:
    """Creates commits and tags in a scratch repository."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def git(self, *args: str) -> str:
        result = subprocess.run(
            ["git", *args],
            cwd=self.path,
            env={**os.environ, **_GIT_IDENTITY, "HOME": str(self.path.parent)},
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout

    def commit(self, subject: str, body: str = "") -> str:
        message = f"{subject}\n\n{body}" if body else subject
        self.git("commit", "--allow-empty", "-q", "-m", message)
        return self.git("rev-parse", "HEAD").strip()

    def tag(self, name: str) -> None:
        self.git("tag", name)


@pytest.fixture
def git_repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> GitRepoBuilder:
    """An initialized git repository with one root commit."""
    for key, value in _GIT_IDENTITY.items():
        monkeypatch.setenv(key, value)
    monkeypatch.setenv("HOME", str(tmp_path))

    path = tmp_path / "repo"
    path.mkdir()
    builder = GitRepoBuilder(path)
    builder.git("init", "-q")
    builder.git("config", "commit.gpgsign", "false")
    builder.git("config", "tag.gpgsign", "false")
    builder.commit("chore: initial commit")
    return builder


@pytest.fixture
def git_repo_with_pyproject(git_repo: GitRepoBuilder) -> GitRepoBuilder:
    """A git repository with a pyproject.toml carrying semrel settings."""
    (git_repo.path / "pyproject.toml").write_text(
        """\
[project]
name = "test-project"
version = "1.0.0"

[tool.semrel.commits]
releases = { fix = "patch", feat = "minor", perf = "patch" }

[tool.semrel.changelog]
format = "plain"
display_links = false
"""
    )
    git_repo.git("add", "pyproject.toml")
    git_repo.commit("chore: add pyproject")
    return git_repo
