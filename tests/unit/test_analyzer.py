"""Tests for next version calculation."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from semrel.config.models import CommitsConfig, SemrelConfig, VersionConfig
from semrel.core.analyzer import (
    AnalysisResult,
    BumpPolicy,
    analyze_commits,
    calculate_last_incompatible_codepush_version,
    calculate_next_version,
)
from semrel.core.commits import CommitFormat, parse_commit
from semrel.core.version import BumpType, Version
from semrel.exceptions import MultipleRootCommitsError, TagVersionMismatchError
from semrel.vcs.git import GitRepository, RawCommit

DEFAULT = CommitFormat.resolve("default")
START = Version(1, 0, 8)


def classify(*lines: str, releases: dict[str, str] | None = None):
    """Classify 'subject|body' lines the way they appear in git logs."""
    commits = []
    for line in lines:
        subject, _, body = line.partition("|")
        commits.append(parse_commit(subject, body, DEFAULT, releases))
    return commits


def raw(line: str, full_hash: str = "long_hash") -> RawCommit:
    subject, _, body = line.partition("|")
    return RawCommit(subject, body, full_hash, full_hash[:7], "Jiri Otahal", "time")


class TestCalculateNextVersion:
    """Tests for calculate_next_version() with the standard policy."""

    def test_fix_bumps_patch(self):
        """docs + fix from 1.0.8 gives 1.0.9."""
        result = calculate_next_version(START, classify("docs: ...|", "fix: ...|"))

        assert result.version == Version(1, 0, 9)
        assert result.is_releasable

    def test_feat_and_fix(self):
        """feat then fix gives 1.1.1."""
        result = calculate_next_version(START, classify("docs: ...|", "feat: ...|", "fix: ...|"))
        assert result.version == Version(1, 1, 1)

    def test_breaking_change_bumps_major(self):
        """A BREAKING CHANGE body forces a major bump."""
        commits = classify("docs: ...|", "feat: ...|", "fix: ...|BREAKING CHANGE: Test")
        result = calculate_next_version(START, commits)

        assert result.version == Version(2, 0, 0)

    def test_scoped_commits(self):
        """Scopes do not affect bumping without filters."""
        commits = classify("docs(scope): ...|", "feat(test): ...|", "fix(test): ...|")
        assert calculate_next_version(START, commits).version == Version(1, 1, 1)

    def test_no_release_types(self):
        """Commits without release level leave the version unchanged."""
        commits = classify("docs: ...|", "chore: ...|", "refactor: ...|")
        result = calculate_next_version(START, commits)

        assert result.version == START
        assert not result.is_releasable

    def test_merge_and_invalid_commits(self):
        """Merges and unmatched subjects never bump."""
        result = calculate_next_version(START, classify("Merge ...|", "Custom ...|"))

        assert result.version == START
        assert not result.is_releasable
        assert result.commits_found == 2

    def test_merge_commit_matching_pattern_is_skipped(self):
        """A merge whose subject matches the pattern still does not contribute."""
        angular = CommitFormat.resolve("angular")
        commits = [parse_commit("Merge: hotfix", "", angular, {"merge": "patch"})]

        assert commits[0].is_valid
        assert commits[0].is_merge
        assert calculate_next_version(START, commits).version == START

    def test_empty_range(self):
        """No commits is not releasable and not an error."""
        result = calculate_next_version(START, [])

        assert result.version == START
        assert not result.is_releasable
        assert result.commits_found == 0

    def test_include_scopes(self):
        """Only included scopes count toward the bump."""
        commits = classify("feat(scope): ...|", "fix(ios): ...|", "fix(android): ...|")
        result = calculate_next_version(START, commits, include_scopes=["android", "ios"])

        assert result.version == Version(1, 0, 10)

    def test_ignore_scopes(self):
        """Ignored scopes do not count."""
        commits = classify("feat(bump): ...|", "fix: ...|")
        result = calculate_next_version(START, commits, ignore_scopes=["bump"])

        assert result.version == Version(1, 0, 9)

    def test_major_release_type(self):
        """A type mapped to major bumps major."""
        commits = classify("feat: ...|", releases={"feat": "major"})
        assert calculate_next_version(START, commits).version == Version(2, 0, 0)

    def test_version_path(self):
        """Each contributing commit records the version it produced."""
        result = calculate_next_version(START, classify("fix: a|", "docs: b|", "feat: c|"))

        assert [(str(s.version), s.bump, s.subject) for s in result.steps] == [
            ("1.0.9", BumpType.PATCH, "a"),
            ("1.1.0", BumpType.MINOR, "c"),
        ]

    def test_does_not_mutate_start(self):
        """The starting version is left untouched."""
        start = Version(1, 0, 8)
        calculate_next_version(start, classify("feat: ...|"))
        assert start == Version(1, 0, 8)


class TestProperties:
    """Invariants of the standard fold."""

    @pytest.mark.parametrize(
        "lines",
        [
            ("fix: a|",),
            ("docs: a|", "feat: b|"),
            ("chore: a|", "docs: b|BREAKING CHANGE: gone"),
            ("Custom|", "fix(x): a|", "Merge y|"),
        ],
    )
    def test_monotonicity(self, lines: tuple[str, ...]):
        """Any releasing commit makes the result greater than the start."""
        assert calculate_next_version(START, classify(*lines)).version > START

    @pytest.mark.parametrize(
        "lines",
        [("docs: a|",), ("chore: a|", "style: b|", "test: c|"), ("Merge x|", "nonsense|")],
    )
    def test_no_op_commits(self, lines: tuple[str, ...]):
        """Commits without release level leave the version unchanged."""
        assert calculate_next_version(START, classify(*lines)).version == START

    @pytest.mark.parametrize("subject", ["docs: a", "chore: a", "fix: a", "feat: a"])
    def test_breaking_change_dominance(self, subject: str):
        """Any breaking change produces a major bump with minor/patch reset."""
        commits = classify(f"{subject}|BREAKING CHANGE: x")
        assert calculate_next_version(Version(3, 4, 5), commits).version == Version(4, 0, 0)


class TestSingleStepPolicy:
    """Tests for the single step policy."""

    def test_repeated_fixes_bump_once(self):
        """Several fixes bump patch once."""
        commits = classify("fix: a|", "fix: b|", "fix: c|")
        result = calculate_next_version(START, commits, BumpPolicy.SINGLE_STEP)

        assert result.version == Version(1, 0, 9)

    def test_higher_bump_rearms_lower(self):
        """A minor bump lets patch apply once more."""
        commits = classify("fix: a|", "fix: b|", "feat: c|", "fix: d|", "feat: e|", "fix: f|")
        result = calculate_next_version(START, commits, BumpPolicy.SINGLE_STEP)

        assert result.version == Version(1, 1, 1)

    def test_major_rearms_minor_and_patch(self):
        """After a major bump, minor and patch apply once each."""
        commits = classify(
            "feat: a|",
            "fix: b|BREAKING CHANGE: x",
            "fix: c|BREAKING CHANGE: y",
            "feat: d|",
            "fix: e|",
            "fix: f|",
        )
        result = calculate_next_version(START, commits, BumpPolicy.SINGLE_STEP)

        assert result.version == Version(2, 1, 1)


class TestFoldPolicy:
    """Tests for the fold policy."""

    @pytest.mark.parametrize(
        ("lines", "expected"),
        [
            (("fix: a|", "fix: b|", "fix: c|"), Version(1, 0, 9)),
            (("fix: a|", "feat: b|", "feat: c|", "fix: d|"), Version(1, 1, 0)),
            (
                ("feat: a|", "fix: b|BREAKING CHANGE: x", "fix: c|BREAKING CHANGE: y"),
                Version(2, 0, 0),
            ),
            (("docs: a|",), START),
        ],
    )
    def test_single_bump_at_highest_level(self, lines: tuple[str, ...], expected: Version):
        """Exactly one bump at the highest boundary crossed."""
        result = calculate_next_version(START, classify(*lines), BumpPolicy.FOLD)
        assert result.version == expected


class TestBumpPolicy:
    """Tests for BumpPolicy.from_config()."""

    def test_from_config(self):
        """Policy follows the version settings."""
        assert BumpPolicy.from_config(VersionConfig()) == BumpPolicy.STANDARD
        assert BumpPolicy.from_config(VersionConfig(single_step=True)) == BumpPolicy.SINGLE_STEP
        assert BumpPolicy.from_config(VersionConfig(fold=True)) == BumpPolicy.FOLD


class TestCodepushVersion:
    """Tests for calculate_last_incompatible_codepush_version()."""

    def test_all_friendly(self):
        """Only friendly commits gives 0.0.0."""
        commits = classify("chore: a|", "docs: b|", "fix: c|codepush: ok")
        assert calculate_last_incompatible_codepush_version(commits) == Version(0, 0, 0)

    def test_records_last_unfriendly(self):
        """The version at the last unfriendly commit is reported."""
        commits = classify(
            "feat: native module|",
            "fix: js only|codepush: ok",
            "fix: native crash|",
            "chore: a|",
            "fix: js fix|codepush: ok",
        )
        assert calculate_last_incompatible_codepush_version(commits) == Version(0, 1, 2)

    def test_unmatched_commits_are_unfriendly(self):
        """Commits that did not match count as incompatible."""
        commits = classify("feat: a|codepush: ok", "Some message|", "fix: b|codepush: ok")
        assert calculate_last_incompatible_codepush_version(commits) == Version(0, 1, 0)


class TestAnalysisResult:
    """Tests for AnalysisResult."""

    def test_outputs(self):
        """Outputs expose every value of the run as strings."""
        result = AnalysisResult(
            last_version=Version(1, 0, 8),
            next_version=Version(1, 1, 0),
            last_tag="v1.0.8",
            last_tag_hash="abc123",
            last_incompatible_codepush_version=Version(1, 0, 2),
        )

        assert result.is_releasable
        assert result.as_outputs() == {
            "RELEASE_ANALYZED": "true",
            "RELEASE_IS_NEXT_VERSION_HIGHER": "true",
            "RELEASE_LAST_TAG_HASH": "abc123",
            "RELEASE_LAST_VERSION": "1.0.8",
            "RELEASE_NEXT_MAJOR_VERSION": "1",
            "RELEASE_NEXT_MINOR_VERSION": "1",
            "RELEASE_NEXT_PATCH_VERSION": "0",
            "RELEASE_NEXT_VERSION": "1.1.0",
            "RELEASE_LAST_INCOMPATIBLE_CODEPUSH_VERSION": "1.0.2",
        }


@pytest.fixture
def mock_repo() -> MagicMock:
    repo = MagicMock(spec=GitRepository)
    repo.get_last_tag.return_value = "v1.0.8"
    repo.hash_of.return_value = "tag_hash"
    repo.root_commit.return_value = "root_hash"
    return repo


class TestAnalyzeCommits:
    """Tests for analyze_commits()."""

    def test_with_tag(self, mock_repo: MagicMock):
        """Version comes from the tag and commits since its commit."""
        since_tag = [raw("docs: ...|"), raw("fix: ...|")]
        history = [raw("feat: native|"), *since_tag]
        mock_repo.get_commits.side_effect = lambda since: {
            "tag_hash": since_tag,
            "root_hash": history,
        }[since]

        result = analyze_commits(mock_repo, SemrelConfig())

        mock_repo.get_last_tag.assert_called_once_with("v*")
        mock_repo.hash_of.assert_called_once_with("v1.0.8")
        assert result.last_tag == "v1.0.8"
        assert result.last_tag_hash == "tag_hash"
        assert result.last_version == Version(1, 0, 8)
        assert result.next_version == Version(1, 0, 9)
        assert result.is_releasable
        assert result.commits_found == 2
        assert result.last_incompatible_codepush_version == Version(0, 1, 1)

    def test_without_tag(self, mock_repo: MagicMock):
        """Without a tag, history starts at the root commit and 0.0.0."""
        mock_repo.get_last_tag.return_value = None
        mock_repo.get_commits.return_value = [raw("feat: first feature|")]

        result = analyze_commits(mock_repo, SemrelConfig())

        mock_repo.hash_of.assert_not_called()
        assert result.last_tag is None
        assert result.last_tag_hash == "root_hash"
        assert result.last_version == Version(0, 0, 0)
        assert result.next_version == Version(0, 1, 0)

    def test_uses_policy_and_scopes(self, mock_repo: MagicMock):
        """Config scopes and policy are applied."""
        mock_repo.get_commits.return_value = [
            raw("feat(scope): ...|"),
            raw("fix(ios): ...|"),
            raw("fix(android): ...|"),
        ]
        config = SemrelConfig(
            commits=CommitsConfig(include_scopes=["android", "ios"]),
            version=VersionConfig(single_step=True),
        )

        result = analyze_commits(mock_repo, config)

        assert result.next_version == Version(1, 0, 9)

    def test_tag_version_mismatch(self, mock_repo: MagicMock):
        """A tag without a parsable version aborts the run."""
        mock_repo.get_last_tag.return_value = "latest"

        with pytest.raises(TagVersionMismatchError, match="latest"):
            analyze_commits(mock_repo, SemrelConfig())

    def test_multiple_roots(self, mock_repo: MagicMock):
        """A shallow clone is reported, not silently defaulted."""
        mock_repo.get_commits.return_value = []
        mock_repo.root_commit.side_effect = MultipleRootCommitsError(["a", "b"])

        with pytest.raises(MultipleRootCommitsError, match="full history"):
            analyze_commits(mock_repo, SemrelConfig())
