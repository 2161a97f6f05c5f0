"""Tests for git/repository.py."""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from mrc.core.result import Err, Ok
from mrc.git.commit import Commit, EnrichedCommit
from mrc.git.repository import (
    CommitNotFound,
    GitCommandFailed,
    NotARepository,
    Repository,
)

from .._gitrepo import commit_files, init_repo, requires_git


def make_completed_process(
    stdout: str = "",
    stderr: str = "",
    returncode: int = 0,
) -> subprocess.CompletedProcess[str]:
    """Create a mock CompletedProcess."""
    return subprocess.CompletedProcess(
        args=["git"],
        returncode=returncode,
        stdout=stdout,
        stderr=stderr,
    )


# =============================================================================
# Commit Tests
# =============================================================================


class TestCommit:
    """Tests for Commit and EnrichedCommit."""

    def test_short_hash(self) -> None:
        assert Commit(hash="0123456789abcdef", subject="s").short_hash == "01234567"

    def test_from_commit_copies_fields(self) -> None:
        commit = Commit(hash="abc", subject="feat: x", body="body", author="A", date="2024")
        enriched = EnrichedCommit.from_commit(commit, ("a.txt",))

        assert enriched.hash == "abc"
        assert enriched.subject == "feat: x"
        assert enriched.body == "body"
        assert enriched.files == ("a.txt",)
        assert commit != enriched

    def test_as_dict(self) -> None:
        enriched = EnrichedCommit(hash="abc", subject="s", files=("a", "b"))
        assert enriched.as_dict()["files"] == ["a", "b"]


# =============================================================================
# Repository Tests - Mocked subprocess
# =============================================================================


class TestRepository:
    """Tests for Repository class."""

    @patch("subprocess.run")
    def test_root(self, mock_run: MagicMock, tmp_path: Path) -> None:
        """Test root() returns the resolved top level."""
        mock_run.return_value = make_completed_process(stdout=f"{tmp_path}\n")

        result = Repository(tmp_path / "pkg").root()

        assert result == Ok(tmp_path.resolve())
        args = mock_run.call_args[0][0]
        assert args[-2:] == ["rev-parse", "--show-toplevel"]

    @patch("subprocess.run")
    def test_root_outside_repository(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(
            stderr="fatal: not a git repository (or any of the parent directories): .git\n",
            returncode=128,
        )

        result = Repository(tmp_path).root()

        assert isinstance(result, Err)
        assert isinstance(result.error, NotARepository)
        assert str(tmp_path) in result.error.message

    @patch("subprocess.run")
    def test_changed_files(self, mock_run: MagicMock, tmp_path: Path) -> None:
        """Test changed_files() splits NUL-separated output."""
        mock_run.return_value = make_completed_process(
            stdout="module1/readme.md\0module1/name with spaces.md\0"
        )

        result = Repository(tmp_path).changed_files("abc123")

        assert result == Ok(("module1/readme.md", "module1/name with spaces.md"))
        args = mock_run.call_args[0][0]
        assert "diff-tree" in args
        assert "--root" in args
        assert args[-1] == "abc123"

    @patch("subprocess.run")
    def test_changed_files_empty(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="")

        assert Repository(tmp_path).changed_files("abc123") == Ok(())

    @patch("subprocess.run")
    def test_changed_files_unknown_commit(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(
            stderr="fatal: bad object deadbeef\n",
            returncode=128,
        )

        result = Repository(tmp_path).changed_files("deadbeef")

        assert isinstance(result, Err)
        assert isinstance(result.error, CommitNotFound)
        assert result.error.rev == "deadbeef"
        assert "deadbeef" in result.error.message

    @patch("subprocess.run")
    def test_changed_files_other_failure(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stderr="fatal: out of memory", returncode=1)

        result = Repository(tmp_path).changed_files("abc")

        assert isinstance(result, Err)
        assert isinstance(result.error, GitCommandFailed)
        assert result.error.message == "fatal: out of memory"

    @patch("subprocess.run")
    def test_log(self, mock_run: MagicMock, tmp_path: Path) -> None:
        """Test log() parses unit/record separated output."""
        mock_run.return_value = make_completed_process(
            stdout=(
                "aaa\x1fAlice\x1f2024-01-02T10:00:00+00:00\x1ffeat: two\x1fline one\nline two\n\x1e\n"
                "bbb\x1fBob\x1f2024-01-01T10:00:00+00:00\x1ffix: one\x1f\x1e\n"
            )
        )

        result = Repository(tmp_path).log("v1.0.0..HEAD")

        assert isinstance(result, Ok)
        commits = result.value
        assert [c.hash for c in commits] == ["aaa", "bbb"]
        assert commits[0].subject == "feat: two"
        assert commits[0].body == "line one\nline two"
        assert commits[0].author == "Alice"
        assert commits[1].body == ""
        assert mock_run.call_args[0][0][-1] == "v1.0.0..HEAD"

    @patch("subprocess.run")
    def test_log_empty(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="")

        assert Repository(tmp_path).log() == Ok([])

    @patch("subprocess.run")
    def test_log_unknown_revision(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(
            stderr="fatal: ambiguous argument 'v9..HEAD': unknown revision",
            returncode=128,
        )

        result = Repository(tmp_path).log("v9..HEAD")

        assert isinstance(result, Err)
        assert isinstance(result.error, CommitNotFound)


# =============================================================================
# Repository Tests - Real git
# =============================================================================


@requires_git
class TestRepositoryWithGit:
    """Tests against a real repository."""

    def test_changed_files_and_log(self, tmp_path: Path) -> None:
        repo = init_repo(tmp_path / "repo")
        first = commit_files(repo, "init", {"package.json": "{}", "module1/a.txt": "a"})
        second = commit_files(repo, "touch module1", {"module1/a.txt": "b"})
        empty = commit_files(repo, "empty")

        repository = Repository(repo / "module1")

        assert repository.root() == Ok(repo)
        assert repository.changed_files(first) == Ok(("module1/a.txt", "package.json"))
        assert repository.changed_files(second) == Ok(("module1/a.txt",))
        assert repository.changed_files(empty) == Ok(())

        log = repository.log()
        assert isinstance(log, Ok)
        assert [c.hash for c in log.value] == [empty, second, first]
        assert [c.subject for c in log.value] == ["empty", "touch module1", "init"]

    def test_unknown_commit(self, tmp_path: Path) -> None:
        repo = init_repo(tmp_path / "repo")
        commit_files(repo, "init", {"a.txt": "a"})

        result = Repository(repo).changed_files("0" * 40)

        assert isinstance(result, Err)
        assert isinstance(result.error, CommitNotFound)

    def test_not_a_repository(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
        outside = tmp_path / "plain"
        outside.mkdir()

        result = Repository(outside).root()

        assert isinstance(result, Err)
        assert isinstance(result.error, NotARepository)

    @pytest.mark.skipif(sys.platform != "linux", reason="needs a filesystem that accepts non-UTF-8 names")
    def test_non_utf8_file_name(self, tmp_path: Path) -> None:
        repo = init_repo(tmp_path / "repo")
        name = "pkg/" + os.fsdecode(b"caf\xe9.txt")
        sha = commit_files(repo, "latin-1 name", {name: "x"})

        result = Repository(repo).changed_files(sha)

        assert result == Ok((name,))
        assert (repo / result.value[0]).is_file()
