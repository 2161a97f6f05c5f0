"""Git repository abstraction.

The version-control query layer for commit filtering: where the repository
root is, which files a commit touched, and which commits a revision range
contains. All operations return Result types.

Usage:
    repo = Repository(Path.cwd())

    match repo.root():
        case Ok(root):
            print(f"Repository root: {root}")
        case Err(e):
            print(f"Error: {e.message}")

    match repo.changed_files("3f2a9c1"):
        case Ok(files):
            print("\\n".join(files))
        case Err(e):
            print(f"Lookup failed: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from mrc.core.result import Err, Ok, Result
from mrc.git.commit import Commit
from mrc.platform.process import ProcessError
from mrc.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_LOG_TIMEOUT_SECONDS = 3 * 60.0

# Field and record separators for `git log --format`.
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = f"%H{_FIELD_SEP}%an{_FIELD_SEP}%aI{_FIELD_SEP}%s{_FIELD_SEP}%b{_RECORD_SEP}"

_UNKNOWN_REVISION_MARKERS = (
    "bad object",
    "unknown revision",
    "ambiguous argument",
    "not a valid object name",
    "invalid object name",
)

__all__ = [
    "CommitNotFound",
    "GitCommandFailed",
    "GitError",
    "NotARepository",
    "Repository",
]


@dataclass(frozen=True, slots=True)
class CommitNotFound:
    """A commit or revision could not be resolved."""

    rev: str
    detail: str = ""

    @property
    def message(self) -> str:
        suffix = f": {self.detail}" if self.detail else ""
        return f"unknown commit {self.rev}{suffix}"


@dataclass(frozen=True, slots=True)
class NotARepository:
    """The working directory is not inside a git work tree."""

    path: Path

    @property
    def message(self) -> str:
        return f"not a git repository: {self.path}"


@dataclass(frozen=True, slots=True)
class GitCommandFailed:
    """Any other git failure."""

    command: str
    stderr: str
    returncode: int = 1

    @property
    def message(self) -> str:
        return self.stderr.strip() or f"git {self.command} failed (exit {self.returncode})"


GitError = CommitNotFound | NotARepository | GitCommandFailed


class Repository:
    """Git repository abstraction.

    Attributes:
        path: Any directory inside the work tree; git commands run there.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def root(self) -> Result[Path, GitError]:
        """Absolute path of the top of the work tree.

        Returns:
            Ok(Path) on success
            Err(NotARepository) outside a repository
        """
        match self._run(["rev-parse", "--show-toplevel"]):
            case Err(e):
                if "not a git repository" in e.stderr.lower() or e.returncode == -1:
                    return Err(NotARepository(path=self.path))
                return Err(_command_failed("rev-parse", e))
            case Ok(stdout):
                return Ok(Path(stdout.strip()).resolve())

    def changed_files(self, sha: str) -> Result[tuple[str, ...], GitError]:
        """Paths touched by a commit, relative to the repository root.

        The root commit is diffed against the empty tree. Merge commits
        report no files, matching `git diff-tree` without ``-m``.

        Returns:
            Ok(paths) in git's order (possibly empty)
            Err(CommitNotFound) when ``sha`` does not resolve
        """
        result = self._run(
            ["diff-tree", "--root", "--no-commit-id", "--name-only", "-r", "-z", sha]
        )
        match result:
            case Err(e):
                return Err(_lookup_error(sha, "diff-tree", e))
            case Ok(stdout):
                return Ok(tuple(p for p in stdout.split("\0") if p))

    def log(self, rev_range: str = "HEAD") -> Result[list[Commit], GitError]:
        """Commits reachable in ``rev_range``, newest first.

        Args:
            rev_range: Anything `git log` accepts, e.g. ``v1.0.0..HEAD``.
        """
        result = self._run(["log", f"--format={_LOG_FORMAT}", rev_range])
        match result:
            case Err(e):
                return Err(_lookup_error(rev_range, "log", e))
            case Ok(stdout):
                return Ok(self._parse_log(stdout))

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        timeout = _GIT_LOG_TIMEOUT_SECONDS if args[0] == "log" else _GIT_TIMEOUT_SECONDS
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)

    def _parse_log(self, output: str) -> list[Commit]:
        commits: list[Commit] = []
        for record in output.split(_RECORD_SEP):
            record = record.lstrip("\n")
            if not record.strip():
                continue
            parts = record.split(_FIELD_SEP, 4)
            if len(parts) < 5:
                continue
            sha, author, date, subject, body = parts
            commits.append(
                Commit(
                    hash=sha.strip(),
                    subject=subject,
                    body=body.strip(),
                    author=author or None,
                    date=date or None,
                )
            )
        return commits


def _command_failed(command: str, error: ProcessError) -> GitCommandFailed:
    return GitCommandFailed(
        command=command,
        stderr=error.stderr or error.stdout,
        returncode=error.returncode,
    )


def _lookup_error(rev: str, command: str, error: ProcessError) -> GitError:
    stderr = error.stderr.lower()
    if any(marker in stderr for marker in _UNKNOWN_REVISION_MARKERS):
        return CommitNotFound(rev=rev, detail=error.stderr.strip())
    if "not a git repository" in stderr:
        return NotARepository(path=Path(error.command[2]) if len(error.command) > 2 else Path("."))
    return _command_failed(command, error)
