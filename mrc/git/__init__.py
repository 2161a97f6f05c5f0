"""Git operations module.

- Commit / EnrichedCommit: commit records passed through the filters
- Repository: root discovery, per-commit changed files, commit log

Usage:
    from mrc.git import Repository

    repo = Repository(Path.cwd())
    commits = repo.log("v1.0.0..HEAD").unwrap()
"""

from mrc.git.commit import Commit, EnrichedCommit
from mrc.git.repository import (
    CommitNotFound,
    GitCommandFailed,
    GitError,
    NotARepository,
    Repository,
)

__all__ = [
    # Commit
    "Commit",
    "EnrichedCommit",
    # Repository
    "CommitNotFound",
    "GitCommandFailed",
    "GitError",
    "NotARepository",
    "Repository",
]
