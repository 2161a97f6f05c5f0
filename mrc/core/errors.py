"""Exit codes for the mrc CLI.

The numeric values are process exit codes and should remain stable:
- 0: Success
- 1: User error (bad option, invalid configuration)
- 2: Environment error (not inside a git repository)
- 3: Git error (unknown commit, git command failed)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    GIT_ERROR = 3

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
