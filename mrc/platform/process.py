"""Subprocess execution returning Results.

Every git invocation goes through ``run`` so that timeouts, missing
executables and non-zero exits all surface as a ``ProcessError`` value.
Output is decoded with ``surrogateescape``: git prints paths as raw bytes,
and undecodable names must still map back to the same file on disk.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from mrc.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run"]

LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that could not run or exited non-zero.

    Attributes:
        command: The command that was executed.
        returncode: Exit code, or -1 when the process never completed.
        stdout: Captured standard output (may be empty).
        stderr: Captured standard error, or a description of the failure.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


def run(
    cmd: list[str],
    cwd: Path,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute ``cmd`` in ``cwd`` and return its stdout.

    Args:
        cmd: Command and arguments.
        cwd: Working directory.
        timeout: Maximum seconds to wait (None for no limit).

    Returns:
        Ok(stdout) on exit 0, Err(ProcessError) otherwise.
    """
    LOG.debug("running %s (cwd=%s)", " ".join(cmd), cwd)
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="surrogateescape",
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout="",
                stderr=f"Command timed out after {timeout}s",
            )
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        LOG.debug("%s exited %d: %s", cmd[0], proc.returncode, proc.stderr.strip())
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)
