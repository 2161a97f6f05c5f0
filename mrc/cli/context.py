from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from mrc.core.config import FilterConfig, resolve_config
from mrc.core.errors import ErrorCode
from mrc.core.result import Err
from mrc.git.repository import NotARepository, Repository
from mrc.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    cwd: Path
    config: FilterConfig
    console: ConsoleProtocol


def build_context(
    cwd: Path | None = None,
    *,
    max_concurrency: int | None = None,
    stderr: bool = False,
) -> CLIContext:
    console = RichConsole(stderr=stderr)
    start = (cwd or Path.cwd()).expanduser().resolve()

    root_result = Repository(start).root()
    if isinstance(root_result, Err):
        console.error(root_result.error.message)
        code = ErrorCode.ENV_ERROR if isinstance(root_result.error, NotARepository) else ErrorCode.GIT_ERROR
        raise typer.Exit(code=int(code))
    root = root_result.value

    config_result = resolve_config(root, max_concurrency=max_concurrency)
    if isinstance(config_result, Err):
        console.error(config_result.error.message)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(root=root, cwd=start, config=config_result.value, console=console)
