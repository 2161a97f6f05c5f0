"""List the commits relevant to the current package."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path

import typer

from mrc.cli.context import build_context
from mrc.core.errors import ErrorCode
from mrc.core.result import Err
from mrc.git.repository import Repository
from mrc.output.console import Style
from mrc.services.commits.service import CommitFilterService


class Only(str, Enum):
    all = "all"
    own = "own"
    dependents = "dependents"


def commits(
    rev_range: str = typer.Argument("HEAD", help="Revision range, e.g. v1.2.0..HEAD."),
    cwd: Path | None = typer.Option(None, "--cwd", help="Directory inside the package."),
    max_concurrency: int | None = typer.Option(
        None,
        "--max-concurrency",
        min=1,
        help="Max concurrent git lookups (overrides MRC_MAX_THREADS).",
    ),
    only: Only = typer.Option(Only.all, "--only", help="Which filter to apply."),
    as_json: bool = typer.Option(False, "--json", help="Print commits as JSON."),
) -> None:
    """List commits that touched the package or one of its dependencies."""
    ctx = build_context(cwd, max_concurrency=max_concurrency, stderr=as_json)

    log_result = Repository(ctx.root).log(rev_range)
    if isinstance(log_result, Err):
        ctx.console.error(log_result.error.message)
        raise typer.Exit(code=int(ErrorCode.GIT_ERROR))

    service = CommitFilterService(
        root=ctx.root,
        cwd=ctx.cwd,
        lookup=Repository(ctx.root).changed_files,
        config=ctx.config,
        console=ctx.console,
    )
    report_result = service.run(log_result.value, mode=only.value)
    if isinstance(report_result, Err):
        ctx.console.error(report_result.error.message)
        raise typer.Exit(code=int(ErrorCode.GIT_ERROR))
    report = report_result.value

    if as_json:
        typer.echo(json.dumps([c.as_dict() for c in report.commits], indent=2))
        return

    for commit in report.commits:
        ctx.console.print(f"{commit.short_hash} {commit.subject}")
    if not report.commits:
        ctx.console.print("no matching commits", Style.DIM)
