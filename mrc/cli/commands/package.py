"""Show how the current package was resolved."""

from __future__ import annotations

from pathlib import Path

import typer

from mrc.cli.context import build_context
from mrc.output.console import Style
from mrc.packages.locator import PackageLocator


def package(
    cwd: Path | None = typer.Option(None, "--cwd", help="Directory inside the package."),
) -> None:
    """Print the package path, name and dependencies."""
    ctx = build_context(cwd)
    locator = PackageLocator(ctx.root, ctx.cwd, ctx.config.manifest_name)

    path = "/".join(locator.package_path()) or "."
    ctx.console.print(f"root: {ctx.root}", Style.DIM)
    ctx.console.print(f"path: {path}")

    manifest = locator.target_manifest()
    if manifest is None:
        ctx.console.warning(f"no readable {ctx.config.manifest_name} for this package")
        return

    ctx.console.print(f"name: {manifest.name or '-'}")
    deps = sorted(manifest.dependency_set())
    ctx.console.print(f"dependencies: {', '.join(deps) if deps else '-'}")
