"""Commit filtering pipeline for one package.

    commits -> enrich once -> own-package filter  \\
                           -> dependency filter    -> combine -> report

Both filters read the same enriched list and run concurrently. All caches
(changed files, manifests) belong to a single ``run`` call.

Usage:
    match CommitFilterService.for_directory(Path.cwd(), console=console):
        case Ok(service):
            report = service.run(commits)
        case Err(error):
            console.error(error.message)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from mrc.core.config import FilterConfig
from mrc.core.result import Err, Ok, Result
from mrc.git.commit import Commit, EnrichedCommit
from mrc.git.repository import GitError, Repository
from mrc.output.console import ConsoleProtocol
from mrc.packages.locator import PackageLocator, PackagePath
from mrc.services.commits.enricher import CommitFileEnricher, FileLookup
from mrc.services.commits.filters import combine, filter_dependents, filter_own_package

__all__ = ["CommitFilterService", "FilterMode", "FilterReport"]

LOG = logging.getLogger(__name__)

FilterMode = Literal["all", "own", "dependents"]


@dataclass(frozen=True, slots=True)
class FilterReport:
    """Outcome of filtering a commit list for one package.

    Attributes:
        package_name: Manifest name, or the package path when unnamed
        package_path: Package directory relative to the repository root
        commits: Own-package matches, then dependency matches, unique by sha
        own_count: Number of own-package matches
        dependent_count: Number of dependency matches (before dedup)
    """

    package_name: str
    package_path: PackagePath
    commits: tuple[EnrichedCommit, ...]
    own_count: int = 0
    dependent_count: int = 0

    @property
    def count(self) -> int:
        return len(self.commits)


class CommitFilterService:
    """Select the commits relevant to the package containing ``cwd``."""

    def __init__(
        self,
        *,
        root: Path,
        cwd: Path,
        lookup: FileLookup,
        config: FilterConfig | None = None,
        console: ConsoleProtocol | None = None,
    ) -> None:
        self._root = root
        self._cwd = cwd
        self._lookup = lookup
        self._config = config or FilterConfig()
        self._console = console

    @classmethod
    def for_directory(
        cls,
        cwd: Path,
        *,
        config: FilterConfig | None = None,
        console: ConsoleProtocol | None = None,
    ) -> Result[CommitFilterService, GitError]:
        """Build a service backed by the git repository containing ``cwd``."""
        match Repository(cwd).root():
            case Err(error):
                return Err(error)
            case Ok(root):
                repo = Repository(root)
                return Ok(
                    cls(
                        root=root,
                        cwd=cwd,
                        lookup=repo.changed_files,
                        config=config,
                        console=console,
                    )
                )

    def locator(self) -> PackageLocator:
        return PackageLocator(self._root, self._cwd, self._config.manifest_name)

    def run(
        self,
        commits: Sequence[Commit],
        mode: FilterMode = "all",
    ) -> Result[FilterReport, GitError]:
        """Filter ``commits`` for the package.

        Returns:
            Ok(FilterReport) on success
            Err(GitError) if any changed-file lookup fails
        """
        locator = self.locator()
        package_path = locator.package_path()

        enricher = CommitFileEnricher(self._lookup, self._config.max_concurrency)
        enriched_result = enricher.enrich(commits)
        if isinstance(enriched_result, Err):
            return enriched_result
        enriched = enriched_result.value

        own_future: Future[list[EnrichedCommit]] | None = None
        dep_future: Future[list[EnrichedCommit]] | None = None
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="mrc-filter") as pool:
            if mode in ("all", "own"):
                own_future = pool.submit(filter_own_package, enriched, package_path)
            if mode in ("all", "dependents"):
                dep_future = pool.submit(
                    filter_dependents,
                    enriched,
                    locator,
                    max_concurrency=self._config.max_concurrency,
                )
            own = own_future.result() if own_future is not None else []
            dependents = dep_future.result() if dep_future is not None else []

        manifest = locator.target_manifest()
        name = (manifest.name if manifest else None) or "/".join(package_path) or "."

        report = FilterReport(
            package_name=name,
            package_path=package_path,
            commits=tuple(combine(own, dependents)),
            own_count=len(own),
            dependent_count=len(dependents),
        )
        LOG.debug(
            "%s: %d own, %d dependent, %d total",
            name,
            report.own_count,
            report.dependent_count,
            report.count,
        )
        if self._console is not None:
            self._console.info(
                f"Found {report.count} commits for package {name} since last release"
            )
        return Ok(report)
