"""Commit relevance predicates for a package inside a monorepo.

Two independent filters select the commits that matter to a package:

- ``filter_own_package``: the commit touched a file at or under the
  package directory
- ``filter_dependents``: the commit touched a file of a package the target
  package declares as a dependency

``combine`` merges both selections without duplicates.
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor

from mrc.core.config import DEFAULT_MAX_CONCURRENCY
from mrc.git.commit import EnrichedCommit
from mrc.packages.locator import PackageLocator, PackagePath

__all__ = [
    "combine",
    "filter_dependents",
    "filter_own_package",
    "is_within_package",
    "modified_dependency",
    "path_segments",
]

LOG = logging.getLogger(__name__)


def path_segments(file_path: str) -> tuple[str, ...]:
    """Split a repository-relative path into normalized segments.

    Backslashes are treated as separators so Windows-style paths compare
    like git's forward-slash paths.
    """
    normalized = posixpath.normpath(file_path.replace("\\", "/"))
    return tuple(s for s in normalized.split("/") if s not in ("", "."))


def is_within_package(file_path: str, package_path: PackagePath) -> bool:
    """True if the file is the package directory itself or lies under it.

    Comparison is per segment: ``pkg`` does not contain ``pkg-2/index.js``.
    An empty package path (package at the repository root) contains
    every file.
    """
    segments = path_segments(file_path)
    if len(segments) < len(package_path):
        return False
    return all(p == f for p, f in zip(package_path, segments))


def filter_own_package(
    commits: Sequence[EnrichedCommit],
    package_path: PackagePath,
) -> list[EnrichedCommit]:
    """Commits that touched at least one file of the package."""
    LOG.debug('filter commits by package path: "%s"', "/".join(package_path))

    kept: list[EnrichedCommit] = []
    for commit in commits:
        package_file = next((f for f in commit.files if is_within_package(f, package_path)), None)
        if package_file is None:
            continue
        LOG.debug(
            'including commit "%s" because it modified package file "%s"',
            commit.subject,
            package_file,
        )
        kept.append(commit)
    return kept


def modified_dependency(
    commit: EnrichedCommit,
    locator: PackageLocator,
    dependencies: Mapping[str, str],
) -> str | None:
    """Name of the first dependency whose files the commit touched.

    Files are scanned in order and scanning stops at the first match. Files
    without an owner package, or whose owner manifest is malformed, are
    skipped.
    """
    for file_path in commit.files:
        owner = locator.owner_package(file_path)
        if owner is None or owner.name is None:
            continue
        if owner.name in dependencies:
            return owner.name
    return None


def filter_dependents(
    commits: Sequence[EnrichedCommit],
    locator: PackageLocator,
    *,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> list[EnrichedCommit]:
    """Commits that touched a package the target package depends on.

    Runtime, development and peer dependencies all count; transitive
    dependencies do not. Without a readable target manifest nothing can
    be a dependency, so the result is empty.
    """
    manifest = locator.target_manifest()
    if manifest is None:
        LOG.debug("no manifest for target package, skipping dependency filter")
        return []

    dependencies = manifest.dependency_set()
    if not dependencies or not commits:
        return []

    LOG.debug(
        "filter commits by dependencies of %s: %s",
        manifest.name,
        ", ".join(sorted(dependencies)),
    )

    workers = min(max_concurrency, len(commits))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="mrc-deps") as pool:
        matches = list(
            pool.map(lambda c: modified_dependency(c, locator, dependencies), commits)
        )

    kept: list[EnrichedCommit] = []
    for commit, dependency in zip(commits, matches):
        if dependency is None:
            continue
        LOG.debug(
            'including commit "%s" because it modified dependency "%s"',
            commit.subject,
            dependency,
        )
        kept.append(commit)
    return kept


def combine(
    first: Sequence[EnrichedCommit],
    second: Sequence[EnrichedCommit],
) -> list[EnrichedCommit]:
    """Concatenate two selections, keeping the first occurrence of each sha."""
    seen: set[str] = set()
    merged: list[EnrichedCommit] = []
    for commit in (*first, *second):
        if commit.hash in seen:
            continue
        seen.add(commit.hash)
        merged.append(commit)
    return merged
