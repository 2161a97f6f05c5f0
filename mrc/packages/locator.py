"""Resolve the target package and the owner package of any file.

``PackageLocator`` answers two questions for one filtering run:

- where is the target package, as segments relative to the repository root
- which package (nearest enclosing manifest) does a changed file belong to

Owner lookups happen once per file per commit, so manifest discovery and
parsing are memoized in a ``ManifestCache`` that lives as long as the
locator.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path, PurePosixPath

from mrc.core.config import DEFAULT_MANIFEST_NAME
from mrc.core.result import Err, Ok, Result
from mrc.packages.manifest import Manifest, ManifestError, find_nearest_manifest, read_manifest

__all__ = ["ManifestCache", "PackageLocator", "PackagePath"]

LOG = logging.getLogger(__name__)

PackagePath = tuple[str, ...]


class ManifestCache:
    """Thread-safe memo of directory lookups and manifest parses.

    Recomputing an entry concurrently is harmless: both writers store the
    same value.
    """

    def __init__(self, root: Path, manifest_name: str = DEFAULT_MANIFEST_NAME) -> None:
        self.root = root
        self.manifest_name = manifest_name
        self._nearest: dict[Path, Path | None] = {}
        self._parsed: dict[Path, Result[Manifest, ManifestError]] = {}
        self._lock = threading.Lock()

    def nearest(self, directory: Path) -> Path | None:
        with self._lock:
            if directory in self._nearest:
                return self._nearest[directory]
        found = find_nearest_manifest(directory, name=self.manifest_name, stop=self.root)
        with self._lock:
            self._nearest[directory] = found
        return found

    def read(self, path: Path) -> Result[Manifest, ManifestError]:
        with self._lock:
            cached = self._parsed.get(path)
        if cached is not None:
            return cached
        result = read_manifest(path)
        with self._lock:
            self._parsed[path] = result
        return result


class PackageLocator:
    """Package lookups relative to one repository root.

    Attributes:
        root: Absolute repository root
        cwd: Directory the run was started from (inside the package)
        manifest_name: Manifest file name
    """

    def __init__(
        self,
        root: Path,
        cwd: Path,
        manifest_name: str = DEFAULT_MANIFEST_NAME,
    ) -> None:
        self.root = root.resolve()
        self.cwd = cwd.resolve()
        self.manifest_name = manifest_name
        self._cache = ManifestCache(self.root, manifest_name)

    def package_dir(self) -> Path:
        """Directory of the nearest manifest at or above ``cwd``.

        Falls back to ``cwd`` when no manifest exists up to the root; the
        package location alone is enough for own-package filtering.
        """
        manifest = self._cache.nearest(self.cwd)
        return manifest.parent if manifest is not None else self.cwd

    def package_path(self) -> PackagePath:
        """Target package directory as segments relative to the root.

        ``()`` means the package is the repository root.
        """
        return self.package_dir().relative_to(self.root).parts

    def target_manifest(self) -> Manifest | None:
        """Parsed manifest of the target package, if present and valid."""
        path = self._cache.nearest(self.cwd)
        if path is None:
            return None
        match self._cache.read(path):
            case Ok(manifest):
                return manifest
            case Err(error):
                LOG.debug("target %s", error.message)
                return None

    def owner_package(self, file_path: str) -> Manifest | None:
        """Nearest enclosing package of a repository-relative file.

        Missing and malformed manifests both yield None.
        """
        directory = self.root.joinpath(*PurePosixPath(file_path).parent.parts)
        manifest_path = self._cache.nearest(directory)
        if manifest_path is None:
            return None
        match self._cache.read(manifest_path):
            case Ok(manifest):
                return manifest
            case Err(error):
                LOG.debug("skipping %s (%s)", file_path, error.message)
                return None
