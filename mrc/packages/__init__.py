"""Package manifests and package location inside a monorepo."""

from .locator import ManifestCache, PackageLocator, PackagePath
from .manifest import Manifest, ManifestError, find_nearest_manifest, parse_manifest, read_manifest

__all__ = [
    "Manifest",
    "ManifestCache",
    "ManifestError",
    "PackageLocator",
    "PackagePath",
    "find_nearest_manifest",
    "parse_manifest",
    "read_manifest",
]
