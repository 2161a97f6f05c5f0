"""Package manifest discovery and parsing.

A package is a directory containing a manifest (``package.json`` by
default). The manifest declares the package name and its runtime,
development and peer dependencies.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from mrc.core.config import DEFAULT_MANIFEST_NAME
from mrc.core.result import Err, Ok, Result
from mrc.core.structured import as_str_dict, get_str, get_str_map

__all__ = [
    "Manifest",
    "ManifestError",
    "find_nearest_manifest",
    "parse_manifest",
    "read_manifest",
]


@dataclass(frozen=True, slots=True)
class ManifestError:
    """A manifest that could not be read or is not a JSON object."""

    path: Path
    reason: str

    @property
    def message(self) -> str:
        return f"invalid manifest {self.path}: {self.reason}"


@dataclass(frozen=True, slots=True)
class Manifest:
    """Parsed package manifest.

    Attributes:
        path: Absolute path of the manifest file
        name: Declared package name (None if absent)
        version: Declared version (None if absent)
        dependencies: Runtime dependencies, name -> version range
        dev_dependencies: Development dependencies
        peer_dependencies: Peer dependencies
    """

    path: Path
    name: str | None = None
    version: str | None = None
    dependencies: Mapping[str, str] = field(default_factory=dict)
    dev_dependencies: Mapping[str, str] = field(default_factory=dict)
    peer_dependencies: Mapping[str, str] = field(default_factory=dict)

    def dependency_set(self) -> dict[str, str]:
        """All declared dependencies merged into one mapping.

        Runtime, then dev, then peer; a later table overwrites the range of
        a name declared earlier.
        """
        return {
            **self.dependencies,
            **self.dev_dependencies,
            **self.peer_dependencies,
        }


def parse_manifest(data: object, path: Path) -> Result[Manifest, ManifestError]:
    """Build a Manifest from decoded JSON."""
    table = as_str_dict(data)
    if table is None:
        return Err(ManifestError(path=path, reason="root must be a JSON object"))

    return Ok(
        Manifest(
            path=path,
            name=get_str(table, "name"),
            version=get_str(table, "version"),
            dependencies=get_str_map(table, "dependencies"),
            dev_dependencies=get_str_map(table, "devDependencies"),
            peer_dependencies=get_str_map(table, "peerDependencies"),
        )
    )


def read_manifest(path: Path) -> Result[Manifest, ManifestError]:
    """Read and parse a manifest file.

    Returns:
        Ok(Manifest) on success
        Err(ManifestError) if the file is unreadable or not valid JSON
    """
    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        return Err(ManifestError(path=path, reason=str(e)))
    except UnicodeDecodeError as e:
        return Err(ManifestError(path=path, reason=f"not UTF-8: {e}"))

    try:
        data: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(ManifestError(path=path, reason=f"invalid JSON: {e}"))

    return parse_manifest(data, path)


def find_nearest_manifest(
    start: Path,
    *,
    name: str = DEFAULT_MANIFEST_NAME,
    stop: Path | None = None,
) -> Path | None:
    """Walk upward from ``start`` to the nearest directory holding a manifest.

    Args:
        start: Directory to start from (checked first). It does not need to
            exist, e.g. the directory of a file deleted by a commit.
        name: Manifest file name.
        stop: Last directory to check (inclusive), typically the
            repository root. When ``start`` is not under ``stop`` nothing
            is found.

    Returns:
        Path to the manifest, or None.
    """
    if stop is not None and not start.is_relative_to(stop):
        return None

    for directory in (start, *start.parents):
        candidate = directory / name
        if candidate.is_file():
            return candidate
        if stop is not None and directory == stop:
            break

    return None
