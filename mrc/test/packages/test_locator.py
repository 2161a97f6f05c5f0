"""Tests for mrc.packages.locator module."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

from mrc.packages.locator import ManifestCache, PackageLocator
from mrc.packages.manifest import read_manifest


def _write(path: Path, data: object | str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")


class TestPackagePath:
    """Tests for package_dir() / package_path()."""

    def test_nested_package(self, tmp_path: Path) -> None:
        _write(tmp_path / "package.json", {"name": "root"})
        _write(tmp_path / "packages" / "ui" / "package.json", {"name": "ui"})
        (tmp_path / "packages" / "ui" / "src").mkdir()

        locator = PackageLocator(tmp_path, tmp_path / "packages" / "ui" / "src")

        assert locator.package_dir() == (tmp_path / "packages" / "ui").resolve()
        assert locator.package_path() == ("packages", "ui")

    def test_root_package(self, tmp_path: Path) -> None:
        _write(tmp_path / "package.json", {"name": "root"})

        assert PackageLocator(tmp_path, tmp_path).package_path() == ()

    def test_without_manifest_uses_cwd(self, tmp_path: Path) -> None:
        (tmp_path / "tools" / "scripts").mkdir(parents=True)

        locator = PackageLocator(tmp_path, tmp_path / "tools" / "scripts")

        assert locator.package_path() == ("tools", "scripts")
        assert locator.target_manifest() is None


class TestTargetManifest:
    """Tests for target_manifest()."""

    def test_reads_manifest(self, tmp_path: Path) -> None:
        _write(
            tmp_path / "module1" / "package.json",
            {"name": "module1", "dependencies": {"shared-lib": "*"}},
        )

        manifest = PackageLocator(tmp_path, tmp_path / "module1").target_manifest()

        assert manifest is not None
        assert manifest.name == "module1"
        assert "shared-lib" in manifest.dependency_set()

    def test_malformed_manifest_is_none(self, tmp_path: Path) -> None:
        _write(tmp_path / "module1" / "package.json", "{ broken")

        assert PackageLocator(tmp_path, tmp_path / "module1").target_manifest() is None


class TestOwnerPackage:
    """Tests for owner_package()."""

    def test_file_in_package(self, tmp_path: Path) -> None:
        _write(tmp_path / "shared-lib" / "package.json", {"name": "shared-lib"})

        owner = PackageLocator(tmp_path, tmp_path).owner_package("shared-lib/src/index.js")

        assert owner is not None
        assert owner.name == "shared-lib"

    def test_manifest_itself(self, tmp_path: Path) -> None:
        _write(tmp_path / "shared-lib" / "package.json", {"name": "shared-lib"})

        owner = PackageLocator(tmp_path, tmp_path).owner_package("shared-lib/package.json")

        assert owner is not None and owner.name == "shared-lib"

    def test_manifest_with_byte_order_mark(self, tmp_path: Path) -> None:
        (tmp_path / "lib").mkdir()
        (tmp_path / "lib" / "package.json").write_bytes(b'\xef\xbb\xbf{"name": "lib"}')

        owner = PackageLocator(tmp_path, tmp_path).owner_package("lib/index.js")

        assert owner is not None and owner.name == "lib"

    def test_no_manifest(self, tmp_path: Path) -> None:
        assert PackageLocator(tmp_path, tmp_path).owner_package("docs/readme.md") is None

    def test_falls_back_to_root_manifest(self, tmp_path: Path) -> None:
        _write(tmp_path / "package.json", {"name": "monorepo"})

        owner = PackageLocator(tmp_path, tmp_path).owner_package("docs/readme.md")

        assert owner is not None and owner.name == "monorepo"

    def test_malformed_manifest_is_skipped(self, tmp_path: Path) -> None:
        _write(tmp_path / "broken" / "package.json", "not json")

        assert PackageLocator(tmp_path, tmp_path).owner_package("broken/index.js") is None

    def test_does_not_escape_root(self, tmp_path: Path) -> None:
        _write(tmp_path / "package.json", {"name": "outside"})
        repo = tmp_path / "repo"
        repo.mkdir()

        assert PackageLocator(repo, repo).owner_package("a/b.txt") is None


class TestManifestCache:
    """Tests for ManifestCache memoization."""

    def test_reads_each_manifest_once(self, tmp_path: Path) -> None:
        _write(tmp_path / "lib" / "package.json", {"name": "lib"})
        cache = ManifestCache(tmp_path)

        with patch("mrc.packages.locator.read_manifest", wraps=read_manifest) as spy:
            path = cache.nearest(tmp_path / "lib" / "src")
            assert path is not None
            cache.read(path)
            cache.read(path)

        assert spy.call_count == 1

    def test_nearest_is_memoized(self, tmp_path: Path) -> None:
        cache = ManifestCache(tmp_path)

        with patch("mrc.packages.locator.find_nearest_manifest", return_value=None) as spy:
            cache.nearest(tmp_path / "a")
            cache.nearest(tmp_path / "a")
            cache.nearest(tmp_path / "b")

        assert spy.call_count == 2
