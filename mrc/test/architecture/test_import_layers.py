from __future__ import annotations

import pytest

from ._utils import iter_source_files, matches_prefix, mrc_root, parse_imports

# package -> modules it must not import
FORBIDDEN = {
    "core": ("mrc.platform", "mrc.git", "mrc.packages", "mrc.services", "mrc.output", "mrc.cli"),
    "platform": ("mrc.git", "mrc.packages", "mrc.services", "mrc.output", "mrc.cli"),
    "git": ("mrc.packages", "mrc.services", "mrc.output", "mrc.cli"),
    "packages": ("mrc.git", "mrc.services", "mrc.output", "mrc.cli"),
    "services": ("mrc.cli",),
    "output": ("mrc.services", "mrc.cli"),
}


@pytest.mark.parametrize("layer", sorted(FORBIDDEN))
def test_layer_does_not_import_upward(layer: str) -> None:
    root = mrc_root()
    offenders: list[str] = []

    for file_path in iter_source_files(root / layer):
        rel = file_path.relative_to(root)
        for item in parse_imports(file_path):
            if any(matches_prefix(item.module, p) for p in FORBIDDEN[layer]):
                offenders.append(f"{rel}:{item.line}: forbidden import '{item.module}'")

    assert not offenders, f"{layer} dependency violations:\n" + "\n".join(offenders)
