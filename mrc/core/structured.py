"""Helpers for narrowing untyped JSON/TOML data.

Manifests and config files are parsed into plain ``dict``/``list`` trees;
these helpers validate shapes at the boundary so the rest of the code works
with typed values.
"""

from __future__ import annotations

from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    """Return True if obj is a dict with string keys."""
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    if is_str_dict(obj):
        return obj
    return None


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value, stripped.

    Returns None if missing, not a str, or empty after stripping.
    """
    value = table.get(key)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_int(table: Mapping[str, object], key: str) -> int | None:
    """Get an integer value; booleans are rejected."""
    value = table.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    """Get a nested table (dict with string keys)."""
    return as_str_dict(table.get(key))


def get_str_map(table: Mapping[str, object], key: str) -> dict[str, str]:
    """Get a ``name -> string`` table, e.g. a dependency declaration.

    Non-table values yield an empty mapping. Entries whose value is not a
    string keep their key with an empty range, since only names matter for
    dependency matching.
    """
    nested = get_table(table, key)
    if nested is None:
        return {}
    return {k: v if isinstance(v, str) else "" for k, v in nested.items()}
