"""Typed configuration for a filtering run.

Values are resolved in this order, later sources winning:
1. built-in defaults
2. ``mrc.toml`` at the repository root (``[filter]`` table)
3. the ``MRC_MAX_THREADS`` environment variable
4. explicit overrides (CLI flags)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_int, get_str, get_table

__all__ = [
    "CONFIG_FILE_NAME",
    "DEFAULT_MANIFEST_NAME",
    "DEFAULT_MAX_CONCURRENCY",
    "MAX_THREADS_ENV",
    "ConfigError",
    "FilterConfig",
    "load_config",
    "load_config_or_default",
    "max_concurrency_from_env",
    "resolve_config",
]

DEFAULT_MAX_CONCURRENCY = 500
DEFAULT_MANIFEST_NAME = "package.json"
MAX_THREADS_ENV = "MRC_MAX_THREADS"
CONFIG_FILE_NAME = "mrc.toml"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or is invalid."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class FilterConfig:
    """Settings for one commit filtering run.

    Attributes:
        max_concurrency: Upper bound on concurrent git lookups and
            per-commit dependency checks.
        manifest_name: File name identifying a package directory.
    """

    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    manifest_name: str = DEFAULT_MANIFEST_NAME

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> FilterConfig:
        """Create a FilterConfig from parsed TOML."""
        table: StrDict = get_table(data, "filter") or {}
        max_concurrency = get_int(table, "max_concurrency")
        if max_concurrency is not None and max_concurrency <= 0:
            raise ValueError(f"filter.max_concurrency must be positive, got {max_concurrency}")
        return cls(
            max_concurrency=max_concurrency or DEFAULT_MAX_CONCURRENCY,
            manifest_name=get_str(table, "manifest") or DEFAULT_MANIFEST_NAME,
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[FilterConfig, ConfigError]:
    """Load configuration from a TOML file.

    Args:
        path: Path to mrc.toml

    Returns:
        Ok(FilterConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(FilterConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[FilterConfig, ConfigError]:
    """Like load_config, but a missing file means defaults."""
    if not path.exists():
        return Ok(FilterConfig())
    return load_config(path)


def max_concurrency_from_env(
    environ: Mapping[str, str] | None = None,
) -> Result[int | None, ConfigError]:
    """Read the concurrency override from the environment.

    Unset, empty and ``0`` mean "no override". Anything that is not a
    non-negative integer is an error.
    """
    env = os.environ if environ is None else environ
    raw = env.get(MAX_THREADS_ENV, "").strip()
    if not raw:
        return Ok(None)
    try:
        value = int(raw)
    except ValueError:
        return Err(ConfigError(f"{MAX_THREADS_ENV} must be an integer, got {raw!r}"))
    if value < 0:
        return Err(ConfigError(f"{MAX_THREADS_ENV} must not be negative, got {value}"))
    return Ok(value or None)


def resolve_config(
    repo_root: Path,
    *,
    environ: Mapping[str, str] | None = None,
    max_concurrency: int | None = None,
) -> Result[FilterConfig, ConfigError]:
    """Resolve the effective config for a repository.

    Args:
        repo_root: Repository root; ``mrc.toml`` is looked up there.
        environ: Environment mapping (defaults to ``os.environ``).
        max_concurrency: Explicit override, e.g. from a CLI flag.
    """
    base = load_config_or_default(repo_root / CONFIG_FILE_NAME)
    if isinstance(base, Err):
        return base
    config = base.value

    env_value = max_concurrency_from_env(environ)
    if isinstance(env_value, Err):
        return env_value
    if env_value.value is not None:
        config = replace(config, max_concurrency=env_value.value)

    if max_concurrency is not None:
        if max_concurrency <= 0:
            return Err(ConfigError(f"max concurrency must be positive, got {max_concurrency}"))
        config = replace(config, max_concurrency=max_concurrency)

    return Ok(config)
