"""Core types shared by every layer."""

from .config import ConfigError, FilterConfig, load_config, resolve_config
from .errors import ErrorCode
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # config
    "ConfigError",
    "FilterConfig",
    "load_config",
    "resolve_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
