"""Shared configuration helpers and dataclasses."""

from .errors import ConfigurationError
from .runtime import (
    env_bool,
    env_float,
    env_seconds,
    env_str,
    reset_default_values,
)
from .settings import LauncherSettings

__all__ = [
    "ConfigurationError",
    "LauncherSettings",
    "env_bool",
    "env_float",
    "env_seconds",
    "env_str",
    "reset_default_values",
]
