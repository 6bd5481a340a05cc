"""
Environment lookups for launcher tunables.

Values come from the process environment first, then from ``.env`` files in
the working directory and the home directory. File values are read once and
cached until :func:`reset_default_values` is called.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Optional, TypeVar

from .errors import ConfigurationError

T = TypeVar("T")

_TRUE_VALUES = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSE_VALUES = frozenset({"0", "false", "f", "no", "n", "off"})

_DOTENV_CANDIDATES = (Path(".env"), Path.home() / ".env")

_DEFAULT_VALUES: Optional[dict] = None


def _dotenv_defaults() -> dict:
    from .runtime_helpers import DotenvLoader

    global _DEFAULT_VALUES
    if _DEFAULT_VALUES is None:
        merged: dict = {}
        # Earlier candidates win.
        for path in reversed(_DOTENV_CANDIDATES):
            merged.update(DotenvLoader.load_from_file(path))
        _DEFAULT_VALUES = merged
    return _DEFAULT_VALUES


def reset_default_values() -> None:
    """Forget cached .env values so the next lookup re-reads the files."""
    global _DEFAULT_VALUES
    _DEFAULT_VALUES = None


def _lookup(name: str, *, strip: bool = True, allow_blank: bool = False) -> Optional[str]:
    for source in (os.environ, _dotenv_defaults()):
        value = source.get(name)
        if value is None:
            continue
        if strip:
            value = value.strip()
        if value or allow_blank:
            return value
    return None


def _typed(name: str, or_value, required: bool, parse: Callable[[str], T]) -> Optional[T]:
    raw = _lookup(name)
    if raw is None:
        if required and or_value is None:
            raise ConfigurationError.missing_value(name, "required environment variable")
        return or_value
    return parse(raw)


def _number(name: str, cast: Callable[[str], T], kind: str) -> Callable[[str], T]:
    def parse(raw: str) -> T:
        try:
            return cast(raw)
        except ValueError as exc:
            raise ConfigurationError.invalid_value(name, raw, f"Must be {kind}") from exc

    return parse


def env_str(
    name: str,
    or_value: Optional[str] = None,
    *,
    required: bool = False,
    strip: bool = True,
    allow_blank: bool = False,
) -> Optional[str]:
    """Fetch an environment variable as a string."""
    value = _lookup(name, strip=strip, allow_blank=allow_blank)
    if value is None:
        if required:
            raise ConfigurationError.missing_value(name, "required environment variable")
        return or_value
    return value


def env_float(name: str, or_value: Optional[float] = None, *, required: bool = False) -> Optional[float]:
    return _typed(name, or_value, required, _number(name, float, "a float"))


def env_bool(name: str, or_value: Optional[bool] = None, *, required: bool = False) -> Optional[bool]:
    """Fetch an environment variable as a boolean such as ``yes``/``no`` or ``1``/``0``."""

    def parse(raw: str) -> bool:
        lowered = raw.lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ConfigurationError.invalid_value(name, raw, "Must be a boolean")

    return _typed(name, or_value, required, parse)


def env_seconds(name: str, or_value: Optional[float] = None, *, required: bool = False) -> Optional[float]:
    """Fetch a duration in seconds, which may be fractional but not negative."""
    value = env_float(name, or_value, required=required)
    if value is not None and value < 0:
        raise ConfigurationError.invalid_value(name, value, "Must be non-negative")
    return value
