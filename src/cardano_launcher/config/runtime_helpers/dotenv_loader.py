"""Reading ``KEY=value`` pairs from .env files."""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Dict, Optional, Tuple

from ..errors import ConfigurationError


class DotenvLoader:
    """Parser for the subset of .env syntax used for launcher settings.

    Supports comments, blank lines, an optional ``export`` prefix and single
    or double quoted values.
    """

    @staticmethod
    def load_from_file(path: Path) -> Dict[str, str]:
        """
        Return the pairs declared in ``path``, or an empty dict if it does not exist.

        Raises:
            ConfigurationError: If the file exists but cannot be read
        """
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise ConfigurationError.load_failed("dotenv file", str(path)) from exc

        values: Dict[str, str] = {}
        for line in text.splitlines():
            pair = DotenvLoader.parse_line(line)
            if pair is not None:
                values[pair[0]] = pair[1]
        return values

    @staticmethod
    def parse_line(line: str) -> Optional[Tuple[str, str]]:
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            return None
        key, raw_value = stripped.split("=", 1)
        key = key.strip()
        if key.startswith("export "):
            key = key[len("export ") :].strip()
        if not key:
            return None
        raw_value = raw_value.strip()
        if raw_value[:1] in ("'", '"'):
            try:
                parts = shlex.split(raw_value, comments=True)
            except ValueError:
                parts = [raw_value.strip("'\"")]
            return key, parts[0] if parts else ""
        return key, raw_value
