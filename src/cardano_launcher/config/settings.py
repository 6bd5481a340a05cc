"""Process-wide launcher defaults sourced from the environment."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import ConfigurationError
from .runtime import env_seconds, env_str

DEFAULT_STOP_TIMEOUT_SECONDS = 60.0
DEFAULT_POLL_INTERVAL_SECONDS = 0.25
DEFAULT_API_HOST = "127.0.0.1"


@dataclass(frozen=True)
class LauncherSettings:
    """Tunables shared by every Launcher in this process."""

    stop_timeout_seconds: float = DEFAULT_STOP_TIMEOUT_SECONDS
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    api_host: str = DEFAULT_API_HOST

    @classmethod
    def from_env(cls) -> "LauncherSettings":
        """
        Build settings from ``CARDANO_LAUNCHER_*`` environment variables.

        Raises:
            ConfigurationError: If a value cannot be parsed or is out of range
        """
        poll_interval = env_seconds("CARDANO_LAUNCHER_POLL_INTERVAL_SECONDS", DEFAULT_POLL_INTERVAL_SECONDS)
        if not poll_interval:
            raise ConfigurationError.invalid_value("CARDANO_LAUNCHER_POLL_INTERVAL_SECONDS", poll_interval, "Must be greater than zero")
        return cls(
            stop_timeout_seconds=env_seconds("CARDANO_LAUNCHER_STOP_TIMEOUT_SECONDS", DEFAULT_STOP_TIMEOUT_SECONDS),
            poll_interval_seconds=poll_interval,
            api_host=env_str("CARDANO_LAUNCHER_API_HOST", DEFAULT_API_HOST),
        )


__all__ = [
    "DEFAULT_API_HOST",
    "DEFAULT_POLL_INTERVAL_SECONDS",
    "DEFAULT_STOP_TIMEOUT_SECONDS",
    "LauncherSettings",
]
