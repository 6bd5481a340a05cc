"""Exception types raised by the launcher."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .exit_status import ExitStatus


class LauncherError(RuntimeError):
    """Base class for launcher failures."""


class PollingAbortedError(LauncherError):
    """Raised when a readiness wait is cancelled because a dependency died."""

    def __init__(self, message: str = "Polling stopped") -> None:
        super().__init__(message)


class BackendExitedError(LauncherError):
    """Raised from ``Launcher.start()`` when the backend exits before becoming ready.

    Attributes:
        status: Combined exit status of the wallet and node processes.
    """

    def __init__(self, status: "ExitStatus") -> None:
        from .exit_status import exit_status_message

        super().__init__(exit_status_message(status))
        self.status = status


__all__ = ["BackendExitedError", "LauncherError", "PollingAbortedError"]
