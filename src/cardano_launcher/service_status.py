"""Lifecycle states and exit reports for supervised processes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class ServiceStatus(IntEnum):
    """Lifecycle of one supervised process.

    Values are ordered so that ``status > ServiceStatus.STARTED`` means the
    process is no longer healthily running.
    """

    STARTING = 0  # start() called, process not yet spawned
    STARTED = 1  # OS confirmed the spawn
    STOPPING = 2  # stop requested or process exiting on its own
    STOPPED = 3  # terminal: exited, killed, or never spawned


@dataclass(frozen=True)
class ServiceExitStatus:
    """How a supervised process finished.

    Exactly one of ``code`` and ``signal`` is set after a normal termination.
    ``err`` is set only when the process could not be observed to run at all.
    """

    exe: str
    code: Optional[int] = None
    signal: Optional[str] = None
    err: Optional[BaseException] = None


def service_exit_status_message(status: ServiceExitStatus) -> str:
    """Render a one-line human-readable description of ``status``."""
    if status.code is not None:
        return f"{status.exe} exited with code {status.code}"
    if status.signal is not None:
        return f"{status.exe} exited with signal {status.signal}"
    if status.err is not None:
        return f"{status.exe} failed to start: {status.err}"
    return f"{status.exe} was not running"


__all__ = ["ServiceExitStatus", "ServiceStatus", "service_exit_status_message"]
