"""Combining the exit reports of the wallet and node processes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

from .service_status import ServiceExitStatus, service_exit_status_message

SIGNAL_EXIT_CODE = 127


@dataclass(frozen=True)
class ExitStatus:
    """The result after the launched wallet backend has finished."""

    wallet: ServiceExitStatus
    node: ServiceExitStatus

    def __iter__(self) -> Iterator[ServiceExitStatus]:
        # Wallet first: it is the priority entry for combine_status.
        yield self.wallet
        yield self.node


def combine_status(statuses: Iterable[ServiceExitStatus]) -> int:
    """
    Reduce per-process exit reports to a single process exit code.

    Args:
        statuses: Exit reports in priority order (wallet before node)

    Returns:
        The first non-null exit code; otherwise ``SIGNAL_EXIT_CODE`` if any
        process was terminated by a signal; otherwise 0.
    """
    statuses = list(statuses)
    for status in statuses:
        if status.code is not None:
            return status.code
    if any(status.signal is not None for status in statuses):
        return SIGNAL_EXIT_CODE
    return 0


def exit_status_message(status: ExitStatus) -> str:
    """Format an :class:`ExitStatus` as a multiline human-readable string."""
    return "\n".join(service_exit_status_message(entry) for entry in status)


__all__ = ["ExitStatus", "SIGNAL_EXIT_CODE", "combine_status", "exit_status_message"]
