"""Graceful and forced termination of a spawned process."""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from typing import TYPE_CHECKING, List, Optional, Tuple, Union

import psutil

if TYPE_CHECKING:
    from ..service import StartService

ServiceLogger = Union[logging.Logger, logging.LoggerAdapter]


def decode_returncode(returncode: int) -> Tuple[Optional[int], Optional[str]]:
    """
    Split an asyncio return code into ``(code, signal)``.

    Negative return codes mean the process was terminated by a signal on POSIX.
    """
    if returncode >= 0:
        return returncode, None
    try:
        return None, signal.Signals(-returncode).name
    except ValueError:
        return None, f"SIG{-returncode}"


def request_graceful_shutdown(
    process: asyncio.subprocess.Process,
    description: "StartService",
    logger: ServiceLogger,
) -> None:
    """
    Ask ``process`` to exit on its own.

    Processes launched with a shutdown handler exit when their stdin closes;
    everything else gets SIGTERM, or CTRL_BREAK_EVENT on Windows.
    """
    if description.shutdown_handler and process.stdin is not None:
        logger.info("Closing stdin of PID %s to request shutdown", process.pid)
        process.stdin.close()
        return
    termination_signal = signal.CTRL_BREAK_EVENT if sys.platform == "win32" else signal.SIGTERM
    try:
        process.send_signal(termination_signal)
    except ProcessLookupError:
        logger.debug("PID %s already exited before shutdown request", process.pid)
        return
    logger.info("Sent %s to PID %s", getattr(termination_signal, "name", termination_signal), process.pid)


def _collect_children(pid: int) -> List[psutil.Process]:
    try:
        return psutil.Process(pid).children(recursive=True)
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return []


def force_kill(process: asyncio.subprocess.Process, logger: ServiceLogger) -> None:
    """Kill ``process`` and any descendants it left behind."""
    children = _collect_children(process.pid)
    try:
        process.kill()
    except ProcessLookupError:
        logger.debug("PID %s already exited before kill", process.pid)
    else:
        logger.warning("Killed PID %s", process.pid)

    for child in children:
        try:
            child.kill()
        except psutil.NoSuchProcess:
            continue
        except psutil.AccessDenied:
            logger.warning("Could not kill child PID %s: permission denied", child.pid)
            continue
        logger.debug("Killed child PID %s of %s", child.pid, process.pid)
