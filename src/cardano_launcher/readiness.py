"""TCP readiness probing for the wallet API server."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Union

from .errors import PollingAbortedError
from .logging_config import LoggerLike

_MODULE_LOGGER = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 0.25
DEFAULT_HOST = "127.0.0.1"

PortSource = Union[int, Callable[[], Optional[int]]]


async def try_connect(host: str, port: int, *, timeout: float) -> bool:
    """Return True if a TCP connection to ``host:port`` succeeds within ``timeout``."""
    try:
        _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout=timeout)
    except (OSError, asyncio.TimeoutError):
        return False
    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass  # peer reset while closing; the connect still succeeded
    return True


async def wait_for_port(
    port: PortSource,
    should_stop: Callable[[], bool],
    *,
    host: str = DEFAULT_HOST,
    interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    logger: Optional[LoggerLike] = None,
) -> None:
    """
    Poll until ``host:port`` accepts TCP connections.

    Each tick waits ``interval`` seconds, checks ``should_stop`` and then makes
    one connection attempt. A port of 0 or ``None`` is treated as not yet known:
    the tick is skipped and polling continues. Cancelling the awaiting task stops
    polling immediately.

    Args:
        port: The port, or a callable returning its current value
        should_stop: Predicate aborting the wait when it returns True
        host: Address to connect to
        interval: Seconds between attempts
        logger: Logger for poll milestones

    Raises:
        PollingAbortedError: If ``should_stop`` returned True first
    """
    log = logger if logger is not None else _MODULE_LOGGER
    get_port = port if callable(port) else (lambda: port)
    log.debug("Polling for API readiness every %ss", interval)

    while True:
        await asyncio.sleep(interval)
        if should_stop():
            raise PollingAbortedError()
        current_port = get_port()
        if not current_port:
            continue
        log.info("Waiting for tcp port %s:%s to accept connections...", host, current_port)
        if await try_connect(host, current_port, timeout=interval):
            log.info("... port is ready.")
            return
        log.debug("Not ready yet: %s:%s refused connection", host, current_port)
