"""Forward child process output to log sinks."""

from __future__ import annotations

import asyncio
import io
import logging
from typing import IO, Any, List, Optional, Union

CHUNK_SIZE = 64 * 1024

LogSink = IO[Any]
ServiceLogger = Union[logging.Logger, logging.LoggerAdapter]


def _write_to_sink(sink: LogSink, chunk: bytes) -> None:
    if isinstance(sink, io.TextIOBase):
        sink.write(chunk.decode("utf-8", errors="replace"))
    else:
        sink.write(chunk)
    sink.flush()


async def pump_stream(
    reader: asyncio.StreamReader,
    *,
    sink: Optional[LogSink],
    logger: ServiceLogger,
    stream_name: str,
) -> None:
    """
    Copy ``reader`` into ``sink`` until EOF.

    Without a sink each complete line is logged at DEBUG level instead.
    """
    pending = b""
    while True:
        chunk = await reader.read(CHUNK_SIZE)
        if not chunk:
            break
        if sink is not None:
            try:
                _write_to_sink(sink, chunk)
            except (OSError, ValueError) as exc:
                logger.warning("Dropping %s output, sink write failed: %s", stream_name, exc)
                sink = None
            continue
        pending += chunk
        *lines, pending = pending.split(b"\n")
        for line in lines:
            _log_line(logger, stream_name, line)
    if pending and sink is None:
        _log_line(logger, stream_name, pending)


def _log_line(logger: ServiceLogger, stream_name: str, line: bytes) -> None:
    text = line.decode("utf-8", errors="replace").rstrip()
    if text:
        logger.debug("%s: %s", stream_name, text)


def start_output_pumps(
    process: asyncio.subprocess.Process,
    *,
    sink: Optional[LogSink],
    logger: ServiceLogger,
) -> List[asyncio.Task]:
    """Start one pump task per piped output stream of ``process``."""
    tasks = []
    for stream_name, reader in (("stdout", process.stdout), ("stderr", process.stderr)):
        if reader is None:
            continue
        tasks.append(asyncio.ensure_future(pump_stream(reader, sink=sink, logger=logger, stream_name=stream_name)))
    return tasks
