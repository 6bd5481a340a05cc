"""
Supervision of a single OS process.

A :class:`Service` owns one spawned process and drives it through the
:class:`~cardano_launcher.service_status.ServiceStatus` lifecycle::

    STARTING -> STARTED -> STOPPING -> STOPPED
    STARTING -> STOPPED                  (spawn failure)

``start()`` and ``stop()`` are idempotent: concurrent and repeated callers
share one spawn and one termination sequence, and every ``stop()`` caller
receives the same :class:`ServiceExitStatus` object.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Mapping, Optional, Tuple, Union

import psutil

from .events import EventChannel
from .logging_config import LoggerLike, service_logger
from .service_helpers import decode_returncode, force_kill, request_graceful_shutdown, spawn_process, start_output_pumps
from .service_helpers.output_pump import LogSink
from .service_status import ServiceExitStatus, ServiceStatus

_MODULE_LOGGER = logging.getLogger(__name__)

DEFAULT_STOP_TIMEOUT_SECONDS = 60.0
FORCE_KILL_TIMEOUT_SECONDS = 5.0
OUTPUT_DRAIN_TIMEOUT_SECONDS = 1.0


@dataclass(frozen=True)
class StartService:
    """Everything needed to spawn one process.

    Attributes:
        command: Executable name or path
        args: Command line arguments
        extra_env: Variables added to the parent environment
        supports_clean_shutdown: Whether a graceful request may precede the kill
        shutdown_handler: The process exits when its stdin is closed
        readiness_port: TCP port that accepts connections once the process is ready
        cwd: Working directory, or the parent's when ``None``
    """

    command: str
    args: Tuple[str, ...] = ()
    extra_env: Mapping[str, str] = field(default_factory=dict)
    supports_clean_shutdown: bool = True
    shutdown_handler: bool = False
    readiness_port: Optional[int] = None
    cwd: Optional[str] = None


DescriptionSource = Union[StartService, Awaitable[StartService], Callable[[], Awaitable[StartService]]]


class Service:
    """Wraps one OS process and its lifecycle state."""

    def __init__(
        self,
        description: DescriptionSource,
        *,
        name: str = "service",
        logger: Optional[LoggerLike] = None,
        log_stream: Optional[LogSink] = None,
    ) -> None:
        self.name = name
        self.status_changed: EventChannel[ServiceStatus] = EventChannel(f"{name}.statusChanged")
        self._description_source = description
        self._logger = logger if logger is not None else service_logger(_MODULE_LOGGER, name)
        self._log_stream = log_stream

        self._status = ServiceStatus.STARTING
        self._description: Optional[StartService] = None
        self._process: Optional[asyncio.subprocess.Process] = None
        self._ps_process: Optional[psutil.Process] = None
        self._exit_status: Optional[ServiceExitStatus] = None
        self._exited = asyncio.Event()

        self._start_task: Optional[asyncio.Future] = None
        self._stop_task: Optional[asyncio.Future] = None
        self._watch_task: Optional[asyncio.Future] = None
        self._pump_tasks: List[asyncio.Task] = []
        self._stop_requested = False

        self._kill_deadline: Optional[float] = None
        self._deadline_changed = asyncio.Event()

    # Inspection

    def get_status(self) -> ServiceStatus:
        return self._status

    def get_process(self) -> Optional[psutil.Process]:
        """Handle for inspecting the spawned process, or ``None`` if it never ran."""
        return self._ps_process

    def get_config(self) -> Optional[StartService]:
        """The resolved process description, once ``start()`` has computed it."""
        return self._description

    @property
    def pid(self) -> Optional[int]:
        return self._process.pid if self._process is not None else None

    @property
    def exit_status(self) -> Optional[ServiceExitStatus]:
        return self._exit_status

    async def wait_stopped(self) -> ServiceExitStatus:
        """Wait until the service reaches ``STOPPED`` without requesting it."""
        await self._exited.wait()
        return self._exit_status  # type: ignore[return-value]

    # Lifecycle

    async def start(self) -> Optional[StartService]:
        """
        Spawn the process, once.

        Resolves when the OS has confirmed the spawn, not when the process is
        ready. Spawn failures do not raise: the service moves straight to
        ``STOPPED`` with ``exit_status.err`` set.

        Returns:
            The resolved process description, or ``None`` if it could not be computed
        """
        if self._start_task is None:
            self._start_task = asyncio.ensure_future(self._start())
        return await asyncio.shield(self._start_task)

    async def stop(self, timeout_seconds: float = DEFAULT_STOP_TIMEOUT_SECONDS) -> ServiceExitStatus:
        """
        Terminate the process and wait for it to exit.

        Processes supporting clean shutdown get a graceful request and up to
        ``timeout_seconds`` before a forced kill; others, and any call with a
        timeout of 0, are killed immediately. A later call with a shorter
        timeout brings the kill forward but never repeats a signal.

        Returns:
            The final exit status, identical for every caller
        """
        self._stop_requested = True
        self._tighten_deadline(timeout_seconds)
        if self._stop_task is None:
            self._stop_task = asyncio.ensure_future(self._stop())
        return await asyncio.shield(self._stop_task)

    # Internals

    def _exe(self) -> str:
        return self._description.command if self._description is not None else self.name

    def _set_status(self, status: ServiceStatus) -> None:
        self._status = status
        self._logger.debug("status changed to %s", status.name)
        self.status_changed.emit(status)

    def _finish(self, exit_status: ServiceExitStatus) -> None:
        if self._exit_status is None:
            self._exit_status = exit_status
        self._exited.set()
        if self._status != ServiceStatus.STOPPED:
            self._set_status(ServiceStatus.STOPPED)

    def _tighten_deadline(self, timeout_seconds: float) -> None:
        deadline = asyncio.get_running_loop().time() + max(timeout_seconds, 0.0)
        if self._kill_deadline is None or deadline < self._kill_deadline:
            self._kill_deadline = deadline
            self._deadline_changed.set()

    async def _resolve_description(self) -> StartService:
        source = self._description_source
        if callable(source):
            source = source()
        if inspect.isawaitable(source):
            source = await source
        return source

    async def _start(self) -> Optional[StartService]:
        if self._stop_requested:
            self._logger.debug("stop requested before start; not spawning")
            return self._description

        self._set_status(ServiceStatus.STARTING)
        try:
            self._description = await self._resolve_description()
            if self._stop_requested:
                self._logger.debug("stop requested while preparing; not spawning")
                self._finish(ServiceExitStatus(self._exe()))
                return self._description
            self._logger.info("Starting %s %s", self._description.command, " ".join(self._description.args))
            process = await spawn_process(self._description)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._logger.error("Failed to start %s: %s", self._exe(), exc)
            self._finish(ServiceExitStatus(self._exe(), err=exc))
            return self._description

        self._process = process
        try:
            self._ps_process = psutil.Process(process.pid)
        except psutil.NoSuchProcess:
            self._logger.debug("PID %s exited before it could be inspected", process.pid)
        self._pump_tasks = start_output_pumps(process, sink=self._log_stream, logger=self._logger)
        self._watch_task = asyncio.ensure_future(self._watch_exit(process))
        self._logger.info("Started %s with PID %s", self._exe(), process.pid)
        self._set_status(ServiceStatus.STARTED)
        return self._description

    async def _watch_exit(self, process: asyncio.subprocess.Process) -> None:
        returncode = await process.wait()
        if self._pump_tasks:
            _, still_running = await asyncio.wait(self._pump_tasks, timeout=OUTPUT_DRAIN_TIMEOUT_SECONDS)
            for task in still_running:
                task.cancel()

        code, signal_name = decode_returncode(returncode)
        if self._status == ServiceStatus.STARTED:
            self._logger.info("%s exited unexpectedly", self._exe())
            self._set_status(ServiceStatus.STOPPING)
        self._logger.info("%s exited with code %s signal %s", self._exe(), code, signal_name)
        self._finish(ServiceExitStatus(self._exe(), code=code, signal=signal_name))

    async def _stop(self) -> ServiceExitStatus:
        if self._start_task is not None and not self._start_task.done():
            await asyncio.shield(self._start_task)

        if self._process is None:
            if self._status != ServiceStatus.STOPPED:
                self._logger.debug("stopped before it was started")
                self._finish(ServiceExitStatus(self._exe()))
            return self._exit_status  # type: ignore[return-value]

        if self._status == ServiceStatus.STARTED:
            self._logger.info("Stopping %s", self._exe())
            self._set_status(ServiceStatus.STOPPING)

        if not self._exited.is_set():
            await self._terminate(self._process)
        return self._exit_status  # type: ignore[return-value]

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        loop = asyncio.get_running_loop()
        description = self._description
        if description is not None and description.supports_clean_shutdown and self._remaining(loop) > 0:
            request_graceful_shutdown(process, description, self._logger)
            await self._wait_until_deadline(loop)
            if self._exited.is_set():
                return
            self._logger.info("%s did not exit before the shutdown timeout; killing it", self._exe())

        force_kill(process, self._logger)
        try:
            await asyncio.wait_for(self._exited.wait(), timeout=FORCE_KILL_TIMEOUT_SECONDS)
        except asyncio.TimeoutError:
            self._logger.error("%s still alive %ss after kill", self._exe(), FORCE_KILL_TIMEOUT_SECONDS)
            self._finish(ServiceExitStatus(self._exe(), err=TimeoutError(f"PID {process.pid} did not exit after kill")))

    def _remaining(self, loop: asyncio.AbstractEventLoop) -> float:
        if self._kill_deadline is None:
            return DEFAULT_STOP_TIMEOUT_SECONDS
        return self._kill_deadline - loop.time()

    async def _wait_until_deadline(self, loop: asyncio.AbstractEventLoop) -> None:
        """Wait for exit, re-arming whenever a later stop() moves the deadline closer."""
        exited = asyncio.ensure_future(self._exited.wait())
        try:
            while not self._exited.is_set():
                remaining = self._remaining(loop)
                if remaining <= 0:
                    return
                self._deadline_changed.clear()
                deadline_moved = asyncio.ensure_future(self._deadline_changed.wait())
                try:
                    await asyncio.wait({exited, deadline_moved}, timeout=remaining, return_when=asyncio.FIRST_COMPLETED)
                finally:
                    deadline_moved.cancel()
        finally:
            exited.cancel()


def setup_service(
    description: DescriptionSource,
    logger: Optional[LoggerLike] = None,
    log_stream: Optional[LogSink] = None,
    *,
    name: str = "service",
) -> Service:
    """
    Create a :class:`Service` that is not yet started.

    Args:
        description: Process description, an awaitable resolving to one, or a
            zero-argument callable returning such an awaitable
        logger: Logger for lifecycle messages
        log_stream: Writable sink for the child's stdout and stderr
        name: Short name used in log messages
    """
    return Service(description, name=name, logger=logger, log_stream=log_stream)


__all__ = ["DEFAULT_STOP_TIMEOUT_SECONDS", "Service", "StartService", "setup_service"]
