"""
Orchestration of the node and wallet processes as one wallet backend.

The :class:`Launcher` starts the node, then the wallet, and waits for the
wallet API to accept connections. If either process exits, the other is
stopped too and a single ``exit`` notification carries both exit reports.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Set

from .config import LauncherSettings
from .errors import BackendExitedError, PollingAbortedError
from .events import OneShotEvent
from .exit_status import ExitStatus, exit_status_message
from .launch_config import LaunchConfig
from .launcher_helpers.service_commands import make_service_commands, validate_launch_config
from .logging_config import LoggerLike, service_logger
from .readiness import wait_for_port
from .service import Service, setup_service
from .service_status import ServiceStatus
from .signal_bridge import SignalBridge, default_bridge

_MODULE_LOGGER = logging.getLogger(__name__)

API_PATH = "/v2/"


@dataclass(frozen=True)
class RequestParams:
    port: int
    path: str
    hostname: str


@dataclass(frozen=True)
class Api:
    """Connection parameters for the wallet API server."""

    base_url: str
    request_params: RequestParams

    @classmethod
    def v2(cls, port: int, hostname: str = "127.0.0.1", *, tls: bool = False) -> "Api":
        scheme = "https" if tls else "http"
        return cls(
            base_url=f"{scheme}://{hostname}:{port}{API_PATH}",
            request_params=RequestParams(port=port, path=API_PATH, hostname=hostname),
        )


class WalletBackendEvents:
    def __init__(self) -> None:
        self.ready: OneShotEvent[Api] = OneShotEvent("ready")
        self.exit: OneShotEvent[ExitStatus] = OneShotEvent("exit")


class WalletBackend:
    """Public handle on the launched backend.

    ``events.ready`` fires once the API accepts connections and ``events.exit``
    fires once both processes have stopped. Each fires at most once.
    """

    def __init__(self, get_api: Callable[[], Api]) -> None:
        self._get_api = get_api
        self.events = WalletBackendEvents()

    def get_api(self) -> Api:
        return self._get_api()


class Launcher:
    """Supervises one node and one wallet process.

    Construction validates the configuration and creates both services
    without spawning anything. Call :meth:`start` to launch the backend and
    :meth:`stop` to shut it down.

    Raises:
        ConfigurationError: From the constructor, if the configuration is invalid
    """

    def __init__(
        self,
        config: LaunchConfig,
        logger: Optional[LoggerLike] = None,
        *,
        settings: Optional[LauncherSettings] = None,
        signal_bridge: Optional[SignalBridge] = None,
    ) -> None:
        validate_launch_config(config)
        self.config = config
        self.logger = logger if logger is not None else _MODULE_LOGGER
        self.settings = settings if settings is not None else LauncherSettings.from_env()
        self._signal_bridge = signal_bridge if signal_bridge is not None else default_bridge

        commands = make_service_commands(config)
        streams = config.child_process_log_streams
        self.node_service: Service = setup_service(
            commands.node,
            service_logger(self.logger, "node"),
            streams.node if streams is not None else None,
            name="node",
        )
        self.wallet_service: Service = setup_service(
            commands.wallet,
            service_logger(self.logger, "wallet"),
            streams.wallet if streams is not None else None,
            name="wallet",
        )
        self.wallet_backend = WalletBackend(self.get_api)

        self._api_port = config.api_port or 0
        self._stopping = False
        self._start_task: Optional[asyncio.Future] = None
        self._exit_task: Optional[asyncio.Future] = None
        self._signal_tasks: Set[asyncio.Future] = set()

        self.node_service.status_changed.on(lambda status: self._on_status_changed(self.node_service, status))
        self.wallet_service.status_changed.on(lambda status: self._on_status_changed(self.wallet_service, status))

    @property
    def api_port(self) -> int:
        """Wallet API port, or 0 until the wallet description has been computed."""
        return self._api_port

    def get_api(self) -> Api:
        return Api.v2(self._api_port, self.settings.api_host, tls=self.config.tls_configuration is not None)

    async def start(self) -> Api:
        """
        Start the node, then the wallet, and wait for the wallet API.

        Returns:
            Connection parameters for the wallet API

        Raises:
            BackendExitedError: If either process exits before the API is ready
        """
        if self._start_task is None:
            self._start_task = asyncio.ensure_future(self._start())
        return await asyncio.shield(self._start_task)

    async def stop(self, timeout_seconds: Optional[float] = None) -> ExitStatus:
        """
        Stop the wallet and node concurrently.

        The first call runs the shutdown and fires ``events.exit``. Later calls
        receive the same :class:`ExitStatus`; a shorter timeout from a later
        call brings the forced kill forward.
        """
        timeout = self.settings.stop_timeout_seconds if timeout_seconds is None else timeout_seconds
        self._stopping = True
        if self._exit_task is None:
            self._exit_task = asyncio.ensure_future(self._stop_services(timeout))
        elif not self._exit_task.done():
            await asyncio.gather(self.wallet_service.stop(timeout), self.node_service.stop(timeout))
        return await asyncio.shield(self._exit_task)

    # Internals

    async def _start(self) -> Api:
        if self.config.install_signal_handlers and not self._stopping:
            self._signal_bridge.register(self, self._on_signal)

        self.logger.debug("Starting node")
        await self.node_service.start()

        if self._stopping or self.node_service.get_status() > ServiceStatus.STARTED:
            self.logger.info("Node did not start; not starting the wallet")
        else:
            self.logger.debug("Starting wallet")
            description = await self.wallet_service.start()
            if description is not None and description.readiness_port:
                self._api_port = description.readiness_port

        if await self._wait_for_api():
            api = self.get_api()
            self.logger.info("Wallet API is ready at %s", api.base_url)
            self.wallet_backend.events.ready.fire(api)
            return api

        status = await self.stop()
        raise BackendExitedError(status)

    def _backend_exited(self) -> bool:
        return self._stopping or any(
            service.get_status() > ServiceStatus.STARTED for service in (self.node_service, self.wallet_service)
        )

    async def _wait_for_api(self) -> bool:
        """Race the readiness probe against the exit notification."""
        probe = asyncio.ensure_future(
            wait_for_port(
                lambda: self._api_port,
                self._backend_exited,
                host=self.settings.api_host,
                interval=self.settings.poll_interval_seconds,
                logger=self.logger,
            )
        )
        exited = asyncio.ensure_future(self.wallet_backend.events.exit.wait())
        try:
            await asyncio.wait({probe, exited}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (probe, exited):
                if not task.done():
                    task.cancel()
            await asyncio.gather(probe, exited, return_exceptions=True)

        if probe.cancelled():
            return False
        try:
            probe.result()
        except PollingAbortedError:
            self.logger.info("Backend exited before the API became ready")
            return False
        return not self.wallet_backend.events.exit.fired

    async def _stop_services(self, timeout_seconds: float) -> ExitStatus:
        self.logger.info("Stopping wallet and node (timeout %ss)", timeout_seconds)
        wallet_status, node_status = await asyncio.gather(
            self.wallet_service.stop(timeout_seconds),
            self.node_service.stop(timeout_seconds),
        )
        status = ExitStatus(wallet=wallet_status, node=node_status)
        self._signal_bridge.unregister(self)
        self.logger.info("Backend exited:\n%s", exit_status_message(status))
        self.wallet_backend.events.exit.fire(status)
        return status

    def _on_status_changed(self, service: Service, status: ServiceStatus):
        if status != ServiceStatus.STOPPED or self._stopping:
            return None
        self.logger.info("%s stopped unexpectedly; stopping the backend", service.name)
        return self.stop()

    def _on_signal(self, signal_name: str) -> None:
        self.logger.info("Received %s - stopping services...", signal_name)
        task = asyncio.ensure_future(self.stop(0))
        self._signal_tasks.add(task)
        task.add_done_callback(self._signal_tasks.discard)


__all__ = ["Api", "Launcher", "RequestParams", "WalletBackend", "WalletBackendEvents"]
