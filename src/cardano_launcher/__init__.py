"""Supervise a Cardano node and wallet as one backend."""

from .config import ConfigurationError, LauncherSettings
from .errors import BackendExitedError, LauncherError, PollingAbortedError
from .exit_status import ExitStatus, combine_status, exit_status_message
from .launch_config import ChildProcessLogStreams, LaunchConfig, TlsConfiguration
from .launcher import Api, Launcher, RequestParams, WalletBackend
from .service import Service, StartService, setup_service
from .service_status import ServiceExitStatus, ServiceStatus, service_exit_status_message

__all__ = [
    "Api",
    "BackendExitedError",
    "ChildProcessLogStreams",
    "ConfigurationError",
    "ExitStatus",
    "LaunchConfig",
    "Launcher",
    "LauncherError",
    "LauncherSettings",
    "PollingAbortedError",
    "RequestParams",
    "Service",
    "ServiceExitStatus",
    "ServiceStatus",
    "StartService",
    "TlsConfiguration",
    "WalletBackend",
    "combine_status",
    "exit_status_message",
    "service_exit_status_message",
    "setup_service",
]
