"""Configuration for launching a wallet backend."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, Optional, Union

from .backends.byron import ByronNodeConfig
from .backends.jormungandr import JormungandrConfig
from .backends.shelley import ShelleyNodeConfig

NodeConfig = Union[ByronNodeConfig, ShelleyNodeConfig, JormungandrConfig]


@dataclass(frozen=True)
class TlsConfiguration:
    """Certificate paths used to serve the wallet API over HTTPS."""

    ca_cert: str
    sv_cert: str
    sv_key: str


@dataclass(frozen=True)
class ChildProcessLogStreams:
    """Writable sinks for each child's stdout and stderr.

    The same stream may be given for both to interleave their output.
    """

    node: Optional[IO[Any]] = None
    wallet: Optional[IO[Any]] = None

    @classmethod
    def shared(cls, stream: IO[Any]) -> "ChildProcessLogStreams":
        return cls(node=stream, wallet=stream)


@dataclass(frozen=True)
class LaunchConfig:
    """Configuration parameters for starting the wallet backend and node.

    Attributes:
        state_dir: Directory holding the node chain and the wallet databases
        network_name: Network preset name, e.g. ``mainnet``
        node_config: Backend-specific node configuration; its ``kind`` selects the backend
        api_port: Wallet API port, or ``None`` to pick a free one
        listen_address: Address the wallet API server binds to
        stake_pool_registry_url: Overrides the wallet's stake pool registry
        sync_tolerance_seconds: Passed to the wallet as ``--sync-tolerance``
        tls_configuration: Serve the API over HTTPS with these certificates
        child_process_log_streams: Sinks for child process output
        install_signal_handlers: Stop both children when this process receives
            a termination signal
    """

    state_dir: Union[str, Path]
    network_name: str
    node_config: NodeConfig
    api_port: Optional[int] = None
    listen_address: Optional[str] = None
    stake_pool_registry_url: Optional[str] = None
    sync_tolerance_seconds: Optional[int] = None
    tls_configuration: Optional[TlsConfiguration] = None
    child_process_log_streams: Optional[ChildProcessLogStreams] = None
    install_signal_handlers: bool = True


__all__ = ["ChildProcessLogStreams", "LaunchConfig", "NodeConfig", "TlsConfiguration"]
