"""Command construction shared by the byron and shelley ``cardano-node`` backends."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Optional, Protocol

from ..config import ConfigurationError
from ..launcher_helpers.ports import LOOPBACK, find_free_port
from .types import NodeStartService

MAINNET = "mainnet"


class CardanoNodeNetwork(Protocol):
    config_file: str
    topology_file: str
    genesis_file: Optional[str]


class CardanoNodeConfig(Protocol):
    kind: str
    configuration_dir: str
    network: CardanoNodeNetwork
    socket_file: Optional[str]
    listen_port: Optional[int]


def validate_network(config: CardanoNodeConfig, network_name: str) -> None:
    """
    Reject configurations the wallet cannot be started with.

    Raises:
        ConfigurationError: If a non-mainnet network has no genesis file
    """
    if network_name != MAINNET and config.network.genesis_file is None:
        raise ConfigurationError.missing_value(
            f"{config.kind} network.genesis_file", f"required for network {network_name!r}"
        )


def default_socket_path(node_dir: Path, network_name: str) -> str:
    if sys.platform == "win32":
        return rf"\\.\pipe\cardano-node-{network_name}"
    return str(node_dir / "cardano-node.socket")


def _network_args(config: CardanoNodeConfig, network_name: str) -> tuple:
    if network_name == MAINNET:
        return ("--mainnet",)
    return ("--testnet", str(Path(config.configuration_dir) / str(config.network.genesis_file)))


async def start_cardano_node(node_dir: Path, config: CardanoNodeConfig, network_name: str) -> NodeStartService:
    """Describe a ``cardano-node run`` process keeping its state under ``node_dir``."""
    await asyncio.to_thread(node_dir.mkdir, parents=True, exist_ok=True)
    socket_path = config.socket_file or default_socket_path(node_dir, network_name)
    listen_port = config.listen_port or find_free_port()
    configuration_dir = Path(config.configuration_dir)
    args = (
        "run",
        "--config",
        str(configuration_dir / config.network.config_file),
        "--topology",
        str(configuration_dir / config.network.topology_file),
        "--database-path",
        str(node_dir / "chain"),
        "--socket-path",
        socket_path,
        "--host-addr",
        LOOPBACK,
        "--port",
        str(listen_port),
    )
    return NodeStartService(
        command="cardano-node",
        args=args,
        supports_clean_shutdown=True,
        listen_port=listen_port,
        socket_path=socket_path,
        wallet_args=_network_args(config, network_name) + ("--node-socket", socket_path),
    )
