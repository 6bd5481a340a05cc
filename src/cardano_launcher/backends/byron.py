"""Byron-era ``cardano-node`` backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Literal, Optional

from .cardano_node import start_cardano_node, validate_network
from .types import NodeStartService


@dataclass(frozen=True)
class ByronNetwork:
    """Files in the configuration directory describing one network."""

    config_file: str
    topology_file: str
    genesis_file: Optional[str] = None


@dataclass(frozen=True)
class ByronNodeConfig:
    configuration_dir: str
    network: ByronNetwork
    socket_file: Optional[str] = None
    listen_port: Optional[int] = None
    kind: Literal["byron"] = field(default="byron", init=False)


networks: Dict[str, ByronNetwork] = {
    "mainnet": ByronNetwork(
        config_file="configuration-mainnet.yaml",
        topology_file="mainnet-topology.json",
    ),
    "testnet": ByronNetwork(
        config_file="configuration-testnet.yaml",
        topology_file="testnet-topology.json",
        genesis_file="testnet-genesis.json",
    ),
}


def make_node_config(configuration_dir: str, network_name: str, network: ByronNetwork) -> ByronNodeConfig:
    """Build the node config for a preset. ``network_name`` is unused here; every backend takes it."""
    return ByronNodeConfig(configuration_dir=configuration_dir, network=network)


def validate(config: ByronNodeConfig, network_name: str) -> None:
    validate_network(config, network_name)


async def start_node(state_dir: Path, config: ByronNodeConfig, network_name: str) -> NodeStartService:
    """Byron nodes keep their chain and socket under ``<state_dir>/<network_name>``."""
    return await start_cardano_node(state_dir / network_name, config, network_name)
