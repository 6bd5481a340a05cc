"""Shelley-era ``cardano-node`` backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Literal, Optional

from .cardano_node import start_cardano_node, validate_network
from .types import NodeStartService


@dataclass(frozen=True)
class ShelleyNetwork:
    config_file: str
    topology_file: str
    genesis_file: Optional[str] = None


@dataclass(frozen=True)
class ShelleyNodeConfig:
    configuration_dir: str
    network: ShelleyNetwork
    socket_file: Optional[str] = None
    listen_port: Optional[int] = None
    kind: Literal["shelley"] = field(default="shelley", init=False)


networks: Dict[str, ShelleyNetwork] = {
    "mainnet": ShelleyNetwork(
        config_file="mainnet-config.json",
        topology_file="mainnet-topology.json",
    ),
    "testnet": ShelleyNetwork(
        config_file="testnet-config.json",
        topology_file="testnet-topology.json",
        genesis_file="testnet-byron-genesis.json",
    ),
}


def make_node_config(configuration_dir: str, network_name: str, network: ShelleyNetwork) -> ShelleyNodeConfig:
    """Build the node config for a preset. ``network_name`` is unused here; every backend takes it."""
    return ShelleyNodeConfig(configuration_dir=configuration_dir, network=network)


def validate(config: ShelleyNodeConfig, network_name: str) -> None:
    validate_network(config, network_name)


async def start_node(state_dir: Path, config: ShelleyNodeConfig, network_name: str) -> NodeStartService:
    """Shelley nodes keep their chain directly under ``state_dir``."""
    return await start_cardano_node(state_dir, config, network_name)
