"""Jormungandr node backend."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Literal, Optional

from ..config import ConfigurationError
from ..launcher_helpers.ports import LOOPBACK, find_free_port
from .types import NodeStartService

logger = logging.getLogger(__name__)

GENESIS_HASH_FILE = "genesis-hash.txt"


@dataclass(frozen=True)
class GenesisBlock:
    """Genesis block identified by hash, by file, or both."""

    hash: Optional[str] = None
    file: Optional[str] = None


@dataclass(frozen=True)
class JormungandrNetwork:
    configuration_dir: str
    genesis_block: GenesisBlock
    secret_file: Optional[str] = None


@dataclass(frozen=True)
class JormungandrConfig:
    configuration_dir: str
    network: JormungandrNetwork
    rest_port: Optional[int] = None
    extra_args: tuple = ()
    kind: Literal["jormungandr"] = field(default="jormungandr", init=False)


networks: Dict[str, JormungandrNetwork] = {
    "self": JormungandrNetwork(
        configuration_dir="self",
        genesis_block=GenesisBlock(file="block0.bin"),
        secret_file="secret.yaml",
    ),
    "itn_rewards_v1": JormungandrNetwork(
        configuration_dir="itn_rewards_v1",
        genesis_block=GenesisBlock(hash="8e4d2a343f3dcf9330ad9035b3e8d168e6728904262f2c434a4f8f934ec7b676"),
    ),
}


def make_node_config(configuration_dir: str, network_name: str, network: JormungandrNetwork) -> JormungandrConfig:
    """Build the node config for a preset. ``network_name`` is unused here; every backend takes it."""
    return JormungandrConfig(configuration_dir=configuration_dir, network=network)


def validate(config: JormungandrConfig, network_name: str) -> None:
    genesis = config.network.genesis_block
    if genesis.hash is None and genesis.file is None:
        raise ConfigurationError.missing_value("jormungandr network.genesis_block", "needs a hash or a file")


def _network_dir(config: JormungandrConfig) -> Path:
    return Path(config.configuration_dir) / config.network.configuration_dir


def read_genesis_hash(config: JormungandrConfig) -> str:
    """
    Return the genesis block hash, reading it from the network directory if unset.

    Raises:
        ConfigurationError: If no hash is configured and the hash file cannot be read
    """
    if config.network.genesis_block.hash:
        return config.network.genesis_block.hash
    hash_path = _network_dir(config) / GENESIS_HASH_FILE
    try:
        genesis_hash = hash_path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise ConfigurationError.load_failed("genesis block hash", str(hash_path)) from exc
    if not genesis_hash:
        raise ConfigurationError.missing_value(str(hash_path))
    return genesis_hash


def node_config_document(storage_dir: Path, rest_port: int, p2p_port: int) -> dict:
    return {
        "storage": str(storage_dir),
        "rest": {"listen": f"{LOOPBACK}:{rest_port}"},
        "p2p": {
            "public_address": f"/ip4/{LOOPBACK}/tcp/{p2p_port}",
            "listen_address": f"/ip4/{LOOPBACK}/tcp/{p2p_port}",
        },
    }


def _write_node_config(state_dir: Path, document: dict) -> Path:
    state_dir.mkdir(parents=True, exist_ok=True)
    config_path = state_dir / "jormungandr-config.yaml"
    # JSON is a subset of YAML, which jormungandr accepts.
    config_path.write_text(json.dumps(document, indent=2), encoding="utf-8")
    return config_path


async def start_node(state_dir: Path, config: JormungandrConfig, network_name: str) -> NodeStartService:
    """Write a node config into ``state_dir`` and describe the ``jormungandr`` process."""
    genesis_hash = read_genesis_hash(config)
    rest_port = config.rest_port or find_free_port()
    p2p_port = find_free_port()
    document = node_config_document(state_dir / "chain", rest_port, p2p_port)
    config_path = await asyncio.to_thread(_write_node_config, state_dir, document)
    logger.debug("Wrote jormungandr config to %s", config_path)

    network_dir = _network_dir(config)
    args = ["--config", str(config_path)]
    genesis = config.network.genesis_block
    if genesis.file is not None:
        args += ["--genesis-block", str(network_dir / genesis.file)]
    else:
        args += ["--genesis-block-hash", genesis_hash]
    if config.network.secret_file is not None:
        args += ["--secret", str(network_dir / config.network.secret_file)]
    args += list(config.extra_args)

    return NodeStartService(
        command="jormungandr",
        args=tuple(args),
        supports_clean_shutdown=False,
        listen_port=rest_port,
        wallet_args=("--node-port", str(rest_port), "--genesis-block-hash", genesis_hash),
    )
