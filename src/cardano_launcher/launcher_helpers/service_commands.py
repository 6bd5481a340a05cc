"""
Builds the node and wallet process descriptions for a launch configuration.

This is the only place that branches on the node backend kind. The launcher
receives two zero-argument factories and treats their results opaquely.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Awaitable, Callable, Dict, List, Optional

from ..backends import byron, jormungandr, shelley
from ..backends.types import NodeStartService
from ..config import ConfigurationError
from ..launch_config import LaunchConfig
from ..service import StartService
from .ports import find_free_port

logger = logging.getLogger(__name__)

BACKENDS: Dict[str, ModuleType] = {
    "byron": byron,
    "shelley": shelley,
    "jormungandr": jormungandr,
}

STAKE_POOL_REGISTRY_ENV = "CARDANO_WALLET_STAKE_POOL_REGISTRY_URL"

DescriptionFactory = Callable[[], Awaitable[StartService]]


@dataclass(frozen=True)
class ServiceCommands:
    node: Callable[[], Awaitable[NodeStartService]]
    wallet: DescriptionFactory


def backend_module(kind: str) -> ModuleType:
    try:
        return BACKENDS[kind]
    except KeyError:
        raise ConfigurationError.unknown_backend(kind, BACKENDS) from None


def validate_launch_config(config: LaunchConfig) -> None:
    """
    Check the configuration before any process is spawned.

    Raises:
        ConfigurationError: If the backend kind is unknown or the network is incomplete
    """
    backend_module(config.node_config.kind).validate(config.node_config, config.network_name)
    if config.api_port is not None and not 0 <= config.api_port <= 65535:
        raise ConfigurationError.invalid_value("api_port", config.api_port, "Must be a TCP port number")


def _memoize(factory: Callable[[], Awaitable[NodeStartService]]) -> Callable[[], Awaitable[NodeStartService]]:
    task: Optional[asyncio.Future] = None

    async def run() -> NodeStartService:
        nonlocal task
        if task is None:
            task = asyncio.ensure_future(factory())
        return await asyncio.shield(task)

    return run


def wallet_args(config: LaunchConfig, node: NodeStartService, api_port: int, state_dir: Path) -> List[str]:
    args = [
        "serve",
        "--shutdown-handler",
        "--port",
        str(api_port),
        "--database",
        str(state_dir / "wallets"),
    ]
    if config.listen_address:
        args += ["--listen-address", config.listen_address]
    if config.sync_tolerance_seconds is not None:
        args += ["--sync-tolerance", f"{config.sync_tolerance_seconds}s"]
    tls = config.tls_configuration
    if tls is not None:
        args += ["--tls-ca-cert", tls.ca_cert, "--tls-sv-cert", tls.sv_cert, "--tls-sv-key", tls.sv_key]
    args += list(node.wallet_args)
    return args


def wallet_exe(config: LaunchConfig, node: NodeStartService, state_dir: Path) -> StartService:
    """Describe the ``cardano-wallet-<kind> serve`` process talking to ``node``."""
    api_port = config.api_port or find_free_port()
    extra_env = {}
    if config.stake_pool_registry_url:
        extra_env[STAKE_POOL_REGISTRY_ENV] = config.stake_pool_registry_url
    return StartService(
        command=f"cardano-wallet-{config.node_config.kind}",
        args=tuple(wallet_args(config, node, api_port, state_dir)),
        extra_env=extra_env,
        supports_clean_shutdown=True,
        shutdown_handler=True,
        readiness_port=api_port,
    )


def make_service_commands(config: LaunchConfig) -> ServiceCommands:
    """Create the node and wallet description factories for ``config``.

    The wallet factory waits for the node description, since the wallet
    arguments depend on where the node put its socket and which port it uses.
    """
    module = backend_module(config.node_config.kind)
    state_dir = Path(config.state_dir)

    async def node() -> NodeStartService:
        await asyncio.to_thread(state_dir.mkdir, parents=True, exist_ok=True)
        return await module.start_node(state_dir, config.node_config, config.network_name)

    node_factory = _memoize(node)

    async def wallet() -> StartService:
        return wallet_exe(config, await node_factory(), state_dir)

    return ServiceCommands(node=node_factory, wallet=wallet)


__all__ = [
    "BACKENDS",
    "STAKE_POOL_REGISTRY_ENV",
    "ServiceCommands",
    "backend_module",
    "make_service_commands",
    "validate_launch_config",
    "wallet_exe",
]
