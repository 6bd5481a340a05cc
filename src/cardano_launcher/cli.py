"""
``cardano-launcher`` command line interface.

A thin front end for trying out a backend: it launches the node and wallet,
waits for them to exit, and exits with their combined status.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import NoReturn, Optional, Sequence

from .config import ConfigurationError
from .errors import BackendExitedError
from .exit_status import ExitStatus, combine_status
from .launch_config import LaunchConfig
from .launcher import Launcher
from .launcher_helpers.service_commands import BACKENDS
from .logging_config import setup_logging
from .service_status import service_exit_status_message

logger = logging.getLogger(__name__)

USAGE_EXIT_CODE = 1
UNKNOWN_NETWORK_EXIT_CODE = 2


class _UsageParser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on bad arguments."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        sys.stderr.write(f"{self.prog}: error: {message}\n")
        raise SystemExit(USAGE_EXIT_CODE)


def build_parser() -> argparse.ArgumentParser:
    parser = _UsageParser(
        prog="cardano-launcher",
        description="Launch cardano-wallet together with its node backend",
    )
    parser.add_argument("backend", metavar="BACKEND", choices=sorted(BACKENDS), help="one of: %(choices)s")
    parser.add_argument("network", metavar="NETWORK", help="depends on backend, e.g. mainnet, itn_rewards_v1")
    parser.add_argument("config_dir", metavar="CONFIG-DIR", help="directory which contains config files for a backend")
    parser.add_argument("state_dir", metavar="STATE-DIR", help="directory to put blockchains, databases, etc.")
    return parser


def make_launch_config(backend: str, network_name: str, config_dir: str, state_dir: str) -> LaunchConfig:
    """
    Build a launch configuration from a network preset.

    Raises:
        ConfigurationError: If the backend has no preset named ``network_name``
    """
    module = BACKENDS[backend]
    try:
        network = module.networks[network_name]
    except KeyError:
        raise ConfigurationError.unknown_network(backend, network_name) from None
    return LaunchConfig(
        state_dir=state_dir,
        network_name=network_name,
        node_config=module.make_node_config(config_dir, network_name, network),
    )


async def run_launcher(launcher: Launcher) -> ExitStatus:
    """Run the backend until both processes have exited."""
    try:
        api = await launcher.start()
    except BackendExitedError as exc:
        return exc.status
    logger.info("Wallet API available at %s", api.base_url)
    return await launcher.wallet_backend.events.exit.wait()


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    try:
        config = make_launch_config(args.backend, args.network, args.config_dir, args.state_dir)
    except ConfigurationError as exc:
        sys.stderr.write(f"{exc}\n")
        raise SystemExit(UNKNOWN_NETWORK_EXIT_CODE) from exc

    setup_logging()
    try:
        launcher = Launcher(config)
    except ConfigurationError as exc:
        logger.error("Invalid configuration: %s", exc)
        raise SystemExit(USAGE_EXIT_CODE) from exc

    status = asyncio.run(run_launcher(launcher))
    for entry in status:
        print(service_exit_status_message(entry))
    raise SystemExit(combine_status(status))


if __name__ == "__main__":
    main()
