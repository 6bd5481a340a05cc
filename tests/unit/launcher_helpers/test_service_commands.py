"""Tests for node and wallet description construction."""

from __future__ import annotations

import pytest

from cardano_launcher.backends import byron, jormungandr
from cardano_launcher.config import ConfigurationError
from cardano_launcher.launch_config import LaunchConfig, TlsConfiguration
from cardano_launcher.launcher_helpers.service_commands import (
    STAKE_POOL_REGISTRY_ENV,
    make_service_commands,
    validate_launch_config,
)


def _arg(args, flag: str) -> str:
    return args[args.index(flag) + 1]


def _byron_config(tmp_path, **kwargs) -> LaunchConfig:
    return LaunchConfig(
        state_dir=tmp_path / "state",
        network_name="mainnet",
        node_config=byron.ByronNodeConfig(str(tmp_path), byron.networks["mainnet"], socket_file="/tmp/node.sock"),
        **kwargs,
    )


class TestValidateLaunchConfig:
    """Tests for validate_launch_config."""

    def test_rejects_missing_genesis(self, tmp_path) -> None:
        """A byron testnet without a genesis file fails validation."""
        config = LaunchConfig(
            state_dir=tmp_path,
            network_name="testnet",
            node_config=byron.ByronNodeConfig(str(tmp_path), byron.ByronNetwork("c.yaml", "t.json")),
        )
        with pytest.raises(ConfigurationError):
            validate_launch_config(config)

    def test_rejects_bad_api_port(self, tmp_path) -> None:
        """API ports outside the TCP range are rejected."""
        with pytest.raises(ConfigurationError, match="api_port"):
            validate_launch_config(_byron_config(tmp_path, api_port=70000))


class TestMakeServiceCommands:
    """Tests for make_service_commands."""

    @pytest.mark.asyncio
    async def test_wallet_command(self, tmp_path) -> None:
        """The wallet is served with a shutdown handler against the node socket."""
        commands = make_service_commands(_byron_config(tmp_path, api_port=8090))

        wallet = await commands.wallet()

        assert wallet.command == "cardano-wallet-byron"
        assert wallet.args[:2] == ("serve", "--shutdown-handler")
        assert _arg(wallet.args, "--port") == "8090"
        assert _arg(wallet.args, "--database") == str(tmp_path / "state" / "wallets")
        assert _arg(wallet.args, "--node-socket") == "/tmp/node.sock"
        assert "--mainnet" in wallet.args
        assert wallet.shutdown_handler
        assert wallet.readiness_port == 8090
        assert wallet.extra_env == {}

    @pytest.mark.asyncio
    async def test_node_description_is_computed_once(self, tmp_path) -> None:
        """The node and wallet share one node description."""
        commands = make_service_commands(_byron_config(tmp_path))

        node = await commands.node()
        await commands.wallet()

        assert await commands.node() is node
        assert (tmp_path / "state").is_dir()

    @pytest.mark.asyncio
    async def test_allocates_api_port(self, tmp_path) -> None:
        """Without a configured port a free one is chosen."""
        wallet = await make_service_commands(_byron_config(tmp_path)).wallet()
        assert wallet.readiness_port > 0
        assert _arg(wallet.args, "--port") == str(wallet.readiness_port)

    @pytest.mark.asyncio
    async def test_optional_wallet_flags(self, tmp_path) -> None:
        """Listen address, sync tolerance, TLS and registry URL are passed through."""
        config = _byron_config(
            tmp_path,
            api_port=8090,
            listen_address="0.0.0.0",
            sync_tolerance_seconds=300,
            stake_pool_registry_url="https://pools.example/registry",
            tls_configuration=TlsConfiguration("ca.crt", "server.crt", "server.key"),
        )
        wallet = await make_service_commands(config).wallet()

        assert _arg(wallet.args, "--listen-address") == "0.0.0.0"
        assert _arg(wallet.args, "--sync-tolerance") == "300s"
        assert _arg(wallet.args, "--tls-ca-cert") == "ca.crt"
        assert _arg(wallet.args, "--tls-sv-cert") == "server.crt"
        assert _arg(wallet.args, "--tls-sv-key") == "server.key"
        assert wallet.extra_env == {STAKE_POOL_REGISTRY_ENV: "https://pools.example/registry"}

    @pytest.mark.asyncio
    async def test_jormungandr_wallet_args(self, tmp_path) -> None:
        """Jormungandr wallets talk to the node REST port."""
        config = LaunchConfig(
            state_dir=tmp_path / "state",
            network_name="itn_rewards_v1",
            node_config=jormungandr.JormungandrConfig(
                str(tmp_path), jormungandr.networks["itn_rewards_v1"], rest_port=8081
            ),
            api_port=8090,
        )
        wallet = await make_service_commands(config).wallet()

        assert wallet.command == "cardano-wallet-jormungandr"
        assert _arg(wallet.args, "--node-port") == "8081"
        assert "--genesis-block-hash" in wallet.args
