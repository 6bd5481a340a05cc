"""Tests for ConfigurationError constructors."""

from __future__ import annotations

from cardano_launcher.config import ConfigurationError


class TestConfigurationError:
    """Tests for ConfigurationError factories."""

    def test_missing_value(self) -> None:
        """missing_value names the parameter and context."""
        error = ConfigurationError.missing_value("byron network.genesis_file", "required for network 'testnet'")
        assert str(error) == "byron network.genesis_file is missing or empty: required for network 'testnet'"

    def test_unknown_network(self) -> None:
        """unknown_network names the network and backend."""
        assert str(ConfigurationError.unknown_network("byron", "staging")) == "unknown network: staging (backend byron)"

    def test_unknown_backend_lists_known(self) -> None:
        """unknown_backend lists the supported kinds in order."""
        error = ConfigurationError.unknown_backend("ouroboros", ["shelley", "byron"])
        assert str(error) == "Unknown backend kind 'ouroboros'. Known kinds: byron, shelley"

    def test_is_runtime_error(self) -> None:
        """ConfigurationError is a RuntimeError."""
        assert isinstance(ConfigurationError.load_failed("dotenv file", "/x/.env"), RuntimeError)
