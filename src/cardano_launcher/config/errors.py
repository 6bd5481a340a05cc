"""Exception types for configuration handling."""

from __future__ import annotations

from typing import Iterable


class ConfigurationError(RuntimeError):
    """Raised when configuration values are missing or malformed."""

    @classmethod
    def missing_value(cls, param_name: str, context: str = "") -> "ConfigurationError":
        """Create error for missing value."""
        msg = f"{param_name} is missing or empty"
        if context:
            msg += f": {context}"
        return cls(msg)

    @classmethod
    def invalid_value(cls, param_name: str, value, reason: str = "") -> "ConfigurationError":
        """Create error for invalid value."""
        msg = f"Invalid value for {param_name}: {value!r}"
        if reason:
            msg += f". {reason}"
        return cls(msg)

    @classmethod
    def unknown_backend(cls, kind: str, known: Iterable[str]) -> "ConfigurationError":
        """Create error for an unsupported backend kind."""
        return cls(f"Unknown backend kind {kind!r}. Known kinds: {', '.join(sorted(known))}")

    @classmethod
    def unknown_network(cls, kind: str, network_name: str) -> "ConfigurationError":
        """Create error for a network preset that the backend does not define."""
        return cls(f"unknown network: {network_name} (backend {kind})")

    @classmethod
    def load_failed(cls, resource: str, identifier: str = "") -> "ConfigurationError":
        """Create error for failed resource load."""
        msg = f"Failed to load {resource}"
        if identifier:
            msg += f" for {identifier}"
        return cls(msg)


__all__ = ["ConfigurationError"]
