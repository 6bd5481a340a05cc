"""Node backends: network presets and ``start_node`` command builders per kind."""

from .types import NodeStartService

__all__ = ["NodeStartService"]
