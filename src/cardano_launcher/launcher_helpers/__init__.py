"""Helpers for building the node and wallet process descriptions."""

from .ports import LOOPBACK, find_free_port

__all__ = ["LOOPBACK", "find_free_port"]
