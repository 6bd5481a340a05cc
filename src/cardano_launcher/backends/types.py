"""Shared types for backend node descriptions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..service import StartService


@dataclass(frozen=True)
class NodeStartService(StartService):
    """A node process description plus what the wallet needs to reach it.

    Attributes:
        listen_port: Port the node listens on for peers (or REST for jormungandr)
        socket_path: Local socket or named pipe created by the node, if any
        wallet_args: Extra ``cardano-wallet serve`` arguments for this node
    """

    listen_port: int = 0
    socket_path: Optional[str] = None
    wallet_args: Tuple[str, ...] = ()
