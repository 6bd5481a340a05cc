"""Process spawning, output forwarding and termination for :class:`Service`."""

from .output_pump import start_output_pumps
from .process_spawner import build_environment, spawn_process
from .process_terminator import decode_returncode, force_kill, request_graceful_shutdown

__all__ = [
    "build_environment",
    "decode_returncode",
    "force_kill",
    "request_graceful_shutdown",
    "spawn_process",
    "start_output_pumps",
]
