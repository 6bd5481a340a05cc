"""Python snippets run as supervised children in tests."""

from __future__ import annotations

SLEEP = "import time; time.sleep(60)"

IGNORE_SIGTERM = """
import signal, sys, time
signal.signal(signal.SIGTERM, signal.SIG_IGN)
print("ignoring SIGTERM", flush=True)
time.sleep(60)
"""

EXIT_ON_STDIN_CLOSE = """
import sys
sys.stdin.read()
sys.exit(0)
"""

PRINT_HELLO = "print('hello from child', flush=True)"


def exit_with(code: int) -> str:
    return f"import sys; sys.exit({code})"


def listen_after(port: int, delay_seconds: float) -> str:
    return f"""
import socket, time
time.sleep({delay_seconds})
server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
server.bind(("127.0.0.1", {port}))
server.listen(5)
time.sleep(60)
"""
