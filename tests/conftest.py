"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import sys
from typing import Callable

import pytest

from cardano_launcher.config import runtime
from cardano_launcher.service import StartService
from cardano_launcher.signal_bridge import SignalBridge


@pytest.fixture(autouse=True)
def isolated_dotenv(monkeypatch):
    """Keep .env files on the developer machine out of the tests."""
    monkeypatch.setattr(runtime, "_DOTENV_CANDIDATES", ())
    runtime.reset_default_values()
    yield
    runtime.reset_default_values()


@pytest.fixture
def python_child() -> Callable[..., StartService]:
    """Provide a factory describing a ``python -c <script>`` child process."""

    def factory(script: str, **kwargs) -> StartService:
        return StartService(command=sys.executable, args=("-c", script), **kwargs)

    return factory


@pytest.fixture
def signal_bridge() -> SignalBridge:
    """Provide a private signal bridge so tests never touch the shared one."""
    return SignalBridge()
