"""Tests for the per-launcher signal registry."""

from __future__ import annotations

import asyncio
import os
import signal
import sys
import threading
from unittest.mock import MagicMock

import pytest

from cardano_launcher.signal_bridge import termination_signals


class TestTerminationSignals:
    """Tests for termination_signals."""

    def test_includes_interrupt_and_terminate(self) -> None:
        """SIGINT and SIGTERM exist on every platform."""
        signals = termination_signals()
        assert signal.SIGINT in signals
        assert signal.SIGTERM in signals

    @pytest.mark.skipif(sys.platform == "win32", reason="SIGHUP is POSIX only")
    def test_includes_hangup(self) -> None:
        """SIGHUP is handled where it exists."""
        assert signal.SIGHUP in termination_signals()


class TestSignalBridge:
    """Tests for SignalBridge."""

    @pytest.mark.asyncio
    async def test_dispatches_to_every_registration(self, signal_bridge) -> None:
        """Each registered launcher receives the signal name."""
        first, second = MagicMock(), MagicMock()
        signal_bridge.register("a", first)
        signal_bridge.register("b", second)
        try:
            signal_bridge.dispatch(signal.SIGTERM)
        finally:
            signal_bridge.unregister("a")
            signal_bridge.unregister("b")

        first.assert_called_once_with("SIGTERM")
        second.assert_called_once_with("SIGTERM")

    @pytest.mark.asyncio
    async def test_failing_callback_does_not_block_others(self, signal_bridge) -> None:
        """A raising callback is logged and the others still run."""
        survivor = MagicMock()
        signal_bridge.register("broken", MagicMock(side_effect=RuntimeError("boom")))
        signal_bridge.register("ok", survivor)
        try:
            signal_bridge.dispatch(signal.SIGINT)
        finally:
            signal_bridge.unregister("broken")
            signal_bridge.unregister("ok")

        survivor.assert_called_once_with("SIGINT")

    @pytest.mark.asyncio
    async def test_handlers_removed_with_last_registration(self, signal_bridge) -> None:
        """Handlers stay installed until every key is unregistered."""
        signal_bridge.register("a", MagicMock())
        signal_bridge.register("b", MagicMock())
        assert signal_bridge.installed

        signal_bridge.unregister("a")
        assert signal_bridge.installed
        assert not signal_bridge.registered("a")

        signal_bridge.unregister("b")
        assert not signal_bridge.installed

    @pytest.mark.asyncio
    async def test_unregister_unknown_key_is_noop(self, signal_bridge) -> None:
        """Unregistering a key that was never registered does nothing."""
        signal_bridge.unregister("missing")
        assert not signal_bridge.installed

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX signal delivery")
    @pytest.mark.asyncio
    async def test_real_signal_reaches_callback(self, signal_bridge) -> None:
        """A delivered SIGHUP runs the callback on the loop."""
        received = asyncio.Event()
        names = []

        def callback(name: str) -> None:
            names.append(name)
            received.set()

        signal_bridge.register("launcher", callback)
        try:
            assert signal_bridge.installed
            os.kill(os.getpid(), signal.SIGHUP)
            await asyncio.wait_for(received.wait(), timeout=5)
        finally:
            signal_bridge.unregister("launcher")

        assert names == ["SIGHUP"]

    @pytest.mark.asyncio
    async def test_callback_runs_on_its_own_loop(self, signal_bridge) -> None:
        """A launcher registered from another loop is called on that loop's thread."""
        other_loop = asyncio.new_event_loop()
        thread = threading.Thread(target=other_loop.run_forever, daemon=True)
        thread.start()
        called = threading.Event()
        seen = []

        def on_other_loop(name: str) -> None:
            seen.append((name, threading.get_ident()))
            called.set()

        async def register_on_other_loop() -> None:
            signal_bridge.register("other", on_other_loop)

        local = MagicMock()
        signal_bridge.register("local", local)
        try:
            asyncio.run_coroutine_threadsafe(register_on_other_loop(), other_loop).result(timeout=5)
            signal_bridge.dispatch(signal.SIGTERM)
            assert called.wait(timeout=5)
        finally:
            signal_bridge.unregister("local")
            signal_bridge.unregister("other")
            other_loop.call_soon_threadsafe(other_loop.stop)
            thread.join(timeout=5)
            other_loop.close()

        local.assert_called_once_with("SIGTERM")
        assert seen == [("SIGTERM", thread.ident)]
        assert not signal_bridge.installed
