"""Tests for event channels."""

from __future__ import annotations

import asyncio
import logging
from unittest.mock import MagicMock

import pytest

from cardano_launcher.events import EventChannel, OneShotEvent


class TestEventChannel:
    """Tests for EventChannel."""

    def test_delivers_to_listeners_in_order(self) -> None:
        """Listeners receive every emitted value in registration order."""
        channel = EventChannel("status")
        received = []
        channel.on(lambda value: received.append(("a", value)))
        channel.on(lambda value: received.append(("b", value)))

        channel.emit(1)
        channel.emit(2)

        assert received == [("a", 1), ("b", 1), ("a", 2), ("b", 2)]

    def test_unsubscribe(self) -> None:
        """The callable returned by on() removes the listener."""
        channel = EventChannel("status")
        listener = MagicMock()
        unsubscribe = channel.on(listener)

        unsubscribe()
        channel.emit(1)

        listener.assert_not_called()
        assert channel.listener_count() == 0

    def test_failing_listener_does_not_block_others(self, caplog) -> None:
        """An exception in one listener is logged and delivery continues."""
        channel = EventChannel("status")
        survivor = MagicMock()
        channel.on(MagicMock(side_effect=ValueError("boom")))
        channel.on(survivor)

        with caplog.at_level(logging.ERROR):
            channel.emit("x")

        survivor.assert_called_once_with("x")
        assert "Listener for status event failed" in caplog.text

    @pytest.mark.asyncio
    async def test_schedules_coroutine_listeners(self) -> None:
        """A listener returning a coroutine has it run on the loop."""
        channel = EventChannel("status")
        done = asyncio.Event()

        async def listener(value) -> None:
            done.set()

        channel.on(listener)
        channel.emit(1)

        await asyncio.wait_for(done.wait(), timeout=1)


class TestOneShotEvent:
    """Tests for OneShotEvent."""

    @pytest.mark.asyncio
    async def test_fires_once(self) -> None:
        """Only the first fire notifies listeners and sets the value."""
        event = OneShotEvent("exit")
        listener = MagicMock()
        event.on(listener)

        assert event.fire("first") is True
        assert event.fire("second") is False
        event.emit("third")

        listener.assert_called_once_with("first")
        assert event.value == "first"
        assert await event.wait() == "first"

    @pytest.mark.asyncio
    async def test_waiters_before_and_after_firing(self) -> None:
        """wait() resolves for callers arriving before and after the fire."""
        event = OneShotEvent("ready")
        early = asyncio.ensure_future(event.wait())
        await asyncio.sleep(0)

        event.fire(42)

        assert await early == 42
        assert await event.wait() == 42
        assert event.fired
