"""Listener channels used for status, ready and exit notifications."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Generic, List, Optional, Set, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Listener = Callable[[T], Any]


class EventChannel(Generic[T]):
    """Multi-fire notification channel.

    Listeners are plain callables invoked synchronously in registration order.
    A listener returning a coroutine has it scheduled on the running loop.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._listeners: List[Listener] = []
        self._pending: Set[asyncio.Future] = set()

    def on(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that unregisters it."""
        self._listeners.append(listener)
        return lambda: self.off(listener)

    def off(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def remove_all_listeners(self) -> None:
        self._listeners.clear()

    def listener_count(self) -> int:
        return len(self._listeners)

    def emit(self, value: T) -> None:
        """Deliver ``value`` to every listener registered at call time."""
        for listener in list(self._listeners):
            try:
                result = listener(value)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Listener for %s event failed", self.name)
                continue
            if asyncio.iscoroutine(result):
                self._schedule(result)

    def _schedule(self, coro) -> None:
        task = asyncio.ensure_future(coro)
        self._pending.add(task)
        task.add_done_callback(self._on_listener_done)

    def _on_listener_done(self, task: asyncio.Future) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Async listener for %s event failed: %s", self.name, error, exc_info=error)


class OneShotEvent(EventChannel[T]):
    """Notification that fires at most once.

    The first :meth:`fire` stores the value and notifies listeners; later
    calls are ignored. :meth:`wait` may be awaited any number of times, before
    or after the value is set. Listeners registered after firing are not
    called; use :meth:`wait` or :attr:`value` to observe a past firing.
    """

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self._fired = False
        self._value: Optional[T] = None
        self._event = asyncio.Event()

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def value(self) -> Optional[T]:
        return self._value

    def fire(self, value: T) -> bool:
        """Set the value and notify listeners. Returns False if already fired."""
        if self._fired:
            logger.debug("Ignoring repeated %s event", self.name)
            return False
        self._fired = True
        self._value = value
        self._event.set()
        super().emit(value)
        return True

    def emit(self, value: T) -> None:
        self.fire(value)

    async def wait(self) -> T:
        await self._event.wait()
        return self._value  # type: ignore[return-value]


__all__ = ["EventChannel", "OneShotEvent"]
