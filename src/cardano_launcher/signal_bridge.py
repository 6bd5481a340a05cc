"""
Process termination signal handling shared by every Launcher in the process.

OS signal handlers are process-wide, so a single :class:`SignalBridge` owns
them and fans each signal out to the callbacks registered per launcher.
Handlers are installed with the first registration and restored once the
last callback is unregistered. Each callback runs on the event loop it was
registered from.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Any, Callable, Dict, Hashable, List, Optional, Tuple

logger = logging.getLogger(__name__)

SignalCallback = Callable[[str], Any]

TERMINATION_SIGNAL_NAMES = ("SIGINT", "SIGTERM", "SIGHUP", "SIGBREAK")


def termination_signals() -> List[signal.Signals]:
    """Termination signals that exist on this platform."""
    return [getattr(signal, name) for name in TERMINATION_SIGNAL_NAMES if hasattr(signal, name)]


class SignalBridge:
    """Registry of termination-signal callbacks keyed by owner."""

    def __init__(self) -> None:
        self._callbacks: Dict[Hashable, Tuple[SignalCallback, asyncio.AbstractEventLoop]] = {}
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._loop_handlers: List[signal.Signals] = []
        self._previous_handlers: Dict[signal.Signals, Any] = {}

    @property
    def installed(self) -> bool:
        return bool(self._loop_handlers or self._previous_handlers)

    def registered(self, key: Hashable) -> bool:
        return key in self._callbacks

    def register(self, key: Hashable, callback: SignalCallback) -> None:
        """Call ``callback(signal_name)`` on the running loop when a termination signal arrives."""
        loop = asyncio.get_running_loop()
        self._callbacks[key] = (callback, loop)
        if not self.installed:
            self._install(loop)

    def unregister(self, key: Hashable) -> None:
        if self._callbacks.pop(key, None) is None:
            return
        if not self._callbacks:
            self._uninstall()

    def dispatch(self, signum: int) -> None:
        name = signal.Signals(signum).name
        for key, (callback, loop) in list(self._callbacks.items()):
            if loop is self._loop:
                self._invoke(key, callback, name)
            elif not loop.is_closed():
                loop.call_soon_threadsafe(self._invoke, key, callback, name)

    @staticmethod
    def _invoke(key: Hashable, callback: SignalCallback, name: str) -> None:
        try:
            callback(name)
        except Exception:
            logger.exception("Signal callback for %r failed", key)

    def _install(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        for sig in termination_signals():
            try:
                loop.add_signal_handler(sig, self.dispatch, sig)
                self._loop_handlers.append(sig)
                continue
            except (NotImplementedError, RuntimeError):
                # Windows loops and non-main threads cannot register loop handlers.
                pass
            try:
                self._previous_handlers[sig] = signal.signal(sig, self._threadsafe_handler)
            except (OSError, ValueError) as exc:
                logger.warning("Cannot handle %s: %s", sig.name, exc)
        logger.debug("Installed handlers for %s", ", ".join(sig.name for sig in termination_signals()))

    def _threadsafe_handler(self, signum: int, frame: Any) -> None:
        loop = self._loop
        if loop is not None and not loop.is_closed():
            loop.call_soon_threadsafe(self.dispatch, signum)

    def _uninstall(self) -> None:
        loop = self._loop
        for sig in self._loop_handlers:
            if loop is not None and not loop.is_closed():
                loop.remove_signal_handler(sig)
        self._loop_handlers = []
        for sig, previous in self._previous_handlers.items():
            try:
                signal.signal(sig, previous if previous is not None else signal.SIG_DFL)
            except (OSError, ValueError) as exc:
                logger.warning("Cannot restore handler for %s: %s", sig.name, exc)
        self._previous_handlers = {}
        self._loop = None
        logger.debug("Removed termination signal handlers")


default_bridge = SignalBridge()


__all__ = ["SignalBridge", "default_bridge", "termination_signals"]
