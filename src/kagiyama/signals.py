"""Fan-out termination signal shared by watcher server instances."""

from __future__ import annotations

import asyncio
import threading
from types import TracebackType


class TerminationSignal:
    """Broadcast channel: one ``send`` wakes every current subscriber once.

    Subscribers that join after a send are not notified of it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: set[Subscription] = set()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self) -> Subscription:
        """Register a subscriber bound to the running event loop."""
        subscription = Subscription(self, asyncio.get_running_loop())
        with self._lock:
            self._subscribers.add(subscription)
        return subscription

    def send(self) -> int:
        """Notify all current subscribers and return how many were notified."""
        with self._lock:
            subscribers = list(self._subscribers)
            self._subscribers.clear()
        for subscription in subscribers:
            subscription._notify()
        return len(subscribers)

    def _discard(self, subscription: Subscription) -> None:
        with self._lock:
            self._subscribers.discard(subscription)


class Subscription:
    """A single listener on a ``TerminationSignal``."""

    __slots__ = ("_event", "_loop", "_signal")

    def __init__(self, signal: TerminationSignal, loop: asyncio.AbstractEventLoop) -> None:
        self._signal = signal
        self._loop = loop
        self._event = asyncio.Event()

    @property
    def fired(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()

    def close(self) -> None:
        """Stop listening. Safe to call after the signal fired."""
        self._signal._discard(self)

    def _notify(self) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._event.set()
        elif not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._event.set)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
