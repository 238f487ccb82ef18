"""In-process publish/subscribe channel for notification UI signals.

Components that never reference each other (a toast that just created an
emergency request, the notification bell, the sync loop) exchange typed events
through a :class:`NotificationEventBus`. Delivery is best effort and limited to
the current process.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, DefaultDict, TypeVar, Union

from anyio import from_thread

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewNotification:
    """Something notification-worthy happened; ``count`` is an optional hint."""

    count: int | None = None


@dataclass(frozen=True)
class RefreshNotifications:
    """Ask the sync loop to refresh the unread count now."""


E = TypeVar("E")
Handler = Callable[[E], Union[None, Awaitable[None]]]


class Subscription:
    """Handle returned by :meth:`NotificationEventBus.subscribe`."""

    def __init__(
        self, bus: "NotificationEventBus", event_type: type, handler: Handler
    ) -> None:
        self._bus = bus
        self._event_type = event_type
        self._handler = handler
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def close(self) -> None:
        """Stop receiving events. Safe to call more than once."""

        if not self._active:
            return
        self._active = False
        self._bus._remove(self._event_type, self._handler)

    def __call__(self) -> None:
        self.close()


class NotificationEventBus:
    """Deliver events to the handlers registered for their exact type."""

    def __init__(self) -> None:
        self._handlers: DefaultDict[type, list[Handler]] = defaultdict(list)
        self._tasks: set[asyncio.Task[Any]] = set()

    def subscribe(self, event_type: type[E], handler: Handler[E]) -> Subscription:
        """Register ``handler`` for ``event_type`` and return its subscription."""

        self._handlers[event_type].append(handler)
        return Subscription(self, event_type, handler)

    def subscriber_count(self, event_type: type) -> int:
        return len(self._handlers.get(event_type, ()))

    def publish(self, event: object) -> int:
        """Deliver ``event`` once to every current subscriber.

        Plain callables run immediately; coroutine handlers are scheduled on the
        running loop, or on the host loop through ``anyio.from_thread`` when
        called from a worker thread. Returns the number of handlers reached.
        """

        handlers = list(self._handlers.get(type(event), ()))
        for handler in handlers:
            try:
                result = handler(event)
            except Exception:
                logger.exception(
                    "Handler %r failed for %s", handler, type(event).__name__
                )
                continue
            if inspect.isawaitable(result):
                self._schedule(result)
        return len(handlers)

    async def drain(self) -> None:
        """Wait for coroutine handlers scheduled by earlier publishes."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def clear(self) -> None:
        self._handlers.clear()

    def _remove(self, event_type: type, handler: Handler) -> None:
        handlers = self._handlers.get(event_type)
        if handlers is None:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            return
        if not handlers:
            self._handlers.pop(event_type, None)

    def _schedule(self, awaitable: Awaitable[None]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            try:
                from_thread.run(self._await_logged, awaitable)
            except RuntimeError:
                logger.warning("Dropping asynchronous handler: no event loop available")
                if inspect.iscoroutine(awaitable):
                    awaitable.close()
        else:
            task = loop.create_task(self._await_logged(awaitable))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    @staticmethod
    async def _await_logged(awaitable: Awaitable[None]) -> None:
        try:
            await awaitable
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Asynchronous event handler failed")


__all__ = [
    "NewNotification",
    "NotificationEventBus",
    "RefreshNotifications",
    "Subscription",
]
