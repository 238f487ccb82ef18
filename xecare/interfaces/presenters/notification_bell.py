"""Presentation state for the header notification bell."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable

from xecare.application.use_cases.notifications import (
    NotificationSync,
    NotificationSyncState,
)
from xecare.config import get_settings
from xecare.infrastructure.events import (
    NewNotification,
    NotificationEventBus,
    Subscription,
)

logger = logging.getLogger(__name__)

BADGE_LIMIT = 99

Navigator = Callable[[str], Any]


def format_badge(count: int) -> str | None:
    """Badge label for ``count`` unread notifications (``None`` hides it)."""

    if count <= 0:
        return None
    if count > BADGE_LIMIT:
        return f"{BADGE_LIMIT}+"
    return str(count)


@dataclass(frozen=True)
class BellView:
    badge: str | None
    animating: bool
    disabled: bool


class NotificationBell:
    """Badge, ring animation and navigation of the notification bell.

    The bell rings whenever the unread count strictly increases and whenever a
    :class:`NewNotification` event is published. Each ring lasts
    ``ring_duration`` seconds; a new ring restarts the timer.
    """

    def __init__(
        self,
        sync: NotificationSync,
        bus: NotificationEventBus | None = None,
        *,
        ring_duration: float | None = None,
        navigate: Navigator | None = None,
    ) -> None:
        settings = get_settings()
        self.sync = sync
        self.bus = bus or sync.event_bus
        self.ring_duration = (
            ring_duration
            if ring_duration is not None
            else settings.bell_ring_duration_seconds
        )
        self.notifications_path = settings.notifications_path
        self.navigate = navigate
        self.is_animating = False
        self._baseline = sync.unread_count
        self._count_hint: int | None = None
        self._ring_task: asyncio.Task[None] | None = None
        self._unsubscribe_state: Callable[[], None] | None = None
        self._event_subscription: Subscription | None = None

    @property
    def is_attached(self) -> bool:
        return self._unsubscribe_state is not None

    @property
    def unread_count(self) -> int:
        if self._count_hint is not None:
            return self._count_hint
        return self.sync.unread_count

    @property
    def badge_text(self) -> str | None:
        return format_badge(self.unread_count)

    def attach(self) -> None:
        if self.is_attached:
            return
        self._baseline = self.sync.unread_count
        self._unsubscribe_state = self.sync.subscribe(self._on_state)
        self._event_subscription = self.bus.subscribe(
            NewNotification, self._on_new_notification
        )

    def detach(self) -> None:
        if self._unsubscribe_state is not None:
            self._unsubscribe_state()
            self._unsubscribe_state = None
        if self._event_subscription is not None:
            self._event_subscription.close()
            self._event_subscription = None
        self._stop_ring()

    def click(self) -> str:
        """Open the notifications page. Nothing is marked read."""

        path = self.notifications_path
        if self.navigate is None:
            logger.debug("No navigator configured; would open %s", path)
        else:
            self.navigate(path)
        return path

    def render(self) -> BellView:
        return BellView(
            badge=self.badge_text,
            animating=self.is_animating,
            disabled=self.sync.is_loading,
        )

    def ring(self) -> None:
        """Start (or restart) one ring cycle."""

        self._stop_ring()
        self.is_animating = True
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop; ring will not clear itself")
            return
        self._ring_task = loop.create_task(self._ring_timer())

    async def wait_for_ring(self) -> None:
        task = self._ring_task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    async def _ring_timer(self) -> None:
        await asyncio.sleep(self.ring_duration)
        self.is_animating = False
        self._ring_task = None

    def _stop_ring(self) -> None:
        task, self._ring_task = self._ring_task, None
        if task is not None and not task.done():
            task.cancel()
        self.is_animating = False

    def _on_state(self, state: NotificationSyncState) -> None:
        count = state.unread_count
        previous, self._baseline = self._baseline, count
        self._count_hint = None
        if count > previous:
            logger.debug("Unread count rose from %s to %s", previous, count)
            self.ring()

    def _on_new_notification(self, event: NewNotification) -> None:
        if event.count is not None:
            self._count_hint = max(0, event.count)
            self._baseline = self._count_hint
        self.ring()


__all__ = ["BADGE_LIMIT", "BellView", "NotificationBell", "format_badge"]
