"""Keep the current identity's notifications and unread count up to date."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Callable

from xecare.config import get_settings
from xecare.domain.entities import Notification
from xecare.infrastructure.api import NotificationApi
from xecare.infrastructure.events import NotificationEventBus, RefreshNotifications
from xecare.infrastructure.http import ApiError

from .state import (
    NotificationSyncState,
    apply_all_marked_read,
    apply_loading,
    apply_marked_read,
    apply_marked_unread,
    apply_notifications_loaded,
    apply_unread_count_loaded,
)

logger = logging.getLogger(__name__)

StateListener = Callable[[NotificationSyncState], None]


class NotificationSync:
    """Session-scoped notification store refreshed on a fixed timer.

    Create one per authenticated session and stop it at logout. Reads from the
    backend fail silently and keep the previous snapshot; ``mark_as_read`` is
    applied optimistically and rolled back if the backend rejects it.

    Each local mutation bumps an internal version. A load that was started
    before the latest local mutation is discarded when it resolves, so a stale
    timer tick never overwrites an optimistic update.
    """

    def __init__(
        self,
        api: NotificationApi,
        *,
        event_bus: NotificationEventBus | None = None,
        identity_id: int | None = None,
        poll_interval: float | None = None,
    ) -> None:
        self.api = api
        self.event_bus = event_bus or NotificationEventBus()
        self.identity_id = identity_id
        self.poll_interval = (
            poll_interval
            if poll_interval is not None
            else get_settings().notification_poll_interval_seconds
        )
        self._state = NotificationSyncState()
        self._listeners: list[StateListener] = []
        self._version = 0
        self._mismatched_count: int | None = None
        self._poll_task: asyncio.Task[None] | None = None
        self._refresh_subscription = None

    @property
    def state(self) -> NotificationSyncState:
        return self._state

    @property
    def notifications(self) -> tuple[Notification, ...]:
        return self._state.notifications

    @property
    def unread_count(self) -> int:
        return self._state.unread_count

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def is_running(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with every new state; returns an unsubscribe callable."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def start(self) -> None:
        """Load the list and the unread count once, then start the refresh timer."""

        if self.is_running:
            return
        self._refresh_subscription = self.event_bus.subscribe(
            RefreshNotifications, self._on_refresh_requested
        )
        await self.load_notifications()
        await self.load_unread_count()
        self._poll_task = asyncio.get_running_loop().create_task(self._poll())

    async def stop(self) -> None:
        """Cancel the refresh timer and discard the session's state."""

        if self._refresh_subscription is not None:
            self._refresh_subscription.close()
            self._refresh_subscription = None
        task, self._poll_task = self._poll_task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._version += 1
        self._mismatched_count = None
        self._commit(NotificationSyncState(is_loading=False))

    async def __aenter__(self) -> "NotificationSync":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    async def load_notifications(self) -> None:
        """Replace the list with the backend snapshot; keep it on failure."""

        version = self._version
        try:
            notifications = await self.api.list_mine()
        except ApiError as exc:
            logger.warning("Could not load notifications: %s", exc)
            self._commit(apply_loading(self._state, False))
            return

        # Flag and snapshot change in a single commit.
        state = apply_loading(self._state, False)
        if version != self._version:
            logger.debug("Discarding notification snapshot superseded by a local update")
            self._commit(state)
            return
        self._warn_about_foreign_recipients(notifications)
        self._commit(apply_notifications_loaded(state, notifications))

    async def load_unread_count(self) -> None:
        """Store the backend unread count; reload the list if they disagree.

        When a reload is needed the count and the new list are committed
        together, so observers never see the new count paired with the old
        list. A mismatch that survives a reload is not reloaded again until the
        backend count changes.
        """

        version = self._version
        try:
            count = await self.api.unread_count()
        except ApiError as exc:
            logger.warning("Could not load unread notification count: %s", exc)
            return

        if version != self._version:
            logger.debug("Discarding unread count superseded by a local update")
            return
        state = apply_unread_count_loaded(self._state, count)
        if not state.notifications_loaded or count == state.unread_count:
            self._mismatched_count = None
            self._commit(state)
            return
        if count == self._mismatched_count:
            self._commit(state)
            return

        logger.debug(
            "Unread count %s differs from local list (%s); reloading",
            count,
            state.unread_count,
        )
        try:
            notifications = await self.api.list_mine()
        except ApiError as exc:
            logger.warning("Could not reload notifications: %s", exc)
            return
        if version != self._version:
            logger.debug("Discarding notification snapshot superseded by a local update")
            return

        self._warn_about_foreign_recipients(notifications)
        state = apply_notifications_loaded(
            apply_unread_count_loaded(self._state, count), notifications
        )
        if count != state.unread_count:
            logger.info(
                "Backend reports %s unread notifications but the list holds %s; "
                "not reloading again until the count changes",
                count,
                state.unread_count,
            )
            self._mismatched_count = count
        else:
            self._mismatched_count = None
        self._commit(state)

    async def mark_as_read(self, notification_id: int) -> None:
        """Mark one notification read, optimistically.

        The local state changes before the request is sent. If the backend call
        fails the change is rolled back and the :class:`ApiError` is re-raised.
        """

        notification = self._state.find(notification_id)
        if (
            notification is not None
            and self.identity_id is not None
            and not notification.is_actionable_by(self.identity_id)
        ):
            raise ValueError(
                f"Notification {notification_id} is addressed to recipient "
                f"{notification.recipient_id}, not {self.identity_id}"
            )

        new_state, changed = apply_marked_read(self._state, notification_id)
        if not changed:
            return
        self._version += 1
        self._commit(new_state)

        try:
            await self.api.mark_as_read(notification_id)
        except ApiError as exc:
            logger.warning(
                "Marking notification %s as read failed, rolling back: %s",
                notification_id,
                exc,
            )
            self._version += 1
            self._commit(apply_marked_unread(self._state, notification_id))
            raise

    async def mark_all_as_read(self) -> None:
        """Mark everything read locally, then tell the backend.

        The local change is unconditional; a backend failure is only logged and
        the next full refresh reconciles the list.
        """

        self._version += 1
        self._commit(apply_all_marked_read(self._state))
        try:
            await self.api.mark_all_as_read()
        except ApiError as exc:
            logger.warning("Marking all notifications as read failed: %s", exc)

    async def fetch_by_type(self, notification_type: str) -> Sequence[Notification]:
        return await self.api.list_by_type(notification_type)

    async def fetch_by_category(self, category: str) -> Sequence[Notification]:
        return await self.api.list_by_category(category)

    async def fetch_by_priority(self, priority: str) -> Sequence[Notification]:
        return await self.api.list_by_priority(priority)

    async def fetch_emergency(self) -> Sequence[Notification]:
        return await self.api.list_emergency()

    async def search(self, keyword: str) -> Sequence[Notification]:
        keyword = keyword.strip()
        if not keyword:
            raise ValueError("A search keyword is required")
        return await self.api.search(keyword)

    async def _poll(self) -> None:
        while True:
            await asyncio.sleep(self.poll_interval)
            try:
                await self.load_unread_count()
            except Exception:  # pragma: no cover - keeps the timer alive
                logger.exception("Unexpected error while refreshing notifications")

    def _on_refresh_requested(self, event: RefreshNotifications):
        return self.load_unread_count()

    def _warn_about_foreign_recipients(self, notifications: Sequence[Notification]) -> None:
        if self.identity_id is None:
            return
        foreign = [n.id for n in notifications if not n.is_actionable_by(self.identity_id)]
        if foreign:
            logger.warning(
                "Notifications %s are not addressed to identity %s",
                foreign,
                self.identity_id,
            )

    def _commit(self, new_state: NotificationSyncState) -> None:
        if new_state is self._state:
            return
        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                logger.exception("Notification state listener %r failed", listener)


__all__ = ["NotificationSync", "StateListener"]
