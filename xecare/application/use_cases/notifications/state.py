"""Notification sync state and the pure transitions applied to it.

Every change to the state goes through one of the ``apply_*`` functions below,
which return a new :class:`NotificationSyncState` and never touch their input.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from xecare.domain.entities import Notification


@dataclass(frozen=True)
class NotificationSyncState:
    """Snapshot of the current identity's notifications.

    ``unread_count`` is derived from ``notifications`` once the list has been
    loaded. Before that, the value reported by the unread count endpoint (minus
    the ids marked read locally) is used.
    """

    notifications: tuple[Notification, ...] = ()
    server_unread_count: int = 0
    is_loading: bool = True
    notifications_loaded: bool = False
    locally_read_ids: frozenset[int] = field(default_factory=frozenset)

    @property
    def unread_count(self) -> int:
        if self.notifications_loaded:
            return sum(1 for notification in self.notifications if not notification.is_read)
        return self.server_unread_count

    def find(self, notification_id: int) -> Notification | None:
        for notification in self.notifications:
            if notification.id == notification_id:
                return notification
        return None


def apply_loading(state: NotificationSyncState, is_loading: bool) -> NotificationSyncState:
    if state.is_loading == is_loading:
        return state
    return replace(state, is_loading=is_loading)


def apply_notifications_loaded(
    state: NotificationSyncState, notifications: Iterable[Notification]
) -> NotificationSyncState:
    return replace(
        state,
        notifications=tuple(notifications),
        notifications_loaded=True,
        locally_read_ids=frozenset(),
    )


def apply_unread_count_loaded(
    state: NotificationSyncState, count: int
) -> NotificationSyncState:
    return replace(
        state, server_unread_count=max(0, count), locally_read_ids=frozenset()
    )


def apply_marked_read(
    state: NotificationSyncState, notification_id: int
) -> tuple[NotificationSyncState, bool]:
    """Mark one notification read; the flag tells whether anything changed.

    A notification that is unknown locally (list not loaded yet) decrements the
    cached server count once per id, floored at zero.
    """

    current = state.find(notification_id)
    if current is not None:
        if current.is_read:
            return state, False
        notifications = tuple(
            item.mark_read() if item.id == notification_id else item
            for item in state.notifications
        )
        server_count = max(0, state.server_unread_count - 1)
        return (
            replace(state, notifications=notifications, server_unread_count=server_count),
            True,
        )

    if state.notifications_loaded or notification_id in state.locally_read_ids:
        return state, False
    return (
        replace(
            state,
            server_unread_count=max(0, state.server_unread_count - 1),
            locally_read_ids=state.locally_read_ids | {notification_id},
        ),
        True,
    )


def apply_marked_unread(
    state: NotificationSyncState, notification_id: int
) -> NotificationSyncState:
    """Undo :func:`apply_marked_read` for ``notification_id``."""

    current = state.find(notification_id)
    if current is not None:
        if not current.is_read:
            return state
        notifications = tuple(
            item.mark_unread() if item.id == notification_id else item
            for item in state.notifications
        )
        return replace(
            state,
            notifications=notifications,
            server_unread_count=state.server_unread_count + 1,
        )

    if notification_id not in state.locally_read_ids:
        return state
    return replace(
        state,
        server_unread_count=state.server_unread_count + 1,
        locally_read_ids=state.locally_read_ids - {notification_id},
    )


def apply_all_marked_read(state: NotificationSyncState) -> NotificationSyncState:
    return replace(
        state,
        notifications=tuple(item.mark_read() for item in state.notifications),
        server_unread_count=0,
    )


__all__ = [
    "NotificationSyncState",
    "apply_all_marked_read",
    "apply_loading",
    "apply_marked_read",
    "apply_marked_unread",
    "apply_notifications_loaded",
    "apply_unread_count_loaded",
]
