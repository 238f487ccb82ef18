"""Client-side synchronization of the current identity's notifications."""

from .state import NotificationSyncState
from .sync import NotificationSync, StateListener

__all__ = ["NotificationSync", "NotificationSyncState", "StateListener"]
