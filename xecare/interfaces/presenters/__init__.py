"""View-facing presenters."""

from .notification_bell import BADGE_LIMIT, BellView, NotificationBell, format_badge

__all__ = ["BADGE_LIMIT", "BellView", "NotificationBell", "format_badge"]
