"""Domain entity representing a notification delivered to a user or garage."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, Mapping

from xecare.utils import parse_timestamp


class RecipientType(str, Enum):
    USER = "USER"
    GARAGE = "GARAGE"


class NotificationType(str, Enum):
    """Categories of domain events the backend turns into notifications."""

    EMERGENCY_REQUEST_CREATED = "EMERGENCY_REQUEST_CREATED"
    EMERGENCY_QUOTE_RECEIVED = "EMERGENCY_QUOTE_RECEIVED"
    EMERGENCY_STATUS_UPDATED = "EMERGENCY_STATUS_UPDATED"
    EMERGENCY_COMPLETED = "EMERGENCY_COMPLETED"
    EMERGENCY_CANCELLED = "EMERGENCY_CANCELLED"
    FAVORITE_ADDED = "FAVORITE_ADDED"
    FAVORITE_REMOVED = "FAVORITE_REMOVED"
    APPOINTMENT_CREATED = "APPOINTMENT_CREATED"
    APPOINTMENT_CONFIRMED = "APPOINTMENT_CONFIRMED"
    APPOINTMENT_CANCELLED = "APPOINTMENT_CANCELLED"
    APPOINTMENT_COMPLETED = "APPOINTMENT_COMPLETED"
    APPOINTMENT_REMINDER = "APPOINTMENT_REMINDER"
    SYSTEM_UPDATE = "SYSTEM_UPDATE"
    MAINTENANCE_NOTICE = "MAINTENANCE_NOTICE"
    NEW_FEATURE = "NEW_FEATURE"
    WELCOME_MESSAGE = "WELCOME_MESSAGE"
    GENERAL = "GENERAL"


_CATEGORY_LABELS: dict[str, str] = {
    "EMERGENCY": "Emergency",
    "FAVORITE": "Favorite",
    "APPOINTMENT": "Appointment",
    "SYSTEM": "System",
    "GARAGE": "Garage",
}


@dataclass(frozen=True)
class Notification:
    """Information message addressed to a single recipient."""

    id: int
    recipient_type: RecipientType
    recipient_id: int
    type: NotificationType | str
    title: str
    message: str
    is_read: bool = False
    created_at: datetime | None = None
    priority: str | None = None
    category: str | None = None
    related_id: int | None = None
    related_type: str | None = None
    action_url: str | None = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "Notification":
        """Build a notification from the backend's camelCase JSON object."""

        raw_type = str(data.get("type") or NotificationType.GENERAL.value)
        try:
            notification_type: NotificationType | str = NotificationType(raw_type)
        except ValueError:
            notification_type = raw_type

        related_id = data.get("relatedId")
        return cls(
            id=int(data["id"]),
            recipient_type=RecipientType(
                str(data.get("recipientType") or RecipientType.USER.value)
            ),
            recipient_id=int(data.get("recipientId") or 0),
            type=notification_type,
            title=str(data.get("title") or ""),
            message=str(data.get("message") or ""),
            is_read=bool(data.get("isRead", data.get("read", False))),
            created_at=parse_timestamp(data.get("createdAt")),
            priority=data.get("priority"),
            category=data.get("category"),
            related_id=int(related_id) if related_id is not None else None,
            related_type=data.get("relatedType"),
            action_url=data.get("actionUrl"),
        )

    def mark_read(self) -> "Notification":
        """Return a copy flagged as read."""

        if self.is_read:
            return self
        return replace(self, is_read=True)

    def mark_unread(self) -> "Notification":
        if not self.is_read:
            return self
        return replace(self, is_read=False)

    def is_actionable_by(self, identity_id: int) -> bool:
        """Return ``True`` when ``identity_id`` is the notification's recipient."""

        return self.recipient_id == identity_id

    @property
    def is_emergency(self) -> bool:
        type_value = getattr(self.type, "value", self.type)
        return str(type_value).startswith("EMERGENCY_") or self.category == "EMERGENCY"

    @property
    def category_label(self) -> str:
        return _CATEGORY_LABELS.get(self.category or "", "General")


__all__ = ["Notification", "NotificationType", "RecipientType"]
