"""REST gateway for the authenticated user's notifications."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

import httpx

from xecare.domain.entities import Notification
from xecare.infrastructure.http import ApiError, request_json

_BASE_PATH = "/apis/notifications"


class NotificationApi:
    """Read and acknowledge :class:`Notification` objects through the backend."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    async def list_mine(self) -> Sequence[Notification]:
        payload = await request_json(self.client, "GET", f"{_BASE_PATH}/me")
        return self._to_entities(payload)

    async def unread_count(self) -> int:
        payload = await request_json(self.client, "GET", f"{_BASE_PATH}/me/unread-count")
        if isinstance(payload, dict):
            payload = payload.get("unreadCount", payload.get("count"))
        try:
            count = int(payload)
        except (TypeError, ValueError) as exc:
            raise ApiError(f"Unexpected unread count payload: {payload!r}") from exc
        return max(0, count)

    async def list_by_type(self, notification_type: str) -> Sequence[Notification]:
        path = f"{_BASE_PATH}/me/type/{quote(notification_type, safe='')}"
        return self._to_entities(await request_json(self.client, "GET", path))

    async def list_by_category(self, category: str) -> Sequence[Notification]:
        path = f"{_BASE_PATH}/me/category/{quote(category, safe='')}"
        return self._to_entities(await request_json(self.client, "GET", path))

    async def list_by_priority(self, priority: str) -> Sequence[Notification]:
        path = f"{_BASE_PATH}/me/priority/{quote(priority, safe='')}"
        return self._to_entities(await request_json(self.client, "GET", path))

    async def list_emergency(self) -> Sequence[Notification]:
        payload = await request_json(self.client, "GET", f"{_BASE_PATH}/me/emergency")
        return self._to_entities(payload)

    async def search(self, keyword: str) -> Sequence[Notification]:
        payload = await request_json(
            self.client,
            "GET",
            f"{_BASE_PATH}/me/search",
            params={"keyword": keyword},
        )
        return self._to_entities(payload)

    async def mark_as_read(self, notification_id: int) -> None:
        await request_json(self.client, "POST", f"{_BASE_PATH}/{notification_id}/read")

    async def mark_all_as_read(self) -> None:
        await request_json(self.client, "POST", f"{_BASE_PATH}/mark-all-read")

    @staticmethod
    def _to_entities(payload: Any) -> list[Notification]:
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise ApiError(f"Expected a list of notifications, got {type(payload).__name__}")
        notifications = []
        for item in payload:
            try:
                notifications.append(Notification.from_payload(item))
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                raise ApiError(f"Malformed notification record: {item!r}") from exc
        return notifications


__all__ = ["NotificationApi"]
