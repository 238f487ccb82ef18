"""Shared fixtures: isolated settings and an in-memory fake XeCare backend."""

from __future__ import annotations

import asyncio
import copy
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable

import httpx
import pytest
from fastapi import FastAPI, Header, HTTPException

from xecare.config import reset_settings_cache
from xecare.infrastructure.http import create_http_client
from xecare.utils import get_app_timezone

BACKEND_URL = "http://backend.test"
VALID_TOKEN = "secret-token"
OWNER_ID = 7


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Point every setting at test values and keep user files untouched."""

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XECARE_API_BASE_URL", BACKEND_URL)
    monkeypatch.setenv("XECARE_STORAGE_DIR", str(tmp_path / "session"))
    monkeypatch.setenv("XECARE_APP_TIMEZONE", "Asia/Ho_Chi_Minh")
    reset_settings_cache()
    get_app_timezone.cache_clear()
    yield
    reset_settings_cache()
    get_app_timezone.cache_clear()


def _notification_payload(
    notification_id: int,
    *,
    is_read: bool = False,
    recipient_id: int = OWNER_ID,
    notification_type: str = "SYSTEM_UPDATE",
    title: str | None = None,
    category: str | None = None,
    priority: str | None = None,
) -> dict[str, Any]:
    return {
        "id": notification_id,
        "recipientType": "USER",
        "recipientId": recipient_id,
        "type": notification_type,
        "title": title or f"Notification {notification_id}",
        "message": f"Message {notification_id}",
        "isRead": is_read,
        "createdAt": "2024-05-01T09:30:00",
        "category": category,
        "priority": priority,
    }


@dataclass
class FakeBackend:
    """Mutable state behind the fake API, inspected and tweaked by tests."""

    token: str = VALID_TOKEN
    notifications: list[dict[str, Any]] = field(default_factory=list)
    garages: list[dict[str, Any]] = field(default_factory=list)
    # address -> id of the garage that registered it
    taken_addresses: dict[str, int] = field(default_factory=dict)
    profile: dict[str, Any] = field(
        default_factory=lambda: {
            "id": OWNER_ID,
            "email": "owner@example.com",
            "name": "Garage Owner",
            "role": "garage",
            "garages": [{"id": 1, "name": "Main", "status": "ACTIVE"}],
        }
    )
    failures: set[str] = field(default_factory=set)
    gates: dict[str, asyncio.Event] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)
    last_params: dict[str, dict[str, str]] = field(default_factory=dict)
    # truncates the list endpoint, the unread count still covers everything
    list_limit: int | None = None

    def add_notification(self, notification_id: int, **kwargs: Any) -> dict[str, Any]:
        payload = _notification_payload(notification_id, **kwargs)
        self.notifications.append(payload)
        return payload

    def add_garage(
        self,
        garage_id: int,
        name: str,
        latitude: float | None,
        longitude: float | None,
        **extra: Any,
    ) -> dict[str, Any]:
        payload = {
            "id": garage_id,
            "name": name,
            "address": f"{garage_id} Garage Street",
            "latitude": latitude,
            "longitude": longitude,
            "status": "ACTIVE",
            "isVerified": True,
            **extra,
        }
        self.garages.append(payload)
        return payload

    def unread(self) -> int:
        return sum(1 for item in self.notifications if not item["isRead"])

    def gate(self, name: str) -> asyncio.Event:
        """Hold the ``name`` endpoint until the returned event is set."""

        event = asyncio.Event()
        self.gates[name] = event
        return event

    def count(self, name: str) -> int:
        return self.calls.count(name)

    async def enter(self, name: str, authorization: str | None) -> None:
        self.calls.append(name)
        if authorization != f"Bearer {self.token}":
            raise HTTPException(status_code=401, detail="Unauthorized")
        if name in self.failures:
            raise HTTPException(status_code=500, detail=f"Simulated {name} failure")

    async def hold(self, name: str) -> None:
        gate = self.gates.get(name)
        if gate is not None:
            await gate.wait()


def create_fake_app(backend: FakeBackend) -> FastAPI:
    app = FastAPI()

    @app.get("/apis/notifications/me")
    async def list_mine(authorization: str | None = Header(default=None)):
        await backend.enter("list", authorization)
        snapshot = copy.deepcopy(backend.notifications[: backend.list_limit])
        await backend.hold("list")
        return snapshot

    @app.get("/apis/notifications/me/unread-count")
    async def unread_count(authorization: str | None = Header(default=None)):
        await backend.enter("count", authorization)
        count = backend.unread()
        await backend.hold("count")
        return {"unreadCount": count}

    @app.get("/apis/notifications/me/type/{notification_type}")
    async def list_by_type(
        notification_type: str, authorization: str | None = Header(default=None)
    ):
        await backend.enter("by_type", authorization)
        return [n for n in backend.notifications if n["type"] == notification_type]

    @app.get("/apis/notifications/me/category/{category}")
    async def list_by_category(
        category: str, authorization: str | None = Header(default=None)
    ):
        await backend.enter("by_category", authorization)
        return [n for n in backend.notifications if n["category"] == category]

    @app.get("/apis/notifications/me/priority/{priority}")
    async def list_by_priority(
        priority: str, authorization: str | None = Header(default=None)
    ):
        await backend.enter("by_priority", authorization)
        return [n for n in backend.notifications if n["priority"] == priority]

    @app.get("/apis/notifications/me/emergency")
    async def list_emergency(authorization: str | None = Header(default=None)):
        await backend.enter("emergency", authorization)
        return [n for n in backend.notifications if n["type"].startswith("EMERGENCY_")]

    @app.get("/apis/notifications/me/search")
    async def search(keyword: str, authorization: str | None = Header(default=None)):
        await backend.enter("search", authorization)
        keyword = keyword.lower()
        return [
            n
            for n in backend.notifications
            if keyword in n["title"].lower() or keyword in n["message"].lower()
        ]

    @app.post("/apis/notifications/mark-all-read")
    async def mark_all_read(authorization: str | None = Header(default=None)):
        await backend.enter("mark_all_read", authorization)
        for item in backend.notifications:
            item["isRead"] = True
        return {"success": True}

    @app.post("/apis/notifications/{notification_id}/read")
    async def mark_read(
        notification_id: int, authorization: str | None = Header(default=None)
    ):
        await backend.enter("mark_read", authorization)
        await backend.hold("mark_read")
        for item in backend.notifications:
            if item["id"] == notification_id:
                item["isRead"] = True
                return item
        raise HTTPException(status_code=404, detail="Notification not found")

    @app.get("/apis/user/profile")
    async def profile(authorization: str | None = Header(default=None)):
        await backend.enter("profile", authorization)
        return backend.profile

    @app.get("/apis/garage/nearby")
    async def nearby(
        latitude: float,
        longitude: float,
        radius: float = 10.0,
    ):
        backend.calls.append("nearby")
        backend.last_params["nearby"] = {
            "latitude": str(latitude),
            "longitude": str(longitude),
            "radius": str(radius),
        }
        return backend.garages

    @app.get("/apis/garage/search/advanced")
    async def search_advanced(
        name: str | None = None,
        isVerified: str | None = None,
        minRating: float | None = None,
    ):
        backend.calls.append("search_advanced")
        backend.last_params["search_advanced"] = {
            key: str(value)
            for key, value in {
                "name": name,
                "isVerified": isVerified,
                "minRating": minRating,
            }.items()
            if value is not None
        }
        return {"content": backend.garages}

    @app.get("/apis/garage/validation/address")
    async def check_address(address: str):
        backend.calls.append("check_address")
        await backend.hold("check_address")
        taken = address in backend.taken_addresses
        return {
            "isTaken": taken,
            "message": "Address already registered" if taken else "Address available",
        }

    @app.get("/apis/garage/validation/address/edit")
    async def check_address_for_edit(address: str, garageId: int):
        backend.calls.append("check_address_edit")
        owner = backend.taken_addresses.get(address)
        own = owner == garageId
        return {
            "isTaken": owner is not None,
            "isOwnAddress": own,
            "garageId": owner,
            "exactMatch": owner is not None,
            "message": "Current address" if own else "Checked",
        }

    @app.get("/apis/garage/{garage_id}")
    async def get_garage(garage_id: int):
        backend.calls.append("garage")
        for item in backend.garages:
            if item["id"] == garage_id:
                return item
        raise HTTPException(status_code=404, detail="Garage not found")

    return app


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def client_token() -> dict[str, str | None]:
    """Token handed to the HTTP client; tests may replace ``value``."""

    return {"value": VALID_TOKEN}


@pytest.fixture
def backend_transport(backend: FakeBackend) -> httpx.ASGITransport:
    return httpx.ASGITransport(app=create_fake_app(backend))


@pytest.fixture
async def api_client(
    backend_transport: httpx.ASGITransport, client_token: dict[str, str | None]
) -> AsyncIterator[httpx.AsyncClient]:
    async with create_http_client(
        token_provider=lambda: client_token["value"], transport=backend_transport
    ) as client:
        yield client


async def _wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:

    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met before timeout")
        await asyncio.sleep(0.01)


@pytest.fixture
def wait_until() -> Callable[..., Any]:
    """Poll a predicate on the running loop until it holds or a timeout expires."""

    return _wait_until
