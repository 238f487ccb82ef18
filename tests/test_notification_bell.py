"""Tests for the notification bell presenter."""

from __future__ import annotations

import asyncio

import pytest

from xecare.application.use_cases.notifications import NotificationSync
from xecare.infrastructure.api import NotificationApi
from xecare.infrastructure.events import NewNotification, NotificationEventBus
from xecare.interfaces.presenters import BellView, NotificationBell, format_badge


@pytest.fixture
def bus() -> NotificationEventBus:
    return NotificationEventBus()


@pytest.fixture
def sync(api_client, bus) -> NotificationSync:
    return NotificationSync(
        NotificationApi(api_client), event_bus=bus, identity_id=7, poll_interval=3600
    )


@pytest.fixture
def visited() -> list[str]:
    return []


@pytest.fixture
def bell(sync, bus, visited) -> NotificationBell:
    bell = NotificationBell(sync, bus, ring_duration=0.05, navigate=visited.append)
    bell.attach()
    yield bell
    bell.detach()


@pytest.mark.parametrize(
    ("count", "expected"),
    [
        (-1, None),
        (0, None),
        (1, "1"),
        (42, "42"),
        (99, "99"),
        (100, "99+"),
        (2500, "99+"),
    ],
)
def test_format_badge(count: int, expected: str | None) -> None:
    assert format_badge(count) == expected


@pytest.mark.anyio
async def test_bell_rings_when_unread_count_increases(bell, sync, backend) -> None:
    backend.add_notification(1)

    await sync.load_notifications()

    assert bell.is_animating is True
    assert bell.badge_text == "1"
    await bell.wait_for_ring()
    assert bell.is_animating is False


@pytest.mark.anyio
async def test_bell_ignores_decreases_and_unchanged_counts(bell, sync, backend) -> None:
    backend.add_notification(1)
    backend.add_notification(2)
    await sync.load_notifications()
    await bell.wait_for_ring()

    await sync.mark_as_read(1)
    assert bell.is_animating is False

    await sync.load_notifications()
    assert bell.is_animating is False
    assert bell.badge_text == "1"


@pytest.mark.anyio
async def test_new_increase_restarts_the_ring(sync, bus) -> None:
    bell = NotificationBell(sync, bus, ring_duration=0.2)

    bell.ring()
    await asyncio.sleep(0.12)
    bell.ring()
    await asyncio.sleep(0.12)

    assert bell.is_animating is True
    await bell.wait_for_ring()
    assert bell.is_animating is False


@pytest.mark.anyio
async def test_new_notification_event_rings_and_sets_count(bell, bus, sync, backend) -> None:
    for notification_id in range(1, 6):
        backend.add_notification(notification_id)

    bus.publish(NewNotification(count=5))

    assert bell.is_animating is True
    assert bell.badge_text == "5"
    await bell.wait_for_ring()

    await sync.load_notifications()
    assert bell.is_animating is False
    assert bell.badge_text == "5"


@pytest.mark.anyio
async def test_new_notification_without_count_keeps_badge(bell, bus) -> None:
    bus.publish(NewNotification())

    assert bell.is_animating is True
    assert bell.badge_text is None


@pytest.mark.anyio
async def test_render_reflects_loading_and_badge(bell, sync, backend) -> None:
    backend.add_notification(1)

    assert bell.render() == BellView(badge=None, animating=False, disabled=True)

    await sync.load_notifications()

    view = bell.render()
    assert view.badge == "1"
    assert view.disabled is False


@pytest.mark.anyio
async def test_click_navigates_without_marking_anything_read(
    bell, sync, backend, visited
) -> None:
    backend.add_notification(1)
    await sync.load_notifications()

    path = bell.click()

    assert path == "/notifications"
    assert visited == ["/notifications"]
    assert sync.unread_count == 1
    assert backend.count("mark_read") == 0


@pytest.mark.anyio
async def test_detach_stops_listening_and_cancels_ring(bell, bus, sync, backend) -> None:
    bus.publish(NewNotification(count=1))
    assert bell.is_animating is True

    bell.detach()

    assert bell.is_animating is False
    assert bus.subscriber_count(NewNotification) == 0
    backend.add_notification(1)
    await sync.load_notifications()
    bus.publish(NewNotification())
    assert bell.is_animating is False


@pytest.mark.anyio
async def test_event_then_poll_rings_once_and_keeps_badge(
    bell, bus, sync, backend, monkeypatch
) -> None:
    await sync.load_notifications()
    rings: list[str | None] = []
    ring = bell.ring

    def _counting_ring() -> None:
        rings.append(bell.badge_text)
        ring()

    monkeypatch.setattr(bell, "ring", _counting_ring)
    badges: list[str | None] = []
    sync.subscribe(lambda state: badges.append(bell.badge_text))

    backend.add_notification(1)
    bus.publish(NewNotification(count=1))
    await sync.load_unread_count()

    assert rings == ["1"]
    assert badges == ["1"]
    assert bell.badge_text == "1"
