"""Tests for the in-process notification event bus."""

from __future__ import annotations

import anyio
import pytest

from xecare.infrastructure.events import (
    NewNotification,
    NotificationEventBus,
    RefreshNotifications,
)


def test_publish_delivers_to_handlers_of_the_exact_type() -> None:
    bus = NotificationEventBus()
    received: list[object] = []
    bus.subscribe(NewNotification, received.append)
    bus.subscribe(RefreshNotifications, lambda event: received.append("refresh"))

    delivered = bus.publish(NewNotification(count=3))

    assert delivered == 1
    assert received == [NewNotification(count=3)]


def test_subscription_close_is_idempotent() -> None:
    bus = NotificationEventBus()
    received: list[object] = []
    subscription = bus.subscribe(NewNotification, received.append)

    subscription.close()
    subscription.close()
    bus.publish(NewNotification())

    assert subscription.active is False
    assert received == []
    assert bus.subscriber_count(NewNotification) == 0


def test_failing_handler_does_not_stop_delivery(caplog) -> None:
    bus = NotificationEventBus()
    received: list[object] = []

    def _broken(event: NewNotification) -> None:
        raise RuntimeError("boom")

    bus.subscribe(NewNotification, _broken)
    bus.subscribe(NewNotification, received.append)

    with caplog.at_level("ERROR"):
        delivered = bus.publish(NewNotification())

    assert delivered == 2
    assert received == [NewNotification()]
    assert "failed for NewNotification" in caplog.text


def test_handler_unsubscribing_during_publish_keeps_delivery_stable() -> None:
    bus = NotificationEventBus()
    received: list[str] = []
    subscriptions = []

    def _once(event: NewNotification) -> None:
        received.append("once")
        subscriptions[0].close()

    subscriptions.append(bus.subscribe(NewNotification, _once))
    bus.subscribe(NewNotification, lambda event: received.append("always"))

    bus.publish(NewNotification())
    bus.publish(NewNotification())

    assert received == ["once", "always", "always"]


def test_async_handler_without_event_loop_is_dropped(caplog) -> None:
    bus = NotificationEventBus()

    async def _handler(event: NewNotification) -> None:
        raise AssertionError("should not run")

    bus.subscribe(NewNotification, _handler)

    with caplog.at_level("WARNING"):
        bus.publish(NewNotification())

    assert "no event loop available" in caplog.text


@pytest.mark.anyio
async def test_async_handlers_are_scheduled_on_the_running_loop() -> None:
    bus = NotificationEventBus()
    received: list[object] = []

    async def _handler(event: RefreshNotifications) -> None:
        await anyio.sleep(0)
        received.append(event)

    bus.subscribe(RefreshNotifications, _handler)

    bus.publish(RefreshNotifications())
    assert received == []
    await bus.drain()

    assert received == [RefreshNotifications()]


@pytest.mark.anyio
async def test_async_handler_errors_are_logged(caplog) -> None:
    bus = NotificationEventBus()

    async def _handler(event: RefreshNotifications) -> None:
        raise RuntimeError("async boom")

    bus.subscribe(RefreshNotifications, _handler)

    with caplog.at_level("ERROR"):
        bus.publish(RefreshNotifications())
        await bus.drain()

    assert "Asynchronous event handler failed" in caplog.text


@pytest.mark.anyio
async def test_publish_from_worker_thread_runs_handler_on_host_loop() -> None:
    bus = NotificationEventBus()
    received: list[object] = []

    async def _handler(event: NewNotification) -> None:
        received.append(event)

    bus.subscribe(NewNotification, _handler)

    await anyio.to_thread.run_sync(bus.publish, NewNotification(count=1))

    assert received == [NewNotification(count=1)]


def test_clear_removes_every_handler() -> None:
    bus = NotificationEventBus()
    bus.subscribe(NewNotification, lambda event: None)
    bus.subscribe(RefreshNotifications, lambda event: None)

    bus.clear()

    assert bus.subscriber_count(NewNotification) == 0
    assert bus.subscriber_count(RefreshNotifications) == 0
