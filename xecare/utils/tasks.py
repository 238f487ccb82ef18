"""Cancellable task helpers for debounced and superseded async work."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LatestTaskRunner(Generic[T]):
    """Run one coroutine at a time where the newest submission always wins.

    Submitting new work cancels the pending debounce timer and the in-flight
    task of the previous submission. A result (or error) reaches the callbacks
    only if no newer submission happened while it was running.
    """

    def __init__(
        self,
        *,
        on_result: Callable[[T], None],
        on_error: Callable[[Exception], None],
        on_start: Callable[[], None] | None = None,
    ) -> None:
        self._on_result = on_result
        self._on_error = on_error
        self._on_start = on_start
        self._generation = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def is_pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(
        self, factory: Callable[[], Awaitable[T]], *, delay: float = 0.0
    ) -> asyncio.Task[None]:
        """Schedule ``factory`` after ``delay`` seconds, superseding older work."""

        self.cancel()
        generation = self._generation
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(generation, factory, delay))
        return self._task

    def cancel(self) -> None:
        """Invalidate the current submission and cancel its task."""

        self._generation += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    async def wait(self) -> None:
        """Wait for the current submission to settle (used by callers and tests)."""

        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    async def _run(
        self, generation: int, factory: Callable[[], Awaitable[T]], delay: float
    ) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        if generation != self._generation:
            return
        if self._on_start is not None:
            self._on_start()
        try:
            result: Any = await factory()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if generation != self._generation:
                logger.debug("Discarding error from superseded task: %s", exc)
                return
            self._on_error(exc)
            return
        if generation != self._generation:
            logger.debug("Discarding result from superseded task")
            return
        self._on_result(result)


__all__ = ["LatestTaskRunner"]
