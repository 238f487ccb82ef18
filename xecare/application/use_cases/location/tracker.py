"""Obtain the user's position on explicit request."""

from __future__ import annotations

import asyncio
import logging

from xecare.config import get_settings
from xecare.domain.entities import (
    LOCATION_TIMEOUT,
    LOCATION_UNSUPPORTED,
    PERMISSION_DENIED,
    POSITION_UNAVAILABLE,
    LocationError,
    UserLocation,
)
from xecare.infrastructure.geolocation import (
    GeolocationProvider,
    PositionError,
    PositionOptions,
)

logger = logging.getLogger(__name__)

_LOG_HINTS: dict[int, str] = {
    PERMISSION_DENIED: (
        "Location permission denied; enable location access in the browser settings."
    ),
    POSITION_UNAVAILABLE: (
        "Location unavailable; check that location services are enabled."
    ),
    LOCATION_TIMEOUT: "Location request timed out; try again.",
}


class UserLocationTracker:
    """Hold the last known :class:`UserLocation` and the last error.

    Requests never raise: failures are stored in ``location_error``. There is
    no automatic retry. Overlapping calls share the in-flight request, except
    that a fresh request never joins one that may answer from cache: it waits
    for that request to finish and then asks the platform itself.
    """

    def __init__(self, provider: GeolocationProvider) -> None:
        self.provider = provider
        self.user_location: UserLocation | None = None
        self.location_error: LocationError | None = None
        self._pending: asyncio.Task[None] | None = None
        self._pending_options: PositionOptions | None = None
        self._generation = 0

    @property
    def is_supported(self) -> bool:
        return self.provider.is_supported

    @property
    def is_locating(self) -> bool:
        return self._pending is not None and not self._pending.done()

    async def request_location(self) -> None:
        settings = get_settings()
        await self._request(
            PositionOptions(
                enable_high_accuracy=True,
                timeout=settings.location_timeout_seconds,
                maximum_age=settings.location_maximum_age_seconds,
            )
        )

    async def request_fresh_location(self) -> None:
        """Like :meth:`request_location` but refuses cached positions."""

        settings = get_settings()
        await self._request(
            PositionOptions(
                enable_high_accuracy=True,
                timeout=settings.fresh_location_timeout_seconds,
                maximum_age=0,
            )
        )

    def clear_location(self) -> None:
        """Forget the position and error; a request still in flight is ignored."""

        self._generation += 1
        self.user_location = None
        self.location_error = None

    async def _request(self, options: PositionOptions) -> None:
        if not self.is_supported:
            self.location_error = LocationError.from_code(LOCATION_UNSUPPORTED)
            return

        while self.is_locating:
            pending = self._pending
            assert pending is not None and self._pending_options is not None
            # A request that accepts older cached positions cannot serve this one.
            joinable = self._pending_options.maximum_age <= options.maximum_age
            await asyncio.shield(pending)
            if joinable:
                return

        self.location_error = None
        self._pending_options = options
        loop = asyncio.get_running_loop()
        self._pending = loop.create_task(self._locate(options, self._generation))
        await asyncio.shield(self._pending)

    async def _locate(self, options: PositionOptions, generation: int) -> None:
        try:
            location = await self.provider.get_current_position(options)
        except PositionError as exc:
            if generation != self._generation:
                logger.debug("Ignoring location error resolved after clear_location")
                return
            error = LocationError.from_code(exc.code)
            self.location_error = error
            hint = _LOG_HINTS.get(exc.code)
            if hint is not None:
                logger.warning(hint)
            else:
                logger.warning("Location request failed: %s", error.message)
            return
        if generation != self._generation:
            logger.debug("Ignoring location resolved after clear_location")
            return
        self.user_location = location
        self.location_error = None


__all__ = ["UserLocationTracker"]
