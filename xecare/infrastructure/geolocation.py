"""Platform adapters that resolve the device position.

A provider plays the role of the browser geolocation API: it is permission
gated, enforces its own timeout and reports failures with the platform codes
``1`` (permission denied), ``2`` (position unavailable) and ``3`` (timeout).
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Protocol

from xecare.domain.entities import (
    LOCATION_TIMEOUT,
    PERMISSION_DENIED,
    POSITION_UNAVAILABLE,
    UserLocation,
)


class PositionError(Exception):
    """Failure reported by a geolocation provider with its platform code."""

    PERMISSION_DENIED = PERMISSION_DENIED
    POSITION_UNAVAILABLE = POSITION_UNAVAILABLE
    TIMEOUT = LOCATION_TIMEOUT

    def __init__(self, code: int, message: str = "") -> None:
        super().__init__(message or f"Geolocation failed with code {code}")
        self.code = code


@dataclass(frozen=True)
class PositionOptions:
    enable_high_accuracy: bool = True
    timeout: float = 15.0
    maximum_age: float = 300.0


class GeolocationProvider(Protocol):
    @property
    def is_supported(self) -> bool:
        ...

    async def get_current_position(self, options: PositionOptions) -> UserLocation:
        ...


class StaticGeolocationProvider:
    """Provider that answers with a fixed position, or a fixed failure code.

    Used by the command line (coordinates given as arguments) and by tests.
    ``delay`` simulates the time the platform needs to answer; a delay longer
    than the requested timeout is reported as a timeout.
    """

    def __init__(
        self,
        location: UserLocation | None = None,
        *,
        error_code: int | None = None,
        delay: float = 0.0,
    ) -> None:
        if location is None and error_code is None:
            raise ValueError("Either a location or an error code is required")
        self.location = location
        self.error_code = error_code
        self.delay = delay
        self.calls = 0

    @property
    def is_supported(self) -> bool:
        return True

    async def get_current_position(self, options: PositionOptions) -> UserLocation:
        self.calls += 1
        if self.delay:
            if self.delay > options.timeout:
                await asyncio.sleep(options.timeout)
                raise PositionError(PositionError.TIMEOUT)
            await asyncio.sleep(self.delay)
        if self.error_code is not None:
            raise PositionError(self.error_code)
        assert self.location is not None
        return self.location


class UnsupportedGeolocationProvider:
    """Provider for environments without any geolocation capability."""

    @property
    def is_supported(self) -> bool:
        return False

    async def get_current_position(self, options: PositionOptions) -> UserLocation:
        raise PositionError(POSITION_UNAVAILABLE, "Geolocation is not supported")


__all__ = [
    "GeolocationProvider",
    "PositionError",
    "PositionOptions",
    "StaticGeolocationProvider",
    "UnsupportedGeolocationProvider",
]
