"""Domain entities describing the user's geographic position."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

LOCATION_UNSUPPORTED: Final[int] = 0
PERMISSION_DENIED: Final[int] = 1
POSITION_UNAVAILABLE: Final[int] = 2
LOCATION_TIMEOUT: Final[int] = 3

LOCATION_ERROR_MESSAGES: Final[dict[int, str]] = {
    LOCATION_UNSUPPORTED: "This environment does not support geolocation",
    PERMISSION_DENIED: (
        "Location access was denied. Please enable location access in your "
        "browser settings."
    ),
    POSITION_UNAVAILABLE: "Location information is unavailable",
    LOCATION_TIMEOUT: "The location request timed out",
}
DEFAULT_LOCATION_ERROR_MESSAGE: Final[str] = "Unable to get the current location"


@dataclass(frozen=True)
class UserLocation:
    """Latitude and longitude in degrees, with an optional accuracy in metres."""

    latitude: float
    longitude: float
    accuracy: float | None = None


@dataclass(frozen=True)
class LocationError:
    """Displayable failure of a location request."""

    code: int
    message: str

    @classmethod
    def from_code(cls, code: int) -> "LocationError":
        message = LOCATION_ERROR_MESSAGES.get(code, DEFAULT_LOCATION_ERROR_MESSAGE)
        return cls(code=code, message=message)


__all__ = [
    "DEFAULT_LOCATION_ERROR_MESSAGE",
    "LOCATION_ERROR_MESSAGES",
    "LOCATION_TIMEOUT",
    "LOCATION_UNSUPPORTED",
    "LocationError",
    "PERMISSION_DENIED",
    "POSITION_UNAVAILABLE",
    "UserLocation",
]
