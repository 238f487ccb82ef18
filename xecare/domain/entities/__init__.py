"""Domain entities exposed by the client."""

from .address import AddressValidation, GeocodeResult
from .garage import Garage, GarageWithDistance
from .location import (
    LOCATION_ERROR_MESSAGES,
    LOCATION_TIMEOUT,
    LOCATION_UNSUPPORTED,
    PERMISSION_DENIED,
    POSITION_UNAVAILABLE,
    LocationError,
    UserLocation,
)
from .notification import Notification, NotificationType, RecipientType
from .user import SessionUser

__all__ = [
    "AddressValidation",
    "GeocodeResult",
    "Garage",
    "GarageWithDistance",
    "LOCATION_ERROR_MESSAGES",
    "LOCATION_TIMEOUT",
    "LOCATION_UNSUPPORTED",
    "PERMISSION_DENIED",
    "POSITION_UNAVAILABLE",
    "LocationError",
    "UserLocation",
    "Notification",
    "NotificationType",
    "RecipientType",
    "SessionUser",
]
