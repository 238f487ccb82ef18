"""Domain entities for service providers (garages) and their distance to the user."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


def _optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class Garage:
    """Public view of a garage as returned by the search endpoints."""

    id: int
    name: str
    address: str = ""
    latitude: float | None = None
    longitude: float | None = None
    status: str | None = None
    is_verified: bool = False
    average_rating: float | None = None
    total_reviews: int = 0
    service_names: tuple[str, ...] = field(default_factory=tuple)
    vehicle_type_names: tuple[str, ...] = field(default_factory=tuple)
    phone: str | None = None
    email: str | None = None
    image_url: str | None = None
    description: str | None = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "Garage":
        return cls(
            id=int(data["id"]),
            name=str(data.get("name") or ""),
            address=str(data.get("address") or ""),
            latitude=_optional_float(data.get("latitude")),
            longitude=_optional_float(data.get("longitude")),
            status=data.get("status"),
            is_verified=bool(data.get("isVerified", False)),
            average_rating=_optional_float(data.get("averageRating")),
            total_reviews=int(data.get("totalReviews") or 0),
            service_names=tuple(data.get("serviceNames") or ()),
            vehicle_type_names=tuple(data.get("vehicleTypeNames") or ()),
            phone=data.get("phone"),
            email=data.get("email"),
            image_url=data.get("imageUrl"),
            description=data.get("description"),
        )

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(frozen=True)
class GarageWithDistance:
    """A garage annotated with its great-circle distance from the user in km."""

    garage: Garage
    distance_from_user: float | None

    @property
    def id(self) -> int:
        return self.garage.id

    @property
    def name(self) -> str:
        return self.garage.name

    @property
    def latitude(self) -> float | None:
        return self.garage.latitude

    @property
    def longitude(self) -> float | None:
        return self.garage.longitude


__all__ = ["Garage", "GarageWithDistance"]
