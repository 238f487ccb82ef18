"""Domain entities for address geocoding and duplicate-address validation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class GeocodeResult:
    """Coordinates resolved for a free-form address."""

    latitude: float
    longitude: float
    display_name: str


@dataclass(frozen=True)
class AddressValidation:
    """Outcome of the backend duplicate-address check.

    The edit-mode endpoint also reports whether the address already belongs to
    the garage being edited and which matching strategy found it.
    """

    address: str
    is_taken: bool
    message: str = ""
    garage_id: int | None = None
    is_own_address: bool = False
    exact_match: bool = False
    normalized_match: bool = False
    similar_match: bool = False

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "AddressValidation":
        garage_id = data.get("garageId")
        return cls(
            address=str(data.get("address") or ""),
            is_taken=bool(data.get("isTaken", False)),
            message=str(data.get("message") or ""),
            garage_id=int(garage_id) if garage_id is not None else None,
            is_own_address=bool(data.get("isOwnAddress", False)),
            exact_match=bool(data.get("exactMatch", False)),
            normalized_match=bool(data.get("normalizedMatch", False)),
            similar_match=bool(data.get("similarMatch", False)),
        )

    @property
    def is_duplicate(self) -> bool:
        """Return ``True`` when another garage already uses the address."""

        return self.is_taken and not self.is_own_address


__all__ = ["AddressValidation", "GeocodeResult"]
