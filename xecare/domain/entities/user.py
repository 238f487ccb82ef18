"""Domain entity representing the authenticated identity."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class SessionUser:
    """Core attributes of the user or garage owner the client acts for."""

    id: int
    email: str
    name: str
    role: str = "USER"
    phone: str | None = None
    image_url: str | None = None
    garages: tuple[dict[str, Any], ...] = field(default_factory=tuple)

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "SessionUser":
        return cls(
            id=int(data["id"]),
            email=str(data.get("email") or ""),
            name=str(data.get("name") or ""),
            role=str(data.get("role") or "USER").upper(),
            phone=data.get("phone"),
            image_url=data.get("imageUrl"),
            garages=tuple(dict(item) for item in data.get("garages") or ()),
        )

    def to_payload(self) -> dict[str, Any]:
        """Return the camelCase representation persisted in session storage."""

        data = asdict(self)
        data["imageUrl"] = data.pop("image_url")
        data["garages"] = list(self.garages)
        return data

    def has_role(self, role: str) -> bool:
        return self.role.lower() == role.lower()

    def is_admin(self) -> bool:
        return self.has_role("admin")

    def is_garage_owner(self) -> bool:
        return self.has_role("garage")

    def has_active_garages(self) -> bool:
        return any(garage.get("status") == "ACTIVE" for garage in self.garages)


__all__ = ["SessionUser"]
