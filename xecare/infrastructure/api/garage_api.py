"""REST gateway for the public garage search and address validation endpoints."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx

from xecare.domain.entities import AddressValidation, Garage
from xecare.infrastructure.http import ApiError, request_json

_BASE_PATH = "/apis/garage"


def build_search_params(**params: Any) -> dict[str, Any]:
    """Drop empty filters and serialize booleans the way the backend expects."""

    cleaned: dict[str, Any] = {}
    for key, value in params.items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        cleaned[key] = value
    return cleaned


class GarageApi:
    """Query garages without authentication."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    async def nearby(
        self, latitude: float, longitude: float, *, radius: float = 10.0
    ) -> Sequence[Garage]:
        payload = await request_json(
            self.client,
            "GET",
            f"{_BASE_PATH}/nearby",
            params={"latitude": latitude, "longitude": longitude, "radius": radius},
        )
        return self._to_entities(payload)

    async def search_advanced(
        self,
        *,
        service: str | None = None,
        vehicle_type: str | None = None,
        status: str | None = None,
        name: str | None = None,
        min_rating: float | None = None,
        is_verified: bool | None = None,
    ) -> Sequence[Garage]:
        params = build_search_params(
            service=service,
            vehicleType=vehicle_type,
            status=status,
            name=name,
            minRating=min_rating,
            isVerified=is_verified,
        )
        payload = await request_json(
            self.client, "GET", f"{_BASE_PATH}/search/advanced", params=params
        )
        return self._to_entities(payload)

    async def get(self, garage_id: int) -> Garage:
        payload = await request_json(self.client, "GET", f"{_BASE_PATH}/{garage_id}")
        if not isinstance(payload, dict):
            raise ApiError(f"Garage {garage_id} returned an empty payload")
        try:
            return Garage.from_payload(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise ApiError(f"Malformed garage record: {payload!r}") from exc

    async def check_address(self, address: str) -> AddressValidation:
        """Ask whether ``address`` is already registered by a garage."""

        payload = await request_json(
            self.client,
            "GET",
            f"{_BASE_PATH}/validation/address",
            params={"address": address},
        )
        return self._to_validation(payload, address)

    async def check_address_for_edit(
        self, address: str, garage_id: int
    ) -> AddressValidation:
        """Same check, ignoring the address currently owned by ``garage_id``."""

        payload = await request_json(
            self.client,
            "GET",
            f"{_BASE_PATH}/validation/address/edit",
            params={"address": address, "garageId": garage_id},
        )
        return self._to_validation(payload, address)

    @staticmethod
    def _to_validation(payload: Any, address: str) -> AddressValidation:
        if not isinstance(payload, dict):
            raise ApiError(f"Unexpected address validation payload for {address!r}")
        try:
            return AddressValidation.from_payload({"address": address, **payload})
        except (TypeError, ValueError) as exc:
            raise ApiError(f"Malformed address validation payload: {payload!r}") from exc

    @staticmethod
    def _to_entities(payload: Any) -> list[Garage]:
        if payload is None:
            return []
        if isinstance(payload, dict) and isinstance(payload.get("content"), list):
            payload = payload["content"]
        if not isinstance(payload, list):
            raise ApiError(f"Expected a list of garages, got {type(payload).__name__}")
        garages = []
        for item in payload:
            try:
                garages.append(Garage.from_payload(item))
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                raise ApiError(f"Malformed garage record: {item!r}") from exc
        return garages


__all__ = ["GarageApi", "build_search_params"]
