"""Forward and reverse geocoding through the public Nominatim service."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from xecare.config import Settings, get_settings
from xecare.domain.entities import GeocodeResult

logger = logging.getLogger(__name__)

GEOCODING_FAILED_MESSAGE = (
    "Could not find coordinates for this address. Please enter them manually."
)
REVERSE_GEOCODING_FALLBACK = "Unable to determine the address"


class GeocodingError(Exception):
    """Raised with a displayable message when an address cannot be resolved."""

    def __init__(self, message: str = GEOCODING_FAILED_MESSAGE) -> None:
        super().__init__(message)


def create_geocoding_client(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Return an ``AsyncClient`` configured for the Nominatim usage policy."""

    settings = settings or get_settings()
    return httpx.AsyncClient(
        base_url=settings.geocoding_base_url,
        timeout=settings.request_timeout_seconds,
        headers={
            "User-Agent": settings.geocoding_user_agent,
            "Accept": "application/json",
        },
        transport=transport,
    )


class NominatimGeocoder:
    """Resolve addresses to coordinates and coordinates to addresses."""

    def __init__(
        self, client: httpx.AsyncClient, settings: Settings | None = None
    ) -> None:
        self.client = client
        self.settings = settings or get_settings()

    async def geocode_address(self, address: str) -> GeocodeResult:
        """Return the best match for ``address``.

        Every failure (address too short, HTTP error, no match, malformed
        payload) is logged with its cause and raised as :class:`GeocodingError`
        carrying the generic message only.
        """

        try:
            if len(address) < self.settings.geocoding_min_address_length:
                raise ValueError("Address is too short")
            response = await self.client.get(
                "/search",
                params={
                    "q": address,
                    "format": "json",
                    "limit": "1",
                    "addressdetails": "1",
                    "countrycodes": self.settings.geocoding_country_codes,
                    "accept-language": self.settings.geocoding_language,
                },
            )
            response.raise_for_status()
            data: Any = response.json()
            if not data:
                raise LookupError("Address not found")
            match = data[0]
            return GeocodeResult(
                latitude=float(match["lat"]),
                longitude=float(match["lon"]),
                display_name=str(match.get("display_name") or address),
            )
        except (httpx.HTTPError, ValueError, LookupError, TypeError) as exc:
            logger.error("Geocoding error for %r: %s", address, exc)
            raise GeocodingError() from exc

    async def reverse_geocode(self, latitude: float, longitude: float) -> str:
        """Return a display address for the coordinates, or a fallback text."""

        try:
            response = await self.client.get(
                "/reverse",
                params={
                    "lat": str(latitude),
                    "lon": str(longitude),
                    "format": "json",
                    "addressdetails": "1",
                    "accept-language": self.settings.geocoding_language,
                },
            )
            response.raise_for_status()
            data: Any = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Reverse geocoding error for %s,%s: %s", latitude, longitude, exc)
            return REVERSE_GEOCODING_FALLBACK
        if not isinstance(data, dict):
            return REVERSE_GEOCODING_FALLBACK
        return str(data.get("display_name") or REVERSE_GEOCODING_FALLBACK)


__all__ = [
    "GEOCODING_FAILED_MESSAGE",
    "GeocodingError",
    "NominatimGeocoder",
    "REVERSE_GEOCODING_FALLBACK",
    "create_geocoding_client",
]
