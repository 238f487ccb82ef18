"""Tests for the Nominatim geocoding adapter."""

from __future__ import annotations

import httpx
import pytest

from xecare.domain.entities import GeocodeResult
from xecare.infrastructure.geocoding import (
    GEOCODING_FAILED_MESSAGE,
    REVERSE_GEOCODING_FALLBACK,
    GeocodingError,
    NominatimGeocoder,
    create_geocoding_client,
)

pytestmark = pytest.mark.anyio

ADDRESS = "227 Nguyen Van Cu, District 5, Ho Chi Minh City"


def _geocoder(handler) -> NominatimGeocoder:
    client = create_geocoding_client(transport=httpx.MockTransport(handler))
    return NominatimGeocoder(client)


async def test_geocode_sends_expected_query_and_parses_first_match() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            json=[
                {
                    "lat": "10.7626",
                    "lon": "106.6822",
                    "display_name": "University of Science",
                },
                {"lat": "0", "lon": "0", "display_name": "ignored"},
            ],
        )

    geocoder = _geocoder(handler)
    result = await geocoder.geocode_address(ADDRESS)

    assert result == GeocodeResult(
        latitude=10.7626, longitude=106.6822, display_name="University of Science"
    )
    request = requests[0]
    assert request.url.path == "/search"
    assert dict(request.url.params) == {
        "q": ADDRESS,
        "format": "json",
        "limit": "1",
        "addressdetails": "1",
        "countrycodes": "vn",
        "accept-language": "vi",
    }
    assert request.headers["User-Agent"] == "XeCare-Garage-App"
    await geocoder.client.aclose()


@pytest.mark.parametrize(
    ("status", "body"),
    [
        (200, {"json": []}),
        (503, {"text": "Service unavailable"}),
        (200, {"json": [{"display_name": "no coordinates"}]}),
        (200, {"text": "not json"}),
    ],
)
async def test_geocode_failures_raise_generic_error(status, body, caplog) -> None:
    geocoder = _geocoder(lambda request: httpx.Response(status, **body))

    with caplog.at_level("ERROR"), pytest.raises(GeocodingError) as exc_info:
        await geocoder.geocode_address(ADDRESS)

    assert str(exc_info.value) == GEOCODING_FAILED_MESSAGE
    assert "Geocoding error" in caplog.text
    await geocoder.client.aclose()


async def test_short_address_is_rejected_without_a_request() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=[])

    geocoder = _geocoder(handler)

    with pytest.raises(GeocodingError):
        await geocoder.geocode_address("Q1")

    assert calls == []
    await geocoder.client.aclose()


async def test_transport_errors_are_reported_as_geocoding_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    geocoder = _geocoder(handler)

    with pytest.raises(GeocodingError):
        await geocoder.geocode_address(ADDRESS)
    await geocoder.client.aclose()


async def test_reverse_geocode_returns_display_name() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/reverse"
        assert request.url.params["lat"] == "10.7769"
        return httpx.Response(200, json={"display_name": "Ben Thanh Market"})

    geocoder = _geocoder(handler)

    assert await geocoder.reverse_geocode(10.7769, 106.7009) == "Ben Thanh Market"
    await geocoder.client.aclose()


@pytest.mark.parametrize(
    ("status", "body"),
    [(500, {}), (200, {"json": {}}), (200, {"json": []})],
)
async def test_reverse_geocode_falls_back_on_failure(status, body) -> None:
    geocoder = _geocoder(lambda request: httpx.Response(status, **body))

    assert await geocoder.reverse_geocode(0.0, 0.0) == REVERSE_GEOCODING_FALLBACK
    await geocoder.client.aclose()
