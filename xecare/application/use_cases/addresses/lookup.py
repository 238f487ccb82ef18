"""Debounced address geocoding and duplicate-address validation for garage forms."""

from __future__ import annotations

import logging

from xecare.config import get_settings
from xecare.domain.entities import AddressValidation, GeocodeResult
from xecare.infrastructure.api import GarageApi
from xecare.infrastructure.geocoding import (
    GEOCODING_FAILED_MESSAGE,
    GeocodingError,
    NominatimGeocoder,
)
from xecare.infrastructure.http import ApiError
from xecare.utils import LatestTaskRunner

logger = logging.getLogger(__name__)

ADDRESS_CHECK_FAILED_MESSAGE = "Could not verify the address right now."


class AddressLookup:
    """State holder behind the address field of the garage registration form.

    Typing calls :meth:`geocode` on every change; only the last input that
    stays unchanged for ``debounce_seconds`` is sent to the geocoder, and a
    result is applied only if no newer input arrived meanwhile.
    """

    def __init__(
        self,
        geocoder: NominatimGeocoder,
        garage_api: GarageApi | None = None,
        *,
        debounce_seconds: float | None = None,
        min_address_length: int | None = None,
    ) -> None:
        settings = get_settings()
        self.geocoder = geocoder
        self.garage_api = garage_api
        self.debounce_seconds = (
            debounce_seconds
            if debounce_seconds is not None
            else settings.geocoding_debounce_seconds
        )
        self.min_address_length = (
            min_address_length
            if min_address_length is not None
            else settings.geocoding_min_address_length
        )
        self.is_loading = False
        self.error: str | None = None
        self.result: GeocodeResult | None = None
        self.validation: AddressValidation | None = None
        self.validation_error: str | None = None
        self._geocoding = LatestTaskRunner[GeocodeResult](
            on_start=self._on_geocode_start,
            on_result=self._on_geocode_result,
            on_error=self._on_geocode_error,
        )
        self._validation = LatestTaskRunner[AddressValidation](
            on_result=self._on_validation_result,
            on_error=self._on_validation_error,
        )

    def geocode(self, address: str) -> None:
        """Debounced geocoding of ``address``; supersedes any earlier input."""

        self._reset()
        if not self._long_enough(address):
            return
        self._geocoding.submit(
            lambda: self.geocoder.geocode_address(address), delay=self.debounce_seconds
        )

    async def geocode_now(self, address: str) -> None:
        """Geocode ``address`` immediately, without waiting for a typing pause."""

        self._reset()
        if not self._long_enough(address):
            return
        self._geocoding.submit(lambda: self.geocoder.geocode_address(address))
        await self._geocoding.wait()

    def cancel(self) -> None:
        self._geocoding.cancel()
        self.is_loading = False
        self.error = None
        logger.debug("Geocoding cancelled")

    def clear_error(self) -> None:
        self.error = None

    async def wait(self) -> None:
        """Wait until the current geocoding and validation requests settle."""

        await self._geocoding.wait()
        await self._validation.wait()

    def check_address(self, address: str, *, garage_id: int | None = None) -> None:
        """Ask the backend whether ``address`` is already used by another garage.

        With ``garage_id`` the edit-mode endpoint is used so that a garage's own
        address is not reported as a duplicate.
        """

        if self.garage_api is None:
            raise ValueError("A GarageApi is required to validate addresses")
        self.validation = None
        self.validation_error = None
        address = address.strip()
        if not address:
            self._validation.cancel()
            return

        api = self.garage_api
        if garage_id is None:
            self._validation.submit(lambda: api.check_address(address))
        else:
            self._validation.submit(lambda: api.check_address_for_edit(address, garage_id))

    def close(self) -> None:
        """Cancel pending timers and requests (form teardown)."""

        self._geocoding.cancel()
        self._validation.cancel()
        self.is_loading = False

    def _reset(self) -> None:
        self._geocoding.cancel()
        self.is_loading = False
        self.result = None
        self.error = None

    def _long_enough(self, address: str) -> bool:
        return len(address) >= self.min_address_length

    def _on_geocode_start(self) -> None:
        self.is_loading = True
        self.error = None

    def _on_geocode_result(self, result: GeocodeResult) -> None:
        self.is_loading = False
        self.result = result
        self.error = None

    def _on_geocode_error(self, exc: Exception) -> None:
        self.is_loading = False
        self.result = None
        if isinstance(exc, GeocodingError):
            self.error = str(exc)
        else:
            logger.error("Unexpected geocoding failure: %s", exc)
            self.error = GEOCODING_FAILED_MESSAGE

    def _on_validation_result(self, validation: AddressValidation) -> None:
        self.validation = validation
        self.validation_error = None

    def _on_validation_error(self, exc: Exception) -> None:
        if not isinstance(exc, ApiError):
            logger.error("Unexpected address validation failure: %s", exc)
        else:
            logger.warning("Address validation failed: %s", exc)
        self.validation = None
        self.validation_error = ADDRESS_CHECK_FAILED_MESSAGE


__all__ = ["ADDRESS_CHECK_FAILED_MESSAGE", "AddressLookup"]
