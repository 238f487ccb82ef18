"""Address geocoding and duplicate-address checks for garage forms."""

from .lookup import ADDRESS_CHECK_FAILED_MESSAGE, AddressLookup

__all__ = ["ADDRESS_CHECK_FAILED_MESSAGE", "AddressLookup"]
