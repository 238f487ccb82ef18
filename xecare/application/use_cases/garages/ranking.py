"""Annotate garages with their distance from the user and rank them."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Union

from xecare.config import get_settings
from xecare.domain.entities import Garage, GarageWithDistance, UserLocation
from xecare.infrastructure.api import GarageApi

from .distance import haversine_distance

logger = logging.getLogger(__name__)

DEFAULT_MAX_DISTANCE_KM = 50.0

RankedGarages = Union[Sequence[Garage], Sequence[GarageWithDistance]]


@dataclass(frozen=True)
class NearbyGarageRanking:
    """Result of :func:`rank_garages`.

    When no location is known the input sequence is returned as-is for both
    ``sorted_garages`` and ``nearby_garages``.
    """

    sorted_garages: RankedGarages
    nearby_garages: RankedGarages
    average_distance: float


def annotate_distance(garage: Garage, location: UserLocation) -> GarageWithDistance:
    if not garage.has_coordinates:
        return GarageWithDistance(garage=garage, distance_from_user=None)
    distance = haversine_distance(
        location.latitude,
        location.longitude,
        garage.latitude,  # type: ignore[arg-type]
        garage.longitude,  # type: ignore[arg-type]
    )
    return GarageWithDistance(garage=garage, distance_from_user=distance)


def _distance_key(item: GarageWithDistance) -> float:
    return math.inf if item.distance_from_user is None else item.distance_from_user


def rank_garages(
    garages: Sequence[Garage],
    location: UserLocation | None,
    *,
    max_distance_km: float = DEFAULT_MAX_DISTANCE_KM,
    sort_by_distance: bool = True,
) -> NearbyGarageRanking:
    """Compute distances to ``location`` and rank ``garages`` by them.

    ``nearby_garages`` keeps the garages within ``max_distance_km`` (inclusive),
    in input order. ``sorted_garages`` holds every annotated garage, nearest
    first with ties kept in input order and garages without coordinates last;
    with ``sort_by_distance=False`` the input order is preserved.
    ``average_distance`` is the mean over all garages with a known distance.
    Neither ``garages`` nor its elements are modified.
    """

    if location is None or not garages:
        return NearbyGarageRanking(
            sorted_garages=garages, nearby_garages=garages, average_distance=0.0
        )

    annotated = [annotate_distance(garage, location) for garage in garages]
    nearby = [
        item
        for item in annotated
        if item.distance_from_user is not None
        and item.distance_from_user <= max_distance_km
    ]
    ordered = sorted(annotated, key=_distance_key) if sort_by_distance else list(annotated)

    distances = [
        item.distance_from_user for item in annotated if item.distance_from_user is not None
    ]
    average = round(sum(distances) / len(distances), 2) if distances else 0.0

    return NearbyGarageRanking(
        sorted_garages=ordered, nearby_garages=nearby, average_distance=average
    )


class GeoRanker:
    """Memoized :func:`rank_garages` keyed on the last inputs.

    The result is recomputed only when the garage sequence (by identity), the
    location or the options change, the way a UI re-renders without redoing the
    work.
    """

    def __init__(
        self,
        *,
        max_distance_km: float | None = None,
        sort_by_distance: bool = True,
    ) -> None:
        self.max_distance_km = (
            max_distance_km
            if max_distance_km is not None
            else get_settings().nearby_max_distance_km
        )
        self.sort_by_distance = sort_by_distance
        self._key: tuple | None = None
        self._garages: Sequence[Garage] | None = None
        self._result: NearbyGarageRanking | None = None

    def rank(
        self, garages: Sequence[Garage], location: UserLocation | None
    ) -> NearbyGarageRanking:
        key = (location, self.max_distance_km, self.sort_by_distance)
        if (
            self._result is not None
            and self._garages is garages
            and self._key == key
        ):
            return self._result
        self._result = rank_garages(
            garages,
            location,
            max_distance_km=self.max_distance_km,
            sort_by_distance=self.sort_by_distance,
        )
        self._garages = garages
        self._key = key
        return self._result


async def find_nearby_garages(
    api: GarageApi,
    location: UserLocation,
    *,
    radius_km: float | None = None,
    max_distance_km: float | None = None,
    sort_by_distance: bool = True,
) -> NearbyGarageRanking:
    """Fetch garages around ``location`` from the backend and rank them."""

    settings = get_settings()
    radius = radius_km if radius_km is not None else settings.nearby_search_radius_km
    garages = await api.nearby(location.latitude, location.longitude, radius=radius)
    logger.debug("Backend returned %s garages within %s km", len(garages), radius)
    return rank_garages(
        garages,
        location,
        max_distance_km=(
            max_distance_km
            if max_distance_km is not None
            else settings.nearby_max_distance_km
        ),
        sort_by_distance=sort_by_distance,
    )


__all__ = [
    "DEFAULT_MAX_DISTANCE_KM",
    "GeoRanker",
    "NearbyGarageRanking",
    "annotate_distance",
    "find_nearby_garages",
    "rank_garages",
]
