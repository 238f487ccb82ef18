"""Distance computation and nearby-garage ranking."""

from .distance import EARTH_RADIUS_KM, format_distance, haversine_distance
from .ranking import (
    DEFAULT_MAX_DISTANCE_KM,
    GeoRanker,
    NearbyGarageRanking,
    annotate_distance,
    find_nearby_garages,
    rank_garages,
)

__all__ = [
    "DEFAULT_MAX_DISTANCE_KM",
    "EARTH_RADIUS_KM",
    "GeoRanker",
    "NearbyGarageRanking",
    "annotate_distance",
    "find_nearby_garages",
    "format_distance",
    "haversine_distance",
    "rank_garages",
]
