"""Great-circle distance helpers."""

from __future__ import annotations

import math

EARTH_RADIUS_KM = 6371.0


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the distance in kilometres between two points, rounded to 2 decimals."""

    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    # Rounding can push ``a`` a hair above 1 for antipodal points.
    a = min(1.0, a)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return round(EARTH_RADIUS_KM * c, 2)


def format_distance(distance_km: float) -> str:
    """Format a distance for display: metres below 1 km, kilometres otherwise."""

    if distance_km < 1:
        return f"{round(distance_km * 1000)}m"
    text = f"{distance_km:.2f}".rstrip("0").rstrip(".")
    return f"{text}km"


__all__ = ["EARTH_RADIUS_KM", "format_distance", "haversine_distance"]
