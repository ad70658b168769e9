"""Geolocation parsing and great-circle distance."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional

from ..utils.coerce import to_float

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


def valid_coordinates(lat: float, lng: float) -> bool:
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


def parse_geolocation(value: Any) -> Optional[GeoPoint]:
    """Parse a free-text ``"lat,lng"`` field.

    Returns ``None`` for empty input, anything other than exactly two
    comma-separated parts, non-numeric parts, or out-of-range coordinates.
    """

    if not isinstance(value, str) or not value.strip():
        return None
    parts = value.split(",")
    if len(parts) != 2:
        return None
    lat = to_float(parts[0].strip())
    lng = to_float(parts[1].strip())
    if lat is None or lng is None:
        return None
    if not valid_coordinates(lat, lng):
        return None
    return GeoPoint(latitude=lat, longitude=lng)


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in kilometres between two points given in degrees."""

    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    # rounding can leave a just outside [0, 1] near antipodes
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_between(a: GeoPoint, b: GeoPoint) -> float:
    return haversine_km(a.latitude, a.longitude, b.latitude, b.longitude)


__all__ = ["GeoPoint", "parse_geolocation", "valid_coordinates", "haversine_km", "distance_between", "EARTH_RADIUS_KM"]
