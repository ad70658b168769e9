"""Predicate filter chain over normalized asset records.

Every predicate is a pure ``(assets, criteria) -> assets`` step and the chain is their intersection, so the order only affects how early the list shrinks.
Records with missing or unparseable fields are excluded by the
predicate that needs them; nothing here raises.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Callable, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from ..utils.coerce import to_float, to_timestamp
from .geo import GeoPoint, distance_between, parse_geolocation, valid_coordinates

Asset = Dict[str, object]

ALL = "all"


@dataclass(frozen=True)
class Proximity:
    center: GeoPoint
    radius_km: float


@dataclass(frozen=True)
class FilterCriteria:
    keyword: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    min_size: Optional[float] = None
    max_size: Optional[float] = None
    min_rent: Optional[float] = None
    max_rent: Optional[float] = None
    available_from: Optional[pd.Timestamp] = None
    available_to: Optional[pd.Timestamp] = None
    proximity: Optional[Proximity] = None

    def active(self) -> List[str]:
        """Names of the criteria that are set."""

        return [f.name for f in fields(self) if getattr(self, f.name) not in (None, "", ALL)]


def rent_ceiling(assets: Sequence[Asset]) -> float:
    """Highest rent in the snapshot, or 0. The listing panel uses it as the top of its rent slider."""

    rents = [to_float(a.get("rent")) for a in assets]
    return max([r for r in rents if r is not None] + [0.0])


def _within(value: Optional[float], lower: Optional[float], upper: Optional[float]) -> bool:
    if value is None:
        return False
    if lower is not None and value < lower:
        return False
    if upper is not None and value > upper:
        return False
    return True


def by_category(assets: List[Asset], criteria: FilterCriteria) -> List[Asset]:
    if criteria.category in (None, "", ALL):
        return assets
    return [a for a in assets if a.get("type") == criteria.category]


def by_status(assets: List[Asset], criteria: FilterCriteria) -> List[Asset]:
    if criteria.status in (None, "", ALL):
        return assets
    return [a for a in assets if a.get("status") == criteria.status]


def by_size(assets: List[Asset], criteria: FilterCriteria) -> List[Asset]:
    if criteria.min_size is None and criteria.max_size is None:
        return assets
    return [a for a in assets if _within(to_float(a.get("size")), criteria.min_size, criteria.max_size)]


def by_rent(assets: List[Asset], criteria: FilterCriteria) -> List[Asset]:
    """Any bound excludes assets without a rent."""

    lower, upper = criteria.min_rent, criteria.max_rent
    if lower is None and upper is None:
        return assets
    return [a for a in assets if _within(to_float(a.get("rent")), lower, upper)]


def by_keyword(assets: List[Asset], criteria: FilterCriteria) -> List[Asset]:
    term = (criteria.keyword or "").strip().lower()
    if not term:
        return assets
    return [
        a
        for a in assets
        if term in str(a.get("name") or "").lower() or term in str(a.get("location") or "").lower()
    ]


def _overlaps(asset: Asset, start: pd.Timestamp, end: pd.Timestamp) -> bool:
    window = asset.get("availability")
    if not window:
        return True
    if not isinstance(window, Mapping):
        return False
    asset_from = to_timestamp(window.get("from"))
    asset_to = to_timestamp(window.get("to"))
    if asset_from is None or asset_to is None:
        return False
    return asset_from <= end and asset_to >= start


def by_availability(assets: List[Asset], criteria: FilterCriteria) -> List[Asset]:
    if criteria.available_from is None or criteria.available_to is None:
        return assets
    return [a for a in assets if _overlaps(a, criteria.available_from, criteria.available_to)]


def by_proximity(assets: List[Asset], criteria: FilterCriteria) -> List[Asset]:
    if criteria.proximity is None:
        return assets
    center, radius = criteria.proximity.center, criteria.proximity.radius_km
    kept = []
    for asset in assets:
        point = parse_geolocation(asset.get("geoLocation"))
        if point is not None and distance_between(center, point) <= radius:
            kept.append(asset)
    return kept


Predicate = Callable[[List[Asset], FilterCriteria], List[Asset]]

PREDICATES: Dict[str, Predicate] = {
    "category": by_category,
    "status": by_status,
    "size": by_size,
    "rent": by_rent,
    "keyword": by_keyword,
    "availability": by_availability,
    "proximity": by_proximity,
}

# Server-side search: cheap equality checks first, distance maths last.
SEARCH_ORDER = ("category", "status", "size", "rent", "keyword", "availability", "proximity")
# The listing panel applies its controls in the order they appear on screen.
PANEL_ORDER = ("status", "keyword", "category", "rent", "availability", "size", "proximity")


def apply_filters(
    assets: Sequence[Asset],
    criteria: FilterCriteria,
    order: Sequence[str] = SEARCH_ORDER,
) -> List[Asset]:
    """Return the assets satisfying every criterion that is set."""

    result = list(assets)
    for name in order:
        if not result:
            break
        result = PREDICATES[name](result, criteria)
    return result


def criteria_from_params(params: Mapping[str, Optional[str]]) -> FilterCriteria:
    """Build criteria from ``/api/assets`` query parameters.

    Non-numeric numbers count as absent. Proximity needs all of ``nearLat``,
    ``nearLng`` and ``maxDistance`` with the centre inside the coordinate
    ranges; anything less leaves it off.
    """

    proximity = None
    lat = to_float(params.get("nearLat"))
    lng = to_float(params.get("nearLng"))
    radius = to_float(params.get("maxDistance"))
    if lat is not None and lng is not None and radius is not None and valid_coordinates(lat, lng):
        proximity = Proximity(center=GeoPoint(latitude=lat, longitude=lng), radius_km=radius)

    return FilterCriteria(
        keyword=(params.get("city") or None),
        category=(params.get("type") or None),
        status=(params.get("status") or None),
        min_size=to_float(params.get("minSize")),
        max_size=to_float(params.get("maxSize")),
        min_rent=to_float(params.get("minRent")),
        max_rent=to_float(params.get("maxRent")),
        available_from=to_timestamp(params.get("availableFrom")),
        available_to=to_timestamp(params.get("availableTo")),
        proximity=proximity,
    )


__all__ = [
    "FilterCriteria",
    "Proximity",
    "apply_filters",
    "criteria_from_params",
    "rent_ceiling",
    "SEARCH_ORDER",
    "PANEL_ORDER",
    "ALL",
]
