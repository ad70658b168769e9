"""Interactive asset filter panel.

Streamlit reruns the script on every widget change, so the panel simply
rebuilds the criteria and the caller re-applies the filter chain to the
snapshot it already holds.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd
import streamlit as st

from railease.models.asset import ASSET_CATEGORIES
from railease.services.filters import ALL, FilterCriteria, Proximity, rent_ceiling
from railease.services.geo import GeoPoint

STATUS_OPTIONS = [ALL, "Available", "Leased"]


def category_options(assets: Sequence[Dict]) -> List[str]:
    """Suggested railway categories first, then any other type present in the data."""

    seen = list(ASSET_CATEGORIES)
    for asset in assets:
        value = str(asset.get("type") or "").strip()
        if value and value not in seen:
            seen.append(value)
    return [ALL] + seen


def panel_criteria(
    keyword: str = "",
    category: str = ALL,
    status: str = "Available",
    rent_range: Optional[Tuple[float, float]] = None,
    dates: Sequence[date] = (),
    near: Optional[Tuple[float, float, float]] = None,
    ceiling: Optional[float] = None,
) -> FilterCriteria:
    """Translate raw widget values into filter criteria.

    The date filter only applies once both ends of the range are picked. A rent
    slider left at its full ``(0, ceiling)`` range sets no rent bound, so assets
    without a rent stay listed until the slider is moved.
    """

    min_rent = max_rent = None
    if rent_range and not (ceiling is not None and rent_range[0] <= 0 and rent_range[1] >= ceiling):
        min_rent, max_rent = rent_range

    available_from = available_to = None
    if len(dates) == 2:
        available_from = pd.Timestamp(dates[0], tz="UTC")
        available_to = pd.Timestamp(dates[1], tz="UTC")
    proximity = None
    if near is not None:
        lat, lng, radius = near
        proximity = Proximity(center=GeoPoint(latitude=lat, longitude=lng), radius_km=radius)
    return FilterCriteria(
        keyword=keyword.strip() or None,
        category=category,
        status=status,
        min_rent=min_rent,
        max_rent=max_rent,
        available_from=available_from,
        available_to=available_to,
        proximity=proximity,
    )


def render_filter_panel(assets: Sequence[Dict]) -> FilterCriteria:
    st.markdown("### Filter Assets")
    col_search, col_type, col_status = st.columns(3)
    keyword = col_search.text_input("Search by Keyword", placeholder="Search by name or location...")
    category = col_type.selectbox(
        "Asset Type",
        category_options(assets),
        format_func=lambda v: "All Types" if v == ALL else v,
    )
    status = col_status.selectbox(
        "Status",
        STATUS_OPTIONS,
        index=1,
        format_func=lambda v: "All Statuses" if v == ALL else v,
    )

    col_dates, col_rent = st.columns([1, 2])
    dates = col_dates.date_input("Availability Date", value=(), format="DD/MM/YYYY")
    ceiling = int(math.ceil(rent_ceiling(assets)))
    rent_range = None
    if ceiling > 0:
        rent_range = col_rent.slider(
            "Rent per Month (₹)",
            min_value=0,
            max_value=ceiling,
            value=(0, ceiling),
            step=1000 if ceiling >= 1000 else 1,
        )

    near = None
    with st.expander("Near a location"):
        enabled = st.checkbox("Only show assets within a radius")
        col_lat, col_lng, col_radius = st.columns(3)
        lat = col_lat.number_input("Latitude", min_value=-90.0, max_value=90.0, value=28.6139, format="%.4f")
        lng = col_lng.number_input("Longitude", min_value=-180.0, max_value=180.0, value=77.2090, format="%.4f")
        radius = col_radius.number_input("Radius (km)", min_value=0.0, value=50.0, step=5.0)
        if enabled:
            near = (lat, lng, radius)

    return panel_criteria(keyword, category, status, rent_range, tuple(dates or ()), near, ceiling=ceiling)
