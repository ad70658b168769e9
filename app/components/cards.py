"""Streamlit components for asset listing cards."""

from __future__ import annotations

from typing import Callable, Dict, Optional

import streamlit as st


def status_pill(status: Optional[str]) -> str:
    label = (status or "Available").lower()
    return f"status-pill status-{label}"


def _fmt_rent(rent: Optional[float]) -> str:
    if rent is None:
        return "Rent on request"
    return f"₹{float(rent):,.0f} / month"


def render_asset_card(
    asset: Dict,
    on_apply: Optional[Callable[[], None]] = None,
    key: Optional[str] = None,
) -> None:
    key = key or asset.get("id")
    amenities = ", ".join(asset.get("amenities") or []) or "No amenities listed"
    lease_type = asset.get("leaseType") or "Any term"

    card_html = f"""
        <div class="asset-card">
            <div class="asset-card__header">
                <span class="{status_pill(asset.get('status'))}">{asset.get('status') or 'Available'}</span>
                <span class="asset-card__type">{asset.get('type') or 'Asset'}</span>
            </div>
            <h3>{asset.get('name')}</h3>
            <p class="asset-card__meta">{asset.get('location')} · {asset.get('size') or '-'} sq ft · {lease_type}</p>
            <p class="asset-card__value">{_fmt_rent(asset.get('rent'))}</p>
            <p class="asset-card__amenities">{amenities}</p>
        </div>
    """
    with st.container():
        if asset.get("imageUrl"):
            st.image(asset["imageUrl"], width="stretch")
        st.markdown(card_html, unsafe_allow_html=True)
        if on_apply is not None and asset.get("status") == "Available":
            st.button("Apply for lease", key=f"apply-{key}", on_click=on_apply)
