"""Streamlit console for browsing, applying for and administering railway assets."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

import sys

import pandas as pd
import streamlit as st
from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

load_dotenv(dotenv_path=ROOT_DIR / ".env", override=False)

from app.backend_client import BackendClient, BackendError
from app.components.cards import render_asset_card
from app.components.charts import render_status_donut, render_type_bar
from app.components.filters import render_filter_panel
from app.components.tables import render_applications_table, render_leases_table
from railease.models.asset import ASSET_CATEGORIES
from railease.services.filters import PANEL_ORDER, apply_filters
from railease.services.geo import parse_geolocation

st.set_page_config(page_title="Railway Land & Asset Leasing", layout="wide", page_icon="🚆")

PAGES = ["Browse assets", "My applications", "Admin dashboard", "Pricing assistant", "Operations assistant"]


@st.cache_resource(show_spinner=False)
def get_backend_client() -> BackendClient:
    return BackendClient()


def load_styles() -> None:
    css_path = Path(__file__).resolve().parent / "assets" / "styles.css"
    if css_path.exists():
        st.markdown(f"<style>{css_path.read_text()}</style>", unsafe_allow_html=True)


def asset_map_frame(assets: List[Dict]) -> pd.DataFrame:
    rows = []
    for asset in assets:
        point = parse_geolocation(asset.get("geoLocation"))
        if point is not None:
            rows.append({"lat": point.latitude, "lon": point.longitude, "name": asset.get("name")})
    return pd.DataFrame(rows, columns=["lat", "lon", "name"])


def render_application_form(backend: BackendClient, asset: Dict) -> None:
    st.markdown(f"### Apply for {asset['name']}")
    with st.form(f"apply-form-{asset['id']}"):
        name = st.text_input("Applicant / company name")
        email = st.text_input("Email")
        credit = st.number_input("Credit score", min_value=300, max_value=900, value=700)
        history = st.text_area("Business history", placeholder="Years trading, past leases, defaults...")
        default_value = float(asset.get("rent") or 0) * 12
        lease_value = st.number_input("Annual lease value (₹)", min_value=0.0, value=default_value, step=1000.0)
        submitted = st.form_submit_button("Submit application")
    if submitted:
        payload = {
            "assetId": asset["id"],
            "applicantName": name,
            "applicantEmail": email,
            "creditScore": int(credit),
            "businessHistory": history,
            "leaseValue": lease_value,
        }
        try:
            application = backend.submit_application(payload)
        except BackendError as exc:
            st.error(f"Could not submit application: {exc}")
            return
        st.success(f"Application {application['id']} submitted. Track it under 'My applications'.")
        st.session_state.pop("apply_asset", None)


def render_browse_page(backend: BackendClient) -> None:
    st.title("Railway Land & Asset Leasing")
    st.caption("Browse, filter, and apply for available railway assets and land parcels.")

    try:
        snapshot = backend.list_assets()
    except BackendError as exc:
        st.error(f"Failed to load assets: {exc}")
        snapshot = []

    criteria = render_filter_panel(snapshot)
    filtered = apply_filters(snapshot, criteria, PANEL_ORDER)

    applying = st.session_state.get("apply_asset")
    if applying:
        match = next((a for a in snapshot if a["id"] == applying), None)
        if match is not None:
            render_application_form(backend, match)

    st.markdown(f"**{len(filtered)}** of {len(snapshot)} assets")
    if not filtered:
        st.warning("No assets match the selected filters.")
        return

    map_frame = asset_map_frame(filtered)
    if not map_frame.empty:
        st.map(map_frame, latitude="lat", longitude="lon")

    columns = st.columns(3)
    for idx, asset in enumerate(filtered):
        with columns[idx % 3]:
            render_asset_card(
                asset,
                on_apply=lambda aid=asset["id"]: st.session_state.update(apply_asset=aid),
                key=asset["id"],
            )


def render_applications_page(backend: BackendClient) -> None:
    st.title("My applications")
    email = st.text_input("Applicant email").strip()
    if not email:
        st.info("Enter the email you applied with to see your applications.")
        return
    try:
        applications = backend.list_applications(email=email)
    except BackendError as exc:
        st.error(f"Failed to load applications: {exc}")
        return
    render_applications_table(applications)


def render_review_queue(backend: BackendClient, pending: List[Dict]) -> None:
    st.subheader("Pending applications")
    if not pending:
        st.info("Nothing waiting for review.")
        return
    for application in pending:
        with st.expander(f"{application['id']} · {application['applicantName']} · {application['assetName']}"):
            st.write(application.get("businessHistory") or "No business history supplied.")
            risk_key = f"risk-{application['id']}"
            if st.button("Assess risk", key=f"assess-{application['id']}"):
                summary = f"Credit score {application.get('creditScore') or 'unknown'}. {application.get('businessHistory') or ''}"
                try:
                    st.session_state[risk_key] = backend.assess_risk(
                        {
                            "applicantData": summary,
                            "assetType": application.get("assetType") or "",
                            "leaseValue": application.get("leaseValue") or 0,
                        }
                    )
                except BackendError as exc:
                    st.error(f"Risk assessment failed: {exc}")
            risk = st.session_state.get(risk_key)
            if risk:
                st.metric("Risk score", risk["riskScore"], help=risk["decision"])
                st.caption(risk["reasoning"])
            approve_col, reject_col = st.columns(2)
            for col, status, label in ((approve_col, "Approved", "Approve"), (reject_col, "Rejected", "Reject")):
                if col.button(label, key=f"{status}-{application['id']}"):
                    try:
                        backend.review_application(application["id"], status)
                    except BackendError as exc:
                        st.error(f"Review failed: {exc}")
                    else:
                        st.rerun()


def render_dashboard_page(backend: BackendClient) -> None:
    st.title("Admin dashboard")
    try:
        summary = backend.dashboard()
        leases = backend.list_leases()
        pending = backend.list_applications(status="Pending")
    except BackendError as exc:
        st.error(f"Failed to load dashboard: {exc}")
        return

    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Total assets", summary["totalAssets"])
    m2.metric("Utilisation", f"{summary['utilisationPct']:.1f}%")
    m3.metric("Monthly revenue", f"₹{summary['monthlyRevenue']:,.0f}")
    m4.metric("Pending applications", summary["pendingApplications"])

    c1, c2, c3 = st.columns(3)
    c1.plotly_chart(render_status_donut(summary["assetsByStatus"], "Asset status"), use_container_width=True)
    c2.plotly_chart(render_status_donut(summary["leasesByStatus"], "Lease status"), use_container_width=True)
    c3.plotly_chart(render_type_bar(summary["assetsByType"]), use_container_width=True)

    render_review_queue(backend, pending)
    st.subheader("Leases")
    render_leases_table(leases)


def render_pricing_page(backend: BackendClient) -> None:
    st.title("Pricing assistant")
    st.caption("Suggests a monthly lease rate per sq ft from comparable listings and market notes.")
    with st.form("pricing-form"):
        asset_type = st.selectbox("Asset type", list(ASSET_CATEGORIES))
        location = st.text_input("Location")
        size = st.number_input("Size (sq ft)", min_value=1.0, value=10000.0, step=500.0)
        condition = st.selectbox("Condition", ["excellent", "good", "fair", "poor"], index=1)
        historical = st.text_area("Historical & occupancy data")
        trends = st.text_area("Market trends & competitor pricing")
        submitted = st.form_submit_button("Suggest rate")
    if not submitted:
        return
    payload = {
        "assetType": asset_type,
        "location": location,
        "size": size,
        "assetCondition": condition,
        "historicalData": historical,
        "marketTrends": trends,
    }
    try:
        result = backend.suggest_lease_rate(payload)
    except BackendError as exc:
        st.error(f"Pricing failed: {exc}")
        return
    rate = result["suggestedLeaseRate"]
    st.metric("Suggested rate", f"₹{rate:,.2f} / sq ft / month", help=f"Confidence: {result['confidenceLevel']}")
    st.metric("Monthly rent at this size", f"₹{rate * size:,.0f}")
    st.write(result["rationale"])


URGENCY_BADGES = {"High": "🔴", "Medium": "🟠", "Low": "🟡", "None": "🟢"}


def render_maintenance_panel(backend: BackendClient) -> None:
    st.subheader("Warehouse maintenance")
    with st.form("maintenance-form"):
        warehouse_id = st.text_input("Warehouse ID", placeholder="WH001")
        sensor_data = st.text_area(
            "Recent sensor readings", placeholder="Temperature 38C, humidity 72%, vibration 5.2 mm/s"
        )
        submitted = st.form_submit_button("Predict maintenance")
    if not submitted:
        return
    try:
        result = backend.predict_maintenance({"warehouseId": warehouse_id, "sensorData": sensor_data})
    except BackendError as exc:
        st.error(f"Prediction failed: {exc}")
        return
    urgency = result["urgency"]
    st.metric("Urgency", f"{URGENCY_BADGES.get(urgency, '')} {urgency}")
    st.write(result["recommendation"])


def render_zones_panel(backend: BackendClient) -> None:
    st.subheader("Encroachment risk zones")
    with st.form("zones-form"):
        historical = st.text_area("Historical incidents", placeholder="One location per line, e.g. Kurla yard: 6 incidents")
        records = st.text_area("Land records")
        satellite = st.text_area("Satellite imagery notes")
        submitted = st.form_submit_button("Predict zones")
    if not submitted:
        return
    payload = {"historicalData": historical, "landRecords": records, "satelliteAnalysis": satellite}
    try:
        result = backend.predict_risk_zones(payload)
    except BackendError as exc:
        st.error(f"Prediction failed: {exc}")
        return
    if not result["zones"]:
        st.info("No zones identified from the supplied data.")
        return
    st.dataframe(pd.DataFrame(result["zones"]), hide_index=True, width="stretch")


def render_operations_page(backend: BackendClient) -> None:
    st.title("Operations assistant")
    left, right = st.columns(2)
    with left:
        render_maintenance_panel(backend)
    with right:
        render_zones_panel(backend)


load_styles()
backend = get_backend_client()
page = st.sidebar.radio("Navigate", PAGES)
if not backend.use_api:
    st.sidebar.caption("API unreachable; using in-process services.")

if page == "Browse assets":
    render_browse_page(backend)
elif page == "My applications":
    render_applications_page(backend)
elif page == "Admin dashboard":
    render_dashboard_page(backend)
elif page == "Pricing assistant":
    render_pricing_page(backend)
else:
    render_operations_page(backend)
