"""Tabular components for applications and leases."""

from __future__ import annotations

from typing import List, Optional

import pandas as pd
import streamlit as st


def _fmt_currency(value: Optional[float]) -> str:
    if value is None:
        return "—"
    return f"₹{value:,.0f}"


def render_applications_table(applications: List[dict]) -> None:
    if not applications:
        st.info("No applications found.")
        return
    df = pd.DataFrame(applications)
    df = df.rename(
        columns={
            "id": "Application",
            "assetName": "Asset",
            "assetType": "Type",
            "applicantName": "Applicant",
            "status": "Status",
            "submittedDate": "Submitted",
            "leaseValue": "Lease Value (yr)",
        }
    )
    df["Lease Value (yr)"] = df["Lease Value (yr)"].apply(_fmt_currency)
    st.dataframe(
        df[["Application", "Asset", "Type", "Applicant", "Status", "Submitted", "Lease Value (yr)"]],
        hide_index=True,
        width="stretch",
    )


def render_leases_table(leases: List[dict]) -> None:
    if not leases:
        st.info("No leases recorded.")
        return
    df = pd.DataFrame(leases)
    df = df.rename(
        columns={
            "id": "Lease",
            "assetName": "Asset",
            "leaseHolder": "Lease Holder",
            "status": "Status",
            "monthlyRevenue": "Monthly Revenue",
        }
    )
    df["Monthly Revenue"] = df["Monthly Revenue"].apply(_fmt_currency)
    st.dataframe(df[["Lease", "Asset", "Lease Holder", "Status", "Monthly Revenue"]], hide_index=True, width="stretch")
