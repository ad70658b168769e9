"""Plotly chart helpers for the admin dashboard."""

from __future__ import annotations

from typing import Dict

import plotly.graph_objects as go

STATUS_COLORS = {
    "Available": "#22c55e",
    "Leased": "#1565C0",
    "Active": "#22c55e",
    "Pending": "#f59e0b",
    "Expired": "#ef4444",
}


def render_status_donut(counts: Dict[str, int], title: str) -> go.Figure:
    labels = list(counts.keys())
    values = [counts[label] for label in labels]
    fig = go.Figure(
        go.Pie(
            labels=labels,
            values=values,
            hole=0.55,
            marker=dict(colors=[STATUS_COLORS.get(label, "#94a3b8") for label in labels]),
            sort=False,
        )
    )
    fig.update_layout(
        title=title,
        height=300,
        margin=dict(l=10, r=10, t=50, b=10),
        legend=dict(orientation="h", yanchor="bottom", y=-0.2),
    )
    return fig


def render_type_bar(counts: Dict[str, int], title: str = "Assets by type") -> go.Figure:
    ordered = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    fig = go.Figure(
        go.Bar(
            x=[name for name, _ in ordered],
            y=[value for _, value in ordered],
            marker_color="#1565C0",
        )
    )
    fig.update_layout(
        title=title,
        height=300,
        margin=dict(l=10, r=10, t=50, b=10),
        yaxis_title="Assets",
    )
    return fig
