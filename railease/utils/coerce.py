"""Lenient converters for values coming out of the store, CSVs and query strings.

None of these raise: anything that cannot be converted comes back as ``None``.
"""

from __future__ import annotations

import math
from typing import Any, Optional, Union

import pandas as pd


def _is_blank(v: Any) -> bool:
    return v is None or v == "" or str(v).strip().lower() in {"null", "nan", "none"}


def to_int(v) -> Optional[int]:
    try:
        if _is_blank(v):
            return None
        return int(float(v))
    except Exception:
        return None


def to_float(v) -> Optional[float]:
    try:
        if _is_blank(v) or isinstance(v, bool):
            return None
        value = float(v)
    except Exception:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def to_number(v) -> Optional[Union[int, float]]:
    """Like ``to_float`` but keeps integral values as ``int`` (1200 stays 1200)."""

    value = to_float(v)
    if value is None:
        return None
    if value.is_integer():
        return int(value)
    return value


def to_str(v) -> str:
    if v is None:
        return ""
    if isinstance(v, float) and math.isnan(v):
        return ""
    return str(v)


def to_timestamp(v) -> Optional[pd.Timestamp]:
    """Parse a date/datetime-ish value into a UTC ``Timestamp``.

    Naive values are interpreted as UTC. Unparseable input yields ``None``.
    """

    if _is_blank(v):
        return None
    try:
        ts = pd.to_datetime(v, utc=True, errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return None
    if not isinstance(ts, pd.Timestamp) or pd.isna(ts):
        return None
    return ts


def iso_timestamp(ts: pd.Timestamp) -> str:
    """Render a UTC timestamp as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""

    ts = ts.tz_convert("UTC")
    return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"
