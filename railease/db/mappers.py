"""Map stored rows (camelCase or snake_case columns) to canonical API records and back."""

from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

from ..utils.coerce import iso_timestamp, to_int, to_number, to_str, to_timestamp

DEFAULT_STATUS = "Available"


def _pick(r: Mapping[str, Any], *keys: str) -> Any:
    """First value that is not None among ``keys``; mirrors a ``a ?? b`` chain."""

    for key in keys:
        value = r.get(key)
        if value is not None:
            return value
    return None


def split_amenities(value: Any) -> Optional[List[str]]:
    if isinstance(value, (list, tuple)):
        items = [to_str(item).strip() for item in value]
    elif isinstance(value, str):
        items = [item.strip() for item in value.split(",")]
    else:
        return None
    seen: List[str] = []
    for item in items:
        if item and item not in seen:
            seen.append(item)
    return seen


def _availability(r: Mapping[str, Any]) -> Optional[Dict[str, str]]:
    nested = r.get("availability")
    if isinstance(nested, Mapping):
        start, end = nested.get("from"), nested.get("to")
    else:
        start = _pick(r, "availabilityFrom", "availability_from")
        end = _pick(r, "availabilityTo", "availability_to")
    start_ts, end_ts = to_timestamp(start), to_timestamp(end)
    if start_ts is None or end_ts is None:
        return None
    return {"from": iso_timestamp(start_ts), "to": iso_timestamp(end_ts)}


def normalize_asset(r: Mapping[str, Any]) -> Dict[str, Any]:
    """Canonical asset record.

    Optional keys (leaseType, availability, geoLocation, rent, amenities) are
    only present when they carry a value. Running this on its own output is a
    no-op.
    """

    asset: Dict[str, Any] = {
        "id": to_str(r.get("id")),
        "name": to_str(r.get("name")),
        "type": to_str(r.get("type")),
        "location": to_str(r.get("location")),
        "size": to_number(r.get("size")),
        "imageUrl": to_str(_pick(r, "imageUrl", "image_url")),
        "status": to_str(r.get("status")) or DEFAULT_STATUS,
        "dataAiHint": to_str(_pick(r, "dataAiHint", "data_ai_hint")),
    }
    lease_type = to_str(_pick(r, "leaseType", "lease_type")).strip()
    if lease_type:
        asset["leaseType"] = lease_type
    availability = _availability(r)
    if availability:
        asset["availability"] = availability
    geo = to_str(_pick(r, "geoLocation", "geo_location")).strip()
    if geo:
        asset["geoLocation"] = geo
    rent = to_number(r.get("rent"))
    if rent is not None:
        asset["rent"] = rent
    amenities = split_amenities(r.get("amenities"))
    if amenities is not None:
        asset["amenities"] = amenities
    return asset


def to_asset_row(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Translate a (possibly partial) API payload into ``Asset`` table columns.

    Only keys present in ``payload`` are written, so this serves both full
    inserts and partial updates.
    """

    row: Dict[str, Any] = {}
    for key in ("id", "name", "type", "location", "size", "status", "rent"):
        if key in payload:
            row[key] = payload[key]
    for camel, snake in (
        ("imageUrl", "image_url"),
        ("dataAiHint", "data_ai_hint"),
        ("leaseType", "lease_type"),
        ("geoLocation", "geo_location"),
    ):
        if camel in payload or snake in payload:
            row[camel] = _pick(payload, camel, snake)
    if "amenities" in payload:
        row["amenities"] = split_amenities(payload["amenities"]) or []
    if "availability" in payload:
        window = payload["availability"] or {}
        start, end = to_timestamp(window.get("from")), to_timestamp(window.get("to"))
        row["availabilityFrom"] = iso_timestamp(start) if start is not None else None
        row["availabilityTo"] = iso_timestamp(end) if end is not None else None
    row["updatedAt"] = iso_timestamp(pd.Timestamp.now(tz="UTC"))
    return row


def normalize_application(r: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "id": to_str(r.get("id")),
        "assetId": to_str(_pick(r, "assetId", "asset_id")),
        "assetName": to_str(_pick(r, "assetName", "asset_name")),
        "assetType": to_str(_pick(r, "assetType", "asset_type")),
        "applicantName": to_str(_pick(r, "applicantName", "applicant_name")),
        "applicantEmail": to_str(_pick(r, "applicantEmail", "applicant_email")),
        "status": to_str(r.get("status")) or "Pending",
        "submittedDate": to_str(_pick(r, "submittedDate", "submitted_date"))[:10],
        "creditScore": to_int(_pick(r, "creditScore", "credit_score")),
        "businessHistory": to_str(_pick(r, "businessHistory", "business_history")),
        "leaseValue": to_number(_pick(r, "leaseValue", "lease_value")),
    }


def normalize_lease(r: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "id": to_str(r.get("id")),
        "assetId": to_str(_pick(r, "assetId", "asset_id")),
        "assetName": to_str(_pick(r, "assetName", "asset_name")),
        "leaseHolder": to_str(_pick(r, "leaseHolder", "lease_holder")),
        "status": to_str(r.get("status")) or "Pending",
        "monthlyRevenue": to_number(_pick(r, "monthlyRevenue", "monthly_revenue")) or 0,
    }
