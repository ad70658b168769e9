"""Deterministic scoring used when the LLM is unavailable, and to keep its output in bounds."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from ..utils.coerce import to_float

AUTO_APPROVE_BELOW = 30
REJECT_ABOVE = 70

BASE_RISK = 50.0
HIGH_VALUE_LEASE = 5_000_000

CONDITION_MULTIPLIERS: Dict[str, float] = {
    "excellent": 1.10,
    "good": 1.00,
    "fair": 0.90,
    "poor": 0.80,
}

_CREDIT_RE = re.compile(r"credit\s*score\D{0,10}(\d{3})", re.IGNORECASE)
_YEARS_RE = re.compile(r"(\d+)\+?\s*(?:years?|yrs?)", re.IGNORECASE)


@dataclass(frozen=True)
class RiskFactor:
    """One adjustment applied to the base risk score."""

    name: str
    delta: float


@dataclass(frozen=True)
class RiskResult:
    risk_score: int
    decision: str
    factors: List[RiskFactor]


@dataclass(frozen=True)
class RateResult:
    rate_per_sqft: Optional[float]
    confidence: str
    comparables: int
    same_type: bool


# ---------------------------------------------------------------------------
# Application risk
# ---------------------------------------------------------------------------


def decision_from_risk(score: Optional[float]) -> str:
    if score is None:
        return "Manual-Review"
    if score < AUTO_APPROVE_BELOW:
        return "Auto-Approve"
    if score > REJECT_ABOVE:
        return "Reject"
    return "Manual-Review"


def clamp_score(value: float) -> int:
    return max(0, min(100, int(round(value))))


def heuristic_risk(
    applicant_data: str,
    lease_value: Optional[float] = None,
    credit_score: Optional[int] = None,
) -> RiskResult:
    """Score an application from its free-text summary.

    Higher credit and longer trading history lower the score; defaults,
    unverified documents, new businesses and very large leases raise it.
    """

    text = (applicant_data or "").lower()
    factors: List[RiskFactor] = []

    if credit_score is None:
        match = _CREDIT_RE.search(applicant_data or "")
        credit_score = int(match.group(1)) if match else None
    if credit_score is not None:
        factors.append(RiskFactor("Credit score", (700 - credit_score) * 0.2))
    else:
        factors.append(RiskFactor("Credit score missing", 10.0))

    years = [int(m) for m in _YEARS_RE.findall(text)]
    if years:
        factors.append(RiskFactor("Business history", -float(min(max(years), 20))))
    if "new business" in text:
        factors.append(RiskFactor("New business", 10.0))
    if "default" in text and "no default" not in text:
        factors.append(RiskFactor("Past default", 25.0))
    if "unverified" in text or "not verified" in text:
        factors.append(RiskFactor("Documents unverified", 15.0))
    elif "verified" in text:
        factors.append(RiskFactor("Documents verified", -10.0))
    value = to_float(lease_value)
    if value is not None and value > HIGH_VALUE_LEASE:
        factors.append(RiskFactor("High lease value", 10.0))

    score = clamp_score(BASE_RISK + sum(f.delta for f in factors))
    return RiskResult(risk_score=score, decision=decision_from_risk(score), factors=factors)


# ---------------------------------------------------------------------------
# Lease rate
# ---------------------------------------------------------------------------


def _rates(assets: Sequence[Mapping]) -> List[float]:
    rates = []
    for asset in assets:
        rent = to_float(asset.get("rent"))
        size = to_float(asset.get("size"))
        if rent is not None and size is not None and size > 0:
            rates.append(rent / size)
    return rates


def comparable_rate(
    assets: Sequence[Mapping],
    asset_type: str,
    condition: str = "good",
) -> RateResult:
    """Median monthly rent per sq ft of comparable assets, adjusted for condition.

    Comparables are assets of the same type; if none carry rent and size, the
    whole snapshot is used and confidence drops to Low.
    """

    key = (asset_type or "").strip().lower()
    same = _rates([a for a in assets if str(a.get("type") or "").strip().lower() == key])
    pool, same_type = (same, True) if same else (_rates(assets), False)
    if not pool:
        return RateResult(rate_per_sqft=None, confidence="Low", comparables=0, same_type=False)

    multiplier = CONDITION_MULTIPLIERS.get((condition or "").strip().lower(), 1.0)
    rate = round(float(np.median(np.array(pool, dtype=float))) * multiplier, 2)
    if same_type and len(pool) >= 5:
        confidence = "High"
    elif same_type and len(pool) >= 2:
        confidence = "Medium"
    else:
        confidence = "Low"
    return RateResult(rate_per_sqft=rate, confidence=confidence, comparables=len(pool), same_type=same_type)


def summarise_factors(factors: Sequence[RiskFactor], limit: int = 3) -> List[Tuple[str, str]]:
    """Largest adjustments first, as ``(name, "+"|"-")`` pairs."""

    ranked = sorted(factors, key=lambda f: abs(f.delta), reverse=True)
    return [(f.name, "+" if f.delta >= 0 else "-") for f in ranked[:limit]]


# ---------------------------------------------------------------------------
# Warehouse maintenance
# ---------------------------------------------------------------------------

# (pattern, medium above, high above)
SENSOR_LIMITS: Dict[str, Tuple[re.Pattern, float, float]] = {
    "temperature": (re.compile(r"temp(?:erature)?\D{0,12}(-?\d+(?:\.\d+)?)", re.IGNORECASE), 35.0, 45.0),
    "humidity": (re.compile(r"humidity\D{0,12}(\d+(?:\.\d+)?)", re.IGNORECASE), 70.0, 85.0),
    "vibration": (re.compile(r"vibration\D{0,12}(\d+(?:\.\d+)?)", re.IGNORECASE), 4.5, 7.1),
}

_URGENCY_RANK = {"None": 0, "Low": 1, "Medium": 2, "High": 3}

RECOMMENDATIONS = {
    "temperature": "Inspect HVAC and cooling systems",
    "humidity": "Check dehumidifiers and roof drainage",
    "vibration": "Check conveyor and motor bearings",
}


@dataclass(frozen=True)
class MaintenanceResult:
    required: bool
    urgency: str
    findings: List[Tuple[str, float, str]]


def sensor_maintenance(sensor_data: str) -> MaintenanceResult:
    """Flag readings above fixed limits; the worst reading sets the urgency.

    Only the highest value per sensor counts. A reading above the medium limit
    is Medium, above the high limit High.
    """

    findings: List[Tuple[str, float, str]] = []
    for sensor, (pattern, medium, high) in SENSOR_LIMITS.items():
        values = [float(v) for v in pattern.findall(sensor_data or "")]
        if not values:
            continue
        peak = max(values)
        if peak > high:
            findings.append((sensor, peak, "High"))
        elif peak > medium:
            findings.append((sensor, peak, "Medium"))
    urgency = max((f[2] for f in findings), key=_URGENCY_RANK.get, default="None")
    return MaintenanceResult(required=bool(findings), urgency=urgency, findings=findings)


# ---------------------------------------------------------------------------
# Encroachment risk zones
# ---------------------------------------------------------------------------

_SEGMENT_SPLIT = re.compile(r"[\n;]+")
_LOCATION_SPLIT = re.compile(r"\s*(?::|\s-\s)\s*")
_COUNT_RE = re.compile(r"(\d+)\s*(?:incidents?|cases?|encroachments?|times)", re.IGNORECASE)
_DISPUTE_WORDS = ("dispute", "litigation", "discrepanc", "settlement", "unauthori")


@dataclass(frozen=True)
class ZoneResult:
    location: str
    risk_level: str
    incidents: int
    flagged: bool


def _segments(text: str) -> List[str]:
    return [s.strip() for s in _SEGMENT_SPLIT.split(text or "") if s.strip()]


def encroachment_zones(historical_data: str, land_records: str = "", satellite_analysis: str = "") -> List[ZoneResult]:
    """Rank locations named in the incident history.

    Each line (or ``;``-separated entry) of ``historical_data`` is read as
    ``<location>: <details>``. Five or more incidents is High, two or more is
    Medium. A location that also appears next to a dispute in the land records
    or the satellite notes moves up one level.
    """

    context = [s.lower() for s in _segments(land_records) + _segments(satellite_analysis)]
    levels = ("Low", "Medium", "High")
    zones: List[ZoneResult] = []
    for segment in _segments(historical_data):
        parts = _LOCATION_SPLIT.split(segment, maxsplit=1)
        location = parts[0].strip()
        if not location:
            continue
        counts = [int(c) for c in _COUNT_RE.findall(segment)]
        incidents = max(counts) if counts else 1
        level = 2 if incidents >= 5 else 1 if incidents >= 2 else 0
        key = location.lower()
        flagged = any(key in line and any(w in line for w in _DISPUTE_WORDS) for line in context)
        if flagged:
            level = min(level + 1, 2)
        zones.append(ZoneResult(location=location, risk_level=levels[level], incidents=incidents, flagged=flagged))
    return sorted(zones, key=lambda z: (-levels.index(z.risk_level), -z.incidents))
