from railease.services.scoring import (
    AUTO_APPROVE_BELOW,
    REJECT_ABOVE,
    clamp_score,
    comparable_rate,
    decision_from_risk,
    encroachment_zones,
    heuristic_risk,
    sensor_maintenance,
    summarise_factors,
)


def test_decision_thresholds():
    assert decision_from_risk(AUTO_APPROVE_BELOW - 1) == "Auto-Approve"
    assert decision_from_risk(AUTO_APPROVE_BELOW) == "Manual-Review"
    assert decision_from_risk(REJECT_ABOVE) == "Manual-Review"
    assert decision_from_risk(REJECT_ABOVE + 1) == "Reject"
    assert decision_from_risk(None) == "Manual-Review"


def test_clamp_score():
    assert clamp_score(-12.4) == 0
    assert clamp_score(140) == 100
    assert clamp_score(42.6) == 43


def test_credit_score_monotonicity():
    low = heuristic_risk("Credit score 580. 3 years trading.").risk_score
    high = heuristic_risk("Credit score 810. 3 years trading.").risk_score
    assert high < low


def test_explicit_credit_score_overrides_text():
    text = "Credit score 500, verified documents"
    assert heuristic_risk(text, credit_score=800).risk_score < heuristic_risk(text).risk_score


def test_defaults_and_unverified_documents_raise_risk():
    clean = heuristic_risk("Credit score 760. 12 years in logistics, no defaults, documents verified.")
    risky = heuristic_risk("Credit score 760. Previous lease default reported, documents unverified.")
    assert clean.decision == "Auto-Approve"
    assert risky.risk_score > clean.risk_score
    assert risky.decision == "Reject"


def test_new_business_without_credit_needs_review():
    result = heuristic_risk("New business, 1 year of operation.")
    assert result.decision == "Manual-Review"
    names = {f.name for f in result.factors}
    assert {"Credit score missing", "New business", "Business history"} <= names


def test_high_lease_value_adds_risk():
    text = "Credit score 700."
    assert heuristic_risk(text, lease_value=8_000_000).risk_score > heuristic_risk(text, lease_value=100_000).risk_score


def test_summarise_factors_orders_by_magnitude():
    result = heuristic_risk("Credit score 700. Previous default, documents unverified.")
    assert summarise_factors(result.factors, limit=2) == [("Past default", "+"), ("Documents unverified", "+")]


ASSETS = [
    {"type": "Warehouse", "size": 1000, "rent": 10000},
    {"type": "Warehouse", "size": 2000, "rent": 30000},
    {"type": "Warehouse", "size": 500, "rent": 6000},
    {"type": "Land", "size": 4000, "rent": 8000},
    {"type": "Room", "size": 300},
]


def test_comparable_rate_uses_median_of_same_type():
    result = comparable_rate(ASSETS, "warehouse")
    assert result.rate_per_sqft == 12.0
    assert result.same_type is True
    assert result.comparables == 3
    assert result.confidence == "Medium"


def test_condition_adjusts_rate():
    assert comparable_rate(ASSETS, "Warehouse", "poor").rate_per_sqft == 9.6
    assert comparable_rate(ASSETS, "Warehouse", "excellent").rate_per_sqft == 13.2


def test_falls_back_to_whole_portfolio_with_low_confidence():
    result = comparable_rate(ASSETS, "Parking")
    assert result.same_type is False
    assert result.comparables == 4
    assert result.confidence == "Low"


def test_no_priced_assets_gives_no_rate():
    result = comparable_rate([{"type": "Room", "size": 300}], "Room")
    assert result.rate_per_sqft is None
    assert result.confidence == "Low"


def test_normal_sensor_readings_need_no_maintenance():
    result = sensor_maintenance("Temperature 22C, humidity 40%, vibration 1.1 mm/s")
    assert result.required is False
    assert result.urgency == "None"


def test_worst_sensor_sets_urgency():
    medium = sensor_maintenance("Temperature 38C, humidity 60%, vibration 2.0 mm/s")
    assert medium.urgency == "Medium"
    assert [f[0] for f in medium.findings] == ["temperature"]

    high = sensor_maintenance("Temperature 38C, vibration 9.3 mm/s")
    assert high.required is True
    assert high.urgency == "High"


def test_unreadable_sensor_data_is_not_flagged():
    assert sensor_maintenance("sensors offline since Tuesday").required is False


def test_encroachment_zones_rank_by_incidents_and_disputes():
    zones = encroachment_zones(
        "Kurla yard: 6 incidents\nThane siding - 2 cases; Panvel: one complaint",
        land_records="Thane siding boundary under litigation",
    )
    assert [(z.location, z.risk_level) for z in zones] == [
        ("Kurla yard", "High"),
        ("Thane siding", "High"),
        ("Panvel", "Low"),
    ]
    assert zones[1].flagged is True
    assert zones[0].flagged is False


def test_encroachment_zones_without_history():
    assert encroachment_zones("   ") == []
