import pytest

from railease.db.mappers import normalize_application, normalize_asset, split_amenities, to_asset_row


def test_camel_case_preferred_over_snake_case():
    asset = normalize_asset(
        {"id": "A1", "name": "Yard", "type": "Land", "location": "Pune", "size": 10,
         "imageUrl": "camel.png", "image_url": "snake.png", "geo_location": "18.5,73.8"}
    )
    assert asset["imageUrl"] == "camel.png"
    assert asset["geoLocation"] == "18.5,73.8"


def test_defaults_and_absent_optionals():
    asset = normalize_asset({"id": "A1", "name": "Yard", "type": "Land", "location": "Pune", "size": 10})
    assert asset["status"] == "Available"
    assert asset["imageUrl"] == ""
    assert asset["dataAiHint"] == ""
    for key in ("leaseType", "availability", "geoLocation", "rent", "amenities"):
        assert key not in asset


def test_amenities_string_is_trimmed_and_empties_dropped():
    assert split_amenities("Power Backup,  Security ,") == ["Power Backup", "Security"]


def test_amenities_list_passes_through_and_other_types_are_absent():
    assert split_amenities(["CCTV", "Security"]) == ["CCTV", "Security"]
    assert split_amenities([" CCTV", "CCTV "]) == ["CCTV"]
    assert split_amenities(42) is None
    assert split_amenities(None) is None


def test_availability_requires_both_valid_ends():
    base = {"id": "A1", "name": "Yard", "type": "Land", "location": "Pune", "size": 10}
    ok = normalize_asset({**base, "availability_from": "2024-08-01", "availabilityTo": "2024-08-31"})
    assert ok["availability"] == {"from": "2024-08-01T00:00:00.000Z", "to": "2024-08-31T00:00:00.000Z"}
    assert "availability" not in normalize_asset({**base, "availabilityFrom": "2024-08-01"})
    assert "availability" not in normalize_asset({**base, "availabilityFrom": "soon", "availabilityTo": "2024-08-31"})


def test_timestamps_with_offsets_are_rendered_in_utc():
    asset = normalize_asset(
        {"id": "A1", "availabilityFrom": "2024-08-01T05:30:00+05:30", "availabilityTo": "2024-08-02T00:00:00.250Z"}
    )
    assert asset["availability"] == {"from": "2024-08-01T00:00:00.000Z", "to": "2024-08-02T00:00:00.250Z"}


@pytest.mark.parametrize(
    "raw",
    [
        {"id": "A1", "name": "Yard", "type": "Land", "location": "Pune", "size": "1200",
         "image_url": "x.png", "lease_type": "Long-term", "availability_from": "2024-08-01",
         "availability_to": "2024-08-31", "geo_location": " 18.5, 73.8 ", "rent": "45000.0",
         "amenities": "Power Backup,  Security ,"},
        {"id": 7, "name": None, "status": "", "rent": float("nan"), "amenities": []},
        {"id": "A2", "size": 12.5, "availability": {"from": "2024-01-01", "to": "2024-02-01"}, "geoLocation": "bad"},
    ],
)
def test_normalization_is_idempotent(raw):
    once = normalize_asset(raw)
    assert normalize_asset(once) == once


def test_numeric_fields_keep_integral_values_as_ints():
    asset = normalize_asset({"id": "A1", "size": "1200", "rent": 45000.0})
    assert asset["size"] == 1200 and isinstance(asset["size"], int)
    assert asset["rent"] == 45000 and isinstance(asset["rent"], int)


def test_asset_row_only_writes_supplied_fields():
    row = to_asset_row({"status": "Leased"})
    assert set(row) == {"status", "updatedAt"}


def test_asset_row_flattens_availability_and_amenities():
    row = to_asset_row(
        {"name": "Yard", "image_url": "x.png", "amenities": "A, B,", "availability": {"from": "2024-08-01", "to": "2024-08-31"}}
    )
    assert row["imageUrl"] == "x.png"
    assert row["amenities"] == ["A", "B"]
    assert row["availabilityFrom"] == "2024-08-01T00:00:00.000Z"
    assert row["availabilityTo"] == "2024-08-31T00:00:00.000Z"


def test_application_accepts_snake_case_columns():
    app = normalize_application(
        {"id": "APP9", "asset_id": "WH001", "applicant_email": "a@b.c", "credit_score": "710",
         "submitted_date": "2024-07-25T10:00:00Z", "lease_value": 1200000.0}
    )
    assert app["assetId"] == "WH001"
    assert app["creditScore"] == 710
    assert app["submittedDate"] == "2024-07-25"
    assert app["status"] == "Pending"
