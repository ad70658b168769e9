import pytest
from fastapi.testclient import TestClient

from railease.api import app
from railease.db import repo as repo_module
from railease.db.repo import SupabaseRepository, reset_repository

ADMIN = {"Authorization": "Bearer s3cret"}


def _ids(resp):
    return sorted(a["id"] for a in resp.json()["data"])


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_assets_are_normalized_from_either_column_style(client):
    resp = client.get("/api/assets")
    assert resp.status_code == 200
    assets = {a["id"]: a for a in resp.json()["data"]}
    assert set(assets) == {"WH001", "PK002", "RM003", "LN004"}

    warehouse = assets["WH001"]
    assert warehouse["availability"] == {"from": "2024-08-01T00:00:00.000Z", "to": "2024-08-31T00:00:00.000Z"}
    assert warehouse["amenities"] == ["Power Backup", "24/7 Security"]

    parking = assets["PK002"]
    assert parking["geoLocation"] == "28.6139,77.2090"
    assert parking["leaseType"] == "Short-term"
    assert parking["dataAiHint"] == "parking lot"
    assert parking["amenities"] == ["Covered Parking", "CCTV"]

    room = assets["RM003"]
    assert "rent" not in room
    assert room["imageUrl"] == ""


def test_city_matches_name_or_location(client):
    assert _ids(client.get("/api/assets", params={"city": "delhi"})) == ["LN004", "PK002"]


def test_type_and_size_filters(client):
    assert _ids(client.get("/api/assets", params={"type": "Land"})) == ["LN004"]
    assert _ids(client.get("/api/assets", params={"minSize": "30000"})) == ["LN004", "WH001"]
    assert _ids(client.get("/api/assets", params={"minSize": "lots"})) == ["LN004", "PK002", "RM003", "WH001"]


def test_rent_bounds_always_exclude_unpriced_assets(client):
    full = client.get("/api/assets", params={"minRent": "0", "maxRent": "250000"})
    assert _ids(full) == ["LN004", "PK002", "WH001"]
    assert "RM003" not in _ids(client.get("/api/assets", params={"minRent": "0"}))
    narrowed = client.get("/api/assets", params={"minRent": "60000"})
    assert _ids(narrowed) == ["LN004", "WH001"]
    capped = client.get("/api/assets", params={"maxRent": "60000"})
    assert _ids(capped) == ["PK002"]


@pytest.mark.parametrize(
    "radius, expected",
    [("0", ["PK002"]), ("10", ["PK002"]), ("30", ["PK002", "RM003"])],
)
def test_proximity_search(client, radius, expected):
    params = {"nearLat": "28.6139", "nearLng": "77.2090", "maxDistance": radius}
    assert _ids(client.get("/api/assets", params=params)) == expected


def test_out_of_range_centre_is_ignored(client):
    resp = client.get("/api/assets", params={"nearLat": "200", "nearLng": "77.2090", "maxDistance": "10"})
    assert resp.status_code == 200
    assert len(resp.json()["data"]) == 4


def test_search_around_the_antipode(client):
    params = {"nearLat": "-28.6139", "nearLng": "-102.791", "maxDistance": "100"}
    resp = client.get("/api/assets", params=params)
    assert resp.status_code == 200
    assert resp.json() == {"data": []}


def test_partial_proximity_params_are_ignored(client):
    resp = client.get("/api/assets", params={"nearLat": "28.6139", "nearLng": "77.2090"})
    assert len(resp.json()["data"]) == 4


def test_availability_window_overlap(client):
    overlapping = client.get("/api/assets", params={"availableFrom": "2024-08-15", "availableTo": "2024-09-15"})
    assert "WH001" in _ids(overlapping)
    later = client.get("/api/assets", params={"availableFrom": "2024-09-01", "availableTo": "2024-09-30"})
    assert "WH001" not in _ids(later)
    assert "PK002" in _ids(later)


def test_store_error_returns_500_without_data(client, fake_store):
    fake_store.error = RuntimeError("relation \"Asset\" does not exist")
    resp = client.get("/api/assets")
    assert resp.status_code == 500
    assert resp.json() == {"error": 'relation "Asset" does not exist'}


def test_store_timeout_returns_500(make_client, fake_store):
    fake_store.delay = 0.5
    client = make_client(SupabaseRepository(fake_store, timeout=0.05))
    resp = client.get("/api/assets")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Database request timed out"}


def test_configured_store_never_falls_back_to_local_data(monkeypatch, fake_store):
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
    fake_store.error = RuntimeError("connection refused")
    monkeypatch.setattr(repo_module, "create_supabase_client", lambda: fake_store)
    reset_repository()

    resp = TestClient(app).get("/api/assets")
    assert resp.status_code == 500
    assert "data" not in resp.json()


def test_failed_client_init_is_an_error_not_a_fallback(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service")

    def _boom():
        raise RuntimeError("bad key")

    monkeypatch.setattr(repo_module, "create_supabase_client", _boom)
    reset_repository()

    resp = TestClient(app).get("/api/assets")
    assert resp.status_code == 500
    assert "bad key" in resp.json()["error"]


def test_unconfigured_store_serves_local_dataset():
    resp = TestClient(app).get("/api/assets")
    assert resp.status_code == 200
    assets = {a["id"]: a for a in resp.json()["data"]}
    assert len(assets) == 10
    assert assets["RM009"]["amenities"] == ["Furnished", "Power Backup"]
    assert "rent" not in assets["RM009"]
    assert "amenities" not in assets["LN010"] or assets["LN010"]["amenities"] == []


def test_local_dataset_proximity_excludes_unparseable_geolocation():
    params = {"nearLat": "28.6139", "nearLng": "77.2090", "maxDistance": "50"}
    ids = _ids(TestClient(app).get("/api/assets", params=params))
    assert "PK002" in ids and "RM009" in ids
    assert "LN010" not in ids


def test_get_asset_and_404(client):
    assert client.get("/api/assets/PK002").json()["data"]["name"] == "New Delhi Railway Parking Complex"
    resp = client.get("/api/assets/NOPE")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Asset with id NOPE not found"}


# ---------------------------------------------------------------------------
# Administration
# ---------------------------------------------------------------------------

NEW_ASSET = {
    "name": "Nagpur Goods Shed",
    "type": "Godown",
    "location": "Nagpur, Maharashtra",
    "size": 8000,
    "rent": 30000,
    "geoLocation": "21.1458, 79.0882",
    "amenities": "Loading Dock, Security",
    "availability": {"from": "2025-01-01", "to": "2025-12-31"},
}


def test_admin_routes_require_token_when_configured(monkeypatch, client):
    monkeypatch.setenv("ADMIN_TOKEN", "s3cret")
    resp = client.post("/api/assets", json=NEW_ASSET)
    assert resp.status_code == 401
    assert resp.json() == {"error": "Unauthorized"}
    assert client.post("/api/assets", json=NEW_ASSET, headers={"Authorization": "Bearer wrong"}).status_code == 401
    assert client.delete("/api/assets/PK002").status_code == 401
    assert client.get("/api/dashboard").status_code == 401


def test_create_update_and_delete_asset(monkeypatch, client, fake_store):
    monkeypatch.setenv("ADMIN_TOKEN", "s3cret")
    created = client.post("/api/assets", json={**NEW_ASSET, "id": "GD099"}, headers=ADMIN)
    assert created.status_code == 201
    body = created.json()["data"]
    assert body["id"] == "GD099"
    assert body["status"] == "Available"
    assert body["amenities"] == ["Loading Dock", "Security"]
    assert body["availability"]["from"] == "2025-01-01T00:00:00.000Z"

    stored = next(r for r in fake_store.tables["Asset"] if r["id"] == "GD099")
    assert stored["availabilityFrom"] == "2025-01-01T00:00:00.000Z"
    assert stored["geoLocation"] == "21.1458, 79.0882"
    assert "updatedAt" in stored

    updated = client.put("/api/assets/GD099", json={"rent": 32000}, headers=ADMIN)
    assert updated.status_code == 200
    assert updated.json()["data"]["rent"] == 32000
    assert updated.json()["data"]["name"] == "Nagpur Goods Shed"

    status = client.patch("/api/assets/GD099/status", json={"status": "Leased"}, headers=ADMIN)
    assert status.json()["data"]["status"] == "Leased"

    assert client.delete("/api/assets/GD099", headers=ADMIN).json() == {"success": True}
    assert client.get("/api/assets/GD099").status_code == 404


def test_create_requires_name_type_and_location(client):
    resp = client.post("/api/assets", json={"name": "Shed", "size": 10})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing required fields: type, location"


@pytest.mark.parametrize(
    "payload",
    [
        {**NEW_ASSET, "size": -5},
        {**NEW_ASSET, "status": "Sold"},
        {**NEW_ASSET, "availability": {"from": "2025-12-31", "to": "2025-01-01"}},
    ],
)
def test_invalid_asset_bodies_are_400(client, payload):
    resp = client.post("/api/assets", json=payload)
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("Invalid request body")


def test_update_rejects_empty_changes_and_blank_names(client):
    assert client.put("/api/assets/PK002", json={}).status_code == 400
    assert client.put("/api/assets/PK002", json={"name": "  "}).status_code == 400


def test_writes_to_missing_assets_are_404(client):
    assert client.put("/api/assets/NOPE", json={"rent": 1}).status_code == 404
    assert client.patch("/api/assets/NOPE/status", json={"status": "Leased"}).status_code == 404
    assert client.delete("/api/assets/NOPE").status_code == 404


def test_local_writes_stay_in_memory(make_client, local_repo):
    client = make_client(local_repo)
    created = client.post("/api/assets", json=NEW_ASSET)
    assert created.status_code == 201
    asset_id = created.json()["data"]["id"]
    assert asset_id.startswith("AS-")
    assert client.get(f"/api/assets/{asset_id}").status_code == 200
