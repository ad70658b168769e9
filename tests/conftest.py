"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from railease.api import app
from railease.db.local_repo import LocalRepository
from railease.db.repo import SupabaseRepository, get_repository, reset_repository
from railease.services.assistant_llm import AssistantLLM, get_assistant
from fakes import FakeSupabase

STORED_ASSETS = [
    {
        "id": "WH001",
        "name": "Mumbai CST Railway Warehouse",
        "type": "Warehouse",
        "location": "Mumbai, Maharashtra",
        "size": 50000,
        "imageUrl": "https://placehold.co/600x400.png",
        "status": "Available",
        "dataAiHint": "warehouse interior",
        "leaseType": "Long-term",
        "availabilityFrom": "2024-08-01T00:00:00+00:00",
        "availabilityTo": "2024-08-31T00:00:00+00:00",
        "geoLocation": "18.9398, 72.8354",
        "rent": 250000,
        "amenities": ["Power Backup", "24/7 Security"],
    },
    {
        "id": "PK002",
        "name": "New Delhi Railway Parking Complex",
        "type": "Parking",
        "location": "New Delhi, Delhi",
        "size": 25000,
        "image_url": "https://placehold.co/600x400.png",
        "status": "Available",
        "data_ai_hint": "parking lot",
        "lease_type": "Short-term",
        "geo_location": "28.6139,77.2090",
        "rent": 50000,
        "amenities": "Covered Parking, CCTV",
    },
    {
        "id": "RM003",
        "name": "Noida Sector Retiring Room",
        "type": "Room",
        "location": "Noida, Uttar Pradesh",
        "size": 900,
        "status": "Leased",
        "geoLocation": "28.4089, 77.3178",
        "rent": None,
    },
    {
        "id": "LN004",
        "name": "Delhi Cantt Land Parcel",
        "type": "Land",
        "location": "Delhi Cantt",
        "size": 40000,
        "status": "Available",
        "rent": 90000,
    },
]

STORED_APPLICATIONS = [
    {
        "id": "APP001",
        "assetId": "WH001",
        "assetName": "Mumbai CST Railway Warehouse",
        "assetType": "Warehouse",
        "applicantName": "John Doe",
        "applicantEmail": "john.d@example.com",
        "status": "Pending",
        "submittedDate": "2024-07-25",
        "creditScore": 750,
        "businessHistory": "5 years in logistics, no defaults.",
        "leaseValue": 3000000,
    },
]


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    for name in (
        "SUPABASE_URL",
        "SUPABASE_ANON_KEY",
        "SUPABASE_SERVICE_ROLE_KEY",
        "NEXT_PUBLIC_SUPABASE_URL",
        "NEXT_PUBLIC_SUPABASE_ANON_KEY",
        "ADMIN_TOKEN",
        "GOOGLE_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_repository()
    yield
    reset_repository()
    app.dependency_overrides.clear()


@pytest.fixture
def fake_store() -> FakeSupabase:
    return FakeSupabase({"Asset": STORED_ASSETS, "Application": STORED_APPLICATIONS, "Lease": []})


@pytest.fixture
def supabase_repo(fake_store) -> SupabaseRepository:
    return SupabaseRepository(fake_store, timeout=1.0)


@pytest.fixture
def local_repo() -> LocalRepository:
    return LocalRepository()


@pytest.fixture
def make_client():
    """Client whose repository is ``repo``; the assistant always runs without Gemini."""

    def _make(repo) -> TestClient:
        app.dependency_overrides[get_repository] = lambda: repo
        app.dependency_overrides[get_assistant] = lambda: AssistantLLM()
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client, supabase_repo) -> TestClient:
    return make_client(supabase_repo)
