"""HTTP adapter tests."""

import pytest
from fastapi.testclient import TestClient

from travlr.agents.mock import mock_agents
from travlr.api.main import app, set_orchestrator
from travlr.orchestration.orchestrator import TripOrchestrator

client = TestClient(app)

_TRIP = {
    "destination": "Paris",
    "origin": "London",
    "departure_date": "2026-06-01",
    "return_date": "2026-06-03",
    "travelers": 1,
}


@pytest.fixture(autouse=True)
def mock_orchestrator():
    set_orchestrator(TripOrchestrator(mock_agents()))
    yield
    set_orchestrator(None)


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert data["agents"] == ["accommodation", "activity", "flight", "restaurant"]
    assert r.headers["X-Content-Type-Options"] == "nosniff"


def test_plan_trip():
    r = client.post("/trips/plan", json={"trip": _TRIP})
    data = r.json()

    assert r.status_code == 200
    assert data["success"] is True
    assert data["status"] == "recommendations_ready"
    assert len(data["plan"]["itinerary"]) == 2
    assert set(data["plan"]["recommendations"]) == {"flight", "accommodation", "activity", "restaurant"}


def test_plan_trip_with_subset():
    r = client.post("/trips/plan", json={"trip": _TRIP, "agents": ["accommodation"]})
    data = r.json()
    assert r.status_code == 200
    assert data["plan"]["metadata"]["agent_results"]["flight"]["status"] == "skipped"


def test_unknown_agent_is_422():
    r = client.post("/trips/plan", json={"trip": _TRIP, "agents": ["accommodation", "spa"]})
    assert r.status_code == 422
    assert r.json()["unknown_agents"] == ["spa"]


def test_invalid_dates_are_rejected():
    trip = {**_TRIP, "return_date": "2026-05-01"}
    r = client.post("/trips/plan", json={"trip": trip})
    assert r.status_code == 422
