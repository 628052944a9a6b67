"""Global pytest fixtures: environment isolation."""

import datetime as dt

import pytest

from travlr.domain.models import TripCriteria

_ENV_KEYS = (
    "AGENT_ALLOWLIST",
    "ENABLE_AGENT_FAULT_INJECTION",
    "AGENT_FAULT_INJECTION",
    "AGENT_FAULT_RATE",
    "AGENT_TIMEOUT_SECONDS",
    "DEPENDENCY_POLICY",
    "CLUSTER_RADIUS_KM",
    "FEASIBILITY_ISSUE_PENALTY",
    "BUDGET_WARNING_RATIO",
    "BUDGET_CRITICAL_RATIO",
    "MAX_DISTANCE_FROM_HOTEL_KM",
    "PLAN_PERSISTENCE_ENABLED",
    "PLAN_PERSISTENCE_DB",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Tests never see planner overrides from the developer's shell or .env."""
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def paris_criteria() -> TripCriteria:
    return TripCriteria(
        trip_id="trip-paris",
        destination="Paris",
        destination_country="France",
        origin="New York",
        departure_date=dt.date(2026, 6, 1),
        return_date=dt.date(2026, 6, 4),
        travelers=2,
    )
