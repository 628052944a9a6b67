"""SQLite recommendation repository tests."""

from __future__ import annotations

import asyncio
import sqlite3

import pytest

from travlr.agents.mock import mock_agents
from travlr.config.settings import PersistenceSettings
from travlr.domain.enums import AgentRole
from travlr.domain.models import CanonicalRecommendation, ConfidenceInfo, Price
from travlr.orchestration.scheduler import PhaseScheduler
from travlr.persistence.repository import NoopRecommendationRepository, get_recommendation_repository
from travlr.persistence.sqlite_repository import SQLiteRecommendationRepository, recommendation_id
from travlr.shared.exceptions import PersistenceError


def _rec(name: str, amount: float = 10) -> CanonicalRecommendation:
    return CanonicalRecommendation(
        category=AgentRole.ACTIVITY,
        name=name,
        price=Price(amount=amount),
        confidence=ConfidenceInfo(score=0.8),
    )


def test_create_many_is_idempotent(tmp_path):
    repo = SQLiteRecommendationRepository(tmp_path / "trips.sqlite3")
    records = [_rec("Louvre"), _rec("Orsay")]

    first = repo.create_many(records, "trip-1")
    second = repo.create_many(records, "trip-1")
    repo.append_ids("trip-1", "activity", first.inserted_ids)
    repo.append_ids("trip-1", "activity", second.inserted_ids)

    assert first.inserted_ids == second.inserted_ids
    assert first.per_item_errors == []
    stored = repo.list_recommendations("trip-1")
    assert [s.name for s in stored] == ["Louvre", "Orsay"]
    assert stored[0].payload["price"]["amount"] == 10

    with sqlite3.connect(tmp_path / "trips.sqlite3") as conn:
        count = conn.execute("SELECT COUNT(*) FROM recommendations").fetchone()[0]
    assert count == 2


def test_ids_are_scoped_by_trip():
    record = _rec("Louvre")
    assert recommendation_id("trip-1", record) == recommendation_id("trip-1", record)
    assert recommendation_id("trip-1", record) != recommendation_id("trip-2", record)


def test_status_upserts(tmp_path):
    repo = SQLiteRecommendationRepository(tmp_path / "trips.sqlite3")
    repo.set_agent_status("trip-1", "flight", "running", {})
    repo.set_agent_status("trip-1", "flight", "completed", {"count": 2})
    repo.set_trip_status("trip-1", "recommendations_ready", {"confidence": 81})

    status = repo.get_agent_status("trip-1", "flight")
    assert status.status == "completed"
    assert status.metadata == {"count": 2}
    trip = repo.get_trip("trip-1")
    assert trip.status == "recommendations_ready"
    assert trip.metadata["confidence"] == 81
    assert repo.get_trip("missing") is None


def test_write_failures_raise_persistence_error(tmp_path):
    repo = SQLiteRecommendationRepository(tmp_path / "trips.sqlite3")
    with sqlite3.connect(tmp_path / "trips.sqlite3") as conn:
        conn.execute("DROP TABLE agent_status")
    with pytest.raises(PersistenceError):
        repo.set_agent_status("trip-1", "flight", "running")


def test_factory_respects_enabled_flag(tmp_path):
    assert isinstance(get_recommendation_repository(PersistenceSettings()), NoopRecommendationRepository)
    repo = get_recommendation_repository(PersistenceSettings(enabled=True, db_path=tmp_path / "x.sqlite3"))
    assert repo.backend == "sqlite"


def test_unopenable_database_raises_persistence_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    with pytest.raises(PersistenceError):
        SQLiteRecommendationRepository(blocker / "trips.sqlite3")


def test_factory_falls_back_to_noop_when_database_unusable(tmp_path, caplog):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    settings = PersistenceSettings(enabled=True, db_path=blocker / "trips.sqlite3")

    with caplog.at_level("WARNING", logger="travlr.persistence"):
        repo = get_recommendation_repository(settings)

    assert isinstance(repo, NoopRecommendationRepository)
    assert "persistence disabled" in caplog.text


def test_scheduler_stores_records_and_statuses(tmp_path, paris_criteria):
    repo = SQLiteRecommendationRepository(tmp_path / "trips.sqlite3")
    outcome = asyncio.run(PhaseScheduler(mock_agents(), repository=repo).execute(paris_criteria))

    activity = next(r for r in outcome.results if r.agent_name is AgentRole.ACTIVITY)
    assert len(activity.stored_ids) == 4
    trip = repo.get_trip("trip-paris")
    assert trip is None
    assert repo.get_agent_status("trip-paris", "activity").status == "completed"
    assert len(repo.list_recommendations("trip-paris", "restaurant")) == 3


def test_store_failure_does_not_fail_agent(paris_criteria):
    class _Broken(NoopRecommendationRepository):
        def create_many(self, records, trip_id):
            raise PersistenceError("disk full")

        def set_agent_status(self, trip_id, agent, status, metadata=None):
            raise PersistenceError("disk full")

    outcome = asyncio.run(PhaseScheduler(mock_agents(), repository=_Broken()).execute(paris_criteria))
    assert outcome.success is True
    assert all(r.stored_ids == () for r in outcome.results)
    assert all(r.success for r in outcome.results)
