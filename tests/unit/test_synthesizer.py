"""Plan synthesis tests."""

from __future__ import annotations

import asyncio
import datetime as dt

import pytest

from travlr.agents.mock import mock_agents
from travlr.domain.enums import AgentRole, AgentStatus
from travlr.domain.exceptions import DependencyUnmetWarning
from travlr.domain.models import AgentResult, ExecutionContext, TripCriteria
from travlr.orchestration.scheduler import PhaseScheduler
from travlr.orchestration.synthesizer import PlanSynthesizer, day_notes


def _plan(criteria, agents=None, subset=None):
    outcome = asyncio.run(PhaseScheduler(agents or mock_agents()).execute(criteria, subset))
    return PlanSynthesizer().synthesize(outcome.results, outcome.context, criteria, outcome.warnings)


def test_plan_from_full_mock_run(paris_criteria):
    plan = _plan(paris_criteria)
    summary = plan.trip_summary

    assert set(plan.recommendations) == {"flight", "accommodation", "activity", "restaurant"}
    assert summary.geographic_coverage == 80
    assert 0 <= summary.confidence <= 100
    assert summary.failed_agents == []
    assert summary.dates.departure == dt.date(2026, 6, 1)
    assert summary.budget.has_user_budget is False
    assert summary.budget.total == pytest.approx(sum(summary.budget.breakdown.values()))
    assert "failed_agents" not in plan.metadata
    assert plan.metadata["structurally_incomplete"] is False
    assert plan.metadata["context_version"] == 4
    assert len(plan.metadata["geographic_analysis"]["clusters"]) == 2
    assert plan.metadata["agent_results"]["activity"]["count"] == 4


def test_itinerary_groups_activities_by_cluster(paris_criteria):
    itinerary = _plan(paris_criteria).itinerary

    assert [d.day for d in itinerary] == [1, 2, 3]
    assert [d.date for d in itinerary] == [dt.date(2026, 6, 1), dt.date(2026, 6, 2), dt.date(2026, 6, 3)]
    assert [a.name for a in itinerary[0].activities] == ["Old Town Walking Tour", "City Museum"]
    assert [a.name for a in itinerary[1].activities] == ["Harbour Cruise", "Hilltop Park"]
    assert itinerary[2].activities == []
    assert itinerary[0].geographic_cluster == "cluster_1"
    assert [len(d.restaurants) for d in itinerary] == [2, 2, 1]
    assert itinerary[0].notes.startswith("Arrival day")
    assert itinerary[2].notes.startswith("Departure day")
    assert itinerary[0].feasibility is not None


def test_day_feasibility_counts_restaurant_stops(paris_criteria):
    itinerary = _plan(paris_criteria).itinerary

    # walking tour 150 + museum 120 + two meals at the default 120
    assert itinerary[0].feasibility.dwell_min == 510
    assert len(itinerary[0].feasibility.segments) == 3
    assert itinerary[2].feasibility.dwell_min == 120
    assert itinerary[0].backtracking.flagged_triples == []


def test_failed_agent_carries_impact(paris_criteria):
    class _Down:
        role = AgentRole.RESTAURANT
        name = "down"

        async def execute(self, criteria):
            raise ConnectionError("upstream 503")

    agents = mock_agents()
    agents[AgentRole.RESTAURANT] = _Down()
    plan = _plan(paris_criteria, agents)

    assert [f.name for f in plan.trip_summary.failed_agents] == [AgentRole.RESTAURANT]
    assert plan.trip_summary.failed_agents[0].impact.startswith("low")
    assert plan.metadata["failed_agents"][0]["name"] == "restaurant"
    assert plan.recommendations["restaurant"] == []
    assert plan.metadata["agent_results"]["restaurant"]["error"] == "ConnectionError: upstream 503"


def test_dependency_warnings_mark_plan_incomplete(paris_criteria):
    with pytest.warns(DependencyUnmetWarning):
        plan = _plan(paris_criteria, subset=["restaurant"])
    assert plan.metadata["structurally_incomplete"] is True
    assert plan.metadata["dependency_warnings"][0]["phase"] == "experiences"


def test_empty_run_still_produces_a_plan():
    criteria = TripCriteria(destination="Atlantis", departure_date=dt.date(2026, 1, 1))
    results = [AgentResult.skipped(role) for role in AgentRole]
    plan = PlanSynthesizer().synthesize(results, ExecutionContext(), criteria)

    assert len(plan.itinerary) == 1
    assert plan.trip_summary.confidence == 50
    assert plan.trip_summary.geographic_coverage == 0
    assert all(v == [] for v in plan.recommendations.values())
    assert all(r["status"] == AgentStatus.SKIPPED.value for r in plan.metadata["agent_results"].values())


def test_day_notes():
    assert day_notes(0, 3, []) == "Arrival day - lighter activities recommended"
    assert day_notes(2, 3, []) == "Departure day - plan activities near hotel/airport"
    assert day_notes(1, 3, [1, 2, 3]) == "Full day - allow extra time for transportation"
    assert day_notes(1, 3, [1]) == ""
