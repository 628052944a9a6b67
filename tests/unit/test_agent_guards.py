from __future__ import annotations

import asyncio

import pytest

from travlr.agents.factory import build_agents
from travlr.agents.guards import (
    FaultInjectedAgent,
    TimeoutAgent,
    coerce_response,
    wrap_agent_with_fault_injection,
)
from travlr.agents.interfaces import AgentAdapter, AgentResponse
from travlr.agents.mock import MockActivityAgent
from travlr.config.settings import PlannerSettings, SchedulerSettings
from travlr.domain.enums import AgentRole
from travlr.domain.models import EnhancedCriteria
from travlr.shared.exceptions import AgentInvocationError


@pytest.fixture
def activity_criteria(paris_criteria) -> EnhancedCriteria:
    return EnhancedCriteria(**paris_criteria.model_dump(), role=AgentRole.ACTIVITY)


def test_mock_agents_satisfy_protocol():
    assert isinstance(MockActivityAgent(), AgentAdapter)


def test_fault_injection_disabled_keeps_original_agent(monkeypatch):
    monkeypatch.setenv("ENABLE_AGENT_FAULT_INJECTION", "false")
    agent = MockActivityAgent()
    assert wrap_agent_with_fault_injection(agent) is agent


@pytest.mark.parametrize("fault", ["timeout", "rate_limit", "unavailable"])
def test_fault_injection_raises_agent_error(monkeypatch, activity_criteria, fault: str):
    monkeypatch.setenv("ENABLE_AGENT_FAULT_INJECTION", "true")
    monkeypatch.setenv("AGENT_FAULT_INJECTION", f"activity:{fault}")
    monkeypatch.setenv("AGENT_FAULT_RATE", "1.0")
    agent = MockActivityAgent(record=True)
    wrapped = wrap_agent_with_fault_injection(agent)

    assert isinstance(wrapped, FaultInjectedAgent)
    with pytest.raises(AgentInvocationError):
        asyncio.run(wrapped.execute(activity_criteria))
    assert agent.received == []


def test_fault_injection_ignores_other_agents(monkeypatch, activity_criteria):
    monkeypatch.setenv("ENABLE_AGENT_FAULT_INJECTION", "true")
    monkeypatch.setenv("AGENT_FAULT_INJECTION", "flight:timeout")
    wrapped = wrap_agent_with_fault_injection(MockActivityAgent())
    response = asyncio.run(wrapped.execute(activity_criteria))
    assert response.success is True


def test_timeout_agent(activity_criteria):
    class _Slow:
        role = AgentRole.ACTIVITY
        name = "slow"

        async def execute(self, criteria):
            await asyncio.sleep(1)

    with pytest.raises(AgentInvocationError, match="timed out after 0.01s"):
        asyncio.run(TimeoutAgent(_Slow(), 0.01).execute(activity_criteria))


def test_coerce_response_shapes():
    assert coerce_response([{"name": "x"}]).recommendations == [{"name": "x"}]
    assert coerce_response({"success": False, "error": "nope"}).error == "nope"
    response = AgentResponse(recommendations=[])
    assert coerce_response(response) is response
    with pytest.raises(AgentInvocationError):
        coerce_response(42)


def test_allowlist_filters_agents(monkeypatch):
    monkeypatch.setenv("AGENT_ALLOWLIST", "accommodation, activity")
    agents = build_agents()
    assert set(agents) == {AgentRole.ACCOMMODATION, AgentRole.ACTIVITY}


def test_build_agents_wraps_timeout_and_overrides():
    custom = MockActivityAgent()
    settings = PlannerSettings(scheduler=SchedulerSettings(agent_timeout_seconds=5))
    agents = build_agents(settings, {AgentRole.ACTIVITY: custom})
    assert len(agents) == 4
    assert isinstance(agents[AgentRole.ACTIVITY], TimeoutAgent)
    assert agents[AgentRole.ACTIVITY].inner is custom
