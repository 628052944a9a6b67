"""Agent selection and wiring."""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

from travlr.agents.guards import TimeoutAgent, wrap_agent_with_fault_injection
from travlr.agents.interfaces import AgentAdapter
from travlr.agents.mock import mock_agents
from travlr.config.settings import PlannerSettings
from travlr.domain.enums import AGENT_ROLE_LIST, AgentRole

_logger = logging.getLogger("travlr.agents")


def _agent_allowlist() -> set[str]:
    raw = os.getenv("AGENT_ALLOWLIST", "")
    if not raw.strip():
        return set(AGENT_ROLE_LIST)
    values = {item.strip().lower() for item in raw.split(",") if item.strip()}
    return values or set(AGENT_ROLE_LIST)


def build_agents(
    settings: Optional[PlannerSettings] = None,
    overrides: Optional[Mapping[AgentRole, AgentAdapter]] = None,
) -> dict[AgentRole, AgentAdapter]:
    """Mock agents, replaced by ``overrides`` per role, filtered by ``AGENT_ALLOWLIST``
    and wrapped with fault injection and the configured timeout."""
    settings = settings or PlannerSettings()
    agents: dict[AgentRole, AgentAdapter] = dict(mock_agents())
    for role, adapter in (overrides or {}).items():
        agents[AgentRole(role)] = adapter

    allowed = _agent_allowlist()
    timeout = settings.scheduler.agent_timeout_seconds
    wired: dict[AgentRole, AgentAdapter] = {}
    for role, adapter in agents.items():
        if role.value not in allowed:
            _logger.warning("Agent blocked by AGENT_ALLOWLIST: %s", role.value)
            continue
        adapter = wrap_agent_with_fault_injection(adapter)
        if timeout:
            adapter = TimeoutAgent(adapter, timeout)
        wired[role] = adapter
    return wired


__all__ = ["build_agents"]
