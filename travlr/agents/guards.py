"""Adapter-boundary guards: timeouts and optional fault injection.

Fault injection is disabled by default. Enable by setting:
  ENABLE_AGENT_FAULT_INJECTION=true
  AGENT_FAULT_INJECTION=activity:timeout,restaurant:unavailable
  AGENT_FAULT_RATE=1.0
"""

from __future__ import annotations

import asyncio
import inspect
import os
import random
from typing import Any

from travlr.agents.interfaces import AgentAdapter, AgentResponse
from travlr.domain.models import EnhancedCriteria
from travlr.shared.exceptions import AgentInvocationError

_TRUTHY = {"1", "true", "yes", "on"}
_SUPPORTED_FAULTS = {"timeout", "rate_limit", "unavailable"}


async def invoke_adapter(agent: AgentAdapter, criteria: EnhancedCriteria) -> Any:
    """Call ``agent.execute`` and await the result when it is awaitable."""
    result = agent.execute(criteria)
    if inspect.isawaitable(result):
        result = await result
    return result


class TimeoutAgent:
    def __init__(self, inner: AgentAdapter, timeout_seconds: float) -> None:
        self.inner = inner
        self.role = inner.role
        self.name = inner.name
        self.timeout_seconds = timeout_seconds

    async def execute(self, criteria: EnhancedCriteria) -> Any:
        try:
            return await asyncio.wait_for(invoke_adapter(self.inner, criteria), self.timeout_seconds)
        except asyncio.TimeoutError:
            raise AgentInvocationError(
                self.name, f"timed out after {self.timeout_seconds:g}s"
            ) from None


def _enabled() -> bool:
    return os.getenv("ENABLE_AGENT_FAULT_INJECTION", "false").strip().lower() in _TRUTHY


def _fault_rate() -> float:
    raw = os.getenv("AGENT_FAULT_RATE", "1.0").strip()
    try:
        value = float(raw)
    except ValueError:
        return 1.0
    return max(0.0, min(1.0, value))


def _fault_map() -> dict[str, str]:
    raw = os.getenv("AGENT_FAULT_INJECTION", "").strip()
    if not raw:
        return {}
    mapping: dict[str, str] = {}
    for part in raw.split(","):
        item = part.strip()
        if not item or ":" not in item:
            continue
        agent, fault = item.split(":", 1)
        agent_key = agent.strip().lower()
        fault_key = fault.strip().lower()
        if not agent_key or fault_key not in _SUPPORTED_FAULTS:
            continue
        mapping[agent_key] = fault_key
    return mapping


def _fault_for(agent_name: str) -> str:
    if not _enabled():
        return ""
    fault = _fault_map().get(agent_name.lower(), "")
    if not fault:
        return ""
    if random.random() > _fault_rate():
        return ""
    return fault


def _raise_fault(agent_name: str, fault: str) -> None:
    if fault == "timeout":
        raise AgentInvocationError(agent_name, "injected timeout")
    if fault == "rate_limit":
        raise AgentInvocationError(agent_name, "injected upstream rate limit 429")
    if fault == "unavailable":
        raise AgentInvocationError(agent_name, "injected upstream unavailable 503")
    raise AgentInvocationError(agent_name, f"injected unknown fault {fault}")


class FaultInjectedAgent:
    def __init__(self, inner: AgentAdapter) -> None:
        self.inner = inner
        self.role = inner.role
        self.name = inner.name

    async def execute(self, criteria: EnhancedCriteria) -> Any:
        fault = _fault_for(self.role.value)
        if fault:
            _raise_fault(self.name, fault)
        return await invoke_adapter(self.inner, criteria)


def wrap_agent_with_fault_injection(agent: AgentAdapter) -> AgentAdapter:
    if not _enabled():
        return agent
    return FaultInjectedAgent(agent)


def coerce_response(result: Any) -> AgentResponse:
    if isinstance(result, AgentResponse):
        return result
    if isinstance(result, dict):
        return AgentResponse.model_validate(result)
    if isinstance(result, list):
        return AgentResponse(success=True, recommendations=result)
    raise AgentInvocationError("agent", f"unexpected response type {type(result).__name__}")


__all__ = [
    "FaultInjectedAgent",
    "TimeoutAgent",
    "coerce_response",
    "invoke_adapter",
    "wrap_agent_with_fault_injection",
]
