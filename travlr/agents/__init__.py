"""Agent adapters: protocol, mocks, guards and wiring."""

from travlr.agents.factory import build_agents
from travlr.agents.interfaces import AgentAdapter, AgentResponse

__all__ = ["AgentAdapter", "AgentResponse", "build_agents"]
