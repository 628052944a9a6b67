"""Shared (non-domain) exceptions."""


class AgentInvocationError(Exception):
    """Agent invocation failed; attributed to the agent, never escalated."""

    def __init__(self, agent: str, message: str):
        self.agent = agent
        super().__init__(f"[{agent}] {message}")


class PersistenceError(Exception):
    """Persistence write failed."""
