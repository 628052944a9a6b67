"""Shared cross-layer exceptions."""

from travlr.shared.exceptions import AgentInvocationError, PersistenceError

__all__ = ["AgentInvocationError", "PersistenceError"]
