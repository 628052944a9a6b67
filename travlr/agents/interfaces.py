"""Agent adapter protocol and response schema."""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from travlr.domain.enums import AgentRole
from travlr.domain.models import EnhancedCriteria


class AgentResponse(BaseModel):
    success: bool = True
    recommendations: Optional[list[Any]] = None
    confidence: Optional[float] = Field(default=None, ge=0)
    error: Optional[str] = None
    duration_ms: Optional[float] = Field(default=None, ge=0)


@runtime_checkable
class AgentAdapter(Protocol):
    """A recommendation collaborator. ``execute`` may be sync or async."""

    role: AgentRole
    name: str

    async def execute(self, criteria: EnhancedCriteria) -> AgentResponse:
        ...


__all__ = ["AgentAdapter", "AgentResponse"]
