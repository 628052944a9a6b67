"""Canonical graph state type for the phase scheduler."""

from __future__ import annotations

from typing import Optional, TypedDict

from travlr.domain.enums import AgentRole
from travlr.domain.exceptions import DependencyUnmetWarning
from travlr.domain.models import AgentResult, ExecutionContext, TripCriteria
from travlr.infrastructure.logging import StructuredLogger


class SchedulerState(TypedDict, total=False):
    """Single source of truth for the LangGraph state schema."""

    run_id: str
    trip_id: str
    criteria: TripCriteria
    selected: Optional[frozenset[AgentRole]]
    context: ExecutionContext
    history: list[ExecutionContext]
    results: dict[AgentRole, AgentResult]
    warnings: list[DependencyUnmetWarning]
    logger: StructuredLogger
    status: str
    error_message: str


__all__ = ["SchedulerState"]
