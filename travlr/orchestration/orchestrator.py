"""Caller-facing orchestrator: schedule agents, then synthesize the plan."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Iterable, Mapping, Optional, Sequence

from travlr.agents.factory import build_agents
from travlr.agents.interfaces import AgentAdapter
from travlr.config.settings import PlannerSettings, load_settings
from travlr.domain.enums import AgentRole, AgentStatus, TripStatus
from travlr.domain.models import AgentResult, TripCriteria
from travlr.infrastructure.logging import StructuredLogger
from travlr.orchestration.contracts import TripPlanResponse, TripRequest
from travlr.orchestration.phases import DEFAULT_PHASES, Phase, validate_agent_subset
from travlr.orchestration.scheduler import PhaseScheduler
from travlr.orchestration.synthesizer import PlanSynthesizer
from travlr.persistence.repository import (
    NoopRecommendationRepository,
    RecommendationRepository,
    get_recommendation_repository,
)

_READY_STATUSES = {AgentStatus.COMPLETED, AgentStatus.SKIPPED}


def overall_status(results: Sequence[AgentResult]) -> TripStatus:
    """Ready only when every agent completed or was skipped."""
    if all(r.status in _READY_STATUSES for r in results):
        return TripStatus.RECOMMENDATIONS_READY
    return TripStatus.FAILED


class TripOrchestrator:
    def __init__(
        self,
        agents: Mapping[AgentRole, AgentAdapter],
        *,
        settings: Optional[PlannerSettings] = None,
        repository: Optional[RecommendationRepository] = None,
        phases: Sequence[Phase] = DEFAULT_PHASES,
    ) -> None:
        self.settings = settings or PlannerSettings()
        self.repository = repository or NoopRecommendationRepository()
        self.scheduler = PhaseScheduler(
            agents, phases=phases, settings=self.settings, repository=self.repository
        )
        self.synthesizer = PlanSynthesizer(self.settings)

    def _persist_trip(
        self, trip_id: str, status: TripStatus, metadata: dict, logger: StructuredLogger
    ) -> None:
        outcome = await self.scheduler.execute(
            criteria.model_copy(update={"trip_id": trip_id}), subset, run_id=run_id, logger=logger
        )

        plan = self.synthesizer.synthesize(outcome.results, outcome.context, criteria, outcome.warnings)
        status = overall_status(outcome.results) if outcome.success else TripStatus.FAILED
        self._persist_trip(
            trip_id,
            status,
            {
                "confidence": plan.trip_summary.confidence,
                "structurally_incomplete": plan.metadata["structurally_incomplete"],
            },
            logger,
        )
        logger.summary(
            status=status.value,
            success=outcome.success,
            confidence=plan.trip_summary.confidence,
            coverage=plan.trip_summary.geographic_coverage,
            context_version=outcome.context.version,
            agents={r.agent_name.value: r.status.value for r in outcome.results},
        )
        return TripPlanResponse(
            success=outcome.success,
            status=status,
            plan=plan,
            executed_at=dt.datetime.now(dt.timezone.utc),
            run_id=run_id,
            trip_id=trip_id,
            error=outcome.error,
        )


def make_orchestrator(
    overrides: Optional[Mapping[AgentRole, AgentAdapter]] = None,
    settings: Optional[PlannerSettings] = None,
) -> TripOrchestrator:
    """Wire an orchestrator from environment settings."""
    settings = settings or load_settings()
    return TripOrchestrator(
        build_agents(settings, overrides),
        settings=settings,
        repository=get_recommendation_repository(settings.persistence),
    )


__all__ = ["TripOrchestrator", "make_orchestrator", "overall_status"]
