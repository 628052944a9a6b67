"""Dependency-ordered phase scheduler compiled into a LangGraph pipeline."""

from __future__ import annotations

import asyncio
import time
import uuid
import warnings as warnings_module
from typing import Any, Iterable, Mapping, Optional, Sequence

from langgraph.graph import END, StateGraph
from pydantic import BaseModel, ConfigDict, Field

from travlr.agents.guards import coerce_response, invoke_adapter
from travlr.agents.interfaces import AgentAdapter
from travlr.config.settings import PlannerSettings
from travlr.domain.enums import (
    TERMINAL_AGENT_STATUSES,
    AgentRole,
    AgentStatus,
    DependencyPolicy,
)
from travlr.domain.exceptions import DependencyUnmetWarning, SchedulerError
from travlr.domain.models import AgentResult, ExecutionContext, TripCriteria
from travlr.infrastructure.logging import StructuredLogger
from travlr.normalization.normalizer import NormalizationDefaults, normalize_batch
from travlr.orchestration.context import enhance_criteria, fold_result, initial_context
from travlr.orchestration.phases import DEFAULT_PHASES, Phase, resolve_phase_order, validate_agent_subset
from travlr.orchestration.state import SchedulerState
from travlr.persistence.repository import NoopRecommendationRepository, RecommendationRepository
from travlr.shared.exceptions import AgentInvocationError

DEGRADED_CONTEXT = "degraded_context"
DEPENDENCY_UNMET = "dependency_unmet"


class SchedulerOutcome(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    run_id: str
    trip_id: str
    success: bool = True
    error: Optional[str] = None
    results: list[AgentResult] = Field(default_factory=list)
    context: ExecutionContext
    history: list[ExecutionContext] = Field(default_factory=list)
    warnings: list[DependencyUnmetWarning] = Field(default_factory=list)


def _node_name(phase: Phase) -> str:
    return f"phase_{phase.name}"


def _agent_confidence(reported: Optional[float], result_scores: Sequence[float]) -> float:
    if reported is not None:
        value = reported / 100 if reported > 1 else reported
        return min(1.0, max(0.0, value))
    if not result_scores:
        return 0.0
    return sum(result_scores) / len(result_scores)


class PhaseScheduler:
    """Runs agents phase by phase, threading a versioned execution context."""

    def __init__(
        self,
        agents: Mapping[AgentRole, AgentAdapter],
        *,
        phases: Sequence[Phase] = DEFAULT_PHASES,
        settings: Optional[PlannerSettings] = None,
        repository: Optional[RecommendationRepository] = None,
    ) -> None:
        self.agents = dict(agents)
        self.phases = resolve_phase_order(phases)
        self.settings = settings or PlannerSettings()
        self.repository = repository or NoopRecommendationRepository()
        self._graph = self._build_graph()

    # ── Graph ─────────────────────────────────────────

    def _build_graph(self):
        graph = StateGraph(SchedulerState)
        names = [_node_name(phase) for phase in self.phases]
        for phase, name in zip(self.phases, names):
            graph.add_node(name, self._phase_node(phase))
        if not names:
            raise SchedulerError("No phases to schedule")
        graph.set_entry_point(names[0])
        for current, following in zip(names, names[1:] + [END]):
            graph.add_conditional_edges(
                current,
                _route_after_phase,
                {"continue": following, "halt": END},
            )
        return graph.compile()

    def _phase_node(self, phase: Phase):
        async def node(state: dict[str, Any]) -> dict[str, Any]:
            logger: StructuredLogger = state["logger"]
            try:
                return await self._run_phase(phase, state)
            except SchedulerError as exc:
                message = str(exc)
            except Exception as exc:
                message = f"{type(exc).__name__}: {exc}"
            logger.error(_node_name(phase), message)
            return {"status": "error", "error_message": message}

        return node

    # ── Phase execution ───────────────────────────────

    async def _run_phase(self, phase: Phase, state: dict[str, Any]) -> dict[str, Any]:
        logger: StructuredLogger = state["logger"]
        selected: Optional[frozenset[AgentRole]] = state.get("selected")
        criteria: TripCriteria = state["criteria"]
        trip_id: str = state["trip_id"]
        results = dict(state.get("results", {}))
        history = list(state.get("history", []))
        warnings = list(state.get("warnings", []))
        context: ExecutionContext = state["context"]

        chosen = [a for a in phase.agents if selected is None or a in selected]
        logger.phase_start(phase.name, agents=[a.value for a in chosen], parallel=phase.parallel)

        for agent in phase.agents:
            if agent not in chosen:
                results[agent] = self._skip(trip_id, agent, "Agent not selected for execution")
        if not chosen:
            logger.phase_end(phase.name, skipped=True)
            return {"results": results}

        pending = [
            dep.value
            for dep in phase.dependencies
            if (selected is None or dep in selected)
            and (dep not in results or results[dep].status not in TERMINAL_AGENT_STATUSES)
        ]
        if pending:
            raise SchedulerError(
                f"Phase '{phase.name}' reached before dependencies finished: {', '.join(pending)}"
            )

        missing = [dep.value for dep in phase.dependencies if selected is not None and dep not in selected]
        degraded = False
        if missing:
            warning = DependencyUnmetWarning(phase.name, missing)
            warnings.append(warning)
            warnings_module.warn(warning, stacklevel=2)
            logger.warning(_node_name(phase), str(warning), missing=missing)
            if self.settings.scheduler.dependency_policy is DependencyPolicy.SKIP:
                for agent in chosen:
                    results[agent] = self._skip(
                        trip_id, agent, f"{DEPENDENCY_UNMET}: {', '.join(missing)}"
                    )
                logger.phase_end(phase.name, skipped=True, reason=DEPENDENCY_UNMET)
                return {"results": results, "warnings": warnings}
            degraded = True

        extra_warnings: tuple[str, ...] = ()
        if degraded:
            extra_warnings = (f"{DEGRADED_CONTEXT}: missing {', '.join(missing)}",)

        if phase.parallel:
            snapshot = context
            outcomes = await asyncio.gather(
                *[
                    self._execute_agent(agent, criteria, snapshot, trip_id, logger, degraded, extra_warnings)
                    for agent in chosen
                ]
            )
            for result in outcomes:
                results[result.agent_name] = result
                folded = fold_result(context, result, criteria, self.settings)
                if folded is not context:
                    context = folded
                    history.append(context)
        else:
            for agent in chosen:
                result = await self._execute_agent(
                    agent, criteria, context, trip_id, logger, degraded, extra_warnings
                )
                results[agent] = result
                folded = fold_result(context, result, criteria, self.settings)
                if folded is not context:
                    context = folded
                    history.append(context)

        logger.phase_end(
            phase.name,
            context_version=context.version,
            statuses={a.value: results[a].status.value for a in chosen},
        )
        return {"results": results, "context": context, "history": history, "warnings": warnings}

    async def _execute_agent(
        self,
        role: AgentRole,
        criteria: TripCriteria,
        context: ExecutionContext,
        trip_id: str,
        logger: StructuredLogger,
        degraded: bool,
        extra_warnings: tuple[str, ...],
    ) -> AgentResult:
        self._persist_status(trip_id, role, AgentStatus.RUNNING, {}, logger)
        enhanced = enhance_criteria(criteria, role, context, self.settings, degraded=degraded)
        adapter = self.agents.get(role)
        started = time.perf_counter()
        logger.agent_call(role.value, context_version=context.version, degraded=degraded)

        try:
            if adapter is None:
                raise AgentInvocationError(role.value, "no adapter registered")
            response = coerce_response(await invoke_adapter(adapter, enhanced))
        except Exception as exc:
            # Adapter faults are attributed to the agent, never escalated.
            error = str(exc) if isinstance(exc, AgentInvocationError) else f"{type(exc).__name__}: {exc}"
            return self._failed(trip_id, role, error, started, logger, extra_warnings)

        if not response.success:
            return self._failed(
                trip_id, role, response.error or "Agent reported failure", started, logger, extra_warnings
            )

        items = list(response.recommendations or [])
        batch = normalize_batch(role, items, NormalizationDefaults.from_criteria(criteria))
        if items and not batch.records:
            return self._failed(
                trip_id,
                role,
                f"All {len(items)} recommendations failed normalization",
                started,
                logger,
                extra_warnings,
                item_errors=batch.errors,
                raw_count=len(items),
            )

        result_warnings = list(extra_warnings)
        if batch.errors:
            result_warnings.append(f"{len(batch.errors)} recommendation(s) failed normalization")
        stored_ids = self._store(trip_id, role, batch.records, logger)
        duration_ms = round((time.perf_counter() - started) * 1000, 1)
        result = AgentResult(
            agent_name=role,
            status=AgentStatus.COMPLETED,
            success=True,
            recommendations=tuple(batch.records),
            confidence=_agent_confidence(
                response.confidence, [r.confidence.score for r in batch.records]
            ),
            duration_ms=duration_ms,
            warnings=tuple(result_warnings),
            raw_count=len(items),
            stored_ids=tuple(stored_ids),
            item_errors=tuple(batch.errors),
        )
        self._persist_status(
            trip_id,
            role,
            AgentStatus.COMPLETED,
            {"duration_ms": duration_ms, "count": len(batch.records), "confidence": result.confidence},
            logger,
        )
        return result

    def _failed(
        self,
        trip_id: str,
        role: AgentRole,
        error: str,
        started: float,
        logger: StructuredLogger,
        extra_warnings: tuple[str, ...] = (),
        item_errors: Iterable = (),
        raw_count: int = 0,
    ) -> AgentResult:
        duration_ms = round((time.perf_counter() - started) * 1000, 1)
        logger.error(role.value, error, duration_ms=duration_ms)
        self._persist_status(
            trip_id, role, AgentStatus.FAILED, {"duration_ms": duration_ms, "error": error}, logger
        )
        return AgentResult(
            agent_name=role,
            status=AgentStatus.FAILED,
            success=False,
            duration_ms=duration_ms,
            error=error,
            warnings=extra_warnings,
            raw_count=raw_count,
            item_errors=tuple(item_errors),
        )

    def _skip(self, trip_id: str, role: AgentRole, reason: str) -> AgentResult:
        self._persist_status(trip_id, role, AgentStatus.SKIPPED, {"reason": reason}, None)
        return AgentResult.skipped(role, reason)

    # ── Persistence (best effort) ─────────────────────

    def _store(self, trip_id: str, role: AgentRole, records, logger: StructuredLogger) -> list[str]:
        if not records:
            return []
        try:
            created = self.repository.create_many(records, trip_id)
            for item_error in created.per_item_errors:
                logger.warning(role.value, f"store failed for item {item_error.index}: {item_error.message}")
            if created.inserted_ids:
                self.repository.append_ids(trip_id, role.value, created.inserted_ids)
            return list(created.inserted_ids)
        except Exception as exc:
            logger.warning(role.value, f"recommendation store failed: {exc}")
            return []

    def _persist_status(
        self,
        trip_id: str,
        role: AgentRole,
        status: AgentStatus,
        metadata: dict[str, Any],
        logger: Optional[StructuredLogger],
    ) -> None:
        try:
            self.repository.set_agent_status(trip_id, role.value, status.value, metadata)
        except Exception as exc:
            if logger is not None:
                logger.warning(role.value, f"agent status update failed: {exc}")

    # ── Public API ────────────────────────────────────

    async def execute(
        self,
        criteria: TripCriteria,
        agent_subset: Optional[Iterable[str]] = None,
        *,
        run_id: Optional[str] = None,
        logger: Optional[StructuredLogger] = None,
    ) -> SchedulerOutcome:
        """Run every phase; agent failures are recorded, never raised.

        Raises ``InvalidAgentSubset`` before anything runs when the subset names
        unknown agents.
        """
        selected = validate_agent_subset(agent_subset)
        run_id = run_id or uuid.uuid4().hex[:12]
        trip_id = criteria.trip_id or run_id
        logger = logger or StructuredLogger(trace_id=run_id)
        context = initial_context(criteria)
        state: SchedulerState = {
            "run_id": run_id,
            "trip_id": trip_id,
            "criteria": criteria,
            "selected": selected,
            "context": context,
            "history": [context],
            "results": {},
            "warnings": [],
            "logger": logger,
            "status": "running",
            "error_message": "",
        }
        final = await self._graph.ainvoke(state)

        fault = final.get("status") == "error"
        error = final.get("error_message") or None
        results = final.get("results", {})
        ordered: list[AgentResult] = []
        for phase in self.phases:
            for agent in phase.agents:
                result = results.get(agent)
                if result is None:
                    result = AgentResult(
                        agent_name=agent,
                        status=AgentStatus.FAILED,
                        error=f"Not executed: {error or 'scheduler halted'}",
                    )
                ordered.append(result)

        return SchedulerOutcome(
            run_id=run_id,
            trip_id=trip_id,
            success=not fault,
            error=error if fault else None,
            results=ordered,
            context=final.get("context", context),
            history=list(final.get("history", [context])),
            warnings=list(final.get("warnings", [])),
        )

    async def run(
        self, criteria: TripCriteria, agent_subset: Optional[Iterable[str]] = None
    ) -> list[AgentResult]:
        outcome = await self.execute(criteria, agent_subset)
        return outcome.results


def _route_after_phase(state: dict[str, Any]) -> str:
    if state.get("status") == "error":
        return "halt"
    return "continue"


__all__ = ["DEGRADED_CONTEXT", "DEPENDENCY_UNMET", "PhaseScheduler", "SchedulerOutcome"]
