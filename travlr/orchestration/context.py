"""Execution context transitions and per-role criteria enrichment."""

from __future__ import annotations

from typing import Optional, Sequence

from travlr.config.settings import PlannerSettings
from travlr.domain.enums import AgentRole, AgentStatus
from travlr.domain.models import (
    AgentResult,
    AnchorLocation,
    CanonicalRecommendation,
    EnhancedCriteria,
    ExecutionContext,
    TripCriteria,
)
from travlr.planner.budget import fold_budget, new_ledger
from travlr.planner.cluster import as_cluster_member, cluster_locations


def initial_context(criteria: TripCriteria) -> ExecutionContext:
    return ExecutionContext(version=0, budget_ledger=new_ledger(criteria))


def _anchor_from(records: Sequence[CanonicalRecommendation]) -> Optional[AnchorLocation]:
    for record in records:
        if record.location.coordinates is not None:
            return AnchorLocation(
                name=record.name,
                coordinates=record.location.coordinates,
                address=record.location.address,
            )
    return None


def fold_result(
    context: ExecutionContext,
    result: AgentResult,
    criteria: TripCriteria,
    settings: Optional[PlannerSettings] = None,
) -> ExecutionContext:
    """Fold one completed agent result into a new context version.

    Failed and skipped results leave the context untouched.
    """
    if result.status is not AgentStatus.COMPLETED:
        return context
    settings = settings or PlannerSettings()
    role = result.agent_name
    records = result.recommendations
    update: dict = {"version": context.version + 1}

    anchor = context.anchor_location
    activities = context.selected_activities
    if role is AgentRole.ACCOMMODATION:
        anchor = _anchor_from(records) or anchor
        update["anchor_location"] = anchor
    if role is AgentRole.ACTIVITY:
        activities = tuple(
            member for member in (as_cluster_member(r) for r in records) if member is not None
        )
        update["selected_activities"] = activities
    if role in (AgentRole.ACCOMMODATION, AgentRole.ACTIVITY) and activities:
        points = ([anchor] if anchor is not None else []) + list(activities)
        update["clusters"] = tuple(cluster_locations(points, settings.clustering.radius_km))

    update["budget_ledger"] = fold_budget(
        context.budget_ledger, role, records, criteria, settings.budget
    )
    return context.model_copy(update=update)


def enhance_criteria(
    criteria: TripCriteria,
    role: AgentRole,
    context: ExecutionContext,
    settings: Optional[PlannerSettings] = None,
    degraded: bool = False,
) -> EnhancedCriteria:
    """Build the frozen criteria snapshot handed to one agent."""
    settings = settings or PlannerSettings()
    fields: dict = {
        "role": role,
        "context_version": context.version,
        "degraded_context": degraded,
    }
    anchor = context.anchor_location
    if role is AgentRole.ACTIVITY and anchor is not None:
        fields.update(
            anchor_location=anchor,
            preferred_area=anchor,
            max_distance_from_hotel_km=settings.scheduler.max_distance_from_hotel_km,
            geographic_context=context.clusters,
        )
    if role is AgentRole.RESTAURANT:
        if context.selected_activities:
            fields.update(
                activity_locations=context.selected_activities,
                preferred_areas=context.clusters,
            )
        if anchor is not None:
            fields["anchor_location"] = anchor
    return EnhancedCriteria(**criteria.model_dump(), **fields)


__all__ = ["enhance_criteria", "fold_result", "initial_context"]
