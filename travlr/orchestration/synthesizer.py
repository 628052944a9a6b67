"""Assemble agent results and the final context into one trip plan."""

from __future__ import annotations

import datetime as dt
import math
from typing import Any, Optional, Sequence

from travlr.config.settings import PlannerSettings
from travlr.domain.constants import AGENT_FAILURE_IMPACT
from travlr.domain.enums import AgentRole, AgentStatus
from travlr.domain.exceptions import DependencyUnmetWarning
from travlr.domain.models import (
    AgentResult,
    CanonicalRecommendation,
    ExecutionContext,
    FailedAgent,
    GeoCluster,
    ItineraryDay,
    PlanBudget,
    PlanSummary,
    TripCriteria,
    TripDates,
    TripPlan,
)
from travlr.orchestration.confidence import compute_plan_confidence
from travlr.planner.cluster import cluster_for, geographic_coverage
from travlr.planner.feasibility import detect_backtracking, flag_itinerary, validate_day_feasibility


def _order_by_cluster(
    activities: Sequence[CanonicalRecommendation], clusters: Sequence[GeoCluster]
) -> list[CanonicalRecommendation]:
    index = {cluster.id: position for position, cluster in enumerate(clusters)}

    def key(record: CanonicalRecommendation) -> int:
        cluster = cluster_for(record, clusters)
        return index[cluster.id] if cluster is not None else len(clusters)

    return sorted(activities, key=key)


def _restaurants_for_day(
    restaurants: Sequence[CanonicalRecommendation],
    day_activities: Sequence[CanonicalRecommendation],
    day_index: int,
    limit: int,
) -> list[CanonicalRecommendation]:
    picks: list[CanonicalRecommendation] = []
    if day_index < len(restaurants):
        picks.append(restaurants[day_index])
    if len(restaurants) > day_index + 1 and len(day_activities) > 1:
        second = (day_index + len(restaurants) // 2) % len(restaurants)
        if second != day_index:
            picks.append(restaurants[second])
    return picks[:limit]


def day_notes(day_index: int, total_days: int, activities: Sequence[Any]) -> str:
    if day_index == 0:
        return "Arrival day - lighter activities recommended"
    if day_index == total_days - 1:
        return "Departure day - plan activities near hotel/airport"
    if len(activities) > 2:
        return "Full day - allow extra time for transportation"
    return ""


class PlanSynthesizer:
    def __init__(self, settings: Optional[PlannerSettings] = None) -> None:
        self.settings = settings or PlannerSettings()

    def build_itinerary(
        self,
        recommendations: dict[str, list[CanonicalRecommendation]],
        context: ExecutionContext,
        criteria: TripCriteria,
    ) -> list[ItineraryDay]:
        """One entry per trip day: activities grouped by cluster and split evenly."""
        days = max(1, criteria.days)
        clusters = list(context.clusters)
        activities = _order_by_cluster(recommendations.get(AgentRole.ACTIVITY.value, []), clusters)
        restaurants = recommendations.get(AgentRole.RESTAURANT.value, [])
        per_day = math.ceil(len(activities) / days) if activities else 0
        prefs = criteria.preferences

        itinerary: list[ItineraryDay] = []
        for i in range(days):
            day_activities = activities[i * per_day:(i + 1) * per_day]
            day_restaurants = _restaurants_for_day(
                restaurants, day_activities, i, self.settings.scheduler.max_restaurants_per_day
            )
            cluster = cluster_for(day_activities[0], clusters) if day_activities else None
            if cluster is None and clusters:
                cluster = clusters[i % len(clusters)]
            itinerary.append(
                ItineraryDay(
                    day=i + 1,
                    date=criteria.departure_date + dt.timedelta(days=i),
                    activities=list(day_activities),
                    restaurants=day_restaurants,
                    geographic_cluster=cluster.id if cluster is not None else None,
                    notes=day_notes(i, days, day_activities),
                    feasibility=validate_day_feasibility(
                        [*day_activities, *day_restaurants],
                        prefs.travel_style,
                        prefs.transport_mode,
                        prefs.daily_hours,
                        self.settings.feasibility,
                    ),
                    backtracking=detect_backtracking(
                        day_activities, self.settings.feasibility.backtrack_ratio
                    ),
                )
            )
        return itinerary

    def synthesize(
        self,
        results: Sequence[AgentResult],
        context: ExecutionContext,
        criteria: TripCriteria,
        warnings: Sequence[DependencyUnmetWarning] = (),
    ) -> TripPlan:
        recommendations: dict[str, list[CanonicalRecommendation]] = {
            role.value: [] for role in AgentRole
        }
        for result in results:
            if result.status is AgentStatus.COMPLETED:
                recommendations[result.agent_name.value] = list(result.recommendations)

        has_anchor = context.anchor_location is not None and context.anchor_location.coordinates is not None
        location_count = len(context.selected_activities) + (1 if has_anchor else 0)
        coverage = geographic_coverage(context.clusters, location_count)

        itinerary = self.build_itinerary(recommendations, context, criteria)
        prefs = criteria.preferences
        assessment = flag_itinerary(
            itinerary, prefs.travel_style, prefs.transport_mode, prefs.daily_hours, self.settings.feasibility
        )

        ledger = context.budget_ledger
        confidence = compute_plan_confidence(results, ledger, coverage, self.settings.confidence)
        failed_agents = [
            FailedAgent(
                name=r.agent_name,
                error=r.error,
                impact=AGENT_FAILURE_IMPACT.get(r.agent_name, "unknown impact"),
            )
            for r in results
            if r.status is AgentStatus.FAILED
        ]

        summary = PlanSummary(
            destination=criteria.destination,
            dates=TripDates(departure=criteria.departure_date, return_date=criteria.return_date),
            budget=PlanBudget(
                total=ledger.total_estimate,
                currency=ledger.currency,
                breakdown=dict(ledger.per_category_estimate),
                variance=ledger.variance,
                warnings=list(ledger.warnings),
                has_user_budget=ledger.has_user_budget,
            ),
            confidence=confidence["confidence"],
            geographic_coverage=coverage,
            itinerary=itinerary,
            failed_agents=failed_agents,
        )

        metadata: dict[str, Any] = {
            "agent_results": {
                r.agent_name.value: {
                    "status": r.status.value,
                    "success": r.success,
                    "duration_ms": r.duration_ms,
                    "confidence": round(r.confidence, 4),
                    "error": r.error,
                    "count": len(r.recommendations),
                    "warnings": list(r.warnings),
                }
                for r in results
            },
            "geographic_analysis": {
                "clusters": [c.model_dump(mode="json") for c in context.clusters],
                "anchor_location": (
                    context.anchor_location.model_dump(mode="json") if context.anchor_location else None
                ),
                "coverage": coverage,
            },
            "budget_ledger": ledger.model_dump(mode="json"),
            "dependency_warnings": [w.to_dict() for w in warnings],
            "structurally_incomplete": bool(warnings),
            "feasibility": assessment.model_dump(mode="json"),
            "confidence_breakdown": confidence["breakdown"],
            "context_version": context.version,
        }
        if failed_agents:
            metadata["failed_agents"] = [f.model_dump(mode="json") for f in failed_agents]

        return TripPlan(
            trip_summary=summary,
            recommendations=recommendations,
            itinerary=itinerary,
            metadata=metadata,
        )


__all__ = ["PlanSynthesizer", "day_notes"]
