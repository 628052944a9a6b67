"""Day feasibility, backtracking detection and itinerary flags."""

from __future__ import annotations

import math
from typing import Any, Optional, Sequence

from travlr.config.settings import FeasibilitySettings
from travlr.domain.constants import DAILY_TRAVEL_LIMIT_MINUTES
from travlr.domain.enums import Severity, TransportMode, TravelStyle
from travlr.domain.models import (
    BacktrackingReport,
    CanonicalRecommendation,
    DayFeasibility,
    ItineraryAssessment,
    ItineraryDay,
    ItineraryFlag,
    TravelSegment,
)
from travlr.planner.cluster import as_cluster_member
from travlr.planner.distance import estimate_travel, haversine_km

_SEVERITY_RANK = {Severity.LOW: 0, Severity.MEDIUM: 1, Severity.HIGH: 2}


def _stop_dwell(stop: Any, default: float) -> float:
    raw: Any = None
    if isinstance(stop, CanonicalRecommendation):
        raw = stop.category_metadata.get("duration_minutes")
    elif isinstance(stop, dict):
        raw = stop.get("duration_minutes")
    else:
        raw = getattr(stop, "duration_minutes", None)
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    return value if value >= 0 else default


def validate_day_feasibility(
    stops: Sequence[Any],
    travel_style: TravelStyle | str = TravelStyle.MODERATE,
    transport_mode: TransportMode | str = TransportMode.MIXED,
    available_hours: Optional[float] = None,
    settings: Optional[FeasibilitySettings] = None,
) -> DayFeasibility:
    """Check one day's stops against travel-style and available-hour limits."""
    cfg = settings or FeasibilitySettings()
    style = TravelStyle(travel_style)
    hours = available_hours if available_hours is not None else cfg.available_hours
    travel_limit = DAILY_TRAVEL_LIMIT_MINUTES[style]

    segments: list[TravelSegment] = []
    previous = None
    for stop in stops:
        member = as_cluster_member(stop)
        if member is None:
            continue
        if previous is not None:
            estimate = estimate_travel(previous.coordinates, member.coordinates, transport_mode)
            segments.append(
                TravelSegment(
                    **estimate.model_dump(),
                    origin=previous.name,
                    destination=member.name,
                )
            )
        previous = member

    travel_min = sum(s.duration_min for s in segments)
    distance = sum(s.distance_km for s in segments)
    dwell_min = sum(_stop_dwell(stop, cfg.dwell_minutes) for stop in stops)
    total_hours = (travel_min + dwell_min) / 60

    issues: list[str] = []
    recommendations: list[str] = []
    if travel_min > travel_limit:
        issues.append(
            f"Travel time {travel_min:.0f} min exceeds {style.value} limit of {travel_limit:.0f} min"
        )
        recommendations.append("Choose closer locations or fewer stops")
    if total_hours > hours:
        issues.append(f"Day needs {total_hours:.1f} h but only {hours:.1f} h available")
        recommendations.append("Move an activity to another day")
    for segment in segments:
        if not segment.feasible:
            issues.append(
                f"{segment.origin} to {segment.destination}: " + "; ".join(segment.warnings)
            )
            recommendations.append(f"Use a faster mode than {segment.mode.value} for this leg")
    if distance > cfg.max_daily_distance_km:
        issues.append(
            f"Daily distance {distance:.1f} km exceeds {cfg.max_daily_distance_km:.0f} km"
        )
        recommendations.append("Group stops by neighbourhood")

    return DayFeasibility(
        feasible=not issues,
        score=max(0, 100 - cfg.issue_penalty * len(issues)),
        total_travel_min=round(travel_min, 1),
        total_distance_km=round(distance, 3),
        dwell_min=dwell_min,
        total_hours=round(total_hours, 2),
        available_hours=hours,
        travel_limit_min=travel_limit,
        issues=issues,
        recommendations=recommendations,
        segments=segments,
    )


def detect_backtracking(stops: Sequence[Any], ratio: float = 1.5) -> BacktrackingReport:
    """Flag consecutive triples whose detour exceeds ``ratio`` times the direct leg."""
    points = [m.coordinates for m in (as_cluster_member(s) for s in stops) if m is not None]
    flagged: list[int] = []
    ratios: list[float] = []
    triples = max(0, len(points) - 2)
    for i in range(triples):
        a, b, c = points[i], points[i + 1], points[i + 2]
        detour = haversine_km(a, b) + haversine_km(b, c)
        direct = haversine_km(a, c)
        if direct == 0:
            current = math.inf if detour > 0 else 1.0
        else:
            current = detour / direct
        ratios.append(current if math.isinf(current) else round(current, 3))
        if current > ratio:
            flagged.append(i)
    score = len(flagged) / triples if triples else 0.0
    return BacktrackingReport(score=round(score, 3), flagged_triples=flagged, detour_ratios=ratios)


def flag_itinerary(
    days: Sequence[ItineraryDay],
    travel_style: TravelStyle | str = TravelStyle.MODERATE,
    transport_mode: TransportMode | str = TransportMode.MIXED,
    available_hours: Optional[float] = None,
    settings: Optional[FeasibilitySettings] = None,
) -> ItineraryAssessment:
    cfg = settings or FeasibilitySettings()
    flags: list[ItineraryFlag] = []
    for day in days:
        feasibility = day.feasibility or validate_day_feasibility(
            [*day.activities, *day.restaurants], travel_style, transport_mode, available_hours, cfg
        )
        if not feasibility.feasible:
            flags.append(
                ItineraryFlag(
                    day=day.day,
                    type="feasibility",
                    severity=Severity.HIGH if feasibility.score < 50 else Severity.MEDIUM,
                    issues=list(feasibility.issues),
                    recommendations=list(feasibility.recommendations),
                )
            )
        routing = day.backtracking or detect_backtracking(day.activities, cfg.backtrack_ratio)
        if routing.has_backtracking:
            flags.append(
                ItineraryFlag(
                    day=day.day,
                    type="routing",
                    severity=Severity.LOW,
                    issues=[f"Inefficient routing at {len(routing.flagged_triples)} stop(s)"],
                    recommendations=["Reorder stops to avoid doubling back"],
                )
            )

    if not flags:
        return ItineraryAssessment(summary="No itinerary issues detected")
    overall = max((f.severity for f in flags), key=lambda s: _SEVERITY_RANK[s])
    flagged_days = len({f.day for f in flags})
    return ItineraryAssessment(
        has_issues=True,
        flags=flags,
        overall_severity=overall,
        summary=f"{len(flags)} issue(s) across {flagged_days} day(s)",
    )


__all__ = ["detect_backtracking", "flag_itinerary", "validate_day_feasibility"]
