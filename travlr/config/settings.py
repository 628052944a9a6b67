"""Planner tunables with environment overrides."""

from __future__ import annotations

import math
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from travlr.domain.constants import (
    BACKTRACK_DETOUR_RATIO,
    BUDGET_TOP_N,
    CATEGORY_CONFIDENCE_WEIGHTS,
    DEFAULT_AVAILABLE_HOURS,
    DEFAULT_CLUSTER_RADIUS_KM,
    DEFAULT_DWELL_MINUTES,
    FEASIBILITY_ISSUE_PENALTY,
    MAX_DAILY_DISTANCE_KM,
)
from travlr.domain.enums import DependencyPolicy

_TRUTHY = {"1", "true", "yes", "on"}


def _is_enabled(value: str | None) -> bool:
    return bool(value and value.strip().lower() in _TRUTHY)


def _below(value: float, minimum: Optional[float], exclusive: bool) -> bool:
    if minimum is None:
        return False
    return value <= minimum if exclusive else value < minimum


def _env_float(
    name: str, default: float, *, minimum: Optional[float] = None, exclusive: bool = False
) -> float:
    """Read a float override; unparseable or out-of-range values keep the default."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    if not math.isfinite(value) or _below(value, minimum, exclusive):
        return default
    return value


def _env_int(name: str, default: int, *, minimum: Optional[int] = None) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if _below(value, minimum, False):
        return default
    return value


class ClusteringSettings(BaseModel):
    radius_km: float = Field(default=DEFAULT_CLUSTER_RADIUS_KM, gt=0)


class FeasibilitySettings(BaseModel):
    available_hours: float = Field(default=DEFAULT_AVAILABLE_HOURS, gt=0)
    dwell_minutes: float = Field(default=DEFAULT_DWELL_MINUTES, ge=0)
    max_daily_distance_km: float = Field(default=MAX_DAILY_DISTANCE_KM, gt=0)
    issue_penalty: int = Field(default=FEASIBILITY_ISSUE_PENALTY, ge=0)
    backtrack_ratio: float = Field(default=BACKTRACK_DETOUR_RATIO, gt=1)


class BudgetSettings(BaseModel):
    warning_ratio: float = Field(default=0.10, ge=0)
    critical_ratio: float = Field(default=0.20, ge=0)
    top_n: dict[str, Optional[int]] = Field(
        default_factory=lambda: {role.value: n for role, n in BUDGET_TOP_N.items()}
    )


class ConfidenceSettings(BaseModel):
    weights: dict[str, float] = Field(
        default_factory=lambda: {role.value: w for role, w in CATEGORY_CONFIDENCE_WEIGHTS.items()}
    )
    coverage_threshold: float = 50.0
    coverage_bonus_max: float = 0.05
    within_budget_bonus: float = 0.05
    critical_overage_penalty: float = 0.10
    failed_agent_penalty: float = 0.10
    empty_score: int = 50


class SchedulerSettings(BaseModel):
    dependency_policy: DependencyPolicy = DependencyPolicy.DEGRADE
    agent_timeout_seconds: Optional[float] = Field(default=None, gt=0)
    max_distance_from_hotel_km: float = Field(default=10.0, gt=0)
    max_restaurants_per_day: int = Field(default=2, ge=1)


class PersistenceSettings(BaseModel):
    enabled: bool = False
    db_path: Path = Path("data/trips.sqlite3")


class PlannerSettings(BaseModel):
    clustering: ClusteringSettings = Field(default_factory=ClusteringSettings)
    feasibility: FeasibilitySettings = Field(default_factory=FeasibilitySettings)
    budget: BudgetSettings = Field(default_factory=BudgetSettings)
    confidence: ConfidenceSettings = Field(default_factory=ConfidenceSettings)
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    persistence: PersistenceSettings = Field(default_factory=PersistenceSettings)


def resolve_dependency_policy(default: DependencyPolicy = DependencyPolicy.DEGRADE) -> DependencyPolicy:
    raw = str(os.getenv("DEPENDENCY_POLICY") or "").strip().lower()
    try:
        return DependencyPolicy(raw) if raw else default
    except ValueError:
        return default


def load_settings() -> PlannerSettings:
    """Build settings from defaults plus environment overrides."""
    timeout = _env_float("AGENT_TIMEOUT_SECONDS", 0.0)
    return PlannerSettings(
        clustering=ClusteringSettings(
            radius_km=_env_float(
                "CLUSTER_RADIUS_KM", DEFAULT_CLUSTER_RADIUS_KM, minimum=0, exclusive=True
            ),
        ),
        feasibility=FeasibilitySettings(
            issue_penalty=_env_int("FEASIBILITY_ISSUE_PENALTY", FEASIBILITY_ISSUE_PENALTY, minimum=0),
        ),
        budget=BudgetSettings(
            warning_ratio=_env_float("BUDGET_WARNING_RATIO", 0.10, minimum=0),
            critical_ratio=_env_float("BUDGET_CRITICAL_RATIO", 0.20, minimum=0),
        ),
        scheduler=SchedulerSettings(
            dependency_policy=resolve_dependency_policy(),
            agent_timeout_seconds=timeout if timeout > 0 else None,
            max_distance_from_hotel_km=_env_float(
                "MAX_DISTANCE_FROM_HOTEL_KM", 10.0, minimum=0, exclusive=True
            ),
        ),
        persistence=PersistenceSettings(
            enabled=_is_enabled(os.getenv("PLAN_PERSISTENCE_ENABLED")),
            db_path=Path(os.getenv("PLAN_PERSISTENCE_DB", "data/trips.sqlite3")),
        ),
    )


__all__ = [
    "BudgetSettings",
    "ClusteringSettings",
    "ConfidenceSettings",
    "FeasibilitySettings",
    "PersistenceSettings",
    "PlannerSettings",
    "SchedulerSettings",
    "load_settings",
    "resolve_dependency_policy",
]
