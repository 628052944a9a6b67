"""Pydantic domain models."""

from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from travlr.domain.constants import DEFAULT_AVAILABLE_HOURS, DEFAULT_CURRENCY
from travlr.domain.enums import (
    AgentRole,
    AgentStatus,
    BudgetWarningLevel,
    PriceUnit,
    Severity,
    TransportMode,
    TravelStyle,
)

_FROZEN = ConfigDict(frozen=True)


def normalize_currency_code(value: Any, default: str = DEFAULT_CURRENCY) -> str:
    if not isinstance(value, str):
        return default
    code = value.strip().upper()[:3]
    return code or default


class Coordinates(BaseModel):
    model_config = _FROZEN

    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)


# ── Trip input ────────────────────────────────────────


class BudgetHints(BaseModel):
    """Optional user budget hints. Informational only, never used to filter."""

    model_config = _FROZEN

    total: Optional[float] = Field(default=None, ge=0)
    flight: Optional[float] = Field(default=None, ge=0)
    accommodation: Optional[float] = Field(default=None, ge=0)
    activity: Optional[float] = Field(default=None, ge=0)
    restaurant: Optional[float] = Field(default=None, ge=0)

    def for_category(self, role: AgentRole | str) -> Optional[float]:
        return getattr(self, AgentRole(role).value)

    def per_category(self) -> dict[str, float]:
        hints: dict[str, float] = {}
        for role in AgentRole:
            value = self.for_category(role)
            if value is not None:
                hints[role.value] = float(value)
        return hints

    @property
    def has_any(self) -> bool:
        return self.total is not None or bool(self.per_category())


class TravelPreferences(BaseModel):
    model_config = _FROZEN

    flight_class: str = "economy"
    non_stop: Optional[bool] = None
    accommodation_type: Optional[str] = None
    min_rating: Optional[float] = Field(default=None, ge=0, le=5)
    amenities: tuple[str, ...] = ()
    cuisines: tuple[str, ...] = ()
    restaurant_features: tuple[str, ...] = ()
    activity_level: str = "easy"
    travel_style: TravelStyle = TravelStyle.MODERATE
    transport_mode: TransportMode = TransportMode.MIXED
    daily_hours: float = Field(default=DEFAULT_AVAILABLE_HOURS, gt=0, le=24)


class TripCriteria(BaseModel):
    """Immutable per-run search criteria."""

    model_config = _FROZEN

    trip_id: Optional[str] = None
    destination: str = Field(min_length=1)
    destination_country: Optional[str] = None
    origin: Optional[str] = None
    departure_date: dt.date
    return_date: Optional[dt.date] = None
    travelers: int = Field(default=1, ge=1)
    interests: tuple[str, ...] = ("cultural", "food")
    preferences: TravelPreferences = Field(default_factory=TravelPreferences)
    currency: str = DEFAULT_CURRENCY
    budget: BudgetHints = Field(default_factory=BudgetHints)

    @field_validator("currency", mode="before")
    @classmethod
    def _upper_currency(cls, value: Any) -> str:
        return normalize_currency_code(value)

    @model_validator(mode="after")
    def _check_dates(self) -> "TripCriteria":
        if self.return_date is not None and self.return_date < self.departure_date:
            raise ValueError("return_date must not be before departure_date")
        return self

    @property
    def nights(self) -> int:
        if self.return_date is None:
            return 1
        return max(1, (self.return_date - self.departure_date).days)

    @property
    def days(self) -> int:
        return self.nights


# ── Execution context ─────────────────────────────────


class AnchorLocation(BaseModel):
    model_config = _FROZEN

    name: str
    coordinates: Optional[Coordinates] = None
    address: Optional[str] = None


class ClusterMember(BaseModel):
    model_config = _FROZEN

    name: str
    coordinates: Coordinates
    kind: str = ""
    address: Optional[str] = None


class GeoCluster(BaseModel):
    model_config = _FROZEN

    id: str
    center: Coordinates
    radius_km: float = Field(default=0.0, ge=0)
    members: tuple[ClusterMember, ...] = ()


class BudgetWarning(BaseModel):
    model_config = _FROZEN

    category: str
    estimate: float
    hint: float
    overage_ratio: float
    level: BudgetWarningLevel
    message: str = ""


class BudgetLedger(BaseModel):
    model_config = _FROZEN

    has_user_budget: bool = False
    currency: str = DEFAULT_CURRENCY
    total_hint: Optional[float] = None
    per_category_hint: dict[str, float] = Field(default_factory=dict)
    per_category_estimate: dict[str, float] = Field(default_factory=dict)
    total_estimate: float = 0.0
    warnings: tuple[BudgetWarning, ...] = ()

    @property
    def variance(self) -> dict[str, float]:
        result: dict[str, float] = {}
        for category, estimate in self.per_category_estimate.items():
            hint = self.per_category_hint.get(category)
            if hint is not None:
                result[category] = round(estimate - hint, 2)
        if self.total_hint is not None:
            result["total"] = round(self.total_estimate - self.total_hint, 2)
        return result


class ExecutionContext(BaseModel):
    """Versioned per-run state; every transition yields a new instance."""

    model_config = _FROZEN

    version: int = 0
    anchor_location: Optional[AnchorLocation] = None
    selected_activities: tuple[ClusterMember, ...] = ()
    clusters: tuple[GeoCluster, ...] = ()
    budget_ledger: BudgetLedger = Field(default_factory=BudgetLedger)


class EnhancedCriteria(TripCriteria):
    """Criteria handed to one agent: base criteria plus role-specific context."""

    role: AgentRole
    context_version: int = 0
    anchor_location: Optional[AnchorLocation] = None
    preferred_area: Optional[AnchorLocation] = None
    max_distance_from_hotel_km: Optional[float] = None
    geographic_context: tuple[GeoCluster, ...] = ()
    activity_locations: tuple[ClusterMember, ...] = ()
    preferred_areas: tuple[GeoCluster, ...] = ()
    degraded_context: bool = False


# ── Canonical recommendation ──────────────────────────


class Price(BaseModel):
    model_config = _FROZEN

    amount: float = Field(default=0.0, ge=0)
    currency: str = DEFAULT_CURRENCY
    unit: PriceUnit = PriceUnit.PER_PERSON


class Rating(BaseModel):
    model_config = _FROZEN

    score: float = Field(default=0.0, ge=0, le=5)
    review_count: int = Field(default=0, ge=0)
    source: str = "agent"


class Location(BaseModel):
    model_config = _FROZEN

    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    place_id: Optional[str] = None


class ConfidenceInfo(BaseModel):
    model_config = _FROZEN

    score: float = Field(ge=0, le=1)
    reasoning: str = ""


class ImageRef(BaseModel):
    model_config = _FROZEN

    url: str
    alt: Optional[str] = None
    is_primary: bool = False


class CanonicalRecommendation(BaseModel):
    model_config = _FROZEN

    category: AgentRole
    name: str = Field(min_length=1)
    description: str = ""
    price: Price = Field(default_factory=Price)
    rating: Rating = Field(default_factory=Rating)
    location: Location = Field(default_factory=Location)
    confidence: ConfidenceInfo
    category_metadata: dict[str, Any] = Field(default_factory=dict)
    external_ids: dict[str, str] = Field(default_factory=dict)
    images: tuple[ImageRef, ...] = ()


class ItemError(BaseModel):
    model_config = _FROZEN

    index: int
    name: Optional[str] = None
    fields: tuple[str, ...] = ()
    message: str = ""


# ── Agent results ─────────────────────────────────────


class AgentResult(BaseModel):
    model_config = _FROZEN

    agent_name: AgentRole
    status: AgentStatus
    success: bool = False
    recommendations: tuple[CanonicalRecommendation, ...] = ()
    confidence: float = Field(default=0.0, ge=0, le=1)
    duration_ms: float = Field(default=0.0, ge=0)
    error: Optional[str] = None
    warnings: tuple[str, ...] = ()
    raw_count: int = 0
    stored_ids: tuple[str, ...] = ()
    item_errors: tuple[ItemError, ...] = ()

    @classmethod
    def skipped(cls, role: AgentRole, reason: str = "Agent not selected for execution") -> "AgentResult":
        return cls(agent_name=role, status=AgentStatus.SKIPPED, success=False, warnings=(reason,))


# ── Geographic analysis ───────────────────────────────


class TravelEstimate(BaseModel):
    distance_km: float = 0.0
    duration_min: float = 0.0
    mode: TransportMode = TransportMode.WALKING
    feasible: bool = True
    warnings: list[str] = Field(default_factory=list)
    estimated_cost: float = 0.0


class TravelSegment(TravelEstimate):
    origin: str = ""
    destination: str = ""


class DayFeasibility(BaseModel):
    feasible: bool = True
    score: int = Field(default=100, ge=0, le=100)
    total_travel_min: float = 0.0
    total_distance_km: float = 0.0
    dwell_min: float = 0.0
    total_hours: float = 0.0
    available_hours: float = DEFAULT_AVAILABLE_HOURS
    travel_limit_min: float = 0.0
    issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    segments: list[TravelSegment] = Field(default_factory=list)


class BacktrackingReport(BaseModel):
    score: float = 0.0
    flagged_triples: list[int] = Field(default_factory=list)
    detour_ratios: list[float] = Field(default_factory=list)

    @property
    def has_backtracking(self) -> bool:
        return bool(self.flagged_triples)


class ItineraryFlag(BaseModel):
    day: int
    type: str
    severity: Severity = Severity.MEDIUM
    issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class ItineraryAssessment(BaseModel):
    has_issues: bool = False
    flags: list[ItineraryFlag] = Field(default_factory=list)
    overall_severity: Severity = Severity.LOW
    summary: str = ""


# ── Plan ──────────────────────────────────────────────


class ItineraryDay(BaseModel):
    day: int = 1
    date: dt.date
    activities: list[CanonicalRecommendation] = Field(default_factory=list)
    restaurants: list[CanonicalRecommendation] = Field(default_factory=list)
    geographic_cluster: Optional[str] = None
    notes: str = ""
    feasibility: Optional[DayFeasibility] = None
    backtracking: Optional[BacktrackingReport] = None


class FailedAgent(BaseModel):
    name: AgentRole
    error: Optional[str] = None
    impact: str = ""


class TripDates(BaseModel):
    departure: dt.date
    return_date: Optional[dt.date] = None


class PlanBudget(BaseModel):
    total: float = 0.0
    currency: str = DEFAULT_CURRENCY
    breakdown: dict[str, float] = Field(default_factory=dict)
    variance: dict[str, float] = Field(default_factory=dict)
    warnings: list[BudgetWarning] = Field(default_factory=list)
    has_user_budget: bool = False


class PlanSummary(BaseModel):
    destination: str
    dates: TripDates
    budget: PlanBudget = Field(default_factory=PlanBudget)
    confidence: int = Field(default=0, ge=0, le=100)
    geographic_coverage: int = Field(default=0, ge=0, le=100)
    itinerary: list[ItineraryDay] = Field(default_factory=list)
    failed_agents: list[FailedAgent] = Field(default_factory=list)


class TripPlan(BaseModel):
    trip_summary: PlanSummary
    recommendations: dict[str, list[CanonicalRecommendation]] = Field(default_factory=dict)
    itinerary: list[ItineraryDay] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
