"""Domain package exports."""

from travlr.domain.enums import (
    AgentRole,
    AgentStatus,
    DependencyPolicy,
    PriceUnit,
    Severity,
    TransportMode,
    TravelStyle,
    TripStatus,
)
from travlr.domain.exceptions import (
    DependencyUnmetWarning,
    DomainError,
    InvalidAgentSubset,
    NormalizationError,
    SchedulerError,
)
from travlr.domain.models import (
    AgentResult,
    BudgetLedger,
    CanonicalRecommendation,
    EnhancedCriteria,
    ExecutionContext,
    GeoCluster,
    PlanSummary,
    TripCriteria,
    TripPlan,
)

__all__ = [
    "AgentResult",
    "AgentRole",
    "AgentStatus",
    "BudgetLedger",
    "CanonicalRecommendation",
    "DependencyPolicy",
    "DependencyUnmetWarning",
    "DomainError",
    "EnhancedCriteria",
    "ExecutionContext",
    "GeoCluster",
    "InvalidAgentSubset",
    "NormalizationError",
    "PlanSummary",
    "PriceUnit",
    "SchedulerError",
    "Severity",
    "TransportMode",
    "TravelStyle",
    "TripCriteria",
    "TripPlan",
    "TripStatus",
]
