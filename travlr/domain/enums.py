"""Domain enums."""

from enum import Enum


class AgentRole(str, Enum):
    FLIGHT = "flight"
    ACCOMMODATION = "accommodation"
    ACTIVITY = "activity"
    RESTAURANT = "restaurant"


AGENT_ROLE_LIST = [role.value for role in AgentRole]


class AgentStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


TERMINAL_AGENT_STATUSES = frozenset({AgentStatus.COMPLETED, AgentStatus.FAILED, AgentStatus.SKIPPED})


class TripStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    RECOMMENDATIONS_READY = "recommendations_ready"
    FAILED = "failed"


class TravelStyle(str, Enum):
    RELAXED = "relaxed"
    MODERATE = "moderate"
    ACTIVE = "active"
    INTENSIVE = "intensive"


class TransportMode(str, Enum):
    WALKING = "walking"
    CYCLING = "cycling"
    TRANSIT = "transit"
    TAXI = "taxi"
    RIDESHARE = "rideshare"
    DRIVING = "driving"
    METRO = "metro"
    MIXED = "mixed"


class PriceUnit(str, Enum):
    PER_PERSON = "per_person"
    PER_NIGHT = "per_night"
    PER_ROOM = "per_room"
    PER_GROUP = "per_group"
    TOTAL = "total"


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class BudgetWarningLevel(str, Enum):
    WARNING = "warning"
    CRITICAL = "critical"


class DependencyPolicy(str, Enum):
    DEGRADE = "degrade"
    SKIP = "skip"
