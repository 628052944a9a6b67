"""Domain constants shared by deterministic logic."""

from travlr.domain.enums import AgentRole, PriceUnit, TransportMode, TravelStyle

EARTH_RADIUS_KM = 6371.0

DEFAULT_CLUSTER_RADIUS_KM = 2.0

# minutes per km, city conditions including waits
TRANSPORT_MINUTES_PER_KM = {
    TransportMode.WALKING: 12.0,
    TransportMode.CYCLING: 4.0,
    TransportMode.TRANSIT: 3.0,
    TransportMode.TAXI: 2.5,
    TransportMode.RIDESHARE: 2.5,
    TransportMode.DRIVING: 2.0,
    TransportMode.METRO: 1.5,
}

# (max distance km, max duration min) for a single segment
TRANSPORT_LIMITS = {
    TransportMode.WALKING: (3.0, 45.0),
    TransportMode.CYCLING: (15.0, 60.0),
    TransportMode.TRANSIT: (50.0, 90.0),
    TransportMode.TAXI: (30.0, 60.0),
    TransportMode.RIDESHARE: (30.0, 60.0),
    TransportMode.DRIVING: (50.0, 90.0),
    TransportMode.METRO: (25.0, 45.0),
}

# (base fare, per km)
TRANSPORT_COST = {
    TransportMode.WALKING: (0.0, 0.0),
    TransportMode.CYCLING: (0.0, 0.0),
    TransportMode.TRANSIT: (2.5, 0.0),
    TransportMode.TAXI: (3.5, 1.2),
    TransportMode.RIDESHARE: (3.0, 1.1),
    TransportMode.DRIVING: (0.0, 0.3),
    TransportMode.METRO: (2.5, 0.0),
}

DAILY_TRAVEL_LIMIT_MINUTES = {
    TravelStyle.RELAXED: 120.0,
    TravelStyle.MODERATE: 180.0,
    TravelStyle.ACTIVE: 240.0,
    TravelStyle.INTENSIVE: 300.0,
}

DEFAULT_AVAILABLE_HOURS = 8.0
DEFAULT_DWELL_MINUTES = 120.0
MAX_DAILY_DISTANCE_KM = 20.0
FEASIBILITY_ISSUE_PENALTY = 15
BACKTRACK_DETOUR_RATIO = 1.5

DEFAULT_PRICE_UNIT = {
    AgentRole.FLIGHT: PriceUnit.TOTAL,
    AgentRole.ACCOMMODATION: PriceUnit.PER_NIGHT,
    AgentRole.ACTIVITY: PriceUnit.PER_PERSON,
    AgentRole.RESTAURANT: PriceUnit.PER_PERSON,
}

CATEGORY_CONFIDENCE_WEIGHTS = {
    AgentRole.FLIGHT: 0.30,
    AgentRole.ACCOMMODATION: 0.30,
    AgentRole.ACTIVITY: 0.25,
    AgentRole.RESTAURANT: 0.15,
}

# None means every option contributes
BUDGET_TOP_N = {
    AgentRole.FLIGHT: None,
    AgentRole.ACCOMMODATION: None,
    AgentRole.ACTIVITY: 3,
    AgentRole.RESTAURANT: 3,
}

AGENT_FAILURE_IMPACT = {
    AgentRole.FLIGHT: "critical - trip cannot proceed without flights",
    AgentRole.ACCOMMODATION: "critical - lodging required for trip",
    AgentRole.ACTIVITY: "moderate - reduces trip experience but not essential",
    AgentRole.RESTAURANT: "low - dining options available elsewhere",
}

# Bounded geocoding table; not authoritative.
CITY_COORDINATES = {
    "paris": (48.8566, 2.3522),
    "london": (51.5074, -0.1278),
    "tokyo": (35.6762, 139.6503),
    "new york": (40.7128, -74.0060),
    "rome": (41.9028, 12.4964),
    "barcelona": (41.3851, 2.1734),
    "amsterdam": (52.3676, 4.9041),
    "berlin": (52.5200, 13.4050),
    "madrid": (40.4168, -3.7038),
    "vienna": (48.2082, 16.3738),
}

DEFAULT_CURRENCY = "USD"
