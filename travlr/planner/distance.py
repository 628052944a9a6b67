"""Great-circle distance, travel estimates and the bounded city lookup."""

from __future__ import annotations

import math
from typing import Optional

from travlr.domain.constants import (
    CITY_COORDINATES,
    EARTH_RADIUS_KM,
    TRANSPORT_COST,
    TRANSPORT_LIMITS,
    TRANSPORT_MINUTES_PER_KM,
)
from travlr.domain.enums import TransportMode
from travlr.domain.models import Coordinates, TravelEstimate


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(dlon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def haversine_km(a: Coordinates, b: Coordinates) -> float:
    return haversine(a.lat, a.lng, b.lat, b.lng)


def distance_km(a: Optional[Coordinates], b: Optional[Coordinates]) -> float:
    """Distance between two optional points; ``inf`` when either is missing."""
    if a is None or b is None:
        return math.inf
    return haversine_km(a, b)


def resolve_mode(mode: TransportMode | str) -> TransportMode:
    resolved = TransportMode(mode)
    if resolved is TransportMode.MIXED:
        return TransportMode.TRANSIT
    return resolved


def estimate_travel(
    a: Optional[Coordinates],
    b: Optional[Coordinates],
    mode: TransportMode | str = TransportMode.WALKING,
) -> TravelEstimate:
    """Estimate one segment with per-mode city speeds and ceilings."""
    resolved = resolve_mode(mode)
    dist = distance_km(a, b)
    if math.isinf(dist):
        return TravelEstimate(
            distance_km=0.0,
            duration_min=0.0,
            mode=resolved,
            feasible=False,
            warnings=["Missing coordinates for travel estimate"],
        )

    duration = dist * TRANSPORT_MINUTES_PER_KM[resolved]
    max_km, max_min = TRANSPORT_LIMITS[resolved]
    warnings: list[str] = []
    if dist > max_km:
        warnings.append(f"{dist:.1f} km exceeds {resolved.value} limit of {max_km:.0f} km")
    if duration > max_min:
        warnings.append(f"{duration:.0f} min exceeds {resolved.value} limit of {max_min:.0f} min")

    base, per_km = TRANSPORT_COST[resolved]
    cost = 0.0 if dist == 0 else base + per_km * dist
    return TravelEstimate(
        distance_km=round(dist, 3),
        duration_min=round(duration, 1),
        mode=resolved,
        feasible=not warnings,
        warnings=warnings,
        estimated_cost=round(cost, 2),
    )


def geocode_city(name: Optional[str]) -> Optional[Coordinates]:
    if not name:
        return None
    key = name.strip().lower()
    hit = CITY_COORDINATES.get(key) or CITY_COORDINATES.get(key.split(",")[0].strip())
    if hit is None:
        return None
    return Coordinates(lat=hit[0], lng=hit[1])


__all__ = [
    "distance_km",
    "estimate_travel",
    "geocode_city",
    "haversine",
    "haversine_km",
    "resolve_mode",
]
