"""Deterministic mock agents.

Each mock emits a different raw shape so the normalizer sees the variety real
providers produce. Locations are laid out around the context anchor when one
is present, otherwise around the destination centre.
"""

from __future__ import annotations

from typing import Any, Optional

from travlr.agents.interfaces import AgentResponse
from travlr.domain.enums import AgentRole
from travlr.domain.models import Coordinates, EnhancedCriteria
from travlr.planner.distance import geocode_city

# roughly 1 km of latitude
_KM_LAT = 1 / 111.0


def _offset(center: Optional[Coordinates], north_km: float, east_km: float) -> Optional[dict[str, float]]:
    if center is None:
        return None
    return {
        "lat": round(center.lat + north_km * _KM_LAT, 6),
        "lng": round(center.lng + east_km * _KM_LAT, 6),
    }


def _airport_code(name: Optional[str], fallback: str) -> str:
    if not name:
        return fallback
    letters = [c for c in name.upper() if c.isalpha()]
    return "".join(letters[:3]) or fallback


class MockAgent:
    role: AgentRole
    name: str

    def __init__(self, record: bool = False) -> None:
        self.name = f"mock-{self.role.value}"
        self.record = record
        self.received: list[EnhancedCriteria] = []

    def _items(self, criteria: EnhancedCriteria) -> list[dict[str, Any]]:
        raise NotImplementedError

    async def execute(self, criteria: EnhancedCriteria) -> AgentResponse:
        if self.record:
            self.received.append(criteria)
        return AgentResponse(success=True, recommendations=self._items(criteria))


class MockFlightAgent(MockAgent):
    role = AgentRole.FLIGHT

    def _items(self, criteria: EnhancedCriteria) -> list[dict[str, Any]]:
        origin = _airport_code(criteria.origin, "ORG")
        destination = _airport_code(criteria.destination, "DST")
        departure = criteria.departure_date.isoformat()
        cabin = criteria.preferences.flight_class
        return [
            {
                "airline": "Travlr Air",
                "flightNumber": "TA 101",
                "departure": {"airport": origin, "date": departure, "time": "08:15"},
                "arrival": {"airport": destination, "date": departure, "time": "15:35"},
                "price": {"total": "420.00", "currency": criteria.currency},
                "stops": 0,
                "duration": "7h 20m",
                "class": cabin,
                "id": "TA101",
            },
            {
                "carrier": "Northwind",
                "flightNumber": "NW 88",
                "departure": {"airport": origin, "date": departure, "time": "11:40"},
                "arrival": {"airport": destination, "date": departure, "time": "21:05"},
                "price": {"total": "315.50", "currency": criteria.currency},
                "stops": 1,
                "duration": "9h 25m",
                "class": cabin,
                "id": "NW88",
            },
        ]


class MockAccommodationAgent(MockAgent):
    role = AgentRole.ACCOMMODATION

    def _items(self, criteria: EnhancedCriteria) -> list[dict[str, Any]]:
        center = geocode_city(criteria.destination)
        near = _offset(center, 0.0, 0.0)
        east = _offset(center, 0.4, 1.2)
        check_out = criteria.return_date.isoformat() if criteria.return_date else None
        return [
            {
                "hotelName": "Hotel Central",
                "pricePerNight": 180,
                "currency": criteria.currency,
                "rating": 9.2,
                "reviewCount": 1432,
                "location": {
                    "address": f"1 Main Square, {criteria.destination}",
                    "coordinates": {"latitude": near["lat"], "longitude": near["lng"]} if near else None,
                },
                "amenities": ["wifi", "breakfast", "gym", "spa"],
                "type": "hotel",
                "checkIn": criteria.departure_date.isoformat(),
                "checkOut": check_out,
                "bookingId": "BK-1001",
                "images": ["https://images.example.com/hotel-central.jpg"],
            },
            {
                "name": "Riverside Suites",
                "price": {"amount": 140, "currency": criteria.currency, "priceType": "per_night"},
                "rating": {"score": 8.4, "reviewCount": 312},
                "coordinates": east,
                "address": f"22 River Road, {criteria.destination}",
                "amenities": ["wifi", "kitchen"],
                "type": "apartment",
                "bookingId": "BK-1002",
            },
        ]


class MockActivityAgent(MockAgent):
    role = AgentRole.ACTIVITY

    _CATALOGUE = (
        ("Old Town Walking Tour", 1.0, 0.0, 25, 4.7, 2100, 150),
        ("City Museum", 1.5, 0.0, 18, 4.5, 5400, 120),
        ("Harbour Cruise", 0.4, 1.1, 40, 4.2, 640, 90),
        ("Hilltop Park", 8.0, 0.0, 0, 4.6, 980, 180),
    )

    def _items(self, criteria: EnhancedCriteria) -> list[dict[str, Any]]:
        anchor = criteria.anchor_location.coordinates if criteria.anchor_location else None
        center = anchor or geocode_city(criteria.destination)
        items: list[dict[str, Any]] = []
        for index, (name, north, east, price, rating, reviews, minutes) in enumerate(self._CATALOGUE):
            point = _offset(center, north, east)
            item: dict[str, Any] = {
                "id": f"place-{index + 1}",
                "displayName": {"text": name},
                "formattedAddress": f"{name}, {criteria.destination}",
                "rating": rating,
                "userRatingCount": reviews,
                "price": price,
                "durationMinutes": minutes,
            }
            if point is not None:
                item["location"] = {"latitude": point["lat"], "longitude": point["lng"]}
            items.append(item)
        return items


class MockRestaurantAgent(MockAgent):
    role = AgentRole.RESTAURANT

    _CATALOGUE = (
        ("Bistro du Coin", "French", 88, 45),
        ("Trattoria Sole", "Italian", 82, 35),
        ("Noodle Bar", "Asian", 76, 20),
    )

    def _items(self, criteria: EnhancedCriteria) -> list[dict[str, Any]]:
        if criteria.activity_locations:
            spots = [loc.coordinates for loc in criteria.activity_locations]
        elif criteria.anchor_location and criteria.anchor_location.coordinates:
            spots = [criteria.anchor_location.coordinates]
        else:
            center = geocode_city(criteria.destination)
            spots = [center] if center else []
        items: list[dict[str, Any]] = []
        for index, (name, cuisine, score, price) in enumerate(self._CATALOGUE):
            item: dict[str, Any] = {
                "name": name,
                "cuisine": cuisine,
                "score": score,
                "ratingScale": 100,
                "reviewCount": 150 + index * 40,
                "price": {"amount": price, "currency": criteria.currency},
                "address": f"{10 + index} Food Street, {criteria.destination}",
            }
            if spots:
                spot = _offset(spots[index % len(spots)], 0.1, 0.1)
                item["coordinates"] = [spot["lat"], spot["lng"]]
            items.append(item)
        return items


def mock_agents(record: bool = False) -> dict[AgentRole, MockAgent]:
    """One mock per role; ``record`` keeps every criteria each mock receives."""
    agents: list[MockAgent] = [
        MockFlightAgent(record),
        MockAccommodationAgent(record),
        MockActivityAgent(record),
        MockRestaurantAgent(record),
    ]
    return {agent.role: agent for agent in agents}


__all__ = [
    "MockAccommodationAgent",
    "MockActivityAgent",
    "MockAgent",
    "MockFlightAgent",
    "MockRestaurantAgent",
    "mock_agents",
]
