"""Known raw agent output shapes, one table per role.

Each shape names the paths that identify it and, for every canonical field,
the ordered source paths to read. The first shape whose identifying paths
are all present wins.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from travlr.domain.enums import AgentRole

Paths = tuple[str, ...]


def lookup(raw: Any, path: str) -> Any:
    """Walk a dotted path through nested mappings; ``None`` when absent."""
    current = raw
    for part in path.split("."):
        if isinstance(current, Mapping) and part in current:
            current = current[part]
        else:
            return None
    return current


def _present(value: Any) -> bool:
    return value is not None and value != ""


@dataclass(frozen=True)
class RawShape:
    name: str
    identify: tuple[Paths, ...]
    fields: Mapping[str, Paths]
    metadata: Mapping[str, Paths] = field(default_factory=dict)
    canonical: bool = False

    def missing(self, raw: Mapping[str, Any]) -> list[str]:
        """First path of every identifying group with no value in ``raw``."""
        return [
            group[0]
            for group in self.identify
            if not any(_present(lookup(raw, path)) for path in group)
        ]

    def matches(self, raw: Mapping[str, Any]) -> bool:
        return not self.missing(raw)

    def first(self, raw: Mapping[str, Any], name: str) -> Any:
        for path in self.fields.get(name, ()):
            value = lookup(raw, path)
            if _present(value):
                return value
        return None

    def read_metadata(self, raw: Mapping[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, paths in self.metadata.items():
            for path in paths:
                value = lookup(raw, path)
                if _present(value):
                    result[key] = value
                    break
        return result


_COMMON_FIELDS: dict[str, Paths] = {
    "name": ("name", "title"),
    "description": ("description", "summary"),
    "price": ("price", "cost"),
    "currency": ("price.currency", "currency"),
    "price_unit": ("price.unit", "price.priceType", "priceType"),
    "rating": ("rating", "score"),
    "rating_scale": ("rating.scale", "rating.max", "ratingScale"),
    "review_count": ("rating.review_count", "rating.reviewCount", "reviewCount", "review_count"),
    "rating_source": ("rating.source", "source", "provider"),
    "confidence": ("confidence",),
    "reasoning": ("confidence.reasoning", "reasoning"),
    "coordinates": ("location.coordinates", "coordinates"),
    "address": ("location.address", "address", "location"),
    "city": ("location.city", "city"),
    "country": ("location.country", "country"),
    "place_id": ("location.place_id", "location.placeId", "placeId", "place_id"),
    "images": ("images", "photos"),
    "booking_id": ("externalIds.bookingId", "bookingId"),
    "google_place_id": ("externalIds.googlePlaceId", "googlePlaceId"),
    "amadeus_id": ("externalIds.amadeusId", "amadeusId"),
    "provider_id": ("externalIds.providerId", "providerId", "id"),
    "extra_metadata": ("agentMetadata", "metadata"),
}


def _fields(**overrides: Paths) -> dict[str, Paths]:
    return {**_COMMON_FIELDS, **overrides}


CANONICAL_SHAPE = RawShape(
    name="canonical",
    identify=(("category",), ("name",), ("price.amount",), ("rating.score",), ("confidence.score",)),
    fields={
        "name": ("name",),
        "description": ("description",),
        "price": ("price",),
        "rating": ("rating.score",),
        "review_count": ("rating.review_count",),
        "rating_source": ("rating.source",),
        "confidence": ("confidence.score",),
        "reasoning": ("confidence.reasoning",),
        "coordinates": ("location.coordinates",),
        "address": ("location.address",),
        "city": ("location.city",),
        "country": ("location.country",),
        "place_id": ("location.place_id",),
        "images": ("images",),
        "external_ids": ("external_ids",),
        "extra_metadata": ("category_metadata",),
    },
    canonical=True,
)

FLIGHT_OFFER = RawShape(
    name="flight_offer",
    identify=(("airline", "carrier", "flightNumber", "flight_number"),),
    fields=_fields(
        price=("price", "totalPrice", "fare", "cost"),
        rating_source=("rating.source", "source", "airline", "carrier", "provider"),
    ),
    metadata={
        "airline": ("airline", "carrier", "agentMetadata.airline"),
        "flight_number": ("flightNumber", "flight_number", "agentMetadata.flightNumber"),
        "departure_airport": ("departure.airport", "departure.iataCode"),
        "departure_time": ("departure.time", "departure.at"),
        "departure_date": ("departure.date",),
        "arrival_airport": ("arrival.airport", "arrival.iataCode"),
        "arrival_time": ("arrival.time", "arrival.at"),
        "arrival_date": ("arrival.date",),
        "duration": ("duration", "agentMetadata.duration"),
        "stops": ("stops", "numberOfStops", "agentMetadata.stops"),
        "cabin": ("class", "cabin", "travelClass", "agentMetadata.cabin"),
    },
)

FLIGHT_ROUTE = RawShape(
    name="flight_route",
    identify=(("departure.airport", "origin"), ("arrival.airport", "destination")),
    fields=_fields(price=("price", "totalPrice", "fare", "cost")),
    metadata={
        "departure_airport": ("departure.airport", "origin"),
        "departure_time": ("departure.time",),
        "departure_date": ("departure.date",),
        "arrival_airport": ("arrival.airport", "destination"),
        "arrival_time": ("arrival.time",),
        "arrival_date": ("arrival.date",),
        "duration": ("duration",),
        "stops": ("stops",),
        "cabin": ("class", "cabin"),
    },
)

LODGING_LISTING = RawShape(
    name="lodging_listing",
    identify=(("name", "title", "hotelName"),),
    fields=_fields(
        name=("name", "title", "hotelName"),
        price=("price", "pricePerNight", "nightlyRate", "rate", "cost"),
        rating=("rating", "reviewScore", "score"),
        rating_scale=("rating.scale", "rating.max", "ratingScale", "reviewScoreScale"),
        review_count=("rating.reviewCount", "rating.review_count", "reviewCount", "reviews"),
        coordinates=("location.coordinates", "coordinates", "geo", "location"),
        booking_id=("externalIds.bookingId", "bookingId", "hotelId"),
    ),
    metadata={
        "hotel_type": ("type", "propertyType", "agentMetadata.hotelType"),
        "amenities": ("amenities", "agentMetadata.amenities"),
        "room_type": ("roomType", "agentMetadata.roomType"),
        "check_in": ("checkIn", "check_in"),
        "check_out": ("checkOut", "check_out"),
    },
)

PLACE = RawShape(
    name="place",
    identify=(("displayName.text", "displayName"), ("formattedAddress", "location.latitude")),
    fields=_fields(
        name=("displayName.text", "displayName", "name"),
        description=("editorialSummary.text", "description"),
        price=("price", "estimatedPrice", "cost"),
        review_count=("userRatingCount", "user_ratings_total", "reviewCount"),
        rating_source=("source", "provider"),
        coordinates=("location", "geometry.location", "coordinates"),
        address=("formattedAddress", "vicinity", "address"),
        place_id=("id", "place_id", "placeId"),
        google_place_id=("id", "place_id", "googlePlaceId"),
        provider_id=("providerId",),
    ),
    metadata={
        "types": ("types",),
        "price_level": ("priceLevel",),
        "website": ("websiteUri", "website"),
        "cuisine": ("primaryTypeDisplayName.text", "cuisine"),
        "duration_minutes": ("duration_minutes", "durationMinutes"),
    },
)

LISTING = RawShape(
    name="listing",
    identify=(("name", "title"),),
    fields=_fields(
        coordinates=("location.coordinates", "coordinates", "geometry.location", "geo", "location"),
    ),
    metadata={
        "cuisine": ("cuisine",),
        "price_range": ("priceRange", "price_range"),
        "duration": ("duration",),
        "duration_minutes": ("duration_minutes", "durationMinutes"),
        "category": ("category",),
        "opening_hours": ("openingHours", "opening_hours"),
    },
)

ROLE_SHAPES: dict[AgentRole, tuple[RawShape, ...]] = {
    AgentRole.FLIGHT: (CANONICAL_SHAPE, FLIGHT_OFFER, FLIGHT_ROUTE),
    AgentRole.ACCOMMODATION: (CANONICAL_SHAPE, LODGING_LISTING),
    AgentRole.ACTIVITY: (CANONICAL_SHAPE, PLACE, LISTING),
    AgentRole.RESTAURANT: (CANONICAL_SHAPE, PLACE, LISTING),
}


def resolve_shape(role: AgentRole, raw: Mapping[str, Any]) -> tuple[Optional[RawShape], list[str]]:
    """Return the matching shape, or ``None`` plus the closest shape's missing fields."""
    best_missing: Optional[list[str]] = None
    for shape in ROLE_SHAPES[role]:
        if shape.canonical and lookup(raw, "category") != role.value:
            continue
        missing = shape.missing(raw)
        if not missing:
            return shape, []
        if not shape.canonical and (best_missing is None or len(missing) < len(best_missing)):
            best_missing = missing
    return None, best_missing or []


__all__ = ["CANONICAL_SHAPE", "ROLE_SHAPES", "RawShape", "lookup", "resolve_shape"]
