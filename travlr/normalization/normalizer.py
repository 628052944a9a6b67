"""Reconcile heterogeneous agent output into canonical recommendations."""

from __future__ import annotations

import datetime as dt
import logging
import math
from typing import Any, Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from travlr.domain.constants import DEFAULT_CURRENCY, DEFAULT_PRICE_UNIT
from travlr.domain.enums import AgentRole, PriceUnit
from travlr.domain.exceptions import NormalizationError
from travlr.domain.models import (
    CanonicalRecommendation,
    ConfidenceInfo,
    Coordinates,
    ImageRef,
    ItemError,
    Location,
    Price,
    Rating,
    TripCriteria,
    normalize_currency_code,
)
from travlr.normalization.shapes import RawShape, lookup, resolve_shape
from travlr.planner.distance import geocode_city

_logger = logging.getLogger("travlr.normalizer")

_BASE_CONFIDENCE = 0.7
_HIGH_RATING = 4.0
_MANY_REVIEWS = 100

_EXTERNAL_ID_KEYS = {
    "booking_id": "booking",
    "google_place_id": "google_place",
    "amadeus_id": "amadeus",
    "provider_id": "provider",
}


class NormalizationDefaults(BaseModel):
    """Run-level values merged into items that omit them."""

    model_config = ConfigDict(frozen=True)

    currency: str = DEFAULT_CURRENCY
    city: Optional[str] = None
    country: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    place_id: Optional[str] = None
    check_in: Optional[dt.date] = None
    check_out: Optional[dt.date] = None

    @classmethod
    def from_criteria(cls, criteria: TripCriteria) -> "NormalizationDefaults":
        return cls(
            currency=criteria.currency,
            city=criteria.destination,
            country=criteria.destination_country,
            coordinates=geocode_city(criteria.destination),
            check_in=criteria.departure_date,
            check_out=criteria.return_date,
        )


class NormalizationBatch(BaseModel):
    records: list[CanonicalRecommendation] = Field(default_factory=list)
    errors: list[ItemError] = Field(default_factory=list)


# ── Scalar coercion ───────────────────────────────────


def _to_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def parse_coordinates(raw: Any) -> Optional[Coordinates]:
    """Accept ``{lat,lng}``, ``{latitude,longitude}``, ``{lat,lon}`` or ``[lat, lng]``."""
    if isinstance(raw, Coordinates):
        return raw
    lat: Any = None
    lng: Any = None
    if isinstance(raw, Mapping):
        lat = raw.get("lat", raw.get("latitude"))
        lng = raw.get("lng", raw.get("lon", raw.get("longitude")))
    elif isinstance(raw, (list, tuple)) and len(raw) >= 2:
        lat, lng = raw[0], raw[1]
    lat_f, lng_f = _to_float(lat), _to_float(lng)
    if lat_f is None or lng_f is None:
        return None
    if not (-90 <= lat_f <= 90 and -180 <= lng_f <= 180):
        return None
    return Coordinates(lat=lat_f, lng=lng_f)


# ── Field normalizers ─────────────────────────────────


def normalize_price(
    role: AgentRole,
    raw_price: Any,
    *,
    currency: Any = None,
    unit: Any = None,
    run_currency: str = DEFAULT_CURRENCY,
    item_name: str = "item",
) -> Price:
    amount_raw = raw_price
    if isinstance(raw_price, Mapping):
        amount_raw = raw_price.get("amount", raw_price.get("total", raw_price.get("value")))
        currency = raw_price.get("currency", currency)
        unit = raw_price.get("unit", raw_price.get("priceType", unit))

    amount = _to_float(amount_raw)
    if amount is None or amount < 0:
        amount = 0.0

    code = normalize_currency_code(currency, default=run_currency)
    if code != run_currency and amount > 0:
        _logger.warning(
            "%s currency mismatch: expected %s, got %s for %s (%.2f)",
            role.value, run_currency, code, item_name, amount,
        )

    try:
        price_unit = PriceUnit(unit)
    except ValueError:
        price_unit = DEFAULT_PRICE_UNIT[role]
    return Price(amount=amount, currency=code, unit=price_unit)


def normalize_rating_score(value: Any, scale: Any = None) -> float:
    """Map a rating on any common scale onto 0..5."""
    if isinstance(value, Mapping):
        scale = value.get("scale", value.get("max", scale))
        value = value.get("score", value.get("value"))
    score = _to_float(value)
    if score is None or score < 0:
        return 0.0
    max_scale = _to_float(scale)
    if max_scale is not None and max_scale > 0:
        score = score / max_scale * 5
    elif score <= 5:
        pass
    elif score <= 10:
        score = score / 2
    elif score <= 100:
        score = score / 20
    else:
        score = 5.0
    return min(5.0, max(0.0, score))


def _review_count(value: Any) -> int:
    count = _to_float(value)
    if count is None or count < 0:
        return 0
    return int(count)


def heuristic_confidence(
    rating_score: float, review_count: int, price_amount: float, has_coordinates: bool
) -> float:
    confidence = _BASE_CONFIDENCE
    if rating_score > _HIGH_RATING:
        confidence += 0.1
    if review_count > _MANY_REVIEWS:
        confidence += 0.1
    if price_amount > 0:
        confidence += 0.05
    if has_coordinates:
        confidence += 0.05
    return min(confidence, 1.0)


def normalize_confidence_score(value: Any, fallback: float) -> float:
    if isinstance(value, Mapping):
        value = value.get("score")
    score = _to_float(value)
    if score is None:
        return fallback
    if 1 < score <= 100:
        score = score / 100
    return min(1.0, max(0.0, score))


def _images(raw_images: Any, name: str) -> tuple[ImageRef, ...]:
    if not isinstance(raw_images, (list, tuple)):
        return ()
    images: list[ImageRef] = []
    for index, image in enumerate(raw_images):
        if isinstance(image, str) and image:
            images.append(ImageRef(url=image, alt=f"{name} image {index + 1}", is_primary=index == 0))
        elif isinstance(image, Mapping) and _text(image.get("url")):
            images.append(
                ImageRef(
                    url=image["url"],
                    alt=_text(image.get("alt")) or name,
                    is_primary=bool(image.get("is_primary") or image.get("isPrimary")) or index == 0,
                )
            )
    return tuple(images)


def _external_ids(shape: RawShape, raw: Mapping[str, Any]) -> dict[str, str]:
    if shape.canonical:
        ids = shape.first(raw, "external_ids")
        return {str(k): str(v) for k, v in ids.items()} if isinstance(ids, Mapping) else {}
    result: dict[str, str] = {}
    for field_name, key in _EXTERNAL_ID_KEYS.items():
        value = shape.first(raw, field_name)
        if value is not None and not isinstance(value, (Mapping, list)):
            result[key] = str(value)
    return result


def _role_metadata(
    role: AgentRole, shape: RawShape, raw: Mapping[str, Any], defaults: NormalizationDefaults
) -> dict[str, Any]:
    extra = shape.first(raw, "extra_metadata")
    base = dict(extra) if isinstance(extra, Mapping) else {}
    if shape.canonical:
        return base
    metadata = {**base, **shape.read_metadata(raw)}
    if role is AgentRole.ACCOMMODATION:
        amenities = metadata.get("amenities")
        metadata["amenities"] = list(amenities) if isinstance(amenities, (list, tuple)) else []
        metadata.setdefault("hotel_type", "hotel")
        metadata.setdefault("room_type", "standard")
        if "check_in" not in metadata and defaults.check_in is not None:
            metadata["check_in"] = defaults.check_in.isoformat()
        if "check_out" not in metadata and defaults.check_out is not None:
            metadata["check_out"] = defaults.check_out.isoformat()
    if role is AgentRole.FLIGHT and "stops" in metadata:
        stops = _to_float(metadata["stops"])
        if stops is None:
            metadata.pop("stops")
        else:
            metadata["stops"] = int(stops)
    return metadata


def _route_address(metadata: Mapping[str, Any]) -> Optional[str]:
    origin = metadata.get("departure_airport")
    destination = metadata.get("arrival_airport")
    if origin or destination:
        return f"{origin or 'Origin'} → {destination or 'Destination'}"
    return None


def _name(role: AgentRole, shape: RawShape, raw: Mapping[str, Any], metadata: Mapping[str, Any]) -> str:
    if role is AgentRole.FLIGHT and not shape.canonical:
        airline = str(metadata.get("airline") or "").strip()
        number = str(metadata.get("flight_number") or "").strip()
        label = f"{airline} {number}".strip()
        return label or _route_address(metadata) or "Flight"
    name = _text(shape.first(raw, "name"))
    if name:
        return name
    fallback = {
        AgentRole.ACCOMMODATION: "Accommodation Option",
        AgentRole.ACTIVITY: "Activity",
        AgentRole.RESTAURANT: "Restaurant",
    }
    return fallback.get(role, f"{role.value} recommendation")


def _describe(
    role: AgentRole, metadata: Mapping[str, Any], price: Price, rating: Rating, address: Optional[str]
) -> str:
    rating_text = f"{rating.score:.1f}/5" if rating.score else "Unrated"
    if role is AgentRole.FLIGHT:
        return (
            f"Flight from {metadata.get('departure_airport', 'Origin')} to "
            f"{metadata.get('arrival_airport', 'Destination')} on "
            f"{metadata.get('departure_date', 'selected date')}. "
            f"{metadata.get('stops', 0)} stop(s), duration {metadata.get('duration', 'unknown')}. "
            f"Fare: {price.currency} {price.amount:.2f}."
        )
    if role is AgentRole.ACCOMMODATION:
        amenities = ", ".join(str(a) for a in metadata.get("amenities", [])[:3]) or "Essential amenities"
        return (
            f"Rated {rating_text}. Key amenities: {amenities}. "
            f"Nightly rate: {price.currency} {price.amount:.2f}."
        )
    if role is AgentRole.RESTAURANT:
        cuisine = metadata.get("cuisine") or "Local"
        where = f" at {address}" if address else ""
        return f"{cuisine} restaurant{where}. Rating: {rating_text}."
    duration = metadata.get("duration")
    duration_text = f" Duration: {duration}." if duration else ""
    return f"Rated {rating_text}.{duration_text}".strip()


# ── Public API ────────────────────────────────────────


def normalize(
    role: AgentRole | str,
    raw: Any,
    defaults: Optional[NormalizationDefaults] = None,
) -> CanonicalRecommendation:
    """Normalize one raw agent item; raises ``NormalizationError`` when no shape fits."""
    role = AgentRole(role)
    defaults = defaults or NormalizationDefaults()
    if isinstance(raw, CanonicalRecommendation):
        raw = raw.model_dump()
    if not isinstance(raw, Mapping):
        raise NormalizationError(f"{role.value} item is not a mapping", fields=["item"])

    shape, missing = resolve_shape(role, raw)
    if shape is None:
        raise NormalizationError(f"No known {role.value} shape matches", fields=missing or ["name"])

    metadata = _role_metadata(role, shape, raw, defaults)
    name = _name(role, shape, raw, metadata)

    price = normalize_price(
        role,
        shape.first(raw, "price"),
        currency=shape.first(raw, "currency"),
        unit=shape.first(raw, "price_unit"),
        run_currency=defaults.currency,
        item_name=name,
    )

    raw_rating = shape.first(raw, "rating")
    rating = Rating(
        score=normalize_rating_score(raw_rating, shape.first(raw, "rating_scale")),
        review_count=_review_count(shape.first(raw, "review_count")),
        source=_text(shape.first(raw, "rating_source")) or "agent",
    )

    item_coordinates = parse_coordinates(shape.first(raw, "coordinates"))
    address = _text(shape.first(raw, "address"))
    if address is None and role is AgentRole.FLIGHT:
        address = _route_address(metadata)
    location = Location(
        address=address,
        city=_text(shape.first(raw, "city")) or defaults.city,
        country=_text(shape.first(raw, "country")) or defaults.country,
        coordinates=item_coordinates or defaults.coordinates,
        place_id=_text(shape.first(raw, "place_id")) or defaults.place_id,
    )

    fallback = heuristic_confidence(
        rating.score, rating.review_count, price.amount, item_coordinates is not None
    )
    confidence = ConfidenceInfo(
        score=normalize_confidence_score(shape.first(raw, "confidence"), fallback),
        reasoning=_text(shape.first(raw, "reasoning")) or f"Generated by {role.value} agent",
    )

    description = _text(shape.first(raw, "description"))
    if description is None and not shape.canonical:
        description = _describe(role, metadata, price, rating, address)

    return CanonicalRecommendation(
        category=role,
        name=name,
        description=description or "",
        price=price,
        rating=rating,
        location=location,
        confidence=confidence,
        category_metadata=metadata,
        external_ids=_external_ids(shape, raw),
        images=_images(shape.first(raw, "images"), name),
    )


def _peek_name(raw: Any) -> Optional[str]:
    if isinstance(raw, CanonicalRecommendation):
        return raw.name
    if isinstance(raw, Mapping):
        for path in ("name", "title", "displayName.text", "hotelName", "flightNumber"):
            value = _text(lookup(raw, path))
            if value:
                return value
    return None


def normalize_batch(
    role: AgentRole | str,
    items: Iterable[Any],
    defaults: Optional[NormalizationDefaults] = None,
) -> NormalizationBatch:
    """Normalize every item; failures become ``ItemError`` entries, the rest proceed."""
    role = AgentRole(role)
    batch = NormalizationBatch()
    for index, item in enumerate(items):
        try:
            batch.records.append(normalize(role, item, defaults))
        except NormalizationError as exc:
            batch.errors.append(
                ItemError(index=index, name=_peek_name(item), fields=tuple(exc.fields), message=str(exc))
            )
        except ValidationError as exc:
            fields = tuple(".".join(str(p) for p in err["loc"]) for err in exc.errors())
            batch.errors.append(
                ItemError(index=index, name=_peek_name(item), fields=fields, message=str(exc))
            )
    if batch.errors:
        _logger.warning("%s: %d of %d items failed normalization", role.value, len(batch.errors), index + 1)
    return batch


__all__ = [
    "NormalizationBatch",
    "NormalizationDefaults",
    "heuristic_confidence",
    "normalize",
    "normalize_batch",
    "normalize_confidence_score",
    "normalize_price",
    "normalize_rating_score",
    "parse_coordinates",
]
