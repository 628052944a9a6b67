from __future__ import annotations

import datetime as dt
import logging

import pytest

from travlr.domain.enums import AgentRole, PriceUnit
from travlr.domain.exceptions import NormalizationError
from travlr.domain.models import Coordinates
from travlr.normalization.normalizer import (
    NormalizationDefaults,
    heuristic_confidence,
    normalize,
    normalize_batch,
    normalize_confidence_score,
    normalize_price,
    normalize_rating_score,
    parse_coordinates,
)
from travlr.normalization.shapes import resolve_shape

PARIS_DEFAULTS = NormalizationDefaults(
    currency="EUR",
    city="Paris",
    country="France",
    coordinates=Coordinates(lat=48.8566, lng=2.3522),
    check_in=dt.date(2026, 6, 1),
    check_out=dt.date(2026, 6, 4),
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (4.2, 4.2),
        (9.2, 4.6),
        (85, 4.25),
        (-1, 0.0),
        (250, 5.0),
        ("n/a", 0.0),
        ({"score": 8.0}, 4.0),
    ],
)
def test_rating_scales(raw, expected):
    assert normalize_rating_score(raw) == pytest.approx(expected)


def test_rating_honours_explicit_scale():
    assert normalize_rating_score(3, scale=4) == pytest.approx(3.75)
    assert normalize_rating_score({"score": 7, "max": 7}) == pytest.approx(5.0)


def test_price_variants():
    assert normalize_price(AgentRole.ACTIVITY, 25).amount == 25
    assert normalize_price(AgentRole.ACTIVITY, "12.50").amount == 12.5
    assert normalize_price(AgentRole.ACTIVITY, -4).amount == 0
    assert normalize_price(AgentRole.ACTIVITY, "free").amount == 0

    price = normalize_price(AgentRole.ACCOMMODATION, {"amount": 140, "currency": "eur", "priceType": "per_night"})
    assert price.currency == "EUR"
    assert price.unit is PriceUnit.PER_NIGHT


def test_price_unit_defaults_by_role():
    assert normalize_price(AgentRole.FLIGHT, 100).unit is PriceUnit.TOTAL
    assert normalize_price(AgentRole.ACCOMMODATION, 100).unit is PriceUnit.PER_NIGHT
    assert normalize_price(AgentRole.RESTAURANT, 100, unit="bogus").unit is PriceUnit.PER_PERSON


def test_currency_mismatch_is_logged_not_rejected(caplog):
    with caplog.at_level(logging.WARNING, logger="travlr.normalizer"):
        price = normalize_price(AgentRole.FLIGHT, {"total": "300", "currency": "GBP"}, run_currency="USD")
    assert price.amount == 300
    assert price.currency == "GBP"
    assert "currency mismatch" in caplog.text


def test_confidence_scales():
    assert normalize_confidence_score(0.42, 0.7) == 0.42
    assert normalize_confidence_score(85, 0.7) == 0.85
    assert normalize_confidence_score(500, 0.7) == 1.0
    assert normalize_confidence_score(None, 0.7) == 0.7


def test_heuristic_confidence_caps_at_one():
    assert heuristic_confidence(0, 0, 0, False) == pytest.approx(0.7)
    assert heuristic_confidence(4.5, 500, 20, True) == pytest.approx(1.0)


@pytest.mark.parametrize(
    "raw",
    [
        {"lat": 48.85, "lng": 2.35},
        {"latitude": 48.85, "longitude": 2.35},
        {"lat": 48.85, "lon": 2.35},
        [48.85, 2.35],
    ],
)
def test_coordinate_forms(raw):
    assert parse_coordinates(raw) == Coordinates(lat=48.85, lng=2.35)


def test_out_of_range_coordinates_are_dropped():
    assert parse_coordinates({"lat": 123, "lng": 2}) is None


def test_lodging_listing_normalizes():
    raw = {
        "hotelName": "Hotel Central",
        "pricePerNight": 180,
        "rating": 9.2,
        "reviewCount": 1432,
        "location": {"address": "1 Main Square", "coordinates": {"latitude": 48.8566, "longitude": 2.3522}},
        "amenities": ["wifi", "spa"],
        "bookingId": "BK-1",
    }
    record = normalize("accommodation", raw, PARIS_DEFAULTS)

    assert record.name == "Hotel Central"
    assert record.rating.score == pytest.approx(4.6)
    assert record.price.amount == 180
    assert record.price.currency == "EUR"
    assert record.price.unit is PriceUnit.PER_NIGHT
    assert record.location.city == "Paris"
    assert record.external_ids == {"booking": "BK-1"}
    assert record.category_metadata["check_in"] == "2026-06-01"
    assert record.category_metadata["hotel_type"] == "hotel"
    assert record.confidence.score == pytest.approx(1.0)
    assert record.confidence.reasoning == "Generated by accommodation agent"


def test_flight_offer_synthesizes_route_name_and_address():
    raw = {
        "airline": "Travlr Air",
        "flightNumber": "TA 101",
        "departure": {"airport": "JFK", "date": "2026-06-01"},
        "arrival": {"airport": "CDG"},
        "price": {"total": "420.00"},
        "stops": "0",
    }
    record = normalize(AgentRole.FLIGHT, raw, PARIS_DEFAULTS)

    assert record.name == "Travlr Air TA 101"
    assert record.location.address == "JFK → CDG"
    assert record.price.amount == 420.0
    assert record.category_metadata["stops"] == 0
    assert record.description.startswith("Flight from JFK to CDG")


def test_missing_coordinates_fall_back_to_destination():
    record = normalize(AgentRole.RESTAURANT, {"name": "Bistro", "price": 30}, PARIS_DEFAULTS)
    assert record.location.coordinates == PARIS_DEFAULTS.coordinates


def test_unknown_shape_names_missing_fields():
    with pytest.raises(NormalizationError) as excinfo:
        normalize(AgentRole.FLIGHT, {"price": 10})
    assert excinfo.value.fields
    assert "airline" in excinfo.value.fields


def test_non_mapping_item_is_rejected():
    with pytest.raises(NormalizationError):
        normalize(AgentRole.ACTIVITY, "museum")


def test_canonical_shape_only_for_matching_category():
    canonical = normalize(AgentRole.ACTIVITY, {"name": "Louvre", "price": 17}, PARIS_DEFAULTS)
    shape, _ = resolve_shape(AgentRole.ACTIVITY, canonical.model_dump())
    assert shape.canonical is True
    shape, _ = resolve_shape(AgentRole.RESTAURANT, canonical.model_dump())
    assert shape is None or not shape.canonical


def test_normalization_is_idempotent():
    raw = {
        "displayName": {"text": "Old Town Walking Tour"},
        "formattedAddress": "Old Town, Paris",
        "rating": 4.7,
        "userRatingCount": 2100,
        "price": 25,
        "durationMinutes": 150,
        "location": {"latitude": 48.8656, "longitude": 2.3522},
        "images": ["https://img.example.com/a.jpg"],
    }
    once = normalize(AgentRole.ACTIVITY, raw, PARIS_DEFAULTS)
    twice = normalize(AgentRole.ACTIVITY, once, PARIS_DEFAULTS)
    assert twice == once


def test_batch_collects_item_errors_and_keeps_going():
    batch = normalize_batch(
        AgentRole.ACCOMMODATION,
        [{"name": "Good Hotel", "price": 90}, {"price": 10}, "junk", {"title": "Second", "rate": 70}],
        PARIS_DEFAULTS,
    )
    assert [r.name for r in batch.records] == ["Good Hotel", "Second"]
    assert [e.index for e in batch.errors] == [1, 2]
    assert batch.errors[0].fields == ("name",)


def test_bounds_hold_for_hostile_values():
    record = normalize(
        AgentRole.ACTIVITY,
        {"name": "X", "price": -50, "rating": 999, "confidence": 4000, "reviewCount": "many"},
    )
    assert record.price.amount == 0
    assert 0 <= record.rating.score <= 5
    assert 0 <= record.confidence.score <= 1
    assert record.rating.review_count == 0
