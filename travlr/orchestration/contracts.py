"""Caller-facing request/response contracts."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from travlr.domain.enums import TripStatus
from travlr.domain.models import BudgetHints, TravelPreferences, TripCriteria, TripPlan


class TripRequest(BaseModel):
    trip_id: Optional[str] = Field(default=None, min_length=1, max_length=64)
    destination: str = Field(min_length=1, max_length=200)
    destination_country: Optional[str] = None
    origin: Optional[str] = None
    departure_date: dt.date
    return_date: Optional[dt.date] = None
    travelers: int = Field(default=1, ge=1, le=50)
    interests: list[str] = Field(default_factory=lambda: ["cultural", "food"])
    preferences: TravelPreferences = Field(default_factory=TravelPreferences)
    currency: Optional[str] = None
    budget: BudgetHints = Field(default_factory=BudgetHints)

    @model_validator(mode="after")
    def _check_dates(self) -> "TripRequest":
        if self.return_date is not None and self.return_date < self.departure_date:
            raise ValueError("return_date must not be before departure_date")
        return self

    def to_criteria(self) -> TripCriteria:
        return TripCriteria(
            trip_id=self.trip_id,
            destination=self.destination.strip(),
            destination_country=self.destination_country,
            origin=self.origin,
            departure_date=self.departure_date,
            return_date=self.return_date,
            travelers=self.travelers,
            interests=tuple(self.interests),
            preferences=self.preferences,
            currency=self.currency,
            budget=self.budget,
        )


class TripPlanResponse(BaseModel):
    success: bool
    status: TripStatus
    plan: Optional[TripPlan] = None
    executed_at: dt.datetime
    run_id: str = ""
    trip_id: str = ""
    error: Optional[str] = None


__all__ = ["TripPlanResponse", "TripRequest"]
