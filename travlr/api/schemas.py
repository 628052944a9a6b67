"""API request/response models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from travlr.orchestration.contracts import TripRequest


class PlanTripRequest(BaseModel):
    trip: TripRequest
    agents: Optional[list[str]] = Field(
        default=None,
        description="Agent subset to run; omitted or empty runs every agent",
    )


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = ""
    agents: list[str] = Field(default_factory=list)
    persistence: str = "noop"
