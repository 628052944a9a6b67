"""Persistence-layer record schemas."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class PerItemError(BaseModel):
    index: int
    name: Optional[str] = None
    message: str


class CreateManyResult(BaseModel):
    inserted_ids: list[str] = Field(default_factory=list)
    per_item_errors: list[PerItemError] = Field(default_factory=list)


class StoredRecommendation(BaseModel):
    rec_id: str
    trip_id: str
    category: str
    name: str
    payload: dict[str, Any] = Field(default_factory=dict)
    created_at: str


class AgentStatusRecord(BaseModel):
    trip_id: str
    agent: str
    status: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    updated_at: str


class TripRecord(BaseModel):
    trip_id: str
    status: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    recommendation_ids: dict[str, list[str]] = Field(default_factory=dict)
    updated_at: str


__all__ = [
    "AgentStatusRecord",
    "CreateManyResult",
    "PerItemError",
    "StoredRecommendation",
    "TripRecord",
]
