"""Persistence package exports."""

from travlr.persistence.models import CreateManyResult, TripRecord
from travlr.persistence.repository import (
    NoopRecommendationRepository,
    RecommendationRepository,
    get_recommendation_repository,
)
from travlr.persistence.sqlite_repository import SQLiteRecommendationRepository

__all__ = [
    "CreateManyResult",
    "NoopRecommendationRepository",
    "RecommendationRepository",
    "SQLiteRecommendationRepository",
    "TripRecord",
    "get_recommendation_repository",
]
