"""Persistence repository interface and factory."""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, Sequence

from travlr.config.settings import PersistenceSettings, load_settings
from travlr.domain.models import CanonicalRecommendation
from travlr.persistence.models import CreateManyResult
from travlr.persistence.sqlite_repository import SQLiteRecommendationRepository
from travlr.shared.exceptions import PersistenceError

_logger = logging.getLogger("travlr.persistence")


class RecommendationRepository(Protocol):
    backend: str

    def create_many(
        self, records: Sequence[CanonicalRecommendation], trip_id: str
    ) -> CreateManyResult: ...

    def append_ids(self, trip_id: str, category: str, ids: Sequence[str]) -> None: ...

    def set_agent_status(
        self, trip_id: str, agent: str, status: str, metadata: Optional[dict[str, Any]] = None
    ) -> None: ...

    def set_trip_status(
        self, trip_id: str, status: str, metadata: Optional[dict[str, Any]] = None
    ) -> None: ...


class NoopRecommendationRepository:
    backend = "noop"

    def create_many(
        self, records: Sequence[CanonicalRecommendation], trip_id: str
    ) -> CreateManyResult:
        _ = (records, trip_id)
        return CreateManyResult()

    def append_ids(self, trip_id: str, category: str, ids: Sequence[str]) -> None:
        _ = (trip_id, category, ids)

    def set_agent_status(
        self, trip_id: str, agent: str, status: str, metadata: Optional[dict[str, Any]] = None
    ) -> None:
        _ = (trip_id, agent, status, metadata)

    def set_trip_status(
        self, trip_id: str, status: str, metadata: Optional[dict[str, Any]] = None
    ) -> None:
        _ = (trip_id, status, metadata)


def get_recommendation_repository(
    settings: Optional[PersistenceSettings] = None,
) -> RecommendationRepository:
    settings = settings or load_settings().persistence
    if not settings.enabled:
        return NoopRecommendationRepository()
    try:
        return SQLiteRecommendationRepository(settings.db_path)
    except PersistenceError as exc:
        _logger.warning("persistence disabled: %s", exc)
        return NoopRecommendationRepository()


__all__ = [
    "NoopRecommendationRepository",
    "RecommendationRepository",
    "get_recommendation_repository",
]
