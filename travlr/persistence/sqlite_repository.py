"""SQLite implementation for trip recommendation records."""

from __future__ import annotations

import json
import sqlite3
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence

from travlr.domain.models import CanonicalRecommendation
from travlr.persistence.models import (
    AgentStatusRecord,
    CreateManyResult,
    PerItemError,
    StoredRecommendation,
    TripRecord,
)
from travlr.shared.exceptions import PersistenceError

_ID_NAMESPACE = uuid.UUID("6f1c8a52-3a4e-4a4f-9d0b-7f2f1c0e9a11")


def _to_json(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), sort_keys=True, default=str)


def _from_json(raw: str | None, default: Any) -> Any:
    if not raw:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return default


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def recommendation_id(trip_id: str, record: CanonicalRecommendation) -> str:
    """Deterministic id: the same record stored twice for a trip maps to one row."""
    payload = _to_json(record.model_dump(mode="json"))
    return str(uuid.uuid5(_ID_NAMESPACE, f"{trip_id}|{record.category.value}|{payload}"))


class SQLiteRecommendationRepository:
    backend = "sqlite"

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)
        self._lock = threading.Lock()
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._init_schema()
        except (OSError, sqlite3.Error) as exc:
            raise PersistenceError(f"cannot open {self._db_path}: {exc}") from exc

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, timeout=5.0)
        conn.execute("PRAGMA journal_mode=WAL;")
        return conn

    @contextmanager
    def _write(self, operation: str) -> Iterator[sqlite3.Connection]:
        try:
            with self._lock, self._connect() as conn:
                yield conn
        except sqlite3.Error as exc:
            raise PersistenceError(f"{operation} failed: {exc}") from exc

    def _init_schema(self) -> None:
        with self._lock, self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS recommendations (
                    rec_id TEXT PRIMARY KEY,
                    trip_id TEXT NOT NULL,
                    category TEXT NOT NULL,
                    name TEXT NOT NULL,
                    payload_json TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS trip_recommendations (
                    trip_id TEXT NOT NULL,
                    category TEXT NOT NULL,
                    rec_id TEXT NOT NULL,
                    position INTEGER NOT NULL,
                    PRIMARY KEY (trip_id, category, rec_id)
                );

                CREATE TABLE IF NOT EXISTS agent_status (
                    trip_id TEXT NOT NULL,
                    agent TEXT NOT NULL,
                    status TEXT NOT NULL,
                    metadata_json TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (trip_id, agent)
                );

                CREATE TABLE IF NOT EXISTS trips (
                    trip_id TEXT PRIMARY KEY,
                    status TEXT NOT NULL,
                    metadata_json TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_recommendations_trip_id ON recommendations(trip_id);
                """
            )

    def create_many(
        self, records: Sequence[CanonicalRecommendation], trip_id: str
    ) -> CreateManyResult:
        result = CreateManyResult()
        created_at = _now()
        with self._write("create_many") as conn:
            for index, record in enumerate(records):
                rec_id = recommendation_id(trip_id, record)
                try:
                    conn.execute(
                        """
                        INSERT OR IGNORE INTO recommendations (
                            rec_id, trip_id, category, name, payload_json, created_at
                        ) VALUES (?, ?, ?, ?, ?, ?)
                        """,
                        (
                            rec_id,
                            trip_id,
                            record.category.value,
                            record.name,
                            _to_json(record.model_dump(mode="json")),
                            created_at,
                        ),
                    )
                except sqlite3.Error as exc:
                    result.per_item_errors.append(
                        PerItemError(index=index, name=record.name, message=str(exc))
                    )
                    continue
                result.inserted_ids.append(rec_id)
        return result

    def append_ids(self, trip_id: str, category: str, ids: Sequence[str]) -> None:
        with self._write("append_ids") as conn:
            row = conn.execute(
                "SELECT COALESCE(MAX(position), -1) FROM trip_recommendations WHERE trip_id=? AND category=?",
                (trip_id, category),
            ).fetchone()
            position = int(row[0]) + 1
            for rec_id in ids:
                cursor = conn.execute(
                    """
                    INSERT OR IGNORE INTO trip_recommendations (trip_id, category, rec_id, position)
                    VALUES (?, ?, ?, ?)
                    """,
                    (trip_id, category, rec_id, position),
                )
                if cursor.rowcount:
                    position += 1

    def set_agent_status(
        self, trip_id: str, agent: str, status: str, metadata: Optional[dict[str, Any]] = None
    ) -> None:
        with self._write("set_agent_status") as conn:
            conn.execute(
                """
                INSERT INTO agent_status (trip_id, agent, status, metadata_json, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(trip_id, agent) DO UPDATE SET
                    status=excluded.status,
                    metadata_json=excluded.metadata_json,
                    updated_at=excluded.updated_at
                """,
                (trip_id, agent, status, _to_json(metadata or {}), _now()),
            )

    def set_trip_status(
        self, trip_id: str, status: str, metadata: Optional[dict[str, Any]] = None
    ) -> None:
        with self._write("set_trip_status") as conn:
            conn.execute(
                """
                INSERT INTO trips (trip_id, status, metadata_json, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(trip_id) DO UPDATE SET
                    status=excluded.status,
                    metadata_json=excluded.metadata_json,
                    updated_at=excluded.updated_at
                """,
                (trip_id, status, _to_json(metadata or {}), _now()),
            )

    def list_recommendations(
        self, trip_id: str, category: Optional[str] = None
    ) -> list[StoredRecommendation]:
        query = """
            SELECT r.rec_id, r.trip_id, r.category, r.name, r.payload_json, r.created_at
            FROM trip_recommendations t
            JOIN recommendations r ON r.rec_id = t.rec_id
            WHERE t.trip_id = ?
        """
        params: list[Any] = [trip_id]
        if category:
            query += " AND t.category = ?"
            params.append(category)
        query += " ORDER BY t.category, t.position"
        with self._lock, self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [
            StoredRecommendation(
                rec_id=row[0],
                trip_id=row[1],
                category=row[2],
                name=row[3],
                payload=_from_json(row[4], {}),
                created_at=row[5],
            )
            for row in rows
        ]

    def get_agent_status(self, trip_id: str, agent: str) -> AgentStatusRecord | None:
        with self._lock, self._connect() as conn:
            row = conn.execute(
                "SELECT status, metadata_json, updated_at FROM agent_status WHERE trip_id=? AND agent=?",
                (trip_id, agent),
            ).fetchone()
        if row is None:
            return None
        return AgentStatusRecord(
            trip_id=trip_id,
            agent=agent,
            status=row[0],
            metadata=_from_json(row[1], {}),
            updated_at=row[2],
        )

    def get_trip(self, trip_id: str) -> TripRecord | None:
        with self._lock, self._connect() as conn:
            row = conn.execute(
                "SELECT status, metadata_json, updated_at FROM trips WHERE trip_id=?",
                (trip_id,),
            ).fetchone()
            id_rows = conn.execute(
                "SELECT category, rec_id FROM trip_recommendations WHERE trip_id=? ORDER BY category, position",
                (trip_id,),
            ).fetchall()
        if row is None:
            return None
        ids: dict[str, list[str]] = {}
        for category, rec_id in id_rows:
            ids.setdefault(category, []).append(rec_id)
        return TripRecord(
            trip_id=trip_id,
            status=row[0],
            metadata=_from_json(row[1], {}),
            recommendation_ids=ids,
            updated_at=row[2],
        )


__all__ = ["SQLiteRecommendationRepository", "recommendation_id"]
