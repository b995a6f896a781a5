"""SQLite-backed structured durable cache tier."""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from qp_transformer.cache.base import DurableStore
from qp_transformer.core.exceptions import CacheError

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS search_results (
    cache_key TEXT PRIMARY KEY,
    payload TEXT NOT NULL,
    created_at INTEGER NOT NULL,
    ttl_millis INTEGER NOT NULL,
    original_query TEXT NOT NULL,
    language TEXT NOT NULL,
    "limit" INTEGER NOT NULL,
    kind_filter TEXT NOT NULL
)
"""

_COLUMNS = (
    'cache_key, payload, created_at, ttl_millis, original_query, language, "limit", kind_filter'
)


class SqliteCacheStore(DurableStore):
    """Structured store with one row per cache key.

    Same logical schema as the file store; ``":memory:"`` gives a
    process-local store that still exercises the structured code path.
    """

    kind = "structured"

    def __init__(self, db_path: str | Path = "./data/wikidata-cache.sqlite3") -> None:
        self._path = str(db_path)
        if self._path != ":memory:":
            Path(self._path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(self._path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        with self._lock, self._conn:
            self._conn.execute(_SCHEMA)

    def read(self, key: str) -> dict[str, Any] | None:
        with self._lock:
            row = self._conn.execute(
                f"SELECT {_COLUMNS} FROM search_results WHERE cache_key = ?", (key,)
            ).fetchone()
        if row is None:
            return None
        return self._row_to_record(row)

    def write(self, record: dict[str, Any]) -> None:
        values = (
            record["key"],
            json.dumps(record["payload"], ensure_ascii=False),
            int(record["created_at"]),
            int(record["ttl_millis"]),
            record.get("original_query", ""),
            record.get("language", "en"),
            int(record.get("limit", 0)),
            record.get("kind_filter", "both"),
        )
        with self._lock, self._conn:
            self._conn.execute(
                f"INSERT OR REPLACE INTO search_results ({_COLUMNS}) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                values,
            )

    def remove(self, key: str) -> bool:
        with self._lock, self._conn:
            cursor = self._conn.execute(
                "DELETE FROM search_results WHERE cache_key = ?", (key,)
            )
        return cursor.rowcount > 0

    def purge(self) -> None:
        with self._lock, self._conn:
            self._conn.execute("DELETE FROM search_results")

    def records(self) -> Iterator[tuple[str, dict[str, Any] | None]]:
        with self._lock:
            rows = self._conn.execute(
                f"SELECT {_COLUMNS} FROM search_results ORDER BY created_at"
            ).fetchall()
        for row in rows:
            try:
                yield row["cache_key"], self._row_to_record(row)
            except CacheError:
                yield row["cache_key"], None

    def size_bytes(self) -> int:
        with self._lock:
            row = self._conn.execute(
                "SELECT COALESCE(SUM(LENGTH(payload)), 0) AS total FROM search_results"
            ).fetchone()
        return int(row["total"])

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> dict[str, Any]:
        try:
            payload = json.loads(row["payload"])
        except (TypeError, json.JSONDecodeError) as e:
            raise CacheError(row["cache_key"], "Corrupt cached payload") from e
        return {
            "key": row["cache_key"],
            "payload": payload,
            "created_at": row["created_at"],
            "ttl_millis": row["ttl_millis"],
            "original_query": row["original_query"],
            "language": row["language"],
            "limit": row["limit"],
            "kind_filter": row["kind_filter"],
        }
