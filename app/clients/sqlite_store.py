"""SQLite-backed key-value store with per-key expiry."""

from __future__ import annotations

import sqlite3
import time
from contextlib import closing
from pathlib import Path
from typing import Callable, Optional

from app.clients.kv_store import KeyValueStoreError


class SQLiteKeyValueStore:
    """Persist values in a single table keyed by ``key`` with an expiry column."""

    def __init__(self, db_path: str, clock: Callable[[], float] = time.time) -> None:
        self._db_path = Path(db_path)
        self._clock = clock
        try:
            if self._db_path.parent and not self._db_path.parent.exists():
                self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._ensure_schema()
        except (OSError, sqlite3.Error) as exc:
            raise KeyValueStoreError(
                f"SQLite database {str(self._db_path)!r} could not be opened"
            ) from exc

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with closing(self._connect()) as conn, conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_records (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    expires_at REAL NOT NULL
                )
                """
            )

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        now = self._clock()
        try:
            with closing(self._connect()) as conn, conn:
                conn.execute("DELETE FROM kv_records WHERE expires_at <= ?", (now,))
                conn.execute(
                    """
                    INSERT INTO kv_records (key, value, expires_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        expires_at = excluded.expires_at
                    """,
                    (key, value, now + ttl_seconds),
                )
        except sqlite3.Error as exc:
            raise KeyValueStoreError(f"SQLite write failed for key {key!r}") from exc

    def get(self, key: str) -> Optional[str]:
        try:
            with closing(self._connect()) as conn:
                row = conn.execute(
                    "SELECT value FROM kv_records WHERE key = ? AND expires_at > ?",
                    (key, self._clock()),
                ).fetchone()
        except sqlite3.Error as exc:
            raise KeyValueStoreError(f"SQLite read failed for key {key!r}") from exc
        if not row:
            return None
        return row["value"]


__all__ = ["SQLiteKeyValueStore"]
