"""Durable scalar key-value store backing rate windows and the cost ledger."""

import contextlib
import logging
import sqlite3
import threading
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)


class KeyValueStore:
    """SQLite-based store of namespaced scalar counters and timestamps.

    Keys follow ``<component>.<horizon>.<metric>``, e.g. ``rate.minute.count``.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA busy_timeout=5000")
            self._conn.execute("PRAGMA synchronous=NORMAL")
            self._init_schema()
        return self._conn

    def _reconnect(self) -> None:
        """Close and discard the current connection so the next access creates a fresh one."""
        if self._conn is not None:
            with contextlib.suppress(Exception):
                self._conn.close()
            self._conn = None

    def _init_schema(self) -> None:
        self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value REAL NOT NULL,
                updated_at TEXT NOT NULL
            );
        """)
        self.conn.commit()

    @property
    def lock(self) -> threading.RLock:
        """Lock callers hold across a read-modify-write of several keys."""
        return self._lock

    def get(self, key: str, default: float = 0.0) -> float:
        """Read a scalar, returning ``default`` when the key has never been written."""
        sql = "SELECT value FROM kv WHERE key = ?"
        with self._lock:
            try:
                row = self.conn.execute(sql, (key,)).fetchone()
            except sqlite3.DatabaseError:
                logger.warning("KeyValueStore: DatabaseError on get, reconnecting")
                self._reconnect()
                row = self.conn.execute(sql, (key,)).fetchone()
        return float(row["value"]) if row else default

    def get_prefix(self, prefix: str) -> dict[str, float]:
        """Return every key starting with ``prefix``."""
        sql = "SELECT key, value FROM kv WHERE substr(key, 1, length(?)) = ? ORDER BY key"
        params = (prefix, prefix)
        with self._lock:
            try:
                rows = self.conn.execute(sql, params).fetchall()
            except sqlite3.DatabaseError:
                logger.warning("KeyValueStore: DatabaseError on get_prefix, reconnecting")
                self._reconnect()
                rows = self.conn.execute(sql, params).fetchall()
        return {row["key"]: float(row["value"]) for row in rows}

    def set(self, key: str, value: float) -> None:
        self.set_many({key: value})

    def set_many(self, values: Mapping[str, float]) -> None:
        """Write several keys in a single transaction."""
        now = datetime.now(UTC).isoformat()
        params = [(key, float(value), now) for key, value in values.items()]
        sql = """
            INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
        """
        with self._lock:
            try:
                with self.conn:
                    self.conn.executemany(sql, params)
            except sqlite3.DatabaseError:
                logger.warning("KeyValueStore: DatabaseError on set_many, reconnecting")
                self._reconnect()
                with self.conn:
                    self.conn.executemany(sql, params)

    def delete_prefix(self, prefix: str) -> None:
        """Remove every key starting with ``prefix``."""
        sql = "DELETE FROM kv WHERE substr(key, 1, length(?)) = ?"
        params = (prefix, prefix)
        with self._lock:
            try:
                with self.conn:
                    self.conn.execute(sql, params)
            except sqlite3.DatabaseError:
                logger.warning("KeyValueStore: DatabaseError on delete_prefix, reconnecting")
                self._reconnect()
                with self.conn:
                    self.conn.execute(sql, params)

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn:
                self._conn.close()
                self._conn = None
