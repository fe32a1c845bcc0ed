"""Classification history and user corrections, for offline accuracy analysis."""

import contextlib
import hashlib
import logging
import sqlite3
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from quillstack.models import ClassificationResult, MisclassificationPattern, NoteType

logger = logging.getLogger(__name__)


class ClassificationLog:
    """SQLite-based log of classifications and their corrections.

    Note text is never stored, only a SHA-256 digest and the length.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None

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
        """Initialize the database schema."""
        self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS classifications (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp TEXT NOT NULL,
                content_hash TEXT NOT NULL,
                content_length INTEGER NOT NULL,
                type TEXT NOT NULL,
                method TEXT NOT NULL,
                confidence REAL NOT NULL,
                prompt_version TEXT,
                corrected_type TEXT,
                corrected_at TEXT
            );
            CREATE INDEX IF NOT EXISTS idx_cls_timestamp ON classifications(timestamp);
            CREATE INDEX IF NOT EXISTS idx_cls_prompt ON classifications(prompt_version);
        """)
        self.conn.commit()

    def _execute(self, sql: str, params: tuple[Any, ...] = (), op: str = "query") -> list[Any]:
        try:
            rows = self.conn.execute(sql, params).fetchall()
        except sqlite3.DatabaseError:
            logger.warning("ClassificationLog: DatabaseError on %s, reconnecting", op)
            self._reconnect()
            rows = self.conn.execute(sql, params).fetchall()
        return rows

    def log_classification(self, text: str, result: ClassificationResult) -> int:
        """Record one classification and return its row id."""
        params = (
            datetime.now(UTC).isoformat(),
            hashlib.sha256(text.encode("utf-8")).hexdigest(),
            len(text),
            result.type.value,
            result.method.value,
            result.confidence,
            result.prompt_version,
        )
        sql = """
            INSERT INTO classifications
                (timestamp, content_hash, content_length, type, method, confidence, prompt_version)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """
        try:
            cursor = self.conn.execute(sql, params)
            self.conn.commit()
        except sqlite3.DatabaseError:
            logger.warning("ClassificationLog: DatabaseError on log_classification, reconnecting")
            self._reconnect()
            cursor = self.conn.execute(sql, params)
            self.conn.commit()
        return int(cursor.lastrowid or 0)

    def log_correction(
        self, classification_id: int, corrected_type: NoteType
    ) -> ClassificationResult | None:
        """Attach a user correction to an earlier classification.

        Returns the manual result now in effect, or None if the id is unknown.
        """
        sql = "UPDATE classifications SET corrected_type = ?, corrected_at = ? WHERE id = ?"
        params = (corrected_type.value, datetime.now(UTC).isoformat(), classification_id)
        try:
            cursor = self.conn.execute(sql, params)
            self.conn.commit()
        except sqlite3.DatabaseError:
            logger.warning("ClassificationLog: DatabaseError on log_correction, reconnecting")
            self._reconnect()
            cursor = self.conn.execute(sql, params)
            self.conn.commit()
        if cursor.rowcount == 0:
            return None
        logger.info("Classification %d corrected to '%s'", classification_id, corrected_type.value)
        return ClassificationResult.manual(corrected_type)

    def get(self, classification_id: int) -> dict[str, Any] | None:
        rows = self._execute(
            "SELECT * FROM classifications WHERE id = ?", (classification_id,), op="get"
        )
        return dict(rows[0]) if rows else None

    def total(self) -> int:
        rows = self._execute("SELECT COUNT(*) AS n FROM classifications", op="total")
        return int(rows[0]["n"])

    def counts_by_method(self) -> dict[str, int]:
        rows = self._execute(
            "SELECT method, COUNT(*) AS n FROM classifications GROUP BY method ORDER BY method",
            op="counts_by_method",
        )
        return {row["method"]: row["n"] for row in rows}

    def correction_rate(self) -> float:
        """Share of logged classifications whose type the user changed."""
        rows = self._execute(
            """
            SELECT COUNT(*) AS total,
                   SUM(CASE WHEN corrected_type IS NOT NULL AND corrected_type != type
                       THEN 1 ELSE 0 END) AS corrected
            FROM classifications
            """,
            op="correction_rate",
        )
        total = rows[0]["total"] or 0
        if total == 0:
            return 0.0
        return (rows[0]["corrected"] or 0) / total

    def misclassification_patterns(self, limit: int = 20) -> list[MisclassificationPattern]:
        """Original -> corrected type pairs, most frequent first."""
        rows = self._execute(
            """
            SELECT type, corrected_type, COUNT(*) AS n
            FROM classifications
            WHERE corrected_type IS NOT NULL AND corrected_type != type
            GROUP BY type, corrected_type
            ORDER BY n DESC, type ASC
            LIMIT ?
            """,
            (limit,),
            op="misclassification_patterns",
        )
        return [
            MisclassificationPattern(
                original=NoteType(row["type"]),
                corrected=NoteType(row["corrected_type"]),
                count=row["n"],
            )
            for row in rows
        ]

    def accuracy_by_prompt_version(self) -> dict[str, float]:
        """Fraction of uncorrected remote classifications, per prompt version."""
        rows = self._execute(
            """
            SELECT prompt_version,
                   COUNT(*) AS total,
                   SUM(CASE WHEN corrected_type IS NULL OR corrected_type = type
                       THEN 1 ELSE 0 END) AS correct
            FROM classifications
            WHERE prompt_version IS NOT NULL
            GROUP BY prompt_version
            ORDER BY prompt_version
            """,
            op="accuracy_by_prompt_version",
        )
        return {row["prompt_version"]: (row["correct"] or 0) / row["total"] for row in rows}

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
