"""
DuckDB storage backend for transcript search.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import duckdb

from ..config import MOTHERDUCK_PREFIX
from .base import EmbeddingRecord, EncodingMismatchError, StoreError, TranscriptSegment

logger = logging.getLogger(__name__)

# Raised by DuckDB when a stored value cannot be read with the requested shape.
_ENCODING_ERRORS: tuple[type[Exception], ...] = (
    duckdb.ConversionException,
    duckdb.BinderException,
    duckdb.InvalidInputException,
    duckdb.TypeMismatchException,
)


class DuckDBTranscriptStore:
    """DuckDB-backed access to transcripts and their embeddings."""

    def __init__(
        self,
        db_url: str,
        *,
        auth_token: str | None = None,
        read_only: bool = False,
        extensions: tuple[str, ...] = (),
        initialize: bool = False,
    ) -> None:
        # DuckDB refuses read-only in-memory databases.
        self.read_only = read_only and db_url != ":memory:"
        self.db_url = self._normalize_url(db_url, create_parent=not self.read_only)

        config: dict[str, Any] = {}
        if self.db_url.startswith(MOTHERDUCK_PREFIX) and auth_token:
            config["motherduck_token"] = auth_token

        try:
            self._conn = duckdb.connect(self.db_url, read_only=self.read_only, config=config)
            for extension in extensions:
                logger.debug("Loading DuckDB extension %s", extension)
                self._conn.execute(f"LOAD {extension}")
        except duckdb.Error as exc:
            raise StoreError(f"Failed to open database {self.db_url}: {exc}") from exc

        logger.info("Connected to %s (read_only=%s)", self.db_url, self.read_only)
        if initialize and not self.read_only:
            self.initialize()

    @staticmethod
    def _normalize_url(db_url: str, *, create_parent: bool) -> str:
        if db_url == ":memory:" or db_url.startswith(MOTHERDUCK_PREFIX):
            return db_url
        path = Path(db_url).expanduser().resolve()
        if create_parent:
            path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)

    def close(self) -> None:
        """Close the underlying DuckDB connection."""
        self._conn.close()

    def initialize(self, *, embedding_type: str = "VARCHAR") -> None:
        """Create the transcripts and embeddings tables if they are missing."""
        self.execute(
            """
            CREATE TABLE IF NOT EXISTS transcripts (
                id INTEGER PRIMARY KEY,
                episode_title VARCHAR NOT NULL,
                segment_text VARCHAR NOT NULL,
                start_time DOUBLE NOT NULL,
                end_time DOUBLE NOT NULL
            );
            """
        )
        self.execute(
            f"""
            CREATE TABLE IF NOT EXISTS embeddings (
                id INTEGER PRIMARY KEY,
                transcript_id INTEGER NOT NULL REFERENCES transcripts(id),
                embedding {embedding_type} NOT NULL
            );
            """
        )

    def execute(self, sql: str, params: list[Any] | None = None) -> None:
        """Run a statement that returns no rows."""
        try:
            with self._conn.cursor() as cursor:
                cursor.execute(sql, params or [])
        except duckdb.Error as exc:
            raise StoreError(str(exc)) from exc

    def add_segments(self, segments: list[TranscriptSegment]) -> int:
        """Insert transcript segments, returning the number written."""
        rows = [
            (s.id, s.episode_title, s.segment_text, s.start_time, s.end_time)
            for s in segments
        ]
        self._executemany("INSERT INTO transcripts VALUES (?, ?, ?, ?, ?)", rows)
        return len(rows)

    def add_embeddings(self, records: list[EmbeddingRecord]) -> int:
        """Insert embedding rows as given; the column type decides the encoding."""
        rows = [(r.id, r.transcript_id, r.embedding) for r in records]
        self._executemany("INSERT INTO embeddings VALUES (?, ?, ?)", rows)
        return len(rows)

    def _executemany(self, sql: str, rows: list[tuple[Any, ...]]) -> None:
        if not rows:
            return
        try:
            with self._conn.cursor() as cursor:
                cursor.executemany(sql, rows)
        except duckdb.Error as exc:
            raise StoreError(str(exc)) from exc

    def ping(self) -> None:
        self.fetch_rows("SELECT 1 AS ok", [])

    def count_embeddings(self) -> int:
        rows = self.fetch_rows("SELECT COUNT(*) AS count FROM embeddings", [])
        return int(rows[0]["count"]) if rows else 0

    def index_exists(self, name: str) -> bool:
        rows = self.fetch_rows(
            "SELECT index_name FROM duckdb_indexes() WHERE index_name = ?",
            [name],
        )
        return len(rows) > 0

    def fetch_rows(self, sql: str, params: list[Any]) -> list[dict[str, Any]]:
        # One cursor per call so request threads never share query state.
        try:
            with self._conn.cursor() as cursor:
                cursor.execute(sql, params)
                columns = [column[0] for column in cursor.description]
                rows = cursor.fetchall()
        except _ENCODING_ERRORS as exc:
            raise EncodingMismatchError(str(exc)) from exc
        except duckdb.Error as exc:
            raise StoreError(str(exc)) from exc
        return [dict(zip(columns, row)) for row in rows]
