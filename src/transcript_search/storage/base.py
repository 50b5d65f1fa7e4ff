"""
Storage interfaces and data models for transcript search.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class TranscriptSegment:
    """A transcript segment written by the ingestion pipeline."""

    id: int
    episode_title: str
    segment_text: str
    start_time: float
    end_time: float


@dataclass(frozen=True)
class EmbeddingRecord:
    """A stored embedding for exactly one transcript segment.

    ``embedding`` is kept as the raw stored value; its encoding is not known
    until a query strategy has interpreted it.
    """

    id: int
    transcript_id: int
    embedding: Any


class StoreError(Exception):
    """Raised when a store query fails."""


class EncodingMismatchError(StoreError):
    """Raised when a query fails because stored values have an unexpected shape."""


class TranscriptStore(Protocol):
    """Protocol for the read operations the search strategies depend on."""

    def ping(self) -> None:
        """Run a trivial query, raising StoreError when the store is unreachable."""

    def count_embeddings(self) -> int:
        """Return the number of rows in the embeddings table."""

    def index_exists(self, name: str) -> bool:
        """Return True if an index with this name is present in the catalog."""

    def fetch_rows(self, sql: str, params: list[Any]) -> list[dict[str, Any]]:
        """Run a parameterized read query and return rows keyed by column name."""
