"""Storage backends for transcript search."""

from .base import (
    EmbeddingRecord,
    EncodingMismatchError,
    StoreError,
    TranscriptSegment,
    TranscriptStore,
)
from .duckdb import DuckDBTranscriptStore

__all__ = [
    "EmbeddingRecord",
    "EncodingMismatchError",
    "StoreError",
    "TranscriptSegment",
    "TranscriptStore",
    "DuckDBTranscriptStore",
]
