"""
Similarity resolution against stored embeddings.

Picks the scoring strategy for the probed capability and, when no vector
index exists, walks the encoding fallback chain until one query executes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..errors import ResolverError
from ..storage import EncodingMismatchError, StoreError, TranscriptStore
from .capability import Capability
from .strategies import (
    UNINDEXED_FALLBACK_CHAIN,
    EmbeddingEncoding,
    ScoringQuery,
    build_indexed_query,
    build_sentinel_query,
    build_unindexed_query,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """Raw scored rows plus how they were produced."""

    capability: Capability
    rows: list[dict[str, Any]] = field(default_factory=list)
    encoding: EmbeddingEncoding | None = None


class SimilarityResolver:
    """Execute the scoring strategy that matches the store capability."""

    def __init__(
        self,
        store: TranscriptStore,
        *,
        strict_fallback: bool = False,
        fallback_chain: tuple[EmbeddingEncoding, ...] = UNINDEXED_FALLBACK_CHAIN,
    ) -> None:
        self.store = store
        self.strict_fallback = strict_fallback
        self.fallback_chain = fallback_chain

    def resolve(
        self,
        query_vector: list[float],
        capability: Capability,
        *,
        limit: int,
        min_score: float,
    ) -> Resolution:
        if capability is Capability.EMPTY:
            logger.info("No embeddings found in database, using sentinel query")
            rows = self._run(build_sentinel_query(limit=limit))
            return Resolution(capability=capability, rows=rows)

        if capability is Capability.INDEXED:
            logger.info("Using vector index for search")
            query = build_indexed_query(query_vector, limit=limit, min_score=min_score)
            rows = self._run(query)
            return Resolution(
                capability=capability,
                rows=rows,
                encoding=EmbeddingEncoding.NATIVE_VECTOR,
            )

        return self._resolve_unindexed(query_vector, limit=limit, min_score=min_score)

    def _resolve_unindexed(
        self,
        query_vector: list[float],
        *,
        limit: int,
        min_score: float,
    ) -> Resolution:
        logger.info("No vector index found, trying direct vector comparison")
        failures: list[str] = []
        for encoding in self.fallback_chain:
            query = build_unindexed_query(
                encoding, query_vector, limit=limit, min_score=min_score
            )
            try:
                rows = self.store.fetch_rows(query.sql, query.params)
            except StoreError as exc:
                if self.strict_fallback and not isinstance(exc, EncodingMismatchError):
                    raise ResolverError(
                        f"Database query failed ({encoding.value}): {exc}"
                    ) from exc
                logger.warning(
                    "Query with %s encoding failed, trying next: %s", encoding.value, exc
                )
                failures.append(f"{encoding.value}: {exc}")
                continue

            logger.info("Found %d results with %s encoding", len(rows), encoding.value)
            return Resolution(
                capability=Capability.UNINDEXED,
                rows=rows,
                encoding=encoding,
            )

        raise ResolverError(
            "Database query failed for every embedding encoding: " + "; ".join(failures)
        )

    def _run(self, query: ScoringQuery) -> list[dict[str, Any]]:
        try:
            return self.store.fetch_rows(query.sql, query.params)
        except StoreError as exc:
            raise ResolverError(f"Database query failed ({query.label}): {exc}") from exc
