"""
SQL builders for the similarity scoring strategies.

Every scoring query joins ``embeddings`` to ``transcripts`` with an inner
join, so embedding rows whose transcript is missing never produce a result.
Similarity is ``1 - array_cosine_distance(stored, query)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


SENTINEL_SIMILARITY = 0.95
INDEX_OVERFETCH_FACTOR = 2


class EmbeddingEncoding(str, Enum):
    """Known on-disk encodings of the ``embeddings.embedding`` column."""

    JSON_OBJECT_VECTOR = "json_object_vector"
    JSON_ARRAY_VECTOR = "json_array_vector"
    NATIVE_VECTOR = "native_vector"


# Order in which encodings are tried when no vector index is present.
UNINDEXED_FALLBACK_CHAIN: tuple[EmbeddingEncoding, ...] = (
    EmbeddingEncoding.JSON_OBJECT_VECTOR,
    EmbeddingEncoding.JSON_ARRAY_VECTOR,
)

_SEGMENT_COLUMNS = "t.id, t.episode_title, t.segment_text, t.start_time, t.end_time"


@dataclass(frozen=True)
class ScoringQuery:
    """A parameterized store query plus a label for logging."""

    label: str
    sql: str
    params: list[Any]


def _vector_type(dim: int) -> str:
    if dim < 1:
        raise ValueError("Query vector must have at least one dimension.")
    return f"FLOAT[{int(dim)}]"


def stored_vector_expr(encoding: EmbeddingEncoding, dim: int) -> str:
    """Return the SQL expression reading ``e.embedding`` as a ``FLOAT[dim]``."""
    vector_type = _vector_type(dim)
    if encoding is EmbeddingEncoding.JSON_OBJECT_VECTOR:
        # A missing $.vector casts '' and fails, rather than scoring NULL.
        return (
            f"CAST(COALESCE(json_extract_string(e.embedding, '$.vector'), '') "
            f"AS {vector_type})"
        )
    if encoding is EmbeddingEncoding.JSON_ARRAY_VECTOR:
        return f"CAST(e.embedding AS {vector_type})"
    if encoding is EmbeddingEncoding.NATIVE_VECTOR:
        return "e.embedding"
    raise ValueError(f"Unsupported embedding encoding: {encoding!r}")


def build_sentinel_query(*, limit: int) -> ScoringQuery:
    """Up to ``limit`` segments in table order with the fixed sentinel similarity."""
    sql = f"""
        SELECT
            {_SEGMENT_COLUMNS},
            CAST(? AS DOUBLE) AS similarity
        FROM transcripts t
        ORDER BY t.id
        LIMIT ?
    """
    return ScoringQuery(
        label="sentinel",
        sql=sql,
        params=[SENTINEL_SIMILARITY, limit],
    )


def build_indexed_query(
    query_vector: list[float],
    *,
    limit: int,
    min_score: float,
) -> ScoringQuery:
    """
    Nearest-neighbour search over the native vector column.

    The inner ``ORDER BY distance LIMIT k`` is the shape the HNSW index
    serves. It fetches ``2 * limit`` candidates because the index ranks by
    distance and knows nothing about ``min_score``.
    """
    vector_type = _vector_type(len(query_vector))
    sql = f"""
        WITH vector_search AS (
            SELECT
                e.id,
                e.transcript_id,
                1 - array_cosine_distance(e.embedding, CAST(? AS {vector_type})) AS similarity
            FROM embeddings e
            ORDER BY array_cosine_distance(e.embedding, CAST(? AS {vector_type}))
            LIMIT ?
        )
        SELECT
            {_SEGMENT_COLUMNS},
            vs.similarity
        FROM vector_search vs
        JOIN transcripts t ON vs.transcript_id = t.id
        WHERE vs.similarity >= ?
        ORDER BY vs.similarity DESC, t.id ASC
        LIMIT ?
    """
    return ScoringQuery(
        label=EmbeddingEncoding.NATIVE_VECTOR.value,
        sql=sql,
        params=[
            list(query_vector),
            list(query_vector),
            limit * INDEX_OVERFETCH_FACTOR,
            min_score,
            limit,
        ],
    )


def build_unindexed_query(
    encoding: EmbeddingEncoding,
    query_vector: list[float],
    *,
    limit: int,
    min_score: float,
) -> ScoringQuery:
    """Full scan scoring every embedding read with the given encoding."""
    dim = len(query_vector)
    vector_expr = stored_vector_expr(encoding, dim)
    sql = f"""
        SELECT
            {_SEGMENT_COLUMNS},
            scored.similarity
        FROM (
            SELECT
                e.transcript_id,
                1 - array_cosine_distance({vector_expr}, CAST(? AS {_vector_type(dim)})) AS similarity
            FROM embeddings e
        ) scored
        JOIN transcripts t ON scored.transcript_id = t.id
        WHERE scored.similarity >= ?
        ORDER BY scored.similarity DESC, t.id ASC
        LIMIT ?
    """
    return ScoringQuery(
        label=encoding.value,
        sql=sql,
        params=[list(query_vector), min_score, limit],
    )
