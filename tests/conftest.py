from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import duckdb
import pytest

from transcript_search.errors import ProviderError


QUERY_VECTOR = [1.0, 0.0, 0.0]


def make_row(
    similarity: float,
    *,
    id: int = 1,
    episode_title: str = "Episode 1",
    segment_text: str = "segment text",
    start_time: float = 0.0,
    end_time: float = 5.0,
) -> dict[str, Any]:
    return {
        "id": id,
        "episode_title": episode_title,
        "segment_text": segment_text,
        "start_time": start_time,
        "end_time": end_time,
        "similarity": similarity,
    }


class FakeStore:
    """In-memory stand-in for TranscriptStore that records every call.

    ``responses`` are consumed in order by ``fetch_rows``; an exception
    instance is raised instead of returned.
    """

    def __init__(
        self,
        *,
        embedding_count: int = 3,
        has_index: bool = False,
        responses: list[Any] | None = None,
    ) -> None:
        self.embedding_count = embedding_count
        self.has_index = has_index
        self.responses = list(responses or [])
        self.calls: list[tuple[str, Any]] = []
        self.queries: list[tuple[str, list[Any]]] = []

    def ping(self) -> None:
        self.calls.append(("ping", None))

    def count_embeddings(self) -> int:
        self.calls.append(("count_embeddings", None))
        return self.embedding_count

    def index_exists(self, name: str) -> bool:
        self.calls.append(("index_exists", name))
        return self.has_index

    def fetch_rows(self, sql: str, params: list[Any]) -> list[dict[str, Any]]:
        self.calls.append(("fetch_rows", sql))
        self.queries.append((sql, params))
        response = self.responses.pop(0) if self.responses else []
        if isinstance(response, Exception):
            raise response
        return response


class FakeEmbedder:
    """Returns a fixed vector, or raises ProviderError when ``fail`` is set."""

    def __init__(self, vector: list[float] | None = None, *, fail: bool = False) -> None:
        self.vector = vector or list(QUERY_VECTOR)
        self.fail = fail
        self.calls: list[str] = []

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.fail:
            raise ProviderError("Failed to generate embedding: Voyage API error: 500 boom")
        return list(self.vector)


TRANSCRIPTS = [
    (1, "Episode 1", "We talked about Rust ownership.", 0.0, 12.5),
    (2, "Episode 1", "Then we moved on to garbage collection.", 12.5, 30.0),
    (3, "Episode 2", "A deep dive into Python typing.", 0.0, 20.0),
    (4, "Episode 2", "Closing thoughts and listener mail.", 20.0, 41.0),
]

# Cosine similarity to QUERY_VECTOR: 1.0, ~0.707, 0.0, ~0.894
VECTORS = {
    1: [1.0, 0.0, 0.0],
    2: [1.0, 1.0, 0.0],
    3: [0.0, 1.0, 0.0],
    4: [2.0, 1.0, 0.0],
}


def build_database(
    db_path: Path,
    *,
    encoding: str,
    with_embeddings: bool = True,
    transcripts: list[tuple[Any, ...]] | None = None,
    orphan: bool = False,
    index_name: str | None = None,
) -> str:
    """Create a transcript database on disk and return its path.

    ``encoding`` is one of ``json_object``, ``json_array`` or ``native``.
    """
    conn = duckdb.connect(str(db_path))
    embedding_type = "FLOAT[3]" if encoding == "native" else "VARCHAR"
    conn.execute(
        """
        CREATE TABLE transcripts (
            id INTEGER PRIMARY KEY,
            episode_title VARCHAR NOT NULL,
            segment_text VARCHAR NOT NULL,
            start_time DOUBLE NOT NULL,
            end_time DOUBLE NOT NULL
        )
        """
    )
    conn.execute(
        f"""
        CREATE TABLE embeddings (
            id INTEGER PRIMARY KEY,
            transcript_id INTEGER NOT NULL,
            embedding {embedding_type} NOT NULL
        )
        """
    )
    conn.executemany(
        "INSERT INTO transcripts VALUES (?, ?, ?, ?, ?)",
        transcripts if transcripts is not None else TRANSCRIPTS,
    )

    if with_embeddings:
        vectors = dict(VECTORS)
        if orphan:
            # points at a transcript that does not exist
            vectors[99] = [1.0, 0.0, 0.0]
        rows = []
        for row_id, (transcript_id, vector) in enumerate(vectors.items(), start=1):
            if encoding == "json_object":
                value: Any = json.dumps({"vector": vector, "model": "voyage-01"})
            elif encoding == "json_array":
                value = json.dumps(vector)
            else:
                value = vector
            rows.append((row_id, transcript_id, value))
        conn.executemany("INSERT INTO embeddings VALUES (?, ?, ?)", rows)

    if index_name is not None:
        # Capability probing only checks the catalog by name.
        conn.execute(f"CREATE INDEX {index_name} ON embeddings (transcript_id)")

    conn.close()
    return str(db_path)


@pytest.fixture()
def fake_embedder() -> FakeEmbedder:
    return FakeEmbedder()
