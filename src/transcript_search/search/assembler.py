"""
Mapping of scored rows into public search results.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any

from .capability import Capability
from .resolver import Resolution
from .strategies import EmbeddingEncoding


NO_RESULTS_MESSAGE = "No matching transcript segments found."


@dataclass(frozen=True)
class SearchResult:
    """A transcript segment with its similarity to the question."""

    episode_title: str
    segment_text: str
    start_time: float
    end_time: float
    similarity: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SearchOutcome:
    """Final answer for one search request."""

    results: list[SearchResult]
    capability: Capability
    encoding: EmbeddingEncoding | None = None

    @property
    def is_empty(self) -> bool:
        return not self.results

    @property
    def degraded(self) -> bool:
        # No embeddings were compared; similarities are the sentinel value.
        return self.capability is Capability.EMPTY

    def to_dicts(self) -> list[dict[str, Any]]:
        return [result.to_dict() for result in self.results]

    def to_text(self) -> str:
        """JSON array of results, or the explicit no-results message."""
        if self.is_empty:
            return NO_RESULTS_MESSAGE
        return json.dumps(self.to_dicts(), indent=2)


def _row_to_result(row: dict[str, Any]) -> SearchResult:
    return SearchResult(
        episode_title=str(row["episode_title"]),
        segment_text=str(row["segment_text"]),
        start_time=float(row["start_time"]),
        end_time=float(row["end_time"]),
        similarity=float(row["similarity"]),
    )


def assemble(resolution: Resolution, *, limit: int, min_score: float) -> SearchOutcome:
    """
    Build the outcome from resolver rows.

    ``min_score`` is applied to every row except in EMPTY mode, whose sentinel
    similarity bypasses filtering. Row order is kept as the resolver returned
    it; only truncation to ``limit`` is applied on top.
    """
    results = [_row_to_result(row) for row in resolution.rows]
    if resolution.capability is not Capability.EMPTY:
        results = [result for result in results if result.similarity >= min_score]
    return SearchOutcome(
        results=results[: max(limit, 0)],
        capability=resolution.capability,
        encoding=resolution.encoding,
    )
