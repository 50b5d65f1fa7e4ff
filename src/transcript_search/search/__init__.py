"""Search helpers for stored transcript embeddings."""

from .assembler import NO_RESULTS_MESSAGE, SearchOutcome, SearchResult, assemble
from .capability import Capability, CapabilityProber
from .resolver import Resolution, SimilarityResolver
from .strategies import (
    SENTINEL_SIMILARITY,
    UNINDEXED_FALLBACK_CHAIN,
    EmbeddingEncoding,
    ScoringQuery,
)

__all__ = [
    "NO_RESULTS_MESSAGE",
    "SearchOutcome",
    "SearchResult",
    "assemble",
    "Capability",
    "CapabilityProber",
    "Resolution",
    "SimilarityResolver",
    "SENTINEL_SIMILARITY",
    "UNINDEXED_FALLBACK_CHAIN",
    "EmbeddingEncoding",
    "ScoringQuery",
]
