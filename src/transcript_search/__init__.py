"""
TranscriptSearch - vector similarity search over podcast transcripts.

This package embeds a natural-language question with the Voyage API and
ranks stored transcript segments by cosine similarity in DuckDB, choosing
the query strategy from what the store supports: no embeddings yet, a
vector index, or unindexed embeddings of unknown encoding.

Example usage:
    >>> from transcript_search import SearchConfig, TranscriptSearchService
    >>> service = TranscriptSearchService.from_config(SearchConfig.from_env())
    >>> outcome = service.search("what did they say about rust?", limit=5)
    >>> print(outcome.to_text())
"""

from .config import SearchConfig
from .embeddings import EmbeddingProvider, VoyageEmbeddingClient
from .errors import (
    ConfigError,
    ErrorCode,
    MethodNotFoundError,
    ProviderError,
    ResolverError,
    TranscriptSearchError,
    ValidationError,
)
from .models import SEARCH_TOOL_NAME, SearchRequest
from .search import Capability, EmbeddingEncoding, SearchOutcome, SearchResult
from .service import TranscriptSearchService
from .storage import DuckDBTranscriptStore

__all__ = [
    # Service
    "TranscriptSearchService",
    "SearchConfig",
    "SearchRequest",
    "SEARCH_TOOL_NAME",
    # Collaborators
    "DuckDBTranscriptStore",
    "EmbeddingProvider",
    "VoyageEmbeddingClient",
    # Results
    "Capability",
    "EmbeddingEncoding",
    "SearchOutcome",
    "SearchResult",
    # Errors
    "ConfigError",
    "ErrorCode",
    "MethodNotFoundError",
    "ProviderError",
    "ResolverError",
    "TranscriptSearchError",
    "ValidationError",
]
