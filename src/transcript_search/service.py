"""
Request pipeline: validate, embed, probe, resolve, assemble.
"""

from __future__ import annotations

import logging
from typing import Any

from .config import DEFAULT_INDEX_NAME, SearchConfig
from .embeddings import EmbeddingProvider, VoyageEmbeddingClient
from .errors import MethodNotFoundError, ResolverError
from .models import (
    DEFAULT_LIMIT,
    DEFAULT_MIN_SCORE,
    SEARCH_TOOL_NAME,
    SearchRequest,
    parse_search_request,
    search_tool_definition,
)
from .search import CapabilityProber, SearchOutcome, SimilarityResolver, assemble
from .storage import DuckDBTranscriptStore, StoreError, TranscriptStore

logger = logging.getLogger(__name__)


class TranscriptSearchService:
    """Answer search requests against an injected store and embedding provider."""

    def __init__(
        self,
        store: TranscriptStore,
        embedding_provider: EmbeddingProvider,
        *,
        index_name: str = DEFAULT_INDEX_NAME,
        strict_fallback: bool = False,
    ) -> None:
        self.store = store
        self.embedding_provider = embedding_provider
        self.prober = CapabilityProber(store, index_name=index_name)
        self.resolver = SimilarityResolver(store, strict_fallback=strict_fallback)

    @classmethod
    def from_config(cls, config: SearchConfig) -> "TranscriptSearchService":
        """Build the DuckDB store and the Voyage client described by *config*."""
        store = DuckDBTranscriptStore(
            config.db_url,
            auth_token=config.db_auth_token,
            read_only=config.read_only and not config.is_remote_store,
            extensions=config.extensions,
        )
        embedding_provider = VoyageEmbeddingClient(
            api_key=config.voyage_api_key,
            model=config.embedding_model,
            url=config.embedding_url,
            timeout=config.request_timeout,
        )
        return cls(
            store,
            embedding_provider,
            index_name=config.index_name,
            strict_fallback=config.strict_fallback,
        )

    def close(self) -> None:
        for resource in (self.embedding_provider, self.store):
            close = getattr(resource, "close", None)
            if callable(close):
                close()

    def check_connection(self) -> None:
        """Run a trivial store query, raising ResolverError when it fails."""
        try:
            self.store.ping()
        except StoreError as exc:
            raise ResolverError(f"Database connection failed: {exc}") from exc
        logger.info("Database connection successful")

    def list_tools(self) -> list[dict[str, Any]]:
        return [search_tool_definition()]

    def call_tool(self, name: str, arguments: Any) -> SearchOutcome:
        """Dispatch a tool call by name; only search_embeddings exists."""
        if name != SEARCH_TOOL_NAME:
            raise MethodNotFoundError(f"Unknown tool: {name}")
        return self.run(parse_search_request(arguments))

    def search(
        self,
        question: str,
        *,
        limit: int = DEFAULT_LIMIT,
        min_score: float = DEFAULT_MIN_SCORE,
    ) -> SearchOutcome:
        request = parse_search_request(
            {"question": question, "limit": limit, "min_score": min_score}
        )
        return self.run(request)

    def run(self, request: SearchRequest) -> SearchOutcome:
        """Execute one validated request end to end."""
        logger.info(
            "Searching for: %r with limit: %d, min_score: %s",
            request.question,
            request.limit,
            request.min_score,
        )
        query_vector = self.embedding_provider.embed(request.question)
        logger.info("Generated embedding with %d dimensions", len(query_vector))

        capability = self.prober.probe()
        resolution = self.resolver.resolve(
            query_vector,
            capability,
            limit=request.limit,
            min_score=request.min_score,
        )
        outcome = assemble(resolution, limit=request.limit, min_score=request.min_score)
        logger.info(
            "Found %d results (mode: %s)", len(outcome.results), outcome.capability.value
        )
        return outcome
