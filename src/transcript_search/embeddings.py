"""
Embedding provider for query-time semantic search.

Wraps the Voyage embeddings HTTP endpoint: one request per text, no
retries and no caching.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Protocol

import httpx

from .config import DEFAULT_EMBEDDING_MODEL, DEFAULT_EMBEDDING_URL, DEFAULT_TIMEOUT
from .errors import ProviderError

logger = logging.getLogger(__name__)


class EmbeddingProvider(Protocol):
    """Contract for query embedding backends."""

    def embed(self, text: str) -> list[float]:
        """Embed a single text, raising ProviderError on failure."""


class VoyageEmbeddingClient:
    """Generate text embeddings via the Voyage API."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        url: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.model = model or os.getenv(
            "TRANSCRIPT_SEARCH_EMBEDDING_MODEL", DEFAULT_EMBEDDING_MODEL
        )
        self.url = url or os.getenv("TRANSCRIPT_SEARCH_EMBEDDING_URL", DEFAULT_EMBEDDING_URL)
        self.timeout = timeout or DEFAULT_TIMEOUT

        self._api_key = api_key or os.getenv("VOYAGE_API_KEY")
        if client is not None:
            self._client = client
            self._owns_client = False
        else:
            if self._api_key is None:
                raise ValueError(
                    "VOYAGE_API_KEY not found. "
                    "Provide api_key or set the environment variable."
                )
            self._client = httpx.Client(timeout=self.timeout)
            self._owns_client = True

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "VoyageEmbeddingClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def embed(self, text: str) -> list[float]:
        """Embed a single query text and return its vector."""
        logger.info("Generating embedding for: %r", text)
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        try:
            response = self._client.post(
                self.url,
                headers=headers,
                json={"model": self.model, "input": text},
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            raise ProviderError(f"Failed to generate embedding: {exc}") from exc

        if not response.is_success:
            raise ProviderError(
                "Failed to generate embedding: "
                f"Voyage API error: {response.status_code} {response.text}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError(
                "Failed to generate embedding: response body is not JSON"
            ) from exc

        embedding = _extract_embedding(payload)
        logger.debug("Embedding generated with %d dimensions", len(embedding))
        return embedding


def _extract_embedding(payload: Any) -> list[float]:
    """Return ``data[0].embedding`` from a provider payload."""
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, list) or not data:
        raise ProviderError("Failed to generate embedding: response has no data entries")

    first = data[0]
    values = first.get("embedding") if isinstance(first, dict) else None
    if not isinstance(values, list) or not values:
        raise ProviderError("Failed to generate embedding: response has no embedding array")

    # bool is an int subclass; reject it explicitly
    if not all(
        isinstance(value, (int, float)) and not isinstance(value, bool) for value in values
    ):
        raise ProviderError("Failed to generate embedding: embedding contains non-numeric values")
    return [float(value) for value in values]
