"""
Store capability probing.
"""

from __future__ import annotations

import logging
from enum import Enum

from ..config import DEFAULT_INDEX_NAME
from ..errors import ResolverError
from ..storage import StoreError, TranscriptStore

logger = logging.getLogger(__name__)


class Capability(str, Enum):
    """How the store can currently be searched."""

    EMPTY = "empty"
    INDEXED = "indexed"
    UNINDEXED = "unindexed"


class CapabilityProber:
    """Classify the store before each search."""

    def __init__(
        self,
        store: TranscriptStore,
        *,
        index_name: str = DEFAULT_INDEX_NAME,
    ) -> None:
        self.store = store
        self.index_name = index_name

    def probe(self) -> Capability:
        """
        Return the current capability of the store.

        The embedding count is checked first so an empty store never pays for
        the catalog lookup. Nothing is cached; the corpus may change between
        requests.
        """
        try:
            total = self.store.count_embeddings()
            logger.info("Total embeddings in database: %d", total)
            if total == 0:
                return Capability.EMPTY

            has_index = self.store.index_exists(self.index_name)
        except StoreError as exc:
            raise ResolverError(f"Database query failed: {exc}") from exc

        logger.info("Vector index %r exists: %s", self.index_name, has_index)
        return Capability.INDEXED if has_index else Capability.UNINDEXED
