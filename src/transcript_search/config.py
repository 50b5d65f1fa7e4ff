"""
Process configuration loaded from environment variables.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass

from .errors import ConfigError


ENV_DB_URL = "TRANSCRIPT_SEARCH_DB_URL"
ENV_DB_AUTH_TOKEN = "TRANSCRIPT_SEARCH_DB_AUTH_TOKEN"
ENV_VOYAGE_API_KEY = "VOYAGE_API_KEY"
ENV_EMBEDDING_MODEL = "TRANSCRIPT_SEARCH_EMBEDDING_MODEL"
ENV_EMBEDDING_URL = "TRANSCRIPT_SEARCH_EMBEDDING_URL"
ENV_TIMEOUT = "TRANSCRIPT_SEARCH_TIMEOUT"
ENV_INDEX_NAME = "TRANSCRIPT_SEARCH_INDEX_NAME"
ENV_STRICT_FALLBACK = "TRANSCRIPT_SEARCH_STRICT_FALLBACK"
ENV_READ_ONLY = "TRANSCRIPT_SEARCH_DB_READ_ONLY"
ENV_EXTENSIONS = "TRANSCRIPT_SEARCH_DB_EXTENSIONS"

DEFAULT_EMBEDDING_MODEL = "voyage-01"
DEFAULT_EMBEDDING_URL = "https://api.voyageai.com/v1/embeddings"
DEFAULT_TIMEOUT = 30.0
DEFAULT_INDEX_NAME = "embeddings_vector_idx"

MOTHERDUCK_PREFIX = "md:"

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_TRUE_VALUES = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSE_VALUES = frozenset({"0", "false", "f", "no", "n", "off"})


def _env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _env_float(name: str, default: float) -> float:
    raw = _env(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _env_list(name: str) -> tuple[str, ...]:
    raw = _env(name)
    if raw is None:
        return ()
    items = tuple(item.strip() for item in raw.split(",") if item.strip())
    for item in items:
        if not _IDENTIFIER_RE.match(item):
            raise ConfigError(f"{name} contains an invalid extension name: {item!r}")
    return items


@dataclass(frozen=True)
class SearchConfig:
    """Settings needed to build the store, the provider client and the service."""

    db_url: str
    voyage_api_key: str
    db_auth_token: str | None = None
    embedding_model: str = DEFAULT_EMBEDDING_MODEL
    embedding_url: str = DEFAULT_EMBEDDING_URL
    request_timeout: float = DEFAULT_TIMEOUT
    index_name: str = DEFAULT_INDEX_NAME
    strict_fallback: bool = False
    read_only: bool = True
    extensions: tuple[str, ...] = ()

    @property
    def is_remote_store(self) -> bool:
        return self.db_url.startswith(MOTHERDUCK_PREFIX)

    @classmethod
    def from_env(cls) -> "SearchConfig":
        """
        Build the configuration from the environment.

        The store URL and the Voyage API key are always required; the store
        credential is required when the URL points at a remote (``md:``)
        database. Every missing variable is reported in one error.
        """
        db_url = _env(ENV_DB_URL)
        db_auth_token = _env(ENV_DB_AUTH_TOKEN)
        voyage_api_key = _env(ENV_VOYAGE_API_KEY)

        missing: list[str] = []
        if db_url is None:
            missing.append(ENV_DB_URL)
        elif db_url.startswith(MOTHERDUCK_PREFIX) and db_auth_token is None:
            missing.append(ENV_DB_AUTH_TOKEN)
        if voyage_api_key is None:
            missing.append(ENV_VOYAGE_API_KEY)
        if missing:
            raise ConfigError(
                "Missing required environment variables: " + ", ".join(missing)
            )

        return cls(
            db_url=db_url,
            db_auth_token=db_auth_token,
            voyage_api_key=voyage_api_key,
            embedding_model=_env(ENV_EMBEDDING_MODEL) or DEFAULT_EMBEDDING_MODEL,
            embedding_url=_env(ENV_EMBEDDING_URL) or DEFAULT_EMBEDDING_URL,
            request_timeout=_env_float(ENV_TIMEOUT, DEFAULT_TIMEOUT),
            index_name=_env(ENV_INDEX_NAME) or DEFAULT_INDEX_NAME,
            strict_fallback=_env_bool(ENV_STRICT_FALLBACK, False),
            read_only=_env_bool(ENV_READ_ONLY, True),
            extensions=_env_list(ENV_EXTENSIONS),
        )
