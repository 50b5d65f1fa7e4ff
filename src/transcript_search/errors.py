"""
Error taxonomy for transcript search requests.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Stable error codes reported to callers."""

    INVALID_PARAMS = "invalid_params"
    METHOD_NOT_FOUND = "method_not_found"
    INTERNAL_ERROR = "internal_error"


class TranscriptSearchError(Exception):
    """Base class for request-level failures."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(TranscriptSearchError, ValueError):
    """Raised when request parameters are outside the tool contract."""

    code = ErrorCode.INVALID_PARAMS


class MethodNotFoundError(TranscriptSearchError):
    """Raised when an unknown tool is requested."""

    code = ErrorCode.METHOD_NOT_FOUND


class ProviderError(TranscriptSearchError):
    """Raised when embedding generation fails."""


class ResolverError(TranscriptSearchError):
    """Raised when a store query fails after exhausting applicable fallbacks."""


class ConfigError(ValueError):
    """Raised at startup when required configuration is missing or malformed."""
