from __future__ import annotations

from enum import Enum


class FailureKind(str, Enum):
    CACHE_LOOKUP_FAILED = "CACHE_LOOKUP_FAILED"
    CACHE_PERSIST_FAILED = "CACHE_PERSIST_FAILED"
    UPSTREAM_TIMEOUT = "UPSTREAM_TIMEOUT"
    UPSTREAM_TRANSPORT = "UPSTREAM_TRANSPORT"
    UPSTREAM_MALFORMED = "UPSTREAM_MALFORMED"
    CONFIGURATION = "CONFIGURATION"


class QuoteError(Exception):
    """Base error carrying a closed failure kind."""

    kind: FailureKind

    def __init__(self, kind: FailureKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class CacheError(QuoteError):
    pass


class MalformedQuoteError(QuoteError):
    def __init__(self, message: str):
        super().__init__(FailureKind.UPSTREAM_MALFORMED, message)


class ConfigurationError(QuoteError):
    def __init__(self, message: str):
        super().__init__(FailureKind.CONFIGURATION, message)
