from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel

from fxquote.errors import FailureKind


class BidPriceSchema(BaseModel):
    bidPrice: str


@dataclass(frozen=True)
class Quote:
    bucket_key: str
    value: float
    raw_text: str


class QuoteSource(str, Enum):
    CACHE = "cache"
    UPSTREAM = "upstream"


class OutcomeKind(str, Enum):
    SUCCESS = "SUCCESS"
    DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    MALFORMED_UPSTREAM = "MALFORMED_UPSTREAM"


_FAILURE_KINDS = {
    OutcomeKind.DEADLINE_EXCEEDED: FailureKind.UPSTREAM_TIMEOUT,
    OutcomeKind.TRANSPORT_ERROR: FailureKind.UPSTREAM_TRANSPORT,
    OutcomeKind.MALFORMED_UPSTREAM: FailureKind.UPSTREAM_MALFORMED,
}


@dataclass(frozen=True)
class FetchOutcome:
    """Result of one quote acquisition attempt.

    Exactly one of ``quote`` (for SUCCESS) or ``cause`` (for every other
    kind) is set.
    """

    kind: OutcomeKind
    quote: Quote | None = None
    cause: str = ""
    source: QuoteSource = QuoteSource.UPSTREAM

    @classmethod
    def success(cls, quote: Quote, source: QuoteSource = QuoteSource.UPSTREAM) -> "FetchOutcome":
        return cls(kind=OutcomeKind.SUCCESS, quote=quote, source=source)

    @classmethod
    def deadline_exceeded(cls, cause: str = "deadline exceeded") -> "FetchOutcome":
        return cls(kind=OutcomeKind.DEADLINE_EXCEEDED, cause=cause)

    @classmethod
    def transport_error(cls, cause: str) -> "FetchOutcome":
        return cls(kind=OutcomeKind.TRANSPORT_ERROR, cause=cause)

    @classmethod
    def malformed(cls, cause: str) -> "FetchOutcome":
        return cls(kind=OutcomeKind.MALFORMED_UPSTREAM, cause=cause)

    @property
    def ok(self) -> bool:
        return self.kind == OutcomeKind.SUCCESS

    @property
    def failure_kind(self) -> FailureKind | None:
        return _FAILURE_KINDS.get(self.kind)


@dataclass(frozen=True)
class WireReply:
    status_code: int
    body: str
    media_type: str
    cache_hit: bool = False
