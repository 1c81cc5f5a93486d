from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from fxquote.cache.quote_cache import QuoteCache
from fxquote.config.settings import Settings
from fxquote.deadline import Deadline
from fxquote.errors import CacheError
from fxquote.internal_metrics import MetricsCollector, RequestTimer
from fxquote.schemas.quote import FetchOutcome, QuoteSource, WireReply
from fxquote.services.formatter import format_outcome
from fxquote.upstream.base import QuoteFetcher
from fxquote.utils.buckets import bucket_key

logger = logging.getLogger(__name__)


class QuotationService:
    """Serve the current bucket's quote from cache, or fetch and record it.

    Within one call the order is fixed: cache read, upstream fetch, cache
    write. Cache failures degrade to an upstream fetch; only upstream
    failures reach the caller.
    """

    def __init__(
        self,
        fetcher: QuoteFetcher,
        cache: QuoteCache,
        settings: Settings,
        metrics: MetricsCollector | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.fetcher = fetcher
        self.cache = cache
        self.settings = settings
        self.metrics = metrics or MetricsCollector()
        self.clock = clock

    def current_bucket(self) -> str:
        return bucket_key(self.settings.bucket_granularity, self.clock() if self.clock else None)

    async def acquire(self, parent: Deadline | None = None) -> FetchOutcome:
        key = self.current_bucket()

        try:
            cached = await self.cache.get(key, parent)
        except CacheError as exc:
            logger.warning(f"Cache lookup failed, fetching upstream: {exc.message}", extra={"bucket": key})
            self.metrics.record_failure(exc.kind)
            cached = None

        if cached is not None:
            return FetchOutcome.success(cached, source=QuoteSource.CACHE)

        fetch_deadline = Deadline.within(self.settings.request_timeout_seconds, parent)
        outcome = await self.fetcher.fetch(
            self.settings.upstream_url,
            self.settings.upstream_token,
            fetch_deadline,
            key,
        )
        if not outcome.ok:
            logger.error(f"Quote acquisition failed: {outcome.cause}", extra={"bucket": key, "kind": outcome.kind.value})
            self.metrics.record_failure(outcome.failure_kind)
            return outcome

        # Write deadline is independent of the request deadline
        try:
            await self.cache.put(key, outcome.quote.value)
        except CacheError as exc:
            logger.warning(f"Cache persist failed: {exc.message}", extra={"bucket": key})
            self.metrics.record_failure(exc.kind)

        return outcome

    async def handle(self, parent: Deadline | None = None) -> WireReply:
        timer = RequestTimer()
        outcome = await self.acquire(parent)
        reply = format_outcome(outcome)
        self.metrics.record_request(
            success=outcome.ok,
            latency_ms=timer.elapsed_ms(),
            cache_hit=reply.cache_hit,
        )
        return reply
