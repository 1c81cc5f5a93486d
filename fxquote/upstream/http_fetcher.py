from __future__ import annotations

import asyncio
import logging

import httpx

from fxquote.deadline import Deadline
from fxquote.errors import MalformedQuoteError
from fxquote.schemas.quote import FetchOutcome, Quote
from fxquote.upstream.base import QuoteFetcher
from fxquote.utils.validators import extract_bid_price

logger = logging.getLogger(__name__)


class HttpQuoteFetcher(QuoteFetcher):
    """Single-shot GET against the upstream quote source, bound to a deadline."""

    def __init__(self, client: httpx.AsyncClient | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            transport=transport,
            follow_redirects=False,
            headers={"User-Agent": "fx-quote-gateway/1.0"},
        )

    async def _get(self, url: str, token: str, deadline: Deadline) -> httpx.Response:
        return await self.client.get(
            url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=deadline.remaining(),
        )

    async def fetch(self, url: str, token: str, deadline: Deadline, bucket_key: str) -> FetchOutcome:
        if deadline.expired:
            return FetchOutcome.deadline_exceeded("deadline elapsed before upstream call")

        try:
            response = await asyncio.wait_for(self._get(url, token, deadline), timeout=deadline.remaining())
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning("upstream_timeout", extra={"url": url})
            return FetchOutcome.deadline_exceeded("upstream deadline exceeded")
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning(f"Upstream transport failure: {exc}", extra={"url": url})
            return FetchOutcome.transport_error(f"upstream request failed: {exc}")

        if not response.is_success:
            return FetchOutcome.transport_error(f"upstream returned HTTP {response.status_code}")

        try:
            raw_text, value = extract_bid_price(response.content)
        except MalformedQuoteError as exc:
            logger.warning(f"Malformed upstream payload: {exc.message}", extra={"url": url})
            return FetchOutcome.malformed(exc.message)

        logger.info(f"Got bid price {raw_text} and parsed it as {value:f}")
        return FetchOutcome.success(Quote(bucket_key=bucket_key, value=value, raw_text=raw_text))

    async def aclose(self):
        if self._owns_client:
            await self.client.aclose()
