from __future__ import annotations

import asyncio
from typing import Callable, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from fxquote.database import session_scope
from fxquote.deadline import Deadline
from fxquote.errors import CacheError, FailureKind
from fxquote.models import CurrencyQuote
from fxquote.schemas.quote import Quote

T = TypeVar("T")


class QuoteCache:
    """Durable one-quote-per-bucket store.

    Every call runs under its own short budget, clamped to the caller's
    deadline. No row for a bucket is a plain ``None``; anything that goes
    wrong talking to the store raises CacheError.
    """

    def __init__(self, session_factory: sessionmaker, timeout_seconds: float):
        self.session_factory = session_factory
        self.timeout_seconds = timeout_seconds

    async def _bounded(self, fn: Callable[[], T], kind: FailureKind, parent: Deadline | None) -> T:
        deadline = Deadline.within(self.timeout_seconds, parent)
        if deadline.expired:
            raise CacheError(kind, "deadline already elapsed before store access")
        try:
            return await asyncio.wait_for(asyncio.to_thread(fn), timeout=deadline.remaining())
        except asyncio.TimeoutError as exc:
            raise CacheError(kind, "store access exceeded its deadline") from exc
        except SQLAlchemyError as exc:
            raise CacheError(kind, f"store error: {exc}") from exc

    def _lookup(self, bucket_key: str) -> Quote | None:
        with session_scope(self.session_factory) as session:
            row = session.execute(
                select(CurrencyQuote)
                .where(CurrencyQuote.quote_date == bucket_key)
                .order_by(CurrencyQuote.id)
                .limit(1)
            ).scalar_one_or_none()
            if row is None:
                return None
            return Quote(bucket_key=row.quote_date, value=row.value, raw_text=f"{row.value:.4f}")

    def _insert(self, bucket_key: str, value: float):
        with session_scope(self.session_factory) as session:
            session.add(CurrencyQuote(quote_date=bucket_key, value=value))

    async def get(self, bucket_key: str, deadline: Deadline | None = None) -> Quote | None:
        return await self._bounded(lambda: self._lookup(bucket_key), FailureKind.CACHE_LOOKUP_FAILED, deadline)

    async def put(self, bucket_key: str, value: float, deadline: Deadline | None = None):
        await self._bounded(lambda: self._insert(bucket_key, value), FailureKind.CACHE_PERSIST_FAILED, deadline)
