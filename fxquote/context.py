"""Process-wide collaborators, built once at startup and read-only afterwards."""
from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from fxquote.cache.quote_cache import QuoteCache
from fxquote.config.settings import Settings
from fxquote.database import create_db_engine, init_db, make_session_factory
from fxquote.errors import ConfigurationError
from fxquote.internal_metrics import MetricsCollector
from fxquote.services.quotation_service import QuotationService
from fxquote.upstream.base import QuoteFetcher
from fxquote.upstream.http_fetcher import HttpQuoteFetcher

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    engine: Engine
    cache: QuoteCache
    fetcher: QuoteFetcher
    metrics: MetricsCollector
    service: QuotationService

    async def aclose(self):
        await self.fetcher.aclose()
        self.engine.dispose()


def build_context(
    settings: Settings,
    fetcher: QuoteFetcher | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AppContext:
    """Open the quote store, create its schema and wire the quotation service.

    Raises ConfigurationError when the store cannot be initialized.
    """
    logger.info(f"Opening quote store at {settings.database_url}")
    try:
        engine = create_db_engine(settings)
    except SQLAlchemyError as exc:
        raise ConfigurationError(f"invalid database_url: {exc}") from exc
    try:
        init_db(engine)
    except Exception:
        engine.dispose()
        raise

    cache = QuoteCache(make_session_factory(engine), settings.database_timeout_seconds)
    fetcher = fetcher or HttpQuoteFetcher(transport=transport)
    metrics = MetricsCollector()
    service = QuotationService(fetcher, cache, settings, metrics=metrics)
    return AppContext(
        settings=settings,
        engine=engine,
        cache=cache,
        fetcher=fetcher,
        metrics=metrics,
        service=service,
    )
