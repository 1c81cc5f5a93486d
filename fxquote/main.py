"""
Main application entry point.
Builds the FastAPI app and serves it with uvicorn.
"""
import logging
import sys

import uvicorn

from fxquote.api.routes import create_app
from fxquote.config.settings import settings


def configure_logging(level: str):
    # Configure logging for stdout/stderr collectors
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )


logger = logging.getLogger(__name__)


def main():
    """Run the application."""
    configure_logging(settings.log_level)
    logger.info(
        "Configuration loaded",
        extra={
            "host": settings.host,
            "port": settings.port,
            "upstream_url": settings.upstream_url,
            "request_timeout_ms": settings.request_timeout_ms,
            "database_timeout_ms": settings.database_timeout_ms,
            "bucket_granularity": settings.bucket_granularity.value,
        },
    )

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        lifespan="on",
        access_log=True,
    )


if __name__ == "__main__":
    main()
