"""
Stand-in for the brapi.dev currency endpoint.
Answers with a fixed USD-BRL payload after a configurable delay.
"""
import asyncio
import logging

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from fxquote.config.settings import settings
from fxquote.main import configure_logging

logger = logging.getLogger(__name__)

MOCK_PAYLOAD = {
    "currency": [
        {
            "fromCurrency": "USD",
            "toCurrency": "BRL",
            "name": "Dólar Americano/Real Brasileiro",
            "high": "5.22",
            "low": "5.162",
            "bidVariation": "0.0454",
            "percentageChange": "0.88",
            "bidPrice": "5.2097",
            "askPrice": "5.2127",
            "updatedAtTimestamp": "1696601423",
            "updatedAtDate": "2023-10-06 11:10:23",
        }
    ]
}


def create_mock_app(delay_ms: int) -> FastAPI:
    app = FastAPI(title="FX Quote Mock Upstream")

    @app.get("/mock")
    async def mock_quote():
        try:
            await asyncio.sleep(delay_ms / 1000)
        except asyncio.CancelledError:
            logger.info("Cancelled by caller")
            raise
        return JSONResponse(MOCK_PAYLOAD)

    return app


def main():
    configure_logging(settings.log_level)
    logger.info(f"Mock upstream answering after {settings.mock_delay_ms} ms")
    uvicorn.run(
        create_mock_app(settings.mock_delay_ms),
        host=settings.mock_host,
        port=settings.mock_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
