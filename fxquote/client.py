"""
Command-line client.
Fetches one quote from the gateway under a short budget and appends it to a
local file as ``<timestamp>\\t<bidPrice>``.
"""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

import httpx
from pydantic import ValidationError

from fxquote.config.settings import settings
from fxquote.main import configure_logging
from fxquote.schemas.quote import BidPriceSchema

logger = logging.getLogger(__name__)


def fetch_bid_price(url: str, timeout_seconds: float, transport: httpx.BaseTransport | None = None) -> str:
    with httpx.Client(timeout=timeout_seconds, transport=transport) as client:
        response = client.get(url)
    response.raise_for_status()
    return BidPriceSchema.model_validate_json(response.content).bidPrice


def append_quote(path: Path, bid_price: str, now: datetime | None = None):
    stamp = (now or datetime.now()).ctime()
    with path.open("a", encoding="utf-8") as fh:
        fh.write(f"{stamp}\t{bid_price}\n")


def run(url: str, timeout_seconds: float, output: Path, transport: httpx.BaseTransport | None = None) -> int:
    try:
        bid_price = fetch_bid_price(url, timeout_seconds, transport=transport)
    except httpx.TimeoutException:
        logger.error("Error: Timeout while getting quote...")
        return 1
    except httpx.HTTPStatusError as exc:
        logger.error(f"Quote server answered {exc.response.status_code}: {exc.response.text.strip()}")
        return 1
    except httpx.HTTPError as exc:
        logger.error(f"Quote request failed: {exc}")
        return 1
    except ValidationError as exc:
        logger.error(f"Unexpected quote payload: {exc}")
        return 1

    append_quote(output, bid_price)
    logger.info(bid_price)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Fetch the current USD-BRL bid price and log it to a file.")
    parser.add_argument("--url", default=settings.client_server_url)
    parser.add_argument("--timeout-ms", type=int, default=settings.client_timeout_ms)
    parser.add_argument("--output", type=Path, default=Path(settings.client_output_path))
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)
    return run(args.url, args.timeout_ms / 1000, args.output)


if __name__ == "__main__":
    sys.exit(main())
