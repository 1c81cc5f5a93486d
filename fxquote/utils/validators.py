from __future__ import annotations

import json
import math
import re
from typing import Any

from fxquote.errors import MalformedQuoteError

PRICE_FIELDS = ("bidPrice", "bid")
DECIMAL_PATTERN = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def _find_price_field(payload: Any, depth: int = 0) -> Any | None:
    if isinstance(payload, list):
        # Only a list wrapping an object, never a list of lists
        if not payload or not isinstance(payload[0], dict):
            return None
        return _find_price_field(payload[0], depth)

    if not isinstance(payload, dict):
        return None

    for field in PRICE_FIELDS:
        if field in payload:
            return payload[field]

    if depth >= 1:
        return None

    # {"currency": [{...}]} or {"USDBRL": {...}}
    for nested in payload.values():
        if isinstance(nested, (dict, list)):
            found = _find_price_field(nested, depth + 1)
            if found is not None:
                return found
    return None


def extract_bid_price(body: bytes | str) -> tuple[str, float]:
    """Return the upstream bid price as ``(raw_text, value)``.

    Raises MalformedQuoteError when the body is not JSON, the price field is
    absent or empty, or its text is not a finite number.
    """
    try:
        payload = json.loads(body)
    except (ValueError, RecursionError) as exc:
        raise MalformedQuoteError(f"invalid upstream JSON: {exc}") from exc

    raw = _find_price_field(payload)
    if raw is None:
        raise MalformedQuoteError("Could not obtain currency quote: bid price field missing")
    if isinstance(raw, bool) or not isinstance(raw, (str, int, float)):
        raise MalformedQuoteError(f"Could not obtain currency quote: unexpected bid price {raw!r}")

    raw_text = raw if isinstance(raw, str) else json.dumps(raw)
    if not raw_text.strip():
        raise MalformedQuoteError("Could not obtain currency quote: bid price is empty")

    if not DECIMAL_PATTERN.fullmatch(raw_text):
        raise MalformedQuoteError(f"Could not obtain currency quote: bid price {raw_text!r} is not numeric")
    value = float(raw_text)
    if not math.isfinite(value):
        raise MalformedQuoteError(f"Could not obtain currency quote: bid price {raw_text!r} is not finite")
    return raw_text, value
