from __future__ import annotations

import json

from fxquote.schemas.quote import FetchOutcome, OutcomeKind, QuoteSource, WireReply

_ERROR_PREFIX = {
    OutcomeKind.DEADLINE_EXCEEDED: "Error: timeout while getting quote",
    OutcomeKind.TRANSPORT_ERROR: "Error: upstream unavailable",
    OutcomeKind.MALFORMED_UPSTREAM: "Error: malformed upstream quote",
}


def format_outcome(outcome: FetchOutcome) -> WireReply:
    """Render an acquisition outcome as the HTTP reply.

    Every failure kind maps to a 500; only the message tells them apart.
    """
    if outcome.ok and outcome.quote is not None:
        return WireReply(
            status_code=200,
            body=json.dumps({"bidPrice": outcome.quote.raw_text}),
            media_type="application/json",
            cache_hit=outcome.source == QuoteSource.CACHE,
        )

    prefix = _ERROR_PREFIX.get(outcome.kind, "Error")
    message = f"{prefix}: {outcome.cause}" if outcome.cause else prefix
    return WireReply(status_code=500, body=message, media_type="text/plain")
