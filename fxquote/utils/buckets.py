from __future__ import annotations

from datetime import datetime, timezone

from fxquote.config.settings import BucketGranularity

_FORMATS = {
    BucketGranularity.DAY: "%Y-%m-%d",
    BucketGranularity.MINUTE: "%Y-%m-%d %H:%M",
}


def bucket_key(granularity: BucketGranularity, now: datetime | None = None) -> str:
    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    return current.astimezone(timezone.utc).strftime(_FORMATS[granularity])
