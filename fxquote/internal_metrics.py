from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock
from time import perf_counter

from fxquote.errors import FailureKind


@dataclass
class QuotationMetrics:
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    latency_total_ms: float = 0.0
    latency_max_ms: float = 0.0
    failures: dict[str, int] = field(default_factory=dict)

    def avg_latency_ms(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.latency_total_ms / self.total_requests


class MetricsCollector:
    def __init__(self):
        self._m = QuotationMetrics()
        self._lock = Lock()

    def record_request(self, success: bool, latency_ms: float, cache_hit: bool):
        with self._lock:
            m = self._m
            m.total_requests += 1
            latency_ms = max(latency_ms, 0.0)
            m.latency_total_ms += latency_ms
            m.latency_max_ms = max(m.latency_max_ms, latency_ms)
            if success:
                m.successful_requests += 1
            else:
                m.failed_requests += 1
            if cache_hit:
                m.cache_hits += 1
            else:
                m.cache_misses += 1

    def record_failure(self, kind: FailureKind):
        with self._lock:
            self._m.failures[kind.value] = self._m.failures.get(kind.value, 0) + 1

    def snapshot(self) -> dict[str, float | int | dict]:
        with self._lock:
            m = self._m
            hit_rate = 0.0 if m.total_requests == 0 else (m.cache_hits / m.total_requests)
            return {
                "request_count": m.total_requests,
                "successful_requests": m.successful_requests,
                "failed_requests": m.failed_requests,
                "cache_hits": m.cache_hits,
                "cache_misses": m.cache_misses,
                "cache_hit_rate": round(hit_rate, 4),
                "average_latency_ms": round(m.avg_latency_ms(), 3),
                "max_latency_ms": round(m.latency_max_ms, 3),
                "failures": dict(m.failures),
            }


class RequestTimer:
    """Small helper for request timing."""

    def __init__(self):
        self._started = perf_counter()

    def elapsed_ms(self) -> float:
        return (perf_counter() - self._started) * 1000
