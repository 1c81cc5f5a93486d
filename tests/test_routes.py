import asyncio

import httpx
from fastapi.testclient import TestClient

from fxquote.api.routes import create_app, handle_until_disconnected
from fxquote.context import build_context

from conftest import insert_row, make_settings, stored_rows


def _client(settings, handler):
    ctx = build_context(settings, transport=httpx.MockTransport(handler))
    return TestClient(create_app(settings, context=ctx)), ctx


def _upstream(bid="5.21", delay=0.0, calls=None):
    async def handler(request):
        if calls is not None:
            calls.append(request)
        if delay:
            await asyncio.sleep(delay)
        return httpx.Response(200, json={"currency": [{"bidPrice": bid}]})

    return handler


def test_quote_fetched_within_budget(tmp_path):
    client, ctx = _client(make_settings(tmp_path, request_timeout_ms=200), _upstream(delay=0.05))
    with client:
        response = client.get("/quote")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    assert response.text == '{"bidPrice": "5.21"}'
    assert response.headers["x-cache-hit"] == "false"
    assert stored_rows(ctx.engine, ctx.service.current_bucket()) == [5.21]


def test_quote_times_out(tmp_path):
    client, ctx = _client(make_settings(tmp_path, request_timeout_ms=200), _upstream(delay=0.5))
    with client:
        response = client.get("/quote")

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("text/plain")
    assert "timeout" in response.text.lower()
    assert stored_rows(ctx.engine, ctx.service.current_bucket()) == []


def test_quote_served_from_cache(tmp_path):
    calls = []
    client, ctx = _client(make_settings(tmp_path), _upstream(calls=calls))
    insert_row(ctx.engine, ctx.service.current_bucket(), 5.1)
    with client:
        response = client.get("/quote")

    assert response.status_code == 200
    assert response.json() == {"bidPrice": "5.1000"}
    assert response.headers["x-cache-hit"] == "true"
    assert calls == []


def test_legacy_path_and_round_trip(tmp_path):
    client, ctx = _client(make_settings(tmp_path), _upstream(bid="5.2097"))
    with client:
        response = client.get("/cotacao")

    assert response.text == '{"bidPrice": "5.2097"}'
    assert stored_rows(ctx.engine, ctx.service.current_bucket()) == [5.2097]


def test_caller_timeout_header(tmp_path):
    client, ctx = _client(make_settings(tmp_path, request_timeout_ms=1000), _upstream(delay=0.3))
    with client:
        response = client.get("/quote", headers={"X-Request-Timeout-Ms": "50"})
        invalid = client.get("/quote", headers={"X-Request-Timeout-Ms": "0"})

    assert response.status_code == 500
    assert "timeout" in response.text.lower()
    assert invalid.status_code == 422
    assert invalid.json()["error_code"] == "VALIDATION_ERROR"


def test_health_and_metrics(tmp_path):
    client, _ = _client(make_settings(tmp_path), _upstream())
    with client:
        health = client.get("/health")
        client.get("/quote")
        client.get("/quote")
        metrics = client.get("/metrics").json()

    assert health.json()["status"] == "ok"
    assert "x-request-id" in health.headers
    assert metrics["request_count"] == 2
    assert metrics["cache_hits"] == 1
    assert metrics["cache_misses"] == 1


class DisconnectingRequest:
    def __init__(self, polls_before_disconnect=1):
        self.polls = 0
        self.polls_before_disconnect = polls_before_disconnect

    async def is_disconnected(self):
        self.polls += 1
        return self.polls > self.polls_before_disconnect


def test_disconnect_cancels_fetch_without_write(tmp_path):
    cancelled = []

    async def handler(request):
        try:
            await asyncio.sleep(1)
        except asyncio.CancelledError:
            cancelled.append(request)
            raise
        return httpx.Response(200, json={"bidPrice": "5.21"})

    ctx = build_context(make_settings(tmp_path, request_timeout_ms=2000), transport=httpx.MockTransport(handler))

    async def scenario():
        try:
            return await handle_until_disconnected(DisconnectingRequest(), ctx.service, None)
        finally:
            await ctx.aclose()

    assert asyncio.run(scenario()) is None
    assert len(cancelled) == 1
    assert stored_rows(ctx.engine, ctx.service.current_bucket()) == []


def test_connected_caller_gets_reply(tmp_path):
    ctx = build_context(make_settings(tmp_path), transport=httpx.MockTransport(_upstream(delay=0.1)))

    async def scenario():
        try:
            return await handle_until_disconnected(DisconnectingRequest(polls_before_disconnect=100), ctx.service, None)
        finally:
            await ctx.fetcher.aclose()

    reply = asyncio.run(scenario())
    assert reply.status_code == 200
    assert reply.body == '{"bidPrice": "5.21"}'


def test_oversized_timeout_header_rejected(tmp_path):
    client, _ = _client(make_settings(tmp_path), _upstream())
    with client:
        response = client.get("/quote", headers={"X-Request-Timeout-Ms": "9" * 400})

    assert response.status_code == 422
    assert response.json()["error_code"] == "VALIDATION_ERROR"
