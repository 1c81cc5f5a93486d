from __future__ import annotations

import asyncio
import logging
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import APIRouter, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from fxquote.config.settings import Settings
from fxquote.context import AppContext, build_context
from fxquote.deadline import Deadline
from fxquote.errors import ConfigurationError
from fxquote.schemas.quote import WireReply
from fxquote.services.quotation_service import QuotationService

logger = logging.getLogger(__name__)
router = APIRouter()

DISCONNECT_POLL_SECONDS = 0.05
MAX_REQUEST_TIMEOUT_MS = 600_000


def error_response(error_code: str, message: str, status_code: int = 400):
    return JSONResponse({"status": "error", "error_code": error_code, "message": message}, status_code=status_code)


def create_app(settings: Settings | None = None, context: AppContext | None = None) -> FastAPI:
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting FX Quote Gateway...")
        try:
            ctx = context or build_context(settings)
        except ConfigurationError as e:
            logger.error(f"Startup failed: {e.message}")
            raise
        app.state.context = ctx
        logger.info("Application started successfully")
        try:
            yield
        finally:
            logger.info("Shutting down FX Quote Gateway...")
            await ctx.aclose()
            logger.info("Shutdown complete")

    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
        response = None
        start = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers["x-request-id"] = request_id
            return response
        finally:
            latency_ms = round((time.perf_counter() - start) * 1000, 2)
            logger.info(
                "request_complete",
                extra={
                    "request_id": request_id,
                    "path": request.url.path,
                    "latency_ms": latency_ms,
                    "status_code": response.status_code if response else 500,
                    "cache_hit": response.headers.get("x-cache-hit") if response else None,
                },
            )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(_: Request, exc: RequestValidationError):
        details = "; ".join(
            f"{'.'.join(str(i) for i in err.get('loc', []))}: {err.get('msg', 'Invalid value')}" for err in exc.errors()
        )
        return error_response("VALIDATION_ERROR", details, status_code=422)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(_: Request, exc: Exception):
        logger.error(f"Unhandled API exception: {exc}", exc_info=True)
        return Response(content="Unexpected server error", status_code=500, media_type="text/plain")

    app.include_router(router)
    return app


@router.get("/health")
def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/metrics")
def all_metrics(request: Request):
    return request.app.state.context.metrics.snapshot()


async def handle_until_disconnected(request: Request, service: QuotationService, parent: Deadline | None) -> WireReply | None:
    """Run the quotation while watching the caller.

    Returns None when the caller went away; the in-flight fetch or cache
    access is cancelled in that case.
    """
    task = asyncio.create_task(service.handle(parent))
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info("Caller disconnected, cancelling quotation")
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                return None
    finally:
        if not task.done():
            task.cancel()


@router.get("/quote")
async def quote(
    request: Request,
    x_request_timeout_ms: int | None = Header(default=None, gt=0, le=MAX_REQUEST_TIMEOUT_MS),
):
    ctx: AppContext = request.app.state.context
    parent = Deadline.after(x_request_timeout_ms / 1000) if x_request_timeout_ms else None
    reply = await handle_until_disconnected(request, ctx.service, parent)
    if reply is None:
        # Nobody is listening; nginx's "client closed request"
        return Response(content="client disconnected", status_code=499, media_type="text/plain")
    return Response(
        content=reply.body,
        status_code=reply.status_code,
        media_type=reply.media_type,
        headers={"x-cache-hit": str(reply.cache_hit).lower()},
    )


@router.get("/cotacao")
async def cotacao(
    request: Request,
    x_request_timeout_ms: int | None = Header(default=None, gt=0, le=MAX_REQUEST_TIMEOUT_MS),
):
    return await quote(request, x_request_timeout_ms)
