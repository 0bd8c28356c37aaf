"""FastAPI application for mux_sync: webhook intake, catalog reads and admin actions."""

from __future__ import annotations

from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from muxsync.core.config import get_settings
from muxsync.core.logger import bind_request_context, clear_request_context, get_logger
from muxsync.core.metrics import record_http_request, render_prometheus_metrics
from muxsync.core.observability import init_sentry, sentry_scope
from muxsync.storage.db import load_models
from muxsync.storage.db import test_connection as test_db_connection
from muxsync.sync.router import router as mux_router
from muxsync.videos.router import router as videos_router
from muxsync.webhooks.router import router as webhook_router


REQUEST_ID_HEADER = "x-request-id"
PROMETHEUS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

settings = get_settings()
logger = get_logger("muxsync.api")

app = FastAPI(title=settings.app_name, version=settings.app_version)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
    bind_request_context(request_id=request_id)
    started_at = perf_counter()
    status_code = 500

    try:
        with sentry_scope(request_id=request_id):
            response = await call_next(request)
        status_code = response.status_code
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
    finally:
        if settings.metrics_enabled:
            record_http_request(
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_seconds=perf_counter() - started_at,
            )
        clear_request_context()


@app.on_event("startup")
def on_startup() -> None:
    load_models()
    logger.info(
        "application_startup",
        env=settings.env,
        version=settings.app_version,
        sentry_enabled=init_sentry(),
        metrics_enabled=settings.metrics_enabled,
        mux_api_configured=settings.has_mux_credentials,
        webhook_verify_signature=settings.webhook_verify_signature,
    )
    if not settings.webhook_verify_signature:
        logger.warning("mux_webhook_signature_verification_disabled")


@app.get("/health")
def health() -> JSONResponse:
    """Database reachability decides the status; Mux settings are reported only."""

    db_ok, db_error = test_db_connection()
    current = get_settings()
    return JSONResponse(
        status_code=200 if db_ok else 503,
        content={
            "status": "ok" if db_ok else "degraded",
            "env": current.env,
            "services": {
                "database": {"ok": db_ok, "error": db_error},
                "mux": {
                    "api_configured": current.has_mux_credentials,
                    "webhook_secret_configured": bool(current.mux_webhook_secret),
                    "webhook_verify_signature": current.webhook_verify_signature,
                },
            },
        },
    )


@app.get("/version")
def version() -> dict[str, str]:
    return {"name": settings.app_name, "version": settings.app_version, "env": settings.env}


@app.get("/metrics")
def metrics() -> PlainTextResponse:
    if not settings.metrics_enabled:
        return PlainTextResponse("metrics disabled\n", status_code=404)
    body = render_prometheus_metrics(app_name=settings.app_name, app_version=settings.app_version, env=settings.env)
    return PlainTextResponse(body, media_type=PROMETHEUS_CONTENT_TYPE)


# /mux/webhook must be matched before the parametric /mux/{kind} action routes.
app.include_router(webhook_router)
app.include_router(mux_router)
app.include_router(videos_router)
