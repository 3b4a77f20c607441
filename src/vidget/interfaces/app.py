"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
import uuid
from collections.abc import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.responses import Response

from vidget import __version__
from vidget.infrastructure.config import AppConfig
from vidget.interfaces.app_state import AppState
from vidget.interfaces.composition import lifespan

log = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def create_app(config: AppConfig) -> FastAPI:
    """Build the app around ``config``.

    Nothing is opened here; the HTTP client, cache and use cases are
    created by ``lifespan()`` when the server starts.
    """
    app = FastAPI(
        title="Vidget",
        description="Douyin share link to watermark-free video resolver",
        version=__version__,
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config
    app.state.ready = False

    from vidget.interfaces.api.douyin.router import router as douyin_router

    app.include_router(douyin_router, prefix="/api/v1")

    @app.get("/api/v1/healthz")
    async def healthz() -> dict[str, str]:
        """Liveness: answers while the process is up."""
        return {"status": "ok", "version": __version__}

    @app.get("/api/v1/readyz")
    async def readyz() -> Response:
        """Readiness: 503 until lifespan startup has wired every resource."""
        if app.state.ready:
            return JSONResponse({"status": "ready"})
        return JSONResponse({"status": "not_ready"}, status_code=503)

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.bind_contextvars(request_id=request_id)
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start) * 1000.0, 2),
                client_host=(request.client.host if request.client else None),
            )
            structlog.contextvars.unbind_contextvars("request_id")

    return app
