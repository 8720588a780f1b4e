"""Entry-point for the ASGI app.

This module constructs the FastAPI instance, wires global middleware,
registers the token routes, and exposes the `app` variable that serverless
hosts import.
"""

from __future__ import annotations

import os
import logging
import traceback
from contextlib import asynccontextmanager
from time import perf_counter
from typing import Any, Awaitable, Callable, Dict

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from codexi import APP_ENV
from codexi.settings import CORS_ALLOW_HEADERS, CORS_ALLOWED_ORIGINS, RATE_LIMIT_DEFAULT
from codexi.utils.errors import ErrorKind, TokenServiceError
from codexi.utils.logger import configure_logging, logger, request_id_ctx

# Rate limiter (IP-based by default)
limiter = Limiter(key_func=get_remote_address, default_limits=[RATE_LIMIT_DEFAULT])

CORS_METHODS = ["GET", "POST", "DELETE", "OPTIONS"]


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Attach request-level context vars for structured logging."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:  # type: ignore[override]
        start = perf_counter()
        request_id = request.headers.get("X-Request-Id", os.urandom(4).hex())
        token = request_id_ctx.set(request_id)
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            duration_ms = (perf_counter() - start) * 1000
            logger.info(
                "request.complete",
                extra={
                    "extra": {
                        "path": request.url.path,
                        "method": request.method,
                        "status_code": status_code,
                        "duration_ms": round(duration_ms, 2),
                    }
                },
            )
            request_id_ctx.reset(token)
        response.headers["X-Request-Id"] = request_id
        return response


@asynccontextmanager
async def _lifespan(app: FastAPI):
    # The hosting layer owns the store client; build one unless injected
    if getattr(app.state, "supabase", None) is None:
        from codexi.utils.dependencies import create_supabase_client  # noqa: WPS433

        app.state.supabase = await create_supabase_client()
    yield


def _preflight_headers() -> Dict[str, str]:
    headers = {
        "Access-Control-Allow-Headers": ", ".join(CORS_ALLOW_HEADERS),
        "Access-Control-Allow-Methods": ", ".join(CORS_METHODS),
    }
    if "*" in CORS_ALLOWED_ORIGINS:
        headers["Access-Control-Allow-Origin"] = "*"
    return headers


def create_app(supabase: Any = None) -> FastAPI:  # noqa: C901
    """Build the application.

    Pass *supabase* to inject a ready client (tests, embedding hosts);
    otherwise one is created from the environment at startup.
    """
    configure_logging()

    app = FastAPI(
        title="CodeXI Personal Token API",
        version="0.1.0",
        docs_url="/docs" if APP_ENV != "production" else None,
        redoc_url=None,
        openapi_url="/openapi.json" if APP_ENV != "production" else None,
        lifespan=_lifespan,
    )
    app.state.supabase = supabase

    # Global middleware
    app.add_middleware(RequestContextMiddleware)
    # Rate limiting middleware (SlowAPI expects limiter via app.state)
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @app.exception_handler(TokenServiceError)
    async def token_service_error(request: Request, exc: TokenServiceError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError):
        fields = [".".join(str(p) for p in err.get("loc", ())[1:]) for err in exc.errors()]
        logger.info("request.invalid", extra={"extra": {"path": request.url.path, "fields": fields}})
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request body"},
        )

    # Global exception handler - logs full tracebacks for any unhandled 500s
    @app.exception_handler(Exception)
    async def log_unhandled_exceptions(request: Request, exc: Exception):
        error_logger = logging.getLogger("uvicorn.error")
        error_logger.error(
            "UNHANDLED %s at %s %s\n%s",
            type(exc).__name__,
            request.method,
            request.url.path,
            "".join(traceback.format_tb(exc.__traceback__)),
        )
        return JSONResponse(
            status_code=TokenServiceError(ErrorKind.internal).status_code,
            content={"error": "Internal server error"},
        )

    # -------------------------------------------------------------------
    # CORS: wildcard by default, env-driven allow-list otherwise
    # -------------------------------------------------------------------

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOWED_ORIGINS,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_ALLOW_HEADERS,
        max_age=600,
    )

    # Non-browser OPTIONS calls still get an empty 200 with the CORS headers
    preflight_headers = _preflight_headers()

    @app.options("/{path:path}", include_in_schema=False)
    async def preflight(path: str) -> Response:  # pylint: disable=unused-variable
        return Response(status_code=status.HTTP_200_OK, headers=preflight_headers)

    # Health check
    @app.get("/")
    async def root() -> Dict[str, str]:  # pylint: disable=unused-variable
        return {"status": "ok"}

    if APP_ENV != "production":
        from codexi.openapi import install_openapi_route  # noqa: WPS433 (runtime import)

        install_openapi_route(app)

    from codexi.routers import tokens_routes  # noqa: WPS433

    app.include_router(tokens_routes.router)

    return app


# The object serverless hosts import
app = create_app()
