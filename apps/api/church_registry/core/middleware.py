"""Request id, security header, access log, CORS and gzip middleware."""

from __future__ import annotations

import json
import logging
import re
import time
import uuid
from typing import Callable

from fastapi import Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from church_registry.core.config import settings
from church_registry.core.metrics import emit_http_request

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
# Caller supplied ids end up in every log line for the request.
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

UNLOGGED_PATHS = ("/health", f"{settings.api_prefix}/ping", "/docs", "/openapi.json", "/redoc")


def resolve_request_id(header_value: str | None) -> str:
    if header_value and _REQUEST_ID_PATTERN.match(header_value):
        return header_value
    return uuid.uuid4().hex


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag the request with an id and echo it on the response."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Member and sacrament records must not be framed, sniffed or cached."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if request.url.path.startswith(settings.api_prefix):
            response.headers["Cache-Control"] = "no-store"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000"
        return response


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One JSON access line per request, plus an EMF request metric.

    Query strings are left out of the line: the member search carries names.
    """

    def __init__(self, app, exclude_paths: tuple[str, ...] = UNLOGGED_PATHS):
        super().__init__(app)
        self.exclude_paths = exclude_paths

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if path.startswith(self.exclude_paths):
            return await call_next(request)

        request_id = getattr(request.state, "request_id", "-")
        started = time.perf_counter()
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception:
            logger.exception(
                "Unhandled error on %s %s",
                request.method,
                path,
                extra={"request_id": request_id},
            )
            raise
        finally:
            duration_ms = (time.perf_counter() - started) * 1000
            emit_http_request(
                method=request.method,
                path=path,
                status_code=status_code,
                duration_ms=duration_ms,
                request_id=request_id,
            )
            access = {
                "type": "http_access",
                "request_id": request_id,
                "method": request.method,
                "path": path,
                "status_code": status_code,
                "duration_ms": round(duration_ms, 2),
                "client_host": request.client.host if request.client else None,
            }
            logger.log(
                _level_for(status_code),
                json.dumps(access),
                extra={"request_id": request_id},
            )

        response.headers["X-Process-Time"] = f"{duration_ms:.2f}ms"
        return response


def parse_cors_origins(raw: str) -> list[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def setup_cors(app) -> None:
    """Allow browser calls from ``CORS_ORIGINS``; no origins means no CORS."""
    origins = parse_cors_origins(settings.cors_origins)
    if not origins:
        return
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER, "X-Process-Time"],
    )


def setup_gzip(app) -> None:
    app.add_middleware(GZipMiddleware, minimum_size=1000)
