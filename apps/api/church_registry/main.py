"""Main FastAPI application with middleware and logging setup."""

from __future__ import annotations

import json
import logging
import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from church_registry.common.db import Database
from church_registry.core.config import settings
from church_registry.core.errors import setup_error_handlers
from church_registry.core.middleware import (
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
    RequestLoggingMiddleware,
    setup_cors,
    setup_gzip,
)
from church_registry.auth.routes import router as auth_router
from church_registry.weredas.routes import router as weredas_router
from church_registry.parishes.routes import router as parishes_router
from church_registry.members.routes import router as members_router
from church_registry.baptisms.routes import router as baptisms_router
from church_registry.marriages.routes import router as marriages_router
from church_registry.deaths.routes import router as deaths_router

logger = logging.getLogger(__name__)

API_PREFIX = settings.api_prefix


class JSONFormatter(logging.Formatter):
    def format(self, record):
        log_data = {
            "timestamp": time.time(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "request_id": getattr(record, "request_id", None),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class RequestIDFilter(logging.Filter):
    """Give every record a ``request_id`` so the text format never fails."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = "-"
        return True


def setup_logging() -> None:
    """Configure structured JSON (or plain text) logging to stdout."""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.log_format == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        # Human-readable format for dev
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - "
            "[%(request_id)s] - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    stdout_handler.addFilter(RequestIDFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    # Clear existing handlers to avoid duplicates
    root_logger.handlers = []
    root_logger.addHandler(stdout_handler)

    # Set levels for noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    database = Database.from_settings(settings)
    database.connect()
    app.state.database = database
    logger.info("%s started (env=%s)", settings.service_name, settings.app_env)
    try:
        yield
    finally:
        database.dispose()
        logger.info("%s stopped", settings.service_name)


# Setup logging before creating app
setup_logging()

app = FastAPI(
    title=f"{settings.service_name} API",
    version="0.1.0",
    lifespan=lifespan,
)

# Setup error handlers (must be done before routes are added)
setup_error_handlers(app, debug=not settings.is_production)

# Add middleware (order matters - add in reverse order of execution)
# Last added = first executed
app.add_middleware(SecurityHeadersMiddleware)

if settings.enable_request_logging:
    app.add_middleware(RequestLoggingMiddleware)

# Request ID runs before logging so every log line carries it
app.add_middleware(RequestIDMiddleware)

setup_cors(app)

if settings.enable_gzip:
    setup_gzip(app)

# Include routers
app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(weredas_router, prefix=API_PREFIX)
app.include_router(parishes_router, prefix=API_PREFIX)
app.include_router(members_router, prefix=API_PREFIX)
app.include_router(baptisms_router, prefix=API_PREFIX)
app.include_router(marriages_router, prefix=API_PREFIX)
app.include_router(deaths_router, prefix=API_PREFIX)


@app.get("/health")
async def health() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(
        {
            "status": "ok",
            "env": settings.app_env,
            "version": app.version,
        }
    )


@app.get(f"{API_PREFIX}/ping")
async def ping() -> dict:
    """Simple ping endpoint for connectivity checks."""
    return {"message": "pong"}
