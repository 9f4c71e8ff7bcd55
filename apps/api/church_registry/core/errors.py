"""Error handling and exception management.

Provides the API error hierarchy, global exception handlers and the
structured error envelope shared by every endpoint.
"""

from __future__ import annotations

import logging
import traceback
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import DatabaseError, IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from church_registry.core.metrics import emit_error

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base exception for API errors.

    Attributes:
        status_code: HTTP status code
        error_code: Application-specific error code
        message: Human-readable error message
        details: Optional additional error details
    """

    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationAPIError(APIError):
    """Validation error with detailed field information."""

    def __init__(
        self,
        message: str = "Validation error",
        errors: list[dict[str, Any]] | None = None,
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="validation_error",
            message=message,
            details={"errors": errors or []},
        )


class ReferenceAPIError(APIError):
    """A foreign key in the payload or filter does not resolve."""

    def __init__(self, entity: str, identifier: Any, field: str | None = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="invalid_reference",
            message=f"Invalid {entity} ID.",
            details={
                "entity": entity,
                "identifier": str(identifier) if identifier is not None else None,
                "field": field,
            },
        )


class DuplicateError(APIError):
    """A unique field or one-per-member record already exists."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="duplicate",
            message=message,
            details=details or {},
        )


class NotFoundError(APIError):
    """Resource not found error."""

    def __init__(self, resource: str, identifier: str | None = None):
        message = f"{resource} not found"
        if identifier:
            message += f": {identifier}"
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="not_found",
            message=message,
            details={"resource": resource, "identifier": identifier},
        )


class UnauthorizedError(APIError):
    """Missing or invalid credentials."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="unauthorized",
            message=message,
        )


class ForbiddenError(APIError):
    """Role or scope does not permit the operation."""

    def __init__(self, message: str = "Forbidden"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="forbidden",
            message=message,
        )


def error_envelope(
    code: str,
    message: str,
    request_id: str | None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the ``{success, data, message}`` body for a failed request."""
    data: dict[str, Any] = {"code": code, "request_id": request_id}
    if details:
        data["details"] = details
    return {"success": False, "data": data, "message": message}


def format_error_response(
    error: Exception,
    request: Request,
    include_details: bool = False,
) -> dict[str, Any]:
    """Format error response with structured information.

    Args:
        error: The exception that occurred
        request: FastAPI request object
        include_details: Whether to include detailed error information

    Returns:
        Dictionary with error response structure
    """
    request_id = getattr(request.state, "request_id", None)

    if isinstance(error, APIError):
        return error_envelope(
            error.error_code,
            error.message,
            request_id,
            error.details if (error.details or include_details) else None,
        )

    if isinstance(error, (RequestValidationError, ValidationError)):
        errors = [
            {
                "field": ".".join(str(loc) for loc in err.get("loc", [])),
                "message": err.get("msg", "Invalid value"),
                "type": err.get("type", "validation_error"),
            }
            for err in error.errors()
        ]
        return error_envelope(
            "validation_error",
            "Validation failed",
            request_id,
            {"errors": errors},
        )

    details = None
    if include_details:
        details = {"type": type(error).__name__, "message": str(error)}
    return error_envelope(
        "internal_error", "An internal error occurred", request_id, details
    )


def _include_details(request: Request) -> bool:
    return bool(getattr(request.app.state, "debug", False))


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions."""
    request_id = getattr(request.state, "request_id", None)

    logger.warning(
        f"API error: {exc.error_code} - {exc.message}",
        extra={
            "request_id": request_id,
            "error_code": exc.error_code,
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
        },
    )
    emit_error(
        error_code=exc.error_code,
        status_code=exc.status_code,
        path=request.url.path,
        method=request.method,
        request_id=request_id,
    )

    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(
        status_code=exc.status_code,
        content=format_error_response(exc, request, include_details=True),
        headers=headers,
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors as 400s."""
    request_id = getattr(request.state, "request_id", None)

    # Client errors, not bugs
    logger.info(
        f"Validation error: {str(exc)}",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
        },
    )
    emit_error(
        error_code="validation_error",
        status_code=status.HTTP_400_BAD_REQUEST,
        path=request.url.path,
        method=request.method,
        request_id=request_id,
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=format_error_response(exc, request, include_details=True),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Wrap framework HTTP errors (unknown route, bad method) in the envelope."""
    request_id = getattr(request.state, "request_id", None)
    emit_error(
        error_code="http_error",
        status_code=exc.status_code,
        path=request.url.path,
        method=request.method,
        request_id=request_id,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope("http_error", str(exc.detail), request_id),
        headers=getattr(exc, "headers", None),
    )


async def integrity_error_handler(
    request: Request, exc: IntegrityError
) -> JSONResponse:
    """Turn constraint violations that escaped a service into 400s."""
    request_id = getattr(request.state, "request_id", None)

    logger.warning(
        f"Integrity error: {exc.orig}",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
        },
    )
    emit_error(
        error_code="duplicate",
        status_code=status.HTTP_400_BAD_REQUEST,
        path=request.url.path,
        method=request.method,
        request_id=request_id,
    )

    details = None
    if _include_details(request):
        details = {"type": type(exc).__name__, "message": str(exc.orig)}

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_envelope(
            "duplicate",
            "Database integrity constraint violated",
            request_id,
            details,
        ),
    )


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    """Handle database errors."""
    request_id = getattr(request.state, "request_id", None)

    logger.error(
        f"Database error: {str(exc)}",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
        },
        exc_info=True,
    )
    emit_error(
        error_code="database_error",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        path=request.url.path,
        method=request.method,
        request_id=request_id,
    )

    # Don't expose database details in production
    details = None
    if _include_details(request):
        details = {"type": type(exc).__name__, "message": str(exc)}

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope(
            "database_error", "A database error occurred", request_id, details
        ),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    request_id = getattr(request.state, "request_id", None)

    logger.error(
        f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
        },
        exc_info=True,
    )
    emit_error(
        error_code="internal_error",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        path=request.url.path,
        method=request.method,
        request_id=request_id,
    )

    details = None
    if _include_details(request):
        details = {
            "type": type(exc).__name__,
            "message": str(exc),
            "traceback": traceback.format_exc().split("\n"),
        }

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope(
            "internal_error", "An internal error occurred", request_id, details
        ),
    )


def setup_error_handlers(app: FastAPI, debug: bool = False) -> None:
    """Register global exception handlers.

    Args:
        app: FastAPI application instance
        debug: Whether to include detailed error information
    """
    app.state.debug = debug

    # Most specific first
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
