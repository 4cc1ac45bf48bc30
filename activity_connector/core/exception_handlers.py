"""Global exception handlers for consistent error responses.

This module provides FastAPI exception handlers that intercept all errors
(domain, framework and unexpected) and return one JSON body shape:
``{"error": <title>, "message": <text>, "status": <code>}`` plus
``retryAfterSeconds`` for rate limiting and ``request_id`` for tracing.

Design:
- AppError subclasses -> mapped HTTP status (400, 401, 404, 429)
- Starlette HTTPException / request validation -> same body shape
- Unexpected Exception -> generic 500 (safety net, nothing leaked)
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from activity_connector.core.config import settings
from activity_connector.core.errors import (
    AppError,
    AuthenticationAppError,
    DataNotFoundAppError,
    RateLimitAppError,
    ValidationAppError,
)
from activity_connector.core.logging import get_request_id

logger = logging.getLogger(__name__)

# Checked in order; first isinstance match wins
_ERROR_STATUS: list[tuple[type[AppError], int, str]] = [
    (AuthenticationAppError, 401, "Authentication Failed"),
    (RateLimitAppError, 429, "Rate Limit Exceeded"),
    (DataNotFoundAppError, 404, "Data Not Found"),
    (ValidationAppError, 400, "Bad Request"),
]

_HTTP_TITLES = {
    400: "Bad Request",
    401: "Authentication Failed",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    422: "Unprocessable Entity",
    429: "Rate Limit Exceeded",
}


def error_body(status_code: int, title: str, message: str) -> dict:
    """Build the error payload shared by every handler."""
    body: dict = {"error": title, "message": message, "status": status_code}
    request_id = get_request_id()
    if request_id:
        body["request_id"] = request_id
    return body


def _status_for(exc: AppError) -> tuple[int, str]:
    for error_type, status_code, title in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code, title
    return 500, "Internal Server Error"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with consistent JSON format.

    Routes domain errors to appropriate HTTP status codes:
    - AuthenticationAppError -> 401 Unauthorized
    - RateLimitAppError -> 429 Too Many Requests (+ Retry-After)
    - DataNotFoundAppError -> 404 Not Found
    - ValidationAppError -> 400 Bad Request

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code and error body.
    """
    status_code, title = _status_for(exc)

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "error_details": exc.details,
            "request_path": request.url.path,
            "request_id": get_request_id(),
        },
    )

    body = error_body(status_code, title, exc.message)
    headers: dict[str, str] = {}

    if isinstance(exc, RateLimitAppError):
        body["retryAfterSeconds"] = exc.retry_after_seconds
        headers["Retry-After"] = str(exc.retry_after_seconds)
        if settings.app.rate_limit_include_headers:
            limit = (exc.details or {}).get("limit")
            if limit is not None:
                headers["X-RateLimit-Limit"] = str(limit)
            headers["X-RateLimit-Remaining"] = "0"

    return JSONResponse(status_code=status_code, content=body, headers=headers or None)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework HTTP errors (404 route, 405 method) in the shared shape."""
    title = _HTTP_TITLES.get(exc.status_code, "Error")
    message = exc.detail if isinstance(exc.detail, str) else title
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, title, message),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures (e.g. non-integer ``page``)."""
    fields = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
    logger.info(
        "request_validation_failed",
        extra={"fields": fields, "request_path": request.url.path},
    )
    message = "Invalid request parameters: " + ", ".join(fields) if fields else "Invalid request"
    return JSONResponse(status_code=422, content=error_body(422, _HTTP_TITLES[422], message))


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs detailed information for debugging while returning a generic
    message. No stack traces or exception text reach the client.
    """
    logger.error(
        "unhandled_exception",
        exc_info=exc,
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
    )

    return JSONResponse(
        status_code=500,
        content=error_body(500, "Internal Server Error", "An unexpected error occurred"),
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with FastAPI app.

    Must be called during app initialization, before route registration.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(RequestValidationError)(validation_exception_handler)
    app.exception_handler(Exception)(general_exception_handler)
