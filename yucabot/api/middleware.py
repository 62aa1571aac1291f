"""API middleware: CORS, request logging, and error handling.

Also holds the ``RequestValidationError`` handler, so schema failures use the
same ``{"error", "errorType"}`` body as application errors.

Starlette middleware is a stack (last added runs first).  ``create_app``
adds ``ErrorHandlingMiddleware`` before ``RequestLoggingMiddleware``, so the
request log sees the final status code after an application error has been
turned into a JSON response.
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from yucabot.api.schemas import ErrorResponse
from yucabot.utils.errors import (
    ConfigurationError,
    DimensionMismatchError,
    DocumentTooLargeError,
    EmptyInputError,
    ProviderError,
    RequestTimeoutError,
    SearchNotConfiguredError,
    StoreError,
    UnsupportedDocumentError,
    YucaBotError,
)
from yucabot.utils.logging import bind_request_context, clear_request_context, get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

# Checked in order; subclasses must come before their bases.
_STATUS_BY_ERROR: list[tuple[type[YucaBotError], int]] = [
    (EmptyInputError, 422),
    (UnsupportedDocumentError, 415),
    (DocumentTooLargeError, 413),
    (ConfigurationError, 500),
    (DimensionMismatchError, 500),
    (SearchNotConfiguredError, 503),
    (RequestTimeoutError, 504),
    (ProviderError, 502),
    (StoreError, 502),
]


def status_for_error(exc: YucaBotError) -> int:
    """Return the HTTP status an application error maps to (default 500)."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware; all origins are allowed unless a list is given."""
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration.

    A ``request_id`` (taken from the ``X-Request-ID`` header, or generated)
    is bound to the logging context for the whole request and echoed back
    in the response header.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = bind_request_context(request.headers.get(REQUEST_ID_HEADER))
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )
            clear_request_context()


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------

INTERNAL_ERROR_MESSAGE = "Internal server error"


def _error_response(status_code: int, message: str, error_type: str) -> JSONResponse:
    body = ErrorResponse(error=message, error_type=error_type)
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn every exception into ``{"error", "errorType"}`` JSON.

    ``YucaBotError`` subclasses keep their message and class name, with the
    status from :func:`status_for_error`.  Anything else becomes a 500
    ``InternalError`` whose details stay in the server log.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except YucaBotError as exc:
            status_code = status_for_error(exc)
            log = _logger.warning if status_code < 500 else _logger.error
            log(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                status=status_code,
                path=str(request.url.path),
            )
            if isinstance(exc, SearchNotConfiguredError) and exc.hint:
                _logger.error("search_function_missing", hint=exc.hint)
            return _error_response(status_code, exc.message, type(exc).__name__)
        except Exception as exc:  # noqa: BLE001
            _logger.exception(
                "unhandled_error",
                error_type=type(exc).__name__,
                path=str(request.url.path),
            )
            return _error_response(500, INTERNAL_ERROR_MESSAGE, "InternalError")


def _describe_validation_error(err: dict) -> str:
    field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
    return f"{field or 'body'}: {err.get('msg', 'invalid value')}"


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report request-body validation failures in the application error shape."""
    errors = exc.errors()
    details = "; ".join(_describe_validation_error(err) for err in errors)
    _logger.warning(
        "request_validation_failed",
        path=str(request.url.path),
        errors=len(errors),
    )
    return _error_response(422, f"Invalid request: {details}", "ValidationError")
