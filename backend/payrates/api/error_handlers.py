"""Error Handlers — global exception handlers for the PayRates API.

Invariants:
    - Every error response uses the same envelope: {"error": {code, message,
      category, severity, ...}}
    - PayRatesError → its own http_status and to_response() envelope
    - RequestValidationError → 400 INVALID_INPUT; message is the first
      failing field's message, details list every failure
    - Anything else → 500 INTERNAL_ERROR without internal details
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from payrates.core.errors import ErrorCategory, ErrorSeverity, PayRatesError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Domain, validation and catch-all handlers, in that order."""
    app.add_exception_handler(PayRatesError, handle_payrates_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


def error_envelope(
    code: str, message: str, category: str, severity: ErrorSeverity, **extra,
) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "category": category,
            "severity": severity.value,
            **extra,
        },
    }


async def handle_payrates_error(request: Request, exc: PayRatesError) -> JSONResponse:
    log = logger.warning if exc.http_status < 500 else logger.error
    log(
        f"{type(exc).__name__}: {exc.message}",
        extra={
            "error_code": exc.code,
            "path": request.url.path,
            "user_id": exc.context.user_id,
        },
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    errors = exc.errors()
    details = [
        {
            "field": ".".join(str(part) for part in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in errors
    ]
    message = details[0]["message"] if details else "Invalid request data"
    logger.warning(
        f"Rejected request body: {message}",
        extra={"error_code": "INVALID_INPUT", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_envelope(
            "INVALID_INPUT", message, ErrorCategory.VALIDATION.value,
            ErrorSeverity.WARNING, details=details,
        ),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception: {exc}",
        extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope(
            "INTERNAL_ERROR", "An unexpected error occurred", "internal",
            ErrorSeverity.CRITICAL,
        ),
    )
