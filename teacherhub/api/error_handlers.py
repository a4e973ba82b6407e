"""Error Handlers — map exceptions raised inside routes to the JSON error envelope.

Invariants:
    - TeacherHubError → its own http_status and to_response() envelope, with the
      request path and method stamped into the error context
    - RequestValidationError → 400 VALIDATION_ERROR with one entry per bad field
    - Any other Exception → 500 INTERNAL_ERROR, details only in the log
    - 4xx logged at WARNING, 5xx at ERROR

Design Decisions:
    - Handlers are plain module functions listed in one table and registered with
      add_exception_handler, so the mapping is visible without reading decorators
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from teacherhub.core.errors import ErrorCategory, ErrorSeverity, TeacherHubError

logger = logging.getLogger(__name__)


def _envelope(code: str, message: str, category: ErrorCategory, **extra) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "category": category.value,
            "severity": ErrorSeverity.ERROR.value,
            **extra,
        },
    }


async def handle_teacherhub_error(request: Request, exc: TeacherHubError) -> JSONResponse:
    exc.context.path = request.url.path
    exc.context.action = exc.context.action or request.method
    log = logger.error if exc.http_status >= 500 else logger.warning
    log(exc.message, extra=exc.log_extra())
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    logger.warning(
        f"Rejected request with {len(details)} invalid field(s)",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(
            "VALIDATION_ERROR", "Invalid request data", ErrorCategory.VALIDATION,
            details=details,
        ),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled {type(exc).__name__}: {exc}",
        extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            "INTERNAL_ERROR", "An unexpected error occurred", ErrorCategory.INTERNAL,
        ),
    )


_HANDLERS = (
    (TeacherHubError, handle_teacherhub_error),
    (RequestValidationError, handle_validation_error),
    (Exception, handle_unexpected_error),
)


def register_error_handlers(app: FastAPI) -> None:
    for exc_class, handler in _HANDLERS:
        app.add_exception_handler(exc_class, handler)
