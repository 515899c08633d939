"""
Name: FastAPI Exception Handlers

Responsibilities:
  - Convert the pipeline's error taxonomy to HTTP responses
  - Structured error responses (RFC 7807 style)
  - Centralized logging of errors with correlation IDs

Collaborators:
  - main.py: Registers these handlers
  - exceptions.py: RAGError and subclasses
  - error_responses.py: Problem Details rendering

Constraints:
  - 422 invalid input, 404 unknown document, 503 collaborator down,
    504 collaborator timeout, 500 anything else
"""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .error_responses import (
    AppHTTPException,
    ErrorCode,
    app_exception_handler,
    internal_error,
    validation_error,
)
from .exceptions import RAGError
from .logger import logger


def _request_id_from(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


def _error_code_for(exc: RAGError) -> ErrorCode:
    try:
        return ErrorCode(exc.error_code)
    except ValueError:
        return ErrorCode.INTERNAL_ERROR


async def rag_error_handler(request: Request, exc: RAGError) -> JSONResponse:
    """Handle every taxonomy error using its class-level HTTP mapping."""
    request_id = _request_id_from(request)
    code = _error_code_for(exc)

    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "Pipeline error",
        extra={
            "code": code.value,
            "error_type": type(exc).__name__,
            "error_id": exc.error_id,
            "error_message": exc.message,
        },
    )

    app_exc = AppHTTPException(
        status_code=exc.status_code,
        code=code,
        detail=exc.message,
        errors=[{"error_id": exc.error_id, "request_id": request_id}],
    )
    return await app_exception_handler(request, app_exc)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render FastAPI body validation failures as Problem Details."""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return await app_exception_handler(
        request, validation_error("Request validation failed", errors)
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the stacktrace, answer with a generic 500."""
    logger.error(
        "Unhandled exception",
        exc_info=True,
        extra={"request_id": _request_id_from(request), "error": str(exc)},
    )
    return await app_exception_handler(request, internal_error())


def register_exception_handlers(app) -> None:
    """
    Register all exception handlers on the FastAPI app.

    Usage:
        from .exception_handlers import register_exception_handlers
        register_exception_handlers(app)
    """
    app.add_exception_handler(RAGError, rag_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
