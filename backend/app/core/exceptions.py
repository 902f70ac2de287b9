"""
Global exception handlers for FastAPI application.

Every error body carries ``error`` and ``status_code``.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.logging import log_error
from app.utils.exceptions import (
    SearchServiceException,
    NotFoundError,
    SearchEngineError,
    StorageUnavailableError,
    AuthenticationError,
    ValidationError as CustomValidationError,
)
from app.utils.formatters import format_error_response


def status_for_exception(exc: SearchServiceException) -> int:
    """Map a service exception to its HTTP status code."""
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, AuthenticationError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, CustomValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, (SearchEngineError, StorageUnavailableError)):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def search_service_exception_handler(request: Request, exc: SearchServiceException) -> JSONResponse:
    """Handle custom search service exceptions."""
    status_code = status_for_exception(exc)

    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} ({exc.detail})")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content=format_error_response(exc, status_code)
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework HTTP errors (404 routes, 405, ...) in the common shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "status_code": exc.status_code},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle request validation errors.

    Missing or malformed query parameters are the caller's fault (400);
    malformed bodies keep FastAPI's 422.
    """
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error.get("loc", []))
        errors.append({
            "field": field,
            "message": error.get("msg"),
            "type": error.get("type")
        })

    in_query = any(error.get("loc", ("",))[0] in ("query", "path") for error in exc.errors())
    status_code = status.HTTP_400_BAD_REQUEST if in_query else status.HTTP_422_UNPROCESSABLE_ENTITY

    first = errors[0] if errors else {"field": "", "message": "invalid request"}
    error_response = {
        "error": f"{first['field']}: {first['message']}" if first["field"] else first["message"],
        "status_code": status_code,
        "errors": errors
    }

    logger.warning(f"Validation error on {request.url.path}: {errors}")

    return JSONResponse(
        status_code=status_code,
        content=error_response
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    log_error(exc, {"path": request.url.path, "method": request.method})

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
        }
    )
