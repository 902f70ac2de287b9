"""
Request-scoped logging helpers.

Correlation ids live in a ContextVar so every log line emitted while a
request is being served can carry the same id.
"""

import uuid
from contextvars import ContextVar
from typing import Optional, Dict, Any
from loguru import logger
from fastapi import Request

correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context."""
    return correlation_id_var.get()


def set_correlation_id(cid: Optional[str] = None) -> str:
    """
    Set correlation ID in context.

    Args:
        cid: Correlation ID to set. If None, generates a new UUID.

    Returns:
        The correlation ID that was set.
    """
    if not cid:
        cid = str(uuid.uuid4())
    correlation_id_var.set(cid)
    return cid


def add_correlation_id(record: Dict[str, Any]) -> None:
    """loguru patcher: stamp each record with the current correlation ID."""
    record["extra"].setdefault("correlation_id", get_correlation_id() or "-")


def log_request(request: Request, correlation_id: Optional[str] = None) -> None:
    """Log an incoming HTTP request."""
    if correlation_id is None:
        correlation_id = get_correlation_id() or set_correlation_id()

    client_ip = request.client.host if request.client else None
    logger.bind(correlation_id=correlation_id, client_ip=client_ip).info(
        f"--> {request.method} {request.url.path}"
    )


def log_response(
    request: Request,
    status_code: int,
    response_time_ms: float,
    correlation_id: Optional[str] = None
) -> None:
    """
    Log an HTTP response; 4xx at warning, 5xx at error.

    Args:
        request: Request being answered
        status_code: HTTP status code
        response_time_ms: Response time in milliseconds
        correlation_id: Correlation ID (uses context if not provided)
    """
    if correlation_id is None:
        correlation_id = get_correlation_id()

    log_level = "error" if status_code >= 500 else "warning" if status_code >= 400 else "info"
    getattr(logger.bind(correlation_id=correlation_id), log_level)(
        f"<-- {request.method} {request.url.path} {status_code} ({response_time_ms:.2f}ms)"
    )


def log_error(error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
    """
    Log an unexpected error with its traceback.

    Args:
        error: Exception object
        context: Additional fields bound to the record
    """
    bound = logger.bind(error_type=error.__class__.__name__, **(context or {}))
    bound.opt(exception=error).error(f"Unhandled error: {error}")


def log_service_call(
    service_name: str,
    method_name: str,
    duration_ms: float,
    success: bool = True,
    **kwargs
) -> None:
    """
    Log a service method call.

    Args:
        service_name: Name of the service
        method_name: Name of the method
        duration_ms: Duration in milliseconds
        success: Whether the call was successful
        **kwargs: Additional fields bound to the record
    """
    log_level = "info" if success else "warning"
    details = ", ".join(f"{key}={value}" for key, value in kwargs.items())
    getattr(logger.bind(service=service_name, method=method_name, **kwargs), log_level)(
        f"Service call: {service_name}.{method_name} took {duration_ms:.2f}ms"
        + (f" ({details})" if details else "")
    )
