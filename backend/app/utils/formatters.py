"""
Data formatting utilities.
"""

from typing import Any, Dict


def format_error_response(error: Exception, status_code: int = 500) -> Dict[str, Any]:
    """
    Format error response for API.

    Args:
        error: Exception object
        status_code: HTTP status code

    Returns:
        Formatted error response dictionary
    """
    response = {
        "error": getattr(error, "message", None) or str(error),
        "status_code": status_code,
    }

    # Add additional details for custom exceptions
    if getattr(error, "detail", None):
        response["detail"] = error.detail

    if getattr(error, "field", None):
        response["field"] = error.field

    return response


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    Truncate text to maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to add if truncated

    Returns:
        Truncated text
    """
    if not text:
        return ""

    if len(text) <= max_length:
        return text

    return text[:max_length - len(suffix)] + suffix


def format_bulk_error(index: str, document_id: str, error: Exception) -> str:
    """Render one failed bulk item as ``<index>/<id>: <error>``."""
    return f"{index}/{document_id}: {getattr(error, 'message', None) or error}"


def format_response_time(seconds: float) -> str:
    """
    Format response time in seconds to human-readable format.

    Args:
        seconds: Time in seconds

    Returns:
        Formatted time string
    """
    if seconds is None:
        return "Unknown"

    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.2f}s"
    else:
        minutes = int(seconds // 60)
        secs = seconds % 60
        return f"{minutes}m {secs:.0f}s"
