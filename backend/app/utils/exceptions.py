"""
Custom exception classes for the search service.
"""

from typing import Optional


class SearchServiceException(Exception):
    """Base exception for all search service errors."""

    def __init__(self, message: str, detail: Optional[str] = None):
        self.message = message
        self.detail = detail
        super().__init__(self.message)


class NotFoundError(SearchServiceException):
    """Raised when a stored record does not exist."""

    def __init__(self, resource: str, resource_id: str, detail: Optional[str] = None):
        message = f"{resource} not found: {resource_id}"
        super().__init__(message, detail)
        self.resource = resource
        self.resource_id = resource_id


class SearchEngineError(SearchServiceException):
    """Raised when a search engine call fails."""

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(f"Search engine error: {message}", detail)


class StorageUnavailableError(SearchServiceException):
    """Raised when the key-value store is required but unreachable."""

    def __init__(self, message: str = "storage not available", detail: Optional[str] = None):
        super().__init__(f"Storage error: {message}", detail)


class AuthenticationError(SearchServiceException):
    """Raised when no trusted user identity accompanies a request."""

    def __init__(self, message: str = "Unauthorized", detail: Optional[str] = None):
        super().__init__(message, detail)


class ValidationError(SearchServiceException):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None, detail: Optional[str] = None):
        if field:
            message = f"Validation error for field '{field}': {message}"
        super().__init__(message, detail)
        self.field = field
