"""
Utility modules for the search service.
"""

from .exceptions import (
    SearchServiceException,
    NotFoundError,
    SearchEngineError,
    StorageUnavailableError,
    AuthenticationError,
    ValidationError,
)

__all__ = [
    "SearchServiceException",
    "NotFoundError",
    "SearchEngineError",
    "StorageUnavailableError",
    "AuthenticationError",
    "ValidationError",
]
