"""
FastAPI dependencies.

Services are built once in the application lifespan and stored on
``app.state``; these providers hand them to endpoints.
"""

from typing import Optional
from fastapi import Header, Request

from app.services.history_service import HistoryService
from app.services.index_service import IndexService
from app.services.saved_search_service import SavedSearchService
from app.services.search_service import SearchService
from app.utils.exceptions import AuthenticationError


def get_search_service(request: Request) -> SearchService:
    return request.app.state.search_service


def get_index_service(request: Request) -> IndexService:
    return request.app.state.index_service


def get_history_service(request: Request) -> HistoryService:
    return request.app.state.history_service


def get_saved_search_service(request: Request) -> SavedSearchService:
    return request.app.state.saved_search_service


async def get_optional_user_id(x_user_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """User id from the gateway, if any. Used where identity only enables extras."""
    if x_user_id:
        x_user_id = x_user_id.strip()
    return x_user_id or None


async def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """
    Trusted user id set by the upstream gateway.

    Raises:
        AuthenticationError: If the header is missing or blank
    """
    user_id = await get_optional_user_id(x_user_id)
    if user_id is None:
        raise AuthenticationError(detail="X-User-ID header is required")
    return user_id
