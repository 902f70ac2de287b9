"""
Search history and saved searches.
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from app.core.dependencies import (
    get_current_user_id,
    get_history_service,
    get_saved_search_service,
)
from app.schemas.searches import (
    SavedSearch,
    SavedSearchCreateRequest,
    SavedSearchUpdateRequest,
    SearchHistoryResponse,
)
from app.services.history_service import HistoryService
from app.services.saved_search_service import SavedSearchService
from app.utils.exceptions import NotFoundError

router = APIRouter()


@router.get("/history", response_model=SearchHistoryResponse)
async def get_history(
    limit: int = Query(20),
    current_user: str = Depends(get_current_user_id),
    history_service: HistoryService = Depends(get_history_service),
):
    """Most recent searches of the current user, newest first."""
    history = await history_service.get_history(current_user, limit)
    return SearchHistoryResponse(history=history)


@router.delete("/history")
async def clear_history(
    current_user: str = Depends(get_current_user_id),
    history_service: HistoryService = Depends(get_history_service),
):
    await history_service.clear_history(current_user)
    return {"cleared": True}


@router.delete("/history/{history_id}")
async def delete_history_item(
    history_id: str,
    current_user: str = Depends(get_current_user_id),
    history_service: HistoryService = Depends(get_history_service),
):
    if not await history_service.delete_history_item(current_user, history_id):
        raise NotFoundError("History entry", history_id)
    return {"deleted": True}


@router.post("/saved", response_model=SavedSearch, status_code=201)
async def create_saved_search(
    payload: SavedSearchCreateRequest,
    current_user: str = Depends(get_current_user_id),
    saved_search_service: SavedSearchService = Depends(get_saved_search_service),
):
    return await saved_search_service.create(current_user, payload)


@router.get("/saved", response_model=List[SavedSearch])
async def list_saved_searches(
    current_user: str = Depends(get_current_user_id),
    saved_search_service: SavedSearchService = Depends(get_saved_search_service),
):
    """List saved searches for the current user, most recently updated first."""
    return await saved_search_service.list_for_user(current_user)


@router.get("/saved/{search_id}", response_model=SavedSearch)
async def get_saved_search(
    search_id: str,
    current_user: str = Depends(get_current_user_id),
    saved_search_service: SavedSearchService = Depends(get_saved_search_service),
):
    return await saved_search_service.get(current_user, search_id)


@router.put("/saved/{search_id}", response_model=SavedSearch)
async def update_saved_search(
    search_id: str,
    payload: SavedSearchUpdateRequest,
    current_user: str = Depends(get_current_user_id),
    saved_search_service: SavedSearchService = Depends(get_saved_search_service),
):
    return await saved_search_service.update(current_user, search_id, payload)


@router.delete("/saved/{search_id}")
async def delete_saved_search(
    search_id: str,
    current_user: str = Depends(get_current_user_id),
    saved_search_service: SavedSearchService = Depends(get_saved_search_service),
):
    await saved_search_service.delete(current_user, search_id)
    return {"success": True}
