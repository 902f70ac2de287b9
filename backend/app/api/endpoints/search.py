"""
Search endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from loguru import logger

from app.core.dependencies import (
    get_history_service,
    get_optional_user_id,
    get_search_service,
)
from app.core.rate_limit import limiter, SEARCH_LIMIT
from app.schemas.search import (
    AdvancedSearchParams,
    AggregationRequest,
    AggregationResponse,
    EntityType,
    GlobalSearchResponse,
    SearchParams,
    SearchResponse,
    SuggestionResponse,
)
from app.services.history_service import HistoryService
from app.services.search_service import SearchService
from app.utils.exceptions import ValidationError
from app.utils.validators import SORT_MODES, validate_sort_mode

router = APIRouter()


async def get_search_params(
    q: str = Query(..., min_length=1, description="Free-text query"),
    workspace_id: str = Query(""),
    channel_id: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    file_type: Optional[str] = Query(None, alias="type"),
    date_from: Optional[str] = Query(None),
    date_to: Optional[str] = Query(None),
    page: int = Query(1),
    per_page: int = Query(20),
    sort: str = Query("relevance"),
) -> SearchParams:
    """Collect query-string parameters into SearchParams. Clamping happens in the service."""
    if not validate_sort_mode(sort):
        raise ValidationError(f"must be one of {', '.join(SORT_MODES)}", field="sort")
    return SearchParams(
        query=q,
        workspace_id=workspace_id,
        channel_id=channel_id or None,
        user_id=user_id or None,
        file_type=file_type or None,
        date_from=date_from or None,
        date_to=date_to or None,
        page=page,
        per_page=per_page,
        sort=sort,
    )


async def _record(
    history_service: HistoryService,
    user_id: Optional[str],
    params: SearchParams,
    search_type: str,
    result_count: int,
) -> None:
    if user_id is None:
        return
    await history_service.record_search(
        user_id,
        params.query,
        search_type,
        workspace_id=params.workspace_id,
        result_count=result_count,
    )


async def _entity_search(
    entity: EntityType,
    params: SearchParams,
    search_service: SearchService,
    history_service: HistoryService,
    user_id: Optional[str],
) -> SearchResponse:
    response = await search_service.search(entity, params)
    await _record(history_service, user_id, params, entity.value, response.total)
    return response


@router.get("", response_model=GlobalSearchResponse)
@limiter.limit(SEARCH_LIMIT)
async def global_search(
    request: Request,
    params: SearchParams = Depends(get_search_params),
    user_id: Optional[str] = Depends(get_optional_user_id),
    search_service: SearchService = Depends(get_search_service),
    history_service: HistoryService = Depends(get_history_service),
):
    """Search messages, files, users and channels at once."""
    response = await search_service.global_search(params)
    total = sum(slot.total for slot in (response.messages, response.files, response.users, response.channels) if slot)
    await _record(history_service, user_id, params, "global", total)
    return response


@router.get("/messages", response_model=SearchResponse)
@limiter.limit(SEARCH_LIMIT)
async def search_messages(
    request: Request,
    params: SearchParams = Depends(get_search_params),
    user_id: Optional[str] = Depends(get_optional_user_id),
    search_service: SearchService = Depends(get_search_service),
    history_service: HistoryService = Depends(get_history_service),
):
    return await _entity_search(EntityType.MESSAGES, params, search_service, history_service, user_id)


@router.get("/files", response_model=SearchResponse)
@limiter.limit(SEARCH_LIMIT)
async def search_files(
    request: Request,
    params: SearchParams = Depends(get_search_params),
    user_id: Optional[str] = Depends(get_optional_user_id),
    search_service: SearchService = Depends(get_search_service),
    history_service: HistoryService = Depends(get_history_service),
):
    return await _entity_search(EntityType.FILES, params, search_service, history_service, user_id)


@router.get("/users", response_model=SearchResponse)
@limiter.limit(SEARCH_LIMIT)
async def search_users(
    request: Request,
    params: SearchParams = Depends(get_search_params),
    user_id: Optional[str] = Depends(get_optional_user_id),
    search_service: SearchService = Depends(get_search_service),
    history_service: HistoryService = Depends(get_history_service),
):
    return await _entity_search(EntityType.USERS, params, search_service, history_service, user_id)


@router.get("/channels", response_model=SearchResponse)
@limiter.limit(SEARCH_LIMIT)
async def search_channels(
    request: Request,
    params: SearchParams = Depends(get_search_params),
    user_id: Optional[str] = Depends(get_optional_user_id),
    search_service: SearchService = Depends(get_search_service),
    history_service: HistoryService = Depends(get_history_service),
):
    return await _entity_search(EntityType.CHANNELS, params, search_service, history_service, user_id)


@router.get("/bookmarks", response_model=SearchResponse)
@limiter.limit(SEARCH_LIMIT)
async def search_bookmarks(
    request: Request,
    params: SearchParams = Depends(get_search_params),
    user_id: Optional[str] = Depends(get_optional_user_id),
    search_service: SearchService = Depends(get_search_service),
    history_service: HistoryService = Depends(get_history_service),
):
    return await _entity_search(EntityType.BOOKMARKS, params, search_service, history_service, user_id)


@router.get("/tasks", response_model=SearchResponse)
@limiter.limit(SEARCH_LIMIT)
async def search_tasks(
    request: Request,
    params: SearchParams = Depends(get_search_params),
    user_id: Optional[str] = Depends(get_optional_user_id),
    search_service: SearchService = Depends(get_search_service),
    history_service: HistoryService = Depends(get_history_service),
):
    return await _entity_search(EntityType.TASKS, params, search_service, history_service, user_id)


@router.get("/emoji", response_model=SearchResponse)
@limiter.limit(SEARCH_LIMIT)
async def search_emoji(
    request: Request,
    q: str = Query(..., min_length=1),
    workspace_id: str = Query(""),
    search_service: SearchService = Depends(get_search_service),
):
    """Built-in emoji plus the workspace's custom ones. Always one fixed-size page."""
    return await search_service.search_emoji(q, workspace_id)


@router.get("/suggest", response_model=SuggestionResponse)
@limiter.limit(SEARCH_LIMIT)
async def suggest(
    request: Request,
    q: str = Query(""),
    workspace_id: str = Query(""),
    search_service: SearchService = Depends(get_search_service),
):
    """Autocomplete. An empty query yields no suggestions rather than an error."""
    return await search_service.suggest(q, workspace_id)


@router.post("/advanced", response_model=GlobalSearchResponse)
@limiter.limit(SEARCH_LIMIT)
async def advanced_search(
    request: Request,
    payload: AdvancedSearchParams,
    search_service: SearchService = Depends(get_search_service),
):
    return await search_service.advanced_search(payload)


@router.post("/aggregate", response_model=AggregationResponse)
@limiter.limit(SEARCH_LIMIT)
async def aggregate(
    request: Request,
    payload: AggregationRequest,
    search_service: SearchService = Depends(get_search_service),
):
    logger.debug(f"Aggregating {payload.index}.{payload.field} (size={payload.size})")
    return await search_service.aggregate(payload)
