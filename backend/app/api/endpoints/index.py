"""
Index management endpoints.

Called by upstream services when messages, files, users and other
entities change. Writes propagate engine failures (503).
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request, Response, status

from app.core.dependencies import get_index_service
from app.core.rate_limit import limiter, BULK_LIMIT, INDEX_LIMIT, SEARCH_LIMIT
from app.schemas.search import (
    BatchDeleteRequest,
    BatchDeleteResponse,
    BulkIndexRequest,
    BulkIndexResponse,
    CountResponse,
    EntityType,
    IndexBookmarkRequest,
    IndexChannelRequest,
    IndexRequest,
    IndexResult,
    IndexTaskRequest,
    IndexUserRequest,
    ReindexRequest,
    UpdateDocumentRequest,
)
from app.services.entities import entity_for_type_name
from app.services.index_service import IndexService
from app.utils.exceptions import ValidationError

router = APIRouter()


@router.post("", response_model=IndexResult, status_code=status.HTTP_201_CREATED)
@limiter.limit(INDEX_LIMIT)
async def index_document(
    request: Request,
    payload: IndexRequest,
    index_service: IndexService = Depends(get_index_service),
):
    """Index an arbitrary document into one of the service's indices."""
    await index_service.index_document(payload.index, payload.id, payload.document)
    return IndexResult(id=payload.id)


@router.post("/message", response_model=IndexResult, status_code=status.HTTP_201_CREATED)
@limiter.limit(INDEX_LIMIT)
async def index_message(
    request: Request,
    document: Dict[str, Any] = Body(...),
    index_service: IndexService = Depends(get_index_service),
):
    document_id = await index_service.index_entity(EntityType.MESSAGES, document)
    return IndexResult(id=document_id)


@router.post("/file", response_model=IndexResult, status_code=status.HTTP_201_CREATED)
@limiter.limit(INDEX_LIMIT)
async def index_file(
    request: Request,
    document: Dict[str, Any] = Body(...),
    index_service: IndexService = Depends(get_index_service),
):
    document_id = await index_service.index_entity(EntityType.FILES, document)
    return IndexResult(id=document_id)


@router.post("/user", response_model=IndexResult, status_code=status.HTTP_201_CREATED)
@limiter.limit(INDEX_LIMIT)
async def index_user(
    request: Request,
    payload: IndexUserRequest,
    index_service: IndexService = Depends(get_index_service),
):
    return IndexResult(id=await index_service.index_user(payload))


@router.post("/channel", response_model=IndexResult, status_code=status.HTTP_201_CREATED)
@limiter.limit(INDEX_LIMIT)
async def index_channel(
    request: Request,
    payload: IndexChannelRequest,
    index_service: IndexService = Depends(get_index_service),
):
    return IndexResult(id=await index_service.index_channel(payload))


@router.post("/bookmark", response_model=IndexResult, status_code=status.HTTP_201_CREATED)
@limiter.limit(INDEX_LIMIT)
async def index_bookmark(
    request: Request,
    payload: IndexBookmarkRequest,
    index_service: IndexService = Depends(get_index_service),
):
    return IndexResult(id=await index_service.index_bookmark(payload))


@router.post("/task", response_model=IndexResult, status_code=status.HTTP_201_CREATED)
@limiter.limit(INDEX_LIMIT)
async def index_task(
    request: Request,
    payload: IndexTaskRequest,
    index_service: IndexService = Depends(get_index_service),
):
    return IndexResult(id=await index_service.index_task(payload))


@router.post("/bulk", response_model=BulkIndexResponse)
@limiter.limit(BULK_LIMIT)
async def bulk_index(
    request: Request,
    payload: BulkIndexRequest,
    index_service: IndexService = Depends(get_index_service),
):
    """Index up to 100 documents; failures are reported per document."""
    return await index_service.bulk_index(payload.documents)


@router.post("/batch-delete", response_model=BatchDeleteResponse)
@limiter.limit(BULK_LIMIT)
async def batch_delete(
    request: Request,
    payload: BatchDeleteRequest,
    index_service: IndexService = Depends(get_index_service),
):
    return await index_service.batch_delete(payload.index, payload.ids)


@router.post("/reindex")
@limiter.limit(BULK_LIMIT)
async def reindex(
    request: Request,
    payload: ReindexRequest,
    index_service: IndexService = Depends(get_index_service),
):
    task_id = await index_service.reindex(payload.index)
    return {"reindexing": True, "index": payload.index, "task": task_id}


@router.get("/{index}/count", response_model=CountResponse)
@limiter.limit(SEARCH_LIMIT)
async def count_documents(
    request: Request,
    index: str,
    index_service: IndexService = Depends(get_index_service),
):
    count = await index_service.count_documents(index)
    return CountResponse(index=index, count=count)


@router.put("/{index}/{document_id}")
@limiter.limit(INDEX_LIMIT)
async def update_document(
    request: Request,
    index: str,
    document_id: str,
    payload: UpdateDocumentRequest,
    index_service: IndexService = Depends(get_index_service),
):
    """Partially update a stored document."""
    await index_service.update_document(index, document_id, payload.document)
    return {"updated": True, "id": document_id}


@router.delete("/{type_name}/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(INDEX_LIMIT)
async def delete_document(
    request: Request,
    type_name: str,
    document_id: str,
    index_service: IndexService = Depends(get_index_service),
):
    """Delete a document by entity type path segment, e.g. ``messages``."""
    if entity_for_type_name(type_name) is None:
        raise ValidationError(f"unknown document type '{type_name}'", field="type")
    await index_service.delete_entity(type_name, document_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
