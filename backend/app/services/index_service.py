"""
Index write path: document writes followed by result cache invalidation.

Unlike searches, writes propagate engine failures to the caller. Batch
operations record failures per item and keep going.
"""

from typing import Any, Dict, List, Optional
from loguru import logger

from app.core.config import Settings
from app.schemas.search import (
    BatchDeleteResponse,
    BulkIndexResponse,
    EntityType,
    IndexBookmarkRequest,
    IndexChannelRequest,
    IndexRequest,
    IndexTaskRequest,
    IndexUserRequest,
)
from app.services.entities import index_name
from app.services.result_cache import ResultCache
from app.services.search_engine import SearchEngineClient
from app.utils.exceptions import SearchEngineError, ValidationError
from app.utils.formatters import format_bulk_error
from app.utils.helpers import utc_now
from app.utils.validators import validate_document_id, validate_index_name


class IndexService:
    """Service for writing documents to the engine."""

    def __init__(self, engine: SearchEngineClient, result_cache: ResultCache, settings: Settings):
        self.engine = engine
        self.result_cache = result_cache
        self.settings = settings

    @property
    def prefix(self) -> str:
        return self.settings.INDEX_PREFIX

    def index_for(self, entity: EntityType) -> str:
        return index_name(entity, self.prefix)

    def _check_target(self, index: str, document_id: Optional[str] = None) -> None:
        if not validate_index_name(index, self.prefix):
            raise ValidationError(f"index must be named '{self.prefix}_<type>'", field="index")
        if document_id is not None and not validate_document_id(document_id):
            raise ValidationError("invalid document id", field="id")

    async def _invalidate(self, index: str) -> None:
        await self.result_cache.invalidate_index(index, self.prefix)

    async def index_document(self, index: str, document_id: str, document: Dict[str, Any]) -> None:
        """
        Index (create or replace) a document.

        Args:
            index: Target index
            document_id: Document id
            document: Document body, stored as-is

        Raises:
            ValidationError: If index or id is malformed
            SearchEngineError: If the engine rejects the write
        """
        self._check_target(index, document_id)
        try:
            await self.engine.index_document(index, document_id, document)
        except SearchEngineError as e:
            logger.error(f"Failed to index {index}/{document_id}: {e.detail or e.message}")
            raise
        await self._invalidate(index)
        logger.debug(f"Indexed {index}/{document_id}")

    async def index_entity(self, entity: EntityType, document: Dict[str, Any]) -> str:
        """
        Index a raw document of a known entity type.

        The document must carry its own ``id``.

        Returns:
            The indexed document id
        """
        document_id = document.get("id")
        if not isinstance(document_id, str) or not document_id:
            raise ValidationError("Document must have an 'id' field", field="id")
        await self.index_document(self.index_for(entity), document_id, document)
        return document_id

    async def index_user(self, request: IndexUserRequest) -> str:
        document = request.model_dump(exclude={"id"})
        await self.index_document(self.index_for(EntityType.USERS), request.id, document)
        return request.id

    async def index_channel(self, request: IndexChannelRequest) -> str:
        document = request.model_dump(exclude={"id"})
        await self.index_document(self.index_for(EntityType.CHANNELS), request.id, document)
        return request.id

    async def index_bookmark(self, request: IndexBookmarkRequest) -> str:
        document = request.model_dump(exclude={"id"})
        document["created_at"] = request.created_at or utc_now().isoformat()
        await self.index_document(self.index_for(EntityType.BOOKMARKS), request.id, document)
        return request.id

    async def index_task(self, request: IndexTaskRequest) -> str:
        document = request.model_dump(exclude={"id"})
        document["created_at"] = request.created_at or utc_now().isoformat()
        await self.index_document(self.index_for(EntityType.TASKS), request.id, document)
        return request.id

    async def bulk_index(self, documents: List[IndexRequest]) -> BulkIndexResponse:
        """
        Index many documents independently.

        A failing document is recorded and the batch continues.

        Returns:
            Counts of indexed/failed documents plus one error per failure
        """
        response = BulkIndexResponse()
        for doc in documents:
            try:
                await self.index_document(doc.index, doc.id, doc.document)
            except (SearchEngineError, ValidationError) as e:
                response.failed += 1
                response.errors.append(format_bulk_error(doc.index, doc.id, e))
            else:
                response.indexed += 1

        logger.info(f"Bulk index finished: indexed={response.indexed}, failed={response.failed}")
        return response

    async def update_document(self, index: str, document_id: str, partial: Dict[str, Any]) -> None:
        """Apply a partial update to a stored document."""
        self._check_target(index, document_id)
        try:
            await self.engine.update_document(index, document_id, partial)
        except SearchEngineError as e:
            logger.error(f"Failed to update {index}/{document_id}: {e.detail or e.message}")
            raise
        await self._invalidate(index)

    async def delete_document(self, index: str, document_id: str) -> None:
        self._check_target(index, document_id)
        try:
            await self.engine.delete_document(index, document_id)
        except SearchEngineError as e:
            logger.error(f"Failed to delete {index}/{document_id}: {e.detail or e.message}")
            raise
        await self._invalidate(index)

    async def delete_entity(self, type_name: str, document_id: str) -> None:
        """Delete by entity path segment, e.g. ``messages``."""
        await self.delete_document(f"{self.prefix}_{type_name}", document_id)

    async def batch_delete(self, index: str, ids: List[str]) -> BatchDeleteResponse:
        """
        Delete many documents from one index, recording per-id failures.

        The cache is invalidated once if anything was deleted.
        """
        self._check_target(index)
        response = BatchDeleteResponse()
        for document_id in ids:
            try:
                if not validate_document_id(document_id):
                    raise ValidationError("invalid document id", field="id")
                await self.engine.delete_document(index, document_id)
            except (SearchEngineError, ValidationError) as e:
                response.failed += 1
                response.errors.append(f"{document_id}: {e.message}")
            else:
                response.deleted += 1

        if response.deleted:
            await self._invalidate(index)
        logger.info(f"Batch delete on {index}: deleted={response.deleted}, failed={response.failed}")
        return response

    async def reindex(self, index: str) -> Optional[str]:
        """
        Copy an index into ``<index>_reindexed`` on the engine side.

        Returns:
            Engine task id, if reported
        """
        self._check_target(index)
        try:
            task_id = await self.engine.reindex(index, f"{index}_reindexed")
        except SearchEngineError as e:
            logger.error(f"Reindex of {index} failed: {e.detail or e.message}")
            raise
        await self._invalidate(index)
        logger.info(f"Reindex of {index} started (task={task_id})")
        return task_id

    async def count_documents(self, index: str) -> int:
        self._check_target(index)
        return await self.engine.count(index)
