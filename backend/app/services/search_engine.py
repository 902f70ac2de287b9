"""
Search engine client.

Narrow async wrapper around ``AsyncElasticsearch``. Every engine failure
surfaces as SearchEngineError; callers decide whether to degrade (reads)
or propagate (writes).
"""

from typing import Any, Dict, Optional
from elasticsearch import AsyncElasticsearch, ApiError, NotFoundError, TransportError
from loguru import logger

from app.core.config import Settings
from app.utils.exceptions import SearchEngineError


def create_search_engine(settings: Settings) -> AsyncElasticsearch:
    """Create the pooled engine client; no connection is made until first use."""
    return AsyncElasticsearch(
        hosts=[settings.ELASTICSEARCH_URL],
        request_timeout=settings.ELASTICSEARCH_TIMEOUT,
    )


class SearchEngineClient:
    """Engine operations used by the search and index services."""

    def __init__(self, client: AsyncElasticsearch):
        self._client = client

    async def search(self, index: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run a search request.

        Args:
            index: Index name or pattern
            body: Request body from the query builder

        Returns:
            Raw response body

        Raises:
            SearchEngineError: On transport or engine failure
        """
        try:
            response = await self._client.search(index=index, body=body)
            return response.body
        except (ApiError, TransportError) as e:
            raise SearchEngineError(f"search on {index} failed", detail=str(e)) from e

    async def index_document(self, index: str, document_id: str, document: Dict[str, Any]) -> None:
        try:
            await self._client.index(index=index, id=document_id, document=document)
        except (ApiError, TransportError) as e:
            raise SearchEngineError(f"indexing {index}/{document_id} failed", detail=str(e)) from e

    async def update_document(self, index: str, document_id: str, partial: Dict[str, Any]) -> None:
        try:
            await self._client.update(index=index, id=document_id, doc=partial)
        except (ApiError, TransportError) as e:
            raise SearchEngineError(f"updating {index}/{document_id} failed", detail=str(e)) from e

    async def delete_document(self, index: str, document_id: str) -> None:
        """
        Delete a document. Deleting a document that is already gone succeeds.

        Raises:
            SearchEngineError: On transport or engine failure
        """
        try:
            await self._client.delete(index=index, id=document_id)
        except NotFoundError:
            logger.debug(f"Delete of missing document {index}/{document_id}")
        except (ApiError, TransportError) as e:
            raise SearchEngineError(f"deleting {index}/{document_id} failed", detail=str(e)) from e

    async def count(self, index: str) -> int:
        try:
            response = await self._client.count(index=index)
        except (ApiError, TransportError) as e:
            raise SearchEngineError(f"count on {index} failed", detail=str(e)) from e
        count = response.body.get("count")
        return int(count) if isinstance(count, (int, float)) else 0

    async def reindex(self, source_index: str, dest_index: str) -> Optional[str]:
        """
        Start an asynchronous reindex.

        Returns:
            Engine task id, when the engine reports one
        """
        try:
            response = await self._client.reindex(
                source={"index": source_index},
                dest={"index": dest_index},
                wait_for_completion=False,
            )
        except (ApiError, TransportError) as e:
            raise SearchEngineError(f"reindex of {source_index} failed", detail=str(e)) from e
        return response.body.get("task")

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except Exception as e:
            logger.warning(f"Search engine ping failed: {e}")
            return False

    async def close(self) -> None:
        await self._client.close()
