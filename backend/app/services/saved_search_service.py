"""
Saved searches stored as JSON records in Redis.

Each record lives at ``saved_search:<user>:<id>``; the set
``saved_searches:<user>`` lists the ids a user owns.
"""

from typing import List, Optional
import redis.asyncio as aioredis
from loguru import logger
from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import RedisError

from app.schemas.searches import SavedSearch, SavedSearchCreateRequest, SavedSearchUpdateRequest
from app.utils.exceptions import NotFoundError, StorageUnavailableError
from app.utils.helpers import generate_uuid_string, utc_now


def record_key(user_id: str, search_id: str) -> str:
    return f"saved_search:{user_id}:{search_id}"


def index_key(user_id: str) -> str:
    return f"saved_searches:{user_id}"


def _decode(value) -> str:
    return value.decode() if isinstance(value, bytes) else value


class SavedSearchService:
    """CRUD for saved searches."""

    def __init__(self, client: Optional[aioredis.Redis]):
        self._client = client

    def _require_client(self) -> aioredis.Redis:
        if self._client is None:
            raise StorageUnavailableError()
        return self._client

    async def _write(self, saved: SavedSearch) -> None:
        client = self._require_client()
        try:
            await client.set(record_key(saved.user_id, saved.id), saved.model_dump_json())
            await client.sadd(index_key(saved.user_id), saved.id)
        except RedisError as e:
            raise StorageUnavailableError(detail=str(e)) from e

    async def create(self, user_id: str, request: SavedSearchCreateRequest) -> SavedSearch:
        now = utc_now()
        saved = SavedSearch(
            id=generate_uuid_string(),
            user_id=user_id,
            name=request.name.strip(),
            query=request.query.strip(),
            search_type=request.search_type,
            filters=request.filters,
            workspace_id=request.workspace_id,
            created_at=now,
            updated_at=now,
        )
        await self._write(saved)
        logger.info(f"Saved search {saved.id} created for user {user_id}")
        return saved

    async def get(self, user_id: str, search_id: str) -> SavedSearch:
        """
        Fetch one saved search.

        Raises:
            NotFoundError: If the user has no such saved search
            StorageUnavailableError: If the store cannot be reached
        """
        client = self._require_client()
        try:
            data = await client.get(record_key(user_id, search_id))
        except RedisError as e:
            raise StorageUnavailableError(detail=str(e)) from e

        if data is None:
            raise NotFoundError("Saved search", search_id)
        try:
            return SavedSearch.model_validate_json(data)
        except PydanticValidationError as e:
            raise NotFoundError("Saved search", search_id, detail="stored record is unreadable") from e

    async def list_for_user(self, user_id: str) -> List[SavedSearch]:
        """All readable saved searches of a user, newest update first."""
        if self._client is None:
            return []

        try:
            ids = await self._client.smembers(index_key(user_id))
        except RedisError as e:
            logger.warning(f"Failed to list saved searches for {user_id}: {e}")
            return []

        searches: List[SavedSearch] = []
        for search_id in ids:
            try:
                searches.append(await self.get(user_id, _decode(search_id)))
            except (NotFoundError, StorageUnavailableError):
                continue
        searches.sort(key=lambda s: s.updated_at, reverse=True)
        return searches

    async def update(self, user_id: str, search_id: str, request: SavedSearchUpdateRequest) -> SavedSearch:
        """Partial update; empty or missing fields keep their stored value."""
        saved = await self.get(user_id, search_id)

        changes = {}
        if request.name:
            changes["name"] = request.name.strip()
        if request.query:
            changes["query"] = request.query.strip()
        if request.filters is not None:
            changes["filters"] = request.filters
        changes["updated_at"] = utc_now()

        saved = saved.model_copy(update=changes)
        await self._write(saved)
        return saved

    async def delete(self, user_id: str, search_id: str) -> None:
        client = self._require_client()
        try:
            removed = await client.delete(record_key(user_id, search_id))
            await client.srem(index_key(user_id), search_id)
        except RedisError as e:
            raise StorageUnavailableError(detail=str(e)) from e
        if not removed:
            raise NotFoundError("Saved search", search_id)
