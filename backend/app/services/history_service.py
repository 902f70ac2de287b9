"""
Per-user search history stored as a capped Redis list (newest first).
"""

import json
from typing import List, Optional
import redis.asyncio as aioredis
from loguru import logger
from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import RedisError

from app.schemas.searches import SearchHistoryEntry
from app.utils.exceptions import StorageUnavailableError
from app.utils.helpers import generate_uuid_string, utc_now


def history_key(user_id: str) -> str:
    return f"search_history:{user_id}"


class HistoryService:
    """Service for recording and reading search history."""

    def __init__(self, client: Optional[aioredis.Redis], max_entries: int = 100):
        self._client = client
        self.max_entries = max_entries

    async def record_search(
        self,
        user_id: str,
        query: str,
        search_type: str,
        workspace_id: str = "",
        result_count: int = 0,
    ) -> Optional[SearchHistoryEntry]:
        """
        Record a search. Best-effort: store failures are logged and swallowed.

        Returns:
            The stored entry, or None if it could not be written
        """
        if self._client is None or not user_id:
            return None

        entry = SearchHistoryEntry(
            id=generate_uuid_string(),
            user_id=user_id,
            query=query,
            search_type=search_type,
            workspace_id=workspace_id,
            result_count=result_count,
            created_at=utc_now(),
        )
        key = history_key(user_id)
        try:
            await self._client.lpush(key, entry.model_dump_json())
            await self._client.ltrim(key, 0, self.max_entries - 1)
        except RedisError as e:
            logger.warning(f"Failed to record search history for {user_id}: {e}")
            return None
        return entry

    async def get_history(self, user_id: str, limit: int = 20) -> List[SearchHistoryEntry]:
        """
        Most recent entries first. Unreadable entries are skipped.

        Args:
            user_id: Owner
            limit: Maximum entries to return (values < 1 fall back to 20)
        """
        if self._client is None:
            return []
        if limit < 1:
            limit = 20

        try:
            raw_entries = await self._client.lrange(history_key(user_id), 0, limit - 1)
        except RedisError as e:
            logger.warning(f"Failed to read search history for {user_id}: {e}")
            return []

        history: List[SearchHistoryEntry] = []
        for raw in raw_entries:
            try:
                history.append(SearchHistoryEntry.model_validate_json(raw))
            except PydanticValidationError:
                continue
        return history

    async def clear_history(self, user_id: str) -> None:
        if self._client is None:
            return
        try:
            await self._client.delete(history_key(user_id))
        except RedisError as e:
            raise StorageUnavailableError(detail=str(e)) from e

    async def delete_history_item(self, user_id: str, history_id: str) -> bool:
        """
        Remove one entry by id.

        Returns:
            True if an entry was removed
        """
        if self._client is None:
            return False

        key = history_key(user_id)
        try:
            raw_entries = await self._client.lrange(key, 0, -1)
            for raw in raw_entries:
                try:
                    entry_id = json.loads(raw).get("id")
                except (ValueError, AttributeError):
                    continue
                if entry_id == history_id:
                    await self._client.lrem(key, 1, raw)
                    return True
        except RedisError as e:
            raise StorageUnavailableError(detail=str(e)) from e
        return False
