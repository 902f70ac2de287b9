"""
Search result cache.

Memoizes SearchResponse objects by request fingerprint. Keys look like
``search:<tag>:<digest>``: the tag comes from the entity catalogue so a
prefix scan on it purges every cached page for one entity type, and the
digest covers the remaining request fields so no two distinct requests
share a key.
"""

from typing import Optional
from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from app.core.cache import CacheService
from app.schemas.search import EntityType, SearchParams, SearchResponse
from app.services.entities import cache_tag, entity_for_index
from app.utils.helpers import canonical_json, hash_string, remove_none_values


CACHE_NAMESPACE = "search"


def build_cache_key(entity: EntityType, params: SearchParams) -> str:
    """
    Derive the cache key for a normalized search request.

    Query text, workspace, page, per_page and sort always participate;
    the optional filters are included so filtered and unfiltered requests
    never share an entry. The entity type selects the tag.
    """
    fingerprint = canonical_json([
        params.query,
        params.workspace_id,
        params.page,
        params.per_page,
        params.sort,
        remove_none_values({
            "channel_id": params.channel_id,
            "user_id": params.user_id,
            "file_type": params.file_type,
            "date_from": params.date_from,
            "date_to": params.date_to,
        }),
    ])
    return f"{CACHE_NAMESPACE}:{cache_tag(entity)}:{hash_string(fingerprint)}"


def invalidation_pattern(entity: EntityType) -> str:
    return f"{CACHE_NAMESPACE}:{cache_tag(entity)}:*"


class ResultCache:
    """SearchResponse cache with per-entity-type invalidation."""

    def __init__(self, cache: CacheService, ttl: int = 300):
        self.cache = cache
        self.ttl = ttl

    def build_key(self, entity: EntityType, params: SearchParams) -> str:
        return build_cache_key(entity, params)

    async def get(self, key: str) -> Optional[SearchResponse]:
        """Cached response, or None on miss, corrupt entry or store failure."""
        data = await self.cache.get(key)
        if data is None:
            return None
        try:
            return SearchResponse.model_validate(data)
        except PydanticValidationError as e:
            logger.warning(f"Discarding corrupt cache entry {key}: {e}")
            return None

    async def set(self, key: str, response: SearchResponse) -> None:
        await self.cache.set(key, response.model_dump(mode="json"), ttl=self.ttl)

    async def invalidate(self, entity: EntityType) -> int:
        """
        Drop every cached response for an entity type.

        Returns:
            Number of keys removed (0 when the store is unavailable)
        """
        removed = await self.cache.delete_pattern(invalidation_pattern(entity))
        logger.debug(f"Invalidated {removed} cached {entity.value} searches")
        return removed

    async def invalidate_index(self, index: str, prefix: str) -> int:
        """Invalidate the entity type stored in ``index``; unknown indices are a no-op."""
        entity = entity_for_index(index, prefix)
        if entity is None:
            return 0
        return await self.invalidate(entity)
