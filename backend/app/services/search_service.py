"""
Search service for per-entity, global and suggest searches.
"""

import asyncio
import time
from typing import Any, Callable, Dict, List, Tuple
from loguru import logger

from app.core.config import Settings
from app.core.logging import log_service_call
from app.schemas.search import (
    AdvancedSearchParams,
    AggregationBucket,
    AggregationRequest,
    AggregationResponse,
    EntityType,
    GlobalSearchResponse,
    SearchParams,
    SearchResponse,
    SubQuery,
    SuggestionResponse,
)
from app.services.entities import (
    GLOBAL_ENTITY_TYPES,
    entity_for_index,
    index_name,
    wildcard_index,
)
from app.services.query_builder import (
    Clause,
    build_filters,
    build_query,
    fuzzy_match,
    multi_match,
    term_filter,
)
from app.services.response_normalizer import empty_response, normalize_response
from app.services.result_cache import ResultCache
from app.services.search_engine import SearchEngineClient
from app.utils.exceptions import SearchEngineError, ValidationError
from app.utils.formatters import format_response_time, truncate_text
from app.utils.helpers import safe_get
from app.utils.validators import validate_index_name


# Fields the suggest endpoint draws its strings from
SUGGEST_FIELDS = ("name", "username", "display_name", "filename")

ClauseBuilder = Callable[[SearchParams], Tuple[List[Clause], List[Clause]]]


def _message_clauses(params: SearchParams) -> Tuple[List[Clause], List[Clause]]:
    must = [fuzzy_match("content", params.query)]
    filters = build_filters(params)
    if params.channel_id:
        filters.append(term_filter("channel_id", params.channel_id))
    if params.user_id:
        filters.append(term_filter("user_id", params.user_id))
    return must, filters


def _file_clauses(params: SearchParams) -> Tuple[List[Clause], List[Clause]]:
    must = [multi_match(params.query, ["filename^2", "content"], fuzzy=True)]
    filters = build_filters(params)
    if params.file_type:
        filters.append(term_filter("file_type", params.file_type))
    if params.channel_id:
        filters.append(term_filter("channel_id", params.channel_id))
    return must, filters


def _user_clauses(params: SearchParams) -> Tuple[List[Clause], List[Clause]]:
    must = [multi_match(params.query, ["username^3", "display_name^2", "email"], phrase_prefix=True)]
    filters = [term_filter("workspace_id", params.workspace_id)] if params.workspace_id else []
    return must, filters


def _channel_clauses(params: SearchParams) -> Tuple[List[Clause], List[Clause]]:
    must = [multi_match(params.query, ["name^3", "description", "topic"], fuzzy=True)]
    filters = [term_filter("workspace_id", params.workspace_id)] if params.workspace_id else []
    return must, filters


def _bookmark_clauses(params: SearchParams) -> Tuple[List[Clause], List[Clause]]:
    must = [multi_match(params.query, ["title^3", "description", "url", "tags"], fuzzy=True)]
    return must, build_filters(params)


def _task_clauses(params: SearchParams) -> Tuple[List[Clause], List[Clause]]:
    must = [multi_match(params.query, ["title^3", "description"], fuzzy=True)]
    return must, build_filters(params)


def _emoji_clauses(params: SearchParams) -> Tuple[List[Clause], List[Clause]]:
    must = [multi_match(params.query, ["name^2", "category"], phrase_prefix=True)]
    filters: List[Clause] = []
    if params.workspace_id:
        # Workspace custom emoji or any built-in emoji
        filters.append({
            "bool": {
                "should": [
                    term_filter("workspace_id", params.workspace_id),
                    term_filter("is_custom", False),
                ]
            }
        })
    return must, filters


CLAUSE_BUILDERS: Dict[EntityType, ClauseBuilder] = {
    EntityType.MESSAGES: _message_clauses,
    EntityType.FILES: _file_clauses,
    EntityType.USERS: _user_clauses,
    EntityType.CHANNELS: _channel_clauses,
    EntityType.BOOKMARKS: _bookmark_clauses,
    EntityType.TASKS: _task_clauses,
    EntityType.EMOJI: _emoji_clauses,
}


class SearchService:
    """Service for searching indexed entities through the result cache."""

    def __init__(self, engine: SearchEngineClient, result_cache: ResultCache, settings: Settings):
        self.engine = engine
        self.result_cache = result_cache
        self.settings = settings

    def normalize_params(self, params: SearchParams) -> SearchParams:
        return params.normalized(
            default_per_page=self.settings.DEFAULT_PER_PAGE,
            max_per_page=self.settings.MAX_PER_PAGE,
        )

    def index_for(self, entity: EntityType) -> str:
        return index_name(entity, self.settings.INDEX_PREFIX)

    async def search(self, entity: EntityType, params: SearchParams) -> SearchResponse:
        """
        Search one entity type.

        Args:
            entity: Entity type to search
            params: Raw search parameters; clamped before use

        Returns:
            SearchResponse; empty when the engine fails
        """
        start_time = time.time()
        params = self.normalize_params(params)

        cache_key = self.result_cache.build_key(entity, params)
        cached = await self.result_cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit for {entity.value} search: {cache_key}")
            return cached

        must, filters = CLAUSE_BUILDERS[entity](params)
        query = build_query(must, filters, params)

        index = self.index_for(entity)
        try:
            raw = await self.engine.search(index, query)
        except SearchEngineError as e:
            logger.warning(f"{entity.value} search degraded to empty result: {e.message} ({e.detail})")
            return empty_response(params)

        response = normalize_response(raw, params)
        await self.result_cache.set(cache_key, response)

        took = format_response_time(time.time() - start_time)
        logger.info(
            f"Search completed: type={entity.value}, query='{truncate_text(params.query, 50)}', "
            f"results={len(response.results)}, total={response.total}, took={took}"
        )
        return response

    async def search_messages(self, params: SearchParams) -> SearchResponse:
        return await self.search(EntityType.MESSAGES, params)

    async def search_files(self, params: SearchParams) -> SearchResponse:
        return await self.search(EntityType.FILES, params)

    async def search_users(self, params: SearchParams) -> SearchResponse:
        return await self.search(EntityType.USERS, params)

    async def search_channels(self, params: SearchParams) -> SearchResponse:
        return await self.search(EntityType.CHANNELS, params)

    async def search_bookmarks(self, params: SearchParams) -> SearchResponse:
        return await self.search(EntityType.BOOKMARKS, params)

    async def search_tasks(self, params: SearchParams) -> SearchResponse:
        return await self.search(EntityType.TASKS, params)

    async def search_emoji(self, query: str, workspace_id: str = "") -> SearchResponse:
        """Emoji search always returns the first page of a fixed size."""
        params = SearchParams(
            query=query,
            workspace_id=workspace_id,
            page=1,
            per_page=self.settings.EMOJI_PER_PAGE,
        )
        return await self.search(EntityType.EMOJI, params)

    def per_type_page_size(self, per_page: int) -> int:
        """Per-entity page size for the global fan-out."""
        return max(per_page // len(GLOBAL_ENTITY_TYPES), self.settings.GLOBAL_MIN_PER_TYPE)

    async def global_search(self, params: SearchParams) -> GlobalSearchResponse:
        """
        Search messages, files, users and channels concurrently.

        The requested page size is shared across the four types. A failing
        sub-search yields an empty response for its slot only.

        Args:
            params: Raw search parameters

        Returns:
            GlobalSearchResponse with all four slots populated
        """
        start_time = time.time()
        params = self.normalize_params(params)
        sub_params = params.model_copy(update={"per_page": self.per_type_page_size(params.per_page)})

        outcomes = await asyncio.gather(
            *(self.search(entity, sub_params) for entity in GLOBAL_ENTITY_TYPES),
            return_exceptions=True,
        )

        slots: Dict[str, SearchResponse] = {}
        for entity, outcome in zip(GLOBAL_ENTITY_TYPES, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"Global search: {entity.value} sub-search failed: {outcome}")
                outcome = empty_response(sub_params)
            slots[entity.value] = outcome

        log_service_call(
            "SearchService",
            "global_search",
            (time.time() - start_time) * 1000,
            success=all(not isinstance(o, BaseException) for o in outcomes),
            per_type=sub_params.per_page,
        )
        return GlobalSearchResponse(**slots)

    async def suggest(self, query: str, workspace_id: str = "") -> SuggestionResponse:
        """
        Autocomplete across entity types.

        Args:
            query: Prefix typed so far
            workspace_id: Workspace scope

        Returns:
            Up to SUGGEST_LIMIT distinct strings in hit order
        """
        if not query:
            return SuggestionResponse(suggestions=[])

        limit = self.settings.SUGGEST_LIMIT
        bool_query: Dict[str, Any] = {
            "must": [multi_match(query, list(SUGGEST_FIELDS), phrase_prefix=True)],
        }
        if workspace_id:
            bool_query["filter"] = [term_filter("workspace_id", workspace_id)]

        body = {
            "query": {"bool": bool_query},
            "size": limit,
            "_source": list(SUGGEST_FIELDS),
        }

        try:
            raw = await self.engine.search(wildcard_index(self.settings.INDEX_PREFIX), body)
        except SearchEngineError as e:
            logger.warning(f"Suggest degraded to empty result: {e.message}")
            return SuggestionResponse(suggestions=[])

        return SuggestionResponse(suggestions=extract_suggestions(raw, limit))

    def _checked_index(self, index: str) -> str:
        if not validate_index_name(index, self.settings.INDEX_PREFIX):
            raise ValidationError(f"unknown index '{index}'", field="index")
        return index

    async def advanced_search(self, request: AdvancedSearchParams) -> GlobalSearchResponse:
        """
        Run caller-defined sub-queries and slot results by entity type.

        Sub-queries against indices outside the four global types run but
        have no slot in the response.
        """
        params = self.normalize_params(SearchParams(
            workspace_id=request.workspace_id,
            page=request.page,
            per_page=request.per_page,
        ))

        async def run(sub: SubQuery) -> SearchResponse:
            sub_params = params.model_copy(update={"query": sub.query})
            must = [multi_match(sub.query, sub.fields or ["*"], boost=sub.boost or None)]
            filters = [term_filter("workspace_id", params.workspace_id)] if params.workspace_id else []
            for field, value in (sub.filter or {}).items():
                filters.append(term_filter(field, value))
            try:
                raw = await self.engine.search(sub.index, build_query(must, filters, sub_params))
            except SearchEngineError as e:
                logger.warning(f"Advanced sub-query on {sub.index} degraded: {e.message}")
                return empty_response(sub_params)
            return normalize_response(raw, sub_params)

        for sub in request.queries:
            self._checked_index(sub.index)

        outcomes = await asyncio.gather(*(run(sub) for sub in request.queries))

        slots: Dict[str, SearchResponse] = {}
        for sub, outcome in zip(request.queries, outcomes):
            entity = entity_for_index(sub.index, self.settings.INDEX_PREFIX)
            if entity in GLOBAL_ENTITY_TYPES:
                slots[entity.value] = outcome
        return GlobalSearchResponse(**slots)

    async def aggregate(self, request: AggregationRequest) -> AggregationResponse:
        """Terms aggregation over one field; engine errors yield no buckets."""
        index = self._checked_index(request.index)
        size = request.size if request.size > 0 else 10
        body = {
            "size": 0,
            "aggs": {"field_agg": {"terms": {"field": request.field, "size": size}}},
        }

        try:
            raw = await self.engine.search(index, body)
        except SearchEngineError as e:
            logger.warning(f"Aggregation on {index}.{request.field} degraded: {e.message}")
            return AggregationResponse(buckets=[])

        buckets: List[AggregationBucket] = []
        raw_buckets = safe_get(raw, "aggregations", "field_agg", "buckets")
        if isinstance(raw_buckets, list):
            for bucket in raw_buckets:
                if not isinstance(bucket, dict) or bucket.get("key") is None:
                    continue
                doc_count = bucket.get("doc_count")
                buckets.append(AggregationBucket(
                    key=str(bucket["key"]),
                    doc_count=int(doc_count) if isinstance(doc_count, (int, float)) else 0,
                ))
        return AggregationResponse(buckets=buckets)

    async def health_check(self) -> Dict[str, str]:
        """Report engine and store connectivity."""
        engine_ok = await self.engine.ping()
        cache_ok = await self.result_cache.cache.ping()
        return {
            "service": "search-service",
            "status": "healthy",
            "elasticsearch": "connected" if engine_ok else "disconnected",
            "redis": "connected" if cache_ok else "disconnected",
        }


def extract_suggestions(raw: Any, limit: int) -> List[str]:
    """
    Pull distinct suggestion strings out of a raw engine response.

    Only whitelisted fields are read; non-string and empty values are skipped.
    """
    suggestions: List[str] = []
    seen = set()

    hits = safe_get(raw, "hits", "hits")
    if not isinstance(hits, list):
        return suggestions

    for hit in hits:
        source = hit.get("_source") if isinstance(hit, dict) else None
        if not isinstance(source, dict):
            continue
        for field in SUGGEST_FIELDS:
            value = source.get(field)
            if isinstance(value, str) and value and value not in seen:
                seen.add(value)
                suggestions.append(value)
                if len(suggestions) >= limit:
                    return suggestions
    return suggestions
