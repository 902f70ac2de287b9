"""
Engine response normalization.

Turns a raw Elasticsearch response body into a SearchResponse. Malformed
input never raises: unusable parts are skipped and the caller always gets
a well-formed response.
"""

import math
from typing import Any, Dict, List, Optional

from app.schemas.search import SearchHit, SearchParams, SearchResponse
from app.utils.helpers import safe_get


HIGHLIGHTS_KEY = "_highlights"


def empty_response(params: SearchParams) -> SearchResponse:
    """Degraded response used when the engine is unavailable."""
    return SearchResponse(
        results=[],
        total=0,
        page=params.page,
        per_page=params.per_page,
        total_pages=0,
    )


def total_pages(total: int, per_page: int) -> int:
    if total <= 0 or per_page <= 0:
        return 0
    return math.ceil(total / per_page)


def _read_total(hits: Dict[str, Any]) -> int:
    total = hits.get("total")
    # ES 7+ returns {"value": n, "relation": "eq"|"gte"}; older engines a bare number
    if isinstance(total, dict):
        total = total.get("value")
    if isinstance(total, bool) or not isinstance(total, (int, float)):
        return 0
    return max(int(total), 0)


def _read_score(raw: Any) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return 0.0
    return float(raw)


def normalize_hit(hit: Any) -> Optional[SearchHit]:
    """
    Normalize a single engine hit.

    Args:
        hit: One element of ``hits.hits``

    Returns:
        SearchHit, or None when the hit has no usable id
    """
    if not isinstance(hit, dict):
        return None

    doc_id = hit.get("_id")
    if isinstance(doc_id, (int, float)) and not isinstance(doc_id, bool):
        doc_id = str(doc_id)
    if not isinstance(doc_id, str) or not doc_id:
        return None

    index = hit.get("_index")
    source = hit.get("_source")
    source = dict(source) if isinstance(source, dict) else None

    highlights = hit.get("highlight")
    if isinstance(highlights, dict):
        if source is None:
            source = {}
        source[HIGHLIGHTS_KEY] = highlights

    return SearchHit(
        index=index if isinstance(index, str) else "",
        id=doc_id,
        score=_read_score(hit.get("_score")),
        source=source,
    )


def normalize_response(raw: Any, params: SearchParams) -> SearchResponse:
    """
    Map an engine response onto a SearchResponse.

    Args:
        raw: Engine response body (any shape)
        params: Normalized parameters the query was built from

    Returns:
        SearchResponse with page/per_page echoed from params
    """
    response = empty_response(params)

    hits = safe_get(raw, "hits") if isinstance(raw, dict) else None
    if not isinstance(hits, dict):
        return response

    response.total = _read_total(hits)

    hit_list = hits.get("hits")
    if isinstance(hit_list, list):
        results: List[SearchHit] = []
        for hit in hit_list:
            normalized = normalize_hit(hit)
            if normalized is not None:
                results.append(normalized)
        response.results = results

    response.total_pages = total_pages(response.total, params.per_page)
    return response
