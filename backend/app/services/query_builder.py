"""
Engine query construction.

Pure functions turning match clauses, filter clauses and search
parameters into an Elasticsearch request body.
"""

from typing import Any, Dict, List, Optional

from app.schemas.search import SearchParams, SortMode


Clause = Dict[str, Any]

# Highlighted on every entity; fields missing from a document are ignored by the engine
HIGHLIGHT_FIELDS = ("content", "filename", "name", "display_name", "description", "title")
HIGHLIGHT_PRE_TAG = "<em>"
HIGHLIGHT_POST_TAG = "</em>"


def term_filter(field: str, value: Any) -> Clause:
    return {"term": {field: value}}


def fuzzy_match(field: str, query: str) -> Clause:
    """Single-field match tolerant of small typos."""
    return {"match": {field: {"query": query, "fuzziness": "AUTO"}}}


def multi_match(
    query: str,
    fields: List[str],
    fuzzy: bool = False,
    phrase_prefix: bool = False,
    boost: Optional[float] = None,
) -> Clause:
    """
    Multi-field match clause.

    Args:
        query: Free text, passed through unmodified
        fields: Field references, boosts inline (``"title^3"``)
        fuzzy: Enable ``fuzziness: AUTO``
        phrase_prefix: Treat the query as a phrase prefix (autocomplete)
        boost: Optional clause-level boost

    Returns:
        ``multi_match`` clause
    """
    body: Dict[str, Any] = {"query": query, "fields": list(fields)}
    if phrase_prefix:
        body["type"] = "phrase_prefix"
    if fuzzy:
        body["fuzziness"] = "AUTO"
    if boost:
        body["boost"] = boost
    return {"multi_match": body}


def build_filters(params: SearchParams) -> List[Clause]:
    """
    Filters shared by every entity search: workspace scope and date range.

    Args:
        params: Normalized search parameters

    Returns:
        List of filter clauses (possibly empty)
    """
    filters: List[Clause] = []

    if params.workspace_id:
        filters.append(term_filter("workspace_id", params.workspace_id))

    if params.date_from or params.date_to:
        range_filter: Dict[str, Any] = {}
        if params.date_from:
            range_filter["gte"] = params.date_from
        if params.date_to:
            range_filter["lte"] = params.date_to
        filters.append({"range": {"created_at": range_filter}})

    return filters


def build_sort(sort: str) -> Optional[List[Clause]]:
    """Sort clause for a sort mode; None means native relevance order."""
    if sort == SortMode.NEWEST.value:
        return [{"created_at": "desc"}, {"_score": "desc"}]
    if sort == SortMode.OLDEST.value:
        return [{"created_at": "asc"}, {"_score": "desc"}]
    return None


def build_highlight() -> Dict[str, Any]:
    return {
        "fields": {field: {} for field in HIGHLIGHT_FIELDS},
        "pre_tags": [HIGHLIGHT_PRE_TAG],
        "post_tags": [HIGHLIGHT_POST_TAG],
    }


def build_query(
    must: List[Clause],
    filters: List[Clause],
    params: SearchParams,
) -> Dict[str, Any]:
    """
    Assemble the full search body.

    The ``filter`` key is left out entirely when there are no filters.
    Date sorts always break ties by score.

    Args:
        must: Entity-specific match clauses
        filters: Filter clauses
        params: Normalized search parameters

    Returns:
        Engine request body
    """
    bool_query: Dict[str, Any] = {"must": list(must)}
    if filters:
        bool_query["filter"] = list(filters)

    query: Dict[str, Any] = {
        "query": {"bool": bool_query},
        "from": params.offset,
        "size": params.per_page,
        "highlight": build_highlight(),
    }

    sort = build_sort(params.sort)
    if sort is not None:
        query["sort"] = sort

    return query
