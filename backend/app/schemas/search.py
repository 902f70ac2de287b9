"""
Search schemas for request/response models.
"""

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from app.utils.validators import clamp_pagination


class EntityType(str, Enum):
    """Searchable document categories."""
    MESSAGES = "messages"
    FILES = "files"
    USERS = "users"
    CHANNELS = "channels"
    BOOKMARKS = "bookmarks"
    TASKS = "tasks"
    EMOJI = "emoji"


class SortMode(str, Enum):
    """Result ordering."""
    RELEVANCE = "relevance"
    NEWEST = "newest"
    OLDEST = "oldest"


class SearchParams(BaseModel):
    """
    Search request descriptor.

    Built from query-string parameters by the API layer and handed to the
    search service, which works on a normalized copy.
    """
    query: str = ""
    workspace_id: str = ""
    channel_id: Optional[str] = None
    user_id: Optional[str] = None
    file_type: Optional[str] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    page: int = 1
    per_page: int = 20
    sort: str = SortMode.RELEVANCE.value

    def normalized(self, default_per_page: int = 20, max_per_page: int = 100) -> "SearchParams":
        """Return a copy with page and per_page clamped into valid ranges."""
        page, per_page = clamp_pagination(self.page, self.per_page, default_per_page, max_per_page)
        return self.model_copy(update={"page": page, "per_page": per_page})

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


class SearchHit(BaseModel):
    """One normalized engine hit."""
    index: str = ""
    id: str
    score: float = 0.0
    source: Optional[Dict[str, Any]] = None


class SearchResponse(BaseModel):
    """Paginated search response."""
    results: List[SearchHit] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    per_page: int = 20
    total_pages: int = 0


class GlobalSearchResponse(BaseModel):
    """One search response per primary entity type."""
    messages: Optional[SearchResponse] = None
    files: Optional[SearchResponse] = None
    users: Optional[SearchResponse] = None
    channels: Optional[SearchResponse] = None


class SuggestionResponse(BaseModel):
    suggestions: List[str] = Field(default_factory=list)


# Index requests

class IndexRequest(BaseModel):
    index: str = Field(..., min_length=1)
    id: str = Field(..., min_length=1)
    document: Dict[str, Any]


class BulkIndexRequest(BaseModel):
    documents: List[IndexRequest] = Field(..., min_length=1, max_length=100)


class BulkIndexResponse(BaseModel):
    indexed: int = 0
    failed: int = 0
    errors: List[str] = Field(default_factory=list)


class ReindexRequest(BaseModel):
    index: str = Field(..., min_length=1)


class BatchDeleteRequest(BaseModel):
    index: str = Field(..., min_length=1)
    ids: List[str] = Field(..., min_length=1, max_length=100)


class BatchDeleteResponse(BaseModel):
    deleted: int = 0
    failed: int = 0
    errors: List[str] = Field(default_factory=list)


class UpdateDocumentRequest(BaseModel):
    document: Dict[str, Any]


class IndexResult(BaseModel):
    indexed: bool = True
    id: str


class CountResponse(BaseModel):
    index: str
    count: int


class IndexUserRequest(BaseModel):
    id: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)
    display_name: str = ""
    email: str = ""
    avatar_url: str = ""
    workspace_id: str = Field(..., min_length=1)


class IndexChannelRequest(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str = ""
    topic: str = ""
    type: str = ""
    workspace_id: str = Field(..., min_length=1)


class IndexBookmarkRequest(BaseModel):
    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = ""
    url: str = ""
    tags: List[str] = Field(default_factory=list)
    user_id: str = Field(..., min_length=1)
    workspace_id: str = Field(..., min_length=1)
    created_at: Optional[str] = None


class IndexTaskRequest(BaseModel):
    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = ""
    status: str = ""
    priority: str = ""
    assignee_id: str = ""
    user_id: str = Field(..., min_length=1)
    workspace_id: str = Field(..., min_length=1)
    created_at: Optional[str] = None


# Advanced search and aggregation

class SubQuery(BaseModel):
    index: str = Field(..., min_length=1)
    query: str = Field(..., min_length=1)
    fields: List[str] = Field(default_factory=list)
    filter: Optional[Dict[str, Any]] = None
    boost: float = 0.0


class AdvancedSearchParams(BaseModel):
    queries: List[SubQuery] = Field(..., min_length=1)
    workspace_id: str = ""
    page: int = 1
    per_page: int = 20


class AggregationRequest(BaseModel):
    index: str = Field(..., min_length=1)
    field: str = Field(..., min_length=1)
    size: int = 10


class AggregationBucket(BaseModel):
    key: str
    doc_count: int = 0


class AggregationResponse(BaseModel):
    buckets: List[AggregationBucket] = Field(default_factory=list)
