from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class SavedSearchCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    query: str = Field(..., min_length=1, max_length=2000)
    search_type: str = Field(..., min_length=1, max_length=32)
    filters: Optional[Dict[str, str]] = None
    workspace_id: str = ""


class SavedSearchUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=255)
    query: Optional[str] = Field(default=None, max_length=2000)
    filters: Optional[Dict[str, str]] = None


class SavedSearch(BaseModel):
    id: str
    user_id: str
    name: str
    query: str
    search_type: str
    filters: Optional[Dict[str, str]] = None
    workspace_id: str = ""
    created_at: datetime
    updated_at: datetime


class SearchHistoryEntry(BaseModel):
    id: str
    user_id: str
    query: str
    search_type: str  # global, messages, files, users, channels, ...
    workspace_id: str = ""
    result_count: int = 0
    created_at: datetime


class SearchHistoryResponse(BaseModel):
    history: List[SearchHistoryEntry] = Field(default_factory=list)
