from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from .media_schemas import UnifiedResult

ResourceType = Literal['movie', 'tv', 'person', 'all']
RESOURCE_TYPES = ('movie', 'tv', 'person', 'all')


class SearchRequest(BaseModel):
    """Normalized search request; every field holds a legal value."""
    model_config = ConfigDict(frozen=True)

    query: str = Field(min_length=1)
    resource_type: ResourceType = 'all'
    page: int = Field(default=1, ge=1)
    language: str = 'ja-JP'
    year: Optional[int] = Field(default=None, ge=1900, le=2100)


class SearchResponse(BaseModel):
    query: str
    type: ResourceType
    page: int
    total_pages: int
    total_results: int
    results: List[UnifiedResult]
    language: str


class ErrorResponse(BaseModel):
    error: str
    message: str
    code: int


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    timestamp: str
