from typing import Literal

from pydantic import Field

from schemas.base_schema import CamelModel
from schemas.project_schema import ProjectSummary

SortBy = Literal["relevance", "date", "popularity"]
DateRange = Literal["all", "week", "month", "year"]


class SearchParams(CamelModel):
    q: str | None = None
    category: str | None = None
    tags: list[str] = []
    sort_by: SortBy = "relevance"
    date_range: DateRange = "all"
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=12, ge=1)


class Pagination(CamelModel):
    page: int
    limit: int
    total_count: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class SearchFilters(CamelModel):
    query: str | None = None
    category: str | None = None
    tags: list[str] = []
    sort_by: SortBy
    date_range: DateRange


class SearchResult(CamelModel):
    projects: list[ProjectSummary]
    pagination: Pagination
    suggestions: list[str]
    filters: SearchFilters
