import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.config import settings
from core.database import get_db
from core.responses import error_response, success_response
from crud.search_crud import build_search_plan, paginate, parse_tag_list, run_search, search_suggestions
from schemas.project_schema import ProjectSummary, project_detail
from schemas.search_schema import SearchFilters, SearchParams, SearchResult

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/search", tags=["Search"])


@router.get("")
def search(
    q: str | None = None,
    category: str | None = None,
    tags: str | None = None,
    sort_by: Literal["relevance", "date", "popularity"] = Query("relevance", alias="sortBy"),
    date_range: Literal["all", "week", "month", "year"] = Query("all", alias="dateRange"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.SEARCH_DEFAULT_LIMIT, ge=1, le=settings.SEARCH_MAX_LIMIT),
    db: Session = Depends(get_db),
):
    params = SearchParams(
        q=q, category=category, tags=parse_tag_list(tags),
        sort_by=sort_by, date_range=date_range, page=page, limit=limit,
    )
    try:
        plan = build_search_plan(params)
        rows, total = run_search(db, plan)
        result = SearchResult(
            projects=[
                project_detail(p, model=ProjectSummary, download_count=n, asset_count=len(p.assets))
                for p, n in rows
            ],
            pagination=paginate(params.page, params.limit, total),
            suggestions=search_suggestions(db, params.q),
            filters=SearchFilters(
                query=params.q, category=params.category, tags=params.tags,
                sort_by=params.sort_by, date_range=params.date_range,
            ),
        )
    except Exception:
        log.exception("Search error")
        return error_response("Internal server error", 500)
    return success_response(result)
