"""Search over public projects.

Query construction is split in two: ``build_search_plan`` turns validated
parameters into a plain ``SearchPlan`` (no database involved), and
``run_search`` compiles that plan into SQLAlchemy and executes it.
"""
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from models.download import Download
from models.project import Project
from models.tag import ProjectTag, Tag
from schemas.search_schema import Pagination, SearchParams

log = logging.getLogger(__name__)

DATE_RANGE_DAYS = {"week": 7, "month": 30, "year": 365}
SUGGESTION_PROJECTS = 5
SUGGESTION_CAP = 8


@dataclass(frozen=True)
class SearchFilter:
    visibility: str = "PUBLIC"
    text: str | None = None
    category: str | None = None
    tags: tuple[str, ...] = ()
    created_after: datetime | None = None


@dataclass(frozen=True)
class SortKey:
    field: str  # "downloads" or "created_at"
    descending: bool = True


# "relevance" is download count with recency as tie-break; no text scoring.
ORDERINGS = {
    "date": (SortKey("created_at"),),
    "popularity": (SortKey("downloads"),),
    "relevance": (SortKey("downloads"), SortKey("created_at")),
}


@dataclass(frozen=True)
class SearchPlan:
    filter: SearchFilter
    ordering: tuple[SortKey, ...]
    offset: int
    limit: int
    page: int = 1


def parse_tag_list(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [t.strip() for t in raw.split(",") if t.strip()]


def build_search_plan(params: SearchParams, now: datetime | None = None) -> SearchPlan:
    now = now or datetime.now(timezone.utc)
    created_after = None
    days = DATE_RANGE_DAYS.get(params.date_range)
    if days is not None:
        created_after = now - timedelta(days=days)

    return SearchPlan(
        filter=SearchFilter(
            text=params.q or None,
            category=params.category or None,
            tags=tuple(params.tags),
            created_after=created_after,
        ),
        ordering=ORDERINGS.get(params.sort_by, ORDERINGS["relevance"]),
        offset=(params.page - 1) * params.limit,
        limit=params.limit,
        page=params.page,
    )


def filter_clauses(f: SearchFilter) -> list:
    clauses = [Project.visibility == f.visibility]
    if f.text:
        clauses.append(or_(
            Project.title.icontains(f.text, autoescape=True),
            Project.description.icontains(f.text, autoescape=True),
            Project.tags.any(ProjectTag.tag.has(Tag.name.icontains(f.text, autoescape=True))),
        ))
    if f.category:
        clauses.append(Project.category == f.category)
    if f.tags:
        clauses.append(Project.tags.any(ProjectTag.tag.has(Tag.name.in_(f.tags))))
    if f.created_after is not None:
        clauses.append(Project.created_at >= f.created_after)
    return clauses


def _download_counts():
    return (
        select(Download.project_id.label("project_id"), func.count(Download.id).label("n"))
        .group_by(Download.project_id)
        .subquery()
    )


def run_search(db: Session, plan: SearchPlan) -> tuple[list[tuple[Project, int]], int]:
    """Returns ([(project, download_count), ...], total_count)."""
    clauses = filter_clauses(plan.filter)
    counts = _download_counts()
    downloads = func.coalesce(counts.c.n, 0)
    columns = {"downloads": downloads, "created_at": Project.created_at}
    order_by = [columns[k.field].desc() if k.descending else columns[k.field].asc() for k in plan.ordering]
    order_by.append(Project.id)

    rows = (
        db.query(Project, downloads)
        .outerjoin(counts, counts.c.project_id == Project.id)
        .options(
            selectinload(Project.tags).joinedload(ProjectTag.tag),
            selectinload(Project.assets),
        )
        .filter(*clauses)
        .order_by(*order_by)
        .offset(plan.offset)
        .limit(plan.limit)
        .all()
    )
    total = db.query(func.count(Project.id)).filter(*clauses).scalar() or 0
    return [(p, int(n)) for p, n in rows], total


def search_suggestions(db: Session, text: str | None) -> list[str]:
    """Titles then tag names of a few matching projects, de-duplicated.

    Ignores every filter except visibility and the free-text match on
    title/description. Failures are logged and yield no suggestions.
    """
    try:
        q = (
            db.query(Project)
            .options(selectinload(Project.tags).joinedload(ProjectTag.tag))
            .filter(Project.visibility == "PUBLIC")
        )
        if text:
            q = q.filter(or_(
                Project.title.icontains(text, autoescape=True),
                Project.description.icontains(text, autoescape=True),
            ))
        projects = q.limit(SUGGESTION_PROJECTS).all()
    except Exception as e:
        log.warning("Search suggestions failed: %s", e)
        return []

    candidates = [p.title for p in projects]
    candidates += [pt.tag.name for p in projects for pt in p.tags]
    return list(dict.fromkeys(candidates))[:SUGGESTION_CAP]


def paginate(page: int, limit: int, total: int) -> Pagination:
    total_pages = math.ceil(total / limit) if limit else 0
    return Pagination(
        page=page,
        limit=limit,
        total_count=total,
        total_pages=total_pages,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )
