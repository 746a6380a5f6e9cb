import json
import logging
from datetime import datetime, timezone
from urllib.parse import urlparse

from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.orm import Session

from models.analytics import (
    AnalyticsEvent, ErrorLog, PageView, ProjectInteraction, SearchQuery, UploadStats,
)
from schemas.analytics_schema import AnalyticsEventIn, typed_properties

log = logging.getLogger(__name__)

SEARCH_QUERY_MAX = 255
FILE_NAME_MAX = 255
ERROR_MAX = 500


def record_event(db: Session, event: AnalyticsEventIn, ip: str, user_agent: str) -> AnalyticsEvent:
    row = AnalyticsEvent(
        name=event.name,
        properties=event.properties or {},
        session_id=event.session_id or "unknown",
        user_id=event.user_id,
        url=str(event.url) if event.url else None,
        timestamp=event.timestamp or datetime.now(timezone.utc),
        ip_address=ip,
        user_agent=user_agent or "",
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def upsert_increment(db: Session, model, keys: dict, conflict_columns: list[str]) -> None:
    """Create the counter row at 1 or bump it by one in a single statement."""
    table = model.__table__
    dialect = db.get_bind().dialect.name
    if dialect == "mysql":
        stmt = mysql.insert(table).values(**keys, count=1)
        stmt = stmt.on_duplicate_key_update(count=table.c.count + 1)
    else:
        insert = postgresql.insert if dialect == "postgresql" else sqlite.insert
        stmt = insert(table).values(**keys, count=1)
        stmt = stmt.on_conflict_do_update(
            index_elements=conflict_columns,
            set_={"count": table.c.count + 1},
        )
    db.execute(stmt)
    db.commit()


def track_page_view(db: Session, event: AnalyticsEventIn, props) -> None:
    if event.url is None:
        log.warning("page_view without url; skipping counter")
        return
    path = urlparse(str(event.url)).path or "/"
    upsert_increment(db, PageView, {"path": path}, ["path"])


def track_project_interaction(db: Session, event: AnalyticsEventIn, props) -> None:
    if props.project_id and props.action:
        upsert_increment(
            db,
            ProjectInteraction,
            {"project_id": props.project_id, "action": props.action},
            ["project_id", "action"],
        )


def track_search(db: Session, event: AnalyticsEventIn, props) -> None:
    if props.query:
        db.add(SearchQuery(
            query=props.query[:SEARCH_QUERY_MAX],
            results_count=props.results_count or 0,
            timestamp=datetime.now(timezone.utc),
        ))
        db.commit()


def track_file_upload(db: Session, event: AnalyticsEventIn, props) -> None:
    if props.file_name:
        db.add(UploadStats(
            file_name=props.file_name[:FILE_NAME_MAX],
            file_size=props.file_size or 0,
            file_type=props.file_type or "unknown",
            success=bool(props.success),
            timestamp=datetime.now(timezone.utc),
        ))
        db.commit()


def track_error(db: Session, event: AnalyticsEventIn, props) -> None:
    if props.error:
        context = props.context
        if context is None:
            context = "unknown"
        elif not isinstance(context, str):
            context = json.dumps(context, default=str)
        db.add(ErrorLog(
            error=props.error[:ERROR_MAX],
            context=context or "unknown",
            url=str(event.url) if event.url else None,
            user_agent=props.user_agent or "",
            timestamp=datetime.now(timezone.utc),
        ))
        db.commit()


AGGREGATORS = {
    "page_view": track_page_view,
    "project_interaction": track_project_interaction,
    "search": track_search,
    "file_upload": track_file_upload,
    "error": track_error,
}


def update_aggregates(db: Session, event: AnalyticsEventIn) -> bool:
    """Best-effort side-table update for known event names.

    Returns False when the update failed; the failure is logged and the
    session rolled back, never raised.
    """
    handler = AGGREGATORS.get(event.name)
    if handler is None:
        return True
    try:
        props = typed_properties(event.name, event.properties)
        handler(db, event, props)
        return True
    except Exception as e:
        db.rollback()
        log.warning("Failed to track %s: %s", event.name, e)
        return False


def get_page_view_count(db: Session, path: str) -> int:
    row = db.query(PageView).filter(PageView.path == path).first()
    return row.count if row else 0


def get_interaction_count(db: Session, project_id: str, action: str) -> int:
    row = (
        db.query(ProjectInteraction)
        .filter(ProjectInteraction.project_id == project_id, ProjectInteraction.action == action)
        .first()
    )
    return row.count if row else 0
