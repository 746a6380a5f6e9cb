import logging

from sqlalchemy import desc, or_
from sqlalchemy.orm import Session, selectinload

from models.asset import Asset
from models.project import Project
from models.tag import ProjectTag, Tag
from crud.tag_crud import attach_tags, clear_project_tags
from schemas.project_schema import ProjectCreate, ProjectUpdate

log = logging.getLogger(__name__)

_DETAIL_LOAD = (
    selectinload(Project.tags).joinedload(ProjectTag.tag),
    selectinload(Project.assets),
)


def get_project(db: Session, project_id: str):
    return (
        db.query(Project)
        .options(*_DETAIL_LOAD)
        .filter(Project.id == project_id)
        .first()
    )


def list_projects(
    db: Session,
    q: str | None = None,
    tags: list[str] | None = None,
    owner_id: str | None = None,
    visibility: str | None = None,
    viewer=None,
    skip: int = 0,
    limit: int = 12,
):
    """Newest first. Fetches one extra row so callers can tell if more exist."""
    query = db.query(Project).options(*_DETAIL_LOAD)
    if q:
        query = query.filter(or_(
            Project.title.icontains(q, autoescape=True),
            Project.description.icontains(q, autoescape=True),
        ))
    if owner_id:
        query = query.filter(Project.owner_id == owner_id)
    if visibility:
        query = query.filter(Project.visibility == visibility)
    if tags:
        query = query.filter(Project.tags.any(ProjectTag.tag.has(Tag.slug.in_(tags))))
    # Other people's private projects are never listed
    if viewer is None:
        query = query.filter(Project.visibility != "PRIVATE")
    elif not viewer.is_admin:
        query = query.filter(or_(Project.visibility != "PRIVATE", Project.owner_id == viewer.id))
    return query.order_by(desc(Project.created_at), Project.id).offset(skip).limit(limit + 1).all()


def create_project(db: Session, payload: ProjectCreate, owner_id: str) -> Project:
    try:
        proj = Project(
            owner_id=owner_id,
            title=payload.title,
            description=payload.description,
            category=payload.category,
            visibility=payload.visibility,
        )
        db.add(proj)
        db.flush()
        if payload.tags:
            attach_tags(db, proj.id, payload.tags)
        for a in payload.assets:
            db.add(Asset(project_id=proj.id, **a.model_dump()))
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(proj)
    return proj


def update_project(db: Session, project: Project, payload: ProjectUpdate) -> Project:
    """Apply a partial update; a tag list replaces all associations atomically.

    Either every change (fields, tag unlink, tag upserts, relinks) commits
    or the session is rolled back and the project is left as it was.
    """
    try:
        fields = payload.model_dump(exclude_unset=True, exclude={"tags"})
        for k, v in fields.items():
            # category is the only nullable field a client may clear
            if v is not None or k == "category":
                setattr(project, k, v)
        if payload.tags is not None:
            clear_project_tags(db, project.id)
            attach_tags(db, project.id, payload.tags)
        db.commit()
    except Exception:
        db.rollback()
        log.exception("Project update rolled back for %s", project.id)
        raise
    db.refresh(project)
    return project


def delete_project(db: Session, project: Project) -> None:
    db.delete(project)
    db.commit()


def count_projects(db: Session) -> int:
    return db.query(Project).count()
