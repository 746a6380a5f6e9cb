from sqlalchemy.orm import Session
from models.tag import Tag, ProjectTag


def upsert_tag(db: Session, slug: str) -> Tag:
    """Return the tag with `slug`, creating it (name = slug) when absent."""
    tag = db.query(Tag).filter(Tag.slug == slug).first()
    if tag is None:
        tag = Tag(slug=slug, name=slug)
        db.add(tag)
        db.flush()
    return tag


def attach_tags(db: Session, project_id: str, slugs: list[str]) -> list[Tag]:
    """Upsert each slug and link it to the project, skipping duplicates.

    Runs inside the caller's transaction; nothing is committed here.
    """
    tags = []
    seen: set[str] = set()
    for slug in slugs:
        tag = upsert_tag(db, slug)
        if tag.id in seen:
            continue
        seen.add(tag.id)
        db.add(ProjectTag(project_id=project_id, tag_id=tag.id))
        tags.append(tag)
    db.flush()
    return tags


def clear_project_tags(db: Session, project_id: str) -> int:
    return (
        db.query(ProjectTag)
        .filter(ProjectTag.project_id == project_id)
        .delete(synchronize_session=False)
    )


def project_tag_names(db: Session, project_id: str) -> list[str]:
    rows = (
        db.query(Tag.name)
        .join(ProjectTag, ProjectTag.tag_id == Tag.id)
        .filter(ProjectTag.project_id == project_id)
        .order_by(Tag.name)
        .all()
    )
    return [r[0] for r in rows]
