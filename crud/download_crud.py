from sqlalchemy.orm import Session
from models.download import Download


def record_download(db: Session, project_id: str, user_id: str | None = None) -> Download:
    d = Download(project_id=project_id, user_id=user_id)
    db.add(d)
    db.commit()
    db.refresh(d)
    return d


def count_downloads(db: Session, project_id: str | None = None) -> int:
    q = db.query(Download)
    if project_id:
        q = q.filter(Download.project_id == project_id)
    return q.count()
