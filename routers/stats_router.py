from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.database import get_db
from crud.download_crud import count_downloads
from crud.project_crud import count_projects
from crud.user_crud import count_users


router = APIRouter(prefix="/api/stats", tags=["Stats"])


@router.get("")
def stats(db: Session = Depends(get_db)):
    return {
        "projects": count_projects(db),
        "users": count_users(db),
        "downloads": count_downloads(db),
    }
