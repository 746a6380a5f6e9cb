from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from core.auth import RequestContext, get_request_context, require_user
from core.config import settings
from core.database import get_db
from core.event_hub import EventHub, get_event_hub
from core.responses import validation_details
from core.storage import resolve_asset_url
from crud.download_crud import record_download
from crud.project_crud import create_project, delete_project, get_project, list_projects, update_project
from crud.search_crud import parse_tag_list
from schemas.project_schema import (
    ProjectCreate, ProjectCreated, ProjectDetail, ProjectPage, ProjectResponse, ProjectUpdate, project_detail,
)


router = APIRouter(prefix="/api/projects", tags=["Projects"])


def _invalid(e: ValidationError) -> HTTPException:
    return HTTPException(status_code=400, detail=validation_details(e.errors()))


def _load_managed(db: Session, project_id: str, ctx: RequestContext):
    proj = get_project(db, project_id)
    if not proj:
        raise HTTPException(status_code=404, detail="Not found")
    if not ctx.can_manage(proj):
        raise HTTPException(status_code=403, detail="Forbidden")
    return proj


@router.get("", response_model=ProjectPage)
def list_all(
    q: str = "",
    tags: str = "",
    owner: str | None = None,
    visibility: str | None = None,
    page: int = 1,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    page = max(page, 1)
    size = settings.PROJECTS_PAGE_SIZE
    items = list_projects(
        db, q=q or None, tags=parse_tag_list(tags), owner_id=owner, visibility=visibility,
        viewer=ctx.user, skip=(page - 1) * size, limit=size,
    )
    has_next = len(items) > size
    return ProjectPage(
        items=[project_detail(p) for p in items[:size]],
        next_cursor=page + 1 if has_next else None,
    )


@router.post("", response_model=ProjectCreated)
def create(
    body: dict = Body(...),
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(require_user),
):
    try:
        payload = ProjectCreate.model_validate(body)
    except ValidationError as e:
        raise _invalid(e)
    proj = create_project(db, payload, owner_id=ctx.user.id)
    return ProjectCreated(id=proj.id)


@router.get("/{project_id}", response_model=ProjectDetail)
def read_one(
    project_id: str,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    proj = get_project(db, project_id)
    # Private projects read as missing to anyone but owner or admin
    if not proj or not proj.readable_by(ctx.user):
        raise HTTPException(status_code=404, detail="Not found")
    return project_detail(proj, resolve_url=resolve_asset_url)


@router.patch("/{project_id}", response_model=ProjectResponse)
def update(
    project_id: str,
    body: dict = Body(...),
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(require_user),
):
    proj = _load_managed(db, project_id, ctx)
    # Body is validated only once the caller may edit
    try:
        payload = ProjectUpdate.model_validate(body)
    except ValidationError as e:
        raise _invalid(e)
    return update_project(db, proj, payload)


@router.delete("/{project_id}", status_code=204)
def delete(
    project_id: str,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(require_user),
):
    proj = _load_managed(db, project_id, ctx)
    delete_project(db, proj)
    return None


@router.post("/{project_id}/download", status_code=202)
def download(
    project_id: str,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
    hub: EventHub = Depends(get_event_hub),
):
    proj = get_project(db, project_id)
    if not proj or not proj.readable_by(ctx.user):
        raise HTTPException(status_code=404, detail="Not found")
    record_download(db, proj.id, user_id=ctx.user.id if ctx.user else None)
    hub.send_to_user(proj.owner_id, "project_downloaded", {"projectId": proj.id, "title": proj.title})
    return JSONResponse(status_code=202, content={"status": "accepted"})
