import logging
import os
import re
import time
import uuid
from dataclasses import dataclass

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import ValidationError

from core.auth import RequestContext, require_user
from core.config import settings
from core.responses import validation_details
from core.storage import get_signed_put_url
from schemas.upload_schema import UploadRequest, UploadRouteInfo, UploadTicket

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/uploadthing", tags=["Upload"])

MB = 1024 * 1024


@dataclass(frozen=True)
class UploadRoute:
    slug: str
    kind: str
    max_file_size: int


UPLOAD_ROUTES = {
    r.slug: r
    for r in (
        UploadRoute("modelUploader", "MODEL", 32 * MB),
        UploadRoute("scriptUploader", "SCRIPT", 4 * MB),
        UploadRoute("configUploader", "CONFIG", 1 * MB),
    )
}


def _normalize_filename(original_name: str) -> str:
    """Keep letters, digits, dot and dash; collapse the rest to single underscores."""
    name = re.sub(r"[^a-zA-Z0-9.-]", "_", original_name or "")
    name = re.sub(r"_{2,}", "_", name).strip("_")
    return name[:255] or "unnamed"


def _storage_key(kind: str, filename: str) -> str:
    stem, ext = os.path.splitext(filename)
    ts = int(time.time() * 1000)
    return f"{kind.lower()}/{ts}-{uuid.uuid4().hex[:12]}-{stem}{ext}"


@router.get("", response_model=list[UploadRouteInfo])
def list_routes():
    return [UploadRouteInfo(slug=r.slug, kind=r.kind, max_file_size=r.max_file_size) for r in UPLOAD_ROUTES.values()]


@router.post("", response_model=list[UploadTicket])
def negotiate(
    slug: str = Query(...),
    body: dict = Body(...),
    ctx: RequestContext = Depends(require_user),
):
    route = UPLOAD_ROUTES.get(slug)
    if route is None:
        raise HTTPException(status_code=404, detail="Unknown upload route")
    try:
        req = UploadRequest.model_validate(body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=validation_details(e.errors()))

    for f in req.files:
        if f.size > route.max_file_size:
            raise HTTPException(
                status_code=413,
                detail=f"{f.name} exceeds {route.max_file_size // MB}MB limit for {route.slug}",
            )

    tickets = []
    for f in req.files:
        name = _normalize_filename(f.name)
        key = _storage_key(route.kind, name)
        try:
            url = get_signed_put_url(settings.S3_BUCKET_PUBLIC, key, f.type)
        except Exception as e:
            log.error("Could not sign upload for %s: %s", key, e)
            raise HTTPException(status_code=502, detail="Upload service unavailable")
        tickets.append(UploadTicket(key=key, name=name, size=f.size, type=f.type, kind=route.kind, url=url))
    log.info("User %s negotiated %d %s upload(s)", ctx.user.id, len(tickets), route.kind)
    return tickets
