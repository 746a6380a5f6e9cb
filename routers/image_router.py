import logging
from urllib.parse import urlparse

import requests
from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse, Response

from core.config import settings

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/image-optimization", tags=["Images"])

IMAGE_CACHE_CONTROL = "public, max-age=31536000, immutable"


def fetch_image(url: str) -> requests.Response:
    return requests.get(
        url,
        headers={"User-Agent": settings.IMAGE_PROXY_USER_AGENT},
        timeout=settings.IMAGE_PROXY_TIMEOUT_SECONDS,
    )


def get_image_fetcher():
    return fetch_image


def _valid_image_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


@router.get("")
def optimize(
    url: str | None = Query(None),
    w: int = Query(800, ge=1, le=4096),
    q: int = Query(75, ge=1, le=100),
    fetch=Depends(get_image_fetcher),
):
    """Proxy a remote image with long-lived cache headers.

    ``w`` and ``q`` are validated but the bytes are passed through as-is;
    resizing is left to the CDN in front of this service.
    """
    if not url:
        return PlainTextResponse("Missing image URL", status_code=400)
    if not _valid_image_url(url):
        return PlainTextResponse("Invalid image URL", status_code=400)

    try:
        r = fetch(url)
    except requests.RequestException:
        log.exception("Image fetch failed for %s", url)
        return PlainTextResponse("Internal server error", status_code=500)
    if not r.ok:
        log.warning("Image fetch for %s returned %s", url, r.status_code)
        return PlainTextResponse("Failed to fetch image", status_code=404)

    return Response(
        content=r.content,
        media_type=r.headers.get("content-type") or "image/jpeg",
        headers={"Cache-Control": IMAGE_CACHE_CONTROL},
    )
