from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from core.auth import RequestContext, get_request_context
from core.config import settings
from core.event_hub import EventHub, get_event_hub


router = APIRouter(prefix="/api/events", tags=["Events"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Cache-Control",
}


@router.get("")
def subscribe(
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
    hub: EventHub = Depends(get_event_hub),
):
    # Only EventSource clients get a stream
    if "text/event-stream" not in request.headers.get("accept", ""):
        raise HTTPException(status_code=404, detail="Not found")
    if ctx.user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return StreamingResponse(
        hub.stream(ctx.user.id, settings.EVENTS_HEARTBEAT_SECONDS, request.is_disconnected),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
