import logging

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from sqlalchemy.orm import Session

from core.config import settings
from core.database import get_db
from core.rate_limit import SlidingWindowRateLimiter, client_ip, get_rate_limiter
from core.responses import error_response, success_response, validation_details
from crud.analytics_crud import record_event, update_aggregates
from schemas.analytics_schema import AnalyticsEventIn

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])


@router.post("/track")
async def track(
    request: Request,
    db: Session = Depends(get_db),
    limiter: SlidingWindowRateLimiter = Depends(get_rate_limiter),
):
    ip = client_ip(request)
    verdict = limiter.check(
        ip, "analytics", settings.ANALYTICS_RATE_LIMIT, settings.ANALYTICS_RATE_WINDOW_SECONDS,
    )
    if not verdict.allowed:
        return error_response("Rate limit exceeded", 429)

    try:
        event = AnalyticsEventIn.model_validate(await request.json())
    except ValidationError as e:
        return error_response("Invalid analytics data", 400, details=validation_details(e.errors()))
    except ValueError:
        return error_response("Invalid analytics data", 400)

    try:
        await run_in_threadpool(
            record_event, db, event, ip=ip, user_agent=request.headers.get("user-agent", ""),
        )
    except Exception:
        db.rollback()
        log.exception("Analytics tracking error")
        return error_response("Failed to track event", 500)

    # Aggregates are advisory; the raw row above is what counts
    await run_in_threadpool(update_aggregates, db, event)
    return success_response()
