import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from core.config import settings
from core.database import Base, engine
from core.logging_setup import configure_logging
from core.responses import error_response, validation_details
from routers import (
    analytics_router, events_router, image_router, project_router, search_router, stats_router, upload_router,
)
from models import user, session, project, asset, tag, download, analytics  # noqa: F401

configure_logging()
log = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)

app = FastAPI(title="AR Hub API")

# Respect X-Forwarded-Proto/Host when behind a proxy (Docker/nginx/etc.)
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analytics_router.router)
app.include_router(search_router.router)
app.include_router(project_router.router)
app.include_router(upload_router.router)
app.include_router(stats_router.router)
app.include_router(events_router.router)
app.include_router(image_router.router)

VALIDATION_MESSAGES = {
    "/api/search": "Invalid search parameters",
    "/api/analytics/track": "Invalid analytics data",
}


@app.exception_handler(RequestValidationError)
async def on_validation_error(request: Request, exc: RequestValidationError):
    message = VALIDATION_MESSAGES.get(request.url.path, "Invalid request")
    return error_response(message, 400, details=validation_details(exc.errors()))


@app.exception_handler(Exception)
async def on_unhandled_error(request: Request, exc: Exception):
    log.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response("Internal server error", 500)


@app.get("/")
def root():
    return {"message": "AR Hub API ready"}
