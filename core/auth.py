from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from core.config import settings
from core.database import get_db
from core.rate_limit import client_ip
from crud.session_crud import get_session_by_token
from crud.user_crud import get_user
from models.user import User


@dataclass
class RequestContext:
    """Per-request caller identity, resolved once from token or cookie."""

    user: Optional[User] = None
    ip: str = "unknown"
    user_agent: str = ""

    @property
    def role(self) -> Optional[str]:
        return self.user.role if self.user is not None else None

    @property
    def is_admin(self) -> bool:
        return self.role == "ADMIN"

    def can_manage(self, project) -> bool:
        return self.user is not None and (project.owner_id == self.user.id or self.is_admin)


def _extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def _resolve_user(db: Session, token: Optional[str]):
    if not token:
        return None
    s = get_session_by_token(db, token)
    if not s or s.expires_at is None:
        return None
    exp = s.expires_at
    if exp.tzinfo is None:
        exp = exp.replace(tzinfo=timezone.utc)
    if exp < datetime.now(timezone.utc):
        return None
    return get_user(db, s.user_id)


def get_request_context(request: Request, db: Session = Depends(get_db)) -> RequestContext:
    token = _extract_bearer_token(request.headers.get("authorization"))
    if token is None:
        token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    return RequestContext(
        user=_resolve_user(db, token),
        ip=client_ip(request),
        user_agent=request.headers.get("user-agent", ""),
    )


def require_user(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
    if ctx.user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return ctx
