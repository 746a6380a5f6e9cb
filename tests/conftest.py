import os
import uuid
from datetime import datetime, timedelta, timezone

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.database import Base, enable_sqlite_foreign_keys, get_db
from core.rate_limit import SlidingWindowRateLimiter, get_rate_limiter
from main import app
from models.asset import Asset
from models.download import Download
from models.project import Project
from models.session import Session as SessionModel
from models.user import User
from crud.tag_crud import attach_tags


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    enable_sqlite_foreign_keys(eng)
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def limiter():
    return SlidingWindowRateLimiter()


@pytest.fixture
def client(engine, limiter):
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)

    def _get_db():
        s = TestingSession()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_user(db, role="USER", email=None):
    u = User(email=email or f"{uuid.uuid4().hex[:8]}@example.com", name="Tester", role=role)
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


def make_token(db, user, expires_in=timedelta(hours=1)):
    token = uuid.uuid4().hex
    db.add(SessionModel(user_id=user.id, token=token, expires_at=datetime.now(timezone.utc) + expires_in))
    db.commit()
    return token


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def make_project(db, owner, title="Sample project", description="A sample AR project", tags=(),
                 visibility="PUBLIC", category=None, created_at=None, downloads=0, assets=()):
    p = Project(owner_id=owner.id, title=title, description=description,
                visibility=visibility, category=category)
    if created_at is not None:
        p.created_at = created_at
    db.add(p)
    db.flush()
    if tags:
        attach_tags(db, p.id, list(tags))
    for _ in range(downloads):
        db.add(Download(project_id=p.id))
    for a in assets:
        db.add(Asset(project_id=p.id, **a))
    db.commit()
    db.refresh(p)
    return p


@pytest.fixture
def owner(db):
    return make_user(db)


@pytest.fixture
def owner_token(db, owner):
    return make_token(db, owner)
