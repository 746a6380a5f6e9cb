import uuid
from sqlalchemy import (
    Column, String, Integer, BigInteger, Boolean, DateTime, JSON, Text, UniqueConstraint, Index,
)
from sqlalchemy.sql import func
from models.base import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class AnalyticsEvent(Base):
    __tablename__ = "analytics_events"

    id = Column(String(64), primary_key=True, default=_uuid)
    name = Column(String(100), nullable=False)
    properties = Column(JSON, nullable=False, default=dict)
    session_id = Column(String(255), nullable=False, default="unknown")
    user_id = Column(String(64), nullable=True)
    url = Column(String(2048), nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    ip_address = Column(String(128), nullable=True)
    user_agent = Column(String(512), nullable=True)

Index("idx_analytics_events_name_timestamp", AnalyticsEvent.name, AnalyticsEvent.timestamp)


class PageView(Base):
    __tablename__ = "page_views"

    id = Column(Integer, primary_key=True, autoincrement=True)
    path = Column(String(512), unique=True, nullable=False)
    count = Column(BigInteger, nullable=False, default=0)


class ProjectInteraction(Base):
    __tablename__ = "project_interactions"
    __table_args__ = (UniqueConstraint("project_id", "action", name="uq_project_interactions_pair"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(String(64), nullable=False)
    action = Column(String(64), nullable=False)
    count = Column(BigInteger, nullable=False, default=0)


class SearchQuery(Base):
    __tablename__ = "search_queries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    query = Column(String(255), nullable=False)
    results_count = Column(Integer, nullable=False, default=0)
    timestamp = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class UploadStats(Base):
    __tablename__ = "upload_stats"

    id = Column(Integer, primary_key=True, autoincrement=True)
    file_name = Column(String(255), nullable=False)
    file_size = Column(BigInteger, nullable=False, default=0)
    file_type = Column(String(128), nullable=False, default="unknown")
    success = Column(Boolean, nullable=False, default=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class ErrorLog(Base):
    __tablename__ = "error_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    error = Column(String(500), nullable=False)
    context = Column(Text, nullable=False)
    url = Column(String(2048), nullable=True)
    user_agent = Column(String(512), nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
