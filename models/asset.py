import uuid
from sqlalchemy import Column, String, BigInteger, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from models.base import Base

ASSET_KINDS = ("MODEL", "SCRIPT", "CONFIG", "PREVIEW")


class Asset(Base):
    __tablename__ = "assets"

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(String(64), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    kind = Column(String(16), nullable=False)
    file_key = Column(String(255), nullable=False)
    file_name = Column(String(255), nullable=False)
    mime = Column(String(128), nullable=False)
    size_bytes = Column(BigInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    project = relationship("Project", back_populates="assets")

Index("idx_assets_project_id", Asset.project_id)
