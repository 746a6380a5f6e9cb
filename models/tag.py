import uuid
from sqlalchemy import Column, String, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from models.base import Base


class Tag(Base):
    __tablename__ = "tags"

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    slug = Column(String(64), unique=True, nullable=False, index=True)
    name = Column(String(64), nullable=False)


class ProjectTag(Base):
    __tablename__ = "project_tags"
    __table_args__ = (UniqueConstraint("project_id", "tag_id", name="uq_project_tags_pair"),)

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(String(64), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    tag_id = Column(String(64), ForeignKey("tags.id", ondelete="CASCADE"), nullable=False)

    project = relationship("Project", back_populates="tags")
    tag = relationship("Tag", lazy="joined")

Index("idx_project_tags_tag_id", ProjectTag.tag_id)
