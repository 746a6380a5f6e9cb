import uuid
from sqlalchemy import Column, String, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from models.base import Base, TimestampMixin

VISIBILITIES = ("PUBLIC", "UNLISTED", "PRIVATE")


class Project(Base, TimestampMixin):
    __tablename__ = "projects"

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String(64), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(120), nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String(64), nullable=True)
    visibility = Column(String(16), nullable=False, default="PUBLIC")

    owner = relationship("User", lazy="joined")
    assets = relationship(
        "Asset", back_populates="project", cascade="all", passive_deletes=True,
        order_by="Asset.created_at",
    )
    tags = relationship(
        "ProjectTag", back_populates="project", cascade="all", passive_deletes=True,
    )
    downloads = relationship(
        "Download", back_populates="project", cascade="all", passive_deletes=True,
    )

    def readable_by(self, user) -> bool:
        if self.visibility != "PRIVATE":
            return True
        return user is not None and (user.id == self.owner_id or user.is_admin)

Index("idx_projects_owner_created_at", Project.owner_id, Project.created_at.desc())
Index("idx_projects_visibility_created_at", Project.visibility, Project.created_at.desc())
