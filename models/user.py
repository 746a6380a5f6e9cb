import uuid
from sqlalchemy import Column, String
from models.base import Base, TimestampMixin

USER_ROLES = ("USER", "MODERATOR", "ADMIN")


class User(Base, TimestampMixin):
    __tablename__ = "user"

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    image = Column(String(512), nullable=True)
    role = Column(String(16), nullable=False, default="USER")

    @property
    def is_admin(self) -> bool:
        return self.role == "ADMIN"
