"""User model for the Taskboard system."""

import uuid

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from taskboard.models.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    """Account owning tasks. Managed by the account flow, read-only here."""

    __tablename__ = "users"
    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)

    tasks = relationship("Task", back_populates="user", cascade="all, delete-orphan")

    @property
    def display_name(self) -> str:
        return self.name or self.email.split("@")[0]
