"""Tasks model for the users of the Taskboard system."""

import uuid

from sqlalchemy import Boolean, Column, DateTime, Enum as SQLEnum, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from taskboard.constants.constants import Category, Priority, TaskStatus
from taskboard.models.base import Base, TimestampMixin


class Task(Base, TimestampMixin):
    """Model representing a personal task owned by exactly one user."""

    __tablename__ = "tasks"
    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(SQLEnum(Priority), default=Priority.MEDIUM, nullable=False)
    category = Column(SQLEnum(Category), default=Category.PERSONAL, nullable=False)
    status = Column(SQLEnum(TaskStatus), default=TaskStatus.TODO, nullable=False)
    # Derived from status on every write
    completed = Column(Boolean, default=False, nullable=False)
    due_date = Column(DateTime, nullable=True)
    user = relationship("User", back_populates="tasks")
